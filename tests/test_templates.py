"""Tests for the Jinja2 TemplateRenderer (stream_appgen.templates)."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from stream_appgen.templates import TemplateRenderer, pascal_case


pytestmark = pytest.mark.unit


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    (root / "static" / "nested").mkdir(parents=True)
    (root / "hello.txt.j2").write_text("Hello {{ name }}!\n", encoding="utf-8")
    (root / "plain.txt.j2").write_text("{{ missing }}", encoding="utf-8")
    (root / "escape.xml.j2").write_text("<v>{{ value | xml_escape }}</v>", encoding="utf-8")
    (root / "escape.properties.j2").write_text("k={{ value | properties_escape }}\n", encoding="utf-8")
    (root / "static" / "top.txt").write_text("top", encoding="utf-8")
    (root / "static" / "nested" / "inner.txt").write_text("inner", encoding="utf-8")
    return root


class TestRender:
    def test_render(self, template_dir):
        renderer = TemplateRenderer(template_dir)
        assert renderer.render("hello.txt.j2", {"name": "log-sink"}) == "Hello log-sink!\n"

    def test_undefined_variable_raises(self, template_dir):
        renderer = TemplateRenderer(template_dir)
        with pytest.raises(UndefinedError):
            renderer.render("plain.txt.j2", {})

    def test_missing_template(self, template_dir):
        renderer = TemplateRenderer(template_dir)
        with pytest.raises(TemplateNotFound):
            renderer.render("nope.j2", {})

    def test_xml_escape(self, template_dir):
        renderer = TemplateRenderer(template_dir)
        assert renderer.render("escape.xml.j2", {"value": 'a<b>&"c"'}) == (
            "<v>a&lt;b&gt;&amp;&quot;c&quot;</v>"
        )

    def test_properties_escape(self, template_dir):
        renderer = TemplateRenderer(template_dir)
        assert renderer.render("escape.properties.j2", {"value": " a=b\\c"}) == "k=\\ a\\=b\\\\c\n"

    def test_render_to_file_creates_parents(self, template_dir, tmp_path):
        renderer = TemplateRenderer(template_dir)
        out = renderer.render_to_file("hello.txt.j2", tmp_path / "a" / "b" / "hello.txt", {"name": "x"})
        assert out.read_bytes() == b"Hello x!\n"


class TestCopyStatic:
    def test_copies_tree(self, template_dir, tmp_path):
        renderer = TemplateRenderer(template_dir)
        out = tmp_path / "out"
        written = renderer.copy_static(out)
        assert [p.relative_to(out).as_posix() for p in written] == [
            "nested/inner.txt",
            "top.txt",
        ]
        assert (out / "nested" / "inner.txt").read_text() == "inner"

    def test_no_static_dir(self, tmp_path):
        renderer = TemplateRenderer(tmp_path)
        assert renderer.copy_static(tmp_path / "out") == []


class TestBundledTemplates:
    def test_bundled_templates_present(self):
        renderer = TemplateRenderer()
        templates = renderer.env.list_templates(extensions=["j2"])
        for name in (
            "Application.java.j2",
            "ApplicationTests.java.j2",
            "README.md.j2",
            "application.properties.j2",
            "pom.xml.j2",
            "whitelist.properties.j2",
        ):
            assert name in templates


class TestPascalCase:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("rabbit", "Rabbit"),
            ("kafka-streams", "KafkaStreams"),
            ("some_thing else", "SomeThingElse"),
            ("", ""),
        ],
    )
    def test_pascal_case(self, value, expected):
        assert pascal_case(value) == expected
