"""Integration tests for the assemble-then-generate flow.

These run the public API end-to-end: a source project's resources directory
with a whitelist file, request assembly, and generation of every binder
project.  No Maven or network access is required.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from stream_appgen import (
    DependencyRecord,
    GeneratorConfig,
    PluginRecord,
    ProjectGenerator,
    assemble_request,
)

POM_NS = {"m": "http://maven.apache.org/POM/4.0.0"}


def _generate(tmp_path: Path, resources_dir: Path | None = None) -> list[Path]:
    config = GeneratorConfig(
        output_dir=tmp_path / "apps",
        enable_container_image_metadata=True,
    )
    request = assemble_request(
        config,
        name="log-sink",
        version="1.0.0",
        app_type="sink",
        function_class="com.example.LogSink",
        binders=["rabbit", "kafka"],
        metadata_source_type_filters=["com.example.LogSinkProperties"],
        boms=[DependencyRecord(group_id="org.example", artifact_id="example-bom", version="1.0")],
        dependencies=[DependencyRecord(group_id="org.example", artifact_id="log-function")],
        global_dependencies=[
            DependencyRecord(group_id="org.springframework.boot", artifact_id="spring-boot-starter-actuator"),
        ],
        plugins=[PluginRecord(artifact_id="maven-surefire-plugin", configuration={"skip": "false"})],
        resources_dir=resources_dir,
    )
    return ProjectGenerator().generate(request)


@pytest.mark.integration
class TestLogSinkScenario:
    def test_two_binder_projects(self, tmp_path: Path):
        roots = _generate(tmp_path)
        assert roots == [
            tmp_path / "apps" / "rabbit" / "log-sink",
            tmp_path / "apps" / "kafka" / "log-sink",
        ]

    def test_poms_are_well_formed(self, tmp_path: Path):
        for root in _generate(tmp_path):
            tree = ET.parse(root / "pom.xml")
            project = tree.getroot()
            binder = root.parent.name

            artifact = project.find("m:artifactId", POM_NS).text
            assert artifact == f"log-sink-{binder}"

            tag = project.find("m:properties/m:container.image.tag", POM_NS).text
            assert tag == "1.0.0"

            bom = project.find("m:dependencyManagement/m:dependencies/m:dependency", POM_NS)
            assert bom.find("m:scope", POM_NS).text == "import"
            assert bom.find("m:type", POM_NS).text == "pom"

            deps = [
                d.find("m:artifactId", POM_NS).text
                for d in project.findall("m:dependencies/m:dependency", POM_NS)
            ]
            assert deps == [
                f"spring-cloud-stream-binder-{binder}",
                "log-function",
                "spring-boot-starter-actuator",
                "spring-boot-starter-test",
            ]

    def test_same_entry_point_in_every_project(self, tmp_path: Path):
        imports = set()
        for root in _generate(tmp_path):
            (java,) = (root / "src" / "main" / "java").rglob("*Application.java")
            text = java.read_text()
            imports.add([line for line in text.splitlines() if line.startswith("@Import")][0])
        assert imports == {"@Import(LogSink.class)"}

    def test_whitelist_from_source_project(self, tmp_path: Path, resources_dir: Path, write_whitelist):
        write_whitelist(
            "configuration-properties.classes=com.example.LogSinkProperties,com.example.Extra\n"
            "configuration-properties.names=logging.level.root\n"
        )
        (rabbit, _) = _generate(tmp_path, resources_dir)
        pom = (rabbit / "pom.xml").read_text()

        assert pom.count("<sourceType>com.example.LogSinkProperties</sourceType>") == 1
        assert "<sourceType>com.example.Extra</sourceType>" in pom
        assert "<name>logging.level.root</name>" in pom

    def test_regeneration_is_idempotent(self, tmp_path: Path, snapshot):
        _generate(tmp_path)
        first = snapshot(tmp_path / "apps")
        _generate(tmp_path)
        assert snapshot(tmp_path / "apps") == first
