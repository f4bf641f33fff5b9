"""Jinja2 template rendering for generated application projects.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``stream_appgen/templates/`` directory and renders them with the per-binder
context built by the generator.  Files under ``templates/static/`` are copied
verbatim.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .whitelist import escape_property_value


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
STATIC_PREFIX = "static"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project generation.

    Undefined variables raise instead of rendering as empty strings, so a
    template/context mismatch surfaces as a generation failure.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["properties_escape"] = escape_property_value
        self.env.filters["xml_escape"] = _xml_escape_filter

    # -- Rendering ---------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template (path relative to the template root)."""
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        _write_file(out, content)
        return out

    def copy_static(self, output_dir: str | Path) -> list[Path]:
        """Copy every file under ``templates/static/`` into *output_dir*.

        The relative layout is preserved and files are visited in sorted
        order.
        """
        static_root = self.template_dir / STATIC_PREFIX
        if not static_root.is_dir():
            return []

        written: list[Path] = []
        out_base = Path(output_dir)
        for source in sorted(static_root.rglob("*")):
            if not source.is_file():
                continue
            target = out_base / source.relative_to(static_root)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            written.append(target)
        return written


# ---------------------------------------------------------------------------
# Naming helpers and Jinja2 filters
# ---------------------------------------------------------------------------

def pascal_case(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word[:1].upper() + word[1:] for word in parts if word)


def _xml_escape_filter(value: Any) -> str:
    text = str(value)
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Create parent dirs and write content with ``\\n`` line endings."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as fh:
        fh.write(content)
