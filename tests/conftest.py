"""Shared pytest fixtures for the stream-appgen test suite.

Provides reusable fixtures for:
- Source project resources directories with a metadata whitelist file
- Sample application definitions and generation requests
- Snapshotting generated output trees
- An environment without STREAM_APPGEN_* variables
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable
from unittest.mock import patch

import pytest

from stream_appgen.models import AppDefinition, AppType, DependencyRecord, PluginRecord
from stream_appgen.request import GenerationRequest
from stream_appgen.whitelist import WHITELIST_DIR, WHITELIST_FILE_NAME


# ---------------------------------------------------------------------------
# Resources directories
# ---------------------------------------------------------------------------

@pytest.fixture
def resources_dir(tmp_path: Path) -> Path:
    """An existing, empty ``src/main/resources`` directory."""
    path = tmp_path / "src" / "main" / "resources"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_whitelist(resources_dir: Path) -> Callable[[str], Path]:
    """Write ``META-INF/<whitelist>`` with the given text and return its path."""

    def _write(text: str) -> Path:
        meta_inf = resources_dir / WHITELIST_DIR
        meta_inf.mkdir(exist_ok=True)
        path = meta_inf / WHITELIST_FILE_NAME
        path.write_text(text, encoding="latin-1")
        return path

    return _write


# ---------------------------------------------------------------------------
# Application definitions & requests
# ---------------------------------------------------------------------------

@pytest.fixture
def log_sink() -> AppDefinition:
    """The minimal ``log-sink`` application."""
    return AppDefinition(
        name="log-sink",
        version="1.0.0",
        type=AppType.SINK,
        function_class="com.example.LogSink",
    )


@pytest.fixture
def rich_app() -> AppDefinition:
    """An application using every field of the definition."""
    return AppDefinition(
        name="http-source",
        version="2.1.0",
        type=AppType.SOURCE,
        function_class="org.example.http.HttpSourceConfiguration",
        additional_properties=[
            "server.port=8080",
            "spring.cloud.stream.bindings.output.destination=http",
        ],
        metadata_source_type_filters=["org.example.http.HttpSourceProperties"],
        metadata_name_filters=["server.port"],
        maven_managed_dependencies=[
            DependencyRecord(
                group_id="org.example.bom",
                artifact_id="example-dependencies",
                version="1.2.3",
                scope="compile",
                type="jar",
            ),
        ],
        maven_dependencies=[
            DependencyRecord(
                group_id="org.example",
                artifact_id="http-function",
                version="2.1.0",
            ),
        ],
        maven_plugins=[
            PluginRecord(
                group_id="org.example.plugins",
                artifact_id="docs-maven-plugin",
                version="0.9.0",
            ),
        ],
    )


@pytest.fixture
def make_request(tmp_path: Path, log_sink: AppDefinition) -> Callable[..., GenerationRequest]:
    """Factory building a ``GenerationRequest`` rooted in ``tmp_path/apps``."""

    def _make(**overrides: Any) -> GenerationRequest:
        fields: dict[str, Any] = {
            "app_definition": log_sink,
            "output_folder": tmp_path / "apps",
            "binders": ["rabbit", "kafka"],
        }
        fields.update(overrides)
        return GenerationRequest(**fields)

    return _make


# ---------------------------------------------------------------------------
# Output inspection
# ---------------------------------------------------------------------------

def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Map every file under *root* (relative posix path) to its bytes."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def snapshot() -> Callable[[Path], dict[str, bytes]]:
    return snapshot_tree


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

@pytest.fixture
def clean_env():
    """Run with every ``STREAM_APPGEN_*`` variable removed."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("STREAM_APPGEN_")}
    with patch.dict(os.environ, env, clear=True):
        yield
