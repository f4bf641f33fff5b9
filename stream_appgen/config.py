"""stream-appgen configuration.

Defaults for every caller-level generation parameter, held in a Pydantic v2
model so they are validated at construction time and can be serialised to or
from JSON and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from .models import (
    DEFAULT_APP_METADATA_PLUGIN_VERSION,
    DEFAULT_BOOT_VERSION,
    ContainerImageFormat,
    VersionCatalog,
)

_TRUTHY = {"1", "true", "yes", "on"}


class GeneratorConfig(BaseModel):
    """Run-wide generation settings.

    Created once by the CLI (or by a test) and handed to
    :func:`stream_appgen.request.assemble_request`; nothing reads it after
    the request has been built.
    """

    output_dir: Path = Field(default=Path("./apps"))
    boot_version: str = Field(default=DEFAULT_BOOT_VERSION, min_length=1)
    app_metadata_plugin_version: str = Field(
        default=DEFAULT_APP_METADATA_PLUGIN_VERSION, min_length=1
    )
    container_image_format: ContainerImageFormat = Field(default=ContainerImageFormat.DOCKER)
    container_image_org_name: Optional[str] = Field(default="springcloudstream")
    enable_container_image_metadata: bool = Field(default=False)
    binders: list[str] = Field(
        default_factory=list,
        description="Default binders when the app description names none",
    )

    def version_catalog(self) -> VersionCatalog:
        return VersionCatalog(
            boot_version=self.boot_version,
            app_metadata_plugin_version=self.app_metadata_plugin_version,
        )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            STREAM_APPGEN_OUTPUT_DIR, STREAM_APPGEN_BOOT_VERSION,
            STREAM_APPGEN_METADATA_PLUGIN_VERSION, STREAM_APPGEN_IMAGE_FORMAT,
            STREAM_APPGEN_IMAGE_ORG, STREAM_APPGEN_ENABLE_IMAGE_METADATA,
            STREAM_APPGEN_BINDERS (comma-separated).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("STREAM_APPGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["STREAM_APPGEN_OUTPUT_DIR"])
        if os.environ.get("STREAM_APPGEN_BOOT_VERSION"):
            kwargs["boot_version"] = os.environ["STREAM_APPGEN_BOOT_VERSION"]
        if os.environ.get("STREAM_APPGEN_METADATA_PLUGIN_VERSION"):
            kwargs["app_metadata_plugin_version"] = os.environ[
                "STREAM_APPGEN_METADATA_PLUGIN_VERSION"
            ]
        if os.environ.get("STREAM_APPGEN_IMAGE_FORMAT"):
            kwargs["container_image_format"] = os.environ["STREAM_APPGEN_IMAGE_FORMAT"]
        if "STREAM_APPGEN_IMAGE_ORG" in os.environ:
            kwargs["container_image_org_name"] = os.environ["STREAM_APPGEN_IMAGE_ORG"] or None
        if os.environ.get("STREAM_APPGEN_ENABLE_IMAGE_METADATA"):
            kwargs["enable_container_image_metadata"] = (
                os.environ["STREAM_APPGEN_ENABLE_IMAGE_METADATA"].strip().lower() in _TRUTHY
            )

        binders_str = os.environ.get("STREAM_APPGEN_BINDERS", "")
        kwargs["binders"] = [b.strip() for b in binders_str.split(",") if b.strip()]

        return cls(**kwargs)
