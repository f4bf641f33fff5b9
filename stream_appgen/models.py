"""Pydantic v2 models describing a stream application and its build inputs.

Defines the version catalog shared by every generated project, the Maven
coordinate records (dependencies, exclusions, plugins) and the immutable
application definition consumed by the project generator.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class AppType(str, Enum):
    """Stream application role."""
    SOURCE = "source"
    PROCESSOR = "processor"
    SINK = "sink"


class ContainerImageFormat(str, Enum):
    """Container image format produced by the generated build."""
    DOCKER = "Docker"
    OCI = "OCI"


# ---------------------------------------------------------------------------
# Version catalog
# ---------------------------------------------------------------------------

DEFAULT_BOOT_VERSION = "2.2.4.RELEASE"
DEFAULT_APP_METADATA_PLUGIN_VERSION = "1.0.2.RELEASE"


class VersionCatalog(BaseModel):
    """Version constants stamped into every generated project."""

    model_config = ConfigDict(frozen=True)

    boot_version: str = Field(default=DEFAULT_BOOT_VERSION, min_length=1)
    app_metadata_plugin_version: str = Field(
        default=DEFAULT_APP_METADATA_PLUGIN_VERSION, min_length=1
    )


# ---------------------------------------------------------------------------
# Maven coordinate records
# ---------------------------------------------------------------------------

# Accepts both snake_case and Maven-style camelCase keys (groupId).
_RECORD_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Exclusion(BaseModel):
    """A transitive dependency exclusion."""

    model_config = _RECORD_CONFIG

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)


class DependencyRecord(BaseModel):
    """A Maven ``<dependency>`` entry."""

    model_config = _RECORD_CONFIG

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: Optional[str] = None
    type: Optional[str] = None
    classifier: Optional[str] = None
    scope: Optional[str] = None
    optional: bool = False
    exclusions: tuple[Exclusion, ...] = ()

    def as_bom(self) -> "DependencyRecord":
        """Return a copy usable as a BOM import (scope ``import``, type ``pom``)."""
        return self.model_copy(update={"scope": "import", "type": "pom"})


class PluginRecord(BaseModel):
    """A Maven ``<plugin>`` entry.

    ``configuration`` is a nested mapping rendered as XML elements: string
    values become text nodes, mappings become child elements and lists repeat
    the singular form of their parent key (``includes`` -> ``include``).
    """

    model_config = _RECORD_CONFIG

    group_id: str = Field(default="org.apache.maven.plugins", min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: Optional[str] = None
    extensions: bool = False
    configuration: dict[str, Any] = Field(default_factory=dict)
    dependencies: tuple[DependencyRecord, ...] = ()


# ---------------------------------------------------------------------------
# Application definition
# ---------------------------------------------------------------------------

APP_PACKAGE_PREFIX = "org.springframework.cloud.stream.app"


class AppDefinition(BaseModel):
    """Everything needed to generate one stream application project.

    Instances are immutable: all fields are supplied up front (typically by
    :func:`stream_appgen.request.assemble_request`) and the generator only
    reads them.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Application name, e.g. 'log-sink'")
    version: str = Field(..., description="Version of the generated project")
    type: AppType = Field(..., description="Source, processor or sink")
    function_class: str = Field(
        ..., description="Fully qualified configuration class imported by the app"
    )
    additional_properties: tuple[str, ...] = Field(
        default=(),
        description="Lines appended to application.properties",
    )
    metadata_source_type_filters: tuple[str, ...] = ()
    metadata_name_filters: tuple[str, ...] = ()
    maven_managed_dependencies: tuple[DependencyRecord, ...] = Field(
        default=(), description="BOM imports"
    )
    maven_dependencies: tuple[DependencyRecord, ...] = ()
    maven_plugins: tuple[PluginRecord, ...] = ()
    container_image_format: ContainerImageFormat = ContainerImageFormat.DOCKER
    container_image_org_name: Optional[str] = None
    container_image_tag: Optional[str] = None
    enable_container_image_metadata: bool = False

    @field_validator("name", "version", "function_class")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("name")
    @classmethod
    def _plain_directory_name(cls, value: str) -> str:
        # used as a path segment under output_folder/<binder>/
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError("must be a plain directory name")
        return value

    @field_validator("metadata_source_type_filters", "metadata_name_filters")
    @classmethod
    def _dedupe(cls, values: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(values))

    @field_validator("container_image_org_name", "container_image_tag")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @model_validator(mode="after")
    def _default_image_tag(self) -> "AppDefinition":
        if self.container_image_tag is None:
            # frozen model, so assign through object.__setattr__
            object.__setattr__(self, "container_image_tag", self.version)
        return self

    # -- Derived names -----------------------------------------------------

    @property
    def package_name(self) -> str:
        """Java package of the generated application class."""
        suffix = re.sub(r"[^a-z0-9]+", ".", self.name.lower()).strip(".")
        return f"{APP_PACKAGE_PREFIX}.{suffix}" if suffix else APP_PACKAGE_PREFIX

    @property
    def class_prefix(self) -> str:
        """``log-sink`` -> ``LogSink``."""
        parts = re.split(r"[^A-Za-z0-9]+", self.name)
        return "".join(p[:1].upper() + p[1:] for p in parts if p)

    @property
    def function_class_simple_name(self) -> str:
        return self.function_class.rsplit(".", 1)[-1]
