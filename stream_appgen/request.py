"""Generation request: everything one generator run needs.

:func:`assemble_request` is the single place where caller parameters are
turned into immutable models.  It runs the whitelist reconciliation before
the :class:`~stream_appgen.models.AppDefinition` is frozen, so the generator
never touches the source project's resources.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import GeneratorConfig
from .models import AppDefinition, AppType, DependencyRecord, PluginRecord, VersionCatalog
from .whitelist import WhitelistStatus, populate_filters

logger = logging.getLogger(__name__)

_UNSET = object()


class GenerationRequest(BaseModel):
    """Input of :meth:`ProjectGenerator.generate`."""

    model_config = ConfigDict(frozen=True)

    app_bom: VersionCatalog = Field(default_factory=VersionCatalog)
    app_definition: AppDefinition
    output_folder: Path = Field(default=Path("./target/output"))
    binders: tuple[str, ...] = Field(..., min_length=1)
    project_resources_directory: Optional[Path] = None
    global_dependencies: tuple[DependencyRecord, ...] = Field(
        default=(),
        description="Appended after the app's own dependencies, never deduplicated",
    )

    @field_validator("binders")
    @classmethod
    def _normalize_binders(cls, binders: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = [b.strip() for b in binders]
        if any(not b for b in cleaned):
            raise ValueError("binder names must not be blank")
        if any("/" in b or "\\" in b or b in (".", "..") for b in cleaned):
            raise ValueError("binder names must be plain directory names")
        return tuple(dict.fromkeys(cleaned))

    @property
    def merged_dependencies(self) -> list[DependencyRecord]:
        """App dependencies followed by global dependencies, duplicates kept."""
        return [*self.app_definition.maven_dependencies, *self.global_dependencies]


def assemble_request(
    config: GeneratorConfig,
    *,
    name: str,
    version: str,
    app_type: AppType | str,
    function_class: str,
    binders: Iterable[str],
    additional_properties: Iterable[str] = (),
    metadata_source_type_filters: Iterable[str] = (),
    metadata_name_filters: Iterable[str] = (),
    boms: Iterable[DependencyRecord] = (),
    dependencies: Iterable[DependencyRecord] = (),
    global_dependencies: Iterable[DependencyRecord] = (),
    plugins: Iterable[PluginRecord] = (),
    container_image_org_name: Optional[str] | object = _UNSET,
    container_image_tag: Optional[str] = None,
    resources_dir: str | Path | None = None,
) -> GenerationRequest:
    """Build a validated :class:`GenerationRequest`.

    Metadata filters from the project's whitelist file under *resources_dir*
    are merged into the caller's filters first.  Whitelist problems are
    logged and otherwise ignored.

    Raises:
        pydantic.ValidationError: If a mandatory field is missing or blank,
            or *binders* is empty.
    """
    source_type_filters = list(metadata_source_type_filters)
    name_filters = list(metadata_name_filters)
    result = populate_filters(source_type_filters, name_filters, resources_dir)
    if result.status is WhitelistStatus.ERROR:
        logger.warning("Ignoring unreadable metadata whitelist %s: %s", result.path, result.error)
    elif result.loaded:
        logger.debug(
            "Merged metadata whitelist %s (%d classes, %d names)",
            result.path, len(result.classes), len(result.names),
        )
    else:
        logger.debug("No metadata whitelist found (%s)", result.status.value)

    org_name = (
        config.container_image_org_name
        if container_image_org_name is _UNSET
        else container_image_org_name
    )

    app = AppDefinition(
        name=name,
        version=version,
        type=app_type,
        function_class=function_class,
        additional_properties=list(additional_properties),
        metadata_source_type_filters=source_type_filters,
        metadata_name_filters=name_filters,
        maven_managed_dependencies=[bom.as_bom() for bom in boms if bom is not None],
        maven_dependencies=list(dependencies),
        maven_plugins=list(plugins),
        container_image_format=config.container_image_format,
        container_image_org_name=org_name,
        container_image_tag=container_image_tag,
        enable_container_image_metadata=config.enable_container_image_metadata,
    )

    return GenerationRequest(
        app_bom=config.version_catalog(),
        app_definition=app,
        output_folder=config.output_dir,
        binders=list(binders),
        project_resources_directory=Path(resources_dir) if resources_dir else None,
        global_dependencies=list(global_dependencies),
    )
