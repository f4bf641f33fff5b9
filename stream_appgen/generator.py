"""Per-binder project generation.

Takes a :class:`~stream_appgen.request.GenerationRequest` and writes one
self-contained Maven project per binder:

    <output_folder>/<binder>/<app name>/
        pom.xml
        README.md
        .gitignore, .mvn/wrapper/maven-wrapper.properties
        src/main/java/<package>/<App><Binder>Application.java
        src/main/resources/application.properties
        src/main/resources/META-INF/dataflow-configuration-metadata-whitelist.properties
        src/test/java/<package>/<App><Binder>ApplicationTests.java

Regenerating with the same request yields byte-identical trees.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Optional

from jinja2 import TemplateError

from .models import AppDefinition, DependencyRecord, PluginRecord, VersionCatalog
from .request import GenerationRequest
from .templates import TemplateRenderer, pascal_case
from .whitelist import (
    CONFIGURATION_PROPERTIES_CLASSES,
    CONFIGURATION_PROPERTIES_NAMES,
    WHITELIST_DIR,
    WHITELIST_FILE_NAME,
)
from .xml_writer import MavenXmlWriter, XmlFragmentWriter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# pom.xml nesting depths
# ---------------------------------------------------------------------------

BOM_INDENT = 12
DEPENDENCY_INDENT = 8
PLUGIN_INDENT = 12

BINDER_GROUP_ID = "org.springframework.cloud"
METADATA_PLUGIN_GROUP_ID = "org.springframework.cloud"
METADATA_PLUGIN_ARTIFACT_ID = "spring-cloud-app-starter-metadata-maven-plugin"


class GenerationError(Exception):
    """Raised when writing a generated project fails."""

    def __init__(self, binder: str, message: str) -> None:
        self.binder = binder
        super().__init__(f"Project generation failure for binder '{binder}': {message}")


class ProjectGenerator:
    """Generate one Maven project per binder from a :class:`GenerationRequest`.

    The XML writer is injectable so callers can swap in another
    serialization of dependency and plugin records.
    """

    def __init__(
        self,
        renderer: Optional[TemplateRenderer] = None,
        xml_writer: Optional[XmlFragmentWriter] = None,
    ) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.xml_writer = xml_writer or MavenXmlWriter()

    # -- Public API --------------------------------------------------------

    def generate(self, request: GenerationRequest) -> list[Path]:
        """Generate every requested binder project, in binder order.

        Returns:
            The project root of each binder.

        Raises:
            GenerationError: On the first I/O or template failure.  Projects
                already written for earlier binders are left in place.
        """
        shared = self._build_shared_context(request)
        roots: list[Path] = []
        for binder in request.binders:
            root = project_root(request.output_folder, binder, request.app_definition.name)
            _check_inside(root, request.output_folder, binder)
            try:
                self._generate_binder(root, binder, shared)
            except (OSError, TemplateError) as exc:
                raise GenerationError(binder, str(exc)) from exc
            logger.info("Generated %s project at %s", binder, root)
            roots.append(root)
        return roots

    # -- Context building --------------------------------------------------

    def _build_shared_context(self, request: GenerationRequest) -> dict[str, Any]:
        """Binder-independent template variables."""
        app = request.app_definition
        return {
            "app": app,
            "app_bom": request.app_bom,
            "boms": [
                self._fragment(bom.as_bom(), BOM_INDENT)
                for bom in app.maven_managed_dependencies
            ],
            "dependencies": [
                self._fragment(dep, DEPENDENCY_INDENT)
                for dep in request.merged_dependencies
            ],
            "metadata_plugin": self._fragment(
                metadata_plugin(app, request.app_bom), PLUGIN_INDENT
            ),
            "plugins": [
                self._fragment(plugin, PLUGIN_INDENT) for plugin in app.maven_plugins
            ],
            "package_name": app.package_name,
            "whitelist_properties": whitelist_properties(app),
        }

    def _build_binder_context(
        self, binder: str, shared: dict[str, Any]
    ) -> dict[str, Any]:
        app: AppDefinition = shared["app"]
        binder_class = pascal_case(binder)
        artifact_id = f"{app.name}-{binder}"
        return {
            **shared,
            "binder": binder,
            "artifact_id": artifact_id,
            "application_class": f"{app.class_prefix}{binder_class}Application",
            "binder_dependency": self._fragment(binder_dependency(binder), DEPENDENCY_INDENT),
            "container_image": container_image(app, artifact_id),
        }

    def _fragment(self, record: DependencyRecord | PluginRecord, depth: int) -> str:
        return self.xml_writer.indent(self.xml_writer.to_xml(record), depth)

    # -- Rendering ---------------------------------------------------------

    def _generate_binder(
        self,
        root: Path,
        binder: str,
        shared: dict[str, Any],
    ) -> None:
        ctx = self._build_binder_context(binder, shared)

        if root.exists():
            shutil.rmtree(root)
        root.mkdir(parents=True)

        package_dir = Path(*ctx["package_name"].split("."))
        main_java = root / "src" / "main" / "java" / package_dir
        test_java = root / "src" / "test" / "java" / package_dir
        resources = root / "src" / "main" / "resources"

        self.renderer.render_to_file("pom.xml.j2", root / "pom.xml", ctx)
        self.renderer.render_to_file("README.md.j2", root / "README.md", ctx)
        self.renderer.render_to_file(
            "Application.java.j2",
            main_java / f"{ctx['application_class']}.java",
            ctx,
        )
        self.renderer.render_to_file(
            "ApplicationTests.java.j2",
            test_java / f"{ctx['application_class']}Tests.java",
            ctx,
        )
        self.renderer.render_to_file(
            "application.properties.j2", resources / "application.properties", ctx
        )
        if ctx["whitelist_properties"]:
            self.renderer.render_to_file(
                "whitelist.properties.j2",
                resources / WHITELIST_DIR / WHITELIST_FILE_NAME,
                ctx,
            )
        self.renderer.copy_static(root)


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------

def project_root(output_folder: Path, binder: str, app_name: str) -> Path:
    return Path(output_folder) / binder / app_name


def _check_inside(root: Path, output_folder: Path, binder: str) -> None:
    """Refuse a project root that is not strictly below the binder folder."""
    binder_dir = (Path(output_folder) / binder).resolve()
    resolved = root.resolve()
    if resolved == binder_dir or not resolved.is_relative_to(binder_dir):
        raise GenerationError(binder, f"project root {root} escapes {binder_dir}")


def binder_dependency(binder: str) -> DependencyRecord:
    """The Spring Cloud Stream binder starter for *binder*."""
    return DependencyRecord(
        group_id=BINDER_GROUP_ID,
        artifact_id=f"spring-cloud-stream-binder-{binder}",
    )


def metadata_plugin(app: AppDefinition, catalog: VersionCatalog) -> PluginRecord:
    """Metadata plugin entry carrying the app's whitelist filters."""
    metadata_filter: dict[str, Any] = {}
    if app.metadata_name_filters:
        metadata_filter["names"] = list(app.metadata_name_filters)
    if app.metadata_source_type_filters:
        metadata_filter["sourceTypes"] = list(app.metadata_source_type_filters)
    configuration = {"metadataFilter": metadata_filter} if metadata_filter else {}
    return PluginRecord(
        group_id=METADATA_PLUGIN_GROUP_ID,
        artifact_id=METADATA_PLUGIN_ARTIFACT_ID,
        version=catalog.app_metadata_plugin_version,
        configuration=configuration,
    )


def container_image(app: AppDefinition, artifact_id: str) -> Optional[dict[str, str]]:
    """Container image settings, or ``None`` when image metadata is disabled."""
    if not app.enable_container_image_metadata:
        return None
    tag = app.container_image_tag or app.version
    org = app.container_image_org_name or ""
    repository = f"{org}/{artifact_id}" if org else artifact_id
    return {
        "format": app.container_image_format.value,
        "org_name": org,
        "tag": tag,
        "image": f"{repository}:{tag}",
    }


def whitelist_properties(app: AppDefinition) -> dict[str, str]:
    """Reconciled filters as whitelist properties; empty keys are omitted."""
    props: dict[str, str] = {}
    if app.metadata_source_type_filters:
        props[CONFIGURATION_PROPERTIES_CLASSES] = ",".join(app.metadata_source_type_filters)
    if app.metadata_name_filters:
        props[CONFIGURATION_PROPERTIES_NAMES] = ",".join(app.metadata_name_filters)
    return props
