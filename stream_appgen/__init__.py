"""stream-appgen -- generates per-binder Spring Cloud Stream app projects.

One application description plus a version catalog becomes one buildable
Maven project for each requested binder, with metadata whitelist filters
merged from the source project's ``META-INF`` resources.

Quick usage::

    from stream_appgen import GeneratorConfig, ProjectGenerator, assemble_request

    request = assemble_request(
        GeneratorConfig(output_dir="./apps"),
        name="log-sink",
        version="1.0.0",
        app_type="sink",
        function_class="com.example.LogSink",
        binders=["rabbit", "kafka"],
        resources_dir="src/main/resources",
    )
    ProjectGenerator().generate(request)
"""

from stream_appgen.config import GeneratorConfig
from stream_appgen.generator import GenerationError, ProjectGenerator
from stream_appgen.models import (
    AppDefinition,
    AppType,
    ContainerImageFormat,
    DependencyRecord,
    Exclusion,
    PluginRecord,
    VersionCatalog,
)
from stream_appgen.request import GenerationRequest, assemble_request
from stream_appgen.templates import TemplateRenderer
from stream_appgen.whitelist import WhitelistResult, WhitelistStatus, populate_filters
from stream_appgen.xml_writer import MavenXmlWriter

__all__ = [
    "AppDefinition",
    "AppType",
    "ContainerImageFormat",
    "DependencyRecord",
    "Exclusion",
    "GenerationError",
    "GenerationRequest",
    "GeneratorConfig",
    "MavenXmlWriter",
    "PluginRecord",
    "ProjectGenerator",
    "TemplateRenderer",
    "VersionCatalog",
    "WhitelistResult",
    "WhitelistStatus",
    "assemble_request",
    "populate_filters",
]
