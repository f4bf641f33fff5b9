"""Command-line entry point.

Reads an application description JSON file, assembles a generation request
and writes one project per binder.

Usage::

    stream-appgen log-sink.json --binders rabbit,kafka -o ./apps
    python -m stream_appgen.cli log-sink.json --resources src/main/resources
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .config import GeneratorConfig
from .generator import GenerationError, ProjectGenerator, project_root
from .models import DependencyRecord, PluginRecord
from .request import assemble_request
from .utils import (
    configure_logging,
    load_json,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)


def _build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="stream-appgen",
        description="Generate one Spring Cloud Stream application project per binder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  stream-appgen log-sink.json --binders rabbit,kafka\n"
            "  stream-appgen log-sink.json -o ./apps --enable-image-metadata\n"
        ),
    )
    parser.add_argument("app", help="Path to the application description JSON file")
    parser.add_argument("--output", "-o", default=None, help="Output root (default: ./apps)")
    parser.add_argument("--binders", default=None, help="Comma-separated binder names")
    parser.add_argument(
        "--resources",
        default=None,
        help="Source project resources directory holding META-INF/ whitelist",
    )
    parser.add_argument("--boot-version", default=None)
    parser.add_argument("--metadata-plugin-version", default=None)
    parser.add_argument("--image-format", choices=["Docker", "OCI"], default=None)
    parser.add_argument("--image-org", default=None, help="Container image organization")
    parser.add_argument("--image-tag", default=None, help="Defaults to the app version")
    parser.add_argument(
        "--enable-image-metadata",
        action="store_true",
        help="Add container image settings to the generated pom.xml",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def _apply_overrides(config: GeneratorConfig, args: Any) -> GeneratorConfig:
    updates: dict[str, Any] = {}
    if args.output:
        updates["output_dir"] = Path(args.output)
    if args.boot_version:
        updates["boot_version"] = args.boot_version
    if args.metadata_plugin_version:
        updates["app_metadata_plugin_version"] = args.metadata_plugin_version
    if args.image_format:
        updates["container_image_format"] = args.image_format
    if args.image_org is not None:
        updates["container_image_org_name"] = args.image_org or None
    if args.enable_image_metadata:
        updates["enable_container_image_metadata"] = True
    if not updates:
        return config
    # model_copy skips validation; round-trip through model_validate instead
    return GeneratorConfig.model_validate({**config.model_dump(), **updates})


def _list_field(app: dict[str, Any], key: str) -> list[Any]:
    """A list-valued description field; absent or null means empty."""
    value = app.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a JSON list, got {type(value).__name__}")
    return value


def _records(app: dict[str, Any], key: str, model: type) -> list[Any]:
    return [model.model_validate(item) for item in _list_field(app, key)]


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``stream-appgen``."""
    args = _build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = _apply_overrides(GeneratorConfig.from_env(), args)
        app = load_json(args.app)

        if args.binders:
            binders = [b for b in args.binders.split(",") if b.strip()]
        else:
            binders = _list_field(app, "binders") or config.binders

        request = assemble_request(
            config,
            name=app.get("name", ""),
            version=app.get("version", ""),
            app_type=app.get("type", ""),
            function_class=app.get("function_class", ""),
            binders=binders,
            additional_properties=_list_field(app, "additional_properties"),
            metadata_source_type_filters=_list_field(app, "metadata_source_type_filters"),
            metadata_name_filters=_list_field(app, "metadata_name_filters"),
            boms=_records(app, "boms", DependencyRecord),
            dependencies=_records(app, "dependencies", DependencyRecord),
            global_dependencies=_records(app, "global_dependencies", DependencyRecord),
            plugins=_records(app, "plugins", PluginRecord),
            container_image_tag=args.image_tag or app.get("container_image_tag"),
            resources_dir=args.resources,
        )
    except FileNotFoundError as exc:
        print_error(f"Error: file not found: {exc.filename}")
        sys.exit(1)
    except json.JSONDecodeError as exc:
        print_error(f"Error: invalid JSON in {args.app}: {exc}")
        sys.exit(1)
    except ValidationError as exc:
        print_error(f"Error: invalid application description:\n{exc}")
        sys.exit(1)
    except ValueError as exc:
        print_error(f"Error: invalid application description: {exc}")
        sys.exit(1)

    app_def = request.app_definition
    for binder in request.binders:
        existing = project_root(request.output_folder, binder, app_def.name)
        if existing.exists():
            print_warning(f"Overwriting existing project at {existing}")

    try:
        roots = ProjectGenerator().generate(request)
    except GenerationError as exc:
        print_error(str(exc))
        sys.exit(1)

    print_summary_table(
        {
            "Application": f"{app_def.name} ({app_def.type.value})",
            "Version": app_def.version,
            "Binders": ", ".join(request.binders),
            "Output": str(request.output_folder),
        },
        title="stream-appgen",
    )
    print_success(f"Generated {len(roots)} project(s).")


if __name__ == "__main__":
    main()
