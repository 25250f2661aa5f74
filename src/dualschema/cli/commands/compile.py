"""dualschema compile command - Compile a declaration file."""

from __future__ import annotations

from pathlib import Path

import click

from dualschema.cli.output import error, print_json, schema_summary, success


@click.command("compile")
@click.argument("file_path", type=click.Path(exists=False))
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default=None,
    help="Write the result to this JSON file instead of printing it.",
)
@click.option(
    "--validation",
    is_flag=True,
    default=False,
    help="Emit validation descriptors instead of documentation schemas.",
)
def compile_cmd(file_path: str, output_path: str | None, validation: bool) -> None:
    """Compile every schema in a declaration file.

    Schemas are compiled in file order; a schema may only embed schemas
    listed above it.

    Examples:

        dualschema compile schemas.yaml

        dualschema compile schemas.yaml --validation -o build/validation.json
    """
    path = Path(file_path)
    if not path.exists():
        error(f"File not found: {file_path}")
        raise SystemExit(2)

    try:
        from dualschema.errors import DualSchemaError
        from dualschema.export import (
            export_documentation_schemas,
            export_validation_descriptors,
        )
        from dualschema.registry import SchemaRegistry

        registry = SchemaRegistry.from_file(path)
        exporter = export_validation_descriptors if validation else export_documentation_schemas
        result = exporter(registry, output_path)

        if output_path is None:
            print_json(result)
        else:
            schema_summary(registry.schemas())
            success(f"Compiled {len(registry)} schemas to {output_path}")

    except PermissionError:
        error(f"Cannot write to: {output_path}")
        raise SystemExit(2) from None

    except DualSchemaError as e:
        error(f"Compilation failed: {e.user_message}")
        raise SystemExit(1) from None
