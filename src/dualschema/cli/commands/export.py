"""dualschema export command - Write an OpenAPI document."""

from __future__ import annotations

from pathlib import Path

import click

from dualschema.cli.output import error, success


@click.command("export")
@click.argument("file_path", type=click.Path(exists=False))
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./openapi.json",
    help="Output path [default: ./openapi.json]",
)
def export_cmd(file_path: str, output_path: str) -> None:
    """Export an OpenAPI document from a declaration file.

    Compiles the file's schemas, binds its controllers and writes the
    resulting OpenAPI 3 document.

    Examples:

        dualschema export schemas.yaml

        dualschema export schemas.yaml --output docs/openapi.json
    """
    path = Path(file_path)
    if not path.exists():
        error(f"File not found: {file_path}")
        raise SystemExit(2)

    try:
        from dualschema.errors import DualSchemaError
        from dualschema.export import export_openapi_document

        document = export_openapi_document(path, output_path)
        success(f"Exported {len(document['paths'])} paths to {output_path}")

    except PermissionError:
        error(f"Cannot write to: {output_path}")
        raise SystemExit(2) from None

    except DualSchemaError as e:
        error(f"Export failed: {e.user_message}")
        raise SystemExit(1) from None
