"""Rich console output for the dualschema CLI.

Status lines, JSON dumps and the compiled schema summary table. Colors
are disabled by NO_COLOR or the --no-color flag.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from typing import Any

from rich.console import Console
from rich.table import Table

from dualschema.schemas.compiled_schema import CompiledSchema

NO_COLOR_ENV = "NO_COLOR"


def create_console(no_color: bool = False) -> Console:
    """Create the CLI console.

    Args:
        no_color: Disable colored output. NO_COLOR in the environment has
            the same effect.
    """
    disabled = no_color or os.environ.get(NO_COLOR_ENV) is not None
    return Console(force_terminal=False if disabled else None, no_color=disabled)


console = create_console()


def _status(symbol: str, style: str, message: str, **kwargs: Any) -> None:
    console.print(f"[{style}]{symbol}[/{style}] {message}", **kwargs)


def success(message: str, **kwargs: Any) -> None:
    """Print a success line.

    Example:
        >>> success("Compiled 4 schemas to build/schemas.json")
        ✓ Compiled 4 schemas to build/schemas.json
    """
    _status("✓", "green", message, **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error line.

    Example:
        >>> error("Compilation failed: Schema 'User' referenced by field 'data' has not been compiled")
        ✗ Compilation failed: Schema 'User' referenced by field 'data' has not been compiled
    """
    _status("✗", "red", message, **kwargs)


def print_json(data: dict[str, Any], **kwargs: Any) -> None:
    """Print a JSON document with syntax highlighting."""
    console.print_json(json.dumps(data), **kwargs)


def schema_summary(schemas: Iterable[CompiledSchema]) -> None:
    """Print one row per compiled schema with its field counts."""
    table = Table("Schema", "Fields", "Required", title="Compiled schemas")
    for schema in schemas:
        descriptor = schema.validation_descriptor
        table.add_row(
            schema.name,
            str(len(descriptor.rules)),
            ", ".join(descriptor.required_fields()) or "-",
        )
    console.print(table)


def set_no_color(no_color: bool) -> None:
    """Replace the console, e.g. for --no-color."""
    global console
    console = create_console(no_color=no_color)
