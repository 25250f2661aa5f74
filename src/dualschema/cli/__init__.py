"""Command line interface for dualschema."""

from __future__ import annotations

from dualschema.cli.main import cli

__all__: list[str] = ["cli"]
