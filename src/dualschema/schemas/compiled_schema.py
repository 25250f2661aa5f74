"""Compiled schema contract for dualschema."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from dualschema.schemas.schema_node import SchemaNode
from dualschema.schemas.validation import ValidationDescriptor


class CompiledSchema(BaseModel):
    """Immutable pair produced for one named declaration block.

    Both artifacts are compiled from the same declarations in one pass and
    are never rebuilt separately, so they always describe the same fields.

    Attributes:
        name: Registry name of the schema.
        validation_descriptor: Descriptor for the validation engine.
        documentation_schema: Root object node of the documentation tree.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Registry name")
    validation_descriptor: ValidationDescriptor = Field(
        ...,
        description="Descriptor consumed by the validation engine",
    )
    documentation_schema: SchemaNode = Field(
        ...,
        description="Root documentation node",
    )
