"""Declaration helpers for dualschema.

These functions are the Python spelling of the declaration surface:

    required(name, type, **options)
    optional(name, type, **options)
    field(name, type, **options)
    embeds_one(name, schema_ref)
    embeds_many(name, schema_ref)

Example:
    >>> registry.compile("CreateUser", [
    ...     required("first_name", "string", example="Greg"),
    ...     required("role", "enum", values=["admin", "normal"], default="normal"),
    ...     optional("age", "integer", minimum=18),
    ...     required("tags", array("object"), fields=[required("id", "string")]),
    ... ])
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dualschema.compiler.declarations import EmbedSpec, FieldSpec, SemanticType, TypeSpec
from dualschema.compiler.parser import build_embed, build_field

if TYPE_CHECKING:
    from dualschema.schemas.compiled_schema import CompiledSchema


def required(name: str, type_: Any, /, **options: Any) -> FieldSpec:
    """Declare a field that must be present."""
    return build_field("required", name, type_, options)


def optional(name: str, type_: Any, /, **options: Any) -> FieldSpec:
    """Declare a field that may be omitted."""
    return build_field("optional", name, type_, options)


def field(name: str, type_: Any, /, **options: Any) -> FieldSpec:
    """Declare a documentation field; never required."""
    return build_field("field", name, type_, options)


def embeds_one(name: str, schema: str | CompiledSchema, /) -> EmbedSpec:
    """Embed a compiled schema as a nested object."""
    return build_embed("embeds_one", name, schema)


def embeds_many(name: str, schema: str | CompiledSchema, /) -> EmbedSpec:
    """Embed a compiled schema as an array of objects."""
    return build_embed("embeds_many", name, schema)


def array(subtype: Any) -> TypeSpec:
    """Array type with the given item type."""
    return TypeSpec.parse((SemanticType.ARRAY, subtype))
