"""Documentation schema node for dualschema.

This module defines SchemaNode, one node of the JSON-Schema/OpenAPI
compatible documentation tree produced by the compiler.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_serializer,
    field_validator,
)

from dualschema.schemas.frozen import freeze, thaw

NodeType = Literal["string", "integer", "number", "boolean", "array", "object"]


class SchemaNode(BaseModel):
    """One node of the documentation tree.

    Every node carries a boolean ``required`` flag describing whether the
    value it documents must be present in its parent object. The flag is
    never hoisted into a parent-level ``required`` list.

    Attributes:
        type: JSON type of the value.
        format: Optional format annotation (uuid, date, date-time, double).
        enum: Allowed values, always strings.
        items: Item schema of an array node.
        properties: Ordered child schemas of an object node. ``None`` for an
            opaque object.
        required: Whether the value must be present.

    Example:
        >>> node = SchemaNode(type="string", format="uuid", required=True)
        >>> node.to_openapi()
        {'type': 'string', 'format': 'uuid', 'required': True}
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    type: NodeType = Field(..., description="JSON type of the value")
    format: str | None = Field(default=None, description="Format annotation")
    enum: tuple[str, ...] | None = Field(default=None, description="Allowed string values")
    items: SchemaNode | None = Field(default=None, description="Array item schema")
    properties: Mapping[str, SchemaNode] | None = Field(
        default=None,
        description="Ordered object properties",
    )
    required: bool = Field(default=False, description="Whether the value must be present")
    title: str | None = None
    description: str | None = None
    example: Any = None
    default: Any = None
    nullable: bool | None = None
    deprecated: bool | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None
    pattern: str | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    min_items: int | None = Field(default=None, alias="minItems")
    max_items: int | None = Field(default=None, alias="maxItems")
    read_only: bool | None = Field(default=None, alias="readOnly")
    write_only: bool | None = Field(default=None, alias="writeOnly")

    @field_validator("properties", "example", "default")
    @classmethod
    def _freeze_containers(cls, value: Any) -> Any:
        return freeze(value)

    @field_serializer("properties", "example", "default", mode="wrap")
    def _thaw_containers(self, value: Any, handler: SerializerFunctionWrapHandler) -> Any:
        return handler(thaw(value))

    def with_required(self, required: bool) -> SchemaNode:
        """Return a copy of this node with a different ``required`` flag."""
        if self.required == required:
            return self
        return self.model_copy(update={"required": required})

    def to_openapi(self) -> dict[str, Any]:
        """Serialize the node to an OpenAPI-compatible dictionary.

        Unset keys are omitted, camelCase names are used and ``required``
        is always present.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


SchemaNode.model_rebuild()
