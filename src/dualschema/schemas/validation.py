"""Validation descriptor models for dualschema.

This module defines the descriptor handed to the external validation
engine. It carries types and constraints only; documentation-only options
such as ``example`` or ``description`` never reach it.
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

ValidationType = Literal[
    "string",
    "integer",
    "number",
    "boolean",
    "date",
    "datetime",
    "decimal",
    "enum",
    "map",
    "array",
    "embed",
]


class ValidationRule(BaseModel):
    """Validation rule for a single field.

    Attributes:
        name: Field name in the incoming map.
        type: Type the engine coerces the value to.
        required: Whether the engine rejects a missing value.
        subtype: Item type of an array rule.
        many: For embed rules, whether the value is a list of objects.
        constraints: Engine constraints (minimum, included, values, ...).
        fields: Nested descriptor for maps, object arrays and embeds.

    Example:
        >>> rule = ValidationRule(name="age", type="integer", constraints={"minimum": 18})
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Field name")
    type: ValidationType = Field(..., description="Coercion type")
    required: bool = Field(default=False, description="Whether the field must be present")
    subtype: str | None = Field(default=None, description="Array item type")
    many: bool = Field(default=False, description="Embed cardinality")
    constraints: Mapping[str, Any] = Field(
        default_factory=dict,
        validate_default=True,
        description="Constraints understood by the validation engine",
    )
    fields: ValidationDescriptor | None = Field(
        default=None,
        description="Nested descriptor",
    )

    @field_validator("constraints")
    @classmethod
    def _freeze_constraints(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return freeze(value)

    @field_serializer("constraints", mode="wrap")
    def _thaw_constraints(self, value: Any, handler: SerializerFunctionWrapHandler) -> Any:
        return handler(thaw(value))


class ValidationDescriptor(BaseModel):
    """Ordered validation rules for one declaration block.

    Example:
        >>> descriptor = ValidationDescriptor(rules=(rule,))
        >>> descriptor.field_names()
        ['age']
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rules: tuple[ValidationRule, ...] = Field(
        default=(),
        description="Rules in declaration order",
    )

    def field_names(self) -> list[str]:
        """Return the field names in declaration order."""
        return [rule.name for rule in self.rules]

    def get(self, name: str) -> ValidationRule | None:
        """Return the rule for ``name``, or None."""
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None

    def required_fields(self) -> list[str]:
        """Return the names of fields the engine must reject when missing."""
        return [rule.name for rule in self.rules if rule.required]


ValidationRule.model_rebuild()
