"""Declaration variants for dualschema.

This module defines the tagged-variant tree produced by the parser:
- SemanticType / Requiredness: Type and requiredness tags
- TypeSpec: A semantic type, with an item type for arrays
- FieldSpec: Base of RequiredField, OptionalField and PlainField
- EmbedSpec: Base of EmbedsOne and EmbedsMany

Declarations are transient: they live for one compilation pass.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from dualschema.errors import MalformedDeclarationError

if TYPE_CHECKING:
    from dualschema.schemas.compiled_schema import CompiledSchema


class SemanticType(str, Enum):
    """Semantic field types understood by the compiler."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    UUID = "uuid"
    DATE = "date"
    DATETIME = "datetime"
    DECIMAL = "decimal"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"
    REFERENCE = "reference"


class Requiredness(str, Enum):
    """Requiredness tag of a field declaration."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    PLAIN = "plain"


# Alternative spellings accepted for type tags
TYPE_ALIASES: dict[str, SemanticType] = {
    "map": SemanticType.OBJECT,
    "float": SemanticType.NUMBER,
    "utc_datetime": SemanticType.DATETIME,
    "naive_datetime": SemanticType.DATETIME,
}

_ARRAY_TAG = re.compile(r"^array\s*[<\[]\s*(?P<subtype>\w+)\s*[>\]]$")


@dataclass(frozen=True)
class TypeSpec:
    """A semantic type with its array item type.

    Attributes:
        semantic_type: The field's semantic type.
        subtype: Item type, set only for arrays.

    Example:
        >>> TypeSpec.parse("array<string>")
        TypeSpec(semantic_type=<SemanticType.ARRAY: 'array'>, subtype=<SemanticType.STRING: 'string'>)
    """

    semantic_type: SemanticType
    subtype: SemanticType | None = None

    def __str__(self) -> str:
        if self.subtype is not None:
            return f"{self.semantic_type.value}<{self.subtype.value}>"
        return self.semantic_type.value

    @classmethod
    def parse(cls, raw: Any, *, field_name: str | None = None) -> TypeSpec:
        """Parse a raw type tag.

        Accepts a TypeSpec, a SemanticType, a tag string (``"uuid"``,
        ``"array<string>"``, ``"array[object]"``) or a pair
        ``("array", subtype)``.

        Raises:
            MalformedDeclarationError: If the tag is missing or unrecognized.
        """
        if isinstance(raw, TypeSpec):
            if raw.semantic_type is SemanticType.ARRAY and raw.subtype is None:
                raise MalformedDeclarationError(
                    "Array type requires an item type", field_name=field_name
                )
            return raw

        if isinstance(raw, (tuple, list)):
            if len(raw) != 2 or _tag(raw[0], field_name) is not SemanticType.ARRAY:
                raise MalformedDeclarationError(
                    f"Unrecognized type {raw!r}", field_name=field_name
                )
            return cls(SemanticType.ARRAY, _tag(raw[1], field_name))

        if isinstance(raw, str):
            match = _ARRAY_TAG.match(raw.strip().lower())
            if match:
                return cls(SemanticType.ARRAY, _tag(match.group("subtype"), field_name))

        semantic_type = _tag(raw, field_name)
        if semantic_type is SemanticType.ARRAY:
            raise MalformedDeclarationError(
                "Array type requires an item type", field_name=field_name
            )
        return cls(semantic_type)


def _tag(raw: Any, field_name: str | None) -> SemanticType:
    """Resolve a single type tag to a SemanticType."""
    if isinstance(raw, SemanticType):
        return raw
    if isinstance(raw, Enum):
        raw = raw.value
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedDeclarationError("Missing type tag", field_name=field_name)

    tag = raw.strip().lower()
    if tag in TYPE_ALIASES:
        return TYPE_ALIASES[tag]
    try:
        return SemanticType(tag)
    except ValueError:
        raise MalformedDeclarationError(
            f"Unrecognized type tag '{raw}'", field_name=field_name
        ) from None


@dataclass(frozen=True)
class FieldSpec:
    """A typed field declaration.

    Attributes:
        name: Field name.
        type: Parsed semantic type.
        options: Raw options, resolved to literals by the type mapper.
        fields: Inline nested block for object and object-array fields.
    """

    name: str
    type: TypeSpec
    options: Mapping[str, Any] = field(default_factory=dict)
    fields: tuple[Declaration, ...] = ()

    requiredness: ClassVar[Requiredness] = Requiredness.PLAIN
    kind: ClassVar[str] = "field"

    @property
    def required(self) -> bool:
        """Whether the field must be present."""
        return self.requiredness is Requiredness.REQUIRED


class RequiredField(FieldSpec):
    """``required(name, type, options?)``"""

    requiredness = Requiredness.REQUIRED
    kind = "required"


class OptionalField(FieldSpec):
    """``optional(name, type, options?)``"""

    requiredness = Requiredness.OPTIONAL
    kind = "optional"


class PlainField(FieldSpec):
    """``field(name, type, options?)``, documentation-first and never required."""

    requiredness = Requiredness.PLAIN
    kind = "field"


@dataclass(frozen=True)
class EmbedSpec:
    """An embedding of a previously compiled schema.

    Attributes:
        name: Field name.
        schema: Registry name of the embedded schema, or the compiled schema.
    """

    name: str
    schema: str | CompiledSchema

    many: ClassVar[bool] = False
    kind: ClassVar[str] = "embeds_one"

    @property
    def reference_name(self) -> str:
        """Name of the referenced schema."""
        if isinstance(self.schema, str):
            return self.schema
        return self.schema.name


class EmbedsOne(EmbedSpec):
    """``embeds_one(name, schemaRef)``"""

    many = False
    kind = "embeds_one"


class EmbedsMany(EmbedSpec):
    """``embeds_many(name, schemaRef)``"""

    many = True
    kind = "embeds_many"


Declaration = FieldSpec | EmbedSpec

FIELD_KINDS: dict[str, type[FieldSpec]] = {
    "required": RequiredField,
    "optional": OptionalField,
    "field": PlainField,
}

EMBED_KINDS: dict[str, type[EmbedSpec]] = {
    "embeds_one": EmbedsOne,
    "embeds_many": EmbedsMany,
}
