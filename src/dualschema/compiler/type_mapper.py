"""Type mapper for dualschema.

This module maps a field's semantic type and options to its two target
representations through one table, so the documentation node and the
validation rule of a field are always derived from the same inputs.

Documentation table:

    ===========  ==============================================
    string       {type: string}; ``included`` makes it an enum
    integer      {type: integer}
    number       {type: number}
    boolean      {type: boolean}
    uuid         {type: string, format: uuid}
    date         {type: string, format: date, example}
    datetime     {type: string, format: date-time, example}
    decimal      {type: number, format: double}
    enum         {type: string, enum: [str, ...]}
    array<T>     {type: array, items: T}, T in string/integer/object
    object       {type: object, properties?}
    ===========  ==============================================

Option precedence, lowest first: built-in type defaults, caller type
defaults, explicit field options, type-mandated keys.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

import structlog
from pydantic import ValidationError

from dualschema.compiler.assembler import AssembledBlock, Fragment
from dualschema.compiler.declarations import FieldSpec, SemanticType, TypeSpec
from dualschema.errors import (
    DecimalValueNotAllowedError,
    MalformedDeclarationError,
    UnresolvedOptionValueError,
    UnsupportedSubtypeError,
)
from dualschema.schemas.schema_node import SchemaNode
from dualschema.schemas.validation import ValidationRule

logger = structlog.get_logger(__name__)

DEFAULT_DATE_EXAMPLE = "2024-08-12"
# date-time notation as defined by RFC 3339, section 5.6
DEFAULT_DATETIME_EXAMPLE = "2024-08-12T21:00:39"

SUPPORTED_ARRAY_SUBTYPES = (
    SemanticType.STRING,
    SemanticType.INTEGER,
    SemanticType.OBJECT,
)

# Options copied onto documentation nodes
DOCUMENTATION_OPTIONS = frozenset(
    {
        "title",
        "description",
        "example",
        "default",
        "nullable",
        "deprecated",
        "format",
        "minimum",
        "maximum",
        "pattern",
        "min_length",
        "max_length",
        "min_items",
        "max_items",
        "read_only",
        "write_only",
    }
)

# Options copied onto validation rules
VALIDATION_OPTIONS = frozenset(
    {
        "minimum",
        "maximum",
        "format",
        "included",
        "excluded",
        "values",
        "default",
        "nullable",
        "min_length",
        "max_length",
        "pattern",
        "min_items",
        "max_items",
    }
)

# Options consumed by the compiler itself
STRUCTURAL_OPTIONS = frozenset({"values", "included", "schema"})

KNOWN_OPTIONS = DOCUMENTATION_OPTIONS | VALIDATION_OPTIONS | STRUCTURAL_OPTIONS

_NUMERIC_OPTIONS = ("example", "minimum", "maximum")


def resolve_literal(field_name: str, option: str, value: Any) -> Any:
    """Resolve an option value to a compile-time literal.

    Enum members are reduced to their value; lists, tuples and mappings
    are resolved recursively.

    Raises:
        UnresolvedOptionValueError: If the value is not a literal.
    """
    if isinstance(value, Enum):
        return resolve_literal(field_name, option, value.value)
    if value is None or isinstance(
        value, (bool, int, float, str, Decimal, date, time, UUID)
    ):
        return value
    if isinstance(value, (list, tuple)):
        return [resolve_literal(field_name, option, item) for item in value]
    if isinstance(value, Mapping):
        resolved: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnresolvedOptionValueError(field_name, option, value)
            resolved[key] = resolve_literal(field_name, option, item)
        return resolved

    raise UnresolvedOptionValueError(
        field_name,
        option,
        value,
        internal_details=f"{field_name}.{option} = {value!r}",
    )


def stringify(value: Any) -> str:
    """String form of a literal, ISO 8601 for dates and times.

    Booleans use their JSON spelling and None becomes the empty string.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


class TypeMapper:
    """Map field declarations to documentation nodes and validation rules.

    Args:
        type_defaults: Caller overrides, keyed by semantic type name, layered
            over the built-in type defaults.
        date_example: Example injected into date fields without one.
        datetime_example: Example injected into datetime fields without one.

    Example:
        >>> mapper = TypeMapper(type_defaults={"uuid": {"example": "82b557d1-..."}})
        >>> fragment = mapper.map_field(required("id", "uuid"))
        >>> fragment.node.to_openapi()
        {'type': 'string', 'format': 'uuid', 'required': True, 'example': '82b557d1-...'}
    """

    def __init__(
        self,
        type_defaults: Mapping[str, Mapping[str, Any]] | None = None,
        *,
        date_example: str = DEFAULT_DATE_EXAMPLE,
        datetime_example: str = DEFAULT_DATETIME_EXAMPLE,
    ) -> None:
        defaults: dict[SemanticType, dict[str, Any]] = {
            SemanticType.DATE: {"example": date_example},
            SemanticType.DATETIME: {"example": datetime_example},
        }
        for type_name, options in (type_defaults or {}).items():
            semantic_type = TypeSpec.parse(type_name).semantic_type
            defaults[semantic_type] = {**defaults.get(semantic_type, {}), **options}
        self._defaults = defaults

        self._table: dict[
            SemanticType,
            Callable[[FieldSpec, dict[str, Any], AssembledBlock | None], Fragment],
        ] = {
            SemanticType.STRING: self._map_string,
            SemanticType.INTEGER: self._map_primitive,
            SemanticType.NUMBER: self._map_primitive,
            SemanticType.BOOLEAN: self._map_primitive,
            SemanticType.UUID: self._map_uuid,
            SemanticType.DATE: self._map_temporal,
            SemanticType.DATETIME: self._map_temporal,
            SemanticType.DECIMAL: self._map_decimal,
            SemanticType.ENUM: self._map_enum,
            SemanticType.ARRAY: self._map_array,
            SemanticType.OBJECT: self._map_object,
        }

    def resolve_options(self, spec: FieldSpec) -> dict[str, Any]:
        """Resolve a field's options, layering explicit options over defaults.

        Raises:
            UnresolvedOptionValueError: If an option is not a literal.
        """
        merged = {
            **self._defaults.get(spec.type.semantic_type, {}),
            **{key: value for key, value in spec.options.items() if value is not None},
        }
        resolved: dict[str, Any] = {}
        for key, value in merged.items():
            if key not in KNOWN_OPTIONS:
                logger.debug("option_dropped", field=spec.name, option=key)
                continue
            # schema references are resolved against the registry instead
            if key == "schema":
                resolved[key] = value
                continue
            resolved[key] = resolve_literal(spec.name, key, value)
        return resolved

    def map_field(
        self,
        spec: FieldSpec,
        nested: AssembledBlock | None = None,
    ) -> Fragment:
        """Map one field declaration.

        Args:
            spec: The field declaration.
            nested: The compiled inline block, for object and object-array
                fields.

        Returns:
            The field's documentation node and validation rule.

        Raises:
            UnresolvedOptionValueError: If an option is not a literal.
            UnsupportedSubtypeError: If an array item type is not supported.
            DecimalValueNotAllowedError: If a decimal field documents a Decimal.
            MalformedDeclarationError: If the declaration shape does not fit
                its type.
        """
        mapper = self._table.get(spec.type.semantic_type)
        if mapper is None:
            raise MalformedDeclarationError(
                f"Type '{spec.type}' cannot be mapped inline", field_name=spec.name
            )
        try:
            return mapper(spec, self.resolve_options(spec), nested)
        except ValidationError as e:
            raise MalformedDeclarationError(
                f"Invalid options for type '{spec.type}'",
                field_name=spec.name,
                internal_details=str(e),
            ) from e

    def _map_string(
        self, spec: FieldSpec, options: dict[str, Any], nested: AssembledBlock | None
    ) -> Fragment:
        if "included" in options:
            # enum wins over format
            values = self._values(spec, options, "included")
            node = self._enum_node(spec, options, values)
            rule = self._rule(spec, "string", options, exclude={"format", "values"})
            return Fragment(spec.name, node, rule)

        node = SchemaNode(type="string", **self._document(options), required=spec.required)
        rule = self._rule(spec, "string", options)
        return Fragment(spec.name, node, rule)

    def _map_primitive(
        self, spec: FieldSpec, options: dict[str, Any], nested: AssembledBlock | None
    ) -> Fragment:
        type_name = spec.type.semantic_type.value
        node = SchemaNode(type=type_name, **self._document(options), required=spec.required)
        rule = self._rule(spec, type_name, options, exclude={"format"})
        return Fragment(spec.name, node, rule)

    def _map_uuid(
        self, spec: FieldSpec, options: dict[str, Any], nested: AssembledBlock | None
    ) -> Fragment:
        node = SchemaNode(
            **self._document(options, exclude={"format"}),
            type="string",
            format="uuid",
            required=spec.required,
        )
        rule = self._rule(spec, "string", options, exclude={"format"})
        return Fragment(spec.name, node, rule)

    def _map_temporal(
        self, spec: FieldSpec, options: dict[str, Any], nested: AssembledBlock | None
    ) -> Fragment:
        documented = self._document(options, exclude={"format"})
        if documented.get("example") is not None:
            documented["example"] = stringify(documented["example"])

        is_date = spec.type.semantic_type is SemanticType.DATE
        node = SchemaNode(
            **documented,
            type="string",
            format="date" if is_date else "date-time",
            required=spec.required,
        )
        rule = self._rule(
            spec, "date" if is_date else "datetime", options, exclude={"format"}
        )
        return Fragment(spec.name, node, rule)

    def _map_decimal(
        self, spec: FieldSpec, options: dict[str, Any], nested: AssembledBlock | None
    ) -> Fragment:
        for option in _NUMERIC_OPTIONS:
            value = options.get(option)
            if isinstance(value, Decimal):
                raise DecimalValueNotAllowedError(spec.name, option, value)

        node = SchemaNode(
            **self._document(options, exclude={"format"}),
            type="number",
            format="double",
            required=spec.required,
        )
        rule = self._rule(spec, "decimal", options, exclude={"format"})
        return Fragment(spec.name, node, rule)

    def _map_enum(
        self, spec: FieldSpec, options: dict[str, Any], nested: AssembledBlock | None
    ) -> Fragment:
        values = self._values(spec, options, "values")
        node = self._enum_node(spec, options, values)
        rule = self._rule(spec, "enum", options, exclude={"format", "included"})
        return Fragment(spec.name, node, rule)

    def _map_array(
        self, spec: FieldSpec, options: dict[str, Any], nested: AssembledBlock | None
    ) -> Fragment:
        subtype = spec.type.subtype
        if subtype not in SUPPORTED_ARRAY_SUBTYPES:
            raise UnsupportedSubtypeError(
                spec.name,
                subtype.value if subtype is not None else "none",
                [supported.value for supported in SUPPORTED_ARRAY_SUBTYPES],
            )

        if subtype is SemanticType.OBJECT:
            if nested is None:
                raise MalformedDeclarationError(
                    "Object arrays require inline fields", field_name=spec.name
                )
            items = nested.node.with_required(spec.required)
        else:
            items = SchemaNode(type=subtype.value, required=spec.required)

        node = SchemaNode(
            **self._document(options, exclude={"format"}),
            type="array",
            items=items,
            required=spec.required,
        )
        rule = self._rule(
            spec,
            "array",
            options,
            exclude={"format"},
            subtype=subtype.value,
            fields=nested,
        )
        return Fragment(spec.name, node, rule)

    def _map_object(
        self, spec: FieldSpec, options: dict[str, Any], nested: AssembledBlock | None
    ) -> Fragment:
        node = SchemaNode(
            **self._document(options, exclude={"format"}),
            type="object",
            properties=nested.node.properties if nested is not None else None,
            required=spec.required,
        )
        rule = self._rule(spec, "map", options, exclude={"format"}, fields=nested)
        return Fragment(spec.name, node, rule)

    def _enum_node(
        self, spec: FieldSpec, options: dict[str, Any], values: list[Any]
    ) -> SchemaNode:
        return SchemaNode(
            **self._document(options, exclude={"format"}),
            type="string",
            enum=[stringify(value) for value in values],
            required=spec.required,
        )

    def _values(self, spec: FieldSpec, options: dict[str, Any], key: str) -> list[Any]:
        values = options.get(key)
        if not isinstance(values, list) or not values:
            raise MalformedDeclarationError(
                f"'{key}' must be a non-empty list", field_name=spec.name
            )
        return values

    def _document(
        self, options: dict[str, Any], exclude: frozenset[str] | set[str] = frozenset()
    ) -> dict[str, Any]:
        documented: dict[str, Any] = {}
        for key, value in options.items():
            if key not in DOCUMENTATION_OPTIONS or key in exclude:
                continue
            if isinstance(value, Decimal) and key in _NUMERIC_OPTIONS:
                value = float(value)
            documented[key] = value
        return documented

    def _rule(
        self,
        spec: FieldSpec,
        type_name: str,
        options: dict[str, Any],
        exclude: frozenset[str] | set[str] = frozenset(),
        *,
        subtype: str | None = None,
        fields: AssembledBlock | None = None,
    ) -> ValidationRule:
        constraints = {
            key: value
            for key, value in options.items()
            if key in VALIDATION_OPTIONS and key not in exclude
        }
        return ValidationRule(
            name=spec.name,
            type=type_name,
            required=spec.required,
            subtype=subtype,
            constraints=constraints,
            fields=fields.descriptor if fields is not None else None,
        )
