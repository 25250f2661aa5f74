"""Field declaration parser for dualschema.

This module normalizes raw declarations into the tagged-variant tree of
dualschema.compiler.declarations. Accepted raw shapes:
- Declaration objects built with the DSL helpers (re-validated)
- Tuples ``(kind, name, type[, options])`` and ``(kind, name, schema_ref)``
- Mappings as loaded from YAML (``{"required": "age", "type": "integer"}``)

A single bare declaration is accepted wherever a block is, so callers do
not need to distinguish the one-field and many-field cases.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from dualschema.compiler.declarations import (
    EMBED_KINDS,
    FIELD_KINDS,
    Declaration,
    EmbedSpec,
    FieldSpec,
    SemanticType,
    TypeSpec,
)
from dualschema.errors import MalformedDeclarationError
from dualschema.schemas.compiled_schema import CompiledSchema

# Option key holding an inline nested block
FIELDS_OPTION = "fields"

# Mapping keys that are part of the declaration itself, not options
_STRUCTURAL_KEYS = frozenset({"type", "options", *FIELD_KINDS, *EMBED_KINDS})


def parse_declarations(raw: Any) -> tuple[Declaration, ...]:
    """Parse a declaration block.

    Args:
        raw: A single declaration or an iterable of declarations.

    Returns:
        Parsed declarations in declaration order.

    Raises:
        MalformedDeclarationError: If any declaration is malformed or two
            declarations share a name.

    Example:
        >>> parse_declarations([("required", "age", "integer", {"minimum": 18})])
        (RequiredField(name='age', type=TypeSpec(...), options={'minimum': 18}, fields=()),)
    """
    if raw is None or isinstance(raw, str):
        raise MalformedDeclarationError(f"Expected a declaration block, got {raw!r}")

    items: Iterable[Any] = [raw] if _is_single(raw) else raw
    declarations = tuple(parse_declaration(item) for item in items)

    seen: set[str] = set()
    for declaration in declarations:
        if declaration.name in seen:
            raise MalformedDeclarationError(
                "Duplicate field name", field_name=declaration.name
            )
        seen.add(declaration.name)

    return declarations


def parse_declaration(raw: Any) -> Declaration:
    """Parse a single declaration.

    Raises:
        MalformedDeclarationError: If the declaration is malformed.
    """
    if isinstance(raw, FieldSpec):
        return build_field(raw.kind, raw.name, raw.type, {**raw.options, **_block(raw)})
    if isinstance(raw, EmbedSpec):
        return build_embed(raw.kind, raw.name, raw.schema)
    if isinstance(raw, Mapping):
        return _parse_mapping(raw)
    if isinstance(raw, (tuple, list)):
        return _parse_sequence(raw)

    raise MalformedDeclarationError(f"Unrecognized declaration {raw!r}")


def build_field(
    kind: str,
    name: Any,
    type_: Any,
    options: Mapping[str, Any] | None = None,
) -> FieldSpec:
    """Build a field variant from its parts.

    Args:
        kind: One of ``required``, ``optional`` or ``field``.
        name: Field name.
        type_: Raw type tag.
        options: Field options, possibly holding an inline ``fields`` block.

    Raises:
        MalformedDeclarationError: If a part is missing or invalid.
    """
    field_cls = FIELD_KINDS.get(kind)
    if field_cls is None:
        raise MalformedDeclarationError(f"Unrecognized declaration kind '{kind}'")

    field_name = _name(name)
    if type_ is None:
        raise MalformedDeclarationError("Missing type", field_name=field_name)
    if options is not None and not isinstance(options, Mapping):
        raise MalformedDeclarationError(
            f"Options must be a mapping, got {type(options).__name__}",
            field_name=field_name,
        )

    type_spec = TypeSpec.parse(type_, field_name=field_name)
    opts = {str(key): value for key, value in (options or {}).items()}
    raw_block = opts.pop(FIELDS_OPTION, None)
    fields = parse_declarations(raw_block) if raw_block is not None else ()

    if fields and not _accepts_block(type_spec):
        raise MalformedDeclarationError(
            f"Inline fields are only allowed on object fields, not {type_spec}",
            field_name=field_name,
        )
    if type_spec.semantic_type is SemanticType.ENUM and "values" not in opts:
        raise MalformedDeclarationError("Enum requires values", field_name=field_name)
    if type_spec.semantic_type is SemanticType.REFERENCE and not opts.get("schema"):
        raise MalformedDeclarationError(
            "Reference requires a schema", field_name=field_name
        )

    return field_cls(name=field_name, type=type_spec, options=opts, fields=fields)


def build_embed(kind: str, name: Any, schema: Any) -> EmbedSpec:
    """Build an embed variant from its parts.

    Raises:
        MalformedDeclarationError: If the schema reference is missing.
    """
    embed_cls = EMBED_KINDS.get(kind)
    if embed_cls is None:
        raise MalformedDeclarationError(f"Unrecognized declaration kind '{kind}'")

    field_name = _name(name)
    if isinstance(schema, CompiledSchema):
        return embed_cls(name=field_name, schema=schema)
    if not isinstance(schema, str) or not schema.strip():
        raise MalformedDeclarationError("Missing schema reference", field_name=field_name)
    return embed_cls(name=field_name, schema=schema.strip())


def _parse_sequence(raw: tuple[Any, ...] | list[Any]) -> Declaration:
    if len(raw) < 2:
        raise MalformedDeclarationError(f"Declaration {raw!r} is missing its name")

    kind = raw[0]
    if not isinstance(kind, str):
        raise MalformedDeclarationError(f"Unrecognized declaration kind {kind!r}")
    if kind in EMBED_KINDS:
        if len(raw) != 3:
            raise MalformedDeclarationError(
                f"{kind} takes a name and a schema reference", field_name=str(raw[1])
            )
        return build_embed(kind, raw[1], raw[2])

    if kind in FIELD_KINDS:
        if len(raw) not in (3, 4):
            raise MalformedDeclarationError(
                f"{kind} takes a name, a type and optional options",
                field_name=str(raw[1]),
            )
        options = raw[3] if len(raw) == 4 else None
        return build_field(kind, raw[1], raw[2], options)

    raise MalformedDeclarationError(f"Unrecognized declaration kind {kind!r}")


def _parse_mapping(raw: Mapping[Any, Any]) -> Declaration:
    kinds = [key for key in raw if key in FIELD_KINDS or key in EMBED_KINDS]
    if len(kinds) != 1:
        raise MalformedDeclarationError(
            f"Declaration must name exactly one of "
            f"{', '.join([*FIELD_KINDS, *EMBED_KINDS])}, got {sorted(map(str, raw))}"
        )

    kind = kinds[0]
    if kind in EMBED_KINDS:
        return build_embed(kind, raw[kind], raw.get("schema"))

    options = raw.get("options") or {}
    if not isinstance(options, Mapping):
        raise MalformedDeclarationError(
            "Options must be a mapping", field_name=str(raw[kind])
        )
    extra = {key: value for key, value in raw.items() if key not in _STRUCTURAL_KEYS}
    return build_field(kind, raw[kind], raw.get("type"), {**options, **extra})


def _is_single(raw: Any) -> bool:
    if isinstance(raw, (FieldSpec, EmbedSpec, Mapping)):
        return True
    if isinstance(raw, (tuple, list)) and raw:
        head = raw[0]
        return isinstance(head, str) and (head in FIELD_KINDS or head in EMBED_KINDS)
    return False


def _name(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedDeclarationError(f"Declaration is missing its name, got {raw!r}")
    return raw.strip()


def _block(field: FieldSpec) -> dict[str, Any]:
    return {FIELDS_OPTION: list(field.fields)} if field.fields else {}


def _accepts_block(type_spec: TypeSpec) -> bool:
    if type_spec.semantic_type is SemanticType.OBJECT:
        return True
    return (
        type_spec.semantic_type is SemanticType.ARRAY
        and type_spec.subtype is SemanticType.OBJECT
    )
