"""Nested schema resolver for dualschema.

This module splices previously compiled schemas into embedding positions:
- EmbedsOne(name, ref)  -> properties[name] = ref documentation
- EmbedsMany(name, ref) -> properties[name] = {type: array, items: ref documentation}
- reference fields      -> ref documentation with the field's ``required``

References must already be compiled. There are no forward declarations,
so a schema can never embed itself or one compiled after it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from dualschema.compiler.assembler import Fragment
from dualschema.compiler.declarations import EmbedSpec, FieldSpec
from dualschema.errors import MalformedDeclarationError, UnknownSchemaReferenceError
from dualschema.schemas.compiled_schema import CompiledSchema
from dualschema.schemas.schema_node import SchemaNode
from dualschema.schemas.validation import ValidationRule

if TYPE_CHECKING:
    from dualschema.registry import SchemaRegistry

logger = structlog.get_logger(__name__)


class EmbedResolver:
    """Resolve schema references against a registry.

    Args:
        registry: Registry holding the compiled schemas that may be embedded.

    Example:
        >>> resolver = EmbedResolver(registry)
        >>> fragment = resolver.resolve_embed(embeds_many("data", "User"))
        >>> fragment.node.type
        'array'
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry

    def resolve(self, reference: Any, *, field_name: str | None = None) -> CompiledSchema:
        """Resolve a reference to a compiled schema.

        Args:
            reference: Registry name or compiled schema.
            field_name: Embedding field, for error context.

        Raises:
            UnknownSchemaReferenceError: If the named schema is not compiled.
            MalformedDeclarationError: If the reference is neither a name
                nor a compiled schema.
        """
        if isinstance(reference, CompiledSchema):
            return reference
        if not isinstance(reference, str) or not reference:
            raise MalformedDeclarationError(
                f"Invalid schema reference {reference!r}", field_name=field_name
            )

        if not self.registry.is_compiled(reference):
            raise UnknownSchemaReferenceError(
                reference,
                field_name=field_name,
                available=self.registry.names(),
            )

        logger.debug("schema_reference_resolved", reference=reference, field=field_name)
        return self.registry.lookup(reference)

    def resolve_embed(self, embed: EmbedSpec) -> Fragment:
        """Resolve an ``embeds_one`` or ``embeds_many`` declaration."""
        compiled = self.resolve(embed.schema, field_name=embed.name)
        documentation = compiled.documentation_schema

        if embed.many:
            node = SchemaNode(type="array", items=documentation)
        else:
            node = documentation

        rule = ValidationRule(
            name=embed.name,
            type="embed",
            many=embed.many,
            fields=compiled.validation_descriptor,
        )
        return Fragment(embed.name, node, rule)

    def resolve_reference(self, spec: FieldSpec, options: Mapping[str, Any]) -> Fragment:
        """Resolve a ``reference`` typed field.

        The referenced documentation is used with the field's own
        ``required`` flag and ``description``.
        """
        compiled = self.resolve(options.get("schema"), field_name=spec.name)

        node = compiled.documentation_schema.with_required(spec.required)
        description = options.get("description")
        if description is not None:
            node = node.model_copy(update={"description": str(description)})

        rule = ValidationRule(
            name=spec.name,
            type="embed",
            required=spec.required,
            fields=compiled.validation_descriptor,
        )
        return Fragment(spec.name, node, rule)
