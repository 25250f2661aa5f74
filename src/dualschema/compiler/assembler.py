"""Schema assembler for dualschema.

Folds per-field fragments into one object-level block: the documentation
node gets ordered ``properties`` and the validation descriptor gets the
rules in the same order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from dualschema.errors import MalformedDeclarationError
from dualschema.schemas.schema_node import SchemaNode
from dualschema.schemas.validation import ValidationDescriptor, ValidationRule


@dataclass(frozen=True)
class Fragment:
    """Compiled output of one declaration.

    Attributes:
        name: Field name.
        node: Documentation node of the field.
        rule: Validation rule of the field.
    """

    name: str
    node: SchemaNode
    rule: ValidationRule


@dataclass(frozen=True)
class AssembledBlock:
    """Compiled output of a declaration block.

    Attributes:
        node: Object node whose ``properties`` hold the block's fields.
        descriptor: Validation rules of the block's fields.
    """

    node: SchemaNode
    descriptor: ValidationDescriptor


def as_object_node(value: SchemaNode | Mapping[str, SchemaNode]) -> SchemaNode:
    """Normalize a block result to an object node.

    A node that already carries ``properties`` is returned as-is; a bare
    ``{name: node}`` mapping is wrapped into ``{type: object, properties}``.
    """
    if isinstance(value, SchemaNode):
        if value.properties is not None:
            return value
        raise MalformedDeclarationError(
            f"Expected an object schema with properties, got type '{value.type}'"
        )
    return SchemaNode(type="object", properties=dict(value))


class SchemaAssembler:
    """Fold fragments into an object-level block.

    ``required`` stays on each property node; the assembled object node
    never carries a list of required names.
    """

    def assemble(self, fragments: Fragment | Iterable[Fragment]) -> AssembledBlock:
        """Assemble fragments in order.

        Args:
            fragments: One fragment or an iterable of fragments.

        Returns:
            The assembled block.

        Raises:
            MalformedDeclarationError: If two fragments share a name.
        """
        if isinstance(fragments, Fragment):
            fragments = (fragments,)

        properties: dict[str, SchemaNode] = {}
        rules: list[ValidationRule] = []
        for fragment in fragments:
            if fragment.name in properties:
                raise MalformedDeclarationError(
                    "Duplicate field name", field_name=fragment.name
                )
            properties[fragment.name] = fragment.node
            rules.append(fragment.rule)

        return AssembledBlock(
            node=as_object_node(properties),
            descriptor=ValidationDescriptor(rules=tuple(rules)),
        )
