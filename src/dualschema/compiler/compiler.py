"""Schema compiler for dualschema.

This module implements the recursive-descent driver that runs one
declaration block through the pipeline:

    Parser -> Type Mapper -> Nested Resolver -> Assembler

Every recursion level returns a uniform object block, so a bare field,
a block of fields and an inline nested block all produce the same
``{type: object, properties: {...}}`` shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dualschema.compiler.assembler import AssembledBlock, Fragment, SchemaAssembler
from dualschema.compiler.declarations import (
    Declaration,
    EmbedSpec,
    FieldSpec,
    SemanticType,
)
from dualschema.compiler.parser import parse_declarations
from dualschema.compiler.resolver import EmbedResolver
from dualschema.compiler.type_mapper import TypeMapper
from dualschema.errors import MalformedDeclarationError
from dualschema.schemas.compiled_schema import CompiledSchema

if TYPE_CHECKING:
    from dualschema.registry import SchemaRegistry


class SchemaCompiler:
    """Compile declaration blocks into CompiledSchema pairs.

    The compiler reads embedded schemas from the registry but never
    writes to it; storing the result is the registry's job.

    Args:
        registry: Registry consulted for embedded schemas.
        mapper: Type mapper. Defaults to a TypeMapper with built-in defaults.
        assembler: Schema assembler.

    Example:
        >>> compiler = SchemaCompiler(registry)
        >>> compiled = compiler.compile("User", [field("name", "string")])
        >>> compiled.documentation_schema.to_openapi()
        {'type': 'object', 'properties': {'name': {'type': 'string', 'required': False}}, 'required': False}
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        mapper: TypeMapper | None = None,
        assembler: SchemaAssembler | None = None,
    ) -> None:
        self.mapper = mapper or TypeMapper()
        self.assembler = assembler or SchemaAssembler()
        self.resolver = EmbedResolver(registry)

    def compile(self, name: str, declarations: Any) -> CompiledSchema:
        """Compile a declaration block.

        Args:
            name: Name of the schema.
            declarations: One raw declaration or a block of them.

        Returns:
            The compiled (validation descriptor, documentation schema) pair.

        Raises:
            CompilationError: If any declaration cannot be compiled.
        """
        block = self.compile_block(parse_declarations(declarations))
        return CompiledSchema(
            name=name,
            validation_descriptor=block.descriptor,
            documentation_schema=block.node,
        )

    def compile_block(self, declarations: tuple[Declaration, ...]) -> AssembledBlock:
        """Compile parsed declarations into one object block."""
        return self.assembler.assemble(
            self.compile_declaration(declaration) for declaration in declarations
        )

    def compile_declaration(self, declaration: Declaration) -> Fragment:
        """Compile one parsed declaration, recursing into inline blocks."""
        if isinstance(declaration, EmbedSpec):
            return self.resolver.resolve_embed(declaration)

        if isinstance(declaration, FieldSpec):
            if declaration.type.semantic_type is SemanticType.REFERENCE:
                options = self.mapper.resolve_options(declaration)
                return self.resolver.resolve_reference(declaration, options)

            nested = self.compile_block(declaration.fields) if declaration.fields else None
            return self.mapper.map_field(declaration, nested)

        raise MalformedDeclarationError(f"Unrecognized declaration {declaration!r}")
