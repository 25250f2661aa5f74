"""Compiler module for dualschema.

This module exports the compilation pipeline:
- parse_declarations: Field declaration parser
- TypeMapper: Semantic type to documentation/validation mapping
- EmbedResolver: Nested schema resolution
- SchemaAssembler: Object-level assembly
- SchemaCompiler: Recursive driver tying the stages together
- required/optional/field/embeds_one/embeds_many/array: Declaration helpers
"""

from __future__ import annotations

from dualschema.compiler.assembler import (
    AssembledBlock,
    Fragment,
    SchemaAssembler,
    as_object_node,
)
from dualschema.compiler.compiler import SchemaCompiler
from dualschema.compiler.declarations import (
    Declaration,
    EmbedsMany,
    EmbedsOne,
    EmbedSpec,
    FieldSpec,
    OptionalField,
    PlainField,
    RequiredField,
    Requiredness,
    SemanticType,
    TypeSpec,
)
from dualschema.compiler.dsl import (
    array,
    embeds_many,
    embeds_one,
    field,
    optional,
    required,
)
from dualschema.compiler.parser import parse_declaration, parse_declarations
from dualschema.compiler.resolver import EmbedResolver
from dualschema.compiler.type_mapper import (
    DEFAULT_DATE_EXAMPLE,
    DEFAULT_DATETIME_EXAMPLE,
    SUPPORTED_ARRAY_SUBTYPES,
    TypeMapper,
)

__all__: list[str] = [
    # Pipeline
    "SchemaCompiler",
    "parse_declarations",
    "parse_declaration",
    "TypeMapper",
    "EmbedResolver",
    "SchemaAssembler",
    "as_object_node",
    "Fragment",
    "AssembledBlock",
    # Declarations
    "Declaration",
    "FieldSpec",
    "RequiredField",
    "OptionalField",
    "PlainField",
    "EmbedSpec",
    "EmbedsOne",
    "EmbedsMany",
    "SemanticType",
    "Requiredness",
    "TypeSpec",
    # Declaration helpers
    "required",
    "optional",
    "field",
    "embeds_one",
    "embeds_many",
    "array",
    # Constants
    "DEFAULT_DATE_EXAMPLE",
    "DEFAULT_DATETIME_EXAMPLE",
    "SUPPORTED_ARRAY_SUBTYPES",
]
