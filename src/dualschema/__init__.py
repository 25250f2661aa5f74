"""dualschema - dual-schema compiler.

Compiles one ordered list of field declarations into two artifacts that
always agree: a validation descriptor for the validation engine and a
JSON-Schema/OpenAPI compatible documentation tree.

Example:
    >>> from dualschema import SchemaRegistry, embeds_one, field, required
    >>> registry = SchemaRegistry()
    >>> registry.compile("User", [field("first_name", "string"), field("age", "integer")])
    >>> registry.compile("UserResponse", embeds_one("data", "User"))
    >>> registry.freeze()
"""

from __future__ import annotations

__version__ = "0.1.0"

from dualschema.binding import EndpointBinder, bind_controller
from dualschema.compiler import (
    SchemaCompiler,
    SemanticType,
    TypeMapper,
    array,
    embeds_many,
    embeds_one,
    field,
    optional,
    parse_declarations,
    required,
)
from dualschema.config import CompilerSettings
from dualschema.errors import (
    CompilationError,
    ConfigurationError,
    DecimalValueNotAllowedError,
    DualSchemaError,
    MalformedDeclarationError,
    RegistryFrozenError,
    SchemaNotFoundError,
    UnknownSchemaReferenceError,
    UnresolvedOptionValueError,
    UnsupportedSubtypeError,
)
from dualschema.export import (
    build_openapi_document,
    endpoint_operation,
    export_documentation_schemas,
    export_openapi_document,
    export_validation_descriptors,
)
from dualschema.loader import DeclarationDocument, load_document
from dualschema.observability import configure_logging
from dualschema.registry import SchemaRegistry, SchemaState
from dualschema.schemas import (
    CompiledSchema,
    EndpointDescriptor,
    SchemaNode,
    ValidationDescriptor,
    ValidationRule,
)

__all__: list[str] = [
    "__version__",
    # Declaration surface
    "required",
    "optional",
    "field",
    "embeds_one",
    "embeds_many",
    "array",
    "SemanticType",
    "parse_declarations",
    # Compilation
    "SchemaCompiler",
    "TypeMapper",
    "SchemaRegistry",
    "SchemaState",
    "CompilerSettings",
    # Models
    "SchemaNode",
    "ValidationRule",
    "ValidationDescriptor",
    "CompiledSchema",
    "EndpointDescriptor",
    # Binding and export
    "EndpointBinder",
    "bind_controller",
    "endpoint_operation",
    "build_openapi_document",
    "export_documentation_schemas",
    "export_validation_descriptors",
    "export_openapi_document",
    "DeclarationDocument",
    "load_document",
    "configure_logging",
    # Errors
    "DualSchemaError",
    "CompilationError",
    "MalformedDeclarationError",
    "UnresolvedOptionValueError",
    "UnsupportedSubtypeError",
    "DecimalValueNotAllowedError",
    "UnknownSchemaReferenceError",
    "SchemaNotFoundError",
    "RegistryFrozenError",
    "ConfigurationError",
]
