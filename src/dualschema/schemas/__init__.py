"""Schema models for dualschema.

This module exports the compiler's output models:
- SchemaNode: Documentation tree node
- ValidationRule / ValidationDescriptor: Validation engine input
- CompiledSchema: Immutable (descriptor, documentation) pair
- EndpointDescriptor: Documentation renderer input
"""

from __future__ import annotations

from dualschema.schemas.compiled_schema import CompiledSchema
from dualschema.schemas.endpoint import EndpointDescriptor
from dualschema.schemas.schema_node import NodeType, SchemaNode
from dualschema.schemas.validation import (
    ValidationDescriptor,
    ValidationRule,
    ValidationType,
)

__all__: list[str] = [
    "CompiledSchema",
    "EndpointDescriptor",
    "NodeType",
    "SchemaNode",
    "ValidationDescriptor",
    "ValidationRule",
    "ValidationType",
]
