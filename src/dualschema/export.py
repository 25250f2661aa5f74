"""OpenAPI export functions for dualschema.

This module renders compiled documentation trees for publication:
- export_documentation_schemas: every registry schema as JSON
- build_openapi_document: an OpenAPI 3 document from endpoint descriptors
- export_openapi_document: declaration file to OpenAPI document
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from dualschema.binding import bind_controller
from dualschema.config import CompilerSettings
from dualschema.loader import load_document
from dualschema.registry import SchemaRegistry
from dualschema.schemas.endpoint import EndpointDescriptor
from dualschema.schemas.schema_node import SchemaNode

OPENAPI_VERSION = "3.0.3"
JSON_CONTENT_TYPE = "application/json"
CALLBACK_ACCEPTED_DESCRIPTION = "Your server returns this code if it accepts the callback"


def _media(node: SchemaNode) -> dict[str, Any]:
    return {JSON_CONTENT_TYPE: {"schema": node.to_openapi()}}


def callback_path_item(node: SchemaNode) -> dict[str, Any]:
    """Render a callback as a path item whose POST body is ``node``."""
    return {
        "post": {
            "requestBody": {"content": _media(node)},
            "responses": {"200": {"description": CALLBACK_ACCEPTED_DESCRIPTION}},
        }
    }


def endpoint_operation(endpoint: EndpointDescriptor) -> dict[str, Any]:
    """Render one endpoint descriptor as an OpenAPI operation.

    ``open_api_opts`` are merged last and override generated keys.

    Example:
        >>> endpoint_operation(descriptor)["responses"]["201"]["content"]
        {'application/json': {'schema': {...}}}
    """
    operation: dict[str, Any] = {"summary": endpoint.summary}
    if endpoint.tags:
        operation["tags"] = list(endpoint.tags)

    if endpoint.request_body_schema is not None:
        operation["requestBody"] = {
            "description": "",
            "content": _media(endpoint.request_body_schema),
        }

    operation["responses"] = {
        str(status): {"description": "", "content": _media(node)}
        for status, node in endpoint.response_schemas.items()
    }

    if endpoint.callback_schemas:
        operation["callbacks"] = {
            title: {"": callback_path_item(node)}
            for title, node in endpoint.callback_schemas.items()
        }

    operation.update(endpoint.open_api_opts)
    return operation


def build_openapi_document(
    endpoints: Iterable[EndpointDescriptor],
    registry: SchemaRegistry | None = None,
    *,
    title: str = "API",
    version: str = "1.0.0",
) -> dict[str, Any]:
    """Assemble an OpenAPI document.

    Args:
        endpoints: Endpoint descriptors, in path order.
        registry: Registry whose schemas are published under
            ``components.schemas``.
        title: Document title.
        version: API version.

    Returns:
        The OpenAPI document as a dictionary.
    """
    paths: dict[str, dict[str, Any]] = {}
    for endpoint in endpoints:
        paths.setdefault(endpoint.path, {})[endpoint.method] = endpoint_operation(endpoint)

    document: dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": {"title": title, "version": version},
        "paths": paths,
    }
    if registry is not None:
        document["components"] = {"schemas": export_documentation_schemas(registry)}
    return document


def export_documentation_schemas(
    registry: SchemaRegistry,
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export every compiled documentation schema, keyed by name.

    Args:
        registry: Registry to export.
        output_path: Optional path to write the schemas to. If provided,
            creates parent directories as needed.

    Returns:
        Schema name to OpenAPI schema dictionary.
    """
    schemas = {
        schema.name: schema.documentation_schema.to_openapi()
        for schema in registry.schemas()
    }

    if output_path is not None:
        _write_json_file(schemas, output_path)

    return schemas


def export_validation_descriptors(
    registry: SchemaRegistry,
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export every validation descriptor, keyed by schema name."""
    descriptors = {
        schema.name: schema.validation_descriptor.model_dump(mode="json")
        for schema in registry.schemas()
    }

    if output_path is not None:
        _write_json_file(descriptors, output_path)

    return descriptors


def export_openapi_document(
    source: Path | str,
    output_path: Path | str | None = None,
    settings: CompilerSettings | None = None,
) -> dict[str, Any]:
    """Compile a declaration file and render its OpenAPI document.

    Schemas are compiled in document order, then controllers are bound
    and the registry is frozen.

    Args:
        source: Path to the declaration file.
        output_path: Optional path to write the document to.
        settings: Compiler settings.

    Raises:
        ConfigurationError: If the file cannot be loaded.
        CompilationError: If a schema cannot be compiled.
    """
    document = load_document(source)
    registry = SchemaRegistry(settings)
    registry.compile_all(document.schemas)

    endpoints: list[EndpointDescriptor] = []
    for controller in document.controllers:
        endpoints.extend(bind_controller(registry, controller))
    registry.freeze()

    openapi = build_openapi_document(
        endpoints,
        registry,
        title=document.title,
        version=document.version,
    )

    if output_path is not None:
        _write_json_file(openapi, output_path)

    return openapi


def _write_json_file(data: dict[str, Any], path: Path | str) -> None:
    """Write data to a pretty-printed JSON file."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))
