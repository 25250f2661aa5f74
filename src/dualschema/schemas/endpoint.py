"""Endpoint descriptor models for dualschema.

These are the documentation renderer's input: one descriptor per bound
controller action, aggregating the compiled documentation trees it needs.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dualschema.schemas.schema_node import SchemaNode


class EndpointDescriptor(BaseModel):
    """Documentation contract of one endpoint.

    Attributes:
        action: Controller action the descriptor belongs to.
        method: HTTP method the action is routed to.
        path: Route of the action.
        summary: Short description of the operation.
        tags: Grouping tags.
        request_body_schema: Request body documentation, if the action
            accepts one.
        validation_schema: Registry name of the schema validating the
            request body.
        response_schemas: Documentation per HTTP status code.
        callback_schemas: Documentation per callback name.
        open_api_opts: Extra operation keys merged verbatim into the
            rendered operation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: str = Field(..., min_length=1, description="Controller action")
    method: str = Field(default="post", description="HTTP method")
    path: str = Field(default="/", description="Route path")
    summary: str = Field(default="", description="Operation summary")
    tags: tuple[str, ...] = Field(default=(), description="Operation tags")
    request_body_schema: SchemaNode | None = Field(
        default=None,
        description="Request body documentation",
    )
    validation_schema: str | None = Field(
        default=None,
        description="Registry name of the request validation schema",
    )
    response_schemas: dict[int, SchemaNode] = Field(
        default_factory=dict,
        description="Response documentation per status code",
    )
    callback_schemas: dict[str, SchemaNode] = Field(
        default_factory=dict,
        description="Callback documentation per callback name",
    )
    open_api_opts: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra OpenAPI operation keys",
    )
