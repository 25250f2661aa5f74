"""Declaration file loading for dualschema.

A declaration file is a YAML document with two top-level sections:

    schemas:
      User:
        - field: first_name
          type: string
        - field: age
          type: integer
      UserResponse:
        - embeds_one: data
          schema: User

    controllers:
      - name: Users
        path: /users
        tags: [Users]
        default_response_schema: UserResponse
        endpoints:
          - action: create
            name: create_user
            summary: Creates a user
            request:
              - required: first_name
                type: string

Schemas are compiled in document order, so embedded schemas must be
listed before the schemas that embed them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dualschema.errors import ConfigurationError


class EndpointSpec(BaseModel):
    """One bound controller action.

    Attributes:
        action: create, update, index, show, delete or a custom action.
        name: Name of the inline request schema (create, update, custom).
        summary: Operation summary.
        request: Inline request body declarations.
        response_schema: Registry name of the response schema.
        response_status: Status code the response is documented under.
        callback_schemas: Callback schema names, or a mapping of callback
            title to schema name.
        open_api_opts: Extra operation keys merged verbatim.
        method: HTTP method of a custom action.
        path: Path of a custom action, relative to the controller path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: str = Field(..., min_length=1, description="Controller action")
    name: str | None = Field(default=None, description="Request schema name")
    summary: str = Field(default="", description="Operation summary")
    request: Any = Field(default=None, description="Request body declarations")
    response_schema: str | None = Field(default=None, description="Response schema name")
    response_status: int = Field(default=201, ge=100, le=599, description="Response status")
    callback_schemas: list[str] | dict[str, str] | None = Field(
        default=None,
        description="Callback schemas",
    )
    open_api_opts: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra OpenAPI operation keys",
    )
    method: str | None = Field(default=None, description="HTTP method")
    path: str | None = Field(default=None, description="Relative path")


class ControllerSpec(BaseModel):
    """A group of endpoints sharing tags, defaults and a base path."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Controller name")
    path: str = Field(default="", description="Base path")
    tags: list[str] = Field(default_factory=list, description="Operation tags")
    default_response_schema: str | None = Field(
        default=None,
        description="Response schema used when an endpoint names none",
    )
    default_callback_schema: str | None = Field(
        default=None,
        description="Callback schema used when an endpoint names none",
    )
    endpoints: list[EndpointSpec] = Field(default_factory=list, description="Endpoints")


class DeclarationDocument(BaseModel):
    """Parsed declaration file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = Field(default="API", description="Document title")
    version: str = Field(default="1.0.0", description="Document version")
    schemas: dict[str, Any] = Field(
        default_factory=dict,
        description="Schema name to declaration list, in compile order",
    )
    controllers: list[ControllerSpec] = Field(
        default_factory=list,
        description="Controllers to bind",
    )

    @field_validator("schemas")
    @classmethod
    def validate_schema_blocks(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Ensure every schema carries a declaration list or mapping."""
        for name, declarations in v.items():
            if not isinstance(declarations, (list, dict)):
                raise ValueError(
                    f"Schema '{name}' must be a list of declarations, "
                    f"got {type(declarations).__name__}"
                )
        return v


def load_document(path: str | Path) -> DeclarationDocument:
    """Load and validate a declaration file.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed document.

    Raises:
        ConfigurationError: If the file is missing, is not valid YAML or
            does not have the expected shape.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError("Declaration file not found", file_path=str(file_path))

    try:
        data = yaml.safe_load(file_path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(
            "Invalid YAML",
            file_path=str(file_path),
            internal_details=str(e),
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping at the top level, got {type(data).__name__}",
            file_path=str(file_path),
        )

    try:
        return DeclarationDocument.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field_path = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(
            first["msg"],
            file_path=str(file_path),
            field_path=field_path or None,
            internal_details=str(e),
        ) from e
