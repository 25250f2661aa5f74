"""End-to-end tests compiling the users declaration file.

The users file declares a User schema, response wrappers embedding it
and a Users controller with create, update, index, show and delete
actions. These tests check the rendered OpenAPI document and the
validation descriptors handed to the validation engine.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from dualschema import (
    CompilerSettings,
    SchemaRegistry,
    bind_controller,
    export_openapi_document,
    load_document,
)
from dualschema.export import CALLBACK_ACCEPTED_DESCRIPTION

pytestmark = pytest.mark.integration

USER_PROPERTIES = {
    "first_name": {"type": "string", "required": False},
    "last_name": {"type": "string", "required": False},
    "age": {"type": "integer", "required": False},
}

USER_SCHEMA = {"type": "object", "properties": USER_PROPERTIES, "required": False}


def json_schema(media: dict[str, Any]) -> dict[str, Any]:
    """Schema of the JSON media type entry."""
    return media["content"]["application/json"]["schema"]  # type: ignore[no-any-return]


@pytest.fixture
def openapi(users_yaml: Path, settings: CompilerSettings, tmp_path: Path) -> dict[str, Any]:
    """OpenAPI document exported from the users file."""
    output = tmp_path / "openapi.json"
    document = export_openapi_document(users_yaml, output, settings)
    assert json.loads(output.read_text()) == document
    return document


@pytest.fixture
def bound_registry(users_yaml: Path, settings: CompilerSettings) -> SchemaRegistry:
    """Frozen registry with the users schemas and request schemas."""
    document = load_document(users_yaml)
    registry = SchemaRegistry(settings)
    registry.compile_all(document.schemas)
    for controller in document.controllers:
        bind_controller(registry, controller)
    registry.freeze()
    return registry


class TestUsersOpenapi:
    """Tests for the exported users document."""

    def test_info_and_paths(self, openapi: dict[str, Any]) -> None:
        """The document carries the file's title and the controller routes."""
        assert openapi["info"] == {"title": "My App", "version": "1.0.0"}
        assert sorted(openapi["paths"]["/users"]) == ["get", "post"]
        assert sorted(openapi["paths"]["/users/{id}"]) == ["delete", "get", "put"]

    def test_create_request_body(self, openapi: dict[str, Any]) -> None:
        """Request properties keep order, options and per-field required."""
        schema = json_schema(openapi["paths"]["/users"]["post"]["requestBody"])

        assert schema["type"] == "object"
        assert schema["required"] is False
        assert list(schema["properties"]) == ["first_name", "age", "last_name", "role"]
        assert schema["properties"] == {
            "first_name": {
                "type": "string",
                "description": "first name of the user",
                "required": True,
            },
            "age": {"type": "integer", "minimum": 20, "required": True},
            "last_name": {"type": "string", "required": False},
            "role": {
                "type": "string",
                "enum": ["admin", "normal"],
                "default": "normal",
                "required": False,
            },
        }

    def test_create_response_embeds_user(self, openapi: dict[str, Any]) -> None:
        """The default response documents the embedded user under status 201."""
        responses = openapi["paths"]["/users"]["post"]["responses"]
        assert list(responses) == ["201"]
        assert json_schema(responses["201"]) == {
            "type": "object",
            "properties": {"data": USER_SCHEMA},
            "required": False,
        }

    def test_create_callback(self, openapi: dict[str, Any]) -> None:
        """The default callback is documented as a POST path item."""
        callback = openapi["paths"]["/users"]["post"]["callbacks"]["Callback"][""]["post"]
        assert json_schema(callback["requestBody"]) == {
            "type": "object",
            "properties": {"user": USER_SCHEMA},
            "required": False,
        }
        assert callback["responses"]["200"]["description"] == CALLBACK_ACCEPTED_DESCRIPTION

    def test_update_merges_open_api_opts(self, openapi: dict[str, Any]) -> None:
        """Extra operation keys are merged into the update operation."""
        operation = openapi["paths"]["/users/{id}"]["put"]
        assert operation["parameters"][0]["name"] == "id"
        assert operation["parameters"][0]["example"] == 1001
        first_name = json_schema(operation["requestBody"])["properties"]["first_name"]
        assert first_name == {"type": "string", "nullable": False, "required": True}

    def test_index_lists_users(self, openapi: dict[str, Any]) -> None:
        """The index response wraps users in an array."""
        operation = openapi["paths"]["/users"]["get"]
        assert "callbacks" not in operation
        assert json_schema(operation["responses"]["201"])["properties"]["data"] == {
            "type": "array",
            "items": USER_SCHEMA,
            "required": False,
        }

    def test_show_and_delete(self, openapi: dict[str, Any]) -> None:
        """show has no callbacks and delete keeps the default callback."""
        member = openapi["paths"]["/users/{id}"]
        assert "callbacks" not in member["get"]
        assert list(member["delete"]["callbacks"]) == ["Callback"]

    def test_components(self, openapi: dict[str, Any]) -> None:
        """Every compiled schema is published as a component."""
        assert list(openapi["components"]["schemas"]) == [
            "User",
            "UserResponse",
            "UserIndexResponse",
            "Callback",
            "Users.CreateUser",
            "Users.UpdateUser",
        ]
        assert openapi["components"]["schemas"]["User"] == USER_SCHEMA


class TestUsersValidation:
    """Tests for the descriptors handed to the validation engine."""

    def test_create_descriptor(self, bound_registry: SchemaRegistry) -> None:
        """Validation rules carry constraints but no documentation options."""
        descriptor = bound_registry.validation_descriptor_of("Users.CreateUser")

        assert descriptor.field_names() == ["first_name", "age", "last_name", "role"]
        assert descriptor.required_fields() == ["first_name", "age"]

        first_name = descriptor.get("first_name")
        age = descriptor.get("age")
        role = descriptor.get("role")
        assert first_name is not None and age is not None and role is not None
        assert first_name.constraints == {}
        assert age.constraints == {"minimum": 20}
        assert role.type == "enum"
        assert role.constraints == {"values": ("admin", "normal"), "default": "normal"}

    def test_documentation_and_validation_agree(self, bound_registry: SchemaRegistry) -> None:
        """Both artifacts of every schema list the same fields."""
        for schema in bound_registry.schemas():
            properties = schema.documentation_schema.properties or {}
            assert list(properties) == schema.validation_descriptor.field_names()
            for rule in schema.validation_descriptor.rules:
                assert properties[rule.name].required == rule.required

    def test_registry_is_frozen(self, bound_registry: SchemaRegistry) -> None:
        """The built registry is read-only."""
        assert bound_registry.frozen is True
