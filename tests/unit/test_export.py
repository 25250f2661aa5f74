"""Unit tests for OpenAPI rendering and export."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dualschema import (
    EndpointBinder,
    SchemaRegistry,
    build_openapi_document,
    endpoint_operation,
    export_documentation_schemas,
    export_validation_descriptors,
    required,
)
from dualschema.export import CALLBACK_ACCEPTED_DESCRIPTION, OPENAPI_VERSION


@pytest.fixture
def users(user_registry: SchemaRegistry) -> EndpointBinder:
    """Binder for the users controller."""
    return EndpointBinder(
        user_registry,
        namespace="Users",
        path="/users",
        tags=["Users"],
        default_response_schema="UserResponse",
        default_callback_schema="Callback",
    )


class TestEndpointOperation:
    """Tests for endpoint_operation."""

    def test_create_operation(self, users: EndpointBinder, user_registry: SchemaRegistry) -> None:
        """A create operation documents request, response and callback."""
        endpoint = users.create(
            "create_user", [required("first_name", "string")], summary="Creates a user"
        )
        operation = endpoint_operation(endpoint)

        assert operation["summary"] == "Creates a user"
        assert operation["tags"] == ["Users"]
        assert operation["requestBody"] == {
            "description": "",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {"first_name": {"type": "string", "required": True}},
                        "required": False,
                    }
                }
            },
        }
        assert operation["responses"] == {
            "201": {
                "description": "",
                "content": {
                    "application/json": {
                        "schema": user_registry.documentation_of("UserResponse").to_openapi()
                    }
                },
            }
        }

    def test_callback_path_item(self, users: EndpointBinder, user_registry: SchemaRegistry) -> None:
        """Callbacks are keyed by title with one POST path item."""
        operation = endpoint_operation(users.delete(summary="Deletes a user"))

        assert operation["callbacks"] == {
            "Callback": {
                "": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "application/json": {
                                    "schema": user_registry.documentation_of(
                                        "Callback"
                                    ).to_openapi()
                                }
                            }
                        },
                        "responses": {"200": {"description": CALLBACK_ACCEPTED_DESCRIPTION}},
                    }
                }
            }
        }

    def test_index_has_no_body_or_callbacks(self, users: EndpointBinder) -> None:
        """Operations without request body or callbacks omit those keys."""
        operation = endpoint_operation(users.index(response_schema="UserIndexResponse"))
        assert "requestBody" not in operation
        assert "callbacks" not in operation
        schema = operation["responses"]["201"]["content"]["application/json"]["schema"]
        assert schema["properties"]["data"]["type"] == "array"

    def test_open_api_opts_merge_last(self, users: EndpointBinder) -> None:
        """open_api_opts add keys and override generated ones."""
        parameters = [{"name": "id", "in": "path", "required": True}]
        operation = endpoint_operation(
            users.show(
                summary="Lists a single user",
                open_api_opts={"parameters": parameters, "summary": "Shows a user"},
            )
        )
        assert operation["parameters"] == parameters
        assert operation["summary"] == "Shows a user"

    def test_untagged_operation(self, user_registry: SchemaRegistry) -> None:
        """Operations without tags omit the key."""
        operation = endpoint_operation(EndpointBinder(user_registry).index())
        assert "tags" not in operation
        assert operation["responses"] == {}


class TestBuildOpenapiDocument:
    """Tests for build_openapi_document."""

    def test_groups_operations_by_path(
        self, users: EndpointBinder, user_registry: SchemaRegistry
    ) -> None:
        """Operations sharing a path share one path item."""
        users.create("create_user", [required("first_name", "string")])
        users.index(response_schema="UserIndexResponse")
        users.show()
        users.delete()

        document = build_openapi_document(
            users.endpoints, user_registry, title="My App", version="2.0.0"
        )

        assert document["openapi"] == OPENAPI_VERSION
        assert document["info"] == {"title": "My App", "version": "2.0.0"}
        assert sorted(document["paths"]["/users"]) == ["get", "post"]
        assert sorted(document["paths"]["/users/{id}"]) == ["delete", "get"]
        assert "Users.CreateUser" in document["components"]["schemas"]

    def test_without_registry(self, users: EndpointBinder) -> None:
        """Without a registry no components are published."""
        users.index()
        document = build_openapi_document(users.endpoints)
        assert "components" not in document
        assert document["info"] == {"title": "API", "version": "1.0.0"}


class TestExportSchemas:
    """Tests for the registry exporters."""

    def test_documentation_schemas(self, user_registry: SchemaRegistry) -> None:
        """Every compiled schema is exported in order."""
        schemas = export_documentation_schemas(user_registry)
        assert list(schemas) == ["User", "UserResponse", "UserIndexResponse", "Callback"]
        assert schemas["User"]["properties"]["first_name"] == {
            "type": "string",
            "required": False,
        }

    def test_documentation_schemas_to_file(
        self, user_registry: SchemaRegistry, tmp_path: Path
    ) -> None:
        """Writing creates parent directories."""
        output = tmp_path / "build" / "schemas.json"
        schemas = export_documentation_schemas(user_registry, output)
        assert json.loads(output.read_text()) == schemas

    def test_validation_descriptors(self, user_registry: SchemaRegistry, tmp_path: Path) -> None:
        """Validation descriptors are exported as JSON."""
        output = tmp_path / "validation.json"
        descriptors = export_validation_descriptors(user_registry, output)

        user_rules = descriptors["User"]["rules"]
        assert [rule["name"] for rule in user_rules] == ["first_name", "last_name", "age"]
        embed = descriptors["UserIndexResponse"]["rules"][0]
        assert embed["type"] == "embed"
        assert embed["many"] is True
        assert json.loads(output.read_text()) == descriptors
