"""Unit tests for nested schema resolution."""

from __future__ import annotations

import pytest

from dualschema.compiler import EmbedResolver, embeds_many, embeds_one, field, required
from dualschema.errors import MalformedDeclarationError, UnknownSchemaReferenceError
from dualschema.registry import SchemaRegistry, SchemaState
from dualschema.schemas import SchemaNode


class TestEmbedsOne:
    """Tests for embeds_one."""

    def test_splices_documentation(self, registry: SchemaRegistry) -> None:
        """embeds_one places the referenced tree under the field name."""
        user = registry.compile("A", field("name", "string"))
        compiled = registry.compile("B", embeds_one("data", "A"))

        assert compiled.documentation_schema == SchemaNode(
            type="object",
            properties={"data": user.documentation_schema},
        )

    def test_accepts_compiled_schema(self, registry: SchemaRegistry) -> None:
        """A compiled schema value can be embedded directly."""
        user = registry.compile("A", field("name", "string"))
        compiled = registry.compile("B", embeds_one("data", user))
        properties = compiled.documentation_schema.properties
        assert properties is not None
        assert properties["data"] == user.documentation_schema

    def test_validation_rule_embeds_descriptor(self, registry: SchemaRegistry) -> None:
        """The embed rule carries the referenced validation descriptor."""
        user = registry.compile("A", required("name", "string"))
        compiled = registry.compile("B", embeds_one("data", "A"))

        rule = compiled.validation_descriptor.get("data")
        assert rule is not None
        assert rule.type == "embed"
        assert rule.many is False
        assert rule.fields == user.validation_descriptor


class TestEmbedsMany:
    """Tests for embeds_many."""

    def test_wraps_in_array(self, user_registry: SchemaRegistry) -> None:
        """embeds_many places the referenced tree under array items."""
        user = user_registry.lookup("User")
        node = user_registry.documentation_of("UserIndexResponse").properties["data"]  # type: ignore[index]

        assert node == SchemaNode(type="array", items=user.documentation_schema)
        assert node.to_openapi()["items"]["properties"]["age"] == {
            "type": "integer",
            "required": False,
        }

    def test_rule_is_many(self, user_registry: SchemaRegistry) -> None:
        """The embed rule of embeds_many is flagged many."""
        rule = user_registry.validation_descriptor_of("UserIndexResponse").get("data")
        assert rule is not None
        assert rule.many is True


class TestUnknownReferences:
    """Tests for UnknownSchemaReferenceError."""

    def test_not_yet_compiled(self, registry: SchemaRegistry) -> None:
        """Embedding a schema compiled later fails."""
        with pytest.raises(UnknownSchemaReferenceError) as exc_info:
            registry.compile("B", embeds_one("data", "A"))
        assert exc_info.value.reference == "A"
        assert exc_info.value.field_name == "data"

    def test_declared_but_not_compiled(self, registry: SchemaRegistry) -> None:
        """A declared schema is not available until compiled."""
        registry.declare("A", field("name", "string"))
        assert registry.state_of("A") is SchemaState.DECLARED
        with pytest.raises(UnknownSchemaReferenceError):
            registry.compile("B", embeds_many("data", "A"))

    def test_self_reference(self, registry: SchemaRegistry) -> None:
        """A schema cannot embed itself."""
        with pytest.raises(UnknownSchemaReferenceError):
            registry.compile("Node", [field("id", "string"), embeds_many("children", "Node")])

    def test_lists_available(self, user_registry: SchemaRegistry) -> None:
        """The error lists the compiled schemas."""
        with pytest.raises(UnknownSchemaReferenceError) as exc_info:
            user_registry.compile("B", embeds_one("data", "Address"))
        assert "User" in exc_info.value.available

    def test_invalid_reference(self, registry: SchemaRegistry) -> None:
        """References must be names or compiled schemas."""
        with pytest.raises(MalformedDeclarationError):
            EmbedResolver(registry).resolve(42, field_name="data")


class TestReferenceFields:
    """Tests for reference typed fields."""

    def test_reference_takes_field_required(self, user_registry: SchemaRegistry) -> None:
        """A reference field uses the referenced tree with its own required flag."""
        compiled = user_registry.compile(
            "Order",
            [
                required("id", "uuid"),
                required("owner", "reference", schema="User", description="Owner"),
            ],
        )
        owner = compiled.documentation_schema.properties["owner"]  # type: ignore[index]
        user = user_registry.documentation_of("User")

        assert owner.required is True
        assert owner.description == "Owner"
        assert owner.properties == user.properties

        rule = compiled.validation_descriptor.get("owner")
        assert rule is not None
        assert rule.type == "embed"
        assert rule.required is True

    def test_unknown_reference_field(self, registry: SchemaRegistry) -> None:
        """A reference to an uncompiled schema fails."""
        with pytest.raises(UnknownSchemaReferenceError):
            registry.compile("Order", ("optional", "owner", "reference", {"schema": "Missing"}))
