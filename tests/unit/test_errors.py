"""Unit tests for the dualschema exception hierarchy."""

from __future__ import annotations

from decimal import Decimal

import pytest

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


class TestDualSchemaError:
    """Tests for the base DualSchemaError exception."""

    def test_stores_user_message(self) -> None:
        """DualSchemaError should store and expose user_message."""
        error = DualSchemaError("Something went wrong")
        assert error.user_message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_can_be_raised_and_caught(self) -> None:
        """DualSchemaError should be raisable and catchable."""
        with pytest.raises(DualSchemaError) as exc_info:
            raise DualSchemaError("Test raise", internal_details="debug info")
        assert exc_info.value.user_message == "Test raise"


class TestCompilationErrors:
    """Tests for the compile-time taxonomy."""

    @pytest.mark.parametrize(
        "error",
        [
            MalformedDeclarationError("Missing type"),
            UnresolvedOptionValueError("age", "minimum", object()),
            UnsupportedSubtypeError("flags", "boolean", ["string", "integer", "object"]),
            DecimalValueNotAllowedError("price", "example", Decimal("1.5")),
            UnknownSchemaReferenceError("User"),
        ],
    )
    def test_inherits_from_compilation_error(self, error: CompilationError) -> None:
        """Every compile-time error is a CompilationError."""
        assert isinstance(error, CompilationError)
        assert isinstance(error, DualSchemaError)

    def test_malformed_declaration_includes_field(self) -> None:
        """MalformedDeclarationError should name the offending field."""
        error = MalformedDeclarationError("Missing type", field_name="age")
        assert error.field_name == "age"
        assert "field 'age'" in error.user_message

    def test_unresolved_option_value_attributes(self) -> None:
        """UnresolvedOptionValueError should expose field, option and value."""
        value = object()
        error = UnresolvedOptionValueError("age", "minimum", value)
        assert error.field_name == "age"
        assert error.option == "minimum"
        assert error.value is value
        assert "literal" in error.user_message

    def test_unsupported_subtype_lists_supported(self) -> None:
        """UnsupportedSubtypeError should list supported subtypes."""
        error = UnsupportedSubtypeError("flags", "boolean", ["string", "integer", "object"])
        assert error.subtype == "boolean"
        assert "string, integer, object" in error.user_message

    def test_decimal_value_not_allowed_attributes(self) -> None:
        """DecimalValueNotAllowedError should expose option and value."""
        error = DecimalValueNotAllowedError("price", "maximum", Decimal("10"))
        assert error.option == "maximum"
        assert error.value == Decimal("10")
        assert "Decimal" in error.user_message

    def test_unknown_reference_lists_available(self) -> None:
        """UnknownSchemaReferenceError should list compiled schemas."""
        error = UnknownSchemaReferenceError(
            "Address", field_name="home", available=["User", "Callback"]
        )
        assert error.reference == "Address"
        assert error.available == ["User", "Callback"]
        assert "field 'home'" in error.user_message
        assert "User, Callback" in error.user_message

    def test_unknown_reference_without_available(self) -> None:
        """UnknownSchemaReferenceError should say when nothing is compiled."""
        error = UnknownSchemaReferenceError("Address")
        assert error.available == []
        assert "Available: none" in error.user_message


class TestRegistryErrors:
    """Tests for registry access errors."""

    def test_schema_not_found_is_not_compilation_error(self) -> None:
        """SchemaNotFoundError is a lookup error, not a compile error."""
        error = SchemaNotFoundError("User", [])
        assert isinstance(error, DualSchemaError)
        assert not isinstance(error, CompilationError)
        assert error.schema_name == "User"

    def test_registry_frozen_names_schema(self) -> None:
        """RegistryFrozenError should name the schema being compiled."""
        error = RegistryFrozenError("User")
        assert error.schema_name == "User"
        assert "frozen" in error.user_message


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_includes_file_and_entry(self) -> None:
        """ConfigurationError should include file and entry context."""
        error = ConfigurationError(
            "Invalid YAML", file_path="schemas.yaml", field_path="schemas.User"
        )
        assert error.file_path == "schemas.yaml"
        assert error.field_path == "schemas.User"
        assert "in schemas.yaml" in error.user_message
        assert "entry 'schemas.User'" in error.user_message

    def test_without_context(self) -> None:
        """ConfigurationError without context keeps the plain message."""
        error = ConfigurationError("Invalid YAML")
        assert error.user_message == "Invalid YAML"
