"""Custom exception hierarchy for dualschema.

This module defines the exception classes raised while compiling schemas:
- DualSchemaError: Base exception for all dualschema errors
- CompilationError: Raised when a declaration block cannot be compiled
- SchemaNotFoundError / RegistryFrozenError: Registry access errors
- ConfigurationError: Raised when a declaration file cannot be loaded

Every compilation error is a configuration defect. They are raised while
the registry is being built at startup and are never part of request
handling; per-request validation failures are data returned by the
validation engine, not exceptions.
"""

from __future__ import annotations

from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class DualSchemaError(Exception):
    """Base exception for dualschema.

    User-facing messages are safe to display; technical details are
    logged internally.

    Args:
        user_message: Message describing the defect.
        internal_details: Optional technical details for logging only.

    Example:
        >>> raise DualSchemaError(
        ...     "Schema 'User' could not be compiled",
        ...     internal_details="field 'age': minimum=<function <lambda>>",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize DualSchemaError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "dualschema_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class CompilationError(DualSchemaError):
    """Raised when a declaration block cannot be compiled.

    Base class of the compile-time taxonomy. Catch this to treat every
    schema defect as fatal at startup.
    """

    pass


class MalformedDeclarationError(CompilationError):
    """Raised when a declaration is structurally invalid.

    Use this exception when:
    - A declaration is missing its name, type or schema reference
    - The declaration kind or type tag is not recognized
    - Two fields in one block share a name
    - An enum has no values or an object array has no inline block

    Attributes:
        field_name: Name of the offending field, when known.
    """

    def __init__(
        self,
        user_message: str,
        *,
        field_name: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        if field_name:
            user_message = f"{user_message} (field '{field_name}')"
        super().__init__(user_message, internal_details=internal_details)
        self.field_name = field_name


class UnresolvedOptionValueError(CompilationError):
    """Raised when an option value is not a literal at compile time.

    Attributes:
        field_name: Name of the field carrying the option.
        option: Option key.
        value: The rejected value.
    """

    def __init__(
        self,
        field_name: str,
        option: str,
        value: Any,
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = (
            f"Option '{option}' on field '{field_name}' must be a literal value, "
            f"got {type(value).__name__}"
        )
        super().__init__(user_message, internal_details=internal_details)
        self.field_name = field_name
        self.option = option
        self.value = value


class UnsupportedSubtypeError(CompilationError):
    """Raised when an array declares an item type that cannot be documented.

    Attributes:
        field_name: Name of the array field.
        subtype: The rejected item type.
        supported: Item types that are accepted.
    """

    def __init__(
        self,
        field_name: str,
        subtype: str,
        supported: list[str],
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = (
            f"Unsupported subtype '{subtype}' in array field '{field_name}'. "
            f"Supported: {', '.join(supported)}"
        )
        super().__init__(user_message, internal_details=internal_details)
        self.field_name = field_name
        self.subtype = subtype
        self.supported = supported


class DecimalValueNotAllowedError(CompilationError):
    """Raised when a decimal field documents a Decimal object.

    Documentation values must be plain numeric literals, so `example`,
    `minimum` and `maximum` on a decimal field cannot be `Decimal`
    instances.

    Attributes:
        field_name: Name of the decimal field.
        option: Option key holding the Decimal.
        value: The rejected value.
    """

    def __init__(
        self,
        field_name: str,
        option: str,
        value: Any,
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = (
            f"Do not use Decimal values in schema options: field '{field_name}' "
            f"option '{option}' is {value!r}"
        )
        super().__init__(user_message, internal_details=internal_details)
        self.field_name = field_name
        self.option = option
        self.value = value


class UnknownSchemaReferenceError(CompilationError):
    """Raised when an embedding refers to a schema that is not compiled yet.

    Referenced schemas must be compiled before the schemas that embed
    them. The error lists what is available for actionable feedback.

    Attributes:
        reference: Name of the missing schema.
        field_name: Name of the embedding field.
        available: Names already compiled.
    """

    def __init__(
        self,
        reference: str,
        *,
        field_name: str | None = None,
        available: list[str] | None = None,
        internal_details: str | None = None,
    ) -> None:
        available = available or []
        available_str = ", ".join(available) if available else "none"
        location = f" by field '{field_name}'" if field_name else ""
        user_message = (
            f"Schema '{reference}' referenced{location} has not been compiled. "
            f"Available: {available_str}"
        )
        super().__init__(user_message, internal_details=internal_details)
        self.reference = reference
        self.field_name = field_name
        self.available = available


class SchemaNotFoundError(DualSchemaError):
    """Raised when a registry lookup names an unknown schema.

    Attributes:
        schema_name: Name that was looked up.
        available: Names present in the registry.
    """

    def __init__(
        self,
        schema_name: str,
        available: list[str],
        *,
        internal_details: str | None = None,
    ) -> None:
        available_str = ", ".join(available) if available else "none"
        user_message = f"Schema '{schema_name}' not found. Available: {available_str}"
        super().__init__(user_message, internal_details=internal_details)
        self.schema_name = schema_name
        self.available = available


class RegistryFrozenError(DualSchemaError):
    """Raised when compiling into a registry after it has been frozen.

    Attributes:
        schema_name: Name of the schema that was being compiled.
    """

    def __init__(self, schema_name: str) -> None:
        super().__init__(
            f"Cannot compile schema '{schema_name}': registry is frozen"
        )
        self.schema_name = schema_name


class ConfigurationError(DualSchemaError):
    """Raised when a declaration file cannot be read or has the wrong shape.

    Attributes:
        file_path: Path to the declaration file (if known).
        field_path: Dot-separated path to the invalid entry.

    Example:
        >>> raise ConfigurationError(
        ...     "Expected a mapping of schema names",
        ...     file_path="schemas.yaml",
        ...     field_path="schemas",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"entry '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
