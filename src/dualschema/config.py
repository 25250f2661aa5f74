"""Compiler configuration for dualschema.

Settings are read from ``DUALSCHEMA_`` environment variables (or a
``.env`` file) and may be overridden explicitly.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dualschema.compiler.declarations import TypeSpec
from dualschema.compiler.type_mapper import (
    DEFAULT_DATE_EXAMPLE,
    DEFAULT_DATETIME_EXAMPLE,
    TypeMapper,
)
from dualschema.errors import MalformedDeclarationError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CompilerSettings(BaseSettings):
    """Configuration for SchemaRegistry compilation.

    Can be loaded from environment variables with DUALSCHEMA_ prefix.
    ``type_defaults`` is read as JSON, e.g.
    ``DUALSCHEMA_TYPE_DEFAULTS='{"uuid": {"example": "82b557d1-..."}}'``.

    Example:
        >>> # From environment
        >>> settings = CompilerSettings()
        >>>
        >>> # Explicit
        >>> settings = CompilerSettings(
        ...     datetime_example="2024-01-01T00:00:00",
        ...     type_defaults={"decimal": {"example": 9.99}},
        ... )
    """

    model_config = SettingsConfigDict(
        env_prefix="DUALSCHEMA_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    date_example: str = Field(
        default=DEFAULT_DATE_EXAMPLE,
        description="Example injected into date fields without one",
    )
    datetime_example: str = Field(
        default=DEFAULT_DATETIME_EXAMPLE,
        description="Example injected into datetime fields without one",
    )
    type_defaults: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Default options per semantic type, below explicit field options",
    )
    log_level: LogLevel = Field(
        default="WARNING",
        description="Minimum log level",
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON",
    )

    @field_validator("type_defaults")
    @classmethod
    def validate_type_names(cls, v: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
        """Ensure every key names a known semantic type."""
        for type_name in v:
            try:
                TypeSpec.parse(type_name)
            except MalformedDeclarationError as e:
                raise ValueError(e.user_message) from e
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept lowercase level names."""
        return v.upper() if isinstance(v, str) else v

    def type_mapper(
        self, type_defaults: dict[str, dict[str, Any]] | None = None
    ) -> TypeMapper:
        """Build a TypeMapper from these settings.

        Args:
            type_defaults: Per-call overrides layered over the configured
                type defaults.
        """
        merged: dict[str, dict[str, Any]] = {
            name: dict(options) for name, options in self.type_defaults.items()
        }
        for name, options in (type_defaults or {}).items():
            merged[name] = {**merged.get(name, {}), **options}

        return TypeMapper(
            merged,
            date_example=self.date_example,
            datetime_example=self.datetime_example,
        )
