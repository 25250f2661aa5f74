"""Compiled schema registry for dualschema.

The registry is built once at startup, in dependency order (embedded
schemas before the schemas that embed them), then frozen. After
``freeze()`` it is read-only and can be shared freely between
request-handling workers without locking.

Each named schema moves through ``DECLARED -> COMPILING -> COMPILED``.
A schema is only visible to embeddings once it reaches COMPILED.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from dualschema.compiler.compiler import SchemaCompiler
from dualschema.compiler.declarations import Declaration
from dualschema.compiler.parser import parse_declarations
from dualschema.config import CompilerSettings
from dualschema.errors import (
    CompilationError,
    RegistryFrozenError,
    SchemaNotFoundError,
)
from dualschema.loader import load_document
from dualschema.observability import get_logger
from dualschema.schemas.compiled_schema import CompiledSchema
from dualschema.schemas.schema_node import SchemaNode
from dualschema.schemas.validation import ValidationDescriptor

logger = get_logger()


class SchemaState(str, Enum):
    """Lifecycle state of a named schema."""

    DECLARED = "declared"
    COMPILING = "compiling"
    COMPILED = "compiled"


class SchemaRegistry:
    """Registry of compiled schemas, keyed by name.

    Args:
        settings: Compiler settings. Defaults to CompilerSettings() loaded
            from the environment.
        type_defaults: Per-type default options layered over the settings'
            type defaults.

    Example:
        >>> registry = SchemaRegistry()
        >>> registry.compile("User", [required("name", "string")])
        >>> registry.compile("UserResponse", [embeds_one("data", "User")])
        >>> registry.freeze()
        >>> registry.documentation_of("UserResponse").properties["data"].type
        'object'
    """

    def __init__(
        self,
        settings: CompilerSettings | None = None,
        *,
        type_defaults: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        self.settings = settings or CompilerSettings()
        self._compiler = SchemaCompiler(self, self.settings.type_mapper(type_defaults))
        self._schemas: dict[str, CompiledSchema] = {}
        self._declarations: dict[str, tuple[Declaration, ...]] = {}
        self._states: dict[str, SchemaState] = {}
        self._frozen = False

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        settings: CompilerSettings | None = None,
        *,
        freeze: bool = True,
    ) -> SchemaRegistry:
        """Build a registry from a YAML declaration file.

        Schemas are compiled in document order.

        Args:
            path: Path to the declaration file.
            settings: Compiler settings.
            freeze: Whether to freeze the registry once compiled.

        Raises:
            ConfigurationError: If the file cannot be loaded.
            CompilationError: If a schema cannot be compiled.
        """
        document = load_document(path)
        registry = cls(settings)
        registry.compile_all(document.schemas)
        if freeze:
            registry.freeze()
        return registry

    @property
    def frozen(self) -> bool:
        """Whether the registry is read-only."""
        return self._frozen

    def declare(self, name: str, declarations: Any) -> None:
        """Record declarations to compile later under ``name``.

        The declarations are parsed immediately, so one-shot iterables can
        be compiled again.

        Raises:
            RegistryFrozenError: If the registry is frozen.
            MalformedDeclarationError: If a declaration is malformed.
        """
        self._check_writable(name)
        self._declarations[name] = parse_declarations(declarations)
        if name not in self._schemas:
            self._states[name] = SchemaState.DECLARED

    def compile(self, name: str, declarations: Any = None) -> CompiledSchema:
        """Compile declarations and store the result under ``name``.

        Recompiling an existing name replaces the prior entry.

        Args:
            name: Schema name.
            declarations: Declaration block. Defaults to the declarations
                recorded with ``declare``.

        Returns:
            The compiled schema.

        Raises:
            RegistryFrozenError: If the registry is frozen.
            CompilationError: If the declarations cannot be compiled.
        """
        self._check_writable(name)
        if declarations is None:
            if name not in self._declarations:
                raise SchemaNotFoundError(name, list(self._declarations))
            declarations = self._declarations[name]

        previous = self._states.get(name, SchemaState.DECLARED)
        self._states[name] = SchemaState.COMPILING
        try:
            declarations = parse_declarations(declarations)
            compiled = self._compiler.compile(name, declarations)
        except CompilationError as e:
            self._states[name] = previous
            logger.error("schema_compile_failed", schema=name, error=e.user_message)
            raise

        self._schemas[name] = compiled
        self._declarations[name] = declarations
        self._states[name] = SchemaState.COMPILED
        logger.debug(
            "schema_compiled",
            schema=name,
            fields=compiled.validation_descriptor.field_names(),
        )
        return compiled

    def compile_all(self, schemas: Mapping[str, Any]) -> list[CompiledSchema]:
        """Declare, then compile, several schemas in mapping order."""
        for name, declarations in schemas.items():
            self.declare(name, declarations)
        return [self.compile(name) for name in schemas]

    def freeze(self) -> None:
        """End the build phase; further compilation raises RegistryFrozenError."""
        self._frozen = True
        logger.info("registry_frozen", schemas=len(self._schemas))

    def is_compiled(self, name: str) -> bool:
        """Whether ``name`` is compiled and available for embedding."""
        return self._states.get(name) is SchemaState.COMPILED

    def state_of(self, name: str) -> SchemaState | None:
        """Lifecycle state of ``name``, or None if it was never declared."""
        return self._states.get(name)

    def names(self) -> list[str]:
        """Names of compiled schemas in compilation order."""
        return [name for name in self._schemas if self.is_compiled(name)]

    def schemas(self) -> list[CompiledSchema]:
        """Compiled schemas in compilation order."""
        return [self._schemas[name] for name in self.names()]

    def lookup(self, name: str) -> CompiledSchema:
        """Return the compiled schema registered under ``name``.

        Raises:
            SchemaNotFoundError: If no compiled schema has that name.
        """
        if not self.is_compiled(name):
            raise SchemaNotFoundError(name, self.names())
        return self._schemas[name]

    def documentation_of(self, schema: str | CompiledSchema) -> SchemaNode:
        """Documentation tree of a schema, by name or value."""
        return self._resolve(schema).documentation_schema

    def validation_descriptor_of(self, schema: str | CompiledSchema) -> ValidationDescriptor:
        """Validation descriptor of a schema, by name or value.

        This is what gets handed to the validation engine.
        """
        return self._resolve(schema).validation_descriptor

    def _resolve(self, schema: str | CompiledSchema) -> CompiledSchema:
        if isinstance(schema, CompiledSchema):
            return schema
        return self.lookup(schema)

    def _check_writable(self, name: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_compiled(name)

    def __len__(self) -> int:
        return len(self.names())
