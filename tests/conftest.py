"""Shared pytest fixtures for dualschema tests.

Provides structlog configuration, registries preloaded with the user
schemas used across test modules, and CLI runner helpers.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from dualschema import (
    CompilerSettings,
    SchemaRegistry,
    embeds_many,
    embeds_one,
    field,
)

USERS_YAML_FILENAME = "users.yaml"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def settings() -> CompilerSettings:
    """Settings with built-in defaults, independent of the environment."""
    return CompilerSettings(
        date_example="2024-08-12",
        datetime_example="2024-08-12T21:00:39",
        type_defaults={},
    )


@pytest.fixture
def registry(settings: CompilerSettings) -> SchemaRegistry:
    """Return an empty, writable registry."""
    return SchemaRegistry(settings)


@pytest.fixture
def user_registry(registry: SchemaRegistry) -> SchemaRegistry:
    """Return a writable registry holding the user schemas.

    Compiled in dependency order:
    - User: first_name, last_name, age
    - UserResponse: embeds_one data -> User
    - UserIndexResponse: embeds_many data -> User
    - Callback: embeds_one user -> User
    """
    registry.compile(
        "User",
        [
            field("first_name", "string"),
            field("last_name", "string"),
            field("age", "integer"),
        ],
    )
    registry.compile("UserResponse", embeds_one("data", "User"))
    registry.compile("UserIndexResponse", embeds_many("data", "User"))
    registry.compile("Callback", embeds_one("user", "User"))
    return registry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem."""
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def users_yaml(fixtures_dir: Path) -> Path:
    """Return the path to the users declaration file."""
    return fixtures_dir / USERS_YAML_FILENAME


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture writing declaration files into tmp_path."""

    def _write(content: str, filename: str = "schemas.yaml") -> Path:
        path = tmp_path / filename
        path.write_text(content)
        return path

    return _write
