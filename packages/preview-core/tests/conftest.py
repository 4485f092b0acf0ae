"""Shared pytest fixtures for preview-core tests.

Provides a recording compiler backend, a static host fact source and
per-test log destinations writing to an in-memory console.
"""

from __future__ import annotations

import io
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest
import structlog

from preview_core.compiler.context import CompilationContext, Phase
from preview_core.log_destinations import LogDestinations
from preview_core.migration.checker import Severity
from preview_core.schemas.node import Node


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@dataclass
class BackendCall:
    """One call made to the recording backend."""

    phase: Phase
    environment: str | None
    node_environment: str | None
    checker: Any
    overrides: dict[str, Any]


@dataclass
class RecordingBackend:
    """Deterministic compiler backend used in place of a real compiler.

    Returns ``catalogs[environment]`` and logs one line per compile through
    the context logger. ``fail_in`` makes the given phase raise ``error``.
    ``issues`` are reported to the migration checker during the preview pass.
    """

    catalogs: dict[str, Any] = field(
        default_factory=lambda: {"production": {"catalog": "C1"}, "prod_v2": {"catalog": "C2"}}
    )
    fail_in: Phase | None = None
    error: Exception = field(default_factory=lambda: RuntimeError("backend exploded"))
    issues: list[tuple[str, str, Severity]] = field(default_factory=list)
    calls: list[BackendCall] = field(default_factory=list)

    def compile(self, node: Node, context: CompilationContext) -> Any:
        self.calls.append(
            BackendCall(
                phase=context.phase,
                environment=context.environment,
                node_environment=node.environment,
                checker=context.migration_checker,
                overrides=dict(context.overrides),
            )
        )
        context.logger.info(f"{context.phase.value}_pass_output", environment=context.environment)

        if context.phase is self.fail_in:
            raise self.error

        if context.migration_checker is not None:
            for code, message, severity in self.issues:
                context.migration_checker.report(code, message, severity=severity)

        return self.catalogs[context.environment or ""]


class StaticFactSource:
    """FactSource answering from a dict; names in ``failing`` raise OSError."""

    def __init__(self, values: dict[str, str], failing: tuple[str, ...] = ()) -> None:
        self.values = values
        self.failing = failing
        self.lookups: list[str] = []

    def value(self, name: str) -> str | None:
        self.lookups.append(name)
        if name in self.failing:
            raise OSError(f"lookup of {name} failed")
        return self.values.get(name)


@pytest.fixture
def recording_backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def fact_source_factory() -> Callable[..., StaticFactSource]:
    return StaticFactSource


@pytest.fixture
def fact_source() -> StaticFactSource:
    return StaticFactSource({"fqdn": "master.example.com", "ipaddress": "10.0.0.1"})


@pytest.fixture
def node() -> Node:
    return Node(name="web01", environment="production", facts={"os": "linux"})


@pytest.fixture
def console_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def destinations(console_stream: io.StringIO) -> LogDestinations:
    return LogDestinations(console_stream=console_stream)
