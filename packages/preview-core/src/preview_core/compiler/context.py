"""Compilation context handed to the compiler backend.

The backend is never asked to read process-wide state. Everything a pass
depends on (environment, log output, optional migration checker, active
overrides) travels in a CompilationContext.

Overrides are scoped values held in a ContextVar. Each thread and each
asyncio task sees its own stack, and a scope is popped on every exit path.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from preview_core.migration.checker import MigrationChecker
    from preview_core.schemas.node import Node

logger = structlog.get_logger(__name__)

_EMPTY: Mapping[str, Any] = MappingProxyType({})

_overrides: ContextVar[Mapping[str, Any]] = ContextVar("preview_overrides", default=_EMPTY)
_labels: ContextVar[tuple[str, ...]] = ContextVar("preview_override_labels", default=())


class Phase(str, Enum):
    """Which pass of the dual compile is running."""

    BASELINE = "baseline"
    BASELINE_RERUN = "baseline_rerun"
    PREVIEW = "preview"


@contextmanager
def overrides(values: Mapping[str, Any], label: str) -> Iterator[Mapping[str, Any]]:
    """Install ``values`` on top of the current overrides for the block.

    Args:
        values: Values to install. Inner scopes shadow outer ones.
        label: Name of the scope, for diagnostics.

    Yields:
        The overrides visible inside the block.

    Example:
        >>> with overrides({"migration_checker": checker}, "preview-compile"):
        ...     lookup("migration_checker") is checker
        True
    """
    merged = MappingProxyType({**_overrides.get(), **values})
    token = _overrides.set(merged)
    label_token = _labels.set((*_labels.get(), label))
    logger.debug("overrides_pushed", label=label, keys=sorted(values))
    try:
        yield merged
    finally:
        _labels.reset(label_token)
        _overrides.reset(token)


def lookup(key: str, default: Any = None) -> Any:
    """Return the innermost override for ``key``, or ``default``."""
    return _overrides.get().get(key, default)


def current_overrides() -> Mapping[str, Any]:
    return _overrides.get()


def current_labels() -> tuple[str, ...]:
    return _labels.get()


@dataclass(frozen=True)
class CompilationContext:
    """Everything one compiler pass may depend on besides the node.

    Attributes:
        phase: Which pass is running.
        environment: Environment this pass compiles against.
        logger: Logger routed to this pass's log destination.
        migration_checker: Checker to report migration issues to, preview only.
        overrides: Scoped override values active for this pass.
    """

    phase: Phase
    environment: str | None
    logger: BoundLogger
    migration_checker: MigrationChecker | None = None
    overrides: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)


@runtime_checkable
class CompilerBackend(Protocol):
    """The configuration language compiler.

    Implementations turn a node into a catalog. Catalogs are opaque to the
    orchestrator.
    """

    def compile(self, node: Node, context: CompilationContext) -> Any:
        """Compile ``node`` in ``context.environment`` and return its catalog."""
        ...
