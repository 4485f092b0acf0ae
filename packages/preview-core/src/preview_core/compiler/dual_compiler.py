"""Compile baseline and preview catalogs for one node.

The baseline pass compiles the node in the environment it was assigned.
The preview pass repoints the same node at the preview environment and
compiles again, optionally with a migration checker. Each pass writes its
log output to its own destination; the console is silenced while the
passes run and restored afterwards, whatever the outcome.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from typing import IO, TYPE_CHECKING, Any

import structlog

from preview_core.compiler.context import (
    CompilationContext,
    CompilerBackend,
    Phase,
    current_overrides,
    overrides,
)
from preview_core.errors import ArgumentError, PreviewError
from preview_core.log_destinations import CONSOLE, LogDestinations
from preview_core.migration.reporter import assert_and_report
from preview_core.observability import span
from preview_core.schemas.result import CompileResult

if TYPE_CHECKING:
    from preview_core.migration.checker import MigrationChecker
    from preview_core.schemas.node import Node
    from preview_core.schemas.request import CompileOptions

logger = structlog.get_logger(__name__)

# Label of the override scope the preview pass runs in
PREVIEW_SCOPE_LABEL = "preview-compile"


class DualCompiler:
    """Run the baseline and preview compiles for a node.

    Attributes:
        backend: Configuration language compiler.
        networked: True when running as a service. Compilation errors are
            logged here only in that case; local callers report them
            themselves.
        rerun_baseline_in_preview: Re-run the baseline compile inside the
            preview log scope before the preview compile. The catalog from
            the first baseline pass is the one returned either way.

    Example:
        >>> compiler = DualCompiler(backend)
        >>> result = compiler.compile(
        ...     node,
        ...     CompileOptions(
        ...         preview_environment="prod_v2",
        ...         baseline_log="/tmp/b.log",
        ...         preview_log="/tmp/p.log",
        ...     ),
        ... )
        >>> result.preview_environment
        'prod_v2'
    """

    def __init__(
        self,
        backend: CompilerBackend,
        *,
        networked: bool = False,
        rerun_baseline_in_preview: bool = True,
        destinations_factory: Callable[[], LogDestinations] | None = None,
        console_stream: IO[str] | None = None,
    ) -> None:
        """Initialize the DualCompiler.

        Args:
            backend: Compiler backend.
            networked: Whether the process serves remote requests.
            rerun_baseline_in_preview: See class attributes.
            destinations_factory: Builds the per-compile LogDestinations.
            console_stream: Console stream used by the default factory.
        """
        self.backend = backend
        self.networked = networked
        self.rerun_baseline_in_preview = rerun_baseline_in_preview
        self._destinations_factory = destinations_factory or (
            lambda: LogDestinations(console_stream=console_stream)
        )

    def compile(self, node: Node, options: CompileOptions) -> CompileResult:
        """Compile baseline and preview catalogs for ``node``.

        ``node.environment`` is left pointing at the preview environment.

        Args:
            node: Resolved node. Its environment is the baseline environment.
            options: Compile options; ``preview_environment`` is required.

        Returns:
            Both catalogs.

        Raises:
            ArgumentError: ``preview_environment`` is missing.
            PreviewError: The backend or migration checker failed.
        """
        preview_environment = options.preview_environment
        if not preview_environment:
            raise ArgumentError(f"No preview_environment given for {node.name}; cannot compile")

        baseline_environment = node.environment
        summary = f"Compiled baseline and preview catalogs for {node.name}"
        if baseline_environment:
            summary += f" in environments {baseline_environment} and {preview_environment}"

        attributes = {
            "node.name": node.name,
            "node.environment": baseline_environment,
            "preview.environment": preview_environment,
        }
        started = time.perf_counter()
        with span("compile", attributes):
            baseline, preview = self._compile_passes(node, options, preview_environment)

        logger.info(
            "catalogs_compiled",
            message=summary,
            node=node.name,
            duration_seconds=round(time.perf_counter() - started, 3),
        )
        return CompileResult(
            baseline=baseline,
            preview=preview,
            baseline_environment=baseline_environment,
            preview_environment=preview_environment,
        )

    def _compile_passes(
        self,
        node: Node,
        options: CompileOptions,
        preview_environment: str,
    ) -> tuple[Any, Any]:
        baseline_environment = node.environment
        baseline_dest = options.baseline_log or CONSOLE
        preview_dest = options.preview_log or CONSOLE
        checker = options.checker
        destinations = self._destinations_factory()

        try:
            with destinations.with_destination(baseline_dest):
                if baseline_dest != CONSOLE:
                    destinations.close(CONSOLE)
                baseline = self._run(node, destinations, Phase.BASELINE)

            with destinations.with_destination(preview_dest):
                if self.rerun_baseline_in_preview:
                    # Result discarded; the first baseline catalog is kept
                    self._run(node, destinations, Phase.BASELINE_RERUN)

                scoped = {"migration_checker": checker} if checker is not None else {}
                with overrides(scoped, PREVIEW_SCOPE_LABEL):
                    node.environment = preview_environment
                    preview = self._run(node, destinations, Phase.PREVIEW, checker)

                    if checker is not None:
                        assert_and_report(
                            checker.acceptor,
                            logger=destinations.bind(node=node.name, phase=Phase.PREVIEW.value),
                            emit_warnings=True,
                            max_warnings=math.inf,
                            max_errors=math.inf,
                            max_deprecations=math.inf,
                        )
        except PreviewError as exc:
            if self.networked:
                logger.error(
                    "catalog_compile_failed",
                    node=node.name,
                    environment=baseline_environment,
                    preview_environment=preview_environment,
                    error=str(exc),
                )
            raise
        finally:
            destinations.new_destination(CONSOLE)
            for target in (baseline_dest, preview_dest):
                if target != CONSOLE:
                    destinations.close(target)

        return baseline, preview

    def _run(
        self,
        node: Node,
        destinations: LogDestinations,
        phase: Phase,
        checker: MigrationChecker | None = None,
    ) -> Any:
        context = CompilationContext(
            phase=phase,
            environment=node.environment,
            logger=destinations.bind(node=node.name, phase=phase.value),
            migration_checker=checker,
            overrides=current_overrides(),
        )
        context.logger.debug("compile_started", environment=node.environment)
        catalog = self.backend.compile(node, context)
        context.logger.debug("compile_finished", environment=node.environment)
        return catalog
