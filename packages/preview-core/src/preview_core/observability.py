"""Tracing and process-wide logging for preview-core.

The orchestration steps (``find_facts``, ``find_node``, ``compile``) each
run inside :func:`span`. Without an OpenTelemetry SDK installed the spans
are no-ops and only the debug events remain.

:func:`configure_logging` is for processes that own their logging, such as
the CLI. Compile output from the backend does not go through it; that is
routed by :class:`~preview_core.log_destinations.LogDestinations`.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span

TRACER_NAME = "preview.compiler"

# Name of the root handler installed by configure_logging()
HANDLER_NAME = "preview"

logger = structlog.get_logger(TRACER_NAME)


def configure_logging(*, log_level: str = "INFO", json_format: bool = True) -> None:
    """Send structlog events through the root logger to stderr.

    Calling again replaces the handler installed by the previous call.

    Args:
        log_level: Root logger level name (DEBUG, INFO, WARNING, ERROR).
        json_format: Render JSON lines instead of console text.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    for previous in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(previous)
    root.addHandler(handler)
    root.setLevel(log_level.upper())


@contextmanager
def span(name: str, attributes: Mapping[str, Any] | None = None) -> Iterator[Span]:
    """Run one orchestration step inside an OpenTelemetry span.

    Unset (None) attributes are left off the span and the log events.
    An exception marks the span as failed and is re-raised.

    Example:
        >>> with span("find_node", {"node.name": "web01", "node.environment": None}):
        ...     finder.find("web01", environment=None, transaction_uuid=None)
    """
    attrs = {key: value for key, value in (attributes or {}).items() if value is not None}
    tracer = trace.get_tracer(TRACER_NAME)

    with tracer.start_as_current_span(
        name,
        attributes=attrs,
        record_exception=False,
        set_status_on_exception=False,
    ) as current:
        logger.debug("step_started", step=name, **attrs)
        try:
            yield current
        except Exception as exc:
            current.record_exception(exc)
            current.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))
            logger.debug("step_failed", step=name, error=str(exc), **attrs)
            raise
        current.set_status(Status(StatusCode.OK))
        logger.debug("step_finished", step=name, **attrs)
