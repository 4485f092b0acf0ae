"""Per-compile log destinations.

A LogDestinations instance owns the log output of one dual compile. Each
destination is a stdlib handler attached to a private (unregistered) logger;
the compiler backend writes through ``LogDestinations.logger``, a structlog
logger wrapping it. Because nothing is shared between instances, two
compiles running at the same time cannot route output into each other's
destinations.

File destinations receive one JSON object per line. The ``console``
destination renders human-readable lines (or JSON lines) to a stream, stderr
by default, and can be held to a higher level than the files.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from itertools import count
from typing import IO, TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

# Identifier of the console destination
CONSOLE = "console"

_instance_ids = count(1)


def _json_formatter() -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )


def _console_formatter() -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )


class LogDestinations:
    """Registry of open log destinations for one compile.

    The console destination is open on construction.

    Attributes:
        logger: structlog logger whose output goes to every open destination.

    Example:
        >>> destinations = LogDestinations()
        >>> with destinations.with_destination("/tmp/baseline.log"):
        ...     destinations.close(CONSOLE)
        ...     destinations.logger.info("compiling")
        >>> destinations.new_destination(CONSOLE)
    """

    def __init__(
        self,
        console_stream: IO[str] | None = None,
        level: int = logging.DEBUG,
        *,
        console_level: int = logging.NOTSET,
        console_json: bool = False,
    ) -> None:
        """Initialize with the console destination open.

        Args:
            console_stream: Stream for the console destination. Defaults to
                sys.stderr at the time the console is opened.
            level: Minimum level written to destinations.
            console_level: Additional minimum level for the console only.
            console_json: Render the console as JSON lines, like files.
        """
        self._console_stream = console_stream
        self._console_level = console_level
        self._console_json = console_json
        self._handlers: dict[str, logging.Handler] = {}

        self._stdlib_logger = logging.Logger(f"preview.compile.{next(_instance_ids)}", level)
        self._stdlib_logger.propagate = False
        # Keeps logging's last-resort stderr handler out when every destination is closed
        self._stdlib_logger.addHandler(logging.NullHandler())

        self.logger: BoundLogger = structlog.wrap_logger(
            self._stdlib_logger,
            processors=[
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
        )

        self.new_destination(CONSOLE)

    def _create_handler(self, target: str) -> logging.Handler:
        handler: logging.Handler
        if target == CONSOLE:
            handler = logging.StreamHandler(self._console_stream or sys.stderr)
            handler.setLevel(self._console_level)
            handler.setFormatter(_json_formatter() if self._console_json else _console_formatter())
        else:
            handler = logging.FileHandler(target, encoding="utf-8")
            handler.setFormatter(_json_formatter())
        return handler

    def new_destination(self, target: str) -> None:
        """Open ``target``. Opening an already open destination is a no-op."""
        if target in self._handlers:
            return
        handler = self._create_handler(target)
        self._handlers[target] = handler
        self._stdlib_logger.addHandler(handler)

    def close(self, target: str) -> None:
        """Close ``target``. Closing a destination that is not open is a no-op."""
        handler = self._handlers.pop(target, None)
        if handler is None:
            return
        self._stdlib_logger.removeHandler(handler)
        handler.close()

    def close_all(self) -> None:
        for target in list(self._handlers):
            self.close(target)

    def is_open(self, target: str) -> bool:
        return target in self._handlers

    @property
    def open_destinations(self) -> list[str]:
        return list(self._handlers)

    @contextmanager
    def with_destination(self, target: str) -> Iterator[BoundLogger]:
        """Route output to ``target`` for the duration of the block.

        A destination opened here is closed when the block exits, on every
        exit path. A destination that was already open stays open.

        Yields:
            The structlog logger writing to the open destinations.
        """
        opened = target not in self._handlers
        self.new_destination(target)
        try:
            yield self.logger
        finally:
            if opened:
                self.close(target)

    def bind(self, **context: Any) -> BoundLogger:
        return self.logger.bind(**context)
