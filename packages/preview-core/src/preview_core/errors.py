"""Custom exception hierarchy for preview-core.

This module defines the exception classes raised while orchestrating a
baseline + preview catalog compilation:
- PreviewError: Base exception for all preview-related errors
- ArgumentError: Malformed or missing request option, or no node to compile
- ConfigurationError: Fact payload or configuration file cannot be used
- ConsistencyError: Submitted facts belong to another node
- PermissionDeniedError: Remote request used a local-only option
- CompilationError: Node lookup or catalog compilation failed
- MigrationIssuesError: Migration checker accumulated error-level issues

User-facing messages are safe to display; technical details are logged
internally via structlog.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class PreviewError(Exception):
    """Base exception for catalog-preview.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but never part of the user message.

    Example:
        >>> raise PreviewError(
        ...     "Preview compilation failed",
        ...     internal_details="backend raised KeyError('classes')",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "preview_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ArgumentError(PreviewError, ValueError):
    """Raised when a request option is malformed or missing.

    Use this exception when:
    - Facts are supplied without a fact format
    - No node can be found for the requested name
    - preview_environment is missing from the compile options
    """

    pass


class ConfigurationError(ArgumentError):
    """Raised when fact payloads or configuration files cannot be used.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (if known).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid run mode",
        ...     file_path="preview.yaml",
        ...     field_path="run_mode",
        ... )
        # User sees: "Invalid run mode (in preview.yaml, field 'run_mode')"
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
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class ConsistencyError(PreviewError):
    """Raised when submitted facts name a different node than the request.

    Attributes:
        requested_node: Node the catalog was requested for.
        facts_node: Node named by the submitted facts.
    """

    def __init__(self, requested_node: str, facts_node: str) -> None:
        super().__init__(
            f"Catalog for {requested_node!r} was requested with fact definition "
            f"for the wrong node ({facts_node!r})."
        )
        self.requested_node = requested_node
        self.facts_node = facts_node


class PermissionDeniedError(PreviewError, PermissionError):
    """Raised when a remote request uses an option reserved for local callers."""

    def __init__(self, option: str) -> None:
        super().__init__(f"Invalid option {option} for a remote request")
        self.option = option


class CompilationError(PreviewError):
    """Raised when node lookup or catalog compilation fails.

    The underlying failure is preserved as ``__cause__`` by raising with
    ``raise CompilationError(...) from exc``.

    Attributes:
        node_name: Node being compiled (if known).
        environment: Baseline environment (if known).
        preview_environment: Preview environment (if known).

    Example:
        >>> try:
        ...     finder.find("web01", environment="production", transaction_uuid=None)
        ... except Exception as exc:
        ...     raise CompilationError(
        ...         "Failed when searching for node web01: timeout",
        ...         node_name="web01",
        ...     ) from exc
    """

    def __init__(
        self,
        user_message: str,
        *,
        node_name: str | None = None,
        environment: str | None = None,
        preview_environment: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.node_name = node_name
        self.environment = environment
        self.preview_environment = preview_environment


class MigrationIssuesError(CompilationError):
    """Raised by the issue reporter when error-level migration issues exist.

    Attributes:
        error_count: Number of error-level issues accumulated.
    """

    def __init__(self, user_message: str, *, error_count: int) -> None:
        super().__init__(user_message)
        self.error_count = error_count
