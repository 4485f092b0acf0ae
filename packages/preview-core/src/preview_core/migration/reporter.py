"""Report accumulated migration issues through a logger.

assert_and_report() logs the issues held by an IssueAcceptor, up to a
per-severity limit, and raises MigrationIssuesError when error-level
issues were accepted. Limits only bound how many issues are logged.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from preview_core.errors import MigrationIssuesError
from preview_core.migration.checker import Issue, Severity

if TYPE_CHECKING:
    from preview_core.migration.checker import IssueAcceptor


def _emit(logger: Any, issues: list[Issue], limit: float, level: str) -> None:
    log = getattr(logger, level)
    for index, issue in enumerate(issues):
        if index >= limit:
            logger.info(
                "migration_issues_truncated",
                severity=issue.severity.value,
                shown=index,
                total=len(issues),
            )
            break
        log(
            "migration_issue",
            code=issue.code,
            severity=issue.severity.value,
            message=issue.message,
            file=issue.file,
            line=issue.line,
        )


def assert_and_report(
    acceptor: IssueAcceptor,
    *,
    logger: Any,
    emit_warnings: bool = False,
    max_warnings: float = math.inf,
    max_errors: float = math.inf,
    max_deprecations: float = math.inf,
) -> None:
    """Log accepted issues and fail if any of them are errors.

    Args:
        acceptor: Issues to report.
        logger: structlog logger the issues are written to.
        emit_warnings: Log warnings and deprecations (errors are always logged).
        max_warnings: Maximum number of warnings to log.
        max_errors: Maximum number of errors to log.
        max_deprecations: Maximum number of deprecations to log.

    Raises:
        MigrationIssuesError: If any error-level issue was accepted.

    Example:
        >>> assert_and_report(
        ...     checker.acceptor,
        ...     logger=log,
        ...     emit_warnings=True,
        ...     max_warnings=math.inf,
        ...     max_errors=math.inf,
        ...     max_deprecations=math.inf,
        ... )
    """
    if emit_warnings:
        _emit(logger, acceptor.of(Severity.WARNING), max_warnings, "warning")
        _emit(logger, acceptor.of(Severity.DEPRECATION), max_deprecations, "warning")

    errors = acceptor.errors
    if not errors:
        return

    _emit(logger, errors, max_errors, "error")
    if len(errors) == 1:
        raise MigrationIssuesError(errors[0].message, error_count=1)
    raise MigrationIssuesError(f"Found {len(errors)} errors. Giving up", error_count=len(errors))
