"""Migration checking for the preview pass.

This package provides:
- MigrationChecker: Collects issues reported by the compiler backend
- IssueAcceptor, Issue, Severity: Issue accumulation
- assert_and_report: Log accumulated issues, fail on errors
"""

from __future__ import annotations

from preview_core.migration.checker import Issue, IssueAcceptor, MigrationChecker, Severity
from preview_core.migration.reporter import assert_and_report

__all__: list[str] = [
    "MigrationChecker",
    "IssueAcceptor",
    "Issue",
    "Severity",
    "assert_and_report",
]
