"""Migration issue accumulation.

A MigrationChecker is handed to the compiler backend for the preview pass.
The backend reports compatibility problems it notices; they accumulate in
the checker's IssueAcceptor until the dual compiler reports them at the
end of the pass.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity of a migration issue."""

    ERROR = "error"
    WARNING = "warning"
    DEPRECATION = "deprecation"


class Issue(BaseModel):
    """A single migration issue.

    Attributes:
        code: Stable issue identifier (e.g. "MIGRATE4_EMPTY_STRING_TRUE").
        severity: Issue severity.
        message: Human readable description.
        file: Source file the issue was found in, if known.
        line: Line number in ``file``, if known.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str = Field(..., min_length=1)
    severity: Severity = Field(default=Severity.WARNING)
    message: str = Field(..., min_length=1)
    file: str | None = None
    line: int | None = Field(default=None, ge=1)


class IssueAcceptor:
    """Accumulates issues in the order they are accepted."""

    def __init__(self) -> None:
        self._issues: list[Issue] = []

    def accept(self, issue: Issue) -> None:
        self._issues.append(issue)

    @property
    def issues(self) -> list[Issue]:
        return list(self._issues)

    def of(self, severity: Severity) -> list[Issue]:
        return [i for i in self._issues if i.severity is severity]

    @property
    def errors(self) -> list[Issue]:
        return self.of(Severity.ERROR)

    @property
    def warnings(self) -> list[Issue]:
        return self.of(Severity.WARNING)

    @property
    def deprecations(self) -> list[Issue]:
        return self.of(Severity.DEPRECATION)

    def __len__(self) -> int:
        return len(self._issues)


class MigrationChecker:
    """Collects migration issues observed during a preview compile.

    Attributes:
        acceptor: Issues reported so far.

    Example:
        >>> checker = MigrationChecker()
        >>> checker.report("MIGRATE4_UNDEF", "undef compares differently", file="site.pp", line=3)
        >>> len(checker.acceptor)
        1
    """

    def __init__(self, acceptor: IssueAcceptor | None = None) -> None:
        self.acceptor = acceptor or IssueAcceptor()

    def report(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.WARNING,
        file: str | None = None,
        line: int | None = None,
    ) -> None:
        self.acceptor.accept(
            Issue(code=code, severity=severity, message=message, file=file, line=line)
        )
