"""Shared test fixtures for preview-cli tests.

Provides CliRunner fixtures, an importable compiler backend module and a
fixed host fact source so commands never touch the resolver.
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

# Module name of the generated backend, passed as --backend <name>:Backend
BACKEND_MODULE = "preview_test_backend"

BACKEND_SOURCE = '''
class Backend:
    """Returns a small catalog per environment.

    Reports one migration issue per "legacy_*" fact when a checker is given.
    """

    def compile(self, node, context):
        context.logger.info(f"{context.phase.value}_pass_output")
        if context.environment == "broken":
            raise KeyError("classes")
        checker = context.migration_checker
        if checker is not None:
            for name, severity in sorted(node.facts.items()):
                if name.startswith("legacy_"):
                    checker.report(name.upper(), f"{name} changed meaning", severity=severity)
        return {"node": node.name, "environment": context.environment}
'''

HOST_FACTS = {"fqdn": "master.example.com", "ipaddress": "10.0.0.1"}


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture(autouse=True)
def static_host_facts(monkeypatch: pytest.MonkeyPatch) -> None:
    """Answer server fact lookups from HOST_FACTS."""
    from preview_core.facts.server_facts import SystemFactSource

    monkeypatch.setattr(SystemFactSource, "value", lambda self, name: HOST_FACTS.get(name))


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def backend_spec(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[str, None, None]:
    """Write an importable backend module and return its --backend value."""
    module_dir = tmp_path / "backends"
    module_dir.mkdir()
    (module_dir / f"{BACKEND_MODULE}.py").write_text(BACKEND_SOURCE)
    monkeypatch.syspath_prepend(str(module_dir))

    yield f"{BACKEND_MODULE}:Backend"

    sys.modules.pop(BACKEND_MODULE, None)
