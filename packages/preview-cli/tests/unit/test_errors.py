"""Unit tests for preview_cli.errors module."""

from __future__ import annotations

import pytest

from preview_cli import output
from preview_cli.errors import EXIT_SUCCESS, EXIT_SYSTEM_ERROR, EXIT_USER_ERROR, CLIError


class TestCLIError:
    """Tests for CLIError exception."""

    def test_message(self) -> None:
        error = CLIError("Compilation failed")
        assert error.message == "Compilation failed"
        assert str(error) == "Compilation failed"

    def test_default_exit_code(self) -> None:
        assert CLIError("failed").exit_code == EXIT_USER_ERROR

    def test_custom_exit_code(self) -> None:
        assert CLIError("failed", exit_code=EXIT_SYSTEM_ERROR).exit_code == EXIT_SYSTEM_ERROR

    def test_exit_codes_distinct(self) -> None:
        assert len({EXIT_SUCCESS, EXIT_USER_ERROR, EXIT_SYSTEM_ERROR}) == 3

    def test_show_prints_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        original = output.console
        output.console = output.create_console(no_color=True)
        try:
            CLIError("Cannot write to: out").show()
        finally:
            output.console = original

        captured = capsys.readouterr()
        assert "Cannot write to: out" in captured.out
        assert "✗" in captured.out
