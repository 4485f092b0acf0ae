"""Unit tests for LogDestinations."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from preview_core.log_destinations import CONSOLE, LogDestinations


class TestOpenClose:
    def test_console_open_on_construction(self, destinations: LogDestinations) -> None:
        assert destinations.open_destinations == [CONSOLE]

    def test_new_destination_is_idempotent(
        self, destinations: LogDestinations, tmp_path: Path
    ) -> None:
        target = str(tmp_path / "a.log")
        destinations.new_destination(target)
        destinations.new_destination(target)

        assert destinations.open_destinations == [CONSOLE, target]

    def test_close_unknown_destination_is_a_no_op(self, destinations: LogDestinations) -> None:
        destinations.close("/nowhere.log")
        assert destinations.is_open(CONSOLE)

    def test_close_all(self, destinations: LogDestinations, tmp_path: Path) -> None:
        destinations.new_destination(str(tmp_path / "a.log"))
        destinations.close_all()
        assert destinations.open_destinations == []


class TestRouting:
    def test_file_destination_writes_json_lines(
        self, destinations: LogDestinations, tmp_path: Path
    ) -> None:
        target = tmp_path / "a.log"
        destinations.new_destination(str(target))
        destinations.close(CONSOLE)

        destinations.logger.info("resource_added", resource="File[/etc/motd]")
        destinations.close(str(target))

        (line,) = target.read_text().splitlines()
        record = json.loads(line)
        assert record["event"] == "resource_added"
        assert record["resource"] == "File[/etc/motd]"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_console_destination_writes_to_stream(
        self, destinations: LogDestinations, console_stream: io.StringIO
    ) -> None:
        destinations.logger.warning("deprecated_syntax", line=4)

        assert "deprecated_syntax" in console_stream.getvalue()

    def test_closed_console_receives_nothing(
        self, destinations: LogDestinations, console_stream: io.StringIO
    ) -> None:
        destinations.close(CONSOLE)
        destinations.logger.error("lost")

        assert console_stream.getvalue() == ""

    def test_no_last_resort_output_when_everything_closed(
        self,
        destinations: LogDestinations,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        destinations.close_all()
        destinations.logger.error("dropped")

        assert "dropped" not in capsys.readouterr().err

    def test_instances_do_not_share_destinations(self, tmp_path: Path) -> None:
        first = LogDestinations(console_stream=io.StringIO())
        second = LogDestinations(console_stream=io.StringIO())
        target = tmp_path / "first.log"
        first.new_destination(str(target))

        second.logger.info("from_second")
        first.close(str(target))

        assert "from_second" not in target.read_text()


class TestWithDestination:
    def test_opened_destination_closed_on_exit(
        self, destinations: LogDestinations, tmp_path: Path
    ) -> None:
        target = str(tmp_path / "scoped.log")

        with destinations.with_destination(target) as log:
            assert destinations.is_open(target)
            log.info("inside")

        assert not destinations.is_open(target)
        assert "inside" in Path(target).read_text()

    def test_opened_destination_closed_on_error(
        self, destinations: LogDestinations, tmp_path: Path
    ) -> None:
        target = str(tmp_path / "scoped.log")

        with pytest.raises(ValueError), destinations.with_destination(target):
            raise ValueError("boom")

        assert not destinations.is_open(target)

    def test_already_open_destination_stays_open(
        self, destinations: LogDestinations, tmp_path: Path
    ) -> None:
        target = str(tmp_path / "kept.log")
        destinations.new_destination(target)

        with destinations.with_destination(target):
            pass

        assert destinations.is_open(target)
        destinations.close(target)


class TestConsoleOptions:
    def test_console_level_filters_console_only(self, tmp_path: Path) -> None:
        stream = io.StringIO()
        destinations = LogDestinations(console_stream=stream, console_level=logging.WARNING)
        target = tmp_path / "a.log"
        destinations.new_destination(str(target))

        destinations.logger.info("chatty")
        destinations.logger.warning("important")
        destinations.close_all()

        assert "chatty" not in stream.getvalue()
        assert "important" in stream.getvalue()
        assert "chatty" in target.read_text()

    def test_console_json(self) -> None:
        stream = io.StringIO()
        destinations = LogDestinations(console_stream=stream, console_json=True)

        destinations.logger.info("resource_added", resource="File[/etc/motd]")

        record = json.loads(stream.getvalue().splitlines()[0])
        assert record["event"] == "resource_added"
