from pathlib import Path
from unittest.mock import patch

import pytest
from loguru import logger

from rpw.utils.log import (
    FINE,
    FINER,
    FINEST,
    INFO,
    SEVERE,
    WARNING,
    Log,
    exception_header,
    format_record,
)


def read_log(log: Log) -> str:
    """Detach the sinks so the file is flushed, then return its content."""
    log.close()
    return log.log_file.read_text(encoding="utf-8")


class TestFormatRecord:
    """Tests for the bracketed line format."""

    def test_tags(self) -> None:
        assert format_record(FINE, "msg") == "[ # ] msg\n"
        assert format_record(FINER, "msg") == "[ - ] msg\n"
        assert format_record(FINEST, "msg") == "[   ] msg\n"
        assert format_record(INFO, "msg") == "[ i ] msg\n"
        assert format_record(SEVERE, "msg") == "[!E!] msg\n"
        assert format_record(WARNING, "msg") == "[!W!] msg\n"

    def test_unknown_level(self) -> None:
        assert format_record("DEBUG", "msg") == "[ ? ]msg\n"

    def test_bare_newline(self) -> None:
        assert format_record(INFO, "\n") == "\n"

    def test_leading_newline(self) -> None:
        assert format_record(INFO, "\nHello") == "\n[ i ] Hello\n"

    def test_multiline_message_is_tagged_per_line(self) -> None:
        assert (
            format_record(WARNING, "first\nsecond\nthird")
            == "[!W!] first\n[!W!] second\n[!W!] third\n"
        )

    def test_empty_message(self) -> None:
        assert format_record(INFO, "") == "[ i ] \n"

    def test_trace_appends_locator(self) -> None:
        rendered = format_record(SEVERE, "boom", "pack.loader.load", "Traceback\n")
        assert rendered == "[!E!] boom\nat pack.loader.load\nTraceback\n\n"

    def test_braces_are_kept(self) -> None:
        assert format_record(INFO, "{not a field}") == "[ i ] {not a field}\n"


def test_exception_header() -> None:
    assert exception_header(ValueError("bad value")) == "bad value"
    assert exception_header(ValueError()) == "ValueError"


class TestLogInit:
    def test_default_log_file_comes_from_app_info(self) -> None:
        with patch("rpw.utils.log.AppInfo") as app_info:
            assert Log().log_file == app_info.return_value.log_file

    def test_log_folder_overrides_app_info(self, tmp_path: Path) -> None:
        assert Log(log_folder=tmp_path).log_file == tmp_path / "runtime.log"

    def test_creates_log_file_with_bootstrap_records(self, log: Log) -> None:
        content = read_log(log)
        lines = content.splitlines()
        assert lines[0] == "[ i ] Main logger initialized."
        assert lines[1].startswith("[ i ] ")
        # YYYY/MM/DD HH:MM:SS
        assert len(lines[1]) == len("[ i ] ") + 19
        assert lines[1][6:][4] == "/"

    def test_wipes_old_logs_only(self, tmp_path: Path) -> None:
        folder = tmp_path / "logs"
        folder.mkdir()
        (folder / "runtime.log.1").write_text("old")
        (folder / "runtime-old.log").write_text("old")
        (folder / "settings.json").write_text("{}")
        (folder / "runtime.dir").mkdir()

        log = Log(log_folder=folder)
        log.init()
        read_log(log)

        remaining = sorted(p.name for p in folder.iterdir())
        assert remaining == ["runtime.dir", "runtime.log", "settings.json"]

    def test_enables_logging(self, tmp_path: Path) -> None:
        log = Log(log_folder=tmp_path, enabled=False)
        log.init()
        assert log.enabled is True
        log.close()

    def test_failure_is_printed_and_keeps_flag(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        # A file where the log folder should be
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        log = Log(log_folder=blocker, enabled=False)

        log.init()

        assert log.enabled is False
        assert "Traceback" in capsys.readouterr().err

    def test_reinit_replaces_sinks(self, log: Log) -> None:
        log.init()
        log.info("once")
        content = read_log(log)
        assert content.count("[ i ] once") == 1


class TestLogging:
    def test_all_severities_reach_file(self, log: Log) -> None:
        log.finest("a")
        log.finer("b")
        log.fine("c")
        log.info("d")
        log.warning("e")
        log.severe("f")

        content = read_log(log)
        assert "[   ] a\n" in content
        assert "[ - ] b\n" in content
        assert "[ # ] c\n" in content
        assert "[ i ] d\n" in content
        assert "[!W!] e\n" in content
        assert "[!E!] f\n" in content

    def test_short_aliases(self, log: Log) -> None:
        log.f1("fine")
        log.f2("finer")
        log.f3("finest")
        log.i("info")
        log.w("warning")
        log.e("severe")

        content = read_log(log)
        assert "[ # ] fine\n" in content
        assert "[ - ] finer\n" in content
        assert "[   ] finest\n" in content
        assert "[ i ] info\n" in content
        assert "[!W!] warning\n" in content
        assert "[!E!] severe\n" in content

    def test_disabled_drops_everything(
        self, log: Log, capsys: pytest.CaptureFixture[str]
    ) -> None:
        log.set_print_to_stdout(True)
        log.enable(False)

        log.finest("hidden")
        log.finer("hidden")
        log.fine("hidden")
        log.info("hidden")
        log.warning("hidden")
        log.severe("hidden", ValueError("hidden"))
        log.error(ValueError("hidden"))
        log.eh("hidden", ValueError("hidden"))
        # Records sent straight to loguru are dropped too
        logger.info("hidden")

        assert "hidden" not in read_log(log)
        captured = capsys.readouterr()
        assert "hidden" not in captured.out
        assert "hidden" not in captured.err

    def test_reenable(self, log: Log) -> None:
        log.enable(False)
        log.info("hidden")
        log.enable(True)
        log.info("shown")

        content = read_log(log)
        assert "hidden" not in content
        assert "[ i ] shown\n" in content

    def test_severe_with_full_trace(self, log: Log) -> None:
        try:
            raise RuntimeError("pack is broken")
        except RuntimeError as e:
            log.severe("Could not load pack.", e)

        content = read_log(log)
        assert "[!E!] Could not load pack.\n" in content
        assert ".test_severe_with_full_trace\n" in content
        assert "Traceback (most recent call last)" in content
        assert "RuntimeError: pack is broken" in content

    def test_severe_with_header_only(self, log: Log) -> None:
        try:
            raise RuntimeError("pack is broken")
        except RuntimeError as e:
            log.severe("Could not load pack.", e, full_trace=False)
            log.eh("Again.", e)

        content = read_log(log)
        assert "[!E!] Could not load pack.\n[!E!] pack is broken\n" in content
        assert "[!E!] Again.\n[!E!] pack is broken\n" in content
        assert "Traceback" not in content

    def test_bare_error(self, log: Log) -> None:
        try:
            raise KeyError("missing")
        except KeyError as e:
            log.error(e)

        content = read_log(log)
        assert "[!E!] 'missing'\n" in content
        assert "KeyError: 'missing'" in content

    def test_foreign_level_gets_unknown_tag(self, log: Log) -> None:
        logger.debug("from elsewhere")
        assert "[ ? ]from elsewhere\n" in read_log(log)


class TestMirroring:
    def test_off_by_default(self, log: Log, capsys: pytest.CaptureFixture[str]) -> None:
        log.info("quiet")
        log.severe("quiet")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_info_goes_to_stdout(
        self, log: Log, capsys: pytest.CaptureFixture[str]
    ) -> None:
        log.set_print_to_stdout(True)
        log.finest("a")
        log.finer("b")
        log.fine("c")
        log.info("d")

        captured = capsys.readouterr()
        assert captured.out == "[   ] a\n[ - ] b\n[ # ] c\n[ i ] d\n"
        assert captured.err == ""

    def test_severe_with_error_goes_to_stderr(
        self, log: Log, capsys: pytest.CaptureFixture[str]
    ) -> None:
        log.set_print_to_stdout(True)
        try:
            raise ValueError("bad")
        except ValueError as e:
            log.severe("failed", e)
        log.warning("careful")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.startswith("[!E!] failed\nat ")
        assert "ValueError: bad" in captured.err
        assert "[!W!] careful\n" in captured.err

    def test_file_gets_records_regardless_of_mirroring(
        self, log: Log, capsys: pytest.CaptureFixture[str]
    ) -> None:
        log.set_print_to_stdout(True)
        log.info("both")
        log.set_print_to_stdout(False)
        log.info("file only")

        assert capsys.readouterr().out == "[ i ] both\n"
        content = read_log(log)
        assert "[ i ] both\n" in content
        assert "[ i ] file only\n" in content

    def test_foreign_levels_are_not_mirrored(
        self, log: Log, capsys: pytest.CaptureFixture[str]
    ) -> None:
        log.set_print_to_stdout(True)
        logger.success("from elsewhere")
        logger.debug("from elsewhere")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""
        content = read_log(log)
        assert "[ ? ]from elsewhere\n[ ? ]from elsewhere\n" in content
