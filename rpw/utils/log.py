"""
Process-wide logging facility built on top of loguru.

A single `Log` context is created at startup and handed to whatever needs to
log. It owns the loguru sinks it adds: a log file that is wiped on every start,
and two console sinks that mirror records to stdout (FINEST..INFO) and
stderr (WARNING and SEVERE) while mirroring is turned on.

Every record is rendered with a bracketed severity tag, repeated on each line
of a multi-line message::

    [ i ] Main logger initialized.
    [!W!] Process crashed.
"""

import sys
import traceback
from pathlib import Path
from time import localtime, strftime
from typing import TYPE_CHECKING, Any, Callable

from loguru import logger

from rpw.utils.app_info import AppInfo
from rpw.utils.constants import LOG_FILE, LOG_FILENAME, TIMESTAMP_FORMAT

if TYPE_CHECKING:
    import loguru

NEWLINE = "\n"

FINEST = "FINEST"
FINER = "FINER"
FINE = "FINE"
INFO = "INFO"
WARNING = "WARNING"
SEVERE = "SEVERE"

# INFO and WARNING are loguru built-ins, the others are registered on import
CUSTOM_LEVELS = {FINEST: 3, FINER: 7, FINE: 9, SEVERE: 40}

SEVERITY_TAGS = {
    FINE: "[ # ] ",
    FINER: "[ - ] ",
    FINEST: "[   ] ",
    INFO: "[ i ] ",
    SEVERE: "[!E!] ",
    WARNING: "[!W!] ",
}
UNKNOWN_TAG = "[ ? ]"


def _register_levels() -> None:
    for name, no in CUSTOM_LEVELS.items():
        try:
            logger.level(name)
        except ValueError:
            logger.level(name, no=no)


_register_levels()

WARNING_NO = logger.level(WARNING).no


def severity_tag(level_name: str) -> str:
    return SEVERITY_TAGS.get(level_name, UNKNOWN_TAG)


def format_record(
    level_name: str,
    message: str,
    source: str | None = None,
    trace: str | None = None,
) -> str:
    """
    Render a single record in the bracketed line format.

    :param level_name: severity name, unknown names get the `[ ? ]` tag
    :param message: message text, may span multiple lines
    :param source: `module.function` the record was emitted from, used with `trace`
    :param trace: rendered traceback of an attached exception
    :return: the rendered record, always terminated with a newline
    """
    if message == NEWLINE:
        return NEWLINE

    buf = []
    if message.startswith(NEWLINE):
        buf.append(NEWLINE)
        message = message[1:]

    tag = severity_tag(level_name)
    buf.append(tag)
    buf.append(message.replace(NEWLINE, NEWLINE + tag))
    buf.append(NEWLINE)

    if trace is not None:
        buf.append(f"at {source}{NEWLINE}")
        buf.append(trace)
        buf.append(NEWLINE)

    return "".join(buf)


def exception_header(exc: BaseException) -> str:
    """Short, single line description of an exception."""
    text = str(exc)
    return text if text else type(exc).__name__


def _render_trace(record: "loguru.Record") -> str | None:
    exception = record["exception"]
    if exception is None:
        return None
    return "".join(
        traceback.format_exception(
            exception.type, exception.value, exception.traceback
        )
    )


def _formatter(record: "loguru.Record") -> str:
    """Custom formatter for loguru sinks owned by `Log`"""
    record["extra"]["rendered"] = format_record(
        record["level"].name,
        record["message"],
        f"{record['name']}.{record['function']}",
        _render_trace(record),
    )
    return "{extra[rendered]}"


def _stdout_sink(message: "loguru.Message") -> None:
    sys.stdout.write(message)
    sys.stdout.flush()


def _stderr_sink(message: "loguru.Message") -> None:
    sys.stderr.write(message)
    sys.stderr.flush()


class Log:
    """
    Logging context with an explicit lifecycle: create, `init()`, log, `close()`.

    Logging calls made while the context is disabled are dropped before they
    reach any sink, including records other modules send straight to loguru.
    """

    def __init__(
        self,
        log_folder: Path | None = None,
        enabled: bool = True,
        print_to_stdout: bool = False,
    ) -> None:
        self._log_folder = log_folder
        self._enabled = enabled
        self._print_to_stdout = print_to_stdout
        self._sink_ids: list[int] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def print_to_stdout(self) -> bool:
        return self._print_to_stdout

    @property
    def log_file(self) -> Path:
        if self._log_folder is None:
            return AppInfo().log_file
        return self._log_folder / LOG_FILE

    def init(self) -> None:
        """
        Prepare logs for logging.

        Old log files are deleted, the file and console sinks are attached and
        logging is enabled. A failure is printed to stderr and leaves the
        enabled flag as it was.
        """
        try:
            log_file = self.log_file
            log_file.parent.mkdir(parents=True, exist_ok=True)

            # Remove the default stderr logger and anything left from a previous init.
            # Windows refuses to delete a log file that is still open.
            logger.remove()
            self._sink_ids.clear()

            # delete old logs
            for f in log_file.parent.iterdir():
                if not f.is_file():
                    continue
                if f.name.startswith(LOG_FILENAME):
                    f.unlink()

            self._add_sink(
                log_file,
                self._file_filter,
                encoding="utf-8",
                mode="w",
            )
            self._add_sink(_stdout_sink, self._stdout_filter)
            self._add_sink(_stderr_sink, self._stderr_filter)

            self._enabled = True
        except Exception:
            traceback.print_exc(file=sys.stderr)
            return

        self.info("Main logger initialized.")
        self.info(strftime(TIMESTAMP_FORMAT, localtime()))

    def close(self) -> None:
        """Detach every sink this context added."""
        for sink_id in self._sink_ids:
            try:
                logger.remove(sink_id)
            except ValueError:
                # Already removed by someone else calling logger.remove()
                pass
        self._sink_ids.clear()

    def enable(self, flag: bool) -> None:
        self._enabled = flag

    def set_print_to_stdout(self, flag: bool) -> None:
        """Mirror every record to stdout/stderr in addition to the log file."""
        self._print_to_stdout = flag

    def finest(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(FINEST, msg)

    def finer(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(FINER, msg)

    def fine(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(FINE, msg)

    def info(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(INFO, msg)

    def warning(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(WARNING, msg)

    def severe(
        self, msg: str, error: BaseException | None = None, full_trace: bool = True
    ) -> None:
        """
        Log a SEVERE message, optionally with an error attached.

        :param msg: message
        :param error: error to attach
        :param full_trace: render the whole traceback, otherwise only the error header
        """
        if not self._enabled:
            return
        if error is None:
            self._emit(SEVERE, msg)
        elif full_trace:
            self._emit(SEVERE, msg, error)
        else:
            self._emit(SEVERE, msg + NEWLINE + exception_header(error))

    def error(self, error: BaseException) -> None:
        """Log a bare error with its full traceback."""
        if not self._enabled:
            return
        self._emit(SEVERE, exception_header(error), error)

    # Short aliases used throughout the code base
    def f1(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(FINE, msg)

    def f2(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(FINER, msg)

    def f3(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(FINEST, msg)

    def i(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(INFO, msg)

    def w(self, msg: str) -> None:
        if not self._enabled:
            return
        self._emit(WARNING, msg)

    def e(self, msg: str, error: BaseException | None = None) -> None:
        if not self._enabled:
            return
        if error is None:
            self._emit(SEVERE, msg)
        else:
            self._emit(SEVERE, msg, error)

    def eh(self, msg: str, error: BaseException) -> None:
        """Log a SEVERE message with only the header of `error`."""
        if not self._enabled:
            return
        self._emit(SEVERE, msg + NEWLINE + exception_header(error))

    def _emit(
        self, level: str, msg: str, error: BaseException | None = None
    ) -> None:
        # depth=2 points the record at whoever called the public method
        logger.opt(depth=2, exception=error).log(level, msg)

    def _add_sink(
        self, sink: Any, record_filter: Callable[["loguru.Record"], bool], **kwargs: Any
    ) -> None:
        self._sink_ids.append(
            logger.add(
                sink,
                level=0,
                format=_formatter,
                filter=record_filter,
                colorize=False,
                **kwargs,
            )
        )

    def _file_filter(self, record: "loguru.Record") -> bool:
        return self._enabled

    def _mirrored(self, record: "loguru.Record") -> bool:
        # only the six severities reach the console
        return (
            self._enabled
            and self._print_to_stdout
            and record["level"].name in SEVERITY_TAGS
        )

    def _stdout_filter(self, record: "loguru.Record") -> bool:
        return self._mirrored(record) and record["level"].no < WARNING_NO

    def _stderr_filter(self, record: "loguru.Record") -> bool:
        return self._mirrored(record) and record["level"].no >= WARNING_NO
