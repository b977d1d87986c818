#!/usr/bin/env python3
import sys
import traceback
from types import TracebackType
from typing import Type

from loguru import logger

from rpw.cli.main import cli


def handle_exception(
    exc_type: Type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> None:
    """
    This function is called (through excepthook) when the application encounters
    an uncaught exception. When this happens, the error is logged to the log file
    and printed to stderr.
    """

    # Ignore KeyboardInterrupt exceptions, for when running through the terminal
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
    else:
        logger.opt(exception=(exc_type, exc_value, exc_traceback)).log(
            "SEVERE", "The application has failed with an uncaught exception"
        )
        sys.stderr.write(
            "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
        )

    sys.exit(1)


sys.excepthook = handle_exception


if __name__ == "__main__":
    cli(prog_name="rpw")
