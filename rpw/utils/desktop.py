"""
Best-effort opening of files, URLs and editors with external programs.

Each way of opening something is a strategy with a single `attempt` method.
`DesktopApi` builds an ordered list of strategies for the requested intent and
stops at the first one reporting success:

1. a user configured editor command (edit intents only),
2. the system specific openers (`xdg-open`, `open`, `explorer`, ...),
3. the platform desktop integration service.

Success means something was launched, not that the user ended up seeing the
file. A spawned opener counts as launched when it is still running right after
it was started; an opener that exits or crashes straight away counts as a
failure. This cannot tell a slow starting opener apart from one about to crash
a moment later.
"""

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Protocol

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices, QGuiApplication

from rpw.models.editor import EditorCommand
from rpw.models.settings import Settings
from rpw.utils.constants import (
    LINUX_FILE_OPENERS,
    LINUX_URL_OPENERS,
    MACOS_OPENERS,
    PATH_MARKER,
    WINDOWS_OPENERS,
    DesktopAction,
    EditorKind,
    LaunchReason,
)
from rpw.utils.log import Log
from rpw.utils.system_info import SystemInfo


@dataclass(frozen=True)
class LaunchResult:
    success: bool
    reason: LaunchReason
    detail: str = ""

    def __bool__(self) -> bool:
        return self.success


class LaunchStrategy(Protocol):
    def attempt(self, target: str) -> LaunchResult: ...


def prepare_command(command: str, args: str | None, target: str) -> list[str]:
    """
    Build the argument vector for an opener.

    Every whitespace separated token of `args` becomes exactly one argument,
    with `%s` replaced by `target`.

    :param command: executable name or path
    :param args: argument template, e.g. ``"--new-window %s"``
    :param target: path or URI substituted into the template
    :return: ``[command, *arguments]``
    """
    parts = [command]

    if args:
        for token in args.split():
            parts.append(token.replace(PATH_MARKER, target).strip())

    return parts


class CommandStrategy:
    """Spawn an external program and check it is still alive right after."""

    def __init__(self, command: str, args: str | None, log: Log) -> None:
        self.command = command
        self.args = args
        self._log = log

    def __repr__(self) -> str:
        return f"CommandStrategy({self.command!r}, {self.args!r})"

    def attempt(self, target: str) -> LaunchResult:
        self._log.finer(
            f"Trying to exec:\n   cmd = {self.command}\n   args = {self.args}\n   {PATH_MARKER} = {target}"
        )

        popen_args = prepare_command(self.command, self.args, target)

        try:
            p = subprocess.Popen(popen_args, **_popen_kwargs())
        except (OSError, ValueError) as e:
            self._log.eh("Error running command.", e)
            return LaunchResult(False, LaunchReason.SPAWN_FAILED, str(e))

        retval = p.poll()
        if retval is None:
            self._log.finest("Process is running.")
            return LaunchResult(True, LaunchReason.RUNNING, f"pid {p.pid}")
        elif retval == 0:
            self._log.warning("Process ended immediately.")
            return LaunchResult(False, LaunchReason.EXITED, "exit code 0")
        else:
            self._log.warning("Process crashed.")
            return LaunchResult(False, LaunchReason.CRASHED, f"exit code {retval}")


def _popen_kwargs() -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
    }
    if sys.platform == "win32":
        kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        # not Windows, so assume POSIX
        kwargs["start_new_session"] = True
        if sys.platform == "linux":
            # Keep bundled libraries out of the system openers
            kwargs["env"] = dict(os.environ, LD_LIBRARY_PATH="")
    return kwargs


class DesktopService:
    """
    The platform's desktop integration.

    BROWSE and OPEN go through Qt and need a running `QGuiApplication`.
    EDIT uses the shell "edit" verb and only exists on Windows.
    """

    def __init__(self, operating_system: SystemInfo.OperatingSystem) -> None:
        self._operating_system = operating_system

    def is_desktop_supported(self) -> bool:
        return (
            QGuiApplication.instance() is not None
            or self._operating_system.is_windows
        )

    def is_supported(self, action: DesktopAction) -> bool:
        if action is DesktopAction.EDIT:
            return self._operating_system.is_windows
        return QGuiApplication.instance() is not None

    def perform(self, action: DesktopAction, target: str) -> bool:
        if action is DesktopAction.BROWSE:
            return QDesktopServices.openUrl(QUrl(target))
        if action is DesktopAction.OPEN:
            return QDesktopServices.openUrl(QUrl.fromLocalFile(target))
        os.startfile(target, "edit")  # type: ignore[attr-defined]
        return True


class DesktopServiceStrategy:
    """Hand the target over to the platform desktop integration service."""

    def __init__(
        self, action: DesktopAction, service: DesktopService, log: Log
    ) -> None:
        self.action = action
        self._service = service
        self._log = log

    def __repr__(self) -> str:
        return f"DesktopServiceStrategy({self.action.value})"

    def attempt(self, target: str) -> LaunchResult:
        self._log.finer(
            f"Trying to use desktop {self.action.value.lower()} with {target}"
        )

        if not self._service.is_desktop_supported():
            self._log.warning("Platform is not supported.")
            return LaunchResult(False, LaunchReason.UNSUPPORTED, "platform")

        if not self._service.is_supported(self.action):
            self._log.warning(f"{self.action.value} is not supported.")
            return LaunchResult(False, LaunchReason.UNSUPPORTED, self.action.value)

        try:
            opened = self._service.perform(self.action, target)
        except (OSError, ValueError) as e:
            self._log.eh(f"Error using desktop {self.action.value.lower()}.", e)
            return LaunchResult(False, LaunchReason.FAILED, str(e))

        if not opened:
            self._log.warning(f"Desktop {self.action.value.lower()} failed.")
            return LaunchResult(False, LaunchReason.FAILED, self.action.value)
        return LaunchResult(True, LaunchReason.OPENED, self.action.value)


def run_strategies(
    strategies: Iterable[LaunchStrategy], target: str
) -> LaunchResult:
    """Attempt each strategy in order, stopping at the first success."""
    result = LaunchResult(False, LaunchReason.FAILED, "no opener available")
    for strategy in strategies:
        result = strategy.attempt(target)
        if result.success:
            return result
    return result


class DesktopApi:
    """
    Open files, URLs and editors with whatever the platform provides.

    Examples:
        >>> api = DesktopApi(log, settings)
        >>> api.open(Path("pack.png"))
        >>> api.browse("https://example.com")
    """

    def __init__(
        self,
        log: Log,
        settings: Settings,
        operating_system: SystemInfo.OperatingSystem | None = None,
        desktop_service: DesktopService | None = None,
    ) -> None:
        self._log = log
        self._settings = settings
        self._operating_system = (
            operating_system
            if operating_system is not None
            else SystemInfo().operating_system
        )
        self._desktop_service = desktop_service or DesktopService(
            self._operating_system
        )

    def browse(self, uri: str) -> bool:
        return self.browse_result(uri).success

    def open(self, path: str | Path) -> bool:
        return self.open_result(path).success

    def edit_text(self, path: str | Path) -> bool:
        return self.edit_result(EditorKind.TEXT, path).success

    def edit_image(self, path: str | Path) -> bool:
        return self.edit_result(EditorKind.IMAGE, path).success

    def edit_audio(self, path: str | Path) -> bool:
        return self.edit_result(EditorKind.AUDIO, path).success

    def edit(self, kind: EditorKind, path: str | Path) -> bool:
        return self.edit_result(kind, path).success

    def browse_result(self, uri: str) -> LaunchResult:
        return run_strategies(self.browse_strategies(), uri)

    def open_result(self, path: str | Path) -> LaunchResult:
        return run_strategies(self.open_strategies(), str(path))

    def edit_result(self, kind: EditorKind, path: str | Path) -> LaunchResult:
        return run_strategies(self.edit_strategies(kind), str(path))

    def browse_strategies(self) -> list[LaunchStrategy]:
        strategies: list[LaunchStrategy] = self._system_strategies(
            LINUX_URL_OPENERS
        )
        strategies.append(self._desktop_strategy(DesktopAction.BROWSE))
        return strategies

    def open_strategies(self) -> list[LaunchStrategy]:
        strategies: list[LaunchStrategy] = self._system_strategies(
            LINUX_FILE_OPENERS
        )
        strategies.append(self._desktop_strategy(DesktopAction.OPEN))
        return strategies

    def edit_strategies(self, kind: EditorKind) -> list[LaunchStrategy]:
        strategies: list[LaunchStrategy] = []

        editor: EditorCommand = self._settings.editor_for(kind)
        if editor.usable:
            strategies.append(CommandStrategy(editor.command, editor.args, self._log))
        elif editor.enabled:
            self._log.warning(f"No {kind.value} editor command configured.")

        strategies.extend(self._system_strategies(LINUX_FILE_OPENERS))
        strategies.append(self._desktop_strategy(DesktopAction.EDIT))
        return strategies

    def _system_strategies(self, linux_openers: list[str]) -> list[LaunchStrategy]:
        if self._operating_system.is_linux:
            commands = linux_openers
        elif self._operating_system.is_mac:
            commands = MACOS_OPENERS
        elif self._operating_system.is_windows:
            commands = WINDOWS_OPENERS
        else:
            commands = []
        return [CommandStrategy(command, PATH_MARKER, self._log) for command in commands]

    def _desktop_strategy(self, action: DesktopAction) -> DesktopServiceStrategy:
        return DesktopServiceStrategy(action, self._desktop_service, self._log)
