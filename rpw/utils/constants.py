from enum import Enum, unique

# Every file in the log folder starting with this prefix is wiped on start
LOG_FILENAME = "runtime"
LOG_FILE = LOG_FILENAME + ".log"

# Marker replaced by the target path in editor argument templates
PATH_MARKER = "%s"
DEFAULT_EDITOR_ARGS = PATH_MARKER

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"

LINUX_URL_OPENERS = ["gnome-open", "xdg-open", "kde-open"]
LINUX_FILE_OPENERS = ["kde-open", "gnome-open", "xdg-open"]
MACOS_OPENERS = ["open"]
WINDOWS_OPENERS = ["explorer"]


@unique
class DesktopAction(str, Enum):
    BROWSE = "BROWSE"
    OPEN = "OPEN"
    EDIT = "EDIT"


@unique
class EditorKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"


@unique
class LaunchReason(str, Enum):
    """Why a single opener attempt ended the way it did."""

    RUNNING = "running"
    OPENED = "opened"
    EXITED = "exited"
    CRASHED = "crashed"
    SPAWN_FAILED = "spawn_failed"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"
