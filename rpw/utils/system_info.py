import platform
from enum import Enum, auto, unique


class SystemInfo:
    """
    A singleton class that provides information about the system's operating system.

    Attributes:
        _instance: The singleton instance of the `SystemInfo` class.
        _operating_system: The detected operating system.

    Examples:
        >>> info = SystemInfo()
        >>> print(info.operating_system)
    """

    _instance = None  # type: SystemInfo | None
    _operating_system = None  # type: SystemInfo.OperatingSystem | None

    @unique
    class OperatingSystem(Enum):
        """
        An enumeration representing the operating system families the opener knows about.

        Attributes:
            WINDOWS: Represents the Windows OS.
            LINUX: Represents the Linux OS.
            MACOS: Represents the macOS.
            OTHER: Anything else. No system specific openers are available.
        """

        WINDOWS = auto()
        LINUX = auto()
        MACOS = auto()
        OTHER = auto()

        @property
        def is_linux(self) -> bool:
            return self is SystemInfo.OperatingSystem.LINUX

        @property
        def is_mac(self) -> bool:
            return self is SystemInfo.OperatingSystem.MACOS

        @property
        def is_windows(self) -> bool:
            return self is SystemInfo.OperatingSystem.WINDOWS

    def __new__(cls) -> "SystemInfo":
        """
        Create a new instance or return the existing singleton instance of the `SystemInfo` class.
        """
        if not cls._instance:
            cls._instance = super(SystemInfo, cls).__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """
        Initialize the `SystemInfo` instance by detecting the operating system.
        """
        if hasattr(self, "_is_initialized") and self._is_initialized:
            return

        self._operating_system = detect_operating_system(platform.system())

        self._is_initialized: bool = True

    @property
    def operating_system(self) -> "SystemInfo.OperatingSystem":
        """
        Get the detected operating system.

        Returns:
            The detected operating system as an instance of `SystemInfo.OperatingSystem`.
        """
        assert self._operating_system is not None
        return self._operating_system


def detect_operating_system(system_name: str) -> SystemInfo.OperatingSystem:
    """Map a `platform.system()` name to an operating system family."""
    if system_name in ["Windows"]:
        return SystemInfo.OperatingSystem.WINDOWS
    elif system_name in ["Linux"]:
        return SystemInfo.OperatingSystem.LINUX
    elif system_name in ["Darwin"]:
        return SystemInfo.OperatingSystem.MACOS
    return SystemInfo.OperatingSystem.OTHER
