from pathlib import Path

from platformdirs import PlatformDirs

from rpw.utils.constants import LOG_FILE


class AppInfo:
    """
    Singleton class that provides information about the application and its related directories.

    The directories are determined using the `platformdirs` package, ensuring
    platform-specific conventions are adhered to.

    Examples:
        >>> print(app_info.app_version)
        >>> print(app_info.app_storage_folder)
    """

    _instance: "None | AppInfo" = None

    def __new__(cls) -> "AppInfo":
        """
        Create a new instance or return the existing singleton instance of the `AppInfo` class.
        """
        if not cls._instance:
            cls._instance = super(AppInfo, cls).__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_is_initialized") and self._is_initialized:
            return

        # Application metadata

        self._app_name = "ResourcePackWorkbench"
        self._app_version = "4.0.0"

        # Define important directories using platformdirs

        platform_dirs = PlatformDirs(appname=self._app_name, appauthor=False)
        self._app_storage_folder: Path = Path(platform_dirs.user_data_dir)
        self._user_log_folder: Path = Path(platform_dirs.user_log_dir)

        # Derive some secondary paths

        self._settings_file: Path = self._app_storage_folder / "settings.json"
        self._debug_file: Path = self._app_storage_folder / "DEBUG"
        self._log_file: Path = self._user_log_folder / LOG_FILE

        # Make sure important directories exist

        self._app_storage_folder.mkdir(parents=True, exist_ok=True)
        self._user_log_folder.mkdir(parents=True, exist_ok=True)

        self._is_initialized: bool = True

    @property
    def app_version(self) -> str:
        """
        Get the application version string.

        Returns:
            str: The version of the application.
        """
        return self._app_version

    @property
    def app_storage_folder(self) -> Path:
        """
        Get the path to the folder where user-specific data for the application is stored.

        This directory is determined using platform-specific conventions.

        Returns:
            Path: The path to the user-specific data folder.
        """
        return self._app_storage_folder

    @property
    def app_settings_file(self) -> Path:
        """
        Get the path to the JSON file holding the user's settings.

        Returns:
            Path: The path to the settings file.
        """
        return self._settings_file

    @property
    def debug_file(self) -> Path:
        """
        Get the path to the marker file that turns on log mirroring to the console.

        May or may not exist.
        """
        return self._debug_file

    @property
    def user_log_folder(self) -> Path:
        """
        Get the path to the folder where application logs are stored for the user.

        This directory is determined using platform-specific conventions.

        Returns:
            Path: The path to the user-specific log folder.
        """
        return self._user_log_folder

    @property
    def log_file(self) -> Path:
        """
        Get the path to the log file written during this process lifetime.
        """
        return self._log_file
