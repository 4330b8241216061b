from importlib import metadata
from pathlib import Path

from platformdirs import PlatformDirs

DISTRIBUTION_NAME = "pz-mod-catalog"


class AppInfo:
    """
    Singleton class that provides information about the application and its related directories.

    The directories are determined using the `platformdirs` package, ensuring
    platform-specific conventions are adhered to.

    Examples:
        >>> print(AppInfo().app_name)
        >>> print(AppInfo().app_storage_folder)
    """

    _instance: "None | AppInfo" = None

    def __new__(cls) -> "AppInfo":
        if not cls._instance:
            cls._instance = super(AppInfo, cls).__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_is_initialized") and self._is_initialized:
            return

        self._app_name = "ModCatalog"

        try:
            self._app_version = metadata.version(DISTRIBUTION_NAME)
        except metadata.PackageNotFoundError:
            self._app_version = "Unknown version"

        platform_dirs = PlatformDirs(appname=self._app_name, appauthor=False)
        self._app_storage_folder: Path = Path(platform_dirs.user_data_dir)
        self._user_log_folder: Path = Path(platform_dirs.user_log_dir)

        self._databases_folder: Path = self._app_storage_folder / "dbs"
        self._settings_file: Path = self._app_storage_folder / "settings.json"
        self._workshop_db_file: Path = self._databases_folder / "workshop.json"

        self._is_initialized: bool = True

    def ensure_folders(self) -> None:
        """Create the storage, log and database folders if they are missing."""
        self._app_storage_folder.mkdir(parents=True, exist_ok=True)
        self._user_log_folder.mkdir(parents=True, exist_ok=True)
        self._databases_folder.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        return self._app_name

    @property
    def app_version(self) -> str:
        return self._app_version

    @property
    def app_storage_folder(self) -> Path:
        """
        Get the folder where app-specific data is stored.

        Returns:
            Path: The user data folder path.
        """
        return self._app_storage_folder

    @property
    def user_log_folder(self) -> Path:
        return self._user_log_folder

    @property
    def databases_folder(self) -> Path:
        return self._databases_folder

    @property
    def app_settings_file(self) -> Path:
        return self._settings_file

    @property
    def workshop_db_file(self) -> Path:
        """
        Default location of the workshop metadata database.

        Returns:
            Path: dbs/workshop.json inside the storage folder.
        """
        return self._workshop_db_file
