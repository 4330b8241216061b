from pathlib import Path

import msgspec
from loguru import logger

from modcatalog.utils.app_info import AppInfo


class Settings(msgspec.Struct):
    """
    Persisted configuration for catalog builds.

    Pure data class. Command line options take precedence over these values.

    Attributes:
        mods_path (str): Folder scanned for mod.info files, usually the workshop content folder for 108600.
        output_dir (str): Folder the catalog document is written to, usually Zomboid/Lua.
        workshop_db_path (str): Workshop metadata database used for enrichment. Empty disables enrichment.
        max_workers (int): Parser threads. 0 lets the executor decide.
        hidden_mods (list[str]): Mod ids flagged as hidden in the catalog.
        favorite_mods (list[str]): Mod ids flagged as favorite in the catalog.
    """

    mods_path: str = ""
    output_dir: str = ""
    workshop_db_path: str = ""
    max_workers: int = 0
    hidden_mods: list[str] = msgspec.field(default_factory=list)
    favorite_mods: list[str] = msgspec.field(default_factory=list)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """
        Load settings from disk. Missing or malformed settings fall back to defaults.
        """
        settings_file = path or AppInfo().app_settings_file
        if not settings_file.exists():
            logger.debug(f"No settings file at {settings_file}, using defaults")
            return cls()

        try:
            with open(settings_file, "rb") as f:
                return msgspec.json.decode(f.read(), type=cls)
        except (OSError, msgspec.DecodeError) as e:
            logger.warning(f"Unable to load settings from {settings_file}: {e}")
            return cls()

    def save(self, path: Path | None = None) -> None:
        """Write settings to disk. Raises an OSError if the file cannot be written."""
        settings_file = path or AppInfo().app_settings_file
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_file, "wb") as f:
            f.write(msgspec.json.format(msgspec.json.encode(self), indent=4))
        logger.info(f"Settings written to {settings_file}")
