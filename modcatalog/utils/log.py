import sys

import loguru
from loguru import logger

from modcatalog.utils.app_info import AppInfo
from modcatalog.utils.obfuscate_message import obfuscate_message


def formatter(record: "loguru.Record") -> str:
    """Custom formatter for loguru logger"""
    format_string = (
        "[{level}]"
        "[{time:YYYY-MM-DD HH:mm:ss}]"
        "[{process.id}]"
        "[{thread.name}]"
        "[{module}]"
        "[{function}][{line}]"
        " : "
    )

    record["extra"]["obfuscated_message"] = obfuscate_message(record["message"])
    return format_string + "{extra[obfuscated_message]}\n"


def debug_mode_enabled() -> bool:
    """Debug logging is enabled by a DEBUG file in the storage folder."""
    debug_file_path = AppInfo().app_storage_folder / "DEBUG"
    return debug_file_path.exists() and debug_file_path.is_file()


def setup_logger(debug: bool = False) -> None:
    """
    Replace loguru's default sink with a file sink and a WARNING stderr sink.

    The previous run's log is kept as <app>.old.log.
    """
    app_info = AppInfo()
    app_info.ensure_folders()
    debug = debug or debug_mode_enabled()

    log_file = app_info.user_log_folder / (app_info.app_name + ".log")
    old_log_file = app_info.user_log_folder / (app_info.app_name + ".old.log")
    if old_log_file.exists() and old_log_file.is_file():
        old_log_file.unlink()
    if log_file.exists() and log_file.is_file():
        log_file.rename(old_log_file)

    logger.remove()
    logger.add(log_file, level="DEBUG" if debug else "INFO", format=formatter)
    logger.add(
        sys.stderr,
        level="WARNING",
        format=formatter,
        colorize=False,
    )
    logger.debug(f"Logging to {log_file}")
