"""
This module is to be used with loguru to remove the user's name from logged paths.

Mod folders live below the user's home directory (Steam libraries, the Zomboid
folder), so most catalog log lines contain one.
"""

import re

WINDOWS_HOME = re.compile(r"([A-Za-z]:\\Users\\)[^\\]+\\")
LINUX_HOME = re.compile(r"/home/[^/]+/")
MACOS_HOME = re.compile(r"/Users/[^/]+/")


def obfuscate_message(message: str, anonymize_path: bool = True) -> str:
    """
    Obfuscate the message such that it does not reveal user information.

    Args:
        message: The message to obfuscate.
        anonymize_path: Whether to anonymize home folder paths in the message.

    Returns:
        The obfuscated message.
    """
    if anonymize_path:
        message = _anonymize_path(message)

    return message


def _anonymize_path(message: str) -> str:
    # Keep the drive letter on Windows, drop only the user name
    message = WINDOWS_HOME.sub(r"\1...\\", message)
    message = LINUX_HOME.sub("/home/.../", message)
    message = MACOS_HOME.sub("/Users/.../", message)
    return message
