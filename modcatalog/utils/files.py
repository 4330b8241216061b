import os
from pathlib import Path
from typing import Generator

from loguru import logger

from modcatalog.utils.constants import MOD_INFO_FILENAME


def scanpath(path: Path | str) -> Generator[os.DirEntry[str], None, None]:
    try:
        with os.scandir(path) as it:
            yield from it
    except OSError as e:
        logger.error(f"os.scandir failed for directory {path}: {e}")


def find_mod_info_files(
    root: Path | str, file_name: str = MOD_INFO_FILENAME
) -> list[Path]:
    """
    Find every mod.info below root.

    File names are matched exactly but case insensitively. Symlinked directories are
    followed, each real directory is visited once. Directories that cannot be listed
    are logged and skipped.

    :param root: The folder to search, e.g. the workshop content folder for 108600.
    :param file_name: The descriptor file name to look for.
    :return: The matching paths, sorted lexicographically.
    """
    target = file_name.lower()
    found: list[Path] = []
    visited: set[str] = set()
    pending = [Path(root)]

    while pending:
        directory = pending.pop()
        try:
            real = os.path.realpath(directory)
        except OSError as e:
            logger.warning(f"Unable to resolve directory {directory}: {e}")
            continue
        if real in visited:
            continue
        visited.add(real)

        for entry in scanpath(directory):
            try:
                if entry.is_dir(follow_symlinks=True):
                    pending.append(Path(entry.path))
                elif entry.is_file(follow_symlinks=True) and entry.name.lower() == target:
                    found.append(Path(entry.path))
            except OSError as e:
                logger.warning(f"Unable to stat {entry.path}: {e}")

    found.sort(key=str)
    logger.info(f"Found {len(found)} {file_name} files under {root}")
    return found
