import os
from pathlib import Path
from typing import Any, Iterable

import msgspec
from loguru import logger

from modcatalog.models.metadata.metadata_structure import (
    CaseInsensitiveStr,
    CatalogEntry,
)
from modcatalog.utils.constants import (
    CREATOR_URL_QUERY,
    WORKSHOP_CREATOR_NAME_KEY,
    WORKSHOP_ID_KEYS,
    WORKSHOP_METADATA_DENYLIST,
)
from modcatalog.utils.exception import MalformedDataException


def strip_workshop_metadata(value: Any) -> Any:
    """
    Return a copy of the workshop metadata without identity, moderation and bandwidth
    heavy fields. Keys are matched case insensitively. Anything that is not an object
    is returned unchanged.

    :param value: The workshop metadata attached to a catalog entry.
    :return: The filtered copy.
    """
    if not isinstance(value, dict):
        return value
    return {
        key: val
        for key, val in value.items()
        if key.lower() not in WORKSHOP_METADATA_DENYLIST
    }


def json_value_to_id(value: Any) -> str | None:
    """
    Convert a decoded JSON value to a workshop id. Accepts non-blank strings and numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    if isinstance(value, (int, float)):
        return repr(value)
    return None


def workshop_key_for_mod(entry: CatalogEntry) -> str | None:
    """
    Resolve the workshop id of an entry.

    The entry's own workshop id wins. Otherwise the attached workshop metadata is
    checked for fileid, then publishedfileid.
    """
    if entry.workshop_id is not None and entry.workshop_id.strip():
        return entry.workshop_id.strip()

    if not isinstance(entry.workshop, dict):
        return None
    return _metadata_workshop_id(entry.workshop)


def _metadata_workshop_id(metadata: dict[str, Any]) -> str | None:
    for key in WORKSHOP_ID_KEYS:
        value = json_value_to_id(metadata.get(key))
        if value is not None:
            return value
    return None


def workshop_creator_name(entry: CatalogEntry) -> str | None:
    if not isinstance(entry.workshop, dict):
        return None
    value = entry.workshop.get(WORKSHOP_CREATOR_NAME_KEY)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def amend_creator_url(url: str) -> str:
    """Make sure a Steam profile url carries the Project Zomboid app id."""
    trimmed = url.strip()
    if CREATOR_URL_QUERY in trimmed:
        return trimmed
    return f"{trimmed}?{CREATOR_URL_QUERY}"


def read_workshop_db(path: Path) -> dict[str, Any] | None:
    """Reads a workshop metadata database from the json file at the given path.

    The database is either an object keyed by workshop id, or a list of workshop
    file details objects which are then keyed by their fileid / publishedfileid.

    :param path: Path to the workshop metadata database.
    :type path: Path
    :return: The database keyed by workshop id, or None if the file does not exist.
    :rtype: dict[str, Any] | None
    :raises MalformedDataException: If the file is not a valid database.
    """
    logger.info(f"Checking workshop metadata DB at: {path}")
    if not os.path.exists(path):
        logger.warning("Workshop metadata DB not found at specified path.")
        return None

    with open(path, "rb") as f:
        raw = f.read()

    try:
        data = msgspec.json.decode(raw, type=dict[str, Any] | list[Any])
    except msgspec.ValidationError as e:
        raise MalformedDataException(
            f"{path} is not a JSON object or array: {e}"
        ) from e
    except msgspec.DecodeError as e:
        raise MalformedDataException(f"{path} is not valid JSON: {e}") from e

    if isinstance(data, dict):
        database = {str(key).strip(): value for key, value in data.items()}
    else:
        database = {}
        for item in data:
            if not isinstance(item, dict):
                logger.warning(f"Skipping workshop metadata that is not an object: {item}")
                continue
            item_id = _metadata_workshop_id(item)
            if item_id is None:
                logger.warning("Skipping workshop metadata without a file id")
                continue
            database[item_id] = item

    logger.info(f"Loaded workshop metadata for {len(database)} items")
    return database


def attach_workshop_metadata(
    entries: Iterable[CatalogEntry], database: dict[str, Any]
) -> int:
    """
    Attach workshop metadata to every entry whose workshop id is in the database.

    :return: The number of entries that received metadata.
    """
    attached = 0
    for entry in entries:
        workshop_id = workshop_key_for_mod(entry)
        if workshop_id is None:
            continue
        metadata = database.get(workshop_id)
        if metadata is None:
            continue
        entry.workshop = metadata
        attached += 1
    logger.info(f"Attached workshop metadata to {attached} catalog entries")
    return attached


def apply_flags(
    entries: Iterable[CatalogEntry],
    hidden: Iterable[str] = (),
    favorite: Iterable[str] = (),
) -> None:
    """
    Set the hidden and favorite flags from collections of mod ids (case insensitive).
    """
    hidden_ids = {CaseInsensitiveStr(mid.strip()) for mid in hidden}
    favorite_ids = {CaseInsensitiveStr(mid.strip()) for mid in favorite}
    for entry in entries:
        mod_id = CaseInsensitiveStr((entry.mod_id or "").strip())
        if not mod_id:
            continue
        entry.hidden = mod_id in hidden_ids
        entry.favorite = mod_id in favorite_ids
