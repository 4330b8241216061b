"""
Renders the mod catalog as a Lua table literal.

The document is loaded with dofile() by the in-game mod, so the output must be
deterministic and valid Lua for any input.
"""

import math
import os
import re
import stat
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from modcatalog.models.metadata.metadata_structure import (
    CatalogEntry,
    CatalogWriteResult,
    RequiredByInfo,
)
from modcatalog.utils.constants import (
    CATALOG_FILENAME,
    CATALOG_ROOT_KEY,
    CREATOR_URL_FIELD,
    LIST_FIELDS,
    LUA_KEYWORDS,
)
from modcatalog.utils.exception import CatalogWriteError
from modcatalog.utils.workshop import (
    amend_creator_url,
    strip_workshop_metadata,
    workshop_creator_name,
    workshop_key_for_mod,
)

LUA_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
LUA_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
# Seconds fraction of an ISO 8601 time, any number of digits
ISO_FRACTION = re.compile(r"(:\d{2})\.(\d+)")
ENTRY_INDENT = " " * 6


def lua_escape(value: str) -> str:
    return "".join(LUA_ESCAPES.get(ch, ch) for ch in value)


def lua_string(value: str) -> str:
    return f'"{lua_escape(value)}"'


def lua_bool(value: bool) -> str:
    return "true" if value else "false"


def lua_number(value: int | float) -> str:
    if isinstance(value, float) and not math.isfinite(value):
        return "nil"
    return repr(value)


def lua_string_list(values: Iterable[str]) -> str:
    items = ", ".join(lua_string(value) for value in values)
    return f"{{ {items} }}" if items else "{}"


def lua_required_by_list(values: Iterable[RequiredByInfo]) -> str:
    items = []
    for info in values:
        fields = []
        if info.mod_id.strip():
            fields.append(f"modId = {lua_string(info.mod_id.strip())}")
        if info.name.strip():
            fields.append(f"name = {lua_string(info.name.strip())}")
        if fields:
            items.append(f"{{ {', '.join(fields)} }}")
    return f"{{ {', '.join(items)} }}" if items else "{}"


def lua_value(value: Any) -> str:
    """
    Render a decoded JSON value as a Lua literal.

    Object keys are sorted so that the same metadata always renders the same way.
    """
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return lua_bool(value)
    if isinstance(value, (int, float)):
        return lua_number(value)
    if isinstance(value, str):
        return lua_string(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return "{}"
        return f"{{ {', '.join(lua_value(item) for item in value)} }}"
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = ", ".join(
            f"[{lua_string(str(key))}] = {lua_value(value[key])}"
            for key in sorted(value, key=str)
        )
        return f"{{ {items} }}"
    logger.warning(f"Cannot render {type(value).__name__} as Lua, writing nil")
    return "nil"


def lua_key(key: str) -> str:
    """
    Render a table key. Valid Lua identifiers are written bare, anything else as ["key"].
    Reserved words are identifiers too but cannot be used bare.
    """
    trimmed = key.strip()
    if (
        trimmed
        and LUA_IDENTIFIER.fullmatch(trimmed)
        and trimmed not in LUA_KEYWORDS
    ):
        return trimmed
    return f"[{lua_string(trimmed or key)}]"


def install_date_to_epoch(value: str) -> int | None:
    """
    Convert an ISO 8601 timestamp with a UTC offset to epoch seconds.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat only accepts 3 or 6 fraction digits before Python 3.11
    text = ISO_FRACTION.sub(
        lambda m: f"{m.group(1)}.{(m.group(2) + '0' * 6)[:6]}", text, count=1
    )
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return math.floor(parsed.timestamp())


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def catalog_id(entry: CatalogEntry) -> str:
    """
    The id written for an entry: \\<mod id>, suffixed with ::<workshop id> when known.

    The leading backslash matches how Project Zomboid escapes ids in its own mod lists.
    """
    id_value = _blank_to_none(entry.mod_id) or entry.id
    if not id_value.startswith("\\"):
        id_value = f"\\{id_value}"
    workshop_id = workshop_key_for_mod(entry)
    if workshop_id:
        return f"{id_value}::{workshop_id}"
    return id_value


def render_entry(entry: CatalogEntry) -> list[str]:
    """Render one catalog entry as the lines of a Lua table constructor."""
    fields: list[tuple[str, str]] = []

    fields.append(("id", lua_string(catalog_id(entry))))
    fields.append(("workshop_id", lua_string(workshop_key_for_mod(entry) or "")))

    author = _blank_to_none(entry.author) or workshop_creator_name(entry)
    if author:
        fields.append(("author", lua_string(author)))

    fields.append(("hidden", lua_bool(bool(entry.hidden))))
    fields.append(("favorite", lua_bool(bool(entry.favorite))))

    for name in ("version", "version_min", "version_max"):
        value = _blank_to_none(getattr(entry, name))
        if value:
            fields.append((name, lua_string(value)))

    install_date = _blank_to_none(entry.install_date)
    if install_date:
        epoch = install_date_to_epoch(install_date)
        if epoch is not None:
            fields.append(("install_date", str(epoch)))

    url = _blank_to_none(entry.url)
    if url:
        fields.append(("url", lua_string(url)))

    for name in LIST_FIELDS:
        values = getattr(entry, name)
        if values:
            fields.append((name, lua_string_list(values)))

    for name in ("worldmap", "preview_image_path"):
        value = _blank_to_none(getattr(entry, name))
        if value:
            fields.append((name, lua_string(value)))

    if entry.required_by:
        fields.append(("required_by", lua_required_by_list(entry.required_by)))

    workshop_meta = (
        strip_workshop_metadata(entry.workshop) if entry.workshop is not None else None
    )
    if isinstance(workshop_meta, dict):
        for key in sorted(workshop_meta, key=str):
            value = workshop_meta[key]
            if key == CREATOR_URL_FIELD and isinstance(value, str) and value.strip():
                fields.append((lua_key(key), lua_string(amend_creator_url(value))))
            else:
                fields.append((lua_key(str(key)), lua_value(value)))

    lines = ["    {"]
    lines.extend(f"{ENTRY_INDENT}{key} = {value}," for key, value in fields)
    lines.append("    },")
    return lines


def render_catalog(entries: Iterable[CatalogEntry]) -> str:
    """
    Render the full catalog document.

    The document is a chunk returning a table with every entry under the mods key.
    """
    lines = ["return {", f"  {CATALOG_ROOT_KEY} = {{"]
    for entry in entries:
        lines.extend(render_entry(entry))
    lines.append("  }")
    lines.append("}")
    return "\n".join(lines)


def _catalog_mode(path: Path) -> int:
    """The existing catalog's permission bits, or 0o666 minus the umask for a new file."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_catalog(
    base_dir: str | Path, entries: Iterable[CatalogEntry]
) -> CatalogWriteResult:
    """
    Render the catalog and write it to <base_dir>/honus_miqol_db.lua.

    The document is written to a temporary file first and moved into place, so a
    failed write never leaves a partial catalog behind.
    The file keeps the permissions of the catalog it replaces.

    :param base_dir: Directory to write the catalog into. Created if missing.
    :param entries: The catalog entries to write.
    :return: Whether the file was newly created, and its path.
    :raises CatalogWriteError: If base_dir is blank or the file cannot be written.
    """
    if not str(base_dir).strip():
        raise CatalogWriteError(str(base_dir), "no output directory given")

    path = (Path(str(base_dir).strip()) / CATALOG_FILENAME).absolute()
    created = not path.exists()
    content = render_catalog(entries).encode("utf-8")

    logger.info(f"Writing mod catalog to: {path}")
    temp_path: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            prefix=f".{CATALOG_FILENAME}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        # mkstemp creates the file as 0600
        os.chmod(temp_path, _catalog_mode(path))
        os.replace(temp_path, path)
        temp_path = None
    except OSError as e:
        logger.error(f"Error writing mod catalog: {e}")
        raise CatalogWriteError(str(path), str(e)) from e
    finally:
        if temp_path is not None and os.path.exists(temp_path):
            os.unlink(temp_path)

    logger.info(
        f"Mod catalog {'created' if created else 'updated'} at {path} ({len(content)} bytes)"
    )
    return CatalogWriteResult(created=created, path=str(path))
