import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from loguru import logger

from modcatalog.models.metadata.metadata_structure import ModDescriptor, ModFileInfo
from modcatalog.utils.constants import MOD_INFO_FILENAME, UNKNOWN_MOD_NAME
from modcatalog.utils.exception import ModInfoReadError

COMMENT_PREFIXES = ("#", "//", ";")
LIST_SEPARATORS = (";", ",", "\n", "\r")
QUOTE_CHARS = ('"', "'")


def strip_quotes(value: str) -> str:
    """
    Strip one layer of matching quote characters from a trimmed value.

    :param value: The value to strip.
    :return: The value without its surrounding quotes.
    """
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in QUOTE_CHARS:
        return value[1:-1].strip()
    return value


def parse_list(raw: str) -> list[str]:
    """
    Split a raw mod.info value into its tokens.

    Tokens are separated by any of ';', ',', '\\n' or '\\r'. Surrounding whitespace and
    quotes are removed and empty tokens are dropped. Order and duplicates are kept.

    :param raw: The raw value.
    :return: The list of tokens.
    """
    for separator in LIST_SEPARATORS[1:]:
        raw = raw.replace(separator, LIST_SEPARATORS[0])
    tokens = (strip_quotes(part) for part in raw.split(LIST_SEPARATORS[0]))
    return [token for token in tokens if token]


def normalize_mod_ref(raw: str) -> str:
    """
    Normalize a reference to another mod id.

    Older mods escape their ids with a leading backslash, e.g. require=\\tsarslib.
    """
    value = strip_quotes(raw)
    if value.startswith("\\"):
        value = value[1:]
    return value


def resolve_relative_path(base: Path, value: str) -> str | None:
    """
    Resolve a path declared inside a mod.info.

    Absolute paths are kept as is and relative paths are joined to the descriptor's
    directory. Either way the path must exist, otherwise None is returned.

    :param base: The directory containing the mod.info.
    :param value: The declared path.
    :return: The resolved path, or None if it does not exist.
    """
    trimmed = value.strip()
    if not trimmed:
        return None

    candidate = Path(trimmed)
    if not candidate.is_absolute():
        candidate = base / trimmed

    if candidate.exists():
        return str(candidate)
    return None


def derive_workshop_id(base: str, mod_info_path: str) -> str | None:
    """
    Derive a workshop id from the location of a mod.info.

    Workshop content is laid out as <base>/<workshop id>/mods/<mod>/mod.info, so the
    first path segment below the base is the workshop id when it is all digits.

    :param base: The workshop content folder that was scanned.
    :param mod_info_path: The path of the mod.info.
    :return: The workshop id, or None if the path does not match the layout.
    """
    base_norm = base.replace("\\", "/").rstrip("/")
    mod_norm = mod_info_path.replace("\\", "/")

    if not mod_norm.startswith(base_norm + "/"):
        return None

    relative = mod_norm[len(base_norm) :].lstrip("/")
    parts = [part for part in relative.split("/") if part]
    if not parts:
        return None

    first = parts[0]
    if first.isascii() and first.isdigit():
        return first
    return None


def to_iso_string(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


@dataclass
class _ParsedFields:
    scalars: dict[str, str | None] = field(default_factory=dict)
    lists: dict[str, list[str]] = field(default_factory=dict)


FieldSetter = Callable[[_ParsedFields, str, Path], None]


def _scalar(name: str) -> FieldSetter:
    def setter(fields: _ParsedFields, value: str, base_dir: Path) -> None:
        fields.scalars[name] = value

    return setter


def _listed(name: str) -> FieldSetter:
    def setter(fields: _ParsedFields, value: str, base_dir: Path) -> None:
        fields.lists.setdefault(name, []).extend(parse_list(value))

    return setter


def _resolved(name: str) -> FieldSetter:
    def setter(fields: _ParsedFields, value: str, base_dir: Path) -> None:
        fields.scalars[name] = resolve_relative_path(base_dir, value)

    return setter


def _resolved_list(name: str) -> FieldSetter:
    def setter(fields: _ParsedFields, value: str, base_dir: Path) -> None:
        resolved = fields.lists.setdefault(name, [])
        for entry in parse_list(value):
            path = resolve_relative_path(base_dir, entry)
            if path is not None:
                resolved.append(path)

    return setter


# Historical mod.info spellings mapped to the field they set. New aliases go here.
MOD_INFO_KEY_SETTERS: dict[str, FieldSetter] = {
    "id": _scalar("mod_id"),
    "modid": _scalar("mod_id"),
    "name": _scalar("name"),
    "workshopid": _scalar("workshop_id"),
    "author": _scalar("author"),
    "authors": _scalar("author"),
    "version": _scalar("version"),
    "modversion": _scalar("version"),
    "versionmin": _scalar("version_min"),
    "version_min": _scalar("version_min"),
    "versionmax": _scalar("version_max"),
    "version_max": _scalar("version_max"),
    "url": _scalar("url"),
    "description": _scalar("description"),
    "require": _listed("requires"),
    "requires": _listed("requires"),
    "depend": _listed("dependencies"),
    "dependencies": _listed("dependencies"),
    "loadafter": _listed("load_after"),
    "loadbefore": _listed("load_before"),
    "incompatible": _listed("incompatible"),
    "pack": _listed("packs"),
    "packs": _listed("packs"),
    "tiledef": _listed("tiledefs"),
    "tiledefs": _listed("tiledefs"),
    "soundbank": _listed("soundbanks"),
    "soundbanks": _listed("soundbanks"),
    "worldmap": _scalar("worldmap"),
    "icon": _resolved("icon"),
    "iconfile": _resolved("icon"),
    "preview": _resolved("preview_image_path"),
    "previewimage": _resolved("preview_image_path"),
    "preview_image": _resolved("preview_image_path"),
    "poster": _resolved_list("poster_image_paths"),
    "posters": _resolved_list("poster_image_paths"),
}


def _parse_lines(content: str, base_dir: Path) -> _ParsedFields:
    fields = _ParsedFields()
    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue

        key_raw, separator, value_raw = line.partition("=")
        if not separator:
            continue

        value = value_raw.strip()
        if not value:
            continue

        setter = MOD_INFO_KEY_SETTERS.get(key_raw.strip().lower())
        if setter is not None:
            setter(fields, value, base_dir)
    return fields


def parse_mod_info(
    content: str,
    info_path: Path,
    workshop_id: str | None = None,
    install_date: str | None = None,
) -> ModDescriptor:
    """
    Parse the text of a mod.info into a ModDescriptor.

    Malformed lines are skipped, unknown keys are ignored. Relative image paths are
    resolved against the directory containing info_path.

    :param content: The text of the mod.info.
    :param info_path: Where the text was read from.
    :param workshop_id: Fallback workshop id, used when the file declares none.
    :param install_date: ISO 8601 modification time of the file.
    :return: The parsed descriptor.
    """
    fields = _parse_lines(content, info_path.parent)
    scalars = fields.scalars

    info_path_str = str(info_path)
    mod_id = scalars.get("mod_id")
    declared_workshop_id = scalars.get("workshop_id")
    name = scalars.get("name") or mod_id or UNKNOWN_MOD_NAME

    def listed(key: str) -> tuple[str, ...] | None:
        values = fields.lists.get(key)
        return tuple(values) if values else None

    return ModDescriptor(
        id=mod_id or declared_workshop_id or info_path_str,
        name=name,
        mod_id=mod_id,
        workshop_id=declared_workshop_id or workshop_id,
        author=scalars.get("author"),
        version=scalars.get("version"),
        version_min=scalars.get("version_min"),
        version_max=scalars.get("version_max"),
        install_date=install_date,
        url=scalars.get("url"),
        requires=listed("requires"),
        dependencies=listed("dependencies"),
        load_after=listed("load_after"),
        load_before=listed("load_before"),
        incompatible=listed("incompatible"),
        packs=listed("packs"),
        tiledefs=listed("tiledefs"),
        soundbanks=listed("soundbanks"),
        worldmap=scalars.get("worldmap"),
        icon=scalars.get("icon"),
        preview_image_path=scalars.get("preview_image_path"),
        poster_image_paths=listed("poster_image_paths"),
        description=scalars.get("description"),
        mod_info_path=info_path_str,
    )


def create_descriptor_from_path(
    path: Path, base_path: str | None = None
) -> tuple[ModFileInfo, ModDescriptor]:
    """
    Read and parse the mod.info at the given path.

    :param path: Path to the mod.info.
    :param base_path: The scanned root folder, used to derive a workshop id from the path.
    :return: A tuple of the file information and the parsed descriptor.
    :raises ModInfoReadError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        stat = os.stat(path)
        with open(path, "rb") as f:
            content = f.read().decode("utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Unable to read mod.info at {path}: {e}")
        raise ModInfoReadError(str(path), str(e)) from e

    modified = to_iso_string(stat.st_mtime)
    file_info = ModFileInfo(
        path=str(path),
        file_name=MOD_INFO_FILENAME,
        size=stat.st_size,
        modified=modified,
    )

    fallback_workshop_id = (
        derive_workshop_id(base_path, str(path)) if base_path is not None else None
    )
    descriptor = parse_mod_info(
        content,
        path,
        workshop_id=fallback_workshop_id,
        install_date=modified,
    )
    logger.debug(f"Parsed mod.info for {descriptor.name} at {path}")
    return file_info, descriptor
