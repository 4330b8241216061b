from typing import Iterable

from loguru import logger

from modcatalog.models.metadata.metadata_structure import (
    CaseInsensitiveStr,
    CatalogEntry,
    ModDescriptor,
)
from modcatalog.utils.constants import LIST_FIELDS

MERGED_STRING_FIELDS = (
    "mod_id",
    "workshop_id",
    "author",
    "version",
    "version_min",
    "version_max",
    "install_date",
    "url",
    "worldmap",
    "icon",
    "preview_image_path",
    "description",
    "mod_info_path",
)
MERGED_LIST_FIELDS = LIST_FIELDS + ("poster_image_paths",)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def merge_optional_string(base: str | None, incoming: str | None) -> str | None:
    """
    First non-blank value wins. The incoming value only replaces a missing or blank base.
    """
    if _is_blank(base) and not _is_blank(incoming):
        return incoming
    return base


def merge_optional_list(
    base: list[str] | None, incoming: list[str] | None
) -> list[str] | None:
    """
    Union two lists, keeping the order of base and appending incoming values that are
    not already present. Values are compared case insensitively and blank values are
    skipped. An empty union is returned as None.
    """
    values = list(base) if base else []
    seen = {CaseInsensitiveStr(value) for value in values}
    for value in incoming or ():
        if not value.strip():
            continue
        key = CaseInsensitiveStr(value)
        if key in seen:
            continue
        seen.add(key)
        values.append(value)
    return values or None


def merge_entry(base: CatalogEntry, incoming: CatalogEntry) -> CatalogEntry:
    """
    Merge incoming into base in place and return base.

    required_by, workshop, hidden and favorite are not part of the merge. required_by is
    recomputed after merging and the others are supplied by the caller afterwards.
    """
    if _is_blank(base.name) and not _is_blank(incoming.name):
        base.name = incoming.name

    for name in MERGED_STRING_FIELDS:
        setattr(
            base,
            name,
            merge_optional_string(getattr(base, name), getattr(incoming, name)),
        )

    for name in MERGED_LIST_FIELDS:
        setattr(
            base,
            name,
            merge_optional_list(getattr(base, name), getattr(incoming, name)),
        )

    return base


def identity_key(entry: CatalogEntry | ModDescriptor) -> CaseInsensitiveStr | None:
    """
    The key two records must share to describe the same mod.

    :return: name::mod_id, lower cased. None when either part is blank, meaning the
        record is never merged with anything.
    """
    mod_id = (entry.mod_id or "").strip()
    name = entry.name.strip()
    if not mod_id or not name:
        return None
    return CaseInsensitiveStr(f"{name}::{mod_id}")


def merge_descriptors(
    descriptors: Iterable[ModDescriptor | CatalogEntry],
) -> list[CatalogEntry]:
    """
    Deduplicate descriptors that describe the same mod.

    Descriptors sharing an identity key are merged in encounter order. Descriptors
    without a key are kept as standalone entries.

    :param descriptors: Parsed descriptors in a stable order.
    :return: Merged entries in first encounter order, followed by the standalone entries.
    """
    deduped: dict[CaseInsensitiveStr, CatalogEntry] = {}
    uniques: list[CatalogEntry] = []
    total = 0

    for descriptor in descriptors:
        total += 1
        entry = (
            CatalogEntry.from_descriptor(descriptor)
            if isinstance(descriptor, ModDescriptor)
            else descriptor
        )
        key = identity_key(entry)
        if key is None:
            uniques.append(entry)
            continue

        existing = deduped.get(key)
        if existing is None:
            deduped[key] = entry
        else:
            logger.debug(f"Merging duplicate mod.info for {key}: {entry.mod_info_path}")
            merge_entry(existing, entry)

    merged = list(deduped.values()) + uniques
    logger.info(
        f"Merged {total} mod.info records into {len(merged)} catalog entries "
        f"({len(uniques)} without a name or id)"
    )
    return merged
