from loguru import logger

from modcatalog.models.metadata.metadata_factory import normalize_mod_ref
from modcatalog.models.metadata.metadata_structure import (
    CaseInsensitiveStr,
    CatalogEntry,
    RequiredByInfo,
)


def _mod_id(entry: CatalogEntry) -> str:
    return (entry.mod_id or "").strip()


def gen_mod_id_index(entries: list[CatalogEntry]) -> dict[str, tuple[str, str]]:
    """
    Index entries by their lower cased mod id.

    Schema: {mod_id.lower(): (mod_id, name)}
    """
    by_mod_id: dict[str, tuple[str, str]] = {}
    for entry in entries:
        mod_id = _mod_id(entry)
        if not mod_id:
            continue
        by_mod_id[CaseInsensitiveStr(mod_id)] = (mod_id, entry.name.strip())
    return by_mod_id


def gen_required_by_graph(
    entries: list[CatalogEntry],
) -> dict[str, list[RequiredByInfo]]:
    """
    Generate the reverse dependency graph from every entry's requires and dependencies.

    References to ids that are not in the catalog are ignored, as are references an
    entry makes to itself. A requester is listed at most once per target.

    Schema: {target_mod_id.lower(): [RequiredByInfo, ...]}, each list sorted by
    requester name, case insensitive.
    """
    logger.debug("Generating required by graph")
    by_mod_id = gen_mod_id_index(entries)

    required_by: dict[str, list[RequiredByInfo]] = {}
    for entry in entries:
        source_id = _mod_id(entry)
        if not source_id:
            continue
        source_key = CaseInsensitiveStr(source_id)

        raw_refs = (entry.requires or []) + (entry.dependencies or [])
        for raw in raw_refs:
            key = CaseInsensitiveStr(normalize_mod_ref(raw))
            if key not in by_mod_id or key == source_key:
                continue
            requesters = required_by.setdefault(key, [])
            if any(info.mod_id == source_id for info in requesters):
                continue
            requesters.append(RequiredByInfo(mod_id=source_id, name=entry.name))

    for requesters in required_by.values():
        requesters.sort(key=lambda info: info.name.lower())

    logger.debug(
        f"Finished generating required by graph for {len(required_by)} mods "
        f"with {sum(len(v) for v in required_by.values())} links"
    )
    return required_by


def apply_required_by(entries: list[CatalogEntry]) -> list[CatalogEntry]:
    """
    Recompute required_by on every entry in place.

    Entries nobody requires end up with required_by set to None.
    """
    required_by = gen_required_by_graph(entries)
    for entry in entries:
        entry.required_by = None
        mod_id = _mod_id(entry)
        if not mod_id:
            continue
        requesters = required_by.get(CaseInsensitiveStr(mod_id))
        if requesters:
            entry.required_by = list(requesters)
    return entries
