from dataclasses import dataclass
from typing import Any

import msgspec


class CaseInsensitiveStr(str):
    """
    Wraps a mod id. Forces the mod id to be case insensitive. Stores it internally as lowercase.
    """

    def __new__(cls, mid: str) -> "CaseInsensitiveStr":
        return super().__new__(cls, mid.lower())


class RequiredByInfo(msgspec.Struct):
    """A catalog entry that declares a dependency on another entry."""

    mod_id: str = msgspec.field(name="modId")
    name: str = ""


class ModFileInfo(msgspec.Struct):
    """File level information about one discovered mod.info."""

    path: str
    file_name: str
    size: int
    modified: str | None = None


@dataclass(frozen=True)
class ModDescriptor:
    """A single parsed mod.info file.

    Immutable once parsed. List fields are either None or non-empty; the parser
    never produces empty lists.

    Attributes:
        id (str): The composite id of the descriptor. The mod id if present, else the
            declared workshop id, else the descriptor path.
        mod_id (str | None): The declared mod id.
        name (str): The display name. Falls back to the mod id, then to "Unknown Mod".
        workshop_id (str | None): The declared or path derived workshop id.
        poster_image_paths (tuple[str, ...] | None): Resolved poster paths that exist on disk.
        mod_info_path (str | None): Path of the descriptor this record was parsed from.
        install_date (str | None): ISO 8601 modification time of the descriptor.
    """

    id: str
    name: str
    mod_id: str | None = None
    workshop_id: str | None = None
    author: str | None = None
    version: str | None = None
    version_min: str | None = None
    version_max: str | None = None
    install_date: str | None = None
    url: str | None = None
    requires: tuple[str, ...] | None = None
    dependencies: tuple[str, ...] | None = None
    load_after: tuple[str, ...] | None = None
    load_before: tuple[str, ...] | None = None
    incompatible: tuple[str, ...] | None = None
    packs: tuple[str, ...] | None = None
    tiledefs: tuple[str, ...] | None = None
    soundbanks: tuple[str, ...] | None = None
    worldmap: str | None = None
    icon: str | None = None
    preview_image_path: str | None = None
    poster_image_paths: tuple[str, ...] | None = None
    description: str | None = None
    mod_info_path: str | None = None


def _as_list(values: tuple[str, ...] | None) -> list[str] | None:
    return list(values) if values else None


@dataclass
class CatalogEntry:
    """The merged, cross referenced record for one logical mod.

    Carries every ModDescriptor field as a mutable accumulator for the merge stage,
    plus fields that are only ever supplied from outside the parser.

    Attributes:
        hidden (bool | None): Whether the user hid this mod. Supplied externally.
        favorite (bool | None): Whether the user favorited this mod. Supplied externally.
        required_by (list[RequiredByInfo] | None): Entries that require this entry. Derived
            on every aggregation pass, never merged.
        workshop (Any): Opaque enrichment metadata, usually a Steam Workshop file details object.
    """

    id: str
    name: str
    mod_id: str | None = None
    workshop_id: str | None = None
    author: str | None = None
    hidden: bool | None = None
    favorite: bool | None = None
    version: str | None = None
    version_min: str | None = None
    version_max: str | None = None
    install_date: str | None = None
    url: str | None = None
    requires: list[str] | None = None
    dependencies: list[str] | None = None
    load_after: list[str] | None = None
    load_before: list[str] | None = None
    incompatible: list[str] | None = None
    packs: list[str] | None = None
    tiledefs: list[str] | None = None
    soundbanks: list[str] | None = None
    worldmap: str | None = None
    icon: str | None = None
    preview_image_path: str | None = None
    poster_image_paths: list[str] | None = None
    description: str | None = None
    mod_info_path: str | None = None
    required_by: list[RequiredByInfo] | None = None
    workshop: Any = None

    @classmethod
    def from_descriptor(cls, descriptor: ModDescriptor) -> "CatalogEntry":
        return cls(
            id=descriptor.id,
            name=descriptor.name,
            mod_id=descriptor.mod_id,
            workshop_id=descriptor.workshop_id,
            author=descriptor.author,
            version=descriptor.version,
            version_min=descriptor.version_min,
            version_max=descriptor.version_max,
            install_date=descriptor.install_date,
            url=descriptor.url,
            requires=_as_list(descriptor.requires),
            dependencies=_as_list(descriptor.dependencies),
            load_after=_as_list(descriptor.load_after),
            load_before=_as_list(descriptor.load_before),
            incompatible=_as_list(descriptor.incompatible),
            packs=_as_list(descriptor.packs),
            tiledefs=_as_list(descriptor.tiledefs),
            soundbanks=_as_list(descriptor.soundbanks),
            worldmap=descriptor.worldmap,
            icon=descriptor.icon,
            preview_image_path=descriptor.preview_image_path,
            poster_image_paths=_as_list(descriptor.poster_image_paths),
            description=descriptor.description,
            mod_info_path=descriptor.mod_info_path,
        )


class ModFolderScanResult(msgspec.Struct):
    """Result of one aggregation pass over a mods folder."""

    files: list[ModFileInfo] = msgspec.field(default_factory=list)
    summaries: list[CatalogEntry] = msgspec.field(default_factory=list)


class CatalogWriteResult(msgspec.Struct):
    """Outcome of writing the catalog document."""

    created: bool
    path: str
