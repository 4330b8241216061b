from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from modcatalog.models.metadata.metadata_factory import create_descriptor_from_path
from modcatalog.models.metadata.metadata_merge import merge_descriptors
from modcatalog.models.metadata.metadata_structure import (
    CatalogEntry,
    CatalogWriteResult,
    ModDescriptor,
    ModFileInfo,
    ModFolderScanResult,
)
from modcatalog.sort.dependencies import apply_required_by
from modcatalog.utils.exception import ModsPathError
from modcatalog.utils.files import find_mod_info_files
from modcatalog.utils.lua import write_catalog
from modcatalog.utils.workshop import apply_flags, attach_workshop_metadata


class CatalogMediator:
    "Mediator class for one mods folder and its catalog."

    _scan_result: ModFolderScanResult | None = None

    def __init__(
        self,
        mods_path: Path,
        max_workers: int | None = None,
    ):
        self.mods_path = mods_path
        self.max_workers = max_workers or None

    @property
    def scan_result(self) -> ModFolderScanResult:
        if self._scan_result is None:
            raise ValueError("Catalog has not been refreshed")
        return self._scan_result

    @property
    def entries(self) -> list[CatalogEntry]:
        return self.scan_result.summaries

    def refresh_catalog(self) -> ModFolderScanResult:
        """
        Rebuild the catalog from the mod.info files below mods_path.

        Files are parsed in parallel. Merging and cross referencing start only once every
        file has been parsed. Any file that cannot be read aborts the refresh and the
        previous catalog is kept.

        :return: The files found and the merged, cross referenced catalog entries.
        :raises ModsPathError: If mods_path is not a directory.
        :raises ModInfoReadError: If a discovered mod.info cannot be read.
        """
        if not self.mods_path.exists() or not self.mods_path.is_dir():
            raise ModsPathError(str(self.mods_path))

        paths = find_mod_info_files(self.mods_path)
        parsed = self._parse_all(paths)

        files: list[ModFileInfo] = [file_info for file_info, _ in parsed]
        descriptors: list[ModDescriptor] = [descriptor for _, descriptor in parsed]

        entries = merge_descriptors(descriptors)
        apply_required_by(entries)

        self._scan_result = ModFolderScanResult(files=files, summaries=entries)
        logger.info(f"Catalog refresh complete, found {len(entries)} mods")
        return self._scan_result

    def _parse_all(self, paths: list[Path]) -> list[tuple[ModFileInfo, ModDescriptor]]:
        base_path = str(self.mods_path)

        def parse(path: Path) -> tuple[ModFileInfo, ModDescriptor]:
            return create_descriptor_from_path(path, base_path)

        logger.debug(
            f"Parsing {len(paths)} mod.info files with max_workers={self.max_workers}"
        )
        # executor.map yields in input order, independent of completion order
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(parse, paths))

    def attach_workshop_metadata(self, database: dict[str, Any]) -> int:
        return attach_workshop_metadata(self.entries, database)

    def apply_flags(
        self, hidden: Iterable[str] = (), favorite: Iterable[str] = ()
    ) -> None:
        apply_flags(self.entries, hidden=hidden, favorite=favorite)

    def write_catalog(self, base_dir: str | Path) -> CatalogWriteResult:
        return write_catalog(base_dir, self.entries)
