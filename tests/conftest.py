from pathlib import Path
from typing import Callable

import pytest

from modcatalog.models.metadata.metadata_structure import CatalogEntry


@pytest.fixture
def write_mod_info(tmp_path: Path) -> Callable[..., Path]:
    """
    Write a mod.info below tmp_path and return its path.

    The relative folder is created on demand, e.g. "108600/123/mods/Foo".
    """

    def _write(folder: str, content: str, file_name: str = "mod.info") -> Path:
        directory = tmp_path / folder
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / file_name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_entry() -> Callable[..., CatalogEntry]:
    """Build a CatalogEntry whose id and name default to the given mod id."""

    def _make(mod_id: str | None = None, **kwargs: object) -> CatalogEntry:
        kwargs.setdefault("name", mod_id or "")
        return CatalogEntry(id=mod_id or "", mod_id=mod_id, **kwargs)  # type: ignore[arg-type]

    return _make
