from pathlib import Path
from typing import Callable

import pytest

from modcatalog.models.metadata.metadata_factory import (
    create_descriptor_from_path,
    derive_workshop_id,
    normalize_mod_ref,
    parse_list,
    parse_mod_info,
    resolve_relative_path,
    strip_quotes,
)
from modcatalog.utils.exception import ModInfoReadError

INFO_PATH = Path("/mods/workshop/Example/mod.info")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("plain", "plain"),
        ('  "quoted"  ', "quoted"),
        ("'single'", "single"),
        ('" padded "', "padded"),
        ("\"'nested'\"", "'nested'"),
        ('"mismatched\'', '"mismatched\''),
        ('"', '"'),
        ("", ""),
    ],
)
def test_strip_quotes(value: str, expected: str) -> None:
    assert strip_quotes(value) == expected


def test_parse_list_separators() -> None:
    assert parse_list("a;b,c\nd\re") == ["a", "b", "c", "d", "e"]


def test_parse_list_drops_blank_tokens_and_quotes() -> None:
    assert parse_list(' "a" ;; , b ;"" ; ') == ["a", "b"]


def test_parse_list_keeps_order_and_duplicates() -> None:
    assert parse_list("b,a,b") == ["b", "a", "b"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("tsarslib", "tsarslib"),
        ("\\tsarslib", "tsarslib"),
        ('"\\tsarslib"', "tsarslib"),
        (" Brita ", "Brita"),
        ("\\\\double", "\\double"),
    ],
)
def test_normalize_mod_ref(raw: str, expected: str) -> None:
    assert normalize_mod_ref(raw) == expected


def test_resolve_relative_path(tmp_path: Path) -> None:
    (tmp_path / "poster.png").write_bytes(b"")

    assert resolve_relative_path(tmp_path, "poster.png") == str(tmp_path / "poster.png")
    assert resolve_relative_path(tmp_path, " poster.png ") == str(
        tmp_path / "poster.png"
    )
    assert resolve_relative_path(tmp_path, "missing.png") is None
    assert resolve_relative_path(tmp_path, "   ") is None


def test_resolve_relative_path_absolute(tmp_path: Path) -> None:
    other = tmp_path / "elsewhere"
    other.mkdir()
    icon = other / "icon.png"
    icon.write_bytes(b"")

    assert resolve_relative_path(tmp_path / "unrelated", str(icon)) == str(icon)
    assert resolve_relative_path(tmp_path, str(other / "gone.png")) is None


@pytest.mark.parametrize(
    "base, path, expected",
    [
        ("/ws", "/ws/123456789/mods/Foo/mod.info", "123456789"),
        ("/ws", "/ws/123456789/SomeMod/mod.info", "123456789"),
        ("/ws/", "/ws/123456789/mods/Foo/mod.info", "123456789"),
        ("/ws", "/ws/local/mods/Foo/mod.info", None),
        ("/ws", "/ws/12a4/mods/Foo/mod.info", None),
        ("/ws", "/ws2/123/mods/Foo/mod.info", None),
        ("/ws", "/other/123/mods/Foo/mod.info", None),
        ("/ws", "/ws", None),
        ("C:\\ws", "C:\\ws\\42\\mods\\Foo\\mod.info", "42"),
    ],
)
def test_derive_workshop_id(base: str, path: str, expected: str | None) -> None:
    assert derive_workshop_id(base, path) == expected


def test_parse_mod_info_basic_fields() -> None:
    content = "\n".join(
        [
            "name=Tsar's Common Library",
            "id=tsarslib",
            "author=Tsar",
            "modversion=2.1",
            "versionMin=41.78",
            "versionMax=41.78.16",
            "url=https://example.com/?id=1",
            "description=Shared library",
            "worldmap=Muldraugh, KY",
        ]
    )
    descriptor = parse_mod_info(content, INFO_PATH)

    assert descriptor.id == "tsarslib"
    assert descriptor.mod_id == "tsarslib"
    assert descriptor.name == "Tsar's Common Library"
    assert descriptor.author == "Tsar"
    assert descriptor.version == "2.1"
    assert descriptor.version_min == "41.78"
    assert descriptor.version_max == "41.78.16"
    assert descriptor.url == "https://example.com/?id=1"
    assert descriptor.description == "Shared library"
    assert descriptor.worldmap == "Muldraugh, KY"
    assert descriptor.mod_info_path == str(INFO_PATH)
    assert descriptor.workshop_id is None
    assert descriptor.requires is None


@pytest.mark.parametrize(
    "line, attribute, expected",
    [
        ("modid=abc", "mod_id", "abc"),
        ("ID=abc", "mod_id", "abc"),
        ("authors=A, B", "author", "A, B"),
        ("version=1", "version", "1"),
        ("version_min=41", "version_min", "41"),
        ("version_max=42", "version_max", "42"),
        ("requires=a", "requires", ("a",)),
        ("depend=a", "dependencies", ("a",)),
        ("dependencies=a", "dependencies", ("a",)),
        ("loadAfter=a", "load_after", ("a",)),
        ("loadBefore=a", "load_before", ("a",)),
        ("incompatible=a", "incompatible", ("a",)),
        ("packs=a", "packs", ("a",)),
        ("tiledefs=a 100", "tiledefs", ("a 100",)),
        ("soundbank=a", "soundbanks", ("a",)),
        ("soundbanks=a", "soundbanks", ("a",)),
        ("workshopid=999", "workshop_id", "999"),
    ],
)
def test_parse_mod_info_aliases(line: str, attribute: str, expected: object) -> None:
    descriptor = parse_mod_info(line, INFO_PATH)
    assert getattr(descriptor, attribute) == expected


def test_parse_mod_info_skips_comments_and_malformed_lines() -> None:
    content = "\n".join(
        [
            "# name=Commented",
            "// id=commented",
            "; author=commented",
            "",
            "   ",
            "this line has no separator",
            "=no key",
            "author=",
            "unknown=ignored",
            "  name  =  Spaced Name  ",
            "description=a=b=c",
        ]
    )
    descriptor = parse_mod_info(content, INFO_PATH)

    assert descriptor.name == "Spaced Name"
    assert descriptor.mod_id is None
    assert descriptor.author is None
    assert descriptor.description == "a=b=c"


def test_parse_mod_info_handles_crlf() -> None:
    descriptor = parse_mod_info("name=Windows Mod\r\nid=win\r\n", INFO_PATH)
    assert descriptor.name == "Windows Mod"
    assert descriptor.mod_id == "win"


def test_parse_mod_info_lists_accumulate() -> None:
    content = "\n".join(
        [
            'require=\\tsarslib,"Brita"',
            "require=Brita;Arsenal(26)GunFighter",
            "pack=BritaPack",
        ]
    )
    descriptor = parse_mod_info(content, INFO_PATH)

    assert descriptor.requires == (
        "\\tsarslib",
        "Brita",
        "Brita",
        "Arsenal(26)GunFighter",
    )
    assert descriptor.packs == ("BritaPack",)


def test_parse_mod_info_empty_list_is_none() -> None:
    descriptor = parse_mod_info('require= ; , ""', INFO_PATH)
    assert descriptor.requires is None


def test_parse_mod_info_last_scalar_wins() -> None:
    descriptor = parse_mod_info("name=First\nname=Second", INFO_PATH)
    assert descriptor.name == "Second"


def test_parse_mod_info_name_fallbacks() -> None:
    assert parse_mod_info("id=only_id", INFO_PATH).name == "only_id"
    assert parse_mod_info("author=nobody", INFO_PATH).name == "Unknown Mod"


def test_parse_mod_info_id_fallbacks() -> None:
    assert parse_mod_info("workshopid=2392709985", INFO_PATH).id == "2392709985"
    assert parse_mod_info("name=Nameless", INFO_PATH).id == str(INFO_PATH)


def test_parse_mod_info_workshop_id_fallback() -> None:
    descriptor = parse_mod_info("id=a", INFO_PATH, workshop_id="111")
    assert descriptor.workshop_id == "111"

    descriptor = parse_mod_info("id=a\nworkshopid=222", INFO_PATH, workshop_id="111")
    assert descriptor.workshop_id == "222"


def test_parse_mod_info_install_date_passthrough() -> None:
    descriptor = parse_mod_info(
        "id=a", INFO_PATH, install_date="2024-01-02T03:04:05+00:00"
    )
    assert descriptor.install_date == "2024-01-02T03:04:05+00:00"


def test_parse_mod_info_image_paths(tmp_path: Path) -> None:
    (tmp_path / "icon.png").write_bytes(b"")
    (tmp_path / "preview.png").write_bytes(b"")
    (tmp_path / "poster.png").write_bytes(b"")
    (tmp_path / "poster2.png").write_bytes(b"")
    content = "\n".join(
        [
            "id=images",
            "icon=icon.png",
            "preview=preview.png",
            "poster=poster.png",
            "poster=missing.png",
            "posters=poster2.png",
        ]
    )
    descriptor = parse_mod_info(content, tmp_path / "mod.info")

    assert descriptor.icon == str(tmp_path / "icon.png")
    assert descriptor.preview_image_path == str(tmp_path / "preview.png")
    assert descriptor.poster_image_paths == (
        str(tmp_path / "poster.png"),
        str(tmp_path / "poster2.png"),
    )


def test_parse_mod_info_missing_images_are_none(tmp_path: Path) -> None:
    descriptor = parse_mod_info(
        "id=images\nicon=missing.png\nposter=missing.png", tmp_path / "mod.info"
    )
    assert descriptor.icon is None
    assert descriptor.poster_image_paths is None


def test_create_descriptor_from_path(
    tmp_path: Path, write_mod_info: Callable[..., Path]
) -> None:
    content = "name=Workshop Mod\nid=wsmod\n"
    path = write_mod_info("123456789/mods/WorkshopMod", content)

    file_info, descriptor = create_descriptor_from_path(path, str(tmp_path))

    assert file_info.path == str(path)
    assert file_info.file_name == "mod.info"
    assert file_info.size == len(content.encode("utf-8"))
    assert file_info.modified is not None
    assert file_info.modified.endswith("+00:00")
    assert descriptor.install_date == file_info.modified
    assert descriptor.workshop_id == "123456789"
    assert descriptor.mod_info_path == str(path)


def test_create_descriptor_from_path_without_base(
    write_mod_info: Callable[..., Path],
) -> None:
    path = write_mod_info("123456789/mods/WorkshopMod", "id=wsmod")
    _, descriptor = create_descriptor_from_path(path)
    assert descriptor.workshop_id is None


def test_create_descriptor_from_path_strips_bom(tmp_path: Path) -> None:
    path = tmp_path / "mod.info"
    path.write_bytes(b"\xef\xbb\xbfname=Bom Mod\nid=bom")

    _, descriptor = create_descriptor_from_path(path)
    assert descriptor.name == "Bom Mod"
    assert descriptor.mod_id == "bom"


def test_create_descriptor_from_path_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "missing" / "mod.info"
    with pytest.raises(ModInfoReadError) as excinfo:
        create_descriptor_from_path(path)
    assert excinfo.value.path == str(path)


def test_create_descriptor_from_path_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "mod.info"
    path.write_bytes(b"name=\xff\xfe broken")
    with pytest.raises(ModInfoReadError):
        create_descriptor_from_path(path)
