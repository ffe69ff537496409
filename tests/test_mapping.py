from pathlib import Path

import pytest

from me3.mapping import (
    ArchiveOverrideMapping,
    ArchiveOverrideMappingError,
    normalize_path,
    path_to_asset_lookup_key,
)
from me3.package import Package

FAKE_MOD_BASE = "D:/ModBase/"


@pytest.mark.parametrize(
    "relative, expected",
    [
        ("parts/aet/aet007/aet007_071.tpf.dcx", "parts/aet/aet007/aet007_071.tpf.dcx"),
        (
            "hkxbnd/m60_42_36_00/h60_42_36_00_423601.hkx.dcx",
            "hkxbnd/m60_42_36_00/h60_42_36_00_423601.hkx.dcx",
        ),
        ("regulation.bin", "regulation.bin"),
    ],
)
def test_asset_path_lookup_keys(relative, expected):
    base = Path(FAKE_MOD_BASE)
    assert path_to_asset_lookup_key(base, Path(f"{FAKE_MOD_BASE}/{relative}")) == expected


def test_lookup_key_is_lowercased():
    assert path_to_asset_lookup_key("/mods/a", "/mods/a/Event/Common.EMEVD") == "event/common.emevd"


def test_lookup_key_outside_base_raises():
    with pytest.raises(ValueError):
        path_to_asset_lookup_key("/mods/a", "/mods/b/file.bin")


def test_normalize_path_replaces_backslashes():
    assert normalize_path("mods\\pkg\\file.bin") == Path("mods/pkg/file.bin")


@pytest.fixture
def mod_dir(tmp_path):
    base = tmp_path / "test-mod"
    (base / "event").mkdir(parents=True)
    (base / "regulation.bin").write_bytes(b"\x00")
    (base / "event" / "common.emevd.dcx").write_bytes(b"\x00")
    return base


def test_scan_directory_and_overrides(mod_dir):
    mapping = ArchiveOverrideMapping()
    mapping.scan_directory(mod_dir)

    assert mapping.get_override("data0:/regulation.bin") == mod_dir / "regulation.bin"
    assert (
        mapping.get_override("data0:/event/common.emevd.dcx")
        == mod_dir / "event" / "common.emevd.dcx"
    )
    assert mapping.get_override("data0:/common.emevd.dcx") is None


def test_get_override_without_archive_prefix(mod_dir):
    mapping = ArchiveOverrideMapping()
    mapping.scan_directory(mod_dir)
    assert mapping.get_override("regulation.bin") == mod_dir / "regulation.bin"
    assert len(mapping) == 2


def test_scan_missing_directory_raises(tmp_path):
    mapping = ArchiveOverrideMapping()
    with pytest.raises(ArchiveOverrideMappingError):
        mapping.scan_directory(tmp_path / "absent")


def test_scan_file_instead_of_directory_raises(tmp_path):
    target = tmp_path / "file.bin"
    target.write_bytes(b"")
    with pytest.raises(ArchiveOverrideMappingError):
        ArchiveOverrideMapping().scan_directory(target)


def test_scan_directories_later_package_wins(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    for directory in (first, second):
        directory.mkdir()
        (directory / "regulation.bin").write_bytes(b"")
    (first / "only_first.bin").write_bytes(b"")

    mapping = ArchiveOverrideMapping()
    mapping.scan_directories([Package.from_path(first), Package.from_path(second)])

    assert mapping.get_override("data0:/regulation.bin") == second / "regulation.bin"
    assert mapping.get_override("data0:/only_first.bin") == first / "only_first.bin"