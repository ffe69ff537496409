"""Override lookup for Wwise sound archive entries."""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path

from me3.mapping import ArchiveOverrideMapping

_ARCHIVE_PREFIXES = ("sd:/", "sd_dlc02:/")
_SOUND_DIRECTORIES = ("sd", "sd/enus", "sd/ja")


class AkOpenMode(IntEnum):
    """File open modes understood by the Wwise low-level IO hook."""

    READ = 0x0
    WRITE = 0x1
    WRITE_OVERWRITE = 0x2
    READ_WRITE = 0x3
    READ_EBL = 0x9


def strip_prefix(value: str) -> str:
    """Strip any number of leading ``sd:/`` and ``sd_dlc02:/`` prefixes."""
    stripped = True
    while stripped:
        stripped = False
        for prefix in _ARCHIVE_PREFIXES:
            if value.startswith(prefix):
                value = value[len(prefix):]
                stripped = True
                break
    return value


def _lookup(mapping: ArchiveOverrideMapping, path: str) -> Path | None:
    for directory in _SOUND_DIRECTORIES:
        found = mapping.get_override(f"{directory}/{path}")
        if found is not None:
            return found
    return None


def find_override(mapping: ArchiveOverrideMapping, path: str) -> Path | None:
    """Find an override for a sound archive entry."""
    path = strip_prefix(path)
    if not path.endswith(".wem"):
        return _lookup(mapping, path)

    found = _lookup(mapping, f"wem/{path}")
    if found is not None:
        return found
    # WEMs may also live under a folder named after the first two digits of their id.
    return _lookup(mapping, f"wem/{path[:2]}/{path}")