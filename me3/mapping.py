"""Discovery of override assets and lookup by virtual archive path."""

from __future__ import annotations

import os
from collections import deque
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol


class _AssetOverrideSource(Protocol):
    def asset_path(self) -> Path: ...


class ArchiveOverrideMappingError(Exception):
    """Raised when override assets cannot be discovered."""


def normalize_path(path: str | os.PathLike[str]) -> Path:
    """Return ``path`` with ``/`` as the only separator."""
    return Path(os.fspath(path).replace("\\", "/"))


def path_to_asset_lookup_key(
    base: str | os.PathLike[str], path: str | os.PathLike[str]
) -> str:
    """Turn an asset path under ``base`` into a lower-case lookup key.

    Raises ``ValueError`` if ``path`` is not inside ``base``.
    """
    relative = Path(path).relative_to(Path(base))
    return relative.as_posix().lower()


class ArchiveOverrideMapping:
    """Maps virtual asset paths to files on disk that override them."""

    def __init__(self) -> None:
        self._map: dict[str, Path] = {}

    def __len__(self) -> int:
        return len(self._map)

    def scan_directories(self, sources: Iterable[_AssetOverrideSource]) -> None:
        """Scan each source's asset directory in turn."""
        for source in sources:
            self.scan_directory(source.asset_path())

    def scan_directory(self, base_directory: str | os.PathLike[str]) -> None:
        """Walk ``base_directory`` breadth first, mapping every file found in it."""
        base = normalize_path(base_directory)
        if not base.is_dir():
            raise ArchiveOverrideMappingError(
                f"Package source specified is not a directory {base}."
            )

        pending = deque([base])
        while pending:
            current = pending.popleft()
            try:
                entries = list(os.scandir(current))
            except OSError as exc:
                raise ArchiveOverrideMappingError(
                    f"Could not read directory while discovering override assets {exc}"
                ) from exc

            for entry in entries:
                entry_path = Path(entry.path)
                if entry_path.is_dir():
                    pending.append(entry_path)
                    continue
                override_path = normalize_path(entry_path)
                try:
                    key = path_to_asset_lookup_key(base, override_path)
                except ValueError as exc:
                    raise ArchiveOverrideMappingError(
                        f"Could not derive lookup key for {override_path}"
                    ) from exc
                self._map[key] = override_path

    def get_override(self, path: str) -> Path | None:
        """Find the override for a path such as ``data0:/regulation.bin``."""
        _, sep, rest = path.partition(":/")
        key = rest if sep else path
        return self._map.get(key)