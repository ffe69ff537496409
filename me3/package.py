"""Packages: directories of assets that override files in the game archives."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from me3.dependency import Dependent


@dataclass
class ModFile:
    """A filesystem path to mod content, possibly relative to its profile."""

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def __fspath__(self) -> str:
        return os.fspath(self.path)

    def __str__(self) -> str:
        return str(self.path)

    def is_relative(self) -> bool:
        """Whether the path is relative to the mod profile."""
        return not self.path.is_absolute()

    def make_absolute(self, base: str | os.PathLike[str]) -> None:
        """Anchor a relative path at ``base``; absolute paths are left alone."""
        if self.is_relative():
            self.path = Path(base) / self.path


def _dependents(data: Mapping[str, Any], key: str) -> list[Dependent]:
    entries = data.get(key, [])
    if not isinstance(entries, list):
        raise ValueError(f"{key!r} must be an array")
    return [Dependent.from_dict(entry) for entry in entries]


@dataclass
class Package:
    """A local directory whose files are served in place of archived assets."""

    id: str
    source: ModFile
    load_after: list[Dependent] = field(default_factory=list)
    load_before: list[Dependent] = field(default_factory=list)

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> Package:
        """Create a package named after the last component of ``path``."""
        path = Path(path)
        if path.name in ("", ".."):
            raise ValueError("no name for this package")
        return cls(id=path.name, source=ModFile(path))

    def make_absolute(self, base: str | os.PathLike[str]) -> None:
        """Join the package source onto ``base``, usually the profile's directory."""
        self.source = ModFile(Path(base) / self.source.path)

    def asset_path(self) -> Path:
        """Directory scanned for override assets."""
        return self.source.path

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Package:
        """Build a package from a deserialized table."""
        if not isinstance(data, Mapping):
            raise ValueError("package entry must be a table")
        try:
            package_id = data["id"]
            source = data["source"]
        except KeyError as exc:
            raise ValueError(f"package entry is missing field {exc.args[0]!r}") from None
        if not isinstance(package_id, str):
            raise ValueError("package 'id' must be a string")
        if not isinstance(source, str):
            raise ValueError("package 'source' must be a string")
        return cls(
            id=package_id,
            source=ModFile(Path(source)),
            load_after=_dependents(data, "load_after"),
            load_before=_dependents(data, "load_before"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain table."""
        return {
            "id": self.id,
            "source": str(self.source.path),
            "load_after": [dep.to_dict() for dep in self.load_after],
            "load_before": [dep.to_dict() for dep in self.load_before],
        }