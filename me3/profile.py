"""Mod profiles: the games they support and the natives and packages they load."""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import tomli_w

from me3.native import Native
from me3.package import Package

_PROFILE_VERSION = "v1"


class Game(Enum):
    """Games a profile can declare support for."""

    ELDEN_RING = "elden-ring"
    NIGHTREIGN = "nightrein"


@dataclass
class Supports:
    """A declaration that a profile works with a game, optionally since a version."""

    game: Game
    since_version: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Supports:
        """Build from a deserialized table."""
        if not isinstance(data, Mapping):
            raise ValueError("supports entry must be a table")
        if "game" not in data:
            raise ValueError("supports entry is missing field 'game'")
        try:
            game = Game(data["game"])
        except ValueError:
            raise ValueError(f"unknown game {data['game']!r}") from None
        since = data.get("since")
        if since is not None and not isinstance(since, str):
            raise ValueError("supports 'since' must be a string")
        return cls(game, since)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain table, leaving out an unset version."""
        data: dict[str, Any] = {"game": self.game.value}
        if self.since_version is not None:
            data["since"] = self.since_version
        return data


def _entries(data: Mapping[str, Any], key: str) -> list[Any]:
    entries = data.get(key, [])
    if not isinstance(entries, list):
        raise ValueError(f"{key!r} must be an array")
    return entries


@dataclass
class ModProfile:
    """A version 1 mod profile."""

    supports: list[Supports] = field(default_factory=list)
    natives: list[Native] = field(default_factory=list)
    packages: list[Package] = field(default_factory=list)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> ModProfile:
        """Load a profile from a TOML (``.toml``, ``.me3`` or no extension) or JSON file."""
        path = Path(path)
        with path.open("rb") as handle:
            extension = path.suffix[1:] if path.suffix else None
            if extension in ("toml", "me3", None):
                data = tomllib.load(handle)
            elif extension == "json":
                data = json.load(handle)
            else:
                raise ValueError(f"{extension} is unsupported")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ModProfile:
        """Build from a deserialized document tagged with ``profileVersion``."""
        if not isinstance(data, Mapping):
            raise ValueError("profile must be a table")
        if "profileVersion" not in data:
            raise ValueError("profile is missing field 'profileVersion'")
        version = data["profileVersion"]
        if version != _PROFILE_VERSION:
            raise ValueError(f"unknown profile version {version!r}")
        return cls(
            supports=[Supports.from_dict(entry) for entry in _entries(data, "supports")],
            natives=[Native.from_dict(entry) for entry in _entries(data, "natives")],
            packages=[Package.from_dict(entry) for entry in _entries(data, "packages")],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain document."""
        return {
            "profileVersion": _PROFILE_VERSION,
            "supports": [entry.to_dict() for entry in self.supports],
            "natives": [entry.to_dict() for entry in self.natives],
            "packages": [entry.to_dict() for entry in self.packages],
        }

    def to_toml(self) -> str:
        """Serialize to TOML text."""
        return tomli_w.dumps(self.to_dict())