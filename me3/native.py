"""Native modules (DLLs) loaded into the game by the mod host."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from me3.dependency import Dependent
from me3.package import ModFile


@dataclass(frozen=True)
class DelayInitializer:
    """Wait this many milliseconds after loading the native."""

    ms: int


@dataclass(frozen=True)
class FunctionInitializer:
    """Call this exported symbol after loading the native."""

    symbol: str


InitializerCondition = Union[DelayInitializer, FunctionInitializer]


def initializer_from_value(value: Any) -> InitializerCondition:
    """Decode an initializer table such as ``{"delay": {"ms": 10}}`` or ``{"function": "init"}``."""
    if not isinstance(value, Mapping) or len(value) != 1:
        raise ValueError("initializer must be a table with exactly one of 'delay' or 'function'")
    ((tag, body),) = value.items()
    if tag == "delay":
        if not isinstance(body, Mapping) or "ms" not in body:
            raise ValueError("delay initializer requires an 'ms' field")
        ms = body["ms"]
        if not isinstance(ms, int) or isinstance(ms, bool) or ms < 0:
            raise ValueError("delay initializer 'ms' must be a non-negative integer")
        return DelayInitializer(ms)
    if tag == "function":
        if not isinstance(body, str):
            raise ValueError("function initializer must name a symbol")
        return FunctionInitializer(body)
    raise ValueError(f"unknown initializer variant {tag!r}")


def initializer_to_value(condition: InitializerCondition) -> dict[str, Any]:
    """Encode an initializer condition as a table."""
    if isinstance(condition, DelayInitializer):
        return {"delay": {"ms": condition.ms}}
    if isinstance(condition, FunctionInitializer):
        return {"function": condition.symbol}
    raise TypeError(f"not an initializer condition: {condition!r}")


def _dependents(data: Mapping[str, Any], key: str) -> list[Dependent]:
    entries = data.get(key, [])
    if not isinstance(entries, list):
        raise ValueError(f"{key!r} must be an array")
    return [Dependent.from_dict(entry) for entry in entries]


def _flag(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"native {key!r} must be a boolean")
    return value


@dataclass
class Native:
    """A DLL to load, with its load order constraints and lifecycle hooks."""

    path: ModFile
    optional: bool = False
    enabled: bool = True
    load_before: list[Dependent] = field(default_factory=list)
    load_after: list[Dependent] = field(default_factory=list)
    initializer: InitializerCondition | None = None
    finalizer: str | None = None

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> Native:
        """Create an enabled, required native for ``path``."""
        return cls(path=ModFile(Path(path)))

    @property
    def id(self) -> str:
        """The native's file name, used to identify it in dependencies."""
        name = self.path.path.name
        if name in ("", ".."):
            raise ValueError("native had no file name")
        return name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Native:
        """Build a native from a deserialized table."""
        if not isinstance(data, Mapping):
            raise ValueError("native entry must be a table")
        if "path" not in data:
            raise ValueError("native entry is missing field 'path'")
        path = data["path"]
        if not isinstance(path, str):
            raise ValueError("native 'path' must be a string")

        initializer = data.get("initializer")
        finalizer = data.get("finalizer")
        if finalizer is not None and not isinstance(finalizer, str):
            raise ValueError("native 'finalizer' must be a string")

        return cls(
            path=ModFile(Path(path)),
            optional=_flag(data, "optional", False),
            enabled=_flag(data, "enabled", True),
            load_before=_dependents(data, "load_before"),
            load_after=_dependents(data, "load_after"),
            initializer=None if initializer is None else initializer_from_value(initializer),
            finalizer=finalizer,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain table, leaving out unset optional fields."""
        data: dict[str, Any] = {
            "path": str(self.path.path),
            "optional": self.optional,
            "enabled": self.enabled,
            "load_before": [dep.to_dict() for dep in self.load_before],
            "load_after": [dep.to_dict() for dep in self.load_after],
        }
        if self.initializer is not None:
            data["initializer"] = initializer_to_value(self.initializer)
        if self.finalizer is not None:
            data["finalizer"] = self.finalizer
        return data