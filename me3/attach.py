"""Messages exchanged between the launcher and the mod host it attaches to the game."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

import tomli_w

from me3.native import Native
from me3.package import Package


def _entries(data: Mapping[str, Any], key: str) -> list[Any]:
    if key not in data:
        raise ValueError(f"attach config is missing field {key!r}")
    entries = data[key]
    if not isinstance(entries, list):
        raise ValueError(f"{key!r} must be an array")
    return entries


@dataclass
class AttachConfig:
    """The natives and packages the host loads once attached, in load order."""

    natives: list[Native] = field(default_factory=list)
    packages: list[Package] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AttachConfig:
        """Build from a deserialized table; both lists are required."""
        if not isinstance(data, Mapping):
            raise ValueError("attach config must be a table")
        return cls(
            natives=[Native.from_dict(entry) for entry in _entries(data, "natives")],
            packages=[Package.from_dict(entry) for entry in _entries(data, "packages")],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain table."""
        return {
            "natives": [native.to_dict() for native in self.natives],
            "packages": [package.to_dict() for package in self.packages],
        }

    def to_toml(self) -> str:
        """Serialize to TOML text."""
        return tomli_w.dumps(self.to_dict())

    @classmethod
    def from_toml(cls, text: str) -> AttachConfig:
        """Parse TOML text written by :meth:`to_toml`."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"invalid attach config: {exc}") from exc
        return cls.from_dict(data)


@dataclass
class AttachRequest:
    """Sent to the host: where to report back, and what to load."""

    monitor_name: str
    config: AttachConfig


class AttachError(Exception):
    """The host failed to attach; carries a description of the failure."""

    def __init__(self, message: str | BaseException) -> None:
        self.message = message if isinstance(message, str) else repr(message)
        super().__init__(self.message)


@dataclass(frozen=True)
class Attached:
    """The host has finished attaching."""


@dataclass(frozen=True)
class CrashDumpRequest:
    """The host crashed and asks the launcher to write a minidump."""

    exception_pointers: int
    process_id: int
    thread_id: int
    exception_code: int


HostMessage = Union[Attached, CrashDumpRequest]


class MonitorMessageKind(Enum):
    """Kinds of messages carried on the monitor channel."""

    TRACE_EVENT = 1

    @classmethod
    def from_value(cls, value: int) -> MonitorMessageKind:
        """Decode a raw kind number, raising ``ValueError`` for unknown kinds."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown monitor message kind {value!r}") from None