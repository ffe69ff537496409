"""Ordering of packages and natives by their declared load dependencies."""

from __future__ import annotations

import heapq
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, TypeVar


@dataclass(frozen=True)
class Dependent:
    """A reference to another item that must load before or after its owner."""

    id: str
    optional: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Dependent:
        """Build a dependent from a deserialized table."""
        if not isinstance(data, Mapping):
            raise ValueError("dependency entry must be a table")
        try:
            dependency_id = data["id"]
            optional = data["optional"]
        except KeyError as exc:
            raise ValueError(f"dependency entry is missing field {exc.args[0]!r}") from None
        if not isinstance(dependency_id, str):
            raise ValueError("dependency 'id' must be a string")
        if not isinstance(optional, bool):
            raise ValueError("dependency 'optional' must be a boolean")
        return cls(dependency_id, optional)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain table."""
        return {"id": self.id, "optional": self.optional}


class DependencyOrder(Enum):
    """Whether the owning item loads before or after the dependency."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class DependencyLink:
    """One resolved edge between an item and a dependency."""

    optional: bool
    order: DependencyOrder
    id: str


class DependencyError(Exception):
    """Raised when a set of items cannot be ordered."""


class MissingDependencyError(DependencyError):
    """A required dependency is not among the items being ordered."""

    def __init__(self, dependency_id: str) -> None:
        super().__init__(f"Required dependency is unavailable: {dependency_id}")
        self.dependency_id = dependency_id


class CyclicDependencyError(DependencyError):
    """The dependencies between items form a cycle."""

    def __init__(self, remaining: Sequence[str]) -> None:
        super().__init__(
            f"Dependencies resulted in cycles, remaining dependencies: {list(remaining)!r}"
        )
        self.remaining = list(remaining)


class _Dependency(Protocol):
    @property
    def id(self) -> str: ...

    load_after: list[Dependent]
    load_before: list[Dependent]


T = TypeVar("T", bound=_Dependency)


def dependency_links(item: _Dependency) -> Iterator[DependencyLink]:
    """Yield the load-after links of an item followed by its load-before links."""
    for dep in item.load_after:
        yield DependencyLink(dep.optional, DependencyOrder.AFTER, dep.id)
    for dep in item.load_before:
        yield DependencyLink(dep.optional, DependencyOrder.BEFORE, dep.id)


def sort_dependencies(items: Iterable[T]) -> list[T]:
    """Return the items ordered so that every dependency constraint holds.

    Items that take part in no dependency relationship come last. Items sharing
    an id are collapsed, the last one winning.
    """
    all_items: dict[str, T] = {}
    for item in items:
        all_items[item.id] = item

    position = {key: index for index, key in enumerate(all_items)}
    successors: dict[str, set[str]] = {}
    predecessor_count: dict[str, int] = {}

    for key, item in all_items.items():
        for link in dependency_links(item):
            if link.id not in all_items:
                if not link.optional:
                    raise MissingDependencyError(link.id)
                continue

            if link.order is DependencyOrder.BEFORE:
                prec, succ = key, link.id
            else:
                prec, succ = link.id, key

            for node in (prec, succ):
                successors.setdefault(node, set())
                predecessor_count.setdefault(node, 0)
            if succ not in successors[prec]:
                successors[prec].add(succ)
                predecessor_count[succ] += 1

    ready = [(position[node], node) for node, count in predecessor_count.items() if count == 0]
    heapq.heapify(ready)

    ordered: list[T] = []
    while ready:
        _, key = heapq.heappop(ready)
        ordered.append(all_items.pop(key))
        del predecessor_count[key]
        for succ in successors.pop(key):
            predecessor_count[succ] -= 1
            if predecessor_count[succ] == 0:
                heapq.heappush(ready, (position[succ], succ))

    if predecessor_count:
        raise CyclicDependencyError(list(all_items))

    ordered.extend(all_items.values())
    return ordered