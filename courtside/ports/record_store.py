"""Record store port: abstract interface for persisted rows.

Core modules depend on this protocol, never on a specific database.
Rows travel as plain dicts; the core validates them once at the boundary
(see courtside.data.records).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Union


class StoreError(Exception):
    """Raised when any record store operation fails."""


class ConflictError(StoreError):
    """Raised when an insert violates a uniqueness constraint."""


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any


@dataclass(frozen=True)
class In:
    column: str
    values: tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class Range:
    """Inclusive range; either bound may be omitted."""

    column: str
    low: Any = None
    high: Any = None


@dataclass(frozen=True)
class Or:
    predicates: tuple = field(default_factory=tuple)

    def __init__(self, *predicates: "Predicate") -> None:
        object.__setattr__(self, "predicates", tuple(predicates))


Predicate = Union[Eq, In, Range, Or]


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False


class RecordStore(Protocol):
    """Generic keyed collection API used by the engine.

    `where` is a sequence of predicates combined with AND.
    """

    async def select(
        self,
        table: str,
        where: list[Predicate] | None = None,
        order_by: list[OrderBy] | None = None,
        limit: int | None = None,
    ) -> list[dict]: ...

    async def select_one(
        self, table: str, where: list[Predicate]
    ) -> dict | None: ...

    async def insert(self, table: str, values: dict) -> dict: ...

    async def update(self, table: str, row_id: str, values: dict) -> dict: ...

    async def delete(self, table: str, where: list[Predicate]) -> int: ...
