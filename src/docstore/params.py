"""Query parameters: one logical read against a table."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Union

from docstore.where import Predicate, quote_identifier, where_clause, where_params


@dataclass(frozen=True)
class OrderTerm:
    field: str
    ascending: bool = True

    def to_sql(self) -> str:
        direction = "ASC" if self.ascending else "DESC"
        return f"{quote_identifier(self.field)} {direction}"


@dataclass(frozen=True)
class Limit:
    count: int
    offset: int | None = None

    def __post_init__(self) -> None:
        for name, value in (("limit", self.count), ("offset", self.offset)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative int, got {value!r}")

    def to_sql(self) -> str:
        if self.offset is None:
            return f"LIMIT {self.count}"
        return f"LIMIT {self.count} OFFSET {self.offset}"


@dataclass(frozen=True)
class CountMode:
    """Return the number of matching rows instead of the rows."""


@dataclass(frozen=True)
class ItemsMode:
    """Return matching rows, optionally ordered and limited."""

    order: tuple[OrderTerm, ...] = ()
    limit: Limit | None = None


QueryMode = Union[CountMode, ItemsMode]


@dataclass(frozen=True)
class QueryParams:
    """Immutable builder for a read.

    Count mode and ordering/limiting are exclusive: ``count()`` discards any
    order or limit, and ``order_by()``/``limit()`` leave count mode.
    """

    predicate: Predicate | None = None
    mode: QueryMode = ItemsMode()

    def where(self, predicate: Predicate | None) -> QueryParams:
        return replace(self, predicate=predicate)

    def count(self) -> QueryParams:
        return replace(self, mode=CountMode())

    def order_by(self, field: str, ascending: bool = True) -> QueryParams:
        quote_identifier(field)
        items = self._items_mode()
        return replace(
            self, mode=replace(items, order=items.order + (OrderTerm(field, ascending),))
        )

    def limit(self, count: int, offset: int | None = None) -> QueryParams:
        return replace(self, mode=replace(self._items_mode(), limit=Limit(count, offset)))

    @property
    def is_count(self) -> bool:
        return isinstance(self.mode, CountMode)

    def _items_mode(self) -> ItemsMode:
        if isinstance(self.mode, ItemsMode):
            return self.mode
        return ItemsMode()

    def select_suffix(self) -> str:
        """Render the WHERE / ORDER BY / LIMIT tail of a SELECT."""
        parts = [where_clause(self.predicate)]
        if isinstance(self.mode, ItemsMode):
            if self.mode.order:
                parts.append("ORDER BY " + ", ".join(t.to_sql() for t in self.mode.order))
            if self.mode.limit is not None:
                parts.append(self.mode.limit.to_sql())
        return " ".join(p for p in parts if p)

    def parameters(self) -> tuple[Any, ...]:
        return where_params(self.predicate)
