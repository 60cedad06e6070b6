"""Composable, parameterized filter predicates.

A :class:`Predicate` is a fragment of SQL with ``?`` placeholders plus the
values bound to them, in order. Predicates are built with the module-level
constructors and combined with ``&``, ``|`` and ``~`` (or ``and_``, ``or_``
and ``not_``). ``None`` stands for "no filter" wherever a predicate is
accepted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from docstore.errors import InvalidIdentifierError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_identifier(name: str, kind: str = "field name") -> str:
    """Return ``name`` unchanged if it is safe to interpolate as an identifier."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise InvalidIdentifierError(kind, str(name))
    return name


def quote_identifier(name: str, kind: str = "field name") -> str:
    return f'"{validate_identifier(name, kind)}"'


@dataclass(frozen=True)
class Predicate:
    """A boolean filter expression with positional parameters."""

    clause: str
    params: tuple[Any, ...] = ()

    def and_(self, other: Predicate) -> Predicate:
        return Predicate(f"({self.clause}) AND ({other.clause})", self.params + other.params)

    def or_(self, other: Predicate) -> Predicate:
        return Predicate(f"({self.clause}) OR ({other.clause})", self.params + other.params)

    def not_(self) -> Predicate:
        return Predicate(f"NOT ({self.clause})", self.params)

    def __and__(self, other: Predicate) -> Predicate:
        return self.and_(other)

    def __or__(self, other: Predicate) -> Predicate:
        return self.or_(other)

    def __invert__(self) -> Predicate:
        return self.not_()


def where_clause(predicate: Predicate | None) -> str:
    """Render ``WHERE <clause>``, or an empty string for no predicate."""
    if predicate is None:
        return ""
    return f"WHERE {predicate.clause}"


def where_params(predicate: Predicate | None) -> tuple[Any, ...]:
    if predicate is None:
        return ()
    return predicate.params


def _binary(field: str, op: str, value: Any) -> Predicate:
    return Predicate(f"{quote_identifier(field)} {op} ?", (value,))


def _placeholders(values: tuple[Any, ...], op: str) -> str:
    if not values:
        raise ValueError(f"{op} requires at least one value")
    return ", ".join("?" for _ in values)


def equal(field: str, value: Any) -> Predicate:
    return _binary(field, "=", value)


def not_equal(field: str, value: Any) -> Predicate:
    return _binary(field, "!=", value)


def less(field: str, value: Any) -> Predicate:
    return _binary(field, "<", value)


def less_equal(field: str, value: Any) -> Predicate:
    return _binary(field, "<=", value)


def greater(field: str, value: Any) -> Predicate:
    return _binary(field, ">", value)


def greater_equal(field: str, value: Any) -> Predicate:
    return _binary(field, ">=", value)


def is_null(field: str) -> Predicate:
    return Predicate(f"{quote_identifier(field)} ISNULL")


def is_not_null(field: str) -> Predicate:
    return Predicate(f"{quote_identifier(field)} NOTNULL")


def in_(field: str, *values: Any) -> Predicate:
    placeholders = _placeholders(values, "IN")
    return Predicate(f"{quote_identifier(field)} IN ({placeholders})", tuple(values))


def not_in(field: str, *values: Any) -> Predicate:
    placeholders = _placeholders(values, "NOT IN")
    return Predicate(f"{quote_identifier(field)} NOT IN ({placeholders})", tuple(values))


def between(field: str, low: Any, high: Any) -> Predicate:
    return Predicate(f"{quote_identifier(field)} BETWEEN ? AND ?", (low, high))


def not_between(field: str, low: Any, high: Any) -> Predicate:
    return Predicate(f"{quote_identifier(field)} NOT BETWEEN ? AND ?", (low, high))


def like(field: str, pattern: str) -> Predicate:
    return _binary(field, "LIKE", pattern)


def not_like(field: str, pattern: str) -> Predicate:
    return _binary(field, "NOT LIKE", pattern)


def glob(field: str, pattern: str) -> Predicate:
    return _binary(field, "GLOB", pattern)


def not_glob(field: str, pattern: str) -> Predicate:
    return _binary(field, "NOT GLOB", pattern)
