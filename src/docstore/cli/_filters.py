"""CLI filter parser: converts 'FIELD OP VALUE_JSON' strings to a Predicate."""

from __future__ import annotations

import json
from typing import Any, Callable

from docstore import where
from docstore.where import Predicate

_BINARY_OPS: dict[str, Callable[[str, Any], Predicate]] = {
    "eq": where.equal,
    "ne": where.not_equal,
    "lt": where.less,
    "lte": where.less_equal,
    "gt": where.greater,
    "gte": where.greater_equal,
    "like": where.like,
    "glob": where.glob,
}

_UNARY_OPS: dict[str, Callable[[str], Predicate]] = {
    "is_null": where.is_null,
    "is_not_null": where.is_not_null,
}

_VALID_OPS = sorted([*_BINARY_OPS, *_UNARY_OPS, "in"])


def parse_filter(arg: str) -> Predicate:
    """Parse one filter string such as ``si0 eq "h"`` or ``ni0 in [1, 2]``."""
    parts = arg.split(None, 2)
    if len(parts) < 2:
        raise ValueError(f"Invalid filter (expected 'FIELD OP [VALUE_JSON]'): {arg}")
    field, op = parts[0], parts[1]

    if op in _UNARY_OPS:
        if len(parts) == 3:
            raise ValueError(f"Operator '{op}' takes no value: {arg}")
        return _UNARY_OPS[op](field)

    if op not in _BINARY_OPS and op != "in":
        raise ValueError(
            f"Unknown filter operator '{op}'. Valid operators: {', '.join(_VALID_OPS)}"
        )
    if len(parts) != 3:
        raise ValueError(f"Operator '{op}' requires a value: {arg}")

    value = json.loads(parts[2])
    if op == "in":
        if not isinstance(value, list):
            raise ValueError(f"Operator 'in' requires a JSON array: {arg}")
        return where.in_(field, *value)
    return _BINARY_OPS[op](field, value)


def parse_cli_filters(args: list[str] | None) -> Predicate | None:
    """Parse repeated --filter values; multiple filters are AND-combined."""
    if not args:
        return None
    predicate: Predicate | None = None
    for arg in args:
        p = parse_filter(arg)
        predicate = p if predicate is None else predicate & p
    return predicate
