"""JSON payload encoding with int/float disambiguation on decode.

Stored payloads are plain JSON text, which does not record whether ``2`` was
an integer or a float. Decoding therefore parses every number into an
ambiguous :class:`JsonNumber` first and :func:`normalize` resolves it, always
trying int before float, so every decode pass agrees on the result.
"""

from __future__ import annotations

import json
import math
from typing import Any

from docstore.errors import CodecError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class JsonNumber(str):
    """A JSON number literal kept in its original text form."""


def encode(value: Any) -> str:
    try:
        return json.dumps(
            value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )
    except (TypeError, ValueError) as e:
        raise CodecError(f"cannot encode value: {e}") from e


def decode(text: str) -> Any:
    """Parse JSON text and normalize every number in it."""
    try:
        raw = json.loads(text, parse_int=JsonNumber, parse_float=JsonNumber)
    except (TypeError, ValueError) as e:
        raise CodecError(f"cannot decode payload: {e}") from e
    return normalize(raw)


def decode_object(text: str) -> dict[str, Any]:
    """Like :func:`decode`, but the top-level value must be a JSON object."""
    value = decode(text)
    if not isinstance(value, dict):
        raise CodecError(f"payload is a {type(value).__name__}, expected an object")
    return value


def normalize(value: Any) -> Any:
    """Replace every :class:`JsonNumber` in ``value`` with an int or float."""
    if isinstance(value, JsonNumber):
        return _convert_number(value)
    if isinstance(value, dict):
        return {k: normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize(v) for v in value]
    return value


def _convert_number(literal: JsonNumber) -> int | float | str:
    try:
        n = int(literal)
    except ValueError:
        pass
    else:
        if INT64_MIN <= n <= INT64_MAX:
            return n
    try:
        f = float(literal)
    except ValueError:
        return str(literal)
    if math.isinf(f) or math.isnan(f):
        # out of range for a double; keep the literal
        return str(literal)
    return f
