"""The stored row type: primary key, revision, payload and index slots."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from docstore import codec
from docstore.config import MAX_INDEX


def index_columns() -> list[str]:
    """Index column names in storage order: si0, ni0, si1, ni1, ..."""
    cols: list[str] = []
    for i in range(MAX_INDEX):
        cols.append(f"si{i}")
        cols.append(f"ni{i}")
    return cols


ROW_COLUMNS = ["pk", "rev", "data", *index_columns()]


def _empty_slots() -> list[Any]:
    return [None] * MAX_INDEX


@dataclass
class DocumentRecord:
    """One stored document.

    ``string_index[i]`` and ``int_index[i]`` map to the ``si{i}`` and
    ``ni{i}`` columns; ``None`` leaves a slot out of its index.
    """

    pk: str
    rev: int
    data: str = ""
    string_index: list[str | None] = field(default_factory=_empty_slots)
    int_index: list[int | None] = field(default_factory=_empty_slots)

    def __post_init__(self) -> None:
        if len(self.string_index) != MAX_INDEX or len(self.int_index) != MAX_INDEX:
            raise ValueError(f"index slots must have exactly {MAX_INDEX} entries")
        self.string_index = list(self.string_index)
        self.int_index = list(self.int_index)

    def set_string_index(self, slot: int, value: str | None) -> DocumentRecord:
        _check_slot(slot)
        self.string_index[slot] = value
        return self

    def set_int_index(self, slot: int, value: int | None) -> DocumentRecord:
        _check_slot(slot)
        self.int_index[slot] = value
        return self

    @property
    def count(self) -> int | None:
        """Row count carried by a count-mode query result."""
        return self.int_index[0]

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> DocumentRecord:
        """Build a record from a row laid out as ROW_COLUMNS."""
        if len(row) != len(ROW_COLUMNS):
            raise ValueError(f"expected {len(ROW_COLUMNS)} columns, got {len(row)}")
        return cls(
            pk=row[0],
            rev=row[1],
            data=row[2],
            string_index=[row[3 + i * 2] for i in range(MAX_INDEX)],
            int_index=[row[4 + i * 2] for i in range(MAX_INDEX)],
        )

    def to_params(self) -> tuple[Any, ...]:
        params: list[Any] = [self.pk, self.rev, self.data]
        for i in range(MAX_INDEX):
            params.append(self.string_index[i])
            params.append(self.int_index[i])
        return tuple(params)

    def decode(self) -> dict[str, Any] | None:
        """Decode the payload, or return None when there is none."""
        if not self.data:
            return None
        return codec.decode_object(self.data)

    def copy(self) -> DocumentRecord:
        return DocumentRecord(
            pk=self.pk,
            rev=self.rev,
            data=self.data,
            string_index=list(self.string_index),
            int_index=list(self.int_index),
        )

    def to_dict(self, *, decode: bool = False) -> dict[str, Any]:
        out: dict[str, Any] = {
            "pk": self.pk,
            "rev": self.rev,
            "data": self.decode() if decode else self.data,
        }
        for i in range(MAX_INDEX):
            out[f"si{i}"] = self.string_index[i]
            out[f"ni{i}"] = self.int_index[i]
        return out


def _check_slot(slot: int) -> None:
    if not 0 <= slot < MAX_INDEX:
        raise IndexError(f"index slot {slot} out of range [0, {MAX_INDEX})")
