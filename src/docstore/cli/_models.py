"""Validated input models for CLI writes."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from docstore import codec
from docstore.config import MAX_INDEX
from docstore.record import DocumentRecord


def _check_slots(slots: dict[int, Any]) -> dict[int, Any]:
    for slot in slots:
        if not 0 <= slot < MAX_INDEX:
            raise ValueError(f"index slot {slot} out of range [0, {MAX_INDEX})")
    return slots


class DocumentInput(BaseModel):
    """A document as supplied on the command line or in a load file."""

    pk: str = Field(min_length=1)
    rev: int
    data: Any = None
    si: dict[int, str] = Field(default_factory=dict)
    ni: dict[int, int] = Field(default_factory=dict)

    @field_validator("si", "ni")
    @classmethod
    def _slots_in_range(cls, v: dict[int, Any]) -> dict[int, Any]:
        return _check_slots(v)

    def to_record(self) -> DocumentRecord:
        record = DocumentRecord(
            pk=self.pk,
            rev=self.rev,
            data="" if self.data is None else codec.encode(self.data),
        )
        for slot, value in self.si.items():
            record.set_string_index(slot, value)
        for slot, value in self.ni.items():
            record.set_int_index(slot, value)
        return record


def parse_slot_assignments(values: list[str] | None) -> dict[str, str]:
    """Turn ``["0=h", "2=x"]`` into ``{"0": "h", "2": "x"}``."""
    out: dict[str, str] = {}
    for item in values or []:
        slot, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Invalid slot assignment (expected SLOT=VALUE): {item}")
        out[slot.strip()] = value
    return out
