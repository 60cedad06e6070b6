"""Structured error types for docstore."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docstore.record import DocumentRecord


class DocstoreError(Exception):
    """Base error for all docstore errors."""


class EmptyBatchError(DocstoreError):
    """Raised when get() or put() is called with no items."""

    def __init__(self) -> None:
        super().__init__("items is empty")


class DocumentConflictError(DocstoreError):
    """Raised when the revision gate rejects a put.

    ``record`` is the row currently stored under the same primary key, so the
    caller can reconcile and retry with a higher revision.
    """

    def __init__(self, record: DocumentRecord) -> None:
        self.record = record
        super().__init__(f"doc conflict: {record.pk!r}, {record.rev}")


class GetConflictedError(DocstoreError):
    """Raised when a conflicting row disappears before it can be re-read."""

    def __init__(self, pk: str) -> None:
        self.pk = pk
        super().__init__("failed to get conflicted doc")


class StorageBackendError(DocstoreError):
    """Raised when store lifecycle operations fail."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage backend error during {operation}: {detail}")


class InvalidIdentifierError(ValueError, DocstoreError):
    """Raised when a store or field name is not a safe SQL identifier."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"Invalid {kind} '{name}': must match [A-Za-z_][A-Za-z0-9_]*")


class CodecError(ValueError, DocstoreError):
    """Raised when a payload cannot be encoded or decoded."""
