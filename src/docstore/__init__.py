"""docstore: revisioned JSON documents with fixed index slots on SQLite."""

__version__ = "0.1.0"

from docstore import where
from docstore.codec import decode, decode_object, encode, normalize
from docstore.config import MAX_INDEX, StoreConfig
from docstore.errors import (
    CodecError,
    DocstoreError,
    DocumentConflictError,
    EmptyBatchError,
    GetConflictedError,
    InvalidIdentifierError,
    StorageBackendError,
)
from docstore.params import QueryParams
from docstore.record import DocumentRecord
from docstore.store import Store, StoreState
from docstore.table import TableEngine
from docstore.where import Predicate

__all__ = [
    "__version__",
    "MAX_INDEX",
    "StoreConfig",
    "Store",
    "StoreState",
    "TableEngine",
    "DocumentRecord",
    "QueryParams",
    "Predicate",
    "where",
    "encode",
    "decode",
    "decode_object",
    "normalize",
    "DocstoreError",
    "EmptyBatchError",
    "DocumentConflictError",
    "GetConflictedError",
    "StorageBackendError",
    "InvalidIdentifierError",
    "CodecError",
]
