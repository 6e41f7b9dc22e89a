"""
Record store contract and the in-memory backend.

Responsibilities:
- Per-collection document CRUD and equality queries.

Non-Responsibilities:
- No caching, no fallback, no merge logic. That belongs to the repository.
"""

import copy
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

Document = Tuple[str, Dict[str, Any]]


class StoreError(Exception):
    """Base class for record store failures."""
    pass


class StoreUnavailable(StoreError):
    """Network, auth, quota or backend failure."""
    pass


class DocumentNotFound(StoreError):
    """Update or delete targeted a document that does not exist."""
    pass


class RecordStore(ABC):
    """Document database with per-collection CRUD and simple equality queries."""

    @abstractmethod
    def list_all(self, collection: str) -> List[Document]:
        ...

    @abstractmethod
    def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    def query_equals(self, collection: str, field: str, value: Any) -> List[Document]:
        ...

    @abstractmethod
    def insert(self, collection: str, fields: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        """Store a new document and return its id (assigned when doc_id is None)."""
        ...

    @abstractmethod
    def update_fields(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        """Merge partial into an existing document. Raises DocumentNotFound."""
        ...

    @abstractmethod
    def delete_by_id(self, collection: str, doc_id: str) -> None:
        ...


class InMemoryRecordStore(RecordStore):
    """Dict-backed store. Documents are copied on the way in and out."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _docs(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def list_all(self, collection: str) -> List[Document]:
        return [(doc_id, copy.deepcopy(fields)) for doc_id, fields in self._docs(collection).items()]

    def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        fields = self._docs(collection).get(doc_id)
        if fields is None:
            return None
        return (doc_id, copy.deepcopy(fields))

    def query_equals(self, collection: str, field: str, value: Any) -> List[Document]:
        return [
            (doc_id, copy.deepcopy(fields))
            for doc_id, fields in self._docs(collection).items()
            if fields.get(field) == value
        ]

    def insert(self, collection: str, fields: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        self._docs(collection)[doc_id] = copy.deepcopy(fields)
        return doc_id

    def update_fields(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        docs = self._docs(collection)
        if doc_id not in docs:
            raise DocumentNotFound(f"{collection}/{doc_id} does not exist")
        docs[doc_id].update(copy.deepcopy(partial))

    def delete_by_id(self, collection: str, doc_id: str) -> None:
        self._docs(collection).pop(doc_id, None)
