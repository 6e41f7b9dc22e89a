"""
SQLite document store.

Uses SQLAlchemy to keep every collection in one documents table, with the
document fields stored as JSON.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime, String, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .store import Document, DocumentNotFound, RecordStore, StoreUnavailable

Base = declarative_base()


class StoredDocument(Base):
    """One document in one collection."""

    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    doc_id = Column(String, primary_key=True)
    fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    engine.dispose()


class SqlRecordStore(RecordStore):
    """RecordStore over a local SQLite file. SQLAlchemy errors become StoreUnavailable."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_database(self.db_path)
        self._engine = create_engine(f"sqlite:///{self.db_path}")
        self._Session = sessionmaker(bind=self._engine)

    def close(self) -> None:
        self._engine.dispose()

    def list_all(self, collection: str) -> List[Document]:
        try:
            with self._Session() as session:
                rows = session.execute(
                    select(StoredDocument)
                    .where(StoredDocument.collection == collection)
                    .order_by(StoredDocument.created_at)
                ).scalars().all()
                return [(row.doc_id, dict(row.fields)) for row in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"list {collection} failed: {e}") from e

    def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            with self._Session() as session:
                row = session.get(StoredDocument, (collection, doc_id))
                if row is None:
                    return None
                return (row.doc_id, dict(row.fields))
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"get {collection}/{doc_id} failed: {e}") from e

    def query_equals(self, collection: str, field: str, value: Any) -> List[Document]:
        # JSON path comparisons differ between dialects; filter in Python.
        return [(doc_id, fields) for doc_id, fields in self.list_all(collection) if fields.get(field) == value]

    def insert(self, collection: str, fields: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        try:
            with self._Session() as session:
                session.add(StoredDocument(collection=collection, doc_id=doc_id, fields=dict(fields)))
                session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"insert {collection}/{doc_id} failed: {e}") from e
        return doc_id

    def update_fields(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        try:
            with self._Session() as session:
                row = session.get(StoredDocument, (collection, doc_id))
                if row is None:
                    raise DocumentNotFound(f"{collection}/{doc_id} does not exist")
                # Reassign so the JSON column is flagged dirty.
                row.fields = {**row.fields, **partial}
                session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"update {collection}/{doc_id} failed: {e}") from e

    def delete_by_id(self, collection: str, doc_id: str) -> None:
        try:
            with self._Session() as session:
                row = session.get(StoredDocument, (collection, doc_id))
                if row is not None:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"delete {collection}/{doc_id} failed: {e}") from e
