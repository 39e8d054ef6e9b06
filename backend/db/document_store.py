from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from db.models import Document
from db.schemas import RECORD_TYPES

logger = logging.getLogger(__name__)

Predicate = Callable[[BaseModel], bool]


class DocumentStore(ABC):
    """Abstract persistence collaborator: named collections of records upserted by id.

    Writes are visible to reads issued after them on the same store handle. A logical
    operation ends with ``commit()``; ``rollback()`` discards everything written since
    the last commit.
    """

    @abstractmethod
    async def get(self, collection: str, record_id: str) -> Optional[BaseModel]:
        """Return the record or None when the id is absent."""
        ...

    @abstractmethod
    async def list_where(self, collection: str, predicate: Predicate | None = None) -> list[BaseModel]:
        """Return records of a collection, ordered by id, optionally filtered."""
        ...

    @abstractmethod
    async def put(self, collection: str, record: BaseModel) -> None:
        """Insert or replace the record with the same id."""
        ...

    @abstractmethod
    async def put_if_absent(self, collection: str, record: BaseModel) -> bool:
        """Insert the record only when its id is new. Returns True when inserted."""
        ...

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> bool:
        ...

    @abstractmethod
    async def delete_all(self, collection: str) -> int:
        ...

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...


def _record_type(collection: str) -> type[BaseModel]:
    try:
        return RECORD_TYPES[collection]
    except KeyError:
        raise ValueError(f"Unknown collection '{collection}'")


class SqlDocumentStore(DocumentStore):
    """Document store over the SQLAlchemy ``documents`` table."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, collection: str, record_id: str) -> Document | None:
        return self.db.get(Document, (collection, str(record_id)))

    async def get(self, collection: str, record_id: str) -> Optional[BaseModel]:
        model = _record_type(collection)
        row = self._row(collection, record_id)
        if not row:
            return None
        return model.model_validate_json(row.body)

    async def list_where(self, collection: str, predicate: Predicate | None = None) -> list[BaseModel]:
        model = _record_type(collection)
        rows = (
            self.db.query(Document)
            .filter(Document.collection == collection)
            .order_by(Document.doc_id.asc())
            .all()
        )
        records = [model.model_validate_json(row.body) for row in rows]
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    async def put(self, collection: str, record: BaseModel) -> None:
        model = _record_type(collection)
        if not isinstance(record, model):
            raise TypeError(f"{collection} expects {model.__name__}, got {type(record).__name__}")
        record_id = str(getattr(record, "id"))
        body = record.model_dump_json()
        row = self._row(collection, record_id)
        if row:
            row.body = body
        else:
            self.db.add(Document(collection=collection, doc_id=record_id, body=body))
        self.db.flush()

    async def put_if_absent(self, collection: str, record: BaseModel) -> bool:
        if self._row(collection, str(getattr(record, "id"))):
            return False
        await self.put(collection, record)
        return True

    async def delete(self, collection: str, record_id: str) -> bool:
        row = self._row(collection, record_id)
        if not row:
            return False
        self.db.delete(row)
        self.db.flush()
        return True

    async def delete_all(self, collection: str) -> int:
        _record_type(collection)
        deleted = (
            self.db.query(Document)
            .filter(Document.collection == collection)
            .delete(synchronize_session="fetch")
        )
        count = int(deleted or 0)
        logger.info(f"Cleared {count} document(s) from '{collection}'")
        return count

    async def commit(self) -> None:
        self.db.commit()

    async def rollback(self) -> None:
        self.db.rollback()
