"""
SQLModel-backed implementation of the store contract.
"""
import uuid
from contextlib import contextmanager
from functools import partial
from typing import Any, Dict, Generic, Iterator, List, Optional, Sequence, Type

from pydantic import BaseModel as PydanticModel
from sqlalchemy import delete, false, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, col, select

from blogmigrate.core.logging_config import log_error
from blogmigrate.models import Blog, Category
from blogmigrate.models.base import BaseModel
from blogmigrate.schemas.dto import BlogRecord, CategoryRecord

from .base import BlogStore, Filters, RecordT

# Columns holding identifiers; string ids are converted before querying.
_UUID_FIELDS = {"id", "category_id"}


class _NoMatch(Exception):
    """A filter value can never match (e.g. a malformed id)."""


def _to_uuid(value: Any) -> Optional[uuid.UUID]:
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise _NoMatch(str(value)) from exc


def _jsonable(value: Any) -> Any:
    if isinstance(value, PydanticModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    return value


class SqlRecordCollection(Generic[RecordT]):
    """
    One table exposed through the :class:`RecordCollection` contract.

    Every write commits immediately, unless the collection is inside a
    :func:`sql_transaction`, where writes are only flushed. A failed write
    rolls the session back and re-raises so the caller can record the
    failure and move on.
    """

    def __init__(self, session: Session, model: Type[BaseModel], record_type: Type[RecordT]):
        self.session = session
        self.model = model
        self.record_type = record_type
        self.deferred = False

    def _commit(self) -> None:
        if self.deferred:
            self.session.flush()
        else:
            self.session.commit()

    def _column(self, field: str):
        if field not in self.model.model_fields:
            raise ValueError(f"Unknown field '{field}' for {self.model.__name__}")
        return col(getattr(self.model, field))

    def _conditions(self, filters: Optional[Filters]) -> List[ColumnElement]:
        conditions: List[ColumnElement] = []
        for field, value in (filters or {}).items():
            column = self._column(field)
            try:
                if field in _UUID_FIELDS:
                    value = _to_uuid(value)
            except _NoMatch:
                return [false()]
            conditions.append(column.is_(None) if value is None else column == value)
        return conditions

    def _to_record(self, row: BaseModel) -> RecordT:
        return self.record_type.model_validate(row.model_dump())

    def _to_row_values(self, values: Dict[str, Any]) -> Dict[str, Any]:
        row_values: Dict[str, Any] = {}
        for field, value in values.items():
            if field not in self.model.model_fields:
                raise ValueError(f"Unknown field '{field}' for {self.model.__name__}")
            if field in _UUID_FIELDS:
                try:
                    value = _to_uuid(value)
                except _NoMatch as exc:
                    raise ValueError(f"Invalid identifier for {field}: {value}") from exc
            if value is None and field in {"id", "created_at", "updated_at"}:
                # Let the model defaults fill these in.
                continue
            row_values[field] = _jsonable(value)
        return row_values

    def _rows(self, filters: Optional[Filters], limit: Optional[int]) -> List[BaseModel]:
        statement = (
            select(self.model)
            .where(*self._conditions(filters))
            .order_by(col(self.model.created_at), col(self.model.id))
        )
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.session.exec(statement).all())

    def find(self, filters: Optional[Filters] = None, *, limit: Optional[int] = None) -> List[RecordT]:
        return [self._to_record(row) for row in self._rows(filters, limit)]

    def find_documents(
        self, filters: Optional[Filters] = None, *, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Rows as plain dicts, without record validation."""
        return [row.model_dump() for row in self._rows(filters, limit)]

    def find_one(self, filters: Filters) -> Optional[RecordT]:
        statement = select(self.model).where(*self._conditions(filters)).limit(1)
        row = self.session.exec(statement).first()
        return self._to_record(row) if row is not None else None

    def count(self, filters: Optional[Filters] = None) -> int:
        statement = (
            select(func.count())
            .select_from(self.model)
            .where(*self._conditions(filters))
        )
        return int(self.session.exec(statement).one())

    def distinct(self, field: str) -> List[Any]:
        statement = select(self._column(field)).distinct()
        values = self.session.exec(statement).all()
        return [str(value) if isinstance(value, uuid.UUID) else value for value in values]

    def create(self, values: Dict[str, Any]) -> RecordT:
        row = self.model(**self._to_row_values(values))
        try:
            self.session.add(row)
            self._commit()
            self.session.refresh(row)
        except SQLAlchemyError as exc:
            self.session.rollback()
            log_error(exc, f"Failed to create {self.model.__name__}")
            raise
        return self._to_record(row)

    def update(self, record_id: str, values: Dict[str, Any]) -> Optional[RecordT]:
        try:
            row = self.session.get(self.model, _to_uuid(record_id))
        except _NoMatch:
            return None
        if row is None:
            return None
        for field, value in self._to_row_values(values).items():
            setattr(row, field, value)
        try:
            self.session.add(row)
            self._commit()
            self.session.refresh(row)
        except SQLAlchemyError as exc:
            self.session.rollback()
            log_error(exc, f"Failed to update {self.model.__name__} {record_id}")
            raise
        return self._to_record(row)

    def delete_all(self) -> int:
        try:
            result = self.session.execute(delete(self.model))
            self._commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log_error(exc, f"Failed to clear {self.model.__name__}")
            raise
        return result.rowcount or 0

    def insert_many(self, records: Sequence[RecordT]) -> int:
        """Insert records as-is, keeping their ids and timestamps."""
        rows = [
            self.model(**self._to_row_values(record.model_dump()))
            for record in records
        ]
        try:
            self.session.add_all(rows)
            self._commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log_error(exc, f"Failed to insert {self.model.__name__} records")
            raise
        return len(rows)


@contextmanager
def sql_transaction(
    session: Session, collections: Sequence[SqlRecordCollection]
) -> Iterator[None]:
    """
    Group writes on ``collections`` into one commit.

    Writes inside the block are flushed, not committed; any exception rolls
    every one of them back and is re-raised.
    """
    for collection in collections:
        collection.deferred = True
    try:
        yield
        session.commit()
    except Exception as exc:
        session.rollback()
        log_error(exc, "Transaction rolled back")
        raise
    finally:
        for collection in collections:
            collection.deferred = False


def open_sql_store(session: Session, label: str) -> BlogStore:
    """Wrap a session as a :class:`BlogStore`."""
    categories = SqlRecordCollection(session, Category, CategoryRecord)
    blogs = SqlRecordCollection(session, Blog, BlogRecord)
    return BlogStore(
        label=label,
        categories=categories,
        blogs=blogs,
        transaction=partial(sql_transaction, session, (categories, blogs)),
    )
