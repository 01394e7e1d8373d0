"""
Persistence contract the migration engine needs from a store.

The engine only ever asks a collection to fetch (typed or raw), probe, count,
create and list distinct values; reuse and rollback add update, delete-all and
bulk insert. Anything that satisfies :class:`RecordCollection` can act as
source or target.
"""
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any, Callable, ContextManager, Dict, Generic, List, Optional, Protocol, Sequence, TypeVar

from blogmigrate.schemas.dto import BlogRecord, CategoryRecord, RecordModel

RecordT = TypeVar("RecordT", bound=RecordModel)

Filters = Dict[str, Any]


class RecordCollection(Protocol, Generic[RecordT]):
    """One logical collection (categories or blogs) inside a store."""

    def find(self, filters: Optional[Filters] = None, *, limit: Optional[int] = None) -> List[RecordT]:
        """All records matching every ``field == value`` pair in ``filters``."""
        ...

    def find_documents(
        self, filters: Optional[Filters] = None, *, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Like :meth:`find`, but raw snake_case rows that may fail record validation."""
        ...

    def find_one(self, filters: Filters) -> Optional[RecordT]:
        ...

    def count(self, filters: Optional[Filters] = None) -> int:
        ...

    def create(self, values: Dict[str, Any]) -> RecordT:
        ...

    def distinct(self, field: str) -> List[Any]:
        ...

    def update(self, record_id: str, values: Dict[str, Any]) -> Optional[RecordT]:
        ...

    def delete_all(self) -> int:
        ...

    def insert_many(self, records: Sequence[RecordT]) -> int:
        ...


@dataclass
class BlogStore:
    """
    A store holding the ``Category`` and ``Blog`` collections.

    ``transaction`` returns a context manager that makes the writes inside
    it all-or-nothing; stores without transactions keep the default no-op.
    """

    label: str
    categories: RecordCollection[CategoryRecord]
    blogs: RecordCollection[BlogRecord]
    transaction: Callable[[], ContextManager[Any]] = field(default=nullcontext)
