"""Local store: durable keyed record store over async SQLAlchemy.

Operations:
- insert_or_replace: stage an upsert by id (update in place, never duplicate)
- delete_all: stage removal of every record of a kind
- fetch / get / count: predicate-filtered reads (favorite flag, id prefix)
- commit: flush staged changes

The store owns a single AsyncSession. Every operation runs under one
asyncio.Lock so overlapping coroutines never use the session concurrently.
"""

import asyncio
import logging
from typing import TypeAlias

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photo_sync.models import FeedPhotoRow, TopicPhotoRow, TopicRow
from photo_sync.schemas.photo import FeedPhoto, RecordKind, Topic, TopicPhoto
from photo_sync.services.errors import StoreError
from photo_sync.stores.database import get_session_factory

logger = logging.getLogger("uvicorn.error")

Record: TypeAlias = FeedPhoto | Topic | TopicPhoto
Row: TypeAlias = FeedPhotoRow | TopicRow | TopicPhotoRow

_ROW_TYPES: dict[RecordKind, type[Row]] = {
    RecordKind.FEED: FeedPhotoRow,
    RecordKind.TOPIC: TopicRow,
    RecordKind.TOPIC_PHOTO: TopicPhotoRow,
}


def kind_of(record: Record) -> RecordKind:
    """Map a domain record to its store kind."""
    if isinstance(record, FeedPhoto):
        return RecordKind.FEED
    if isinstance(record, TopicPhoto):
        return RecordKind.TOPIC_PHOTO
    if isinstance(record, Topic):
        return RecordKind.TOPIC
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


class LocalStore:
    """Keyed record store for feed photos, topics and topic photos."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._lock = asyncio.Lock()

    @classmethod
    def open(cls) -> "LocalStore":
        """Open a store on a fresh session from the initialized engine."""
        return cls(get_session_factory()())

    async def close(self) -> None:
        async with self._lock:
            await self._session.close()

    async def insert_or_replace(self, record: Record) -> None:
        """Stage an insert, or an in-place update when the id already exists."""
        row_type = _ROW_TYPES[kind_of(record)]
        async with self._lock:
            row = await self._session.get(row_type, record.id)
            if row is None:
                row = row_type(id=record.id)
                self._session.add(row)
            row.apply(record)
            # Later lookups of the same id in this transaction must find the row
            await self._session.flush()

    async def delete_all(self, kind: RecordKind) -> None:
        row_type = _ROW_TYPES[kind]
        async with self._lock:
            await self._session.execute(delete(row_type))
            # Bulk delete bypasses the identity map
            self._session.expunge_all()

    async def fetch(
        self,
        kind: RecordKind,
        *,
        favorite: bool | None = None,
        id_prefix: str | None = None,
        order_by_id: bool = True,
        limit: int | None = None,
    ) -> list[Record]:
        """Fetch records of a kind.

        Args:
            kind: Record kind to query.
            favorite: True selects favorited records only; False selects
                records that are not favorited (false or never set).
            id_prefix: Only records whose id starts with this literal prefix.
            order_by_id: Sort ascending by id.
            limit: Maximum number of records.

        Returns:
            Domain records (detached copies).
        """
        row_type = _ROW_TYPES[kind]
        stmt = select(row_type)
        if favorite is True:
            stmt = stmt.where(row_type.favorite.is_(True))
        elif favorite is False:
            stmt = stmt.where(or_(row_type.favorite.is_(False), row_type.favorite.is_(None)))
        if id_prefix is not None:
            stmt = stmt.where(row_type.id.startswith(id_prefix, autoescape=True))
        if order_by_id:
            stmt = stmt.order_by(row_type.id)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._lock:
            result = await self._session.execute(stmt)
            rows = result.scalars().all()
            return [row.to_record() for row in rows]

    async def get(self, kind: RecordKind, record_id: str) -> Record | None:
        row_type = _ROW_TYPES[kind]
        async with self._lock:
            row = await self._session.get(row_type, record_id)
            return row.to_record() if row is not None else None

    async def count(self, kind: RecordKind, *, favorite: bool | None = None) -> int:
        row_type = _ROW_TYPES[kind]
        stmt = select(func.count()).select_from(row_type)
        if favorite is True:
            stmt = stmt.where(row_type.favorite.is_(True))
        async with self._lock:
            result = await self._session.execute(stmt)
            return int(result.scalar_one())

    async def commit(self) -> None:
        """Commit staged changes.

        Raises:
            StoreError: If the commit fails (the session is rolled back).
        """
        async with self._lock:
            try:
                await self._session.commit()
            except SQLAlchemyError as e:
                await self._session.rollback()
                logger.error(f"Local store commit failed: {e}")
                raise StoreError(str(e)) from e
