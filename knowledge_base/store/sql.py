#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
SQL record store
================
Stores each record as a JSON document in the shared ``records`` table
(see ``models.record``).  Each operation runs in its own session and commits
on success, so a single call is atomic; nothing spans calls.

Predicates are Python callables, so predicate queries load the collection and
filter in process.  Lookups by id go straight to the indexed column.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_base.models.record import Record
from .base import Predicate, RecordStore, T

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

class SqlRecordStore(RecordStore[T]):

    fault_types = (SQLAlchemyError, OSError, ValidationError)

    def __init__(
        self,
        model: type[T],
        collection: str,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        super().__init__(model, collection)
        self._session_factory = session_factory

    # ---------------------------------------------------------------- helpers

    def _load(self, row: Record) -> T:
        return self.model.model_validate(row.payload)

    def _dump(self, item: T) -> dict:
        return item.model_dump(mode="json")

    async def _rows(self, session: AsyncSession) -> list[Record]:
        result = await session.execute(
            select(Record)
            .where(Record.collection == self.collection)
            .order_by(Record.seq)
        )
        return list(result.scalars().all())

    # ---------------------------------------------------------------- queries

    async def find_all(self) -> list[T]:
        with self._faults("find_all"):
            async with self._session_factory() as session:
                return [self._load(r) for r in await self._rows(session)]

    async def find_by_id(self, id: str) -> Optional[T]:
        with self._faults("find_by_id", id=id):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Record).where(
                        Record.collection == self.collection,
                        Record.record_id == id,
                    )
                )
                row = result.scalar_one_or_none()
                logger.debug("%s.find_by_id: %s %s", self.collection, id, "found" if row else "not found")
                return self._load(row) if row else None

    # -------------------------------------------------------------- mutations

    async def create(self, item: T) -> None:
        with self._faults("create", id=item.id):
            async with self._session_factory() as session:
                session.add(Record(
                    collection=self.collection,
                    record_id=item.id,
                    payload=self._dump(item),
                ))
                await session.commit()

    async def update(self, predicate: Predicate, item: T) -> None:
        with self._faults("update", id=item.id):
            async with self._session_factory() as session:
                for row in await self._rows(session):
                    if predicate(self._load(row)):
                        row.record_id = item.id
                        row.payload = self._dump(item)
                        await session.commit()
                        return

    async def delete(self, predicate: Predicate) -> None:
        with self._faults("delete"):
            async with self._session_factory() as session:
                doomed = [
                    row.seq for row in await self._rows(session)
                    if predicate(self._load(row))
                ]
                if doomed:
                    await session.execute(sa_delete(Record).where(Record.seq.in_(doomed)))
                    await session.commit()


# -----------------------------------------------------------------------------
