#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Record model
============
Backing table for the SQL record store.  Every collection (topics,
topic-versions, users) shares one table; a row holds one JSON document.

``seq`` preserves insertion order, which is the order the store returns
records in (and therefore the order of children in a hierarchy).
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from sqlalchemy import JSON, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_base.core.database import Base


# -----------------------------------------------------------------------------

class Record(Base):
    __tablename__ = "records"
    __table_args__ = (UniqueConstraint("collection", "record_id", name="uq_record_collection_id"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    record_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<Record {self.collection}/{self.record_id}>"


# -----------------------------------------------------------------------------
