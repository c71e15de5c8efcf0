#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Record store contract
=====================
A keyed collection of pydantic models, each carrying a unique ``id``.
Services are written against ``RecordStore`` only; the backends are
interchangeable and hold no business rules.

Every read returns freshly parsed objects, so mutating a returned value never
affects what is stored or what another caller holds.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import abc
import logging
from contextlib import contextmanager
from typing import Callable, Generic, Iterator, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
Predicate = Callable[[T], bool]


# -----------------------------------------------------------------------------

class StoreError(Exception):
    """A persistence failure (I/O, corrupt data, database error)."""

    def __init__(self, collection: str, operation: str, cause: BaseException | None = None):
        self.collection = collection
        self.operation = operation
        self.cause = cause
        msg = f"{collection}: {operation} failed"
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)


# -----------------------------------------------------------------------------

class RecordStore(abc.ABC, Generic[T]):

    #: exception types the backend translates into StoreError
    fault_types: tuple[type[BaseException], ...] = (OSError,)

    def __init__(self, model: type[T], collection: str) -> None:
        self.model = model
        self.collection = collection

    # ---------------------------------------------------------------- queries

    @abc.abstractmethod
    async def find_all(self) -> list[T]: ...

    @abc.abstractmethod
    async def find_by_id(self, id: str) -> Optional[T]: ...

    async def find_by(self, predicate: Predicate) -> Optional[T]:
        for item in await self.find_all():
            if predicate(item):
                return item
        return None

    async def find_many_by(self, predicate: Predicate) -> list[T]:
        return [item for item in await self.find_all() if predicate(item)]

    # -------------------------------------------------------------- mutations

    @abc.abstractmethod
    async def create(self, item: T) -> None: ...

    @abc.abstractmethod
    async def update(self, predicate: Predicate, item: T) -> None:
        """Replace the first record matching *predicate*; no-op when none does."""

    @abc.abstractmethod
    async def delete(self, predicate: Predicate) -> None:
        """Remove every record matching *predicate*."""

    # ---------------------------------------------------------------- helpers

    @contextmanager
    def _faults(self, operation: str, **context) -> Iterator[None]:
        """Log and translate backend failures into StoreError."""
        try:
            yield
        except StoreError:
            raise
        except self.fault_types as exc:
            logger.exception(
                "Store fault in %s.%s (context=%s)", self.collection, operation, context or {}
            )
            raise StoreError(self.collection, operation, exc) from exc

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.collection!r}>"


# -----------------------------------------------------------------------------
