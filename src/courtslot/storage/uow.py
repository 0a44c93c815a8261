"""Unit of Work.

Wraps one booking-ledger transaction behind begin/commit/abort so the booking
and cancellation services do not depend on a particular session API. Any store
with transactions and a partial uniqueness constraint can implement it.

Usage:
    async with SqlAlchemyUnitOfWork(session) as uow:
        court = await uow.courts.get(court_id, for_update=True)
        ...
        await uow.flush()
    # committed here; aborted if the block raised
"""

import logging
from abc import ABC, abstractmethod
from types import TracebackType

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from courtslot.storage.repositories import (
    BookingRepository,
    CourtRepository,
    UnavailabilityRepository,
)

logger = logging.getLogger(__name__)


class UniquenessViolation(Exception):
    """The store rejected a write because of a uniqueness constraint."""


class AbstractUnitOfWork(ABC):
    courts: CourtRepository
    bookings: BookingRepository
    unavailability: UnavailabilityRepository

    async def __aenter__(self) -> "AbstractUnitOfWork":
        await self.begin()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            await self.commit()
        else:
            await self.abort()

    @abstractmethod
    async def begin(self) -> None: ...

    @abstractmethod
    async def flush(self) -> None:
        """Push pending writes so constraints are checked before commit.

        Raises:
            UniquenessViolation: if a uniqueness constraint rejects the write.
        """
        ...

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def abort(self) -> None: ...


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.courts = CourtRepository(session)
        self.bookings = BookingRepository(session)
        self.unavailability = UnavailabilityRepository(session)

    async def begin(self) -> None:
        if not self._session.in_transaction():
            await self._session.begin()

    async def flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise UniquenessViolation(str(e.orig)) from e

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise UniquenessViolation(str(e.orig)) from e

    async def abort(self) -> None:
        logger.debug("Rolling back unit of work")
        await self._session.rollback()
