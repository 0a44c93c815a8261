from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from courtslot.database import Base, enforce_sqlite_foreign_keys, get_db
from courtslot.domain.schedule import DayConfig, default_week
from courtslot.enums import VenueStatus
from courtslot.main import app
from courtslot.models.venue import Court, Venue
from courtslot.storage.repositories import CourtRepository

test_engine = create_async_engine("sqlite+aiosqlite://", echo=False)
enforce_sqlite_foreign_keys(test_engine)
test_session = async_sessionmaker(test_engine, expire_on_commit=False)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def create_court(
    venue_status: VenueStatus = VenueStatus.APPROVED,
    schedule: tuple[DayConfig, ...] | None = None,
    price: float = 500.0,
    sessionmaker: async_sessionmaker[AsyncSession] = test_session,
) -> Court:
    """Venue + court open daily 10:00-21:00 in 1-hour slots unless `schedule` is given."""
    async with sessionmaker() as session:
        venue = Venue(name="Riverside Club", owner_id=99, status=venue_status)
        session.add(venue)
        await session.flush()

        court = Court(venue_id=venue.id, name="Court 1", sport_type="tennis", default_price=price)
        repo = CourtRepository(session)
        repo.add(court)
        repo.replace_schedule(court, schedule or default_week(price))
        await session.commit()
        return court
