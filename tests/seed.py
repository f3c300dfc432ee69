"""Seed helpers shared by the SQLite-backed test suites."""

import uuid
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.trips.db.models import Base, Itinerary, ItineraryDay


@dataclass
class SeededItinerary:
    """Ids of an itinerary created for a test, with its days by date."""

    itinerary_id: uuid.UUID
    agency_id: uuid.UUID
    day_ids: dict[date, uuid.UUID]

    @property
    def first_day_id(self) -> uuid.UUID:
        return self.day_ids[min(self.day_ids)]


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_itinerary(
    session: AsyncSession,
    start: date,
    end: date,
    *,
    agency_id: uuid.UUID | None = None,
    with_days: bool = True,
) -> SeededItinerary:
    """Insert an itinerary spanning [start, end] and, optionally, one day per date."""
    agency_id = agency_id or uuid.uuid4()
    itinerary = Itinerary(
        id=uuid.uuid4(), agency_id=agency_id, name="Test Itinerary", start_date=start, end_date=end
    )
    session.add(itinerary)
    await session.flush()

    day_ids: dict[date, uuid.UUID] = {}
    if with_days:
        current = start
        while current <= end:
            day = ItineraryDay(
                id=uuid.uuid4(), itinerary_id=itinerary.id, agency_id=agency_id, date=current
            )
            session.add(day)
            day_ids[current] = day.id
            current += timedelta(days=1)
    await session.commit()
    return SeededItinerary(itinerary.id, agency_id, day_ids)
