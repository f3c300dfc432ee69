"""Itinerary and itinerary-day persistence."""

import logging
import uuid
from datetime import date

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.db.models import Itinerary, ItineraryDay, utcnow
from backend.trips.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


class SqlItineraryStore:
    """Lookups, bulk day find-or-create and bound extension for itineraries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_itinerary(self, itinerary_id: uuid.UUID) -> Itinerary:
        """Fetch an itinerary or raise NotFoundError."""
        itinerary = await self._session.get(Itinerary, itinerary_id)
        if itinerary is None:
            raise NotFoundError(f"Itinerary {itinerary_id} not found")
        return itinerary

    async def get_day(self, day_id: uuid.UUID) -> ItineraryDay | None:
        return await self._session.get(ItineraryDay, day_id)

    async def require_day(self, day_id: uuid.UUID) -> ItineraryDay:
        """Fetch an itinerary day or raise NotFoundError."""
        day = await self.get_day(day_id)
        if day is None:
            raise NotFoundError(f"Itinerary day {day_id} not found")
        return day

    async def resolve_agency_id(self, day_id: uuid.UUID | None) -> uuid.UUID:
        """Resolve the agency owning a day, falling back to its itinerary.

        Raises:
            InvalidInputError: If no day id is given, the day is unknown, or
                neither the day nor its itinerary names an agency.
        """
        if day_id is None:
            raise InvalidInputError("itinerary_day_id is required to determine agency")

        result = await self._session.execute(
            select(ItineraryDay.agency_id, Itinerary.agency_id)
            .join(Itinerary, Itinerary.id == ItineraryDay.itinerary_id)
            .where(ItineraryDay.id == day_id)
        )
        row = result.first()
        if row is None:
            raise InvalidInputError(f"Itinerary day {day_id} not found")

        agency_id = row[0] or row[1]
        if agency_id is None:
            raise InvalidInputError(f"Itinerary day {day_id} has no owning agency")
        return agency_id

    async def find_days_by_dates(
        self, itinerary_id: uuid.UUID, dates: list[date]
    ) -> dict[date, uuid.UUID]:
        """Map each date that already has a day in the itinerary to that day's id."""
        if not dates:
            return {}
        result = await self._session.execute(
            select(ItineraryDay.date, ItineraryDay.id).where(
                ItineraryDay.itinerary_id == itinerary_id,
                ItineraryDay.date.in_(dates),
            )
        )
        return {day_date: day_id for day_date, day_id in result.all()}

    async def find_or_create_days(
        self,
        itinerary_id: uuid.UUID,
        dates: list[date],
        *,
        agency_id: uuid.UUID | None,
    ) -> dict[date, uuid.UUID]:
        """Return day ids for every date, inserting the missing days in one batch.

        Args:
            itinerary_id: Itinerary owning the days
            dates: Calendar dates needed (duplicates ignored)
            agency_id: Agency stamped on newly created days

        Returns:
            Mapping of date to itinerary day id
        """
        unique_dates = sorted(set(dates))
        day_ids = await self.find_days_by_dates(itinerary_id, unique_dates)

        missing = [d for d in unique_dates if d not in day_ids]
        if missing:
            now = utcnow()
            rows = [
                {
                    "id": uuid.uuid4(),
                    "itinerary_id": itinerary_id,
                    "agency_id": agency_id,
                    "date": d,
                    "created_at": now,
                    "updated_at": now,
                }
                for d in missing
            ]
            await self._session.execute(insert(ItineraryDay), rows)
            day_ids.update({row["date"]: row["id"] for row in rows})
            logger.debug(
                "Created itinerary days",
                extra={"structured": {"itinerary_id": str(itinerary_id), "count": len(rows)}},
            )

        return day_ids

    async def extend_bounds(
        self,
        itinerary: Itinerary,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> bool:
        """Widen the itinerary's date range so it covers [start, end].

        Returns:
            True if either bound changed
        """
        changed = False
        if start is not None and itinerary.start_date is not None and start < itinerary.start_date:
            itinerary.start_date = start
            changed = True
        if end is not None and itinerary.end_date is not None and end > itinerary.end_date:
            itinerary.end_date = end
            changed = True

        if changed:
            itinerary.updated_at = utcnow()
            await self._session.flush()
            logger.info(
                "Extended itinerary bounds",
                extra={
                    "structured": {
                        "itinerary_id": str(itinerary.id),
                        "start_date": str(itinerary.start_date),
                        "end_date": str(itinerary.end_date),
                    }
                },
            )
        return changed
