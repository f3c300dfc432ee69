"""Read-only tour catalog lookups."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.db.models import CatalogTourDay
from backend.trips.models.components import TourItineraryDay


class SqlTourCatalog:
    """Reads catalog tour days; the catalog is ingested elsewhere."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_days(self, tour_id: str) -> list[TourItineraryDay]:
        """Catalog days for a tour, ordered by day number."""
        result = await self._session.execute(
            select(CatalogTourDay)
            .where(CatalogTourDay.tour_id == tour_id)
            .order_by(CatalogTourDay.day_number)
        )
        return [
            TourItineraryDay.model_validate(row, from_attributes=True)
            for row in result.scalars().all()
        ]
