"""Tour day schedule generation - one tour_day child per tour day."""

import time
import uuid
from datetime import UTC, date, datetime, timedelta
from datetime import time as dt_time
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.config import Settings, get_settings
from backend.trips.db.base_components import SqlComponentStore
from backend.trips.db.catalog import SqlTourCatalog
from backend.trips.db.details import detail_store_for
from backend.trips.db.itineraries import SqlItineraryStore
from backend.trips.db.models import utcnow
from backend.trips.errors import InvalidInputError
from backend.trips.models.common import ComponentStatus, ComponentType
from backend.trips.models.components import (
    CustomTourDetails,
    TourDayDetails,
    TourDayDTO,
    TourItineraryDay,
)
from backend.trips.models.schedules import TourScheduleRequest, TourScheduleResult
from backend.trips.orchestration.registry import build_component_dto
from backend.trips.utils.logging import StructuredScheduleLogger
from backend.trips.utils.metrics import PrometheusScheduleMetrics

KIND = "tour_day"


def placeholder_days(count: int) -> list[TourItineraryDay]:
    return [TourItineraryDay(day_number=n, title=f"Day {n}") for n in range(1, count + 1)]


def day_date(start: date, day_number: int) -> date:
    """Calendar date of tour day N (1-indexed)."""
    return start + timedelta(days=day_number - 1)


class TourDayScheduleGenerator:
    """Regenerates a tour's tour_day children.

    Day content comes from the tour's itinerary snapshot, else the catalog
    (by catalog tour id), else "Day N" placeholders for the tour length.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        settings: Settings | None = None,
        log: StructuredScheduleLogger | None = None,
        metrics: PrometheusScheduleMetrics | None = None,
    ) -> None:
        self._session = session
        self._settings = settings or get_settings()
        self._log = log or StructuredScheduleLogger()
        self._metrics = metrics or PrometheusScheduleMetrics()
        self._components = SqlComponentStore(session)
        self._itineraries = SqlItineraryStore(session)
        self._catalog = SqlTourCatalog(session)
        self._tour_details = detail_store_for(session, ComponentType.custom_tour)
        self._day_details = detail_store_for(session, ComponentType.tour_day)

    async def resolve_days(self, details: CustomTourDetails) -> list[TourItineraryDay]:
        """Pick the day list for a tour: snapshot, then catalog, then placeholders."""
        if details.itinerary_json:
            return sorted(details.itinerary_json, key=lambda d: d.day_number)
        if details.tour_id:
            catalog_days = await self._catalog.list_days(details.tour_id)
            if catalog_days:
                return catalog_days
        if details.days:
            return placeholder_days(details.days)
        return []

    async def generate(
        self, tour_id: uuid.UUID, request: TourScheduleRequest | None = None
    ) -> TourScheduleResult:
        """Replace the tour's day schedule.

        Returns:
            Created tour_day DTOs and the number of children deleted;
            ({created: [], deleted: 0}) with no changes when the tour has no days

        Raises:
            InvalidInputError: Unknown tour, ownership mismatch, missing start
                date, or missing itinerary days without auto-extend
        """
        request = request or TourScheduleRequest()
        timings: dict[str, float] = {}
        started = time.perf_counter()

        try:
            result = await self._generate(tour_id, request, timings)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        total_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_generation(KIND, total_ms, len(result.created), result.deleted)
        self._log.log_generation(
            KIND,
            tour_id,
            created=len(result.created),
            deleted=result.deleted,
            timings_ms=timings,
            target_ms=self._settings.schedule_generation_target_ms,
        )
        return result

    async def _generate(
        self,
        tour_id: uuid.UUID,
        request: TourScheduleRequest,
        timings: dict[str, float],
    ) -> TourScheduleResult:
        step = time.perf_counter()

        tour = await self._components.get(tour_id)
        if tour is None or tour.component_type != ComponentType.custom_tour.value:
            raise InvalidInputError("Tour component not found")
        if tour.itinerary_day_id is None:
            raise InvalidInputError("Tour is not linked to an itinerary day")
        day = await self._itineraries.get_day(tour.itinerary_day_id)
        if day is None:
            raise InvalidInputError("Tour component not found")
        itinerary_id = day.itinerary_id
        if request.itinerary_id is not None and request.itinerary_id != itinerary_id:
            raise InvalidInputError("Tour does not belong to the specified itinerary")

        details = request.tour_details
        if details is None:
            details = await self._tour_details.find_by_component_id(tour_id)
        if details is None:
            raise InvalidInputError("Tour details not found")

        tour_days = await self.resolve_days(details)
        timings["load"] = (time.perf_counter() - step) * 1000
        if not tour_days:
            return TourScheduleResult(created=[], deleted=0)

        start = details.departure_start_date
        if start is None:
            raise InvalidInputError("Tour departure start date is required to generate tour days")

        step = time.perf_counter()
        dates = [day_date(start, d.day_number) for d in tour_days]
        existing = await self._itineraries.find_days_by_dates(itinerary_id, dates)
        missing = sorted({d for d in dates if d not in existing})
        if missing and not request.auto_extend_itinerary:
            raise InvalidInputError(
                "Itinerary does not have days for the full tour duration. "
                f"Missing dates: {', '.join(d.isoformat() for d in missing)}. "
                "Set auto_extend_itinerary=true to auto-create the required days."
            )
        if missing:
            itinerary = await self._itineraries.get_itinerary(itinerary_id)
            await self._itineraries.extend_bounds(itinerary, start=min(dates), end=max(dates))
        day_ids = await self._itineraries.find_or_create_days(
            itinerary_id, dates, agency_id=tour.agency_id
        )
        timings["days"] = (time.perf_counter() - step) * 1000

        step = time.perf_counter()
        should_delete = True
        if request.skip_delete:
            if await self._components.has_children(tour_id):
                self._log.log_skip_delete_override(KIND, tour_id)
            else:
                should_delete = False
        deleted = await self._components.delete_children(tour_id) if should_delete else 0
        timings["delete"] = (time.perf_counter() - step) * 1000

        step = time.perf_counter()
        now = utcnow()
        rows: list[dict[str, Any]] = []
        detail_items: list[tuple[uuid.UUID, TourDayDetails]] = []
        for tour_day, child_date in zip(tour_days, dates, strict=True):
            child_id = uuid.uuid4()
            rows.append(
                {
                    "id": child_id,
                    "agency_id": tour.agency_id,
                    "itinerary_day_id": day_ids[child_date],
                    "parent_component_id": tour_id,
                    "component_type": ComponentType.tour_day.value,
                    "name": tour_day.title or f"Day {tour_day.day_number}",
                    "description": tour_day.description,
                    "sequence_order": tour_day.day_number - 1,
                    "start_datetime": datetime.combine(child_date, dt_time.min, tzinfo=UTC),
                    "location": tour_day.overnight_city,
                    "status": ComponentStatus.proposed.value,
                    "currency": tour.currency,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            detail_items.append(
                (
                    child_id,
                    TourDayDetails(
                        day_number=tour_day.day_number,
                        overnight_city=tour_day.overnight_city,
                        is_locked=True,
                    ),
                )
            )

        await self._components.bulk_create(rows)
        await self._day_details.bulk_create(detail_items)
        timings["insert"] = (time.perf_counter() - step) * 1000

        created: list[TourDayDTO] = [
            build_component_dto(ComponentType.tour_day, row, details=details_)  # type: ignore[misc]
            for row, (_, details_) in zip(rows, detail_items, strict=True)
        ]
        return TourScheduleResult(created=created, deleted=deleted)
