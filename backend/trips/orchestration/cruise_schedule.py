"""Cruise port schedule generation - one port_info child per cruise day."""

import time
import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from datetime import time as dt_time
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.config import Settings, get_settings
from backend.trips.db.base_components import SqlComponentStore
from backend.trips.db.details import detail_store_for
from backend.trips.db.itineraries import SqlItineraryStore
from backend.trips.db.models import utcnow
from backend.trips.errors import InvalidInputError
from backend.trips.models.common import ComponentStatus, ComponentType, PortType, normalize_time
from backend.trips.models.components import (
    CruisePortCall,
    CustomCruiseDetails,
    PortInfoDetails,
    PortInfoDTO,
)
from backend.trips.models.schedules import CruiseScheduleRequest, CruiseScheduleResult
from backend.trips.orchestration.registry import build_component_dto
from backend.trips.utils.logging import StructuredScheduleLogger
from backend.trips.utils.metrics import PrometheusScheduleMetrics

KIND = "cruise_port"


@dataclass(frozen=True)
class PortDayPlan:
    """Classification of one cruise day."""

    day_index: int
    day_date: date
    port_type: PortType
    port_name: str
    description: str
    arrival_time: str | None = None
    departure_time: str | None = None
    tender_required: bool = False


def _meaningful_time(value: str | None) -> str | None:
    """Normalized time, or None when absent, unparseable or midnight."""
    normalized = normalize_time(value, default="")
    if not normalized or normalized == "00:00:00":
        return None
    return normalized


def _classify_port_call(
    call: CruisePortCall, day_index: int, last_index: int, day_date: date
) -> PortDayPlan:
    if call.is_sea_day:
        return PortDayPlan(day_index, day_date, PortType.sea_day, "At Sea", "Day at sea")

    name = call.port_name or "Unknown Port"
    times: dict[str, Any] = {
        "arrival_time": _meaningful_time(call.arrive_time),
        "departure_time": _meaningful_time(call.depart_time),
        "tender_required": call.tender,
    }
    if day_index == 0:
        return PortDayPlan(
            day_index, day_date, PortType.departure, name, f"Embarkation at {name}", **times
        )
    if day_index == last_index:
        return PortDayPlan(
            day_index, day_date, PortType.arrival, name, f"Disembarkation at {name}", **times
        )
    description = "Port of call (tender required)" if call.tender else "Port of call"
    return PortDayPlan(day_index, day_date, PortType.port_call, name, description, **times)


def plan_cruise_days(details: CustomCruiseDetails) -> list[PortDayPlan]:
    """Classify every calendar day of a cruise, embarkation through disembarkation.

    Port calls are matched by their 1-indexed `day`; entries without a day
    are ignored. Days with no port call are embarkation (first), disembarkation
    (last) or sea days.

    Raises:
        InvalidInputError: If departure/arrival dates are missing or reversed.
    """
    departure, arrival = details.departure_date, details.arrival_date
    if departure is None or arrival is None:
        raise InvalidInputError("Cruise departure and arrival dates are required")
    if arrival < departure:
        raise InvalidInputError("Cruise arrival date must be on or after departure date")

    day_count = (arrival - departure).days + 1
    last_index = day_count - 1

    calls_by_day: dict[int, CruisePortCall] = {}
    for call in details.port_calls_json or []:
        if call.day is not None:
            calls_by_day.setdefault(call.day, call)

    plans: list[PortDayPlan] = []
    for day_index in range(day_count):
        day_date = departure + timedelta(days=day_index)
        call = calls_by_day.get(day_index + 1)

        if call is not None:
            plans.append(_classify_port_call(call, day_index, last_index, day_date))
        elif day_index == 0:
            name = details.departure_port or "Departure Port"
            plans.append(
                PortDayPlan(day_index, day_date, PortType.departure, name, f"Embarkation at {name}")
            )
        elif day_index == last_index:
            name = details.arrival_port or "Arrival Port"
            plans.append(
                PortDayPlan(day_index, day_date, PortType.arrival, name, f"Disembarkation at {name}")
            )
        else:
            plans.append(PortDayPlan(day_index, day_date, PortType.sea_day, "At Sea", "Day at sea"))

    return plans


def port_details_for(plan: PortDayPlan) -> PortInfoDetails:
    """Detail row for a classified day; dates follow the stop's role."""
    arrives = plan.port_type in (PortType.arrival, PortType.port_call)
    departs = plan.port_type in (PortType.departure, PortType.port_call)
    return PortInfoDetails(
        port_type=plan.port_type,
        port_name=plan.port_name,
        arrival_date=plan.day_date if arrives else None,
        arrival_time=plan.arrival_time,
        departure_date=plan.day_date if departs else None,
        departure_time=plan.departure_time,
        tender_required=plan.tender_required,
    )


def _bounds_message(details: CustomCruiseDetails, start: date, end: date) -> str:
    return (
        f"Cruise dates ({details.departure_date} to {details.arrival_date}) do not fit within "
        f"itinerary dates ({start} to {end}). Please select a cruise that departs on or after "
        f"{start} and returns by {end}, or adjust the itinerary dates to accommodate this cruise."
    )


class CruisePortScheduleGenerator:
    """Regenerates a cruise's port_info children from its dates and port calls.

    Delete-then-recreate in one transaction; calling it twice yields the
    same schedule.
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
        self._cruise_details = detail_store_for(session, ComponentType.custom_cruise)
        self._port_details = detail_store_for(session, ComponentType.port_info)

    async def generate(
        self, cruise_id: uuid.UUID, request: CruiseScheduleRequest | None = None
    ) -> CruiseScheduleResult:
        """Replace the cruise's port schedule.

        Args:
            cruise_id: custom_cruise component id
            request: Optional snapshot, ownership assertion and flags

        Returns:
            Created port_info DTOs and the number of children deleted

        Raises:
            InvalidInputError: Unknown cruise, ownership mismatch, missing or
                invalid dates, or dates outside the itinerary without auto-extend
        """
        request = request or CruiseScheduleRequest()
        timings: dict[str, float] = {}
        started = time.perf_counter()

        try:
            result = await self._generate(cruise_id, request, timings)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        total_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_generation(KIND, total_ms, len(result.created), result.deleted)
        self._log.log_generation(
            KIND,
            cruise_id,
            created=len(result.created),
            deleted=result.deleted,
            timings_ms=timings,
            target_ms=self._settings.schedule_generation_target_ms,
        )
        return result

    async def _generate(
        self,
        cruise_id: uuid.UUID,
        request: CruiseScheduleRequest,
        timings: dict[str, float],
    ) -> CruiseScheduleResult:
        step = time.perf_counter()

        # Ownership: the cruise's own day decides its itinerary
        cruise = await self._components.get(cruise_id)
        if cruise is None or cruise.component_type != ComponentType.custom_cruise.value:
            raise InvalidInputError("Cruise activity not found")
        if cruise.itinerary_day_id is None:
            raise InvalidInputError("Cruise is not linked to an itinerary day")
        day = await self._itineraries.get_day(cruise.itinerary_day_id)
        if day is None:
            raise InvalidInputError("Cruise activity not found")
        itinerary_id = day.itinerary_id
        if request.itinerary_id is not None and request.itinerary_id != itinerary_id:
            raise InvalidInputError("Provided itinerary_id does not match cruise ownership")

        details = request.cruise_details
        if details is None:
            details = await self._cruise_details.find_by_component_id(cruise_id)
        if details is None:
            raise InvalidInputError("Cruise details not found")

        plans = plan_cruise_days(details)
        timings["load_and_plan"] = (time.perf_counter() - step) * 1000

        step = time.perf_counter()
        itinerary = await self._itineraries.get_itinerary(itinerary_id)
        departure, arrival = plans[0].day_date, plans[-1].day_date
        if itinerary.start_date is not None and itinerary.end_date is not None:
            if departure < itinerary.start_date or arrival > itinerary.end_date:
                if not request.auto_extend_itinerary:
                    raise InvalidInputError(
                        _bounds_message(details, itinerary.start_date, itinerary.end_date)
                    )
                await self._itineraries.extend_bounds(itinerary, start=departure, end=arrival)

        should_delete = True
        if request.skip_delete:
            if await self._components.has_children(cruise_id):
                self._log.log_skip_delete_override(KIND, cruise_id)
            else:
                should_delete = False
        deleted = await self._components.delete_children(cruise_id) if should_delete else 0
        timings["delete"] = (time.perf_counter() - step) * 1000

        step = time.perf_counter()
        day_ids = await self._itineraries.find_or_create_days(
            itinerary_id, [p.day_date for p in plans], agency_id=cruise.agency_id
        )
        timings["days"] = (time.perf_counter() - step) * 1000

        step = time.perf_counter()
        now = utcnow()
        rows: list[dict[str, Any]] = []
        detail_items: list[tuple[uuid.UUID, PortInfoDetails]] = []
        for plan in plans:
            child_id = uuid.uuid4()
            rows.append(
                {
                    "id": child_id,
                    "agency_id": cruise.agency_id,
                    "itinerary_day_id": day_ids[plan.day_date],
                    "parent_component_id": cruise_id,
                    "component_type": ComponentType.port_info.value,
                    "name": plan.port_name,
                    "description": plan.description,
                    "sequence_order": plan.day_index,
                    "start_datetime": datetime.combine(plan.day_date, dt_time.min, tzinfo=UTC),
                    "location": plan.port_name,
                    "status": ComponentStatus.proposed.value,
                    "currency": cruise.currency,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            detail_items.append((child_id, port_details_for(plan)))

        await self._components.bulk_create(rows)
        await self._port_details.bulk_create(detail_items)
        timings["insert"] = (time.perf_counter() - step) * 1000

        created: list[PortInfoDTO] = [
            build_component_dto(ComponentType.port_info, row, details=details_)  # type: ignore[misc]
            for row, (_, details_) in zip(rows, detail_items, strict=True)
        ]
        return CruiseScheduleResult(created=created, deleted=deleted)
