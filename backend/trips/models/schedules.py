"""Request/result models for derived schedule generation."""

from uuid import UUID

from pydantic import BaseModel

from backend.trips.models.components import (
    CustomCruiseDetails,
    CustomTourDetails,
    PortInfoDTO,
    TourDayDTO,
)


class CruiseScheduleRequest(BaseModel):
    """Options for regenerating a cruise's port schedule.

    `cruise_details` is a snapshot used instead of the stored detail row;
    `itinerary_id`, when given, must match the itinerary owning the cruise.
    """

    itinerary_id: UUID | None = None
    cruise_details: CustomCruiseDetails | None = None
    skip_delete: bool = False
    auto_extend_itinerary: bool = False


class CruiseScheduleResult(BaseModel):
    created: list[PortInfoDTO]
    deleted: int


class TourScheduleRequest(BaseModel):
    """Options for regenerating a tour's day schedule."""

    itinerary_id: UUID | None = None
    tour_details: CustomTourDetails | None = None
    skip_delete: bool = False
    auto_extend_itinerary: bool = False


class TourScheduleResult(BaseModel):
    created: list[TourDayDTO]
    deleted: int
