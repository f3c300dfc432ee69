"""Derived schedule endpoints - cruise port schedules and tour day schedules."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends

from backend.trips.api.dependencies import get_orchestrator, get_regeneration_lock
from backend.trips.locks import RegenerationLock, hold_regeneration_lock, make_regeneration_key
from backend.trips.models.components import PortInfoDTO, TourDayDTO
from backend.trips.models.schedules import (
    CruiseScheduleRequest,
    CruiseScheduleResult,
    TourScheduleRequest,
    TourScheduleResult,
)
from backend.trips.orchestration.components import ComponentOrchestrator

router = APIRouter(prefix="/components", tags=["schedules"])

Orchestrator = Annotated[ComponentOrchestrator, Depends(get_orchestrator)]
Lock = Annotated[RegenerationLock, Depends(get_regeneration_lock)]


@router.post("/{cruise_id}/cruise-port-schedule", response_model=CruiseScheduleResult)
async def generate_cruise_port_schedule(
    cruise_id: UUID,
    orchestrator: Orchestrator,
    lock: Lock,
    request: Annotated[CruiseScheduleRequest | None, Body()] = None,
) -> CruiseScheduleResult:
    """Regenerate the cruise's port stops (409 while another pass runs).

    Args:
        cruise_id: custom_cruise component id
        orchestrator: Component orchestrator
        lock: Per-parent regeneration lock
        request: Optional snapshot, ownership assertion and flags

    Returns:
        Created port stops and number deleted
    """
    with hold_regeneration_lock(lock, make_regeneration_key("cruise_port", cruise_id)):
        return await orchestrator.generate_cruise_port_schedule(cruise_id, request)


@router.get("/{cruise_id}/cruise-port-schedule", response_model=list[PortInfoDTO])
async def get_cruise_port_schedule(cruise_id: UUID, orchestrator: Orchestrator) -> list[PortInfoDTO]:
    return await orchestrator.get_cruise_port_schedule(cruise_id)


@router.post("/{tour_id}/tour-day-schedule", response_model=TourScheduleResult)
async def generate_tour_day_schedule(
    tour_id: UUID,
    orchestrator: Orchestrator,
    lock: Lock,
    request: Annotated[TourScheduleRequest | None, Body()] = None,
) -> TourScheduleResult:
    """Regenerate the tour's day entries (409 while another pass runs)."""
    with hold_regeneration_lock(lock, make_regeneration_key("tour_day", tour_id)):
        return await orchestrator.generate_tour_day_schedule(tour_id, request)


@router.get("/{tour_id}/tour-day-schedule", response_model=list[TourDayDTO])
async def get_tour_day_schedule(tour_id: UUID, orchestrator: Orchestrator) -> list[TourDayDTO]:
    return await orchestrator.get_tour_day_schedule(tour_id)
