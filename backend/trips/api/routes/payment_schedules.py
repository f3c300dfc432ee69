"""Payment schedule endpoints - attached to a component pricing record."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from backend.trips.api.dependencies import get_payment_schedule_service
from backend.trips.models.payment_schedules import (
    PaymentScheduleConfigDTO,
    PaymentScheduleInput,
    PaymentSchedulePatch,
)
from backend.trips.orchestration.payment_schedules import PaymentScheduleService

router = APIRouter(prefix="/pricing/{pricing_id}/payment-schedule", tags=["payment-schedules"])

Service = Annotated[PaymentScheduleService, Depends(get_payment_schedule_service)]


@router.post("", response_model=PaymentScheduleConfigDTO, status_code=status.HTTP_201_CREATED)
async def create_payment_schedule(
    pricing_id: UUID, request: PaymentScheduleInput, service: Service
) -> PaymentScheduleConfigDTO:
    """Create the payment schedule (409 if one already exists)."""
    return await service.create_payment_schedule(pricing_id, request)


@router.get("", response_model=PaymentScheduleConfigDTO)
async def get_payment_schedule(pricing_id: UUID, service: Service) -> PaymentScheduleConfigDTO:
    return await service.get_payment_schedule(pricing_id)


@router.patch("", response_model=PaymentScheduleConfigDTO)
async def update_payment_schedule(
    pricing_id: UUID, request: PaymentSchedulePatch, service: Service
) -> PaymentScheduleConfigDTO:
    """Merge-patch the schedule and re-validate the result."""
    return await service.update_payment_schedule(pricing_id, request)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment_schedule(pricing_id: UUID, service: Service) -> Response:
    await service.delete_payment_schedule(pricing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/validate", response_model=PaymentScheduleConfigDTO)
async def validate_payment_schedule(
    pricing_id: UUID, request: PaymentScheduleInput, service: Service
) -> PaymentScheduleConfigDTO:
    """Validate a configuration and return computed amounts without storing it."""
    fields = request.model_dump(exclude={"schedule_type"}, exclude_unset=True)
    return await service.validate_payment_schedule(pricing_id, request.schedule_type, fields)
