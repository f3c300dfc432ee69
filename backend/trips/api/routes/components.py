"""Component endpoints - typed create/get/update/delete by component type."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Response, status

from backend.trips.api.dependencies import get_orchestrator
from backend.trips.models.common import ComponentType
from backend.trips.models.components import ComponentDTO
from backend.trips.orchestration.components import ComponentOrchestrator

router = APIRouter(tags=["components"])

Orchestrator = Annotated[ComponentOrchestrator, Depends(get_orchestrator)]


@router.post(
    "/components/{component_type}",
    response_model=ComponentDTO,
    status_code=status.HTTP_201_CREATED,
)
async def create_component(
    component_type: ComponentType,
    payload: Annotated[dict[str, Any], Body()],
    orchestrator: Orchestrator,
) -> Any:
    """Create a component with optional `details` and pricing fields.

    Args:
        component_type: Type tag from the path
        payload: Base fields, `details`, pricing fields
        orchestrator: Component orchestrator

    Returns:
        Typed component DTO
    """
    return await orchestrator.create_component(component_type, payload)


@router.get("/components/{component_id}", response_model=ComponentDTO)
async def get_component(component_id: UUID, orchestrator: Orchestrator) -> Any:
    return await orchestrator.get_component(component_id)


@router.patch("/components/{component_type}/{component_id}", response_model=ComponentDTO)
async def update_component(
    component_type: ComponentType,
    component_id: UUID,
    patch: Annotated[dict[str, Any], Body()],
    orchestrator: Orchestrator,
) -> Any:
    """Merge-patch a component: omitted keys keep, values overwrite, null clears."""
    return await orchestrator.update_component(component_type, component_id, patch)


@router.delete(
    "/components/{component_type}/{component_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_component(
    component_type: ComponentType,
    component_id: UUID,
    orchestrator: Orchestrator,
) -> Response:
    await orchestrator.delete_component(component_type, component_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/days/{day_id}/components", response_model=list[ComponentDTO])
async def list_day_components(day_id: UUID, orchestrator: Orchestrator) -> Any:
    """All components on an itinerary day, in sequence order."""
    return await orchestrator.list_day_components(day_id)
