"""Component type registry: payload models, DTOs, validators and pricing defaults per type."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from backend.trips.db.models import Component
from backend.trips.errors import InvalidInputError
from backend.trips.models.common import ComponentType, PricingType
from backend.trips.models.components import (
    ComponentBaseDTO,
    ComponentCreate,
    ComponentUpdate,
    CustomCruiseCreate,
    CustomCruiseDTO,
    CustomCruiseUpdate,
    CustomTourCreate,
    CustomTourDTO,
    CustomTourUpdate,
    DetailModel,
    DiningCreate,
    DiningDTO,
    DiningUpdate,
    FlightCreate,
    FlightDTO,
    FlightUpdate,
    LodgingCreate,
    LodgingDTO,
    LodgingUpdate,
    OptionsCreate,
    OptionsDTO,
    OptionsUpdate,
    PortInfoCreate,
    PortInfoDTO,
    PortInfoUpdate,
    TourDayCreate,
    TourDayDTO,
    TourDayUpdate,
    TransportationCreate,
    TransportationDTO,
    TransportationUpdate,
)
from backend.trips.models.pricing import ComponentPricingDTO
from backend.trips.orchestration.validation import (
    validate_cruise,
    validate_dining,
    validate_lodging,
    validate_transportation,
)


@dataclass(frozen=True)
class ComponentTypeSpec:
    """Everything the orchestrator needs to handle one component type."""

    component_type: ComponentType
    create_model: type[ComponentCreate]
    update_model: type[ComponentUpdate]
    dto_model: type[ComponentBaseDTO]
    priced: bool = True
    default_pricing_type: str | None = None
    validate: Callable[[Any], None] | None = None


COMPONENT_TYPES: dict[ComponentType, ComponentTypeSpec] = {
    type_spec.component_type: type_spec
    for type_spec in (
        ComponentTypeSpec(ComponentType.flight, FlightCreate, FlightUpdate, FlightDTO),
        ComponentTypeSpec(
            ComponentType.lodging,
            LodgingCreate,
            LodgingUpdate,
            LodgingDTO,
            validate=validate_lodging,
        ),
        ComponentTypeSpec(
            ComponentType.transportation,
            TransportationCreate,
            TransportationUpdate,
            TransportationDTO,
            default_pricing_type=PricingType.flat_rate.value,
            validate=validate_transportation,
        ),
        ComponentTypeSpec(
            ComponentType.dining,
            DiningCreate,
            DiningUpdate,
            DiningDTO,
            validate=validate_dining,
        ),
        ComponentTypeSpec(
            ComponentType.port_info, PortInfoCreate, PortInfoUpdate, PortInfoDTO, priced=False
        ),
        ComponentTypeSpec(ComponentType.options, OptionsCreate, OptionsUpdate, OptionsDTO),
        ComponentTypeSpec(
            ComponentType.custom_cruise,
            CustomCruiseCreate,
            CustomCruiseUpdate,
            CustomCruiseDTO,
            validate=validate_cruise,
        ),
        ComponentTypeSpec(
            ComponentType.custom_tour, CustomTourCreate, CustomTourUpdate, CustomTourDTO
        ),
        ComponentTypeSpec(
            ComponentType.tour_day, TourDayCreate, TourDayUpdate, TourDayDTO, priced=False
        ),
    )
}

_BASE_DTO_FIELDS = tuple(
    name for name in ComponentBaseDTO.model_fields if name not in ("pricing", "details")
)


def spec_for(component_type: ComponentType | str) -> ComponentTypeSpec:
    """Look up a component type, raising InvalidInputError for unknown tags."""
    try:
        return COMPONENT_TYPES[ComponentType(component_type)]
    except ValueError:
        raise InvalidInputError(f"Unknown component type: {component_type}") from None


def build_component_dto(
    component_type: ComponentType | str,
    base: Component | Mapping[str, Any],
    *,
    pricing: ComponentPricingDTO | None = None,
    details: DetailModel | None = None,
) -> ComponentBaseDTO:
    """Assemble the typed DTO from a base row (ORM or plain mapping).

    Port-info and tour-day DTOs never carry pricing.
    """
    type_spec = spec_for(component_type)
    if isinstance(base, Mapping):
        values = {name: base.get(name) for name in _BASE_DTO_FIELDS}
    else:
        values = {name: getattr(base, name) for name in _BASE_DTO_FIELDS}
    return type_spec.dto_model.model_validate(
        {
            **values,
            "pricing": pricing if type_spec.priced else None,
            "details": details,
        }
    )
