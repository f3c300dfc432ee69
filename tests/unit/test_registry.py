"""Unit tests for the component type registry and DTO assembly."""

import uuid
from datetime import UTC, datetime

import pytest

from backend.trips.errors import InvalidInputError
from backend.trips.models.common import ComponentType, PricingType
from backend.trips.models.components import (
    FlightDTO,
    PortInfoDetails,
    PortInfoDTO,
)
from backend.trips.models.pricing import ComponentPricingDTO
from backend.trips.orchestration.registry import COMPONENT_TYPES, build_component_dto, spec_for


def _base_row(**overrides: object) -> dict[str, object]:
    now = datetime.now(UTC)
    row: dict[str, object] = {
        "id": uuid.uuid4(),
        "agency_id": uuid.uuid4(),
        "itinerary_day_id": uuid.uuid4(),
        "name": "Component",
        "sequence_order": 0,
        "status": "proposed",
        "currency": "CAD",
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def _pricing(component_id: uuid.UUID) -> ComponentPricingDTO:
    now = datetime.now(UTC)
    return ComponentPricingDTO(
        id=uuid.uuid4(),
        component_id=component_id,
        total_price_cents=0,
        pricing_type=PricingType.per_person,
        currency="CAD",
        created_at=now,
        updated_at=now,
    )


def test_every_component_type_registered() -> None:
    assert set(COMPONENT_TYPES) == set(ComponentType)


def test_spec_for_accepts_strings() -> None:
    assert spec_for("dining").component_type is ComponentType.dining


def test_spec_for_unknown_type() -> None:
    with pytest.raises(InvalidInputError, match="Unknown component type: zeppelin"):
        spec_for("zeppelin")


def test_transportation_defaults_to_flat_rate() -> None:
    assert spec_for(ComponentType.transportation).default_pricing_type == "flat_rate"


def test_unpriced_types() -> None:
    unpriced = {t for t, type_spec in COMPONENT_TYPES.items() if not type_spec.priced}
    assert unpriced == {ComponentType.port_info, ComponentType.tour_day}


def test_build_dto_from_mapping_keeps_pricing_for_priced_types() -> None:
    row = _base_row()
    dto = build_component_dto(ComponentType.flight, row, pricing=_pricing(row["id"]))  # type: ignore[arg-type]

    assert isinstance(dto, FlightDTO)
    assert dto.component_type == "flight"
    assert dto.pricing is not None


def test_build_dto_drops_pricing_for_port_stops() -> None:
    row = _base_row(parent_component_id=uuid.uuid4())
    dto = build_component_dto(
        ComponentType.port_info,
        row,
        pricing=_pricing(row["id"]),  # type: ignore[arg-type]
        details=PortInfoDetails(port_name="Lisbon"),
    )

    assert isinstance(dto, PortInfoDTO)
    assert dto.pricing is None
    assert dto.details is not None and dto.details.port_name == "Lisbon"
