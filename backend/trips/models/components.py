"""Component payloads and DTOs - base fields, per-type details, pricing fields."""

from datetime import date, datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.trips.models.common import (
    ComponentStatus,
    Coordinates,
    CruiseSource,
    InvoiceType,
    OptionCategory,
    PortType,
    PricingType,
    parse_datetime_or_none,
)
from backend.trips.models.pricing import ComponentPricingDTO

# Detail payloads. Every field is optional so the same model serves as a
# full record on create and as a merge-patch on update.


class DetailModel(BaseModel):
    """Base for per-type detail payloads."""

    model_config = ConfigDict(extra="ignore", use_enum_values=True)


class FlightSegment(BaseModel):
    """One leg of a multi-leg flight."""

    airline: str | None = None
    flight_number: str | None = None
    departure_airport_code: str | None = None
    departure_date: date | None = None
    departure_time: str | None = None
    arrival_airport_code: str | None = None
    arrival_date: date | None = None
    arrival_time: str | None = None


class FlightDetails(DetailModel):
    airline: str | None = None
    flight_number: str | None = None
    departure_airport_code: str | None = None
    departure_date: date | None = None
    departure_time: str | None = None
    departure_timezone: str | None = None
    departure_terminal: str | None = None
    departure_gate: str | None = None
    arrival_airport_code: str | None = None
    arrival_date: date | None = None
    arrival_time: str | None = None
    arrival_timezone: str | None = None
    arrival_terminal: str | None = None
    arrival_gate: str | None = None
    segments: list[FlightSegment] | None = None


class LodgingDetails(DetailModel):
    property_name: str | None = None
    address: str | None = None
    phone: str | None = None
    website: str | None = None
    check_in_date: date | None = None
    check_in_time: str | None = None
    check_out_date: date | None = None
    check_out_time: str | None = None
    timezone: str | None = None
    room_type: str | None = None
    room_count: int | None = None
    amenities: list[str] | None = None
    special_requests: str | None = None


class TransportationDetails(DetailModel):
    # Kept as str so an unknown subtype reaches the domain validator
    subtype: str | None = None
    provider_name: str | None = None
    provider_phone: str | None = None
    provider_email: str | None = None
    vehicle_type: str | None = None
    vehicle_model: str | None = None
    vehicle_capacity: int | None = None
    license_plate: str | None = None
    pickup_date: date | None = None
    pickup_time: str | None = None
    pickup_timezone: str | None = None
    pickup_address: str | None = None
    pickup_notes: str | None = None
    dropoff_date: date | None = None
    dropoff_time: str | None = None
    dropoff_timezone: str | None = None
    dropoff_address: str | None = None
    dropoff_notes: str | None = None
    driver_name: str | None = None
    driver_phone: str | None = None
    rental_pickup_location: str | None = None
    rental_dropoff_location: str | None = None
    rental_insurance_type: str | None = None
    rental_mileage_limit: str | None = None
    features: list[str] | None = None
    special_requests: str | None = None
    flight_number: str | None = None
    is_round_trip: bool | None = None


class DiningDetails(DetailModel):
    restaurant_name: str | None = None
    cuisine_type: str | None = None
    meal_type: str | None = None
    reservation_date: date | None = None
    reservation_time: str | None = None
    timezone: str | None = None
    party_size: int | None = None
    address: str | None = None
    phone: str | None = None
    website: str | None = None
    coordinates: Coordinates | None = None
    price_range: str | None = None
    dress_code: str | None = None
    dietary_requirements: list[str] | None = None
    special_requests: str | None = None
    menu_url: str | None = None


class PortInfoDetails(DetailModel):
    port_type: PortType | None = None
    port_name: str | None = None
    port_location: str | None = None
    arrival_date: date | None = None
    arrival_time: str | None = None
    departure_date: date | None = None
    departure_time: str | None = None
    timezone: str | None = None
    dock_name: str | None = None
    address: str | None = None
    coordinates: Coordinates | None = None
    phone: str | None = None
    website: str | None = None
    excursion_notes: str | None = None
    tender_required: bool | None = None
    special_requests: str | None = None


class OptionsDetails(DetailModel):
    option_category: OptionCategory | None = None
    is_selected: bool | None = None
    available_from: date | None = None
    available_to: date | None = None
    booking_deadline: date | None = None
    min_participants: int | None = None
    max_participants: int | None = None
    spots_available: int | None = None
    duration_minutes: int | None = None
    meeting_point: str | None = None
    meeting_time: str | None = None
    provider_name: str | None = None
    provider_phone: str | None = None
    provider_email: str | None = None
    inclusions: list[str] | None = None
    exclusions: list[str] | None = None
    requirements: list[str] | None = None
    what_to_bring: list[str] | None = None
    display_order: int | None = None
    highlight_text: str | None = None
    instructions_text: str | None = None


class CruisePortCall(BaseModel):
    """One entry of a cruise's port-call list; `day` is 1-indexed."""

    day: int | None = None
    port_name: str | None = None
    port_id: str | None = None
    arrive_date: date | None = None
    depart_date: date | None = None
    arrive_time: str | None = None
    depart_time: str | None = None
    tender: bool = False
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    is_sea_day: bool = False


class CustomCruiseDetails(DetailModel):
    source: CruiseSource | None = None
    cruise_line_name: str | None = None
    ship_name: str | None = None
    itinerary_name: str | None = None
    voyage_code: str | None = None
    region: str | None = None
    nights: int | None = None
    sea_days: int | None = None
    departure_port: str | None = None
    departure_date: date | None = None
    departure_time: str | None = None
    departure_timezone: str | None = None
    arrival_port: str | None = None
    arrival_date: date | None = None
    arrival_time: str | None = None
    arrival_timezone: str | None = None
    cabin_category: str | None = None
    cabin_code: str | None = None
    cabin_number: str | None = None
    cabin_deck: str | None = None
    booking_number: str | None = None
    fare_code: str | None = None
    booking_deadline: date | None = None
    port_calls_json: list[CruisePortCall] | None = None
    inclusions: list[str] | None = None
    special_requests: str | None = None


class TourItineraryDay(BaseModel):
    """One day of a tour's itinerary snapshot."""

    day_number: int
    title: str | None = None
    description: str | None = None
    overnight_city: str | None = None


class CustomTourDetails(DetailModel):
    tour_id: str | None = None
    operator_code: str | None = None
    provider: str | None = None
    provider_identifier: str | None = None
    departure_id: str | None = None
    departure_code: str | None = None
    departure_start_date: date | None = None
    departure_end_date: date | None = None
    currency: str | None = None
    base_price_cents: int | None = None
    tour_name: str | None = None
    days: int | None = None
    nights: int | None = None
    start_city: str | None = None
    end_city: str | None = None
    itinerary_json: list[TourItineraryDay] | None = None
    inclusions_json: list[Any] | None = None
    hotels_json: list[Any] | None = None


class TourDayDetails(DetailModel):
    day_number: int | None = None
    overnight_city: str | None = None
    is_locked: bool | None = None


# Pricing fields accepted alongside component payloads


class PricingInput(BaseModel):
    """Pricing fields; presence of any one of them triggers a pricing patch."""

    model_config = ConfigDict(use_enum_values=True)

    total_price_cents: int | None = Field(None, ge=0)
    taxes_and_fees_cents: int | None = Field(None, ge=0)
    commission_total_cents: int | None = None
    commission_split_percentage: float | None = None
    commission_expected_date: date | None = None
    terms_and_conditions: str | None = None
    cancellation_policy: str | None = None
    supplier: str | None = None
    booking_reference: str | None = None
    booking_status: str | None = None
    invoice_type: InvoiceType | None = None


PRICING_FIELDS: frozenset[str] = frozenset(PricingInput.model_fields)


class ComponentCreate(BaseModel):
    """Base fields accepted when creating any component."""

    model_config = ConfigDict(use_enum_values=True)

    itinerary_day_id: UUID | None = None
    name: str = Field(..., min_length=1)
    description: str | None = None
    sequence_order: int | None = None
    start_datetime: datetime | None = None
    end_datetime: datetime | None = None
    timezone: str | None = None
    location: str | None = None
    address: str | None = None
    coordinates: Coordinates | None = None
    notes: str | None = None
    confirmation_number: str | None = None
    status: ComponentStatus = Field(ComponentStatus.proposed, validate_default=True)
    pricing_type: PricingType | None = None
    currency: str | None = Field(None, min_length=3, max_length=3)
    photos: list[str] | None = None

    @field_validator("start_datetime", "end_datetime", mode="before")
    @classmethod
    def _lenient_datetime(cls, value: Any) -> datetime | None:
        return parse_datetime_or_none(value)


class ComponentUpdate(BaseModel):
    """Merge-patch of base fields: omitted keeps, value overwrites, null clears."""

    model_config = ConfigDict(use_enum_values=True)

    itinerary_day_id: UUID | None = None
    name: str | None = Field(None, min_length=1)
    description: str | None = None
    sequence_order: int | None = None
    start_datetime: datetime | None = None
    end_datetime: datetime | None = None
    timezone: str | None = None
    location: str | None = None
    address: str | None = None
    coordinates: Coordinates | None = None
    notes: str | None = None
    confirmation_number: str | None = None
    status: ComponentStatus | None = None
    pricing_type: PricingType | None = None
    currency: str | None = Field(None, min_length=3, max_length=3)
    photos: list[str] | None = None

    @field_validator("start_datetime", "end_datetime", mode="before")
    @classmethod
    def _lenient_datetime(cls, value: Any) -> datetime | None:
        return parse_datetime_or_none(value)


BASE_UPDATE_FIELDS: frozenset[str] = frozenset(ComponentUpdate.model_fields)

# Base columns that reject an explicit null on update
NON_NULLABLE_FIELDS: frozenset[str] = frozenset({"name", "sequence_order", "status", "currency"})


class FlightCreate(ComponentCreate, PricingInput):
    details: FlightDetails | None = None


class FlightUpdate(ComponentUpdate, PricingInput):
    details: FlightDetails | None = None


class LodgingCreate(ComponentCreate, PricingInput):
    details: LodgingDetails | None = None


class LodgingUpdate(ComponentUpdate, PricingInput):
    details: LodgingDetails | None = None


class TransportationCreate(ComponentCreate, PricingInput):
    details: TransportationDetails | None = None


class TransportationUpdate(ComponentUpdate, PricingInput):
    details: TransportationDetails | None = None


class DiningCreate(ComponentCreate, PricingInput):
    details: DiningDetails | None = None


class DiningUpdate(ComponentUpdate, PricingInput):
    details: DiningDetails | None = None


class OptionsCreate(ComponentCreate, PricingInput):
    details: OptionsDetails | None = None


class OptionsUpdate(ComponentUpdate, PricingInput):
    details: OptionsDetails | None = None


class CustomCruiseCreate(ComponentCreate, PricingInput):
    details: CustomCruiseDetails | None = None


class CustomCruiseUpdate(ComponentUpdate, PricingInput):
    details: CustomCruiseDetails | None = None


class CustomTourCreate(ComponentCreate, PricingInput):
    details: CustomTourDetails | None = None


class CustomTourUpdate(ComponentUpdate, PricingInput):
    details: CustomTourDetails | None = None


# Port stops and tour days carry no pricing fields


class PortInfoCreate(ComponentCreate):
    details: PortInfoDetails | None = None


class PortInfoUpdate(ComponentUpdate):
    details: PortInfoDetails | None = None


class TourDayCreate(ComponentCreate):
    details: TourDayDetails | None = None


class TourDayUpdate(ComponentUpdate):
    details: TourDayDetails | None = None


# Output DTOs


class ComponentBaseDTO(BaseModel):
    """Base fields of a stored component."""

    id: UUID
    agency_id: UUID
    itinerary_day_id: UUID | None = None
    parent_component_id: UUID | None = None
    name: str
    description: str | None = None
    sequence_order: int
    start_datetime: datetime | None = None
    end_datetime: datetime | None = None
    timezone: str | None = None
    location: str | None = None
    address: str | None = None
    coordinates: Coordinates | None = None
    notes: str | None = None
    confirmation_number: str | None = None
    status: ComponentStatus
    pricing_type: PricingType | None = None
    currency: str
    photos: list[str] | None = None
    created_at: datetime
    updated_at: datetime
    pricing: ComponentPricingDTO | None = None


class FlightDTO(ComponentBaseDTO):
    component_type: Literal["flight"] = "flight"
    details: FlightDetails | None = None


class LodgingDTO(ComponentBaseDTO):
    component_type: Literal["lodging"] = "lodging"
    details: LodgingDetails | None = None


class TransportationDTO(ComponentBaseDTO):
    component_type: Literal["transportation"] = "transportation"
    details: TransportationDetails | None = None


class DiningDTO(ComponentBaseDTO):
    component_type: Literal["dining"] = "dining"
    details: DiningDetails | None = None


class PortInfoDTO(ComponentBaseDTO):
    component_type: Literal["port_info"] = "port_info"
    details: PortInfoDetails | None = None


class OptionsDTO(ComponentBaseDTO):
    component_type: Literal["options"] = "options"
    details: OptionsDetails | None = None


class CustomCruiseDTO(ComponentBaseDTO):
    component_type: Literal["custom_cruise"] = "custom_cruise"
    details: CustomCruiseDetails | None = None


class CustomTourDTO(ComponentBaseDTO):
    component_type: Literal["custom_tour"] = "custom_tour"
    details: CustomTourDetails | None = None


class TourDayDTO(ComponentBaseDTO):
    component_type: Literal["tour_day"] = "tour_day"
    details: TourDayDetails | None = None


ComponentDTO = Annotated[
    FlightDTO
    | LodgingDTO
    | TransportationDTO
    | DiningDTO
    | PortInfoDTO
    | OptionsDTO
    | CustomCruiseDTO
    | CustomTourDTO
    | TourDayDTO,
    Field(discriminator="component_type"),
]
