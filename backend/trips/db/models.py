"""SQLAlchemy ORM models for itineraries, components, details, pricing and payment schedules."""

import datetime as dt
import uuid
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """created_at / updated_at maintained on the Python side."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class Itinerary(TimestampMixin, Base):
    """Itinerary table - date-bounded container of days."""

    __tablename__ = "itineraries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    agency_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class ItineraryDay(TimestampMixin, Base):
    """Itinerary day - at most one per (itinerary, date)."""

    __tablename__ = "itinerary_days"
    __table_args__ = (
        UniqueConstraint("itinerary_id", "date", name="uq_itinerary_day_date"),
        Index("idx_itinerary_day_itinerary", "itinerary_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    itinerary_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("itineraries.id", ondelete="CASCADE"), nullable=False
    )
    agency_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class Component(TimestampMixin, Base):
    """Polymorphic base record shared by every component type."""

    __tablename__ = "components"
    __table_args__ = (
        Index("idx_component_day_sequence", "itinerary_day_id", "sequence_order"),
        Index("idx_component_parent", "parent_component_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    agency_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    itinerary_day_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("itinerary_days.id", ondelete="CASCADE"), nullable=True
    )
    parent_component_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), nullable=True
    )
    component_type: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sequence_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_datetime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_datetime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    timezone: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    coordinates: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    confirmation_number: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="proposed")
    pricing_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    photos: Mapped[list[Any] | None] = mapped_column(JSONType, nullable=True)


class ComponentPricing(TimestampMixin, Base):
    """Pricing record - one per component."""

    __tablename__ = "component_pricing"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    total_price_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    taxes_and_fees_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pricing_type: Mapped[str] = mapped_column(String(16), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    invoice_type: Mapped[str] = mapped_column(String(24), nullable=False, default="individual_item")
    commission_total_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    commission_split_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    commission_expected_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    confirmation_number: Mapped[str | None] = mapped_column(Text, nullable=True)
    booking_reference: Mapped[str | None] = mapped_column(Text, nullable=True)
    booking_status: Mapped[str | None] = mapped_column(Text, nullable=True)
    terms_and_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancellation_policy: Mapped[str | None] = mapped_column(Text, nullable=True)
    supplier: Mapped[str | None] = mapped_column(Text, nullable=True)


# Detail tables: one per component type, keyed by the component id


class FlightDetailRow(TimestampMixin, Base):
    __tablename__ = "flight_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    airline: Mapped[str | None] = mapped_column(Text)
    flight_number: Mapped[str | None] = mapped_column(Text)
    departure_airport_code: Mapped[str | None] = mapped_column(Text)
    departure_date: Mapped[date | None] = mapped_column(Date)
    departure_time: Mapped[str | None] = mapped_column(String(8))
    departure_timezone: Mapped[str | None] = mapped_column(Text)
    departure_terminal: Mapped[str | None] = mapped_column(Text)
    departure_gate: Mapped[str | None] = mapped_column(Text)
    arrival_airport_code: Mapped[str | None] = mapped_column(Text)
    arrival_date: Mapped[date | None] = mapped_column(Date)
    arrival_time: Mapped[str | None] = mapped_column(String(8))
    arrival_timezone: Mapped[str | None] = mapped_column(Text)
    arrival_terminal: Mapped[str | None] = mapped_column(Text)
    arrival_gate: Mapped[str | None] = mapped_column(Text)
    segments: Mapped[list[Any] | None] = mapped_column(JSONType)


class LodgingDetailRow(TimestampMixin, Base):
    __tablename__ = "lodging_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    property_name: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(Text)
    check_in_date: Mapped[date | None] = mapped_column(Date)
    check_in_time: Mapped[str | None] = mapped_column(String(8))
    check_out_date: Mapped[date | None] = mapped_column(Date)
    check_out_time: Mapped[str | None] = mapped_column(String(8))
    timezone: Mapped[str | None] = mapped_column(Text)
    room_type: Mapped[str | None] = mapped_column(Text)
    room_count: Mapped[int | None] = mapped_column(Integer)
    amenities: Mapped[list[Any] | None] = mapped_column(JSONType)
    special_requests: Mapped[str | None] = mapped_column(Text)


class TransportationDetailRow(TimestampMixin, Base):
    __tablename__ = "transportation_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    subtype: Mapped[str | None] = mapped_column(String(16))
    provider_name: Mapped[str | None] = mapped_column(Text)
    provider_phone: Mapped[str | None] = mapped_column(Text)
    provider_email: Mapped[str | None] = mapped_column(Text)
    vehicle_type: Mapped[str | None] = mapped_column(Text)
    vehicle_model: Mapped[str | None] = mapped_column(Text)
    vehicle_capacity: Mapped[int | None] = mapped_column(Integer)
    license_plate: Mapped[str | None] = mapped_column(Text)
    pickup_date: Mapped[date | None] = mapped_column(Date)
    pickup_time: Mapped[str | None] = mapped_column(String(8))
    pickup_timezone: Mapped[str | None] = mapped_column(Text)
    pickup_address: Mapped[str | None] = mapped_column(Text)
    pickup_notes: Mapped[str | None] = mapped_column(Text)
    dropoff_date: Mapped[date | None] = mapped_column(Date)
    dropoff_time: Mapped[str | None] = mapped_column(String(8))
    dropoff_timezone: Mapped[str | None] = mapped_column(Text)
    dropoff_address: Mapped[str | None] = mapped_column(Text)
    dropoff_notes: Mapped[str | None] = mapped_column(Text)
    driver_name: Mapped[str | None] = mapped_column(Text)
    driver_phone: Mapped[str | None] = mapped_column(Text)
    rental_pickup_location: Mapped[str | None] = mapped_column(Text)
    rental_dropoff_location: Mapped[str | None] = mapped_column(Text)
    rental_insurance_type: Mapped[str | None] = mapped_column(Text)
    rental_mileage_limit: Mapped[str | None] = mapped_column(Text)
    features: Mapped[list[Any] | None] = mapped_column(JSONType)
    special_requests: Mapped[str | None] = mapped_column(Text)
    flight_number: Mapped[str | None] = mapped_column(Text)
    is_round_trip: Mapped[bool | None] = mapped_column(Boolean)


class DiningDetailRow(TimestampMixin, Base):
    __tablename__ = "dining_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    restaurant_name: Mapped[str | None] = mapped_column(Text)
    cuisine_type: Mapped[str | None] = mapped_column(Text)
    meal_type: Mapped[str | None] = mapped_column(Text)
    reservation_date: Mapped[date | None] = mapped_column(Date)
    reservation_time: Mapped[str | None] = mapped_column(String(8))
    timezone: Mapped[str | None] = mapped_column(Text)
    party_size: Mapped[int | None] = mapped_column(Integer)
    address: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(Text)
    coordinates: Mapped[dict[str, Any] | None] = mapped_column(JSONType)
    price_range: Mapped[str | None] = mapped_column(Text)
    dress_code: Mapped[str | None] = mapped_column(Text)
    dietary_requirements: Mapped[list[Any] | None] = mapped_column(JSONType)
    special_requests: Mapped[str | None] = mapped_column(Text)
    menu_url: Mapped[str | None] = mapped_column(Text)


class PortInfoDetailRow(TimestampMixin, Base):
    __tablename__ = "port_info_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    port_type: Mapped[str | None] = mapped_column(String(16))
    port_name: Mapped[str | None] = mapped_column(Text)
    port_location: Mapped[str | None] = mapped_column(Text)
    arrival_date: Mapped[date | None] = mapped_column(Date)
    arrival_time: Mapped[str | None] = mapped_column(String(8))
    departure_date: Mapped[date | None] = mapped_column(Date)
    departure_time: Mapped[str | None] = mapped_column(String(8))
    timezone: Mapped[str | None] = mapped_column(Text)
    dock_name: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)
    coordinates: Mapped[dict[str, Any] | None] = mapped_column(JSONType)
    phone: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(Text)
    excursion_notes: Mapped[str | None] = mapped_column(Text)
    tender_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    special_requests: Mapped[str | None] = mapped_column(Text)


class OptionsDetailRow(TimestampMixin, Base):
    __tablename__ = "options_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    option_category: Mapped[str | None] = mapped_column(String(16))
    is_selected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    available_from: Mapped[date | None] = mapped_column(Date)
    available_to: Mapped[date | None] = mapped_column(Date)
    booking_deadline: Mapped[date | None] = mapped_column(Date)
    min_participants: Mapped[int | None] = mapped_column(Integer)
    max_participants: Mapped[int | None] = mapped_column(Integer)
    spots_available: Mapped[int | None] = mapped_column(Integer)
    duration_minutes: Mapped[int | None] = mapped_column(Integer)
    meeting_point: Mapped[str | None] = mapped_column(Text)
    meeting_time: Mapped[str | None] = mapped_column(String(8))
    provider_name: Mapped[str | None] = mapped_column(Text)
    provider_phone: Mapped[str | None] = mapped_column(Text)
    provider_email: Mapped[str | None] = mapped_column(Text)
    inclusions: Mapped[list[Any] | None] = mapped_column(JSONType)
    exclusions: Mapped[list[Any] | None] = mapped_column(JSONType)
    requirements: Mapped[list[Any] | None] = mapped_column(JSONType)
    what_to_bring: Mapped[list[Any] | None] = mapped_column(JSONType)
    display_order: Mapped[int | None] = mapped_column(Integer)
    highlight_text: Mapped[str | None] = mapped_column(Text)
    instructions_text: Mapped[str | None] = mapped_column(Text)


class CustomCruiseDetailRow(TimestampMixin, Base):
    __tablename__ = "custom_cruise_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    source: Mapped[str | None] = mapped_column(String(16))
    cruise_line_name: Mapped[str | None] = mapped_column(Text)
    ship_name: Mapped[str | None] = mapped_column(Text)
    itinerary_name: Mapped[str | None] = mapped_column(Text)
    voyage_code: Mapped[str | None] = mapped_column(Text)
    region: Mapped[str | None] = mapped_column(Text)
    nights: Mapped[int | None] = mapped_column(Integer)
    sea_days: Mapped[int | None] = mapped_column(Integer)
    departure_port: Mapped[str | None] = mapped_column(Text)
    departure_date: Mapped[date | None] = mapped_column(Date)
    departure_time: Mapped[str | None] = mapped_column(String(8))
    departure_timezone: Mapped[str | None] = mapped_column(Text)
    arrival_port: Mapped[str | None] = mapped_column(Text)
    arrival_date: Mapped[date | None] = mapped_column(Date)
    arrival_time: Mapped[str | None] = mapped_column(String(8))
    arrival_timezone: Mapped[str | None] = mapped_column(Text)
    cabin_category: Mapped[str | None] = mapped_column(Text)
    cabin_code: Mapped[str | None] = mapped_column(Text)
    cabin_number: Mapped[str | None] = mapped_column(Text)
    cabin_deck: Mapped[str | None] = mapped_column(Text)
    booking_number: Mapped[str | None] = mapped_column(Text)
    fare_code: Mapped[str | None] = mapped_column(Text)
    booking_deadline: Mapped[date | None] = mapped_column(Date)
    port_calls_json: Mapped[list[Any] | None] = mapped_column(JSONType)
    inclusions: Mapped[list[Any] | None] = mapped_column(JSONType)
    special_requests: Mapped[str | None] = mapped_column(Text)


class CustomTourDetailRow(TimestampMixin, Base):
    __tablename__ = "custom_tour_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    tour_id: Mapped[str | None] = mapped_column(Text)
    operator_code: Mapped[str | None] = mapped_column(Text)
    provider: Mapped[str | None] = mapped_column(Text)
    provider_identifier: Mapped[str | None] = mapped_column(Text)
    departure_id: Mapped[str | None] = mapped_column(Text)
    departure_code: Mapped[str | None] = mapped_column(Text)
    departure_start_date: Mapped[date | None] = mapped_column(Date)
    departure_end_date: Mapped[date | None] = mapped_column(Date)
    currency: Mapped[str | None] = mapped_column(String(3))
    base_price_cents: Mapped[int | None] = mapped_column(Integer)
    tour_name: Mapped[str | None] = mapped_column(Text)
    days: Mapped[int | None] = mapped_column(Integer)
    nights: Mapped[int | None] = mapped_column(Integer)
    start_city: Mapped[str | None] = mapped_column(Text)
    end_city: Mapped[str | None] = mapped_column(Text)
    itinerary_json: Mapped[list[Any] | None] = mapped_column(JSONType)
    inclusions_json: Mapped[list[Any] | None] = mapped_column(JSONType)
    hotels_json: Mapped[list[Any] | None] = mapped_column(JSONType)


class TourDayDetailRow(TimestampMixin, Base):
    __tablename__ = "tour_day_details"

    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("components.id", ondelete="CASCADE"), primary_key=True
    )
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    overnight_city: Mapped[str | None] = mapped_column(Text)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class CatalogTourDay(Base):
    """Read-only catalog of tour days, keyed by catalog tour id."""

    __tablename__ = "tour_itinerary_days"
    __table_args__ = (
        UniqueConstraint("tour_id", "day_number", name="uq_tour_itinerary_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tour_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    overnight_city: Mapped[str | None] = mapped_column(Text)


class PaymentScheduleConfig(TimestampMixin, Base):
    """Payment schedule configuration - one per pricing record."""

    __tablename__ = "payment_schedule_config"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    component_pricing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("component_pricing.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    schedule_type: Mapped[str] = mapped_column(String(16), nullable=False)
    allow_partial_payments: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deposit_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    deposit_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    deposit_amount_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)


class ExpectedPaymentItem(TimestampMixin, Base):
    """Expected payment milestone belonging to a schedule."""

    __tablename__ = "expected_payment_items"
    __table_args__ = (Index("idx_expected_payment_config", "payment_schedule_config_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    payment_schedule_config_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("payment_schedule_config.id", ondelete="CASCADE"), nullable=False
    )
    payment_name: Mapped[str] = mapped_column(Text, nullable=False)
    expected_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    sequence_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    paid_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class CreditCardGuarantee(TimestampMixin, Base):
    """Card authorization held as a booking guarantee."""

    __tablename__ = "credit_card_guarantee"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    payment_schedule_config_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("payment_schedule_config.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    card_holder_name: Mapped[str] = mapped_column(Text, nullable=False)
    card_last4: Mapped[str] = mapped_column(String(4), nullable=False)
    authorization_code: Mapped[str] = mapped_column(Text, nullable=False)
    authorization_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    authorization_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
