"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- itineraries, itinerary_days
- components, component_pricing
- one detail table per component type
- tour_itinerary_days (catalog)
- payment_schedule_config, expected_payment_items, credit_card_guarantee
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _detail_key() -> sa.Column:
    return sa.Column(
        "component_id",
        sa.Uuid(),
        sa.ForeignKey("components.id", ondelete="CASCADE"),
        primary_key=True,
    )


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "itineraries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("trip_id", sa.Uuid(), nullable=True),
        sa.Column("agency_id", sa.Uuid(), nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "itinerary_days",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("itinerary_id", sa.Uuid(), nullable=False),
        sa.Column("agency_id", sa.Uuid(), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["itinerary_id"], ["itineraries.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("itinerary_id", "date", name="uq_itinerary_day_date"),
    )
    op.create_index("idx_itinerary_day_itinerary", "itinerary_days", ["itinerary_id"])

    op.create_table(
        "components",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("agency_id", sa.Uuid(), nullable=False),
        sa.Column("itinerary_day_id", sa.Uuid(), nullable=True),
        sa.Column("parent_component_id", sa.Uuid(), nullable=True),
        sa.Column("component_type", sa.String(32), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sequence_order", sa.Integer(), nullable=False),
        sa.Column("start_datetime", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_datetime", sa.DateTime(timezone=True), nullable=True),
        sa.Column("timezone", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("coordinates", JSON_TYPE, nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("confirmation_number", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("pricing_type", sa.String(16), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("photos", JSON_TYPE, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["itinerary_day_id"], ["itinerary_days.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_component_id"], ["components.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_component_day_sequence", "components", ["itinerary_day_id", "sequence_order"])
    op.create_index("idx_component_parent", "components", ["parent_component_id"])

    op.create_table(
        "component_pricing",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("component_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("total_price_cents", sa.Integer(), nullable=True),
        sa.Column("taxes_and_fees_cents", sa.Integer(), nullable=True),
        sa.Column("pricing_type", sa.String(16), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("invoice_type", sa.String(24), nullable=False),
        sa.Column("commission_total_cents", sa.Integer(), nullable=True),
        sa.Column("commission_split_percentage", sa.Float(), nullable=True),
        sa.Column("commission_expected_date", sa.Date(), nullable=True),
        sa.Column("confirmation_number", sa.Text(), nullable=True),
        sa.Column("booking_reference", sa.Text(), nullable=True),
        sa.Column("booking_status", sa.Text(), nullable=True),
        sa.Column("terms_and_conditions", sa.Text(), nullable=True),
        sa.Column("cancellation_policy", sa.Text(), nullable=True),
        sa.Column("supplier", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["component_id"], ["components.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "flight_details",
        _detail_key(),
        sa.Column("airline", sa.Text()),
        sa.Column("flight_number", sa.Text()),
        sa.Column("departure_airport_code", sa.Text()),
        sa.Column("departure_date", sa.Date()),
        sa.Column("departure_time", sa.String(8)),
        sa.Column("departure_timezone", sa.Text()),
        sa.Column("departure_terminal", sa.Text()),
        sa.Column("departure_gate", sa.Text()),
        sa.Column("arrival_airport_code", sa.Text()),
        sa.Column("arrival_date", sa.Date()),
        sa.Column("arrival_time", sa.String(8)),
        sa.Column("arrival_timezone", sa.Text()),
        sa.Column("arrival_terminal", sa.Text()),
        sa.Column("arrival_gate", sa.Text()),
        sa.Column("segments", JSON_TYPE),
        *_timestamps(),
    )

    op.create_table(
        "lodging_details",
        _detail_key(),
        sa.Column("property_name", sa.Text()),
        sa.Column("address", sa.Text()),
        sa.Column("phone", sa.Text()),
        sa.Column("website", sa.Text()),
        sa.Column("check_in_date", sa.Date()),
        sa.Column("check_in_time", sa.String(8)),
        sa.Column("check_out_date", sa.Date()),
        sa.Column("check_out_time", sa.String(8)),
        sa.Column("timezone", sa.Text()),
        sa.Column("room_type", sa.Text()),
        sa.Column("room_count", sa.Integer()),
        sa.Column("amenities", JSON_TYPE),
        sa.Column("special_requests", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "transportation_details",
        _detail_key(),
        sa.Column("subtype", sa.String(16)),
        sa.Column("provider_name", sa.Text()),
        sa.Column("provider_phone", sa.Text()),
        sa.Column("provider_email", sa.Text()),
        sa.Column("vehicle_type", sa.Text()),
        sa.Column("vehicle_model", sa.Text()),
        sa.Column("vehicle_capacity", sa.Integer()),
        sa.Column("license_plate", sa.Text()),
        sa.Column("pickup_date", sa.Date()),
        sa.Column("pickup_time", sa.String(8)),
        sa.Column("pickup_timezone", sa.Text()),
        sa.Column("pickup_address", sa.Text()),
        sa.Column("pickup_notes", sa.Text()),
        sa.Column("dropoff_date", sa.Date()),
        sa.Column("dropoff_time", sa.String(8)),
        sa.Column("dropoff_timezone", sa.Text()),
        sa.Column("dropoff_address", sa.Text()),
        sa.Column("dropoff_notes", sa.Text()),
        sa.Column("driver_name", sa.Text()),
        sa.Column("driver_phone", sa.Text()),
        sa.Column("rental_pickup_location", sa.Text()),
        sa.Column("rental_dropoff_location", sa.Text()),
        sa.Column("rental_insurance_type", sa.Text()),
        sa.Column("rental_mileage_limit", sa.Text()),
        sa.Column("features", JSON_TYPE),
        sa.Column("special_requests", sa.Text()),
        sa.Column("flight_number", sa.Text()),
        sa.Column("is_round_trip", sa.Boolean()),
        *_timestamps(),
    )

    op.create_table(
        "dining_details",
        _detail_key(),
        sa.Column("restaurant_name", sa.Text()),
        sa.Column("cuisine_type", sa.Text()),
        sa.Column("meal_type", sa.Text()),
        sa.Column("reservation_date", sa.Date()),
        sa.Column("reservation_time", sa.String(8)),
        sa.Column("timezone", sa.Text()),
        sa.Column("party_size", sa.Integer()),
        sa.Column("address", sa.Text()),
        sa.Column("phone", sa.Text()),
        sa.Column("website", sa.Text()),
        sa.Column("coordinates", JSON_TYPE),
        sa.Column("price_range", sa.Text()),
        sa.Column("dress_code", sa.Text()),
        sa.Column("dietary_requirements", JSON_TYPE),
        sa.Column("special_requests", sa.Text()),
        sa.Column("menu_url", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "port_info_details",
        _detail_key(),
        sa.Column("port_type", sa.String(16)),
        sa.Column("port_name", sa.Text()),
        sa.Column("port_location", sa.Text()),
        sa.Column("arrival_date", sa.Date()),
        sa.Column("arrival_time", sa.String(8)),
        sa.Column("departure_date", sa.Date()),
        sa.Column("departure_time", sa.String(8)),
        sa.Column("timezone", sa.Text()),
        sa.Column("dock_name", sa.Text()),
        sa.Column("address", sa.Text()),
        sa.Column("coordinates", JSON_TYPE),
        sa.Column("phone", sa.Text()),
        sa.Column("website", sa.Text()),
        sa.Column("excursion_notes", sa.Text()),
        sa.Column("tender_required", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("special_requests", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "options_details",
        _detail_key(),
        sa.Column("option_category", sa.String(16)),
        sa.Column("is_selected", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("available_from", sa.Date()),
        sa.Column("available_to", sa.Date()),
        sa.Column("booking_deadline", sa.Date()),
        sa.Column("min_participants", sa.Integer()),
        sa.Column("max_participants", sa.Integer()),
        sa.Column("spots_available", sa.Integer()),
        sa.Column("duration_minutes", sa.Integer()),
        sa.Column("meeting_point", sa.Text()),
        sa.Column("meeting_time", sa.String(8)),
        sa.Column("provider_name", sa.Text()),
        sa.Column("provider_phone", sa.Text()),
        sa.Column("provider_email", sa.Text()),
        sa.Column("inclusions", JSON_TYPE),
        sa.Column("exclusions", JSON_TYPE),
        sa.Column("requirements", JSON_TYPE),
        sa.Column("what_to_bring", JSON_TYPE),
        sa.Column("display_order", sa.Integer()),
        sa.Column("highlight_text", sa.Text()),
        sa.Column("instructions_text", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "custom_cruise_details",
        _detail_key(),
        sa.Column("source", sa.String(16)),
        sa.Column("cruise_line_name", sa.Text()),
        sa.Column("ship_name", sa.Text()),
        sa.Column("itinerary_name", sa.Text()),
        sa.Column("voyage_code", sa.Text()),
        sa.Column("region", sa.Text()),
        sa.Column("nights", sa.Integer()),
        sa.Column("sea_days", sa.Integer()),
        sa.Column("departure_port", sa.Text()),
        sa.Column("departure_date", sa.Date()),
        sa.Column("departure_time", sa.String(8)),
        sa.Column("departure_timezone", sa.Text()),
        sa.Column("arrival_port", sa.Text()),
        sa.Column("arrival_date", sa.Date()),
        sa.Column("arrival_time", sa.String(8)),
        sa.Column("arrival_timezone", sa.Text()),
        sa.Column("cabin_category", sa.Text()),
        sa.Column("cabin_code", sa.Text()),
        sa.Column("cabin_number", sa.Text()),
        sa.Column("cabin_deck", sa.Text()),
        sa.Column("booking_number", sa.Text()),
        sa.Column("fare_code", sa.Text()),
        sa.Column("booking_deadline", sa.Date()),
        sa.Column("port_calls_json", JSON_TYPE),
        sa.Column("inclusions", JSON_TYPE),
        sa.Column("special_requests", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "custom_tour_details",
        _detail_key(),
        sa.Column("tour_id", sa.Text()),
        sa.Column("operator_code", sa.Text()),
        sa.Column("provider", sa.Text()),
        sa.Column("provider_identifier", sa.Text()),
        sa.Column("departure_id", sa.Text()),
        sa.Column("departure_code", sa.Text()),
        sa.Column("departure_start_date", sa.Date()),
        sa.Column("departure_end_date", sa.Date()),
        sa.Column("currency", sa.String(3)),
        sa.Column("base_price_cents", sa.Integer()),
        sa.Column("tour_name", sa.Text()),
        sa.Column("days", sa.Integer()),
        sa.Column("nights", sa.Integer()),
        sa.Column("start_city", sa.Text()),
        sa.Column("end_city", sa.Text()),
        sa.Column("itinerary_json", JSON_TYPE),
        sa.Column("inclusions_json", JSON_TYPE),
        sa.Column("hotels_json", JSON_TYPE),
        *_timestamps(),
    )

    op.create_table(
        "tour_day_details",
        _detail_key(),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("overnight_city", sa.Text()),
        sa.Column("is_locked", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "tour_itinerary_days",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tour_id", sa.Text(), nullable=False),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text()),
        sa.Column("description", sa.Text()),
        sa.Column("overnight_city", sa.Text()),
        sa.UniqueConstraint("tour_id", "day_number", name="uq_tour_itinerary_day"),
    )
    op.create_index("ix_tour_itinerary_days_tour_id", "tour_itinerary_days", ["tour_id"])

    op.create_table(
        "payment_schedule_config",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("component_pricing_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("schedule_type", sa.String(16), nullable=False),
        sa.Column("allow_partial_payments", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deposit_type", sa.String(16), nullable=True),
        sa.Column("deposit_percentage", sa.Float(), nullable=True),
        sa.Column("deposit_amount_cents", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["component_pricing_id"], ["component_pricing.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "expected_payment_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("payment_schedule_config_id", sa.Uuid(), nullable=False),
        sa.Column("payment_name", sa.Text(), nullable=False),
        sa.Column("expected_amount_cents", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("sequence_order", sa.Integer(), nullable=False),
        sa.Column("paid_amount_cents", sa.Integer(), nullable=False),
        sa.Column("is_locked", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["payment_schedule_config_id"], ["payment_schedule_config.id"], ondelete="CASCADE"
        ),
    )
    op.create_index(
        "idx_expected_payment_config", "expected_payment_items", ["payment_schedule_config_id"]
    )

    op.create_table(
        "credit_card_guarantee",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("payment_schedule_config_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("card_holder_name", sa.Text(), nullable=False),
        sa.Column("card_last4", sa.String(4), nullable=False),
        sa.Column("authorization_code", sa.Text(), nullable=False),
        sa.Column("authorization_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("authorization_amount_cents", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["payment_schedule_config_id"], ["payment_schedule_config.id"], ondelete="CASCADE"
        ),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("credit_card_guarantee")
    op.drop_index("idx_expected_payment_config", table_name="expected_payment_items")
    op.drop_table("expected_payment_items")
    op.drop_table("payment_schedule_config")
    op.drop_index("ix_tour_itinerary_days_tour_id", table_name="tour_itinerary_days")
    op.drop_table("tour_itinerary_days")
    for table in (
        "tour_day_details",
        "custom_tour_details",
        "custom_cruise_details",
        "options_details",
        "port_info_details",
        "dining_details",
        "transportation_details",
        "lodging_details",
        "flight_details",
    ):
        op.drop_table(table)
    op.drop_table("component_pricing")
    op.drop_index("idx_component_parent", table_name="components")
    op.drop_index("idx_component_day_sequence", table_name="components")
    op.drop_table("components")
    op.drop_index("idx_itinerary_day_itinerary", table_name="itinerary_days")
    op.drop_table("itinerary_days")
    op.drop_table("itineraries")
