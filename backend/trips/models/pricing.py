"""Pricing record DTO."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel

from backend.trips.models.common import InvoiceType, PricingType


class ComponentPricingDTO(BaseModel):
    """Stored pricing for a single component."""

    id: UUID
    component_id: UUID
    total_price_cents: int | None = None
    taxes_and_fees_cents: int | None = None
    pricing_type: PricingType
    currency: str
    invoice_type: InvoiceType = InvoiceType.individual_item
    commission_total_cents: int | None = None
    commission_split_percentage: float | None = None
    commission_expected_date: date | None = None
    confirmation_number: str | None = None
    booking_reference: str | None = None
    booking_status: str | None = None
    terms_and_conditions: str | None = None
    cancellation_policy: str | None = None
    supplier: str | None = None
    created_at: datetime
    updated_at: datetime
