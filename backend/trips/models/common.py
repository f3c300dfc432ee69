"""Common types and enums shared across all models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ComponentType(str, Enum):
    """Component type tag; selects the detail store and pricing rules."""

    flight = "flight"
    lodging = "lodging"
    transportation = "transportation"
    dining = "dining"
    port_info = "port_info"
    options = "options"
    custom_cruise = "custom_cruise"
    custom_tour = "custom_tour"
    tour_day = "tour_day"


class ComponentStatus(str, Enum):
    """Booking status of a component."""

    proposed = "proposed"
    confirmed = "confirmed"
    booked = "booked"
    cancelled = "cancelled"
    optional = "optional"


class PricingType(str, Enum):
    """How a component's price is quoted."""

    per_person = "per_person"
    per_room = "per_room"
    flat_rate = "flat_rate"
    per_night = "per_night"
    total = "total"


class InvoiceType(str, Enum):
    """Whether the component is invoiced alone or as part of a package."""

    individual_item = "individual_item"
    part_of_package = "part_of_package"


class TransportationSubtype(str, Enum):
    """Ground/sea transportation kinds."""

    transfer = "transfer"
    car_rental = "car_rental"
    private_car = "private_car"
    taxi = "taxi"
    shuttle = "shuttle"
    train = "train"
    ferry = "ferry"
    bus = "bus"
    limousine = "limousine"


class PortType(str, Enum):
    """Role of a port stop within a cruise."""

    departure = "departure"
    arrival = "arrival"
    sea_day = "sea_day"
    port_call = "port_call"


class OptionCategory(str, Enum):
    """Category of an optional add-on."""

    upgrade = "upgrade"
    add_on = "add_on"
    tour = "tour"
    excursion = "excursion"
    insurance = "insurance"
    meal_plan = "meal_plan"
    other = "other"


class CruiseSource(str, Enum):
    """Where cruise data came from."""

    traveltek = "traveltek"
    manual = "manual"


class Coordinates(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


def parse_datetime_or_none(value: Any) -> datetime | None:
    """Parse an ISO-8601 datetime, returning None for anything unparseable.

    Component timing is advisory: a malformed string is stored as null
    rather than failing the whole write.
    """
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def normalize_time(value: str | None, default: str = "12:00:00") -> str:
    """Normalize "HH:MM" / "HH:MM:SS" to "HH:MM:SS"."""
    if not value:
        return default
    parts = value.strip().split(":")
    if len(parts) == 2:
        parts.append("00")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return default
    hours, minutes, seconds = (int(p) for p in parts)
    if hours > 23 or minutes > 59 or seconds > 59:
        return default
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
