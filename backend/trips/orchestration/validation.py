"""Type-specific input validation for component payloads."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from backend.trips.errors import InvalidInputError
from backend.trips.models.common import TransportationSubtype, normalize_time
from backend.trips.models.components import (
    CustomCruiseDetails,
    DiningDetails,
    LodgingDetails,
    TransportationDetails,
)

PARTY_SIZE_MIN = 1
PARTY_SIZE_MAX = 100


def is_valid_timezone(name: str) -> bool:
    """True if `name` is a known IANA time zone."""
    if not name or name.strip() != name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def validate_transportation(details: TransportationDetails | None) -> None:
    """Check subtype enumeration and pickup/dropoff time zones."""
    if details is None:
        return

    if details.subtype is not None:
        allowed = [s.value for s in TransportationSubtype]
        if details.subtype not in allowed:
            raise InvalidInputError(
                f"Invalid transportation subtype: {details.subtype}. "
                f"Must be one of: {', '.join(allowed)}"
            )

    if details.pickup_timezone and not is_valid_timezone(details.pickup_timezone):
        raise InvalidInputError(
            f"Invalid pickup timezone: {details.pickup_timezone}. Must be a valid IANA timezone."
        )
    if details.dropoff_timezone and not is_valid_timezone(details.dropoff_timezone):
        raise InvalidInputError(
            f"Invalid dropoff timezone: {details.dropoff_timezone}. Must be a valid IANA timezone."
        )


def validate_dining(details: DiningDetails | None) -> None:
    if details is None or details.party_size is None:
        return
    if not PARTY_SIZE_MIN <= details.party_size <= PARTY_SIZE_MAX:
        raise InvalidInputError(
            f"Party size must be between {PARTY_SIZE_MIN} and {PARTY_SIZE_MAX}"
        )


def validate_lodging(details: LodgingDetails | None) -> None:
    if details is None or details.check_in_date is None or details.check_out_date is None:
        return
    if details.check_out_date < details.check_in_date:
        raise InvalidInputError("Check-out date must be on or after check-in date")


def validate_cruise(details: CustomCruiseDetails | None) -> None:
    if details is None or details.departure_date is None or details.arrival_date is None:
        return
    if details.arrival_date < details.departure_date:
        raise InvalidInputError("Cruise arrival date must be on or after departure date")


def combine_local(day: date, hhmmss: str | None) -> datetime:
    """Combine a date with a normalized time of day (default noon)."""
    return datetime.combine(day, time.fromisoformat(normalize_time(hhmmss)))


def lodging_datetimes(details: LodgingDetails) -> tuple[datetime | None, datetime | None]:
    """Derive (start, end) from check-in/check-out date and time."""
    start = (
        combine_local(details.check_in_date, details.check_in_time)
        if details.check_in_date
        else None
    )
    end = (
        combine_local(details.check_out_date, details.check_out_time)
        if details.check_out_date
        else None
    )
    return start, end
