"""Unit tests for cruise day classification."""

from datetime import date

import pytest

from backend.trips.errors import InvalidInputError
from backend.trips.models.common import PortType
from backend.trips.models.components import CruisePortCall, CustomCruiseDetails
from backend.trips.orchestration.cruise_schedule import plan_cruise_days, port_details_for


def _cruise(**overrides: object) -> CustomCruiseDetails:
    values: dict[str, object] = {
        "departure_date": date(2025, 12, 8),
        "arrival_date": date(2025, 12, 12),
        "departure_port": "Rome",
        "arrival_port": "Lisbon",
    }
    values.update(overrides)
    return CustomCruiseDetails.model_validate(values)


def test_empty_port_calls_fall_back_to_ports_and_sea_days() -> None:
    plans = plan_cruise_days(_cruise(port_calls_json=[]))

    assert len(plans) == 5
    assert (plans[0].port_type, plans[0].port_name) == (PortType.departure, "Rome")
    assert plans[0].description == "Embarkation at Rome"
    for plan in plans[1:4]:
        assert plan.port_type == PortType.sea_day
        assert plan.port_name == "At Sea"
    assert (plans[4].port_type, plans[4].port_name) == (PortType.arrival, "Lisbon")
    assert [p.day_date for p in plans] == [date(2025, 12, d) for d in range(8, 13)]


def test_day_count_is_inclusive() -> None:
    plans = plan_cruise_days(_cruise(arrival_date=date(2025, 12, 10)))

    assert len(plans) == 3
    assert [p.day_index for p in plans] == [0, 1, 2]


def test_same_day_cruise_is_a_single_departure_day() -> None:
    plans = plan_cruise_days(_cruise(arrival_date=date(2025, 12, 8)))

    assert len(plans) == 1
    assert plans[0].port_type == PortType.departure


def test_port_calls_matched_by_day_number() -> None:
    calls = [
        CruisePortCall(day=2, port_name="Marseille", arrive_time="08:00", depart_time="17:30"),
        CruisePortCall(day=3, port_name="Palma", tender=True),
        CruisePortCall(day=4, is_sea_day=True),
    ]
    plans = plan_cruise_days(_cruise(port_calls_json=calls))

    marseille = plans[1]
    assert marseille.port_type == PortType.port_call
    assert marseille.arrival_time == "08:00:00"
    assert marseille.departure_time == "17:30:00"
    assert marseille.description == "Port of call"

    palma = plans[2]
    assert palma.tender_required is True
    assert palma.description == "Port of call (tender required)"

    assert plans[3].port_type == PortType.sea_day


def test_port_call_on_first_day_overrides_departure_port_name() -> None:
    calls = [CruisePortCall(day=1, port_name="Civitavecchia", depart_time="19:00")]
    plans = plan_cruise_days(_cruise(port_calls_json=calls))

    assert plans[0].port_type == PortType.departure
    assert plans[0].port_name == "Civitavecchia"
    assert plans[0].departure_time == "19:00:00"


def test_midnight_and_garbage_times_are_dropped() -> None:
    calls = [CruisePortCall(day=2, port_name="Naples", arrive_time="00:00", depart_time="late")]
    plans = plan_cruise_days(_cruise(port_calls_json=calls))

    assert plans[1].arrival_time is None
    assert plans[1].departure_time is None


def test_calls_without_day_are_ignored_and_first_entry_wins() -> None:
    calls = [
        CruisePortCall(port_name="Nowhere"),
        CruisePortCall(day=2, port_name="Genoa"),
        CruisePortCall(day=2, port_name="Florence"),
    ]
    plans = plan_cruise_days(_cruise(port_calls_json=calls))

    assert plans[1].port_name == "Genoa"
    assert all(p.port_name != "Nowhere" for p in plans)


def test_missing_ports_use_generic_names() -> None:
    plans = plan_cruise_days(_cruise(departure_port=None, arrival_port=None))

    assert plans[0].port_name == "Departure Port"
    assert plans[-1].port_name == "Arrival Port"


@pytest.mark.parametrize(
    "overrides",
    [
        {"departure_date": None},
        {"arrival_date": None},
        {"arrival_date": date(2025, 12, 7)},
    ],
)
def test_invalid_dates_raise(overrides: dict[str, object]) -> None:
    with pytest.raises(InvalidInputError):
        plan_cruise_days(_cruise(**overrides))


def test_port_details_dates_follow_stop_role() -> None:
    plans = plan_cruise_days(
        _cruise(port_calls_json=[CruisePortCall(day=3, port_name="Barcelona")])
    )

    departure = port_details_for(plans[0])
    assert departure.departure_date == date(2025, 12, 8)
    assert departure.arrival_date is None

    port_call = port_details_for(plans[2])
    assert port_call.arrival_date == port_call.departure_date == date(2025, 12, 10)

    sea_day = port_details_for(plans[1])
    assert sea_day.arrival_date is None and sea_day.departure_date is None

    arrival = port_details_for(plans[4])
    assert arrival.arrival_date == date(2025, 12, 12)
    assert arrival.departure_date is None
    assert arrival.port_type == PortType.arrival.value
