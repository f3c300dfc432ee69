"""Integration tests for the component, schedule and payment schedule routes."""

import asyncio
import uuid
from collections.abc import AsyncGenerator, Iterator
from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from backend.trips.api.dependencies import get_regeneration_lock
from backend.trips.db.engine import create_async_engine_for_url, get_session
from backend.trips.locks import InMemoryRegenerationLock, make_regeneration_key
from backend.trips.main import app
from tests.seed import SeededItinerary, create_schema, seed_itinerary


@pytest.fixture
def api_engine(tmp_path: Path) -> Iterator[AsyncEngine]:
    engine = create_async_engine_for_url(
        f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool
    )
    asyncio.run(create_schema(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def seeded(api_engine: AsyncEngine) -> SeededItinerary:
    async def _seed() -> SeededItinerary:
        async with AsyncSession(api_engine, expire_on_commit=False) as session:
            return await seed_itinerary(session, date(2025, 12, 8), date(2025, 12, 12))

    return asyncio.run(_seed())


@pytest.fixture
def regeneration_lock() -> InMemoryRegenerationLock:
    return InMemoryRegenerationLock()


@pytest.fixture
def client(
    api_engine: AsyncEngine, regeneration_lock: InMemoryRegenerationLock
) -> Iterator[TestClient]:
    factory = async_sessionmaker(bind=api_engine, expire_on_commit=False)

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_regeneration_lock] = lambda: regeneration_lock
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_cruise(client: TestClient, seeded: SeededItinerary) -> dict:
    response = client.post(
        "/components/custom_cruise",
        json={
            "itinerary_day_id": str(seeded.first_day_id),
            "name": "Mediterranean Highlights",
            "total_price_cents": 480_000,
            "details": {
                "departure_port": "Rome",
                "arrival_port": "Lisbon",
                "departure_date": "2025-12-08",
                "arrival_date": "2025-12-12",
            },
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestComponentRoutes:
    def test_create_get_update_delete(self, client: TestClient, seeded: SeededItinerary) -> None:
        created = client.post(
            "/components/dining",
            json={
                "itinerary_day_id": str(seeded.first_day_id),
                "name": "Dinner",
                "details": {"restaurant_name": "Roscioli", "party_size": 2},
            },
        )
        assert created.status_code == 201
        body = created.json()
        assert body["component_type"] == "dining"
        assert body["pricing"]["total_price_cents"] == 0

        fetched = client.get(f"/components/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["details"]["restaurant_name"] == "Roscioli"

        patched = client.patch(
            f"/components/dining/{body['id']}", json={"details": {"party_size": 3}}
        )
        assert patched.status_code == 200
        assert patched.json()["details"] == {**body["details"], "party_size": 3}

        listed = client.get(f"/days/{seeded.first_day_id}/components")
        assert [c["id"] for c in listed.json()] == [body["id"]]

        deleted = client.delete(f"/components/dining/{body['id']}")
        assert deleted.status_code == 204
        assert client.get(f"/components/{body['id']}").status_code == 404

    def test_validation_error_is_400(self, client: TestClient, seeded: SeededItinerary) -> None:
        response = client.post(
            "/components/transportation",
            json={
                "itinerary_day_id": str(seeded.first_day_id),
                "name": "Transfer",
                "details": {"subtype": "rocket"},
            },
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid transportation subtype: rocket.")

    def test_unknown_type_in_path_is_422(self, client: TestClient) -> None:
        response = client.post("/components/zeppelin", json={"name": "Airship"})
        assert response.status_code == 422

    def test_type_mismatch_is_404(self, client: TestClient, seeded: SeededItinerary) -> None:
        cruise = _create_cruise(client, seeded)

        response = client.patch(f"/components/flight/{cruise['id']}", json={"name": "Nope"})

        assert response.status_code == 404

    def test_unknown_day_listing_is_404(self, client: TestClient) -> None:
        assert client.get(f"/days/{uuid.uuid4()}/components").status_code == 404


class TestScheduleRoutes:
    def test_generate_and_read_cruise_schedule(
        self, client: TestClient, seeded: SeededItinerary
    ) -> None:
        cruise = _create_cruise(client, seeded)

        generated = client.post(f"/components/{cruise['id']}/cruise-port-schedule", json={})
        assert generated.status_code == 200, generated.text
        body = generated.json()
        assert body["deleted"] == 0
        assert [stop["name"] for stop in body["created"]] == [
            "Rome",
            "At Sea",
            "At Sea",
            "At Sea",
            "Lisbon",
        ]

        stops = client.get(f"/components/{cruise['id']}/cruise-port-schedule").json()
        assert [s["details"]["port_type"] for s in stops] == [
            "departure",
            "sea_day",
            "sea_day",
            "sea_day",
            "arrival",
        ]

    def test_generate_without_body(self, client: TestClient, seeded: SeededItinerary) -> None:
        cruise = _create_cruise(client, seeded)

        response = client.post(f"/components/{cruise['id']}/cruise-port-schedule")

        assert response.status_code == 200
        assert len(response.json()["created"]) == 5

    def test_ownership_mismatch_is_400(self, client: TestClient, seeded: SeededItinerary) -> None:
        cruise = _create_cruise(client, seeded)

        response = client.post(
            f"/components/{cruise['id']}/cruise-port-schedule",
            json={"itinerary_id": str(uuid.uuid4())},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Provided itinerary_id does not match cruise ownership"

    def test_concurrent_regeneration_is_409(
        self,
        client: TestClient,
        seeded: SeededItinerary,
        regeneration_lock: InMemoryRegenerationLock,
    ) -> None:
        cruise = _create_cruise(client, seeded)
        key = make_regeneration_key("cruise_port", uuid.UUID(cruise["id"]))
        token = regeneration_lock.acquire(key)
        assert token is not None

        response = client.post(f"/components/{cruise['id']}/cruise-port-schedule", json={})
        assert response.status_code == 409

        regeneration_lock.release(key, token)
        response = client.post(f"/components/{cruise['id']}/cruise-port-schedule", json={})
        assert response.status_code == 200

    def test_tour_day_schedule(self, client: TestClient, seeded: SeededItinerary) -> None:
        tour = client.post(
            "/components/custom_tour",
            json={
                "itinerary_day_id": str(seeded.first_day_id),
                "name": "Rome in Three Days",
                "details": {"departure_start_date": "2025-12-09", "days": 3},
            },
        ).json()

        generated = client.post(f"/components/{tour['id']}/tour-day-schedule", json={})
        assert generated.status_code == 200
        assert [d["name"] for d in generated.json()["created"]] == ["Day 1", "Day 2", "Day 3"]

        days = client.get(f"/components/{tour['id']}/tour-day-schedule").json()
        assert [d["details"]["day_number"] for d in days] == [1, 2, 3]


class TestPaymentScheduleRoutes:
    def test_lifecycle(self, client: TestClient, seeded: SeededItinerary) -> None:
        cruise = _create_cruise(client, seeded)
        base = f"/pricing/{cruise['pricing']['id']}/payment-schedule"

        created = client.post(
            base,
            json={
                "schedule_type": "deposit",
                "deposit_type": "percentage",
                "deposit_percentage": 10,
            },
        )
        assert created.status_code == 201, created.text
        assert created.json()["computed_deposit_cents"] == 48_000
        assert created.json()["balance_cents"] == 432_000

        duplicate = client.post(base, json={"schedule_type": "full"})
        assert duplicate.status_code == 409

        patched = client.patch(base, json={"schedule_type": "full"})
        assert patched.status_code == 200
        assert patched.json()["computed_deposit_cents"] is None

        rejected = client.patch(base, json={"schedule_type": "guarantee"})
        assert rejected.status_code == 400
        assert client.get(base).json()["schedule_type"] == "full"

        assert client.delete(base).status_code == 204
        assert client.get(base).status_code == 404

    def test_validate_endpoint(self, client: TestClient, seeded: SeededItinerary) -> None:
        cruise = _create_cruise(client, seeded)
        base = f"/pricing/{cruise['pricing']['id']}/payment-schedule"

        ok = client.post(
            f"{base}/validate",
            json={
                "schedule_type": "installments",
                "expected_payment_items": [
                    {"payment_name": "Deposit", "expected_amount_cents": 80_000},
                    {"payment_name": "Balance", "expected_amount_cents": 400_000},
                ],
            },
        )
        assert ok.status_code == 200
        assert ok.json()["id"] is None

        bad = client.post(
            f"{base}/validate",
            json={
                "schedule_type": "installments",
                "expected_payment_items": [
                    {"payment_name": "Deposit", "expected_amount_cents": 80_000}
                ],
            },
        )
        assert bad.status_code == 400
        assert "Expected: 480000, Got: 80000" in bad.json()["detail"]
        assert client.get(base).status_code == 404

    def test_unknown_pricing_is_404(self, client: TestClient) -> None:
        response = client.get(f"/pricing/{uuid.uuid4()}/payment-schedule")
        assert response.status_code == 404
