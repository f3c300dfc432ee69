"""Integration tests for payment schedule persistence and validation."""

import uuid
from datetime import date, datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.db.models import CreditCardGuarantee, ExpectedPaymentItem
from backend.trips.errors import ConflictError, InvalidInputError, NotFoundError
from backend.trips.models.payment_schedules import (
    PaymentItemStatus,
    PaymentScheduleInput,
    PaymentSchedulePatch,
)
from backend.trips.orchestration.components import ComponentOrchestrator
from backend.trips.orchestration.payment_schedules import PaymentScheduleService

TODAY = date(2025, 6, 15)
GUARANTEE = {
    "card_holder_name": "A. Traveller",
    "card_last4": "4242",
    "authorization_code": "AUTH-77",
    "authorization_date": datetime(2025, 6, 1, 9, 0),
    "authorization_amount_cents": 20_000,
}


async def _priced_component(
    session: AsyncSession, itinerary_factory, total_price_cents: int | None = 100_000
) -> uuid.UUID:
    seeded = await itinerary_factory(date(2025, 6, 1), date(2025, 6, 5))
    lodging = await ComponentOrchestrator(session).create_lodging(
        {
            "itinerary_day_id": str(seeded.first_day_id),
            "name": "Hotel",
            "total_price_cents": total_price_cents,
        }
    )
    assert lodging.pricing is not None
    return lodging.pricing.id


async def _count(session: AsyncSession, model: type) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_create_deposit_schedule(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session, today=TODAY)

    schedule = await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput(
            schedule_type="deposit", deposit_type="percentage", deposit_percentage=25
        ),
    )

    assert schedule.id is not None
    assert schedule.total_price_cents == 100_000
    assert schedule.computed_deposit_cents == 25_000
    assert schedule.balance_cents == 75_000
    assert schedule.payment_status is None

    fetched = await service.get_payment_schedule(pricing_id)
    assert fetched.id == schedule.id
    assert fetched.deposit_percentage == 25


@pytest.mark.asyncio
async def test_duplicate_create_conflicts(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session)
    await service.create_payment_schedule(pricing_id, PaymentScheduleInput(schedule_type="full"))

    with pytest.raises(ConflictError, match="Use update instead"):
        await service.create_payment_schedule(pricing_id, PaymentScheduleInput(schedule_type="full"))


@pytest.mark.asyncio
async def test_installments_roll_up_status(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session, today=TODAY)

    schedule = await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput.model_validate(
            {
                "schedule_type": "installments",
                "expected_payment_items": [
                    {
                        "payment_name": "Deposit",
                        "expected_amount_cents": 30_000,
                        "paid_amount_cents": 30_000,
                        "sequence_order": 0,
                    },
                    {
                        "payment_name": "Second",
                        "expected_amount_cents": 30_000,
                        "due_date": "2025-06-01",
                        "sequence_order": 1,
                    },
                    {
                        "payment_name": "Final",
                        "expected_amount_cents": 40_000,
                        "due_date": "2025-08-01",
                        "sequence_order": 2,
                    },
                ],
            }
        ),
    )

    assert [i.payment_name for i in schedule.expected_payment_items] == ["Deposit", "Second", "Final"]
    assert schedule.payment_status == PaymentItemStatus.overdue


@pytest.mark.asyncio
async def test_items_must_sum_to_total(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session)

    with pytest.raises(InvalidInputError, match="Expected: 100000, Got: 90000"):
        await service.create_payment_schedule(
            pricing_id,
            PaymentScheduleInput.model_validate(
                {
                    "schedule_type": "installments",
                    "expected_payment_items": [
                        {"payment_name": "Only", "expected_amount_cents": 90_000}
                    ],
                }
            ),
        )

    with pytest.raises(NotFoundError):
        await service.get_payment_schedule(pricing_id)


@pytest.mark.asyncio
async def test_schedule_requires_priced_component(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory, total_price_cents=None)
    service = PaymentScheduleService(session)

    with pytest.raises(InvalidInputError, match="total_price_cents"):
        await service.create_payment_schedule(pricing_id, PaymentScheduleInput(schedule_type="full"))


@pytest.mark.asyncio
async def test_unknown_pricing(session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await PaymentScheduleService(session).create_payment_schedule(
            uuid.uuid4(), PaymentScheduleInput(schedule_type="full")
        )


@pytest.mark.asyncio
async def test_switch_to_guarantee_without_card_keeps_full(
    session: AsyncSession, itinerary_factory
) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session)
    await service.create_payment_schedule(pricing_id, PaymentScheduleInput(schedule_type="full"))

    with pytest.raises(InvalidInputError, match="credit_card_guarantee is required"):
        await service.update_payment_schedule(
            pricing_id, PaymentSchedulePatch(schedule_type="guarantee")
        )

    stored = await service.get_payment_schedule(pricing_id)
    assert stored.schedule_type == "full"


@pytest.mark.asyncio
async def test_switch_to_guarantee_with_card(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session)
    await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput(
            schedule_type="deposit", deposit_type="fixed_amount", deposit_amount_cents=10_000
        ),
    )

    updated = await service.update_payment_schedule(
        pricing_id,
        PaymentSchedulePatch.model_validate(
            {"schedule_type": "guarantee", "credit_card_guarantee": GUARANTEE}
        ),
    )

    assert updated.schedule_type == "guarantee"
    assert updated.deposit_type is None
    assert updated.deposit_amount_cents is None
    assert updated.computed_deposit_cents is None
    assert updated.credit_card_guarantee is not None
    assert updated.credit_card_guarantee.card_last4 == "4242"


@pytest.mark.asyncio
async def test_update_replaces_items(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session, today=TODAY)
    await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput.model_validate(
            {
                "schedule_type": "installments",
                "expected_payment_items": [
                    {"payment_name": "Half", "expected_amount_cents": 50_000},
                    {"payment_name": "Half again", "expected_amount_cents": 50_000},
                ],
            }
        ),
    )

    updated = await service.update_payment_schedule(
        pricing_id,
        PaymentSchedulePatch.model_validate(
            {
                "expected_payment_items": [
                    {"payment_name": "All at once", "expected_amount_cents": 100_000}
                ]
            }
        ),
    )

    assert [i.payment_name for i in updated.expected_payment_items] == ["All at once"]
    assert await _count(session, ExpectedPaymentItem) == 1


@pytest.mark.asyncio
async def test_validate_does_not_persist(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session)

    result = await service.validate_payment_schedule(
        pricing_id, "guarantee", {"credit_card_guarantee": GUARANTEE}
    )

    assert result.id is None
    assert result.credit_card_guarantee is not None
    assert await _count(session, CreditCardGuarantee) == 0

    with pytest.raises(InvalidInputError, match="card_last4"):
        await service.validate_payment_schedule(
            pricing_id, "guarantee", {"credit_card_guarantee": {**GUARANTEE, "card_last4": "12"}}
        )


@pytest.mark.asyncio
async def test_delete_cascades_items(session: AsyncSession, itinerary_factory) -> None:
    pricing_id = await _priced_component(session, itinerary_factory)
    service = PaymentScheduleService(session)
    await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput.model_validate(
            {
                "schedule_type": "guarantee",
                "credit_card_guarantee": GUARANTEE,
                "expected_payment_items": [
                    {"payment_name": "Balance", "expected_amount_cents": 100_000}
                ],
            }
        ),
    )

    await service.delete_payment_schedule(pricing_id)

    assert await _count(session, ExpectedPaymentItem) == 0
    assert await _count(session, CreditCardGuarantee) == 0
    with pytest.raises(NotFoundError):
        await service.delete_payment_schedule(pricing_id)


@pytest.mark.asyncio
async def test_percentage_deposit_stores_computed_amount(
    session: AsyncSession, itinerary_factory
) -> None:
    pricing_id = await _priced_component(session, itinerary_factory, total_price_cents=1_000)
    service = PaymentScheduleService(session, today=TODAY)

    schedule = await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput(
            schedule_type="deposit",
            deposit_type="percentage",
            deposit_percentage=10,
            deposit_amount_cents=999_999,
        ),
    )

    assert schedule.deposit_amount_cents == 100
    assert schedule.deposit_amount_cents <= schedule.total_price_cents
    fetched = await service.get_payment_schedule(pricing_id)
    assert fetched.deposit_amount_cents == 100


@pytest.mark.asyncio
async def test_non_deposit_schedule_drops_deposit_fields(
    session: AsyncSession, itinerary_factory
) -> None:
    pricing_id = await _priced_component(session, itinerary_factory, total_price_cents=1_000)
    service = PaymentScheduleService(session, today=TODAY)

    schedule = await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput(
            schedule_type="full",
            deposit_type="fixed_amount",
            deposit_percentage=50,
            deposit_amount_cents=5_000,
        ),
    )

    assert schedule.deposit_type is None
    assert schedule.deposit_percentage is None
    assert schedule.deposit_amount_cents is None
    assert schedule.balance_cents == 1_000

    fetched = await service.get_payment_schedule(pricing_id)
    assert fetched.deposit_amount_cents is None


@pytest.mark.asyncio
async def test_patch_to_percentage_recomputes_stored_amount(
    session: AsyncSession, itinerary_factory
) -> None:
    pricing_id = await _priced_component(session, itinerary_factory, total_price_cents=1_000)
    service = PaymentScheduleService(session, today=TODAY)
    await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput(
            schedule_type="deposit", deposit_type="fixed_amount", deposit_amount_cents=900
        ),
    )

    updated = await service.update_payment_schedule(
        pricing_id,
        PaymentSchedulePatch(
            deposit_type="percentage", deposit_percentage=20, deposit_amount_cents=50_000
        ),
    )

    assert updated.deposit_amount_cents == 200
    assert updated.computed_deposit_cents == 200


@pytest.mark.asyncio
async def test_item_status_follows_amounts_not_input(
    session: AsyncSession, itinerary_factory
) -> None:
    pricing_id = await _priced_component(session, itinerary_factory, total_price_cents=1_000)
    service = PaymentScheduleService(session, today=TODAY)

    schedule = await service.create_payment_schedule(
        pricing_id,
        PaymentScheduleInput.model_validate(
            {
                "schedule_type": "installments",
                "expected_payment_items": [
                    {
                        "payment_name": "First",
                        "expected_amount_cents": 600,
                        "paid_amount_cents": 600,
                        "status": "overdue",
                        "sequence_order": 0,
                    },
                    {
                        "payment_name": "Second",
                        "expected_amount_cents": 400,
                        "due_date": "2025-06-01",
                        "status": "paid",
                        "sequence_order": 1,
                    },
                ],
            }
        ),
    )

    assert [i.status for i in schedule.expected_payment_items] == ["paid", "overdue"]
    assert schedule.payment_status == PaymentItemStatus.overdue

    stored = (
        await session.execute(
            select(ExpectedPaymentItem.status).order_by(ExpectedPaymentItem.sequence_order)
        )
    ).scalars().all()
    assert list(stored) == ["paid", "overdue"]
