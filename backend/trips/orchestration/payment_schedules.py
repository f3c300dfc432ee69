"""Payment schedules - validation, persistence and payment-status roll-up."""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, TypeVar
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.db.models import ComponentPricing, PaymentScheduleConfig
from backend.trips.db.payment_schedules import SqlPaymentScheduleStore
from backend.trips.db.pricing import SqlPricingStore
from backend.trips.errors import ConflictError, InvalidInputError, NotFoundError
from backend.trips.models.payment_schedules import (
    CreditCardGuaranteeDTO,
    CreditCardGuaranteeInput,
    DepositType,
    ExpectedPaymentItemDTO,
    ExpectedPaymentItemInput,
    PaymentItemStatus,
    PaymentScheduleConfigDTO,
    PaymentScheduleInput,
    PaymentSchedulePatch,
    ScheduleType,
)

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=ExpectedPaymentItemInput)

_STATUS_PRIORITY: dict[PaymentItemStatus, int] = {
    PaymentItemStatus.paid: 0,
    PaymentItemStatus.pending: 1,
    PaymentItemStatus.partial: 2,
    PaymentItemStatus.overdue: 3,
}

_CONFIG_FIELDS = (
    "schedule_type",
    "allow_partial_payments",
    "deposit_type",
    "deposit_percentage",
    "deposit_amount_cents",
)


def item_status(item: ExpectedPaymentItemInput, today: date) -> PaymentItemStatus:
    """Status of one expected payment from its amounts and due date."""
    if item.paid_amount_cents >= item.expected_amount_cents:
        return PaymentItemStatus.paid
    if item.paid_amount_cents > 0:
        return PaymentItemStatus.partial
    if item.due_date is not None and item.due_date < today:
        return PaymentItemStatus.overdue
    return PaymentItemStatus.pending


def summarize_payment_status(
    items: Iterable[ExpectedPaymentItemInput], today: date
) -> PaymentItemStatus | None:
    """Worst status across items: overdue > partial > pending > paid.

    Returns:
        None when there are no items
    """
    statuses = [item_status(item, today) for item in items]
    if not statuses:
        return None
    return max(statuses, key=_STATUS_PRIORITY.__getitem__)


def compute_deposit_cents(data: PaymentScheduleInput, total_price_cents: int) -> int | None:
    """Deposit amount in cents; percentages round half-up."""
    if data.schedule_type != ScheduleType.deposit:
        return None
    if data.deposit_type == DepositType.percentage and data.deposit_percentage is not None:
        amount = Decimal(total_price_cents) * Decimal(str(data.deposit_percentage)) / Decimal(100)
        return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if data.deposit_type == DepositType.fixed_amount:
        return data.deposit_amount_cents
    return None


def normalize_deposit(data: PaymentScheduleInput, total_price_cents: int) -> PaymentScheduleInput:
    """Keep only the deposit fields the schedule type uses.

    Non-deposit schedules carry no deposit fields; a percentage deposit
    stores the amount computed from the total, never a supplied one.
    """
    if data.schedule_type != ScheduleType.deposit:
        return data.model_copy(
            update={"deposit_type": None, "deposit_percentage": None, "deposit_amount_cents": None}
        )
    if data.deposit_type == DepositType.percentage:
        return data.model_copy(
            update={"deposit_amount_cents": compute_deposit_cents(data, total_price_cents)}
        )
    return data.model_copy(update={"deposit_percentage": None})


def with_derived_status(items: Iterable[ItemT], today: date) -> list[ItemT]:
    """Copies of `items` whose status is derived from amounts and due date."""
    return [item.model_copy(update={"status": item_status(item, today).value}) for item in items]


def validate_schedule(data: PaymentScheduleInput, total_price_cents: int | None) -> None:
    """Check a complete schedule configuration against the pricing total.

    Raises:
        InvalidInputError: On the first rule violated
    """
    if not total_price_cents or total_price_cents <= 0:
        raise InvalidInputError(
            "Component pricing must have a total_price_cents before creating a payment schedule"
        )

    if data.schedule_type == ScheduleType.deposit:
        if data.deposit_type is None:
            raise InvalidInputError("deposit_type is required for deposit schedules")
        if data.deposit_type == DepositType.percentage:
            if data.deposit_percentage is None:
                raise InvalidInputError("deposit_percentage is required for percentage deposits")
            if not 0 <= data.deposit_percentage <= 100:
                raise InvalidInputError("deposit_percentage must be between 0 and 100")
        else:
            if data.deposit_amount_cents is None:
                raise InvalidInputError("deposit_amount_cents is required for fixed_amount deposits")
            if data.deposit_amount_cents < 0:
                raise InvalidInputError("deposit_amount_cents must be non-negative")
            if data.deposit_amount_cents > total_price_cents:
                raise InvalidInputError("deposit_amount_cents cannot exceed total_price_cents")

    if data.schedule_type == ScheduleType.installments and not data.expected_payment_items:
        raise InvalidInputError("Installment schedules require at least one expected payment item")

    if data.expected_payment_items:
        for item in data.expected_payment_items:
            if item.expected_amount_cents < 0:
                raise InvalidInputError(
                    f"expected_amount_cents must be non-negative (item '{item.payment_name}')"
                )
        items_total = sum(item.expected_amount_cents for item in data.expected_payment_items)
        if items_total != total_price_cents:
            raise InvalidInputError(
                "Expected payment items must sum to total_price_cents. "
                f"Expected: {total_price_cents}, Got: {items_total}"
            )

    if data.schedule_type == ScheduleType.guarantee and data.credit_card_guarantee is None:
        raise InvalidInputError("credit_card_guarantee is required for guarantee schedules")

    guarantee = data.credit_card_guarantee
    if guarantee is not None:
        if len(guarantee.card_last4) != 4 or not guarantee.card_last4.isdigit():
            raise InvalidInputError("card_last4 must be exactly 4 digits")
        if guarantee.authorization_amount_cents < 0:
            raise InvalidInputError("authorization_amount_cents must be non-negative")


class PaymentScheduleService:
    """Create/update/get/delete payment schedules attached to pricing records."""

    def __init__(self, session: AsyncSession, *, today: date | None = None) -> None:
        self._session = session
        self._pricing = SqlPricingStore(session)
        self._store = SqlPaymentScheduleStore(session)
        self._today = today

    def _current_date(self) -> date:
        return self._today or date.today()

    async def _require_pricing(self, pricing_id: UUID) -> ComponentPricing:
        pricing = await self._pricing.get(pricing_id)
        if pricing is None:
            raise NotFoundError(f"Component pricing {pricing_id} not found")
        return pricing

    async def _require_config(self, pricing_id: UUID) -> PaymentScheduleConfig:
        config = await self._store.find_by_pricing_id(pricing_id)
        if config is None:
            raise NotFoundError(f"Payment schedule for pricing {pricing_id} not found")
        return config

    async def validate_payment_schedule(
        self,
        pricing_id: UUID,
        schedule_type: ScheduleType | str,
        fields: dict[str, Any] | None = None,
    ) -> PaymentScheduleConfigDTO:
        """Validate a configuration without storing it.

        Returns:
            The computed (unsaved) configuration

        Raises:
            NotFoundError: Unknown pricing id
            InvalidInputError: Malformed fields or a violated rule
        """
        pricing = await self._require_pricing(pricing_id)
        try:
            data = PaymentScheduleInput.model_validate(
                {**(fields or {}), "schedule_type": schedule_type}
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid payment schedule fields: {e}") from e

        validate_schedule(data, pricing.total_price_cents)
        data = normalize_deposit(data, pricing.total_price_cents or 0)
        return self._to_dto(
            pricing,
            data,
            items=[ExpectedPaymentItemDTO(**i.model_dump()) for i in data.expected_payment_items or []],
            guarantee=(
                CreditCardGuaranteeDTO(**data.credit_card_guarantee.model_dump())
                if data.credit_card_guarantee
                else None
            ),
        )

    async def create_payment_schedule(
        self, pricing_id: UUID, data: PaymentScheduleInput
    ) -> PaymentScheduleConfigDTO:
        """Create the schedule for a pricing record.

        Raises:
            NotFoundError: Unknown pricing id
            ConflictError: A schedule already exists for the pricing record
            InvalidInputError: A violated rule
        """
        try:
            pricing = await self._require_pricing(pricing_id)
            if await self._store.find_by_pricing_id(pricing_id) is not None:
                raise ConflictError(
                    f"Payment schedule already exists for activity pricing ID {pricing_id}. "
                    "Use update instead."
                )
            validate_schedule(data, pricing.total_price_cents)
            data = normalize_deposit(data, pricing.total_price_cents or 0)

            config = await self._store.create_config(
                pricing_id, data.model_dump(include=set(_CONFIG_FIELDS))
            )
            if data.expected_payment_items:
                await self._store.replace_items(
                    config.id, with_derived_status(data.expected_payment_items, self._current_date())
                )
            if data.credit_card_guarantee is not None:
                await self._store.upsert_guarantee(config.id, data.credit_card_guarantee)

            dto = await self._load_dto(pricing, config)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        logger.info(
            "Created payment schedule",
            extra={"structured": {"pricing_id": str(pricing_id), "schedule_type": data.schedule_type}},
        )
        return dto

    async def update_payment_schedule(
        self, pricing_id: UUID, patch: PaymentSchedulePatch
    ) -> PaymentScheduleConfigDTO:
        """Merge a patch into the stored schedule and re-validate the result.

        Supplied items replace the stored list; a supplied guarantee is
        upserted. A failed validation leaves the stored schedule unchanged.
        """
        try:
            pricing = await self._require_pricing(pricing_id)
            config = await self._require_config(pricing_id)

            stored_items = await self._store.list_items(config.id)
            stored_guarantee = await self._store.get_guarantee(config.id)

            merged: dict[str, Any] = {name: getattr(config, name) for name in _CONFIG_FIELDS}
            merged.update(patch.model_dump(include=set(_CONFIG_FIELDS) & patch.model_fields_set))

            items = patch.expected_payment_items
            if items is None:
                items = [ExpectedPaymentItemInput.model_validate(i, from_attributes=True) for i in stored_items]
            guarantee = patch.credit_card_guarantee
            if guarantee is None and stored_guarantee is not None:
                guarantee = CreditCardGuaranteeInput.model_validate(stored_guarantee, from_attributes=True)

            try:
                effective = PaymentScheduleInput.model_validate(
                    {**merged, "expected_payment_items": items, "credit_card_guarantee": guarantee}
                )
            except ValidationError as e:
                raise InvalidInputError(f"Invalid payment schedule fields: {e}") from e
            validate_schedule(effective, pricing.total_price_cents)
            effective = normalize_deposit(effective, pricing.total_price_cents or 0)

            await self._store.update_config(config, effective.model_dump(include=set(_CONFIG_FIELDS)))
            if patch.expected_payment_items is not None:
                await self._store.replace_items(
                    config.id, with_derived_status(patch.expected_payment_items, self._current_date())
                )
            if patch.credit_card_guarantee is not None:
                await self._store.upsert_guarantee(config.id, patch.credit_card_guarantee)

            dto = await self._load_dto(pricing, config)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return dto

    async def get_payment_schedule(self, pricing_id: UUID) -> PaymentScheduleConfigDTO:
        pricing = await self._require_pricing(pricing_id)
        config = await self._require_config(pricing_id)
        return await self._load_dto(pricing, config)

    async def delete_payment_schedule(self, pricing_id: UUID) -> None:
        """Delete the schedule; items and guarantee cascade."""
        try:
            config = await self._require_config(pricing_id)
            await self._store.delete_config(config)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

    async def _load_dto(
        self, pricing: ComponentPricing, config: PaymentScheduleConfig
    ) -> PaymentScheduleConfigDTO:
        items = await self._store.list_items(config.id)
        guarantee = await self._store.get_guarantee(config.id)
        data = PaymentScheduleInput.model_validate(
            {name: getattr(config, name) for name in _CONFIG_FIELDS}
        )
        return self._to_dto(
            pricing,
            data,
            items=[ExpectedPaymentItemDTO.model_validate(i, from_attributes=True) for i in items],
            guarantee=(
                CreditCardGuaranteeDTO.model_validate(guarantee, from_attributes=True)
                if guarantee
                else None
            ),
            config=config,
        )

    def _to_dto(
        self,
        pricing: ComponentPricing,
        data: PaymentScheduleInput,
        *,
        items: list[ExpectedPaymentItemDTO],
        guarantee: CreditCardGuaranteeDTO | None,
        config: PaymentScheduleConfig | None = None,
    ) -> PaymentScheduleConfigDTO:
        total = pricing.total_price_cents or 0
        deposit = compute_deposit_cents(data, total)
        items = with_derived_status(items, self._current_date())
        return PaymentScheduleConfigDTO(
            id=config.id if config else None,
            component_pricing_id=pricing.id,
            schedule_type=data.schedule_type,
            allow_partial_payments=data.allow_partial_payments,
            deposit_type=data.deposit_type,
            deposit_percentage=data.deposit_percentage,
            deposit_amount_cents=data.deposit_amount_cents,
            total_price_cents=total,
            computed_deposit_cents=deposit,
            balance_cents=total - (deposit or 0),
            expected_payment_items=items,
            credit_card_guarantee=guarantee,
            payment_status=summarize_payment_status(items, self._current_date()),
            created_at=config.created_at if config else None,
            updated_at=config.updated_at if config else None,
        )
