"""Payment schedule persistence: config, expected payment items, card guarantee."""

import uuid
from typing import Any

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.db.models import (
    CreditCardGuarantee,
    ExpectedPaymentItem,
    PaymentScheduleConfig,
    utcnow,
)
from backend.trips.models.payment_schedules import (
    CreditCardGuaranteeInput,
    ExpectedPaymentItemInput,
)


class SqlPaymentScheduleStore:
    """SQL store for payment schedule configs and their children."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_pricing_id(self, pricing_id: uuid.UUID) -> PaymentScheduleConfig | None:
        result = await self._session.execute(
            select(PaymentScheduleConfig).where(
                PaymentScheduleConfig.component_pricing_id == pricing_id
            )
        )
        return result.scalar_one_or_none()

    async def create_config(
        self, pricing_id: uuid.UUID, values: dict[str, Any]
    ) -> PaymentScheduleConfig:
        now = utcnow()
        config = PaymentScheduleConfig(
            id=uuid.uuid4(),
            component_pricing_id=pricing_id,
            created_at=now,
            updated_at=now,
            **values,
        )
        self._session.add(config)
        await self._session.flush()
        return config

    async def update_config(
        self, config: PaymentScheduleConfig, values: dict[str, Any]
    ) -> PaymentScheduleConfig:
        for key, value in values.items():
            setattr(config, key, value)
        config.updated_at = utcnow()
        await self._session.flush()
        return config

    async def delete_config(self, config: PaymentScheduleConfig) -> None:
        """Delete a config; items and guarantee cascade."""
        await self._session.delete(config)
        await self._session.flush()

    async def list_items(self, config_id: uuid.UUID) -> list[ExpectedPaymentItem]:
        result = await self._session.execute(
            select(ExpectedPaymentItem)
            .where(ExpectedPaymentItem.payment_schedule_config_id == config_id)
            .order_by(ExpectedPaymentItem.sequence_order)
        )
        return list(result.scalars().all())

    async def replace_items(
        self, config_id: uuid.UUID, items: list[ExpectedPaymentItemInput]
    ) -> None:
        """Delete the stored items and insert the given list in one batch."""
        await self._session.execute(
            delete(ExpectedPaymentItem)
            .where(ExpectedPaymentItem.payment_schedule_config_id == config_id)
            .execution_options(synchronize_session="fetch")
        )
        if not items:
            return
        now = utcnow()
        await self._session.execute(
            insert(ExpectedPaymentItem),
            [
                {
                    "id": uuid.uuid4(),
                    "payment_schedule_config_id": config_id,
                    "created_at": now,
                    "updated_at": now,
                    **item.model_dump(),
                }
                for item in items
            ],
        )

    async def get_guarantee(self, config_id: uuid.UUID) -> CreditCardGuarantee | None:
        result = await self._session.execute(
            select(CreditCardGuarantee).where(
                CreditCardGuarantee.payment_schedule_config_id == config_id
            )
        )
        return result.scalar_one_or_none()

    async def upsert_guarantee(
        self, config_id: uuid.UUID, guarantee: CreditCardGuaranteeInput
    ) -> CreditCardGuarantee:
        """Update the config's guarantee if one exists, otherwise create it."""
        existing = await self.get_guarantee(config_id)
        now = utcnow()
        if existing is not None:
            for key, value in guarantee.model_dump().items():
                setattr(existing, key, value)
            existing.updated_at = now
            await self._session.flush()
            return existing

        row = CreditCardGuarantee(
            id=uuid.uuid4(),
            payment_schedule_config_id=config_id,
            created_at=now,
            updated_at=now,
            **guarantee.model_dump(),
        )
        self._session.add(row)
        await self._session.flush()
        return row
