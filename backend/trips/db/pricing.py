"""Pricing record persistence."""

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.db.models import ComponentPricing, utcnow
from backend.trips.models.pricing import ComponentPricingDTO


class SqlPricingStore:
    """SQL store for component pricing rows (one per component)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, pricing_id: uuid.UUID) -> ComponentPricing | None:
        return await self._session.get(ComponentPricing, pricing_id)

    async def find_by_component_id(self, component_id: uuid.UUID) -> ComponentPricing | None:
        result = await self._session.execute(
            select(ComponentPricing).where(ComponentPricing.component_id == component_id)
        )
        return result.scalar_one_or_none()

    async def find_many(self, component_ids: list[uuid.UUID]) -> dict[uuid.UUID, ComponentPricing]:
        if not component_ids:
            return {}
        result = await self._session.execute(
            select(ComponentPricing).where(ComponentPricing.component_id.in_(component_ids))
        )
        return {row.component_id: row for row in result.scalars().all()}

    async def create(
        self,
        component_id: uuid.UUID,
        *,
        pricing_type: str,
        currency: str,
        values: dict[str, Any],
    ) -> ComponentPricing:
        now = utcnow()
        pricing = ComponentPricing(
            id=uuid.uuid4(),
            component_id=component_id,
            pricing_type=pricing_type,
            currency=currency,
            created_at=now,
            updated_at=now,
            **values,
        )
        self._session.add(pricing)
        await self._session.flush()
        return pricing

    async def update(self, pricing: ComponentPricing, values: dict[str, Any]) -> ComponentPricing:
        """Apply a partial update and bump updated_at."""
        for key, value in values.items():
            setattr(pricing, key, value)
        pricing.updated_at = utcnow()
        await self._session.flush()
        return pricing


def pricing_to_dto(pricing: ComponentPricing | None) -> ComponentPricingDTO | None:
    return None if pricing is None else ComponentPricingDTO.model_validate(pricing, from_attributes=True)
