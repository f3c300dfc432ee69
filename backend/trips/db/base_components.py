"""Base component persistence: the polymorphic row and its default pricing."""

import uuid
from typing import Any

from sqlalchemy import delete, exists, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.db.models import Component, ComponentPricing, ItineraryDay, utcnow
from backend.trips.errors import NotFoundError


class SqlComponentStore:
    """SQL store for base component rows.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def next_sequence_order(self, day_id: uuid.UUID) -> int:
        """Max sequence order on the day plus one, or 0 for an empty day."""
        result = await self._session.execute(
            select(func.max(Component.sequence_order)).where(Component.itinerary_day_id == day_id)
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def create(
        self,
        *,
        agency_id: uuid.UUID,
        component_type: str,
        values: dict[str, Any],
        currency: str,
        pricing_type: str,
    ) -> tuple[Component, ComponentPricing]:
        """Insert a base row plus its default pricing row.

        Args:
            agency_id: Owning agency
            component_type: Type tag
            values: Base column values (name, timing, location, ...)
            currency: Currency for both rows
            pricing_type: Pricing type for the auto-created pricing row

        Returns:
            (component, pricing)

        Raises:
            NotFoundError: If `itinerary_day_id` references a missing day.
        """
        day_id = values.get("itinerary_day_id")
        if day_id is not None:
            day = await self._session.get(ItineraryDay, day_id)
            if day is None:
                raise NotFoundError(f"Itinerary day {day_id} not found")

        sequence_order = values.get("sequence_order")
        if sequence_order is None:
            sequence_order = await self.next_sequence_order(day_id) if day_id is not None else 0

        now = utcnow()
        component = Component(
            **{**values, "sequence_order": sequence_order},
            id=uuid.uuid4(),
            agency_id=agency_id,
            component_type=component_type,
            currency=currency,
            created_at=now,
            updated_at=now,
        )
        self._session.add(component)

        pricing = ComponentPricing(
            id=uuid.uuid4(),
            component_id=component.id,
            total_price_cents=0,
            pricing_type=pricing_type,
            currency=currency,
            invoice_type="individual_item",
            created_at=now,
            updated_at=now,
        )
        self._session.add(pricing)
        await self._session.flush()

        return component, pricing

    async def get(self, component_id: uuid.UUID) -> Component | None:
        return await self._session.get(Component, component_id)

    async def find_by_id(self, component_id: uuid.UUID) -> Component:
        """Fetch a component or raise NotFoundError."""
        component = await self.get(component_id)
        if component is None:
            raise NotFoundError(f"Component {component_id} not found")
        return component

    async def find_by_day(self, day_id: uuid.UUID) -> list[Component]:
        result = await self._session.execute(
            select(Component)
            .where(Component.itinerary_day_id == day_id)
            .order_by(Component.sequence_order, Component.created_at)
        )
        return list(result.scalars().all())

    async def find_children(self, parent_id: uuid.UUID) -> list[Component]:
        result = await self._session.execute(
            select(Component)
            .where(Component.parent_component_id == parent_id)
            .order_by(Component.sequence_order)
        )
        return list(result.scalars().all())

    async def has_children(self, parent_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            select(exists().where(Component.parent_component_id == parent_id))
        )
        return bool(result.scalar())

    async def delete_children(self, parent_id: uuid.UUID) -> int:
        """Delete all derived children of a parent; details and pricing cascade.

        Returns:
            Number of child components deleted
        """
        result = await self._session.execute(
            select(Component.id).where(Component.parent_component_id == parent_id)
        )
        child_ids = list(result.scalars().all())
        if not child_ids:
            return 0
        await self._session.execute(
            delete(Component)
            .where(Component.id.in_(child_ids))
            .execution_options(synchronize_session=False)
        )
        return len(child_ids)

    async def update(self, component: Component, values: dict[str, Any]) -> Component:
        """Apply column values and bump updated_at."""
        for key, value in values.items():
            setattr(component, key, value)
        component.updated_at = utcnow()
        await self._session.flush()
        return component

    async def delete(self, component: Component) -> None:
        """Delete the base row; detail, pricing and children cascade."""
        await self._session.delete(component)
        await self._session.flush()

    async def bulk_create(self, rows: list[dict[str, Any]]) -> None:
        """Insert many base rows in one round trip.

        Rows must carry their own ids; timestamps are filled in here.
        """
        if not rows:
            return
        now = utcnow()
        await self._session.execute(
            insert(Component),
            [{"created_at": now, "updated_at": now, **row} for row in rows],
        )
