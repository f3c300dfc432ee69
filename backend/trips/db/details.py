"""Per-type detail stores - one adapter per component type, keyed by component id."""

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import JSON, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.db.models import (
    Base,
    CustomCruiseDetailRow,
    CustomTourDetailRow,
    DiningDetailRow,
    FlightDetailRow,
    LodgingDetailRow,
    OptionsDetailRow,
    PortInfoDetailRow,
    TourDayDetailRow,
    TransportationDetailRow,
    utcnow,
)
from backend.trips.models.common import ComponentType
from backend.trips.models.components import (
    CustomCruiseDetails,
    CustomTourDetails,
    DetailModel,
    DiningDetails,
    FlightDetails,
    LodgingDetails,
    OptionsDetails,
    PortInfoDetails,
    TourDayDetails,
    TransportationDetails,
)

DetailT = TypeVar("DetailT", bound=DetailModel)


class SqlDetailStore(Generic[DetailT]):
    """Stores one detail model type in its table.

    Detail model field names match the table's column names; JSON columns
    are written in JSON mode, everything else as Python values.
    """

    def __init__(
        self,
        session: AsyncSession,
        row_cls: type[Base],
        detail_cls: type[DetailT],
    ) -> None:
        self._session = session
        self._row_cls = row_cls
        self._detail_cls = detail_cls
        columns = row_cls.__table__.columns  # type: ignore[attr-defined]
        self._json_fields = {c.name for c in columns if isinstance(c.type, JSON)}
        self._required_fields = {
            c.name for c in columns if not c.nullable and c.name in detail_cls.model_fields
        }

    @property
    def detail_cls(self) -> type[DetailT]:
        return self._detail_cls

    def _values(self, payload: DetailT, *, exclude_unset: bool) -> dict[str, Any]:
        values = payload.model_dump(exclude_unset=exclude_unset)
        json_values = payload.model_dump(
            mode="json",
            exclude_unset=exclude_unset,
            include=self._json_fields & values.keys(),
        )
        values.update(json_values)
        # Null on a NOT NULL column means "keep" on patch, "use default" on create
        for name in self._required_fields:
            if name in values and values[name] is None:
                del values[name]
        return values

    def _to_model(self, row: Any) -> DetailT:
        return self._detail_cls.model_validate(row, from_attributes=True)

    async def _get_row(self, component_id: uuid.UUID) -> Any:
        return await self._session.get(self._row_cls, component_id)

    async def find_by_component_id(self, component_id: uuid.UUID) -> DetailT | None:
        row = await self._get_row(component_id)
        return None if row is None else self._to_model(row)

    async def find_many(self, component_ids: list[uuid.UUID]) -> dict[uuid.UUID, DetailT]:
        """Load details for many components in one query."""
        if not component_ids:
            return {}
        row_cls: Any = self._row_cls
        result = await self._session.execute(
            select(row_cls).where(row_cls.component_id.in_(component_ids))
        )
        return {row.component_id: self._to_model(row) for row in result.scalars().all()}

    async def create(self, component_id: uuid.UUID, payload: DetailT) -> DetailT:
        now = utcnow()
        row = self._row_cls(
            component_id=component_id,
            created_at=now,
            updated_at=now,
            **self._values(payload, exclude_unset=False),
        )
        self._session.add(row)
        await self._session.flush()
        return self._to_model(row)

    async def upsert(self, component_id: uuid.UUID, payload: DetailT) -> DetailT:
        """Create the detail row if absent, otherwise merge-patch the set fields."""
        row = await self._get_row(component_id)
        if row is None:
            return await self.create(component_id, payload)

        for key, value in self._values(payload, exclude_unset=True).items():
            setattr(row, key, value)
        row.updated_at = utcnow()
        await self._session.flush()
        return self._to_model(row)

    async def bulk_create(self, items: list[tuple[uuid.UUID, DetailT]]) -> None:
        """Insert many detail rows in one round trip."""
        if not items:
            return
        now = utcnow()
        rows = [
            {
                "component_id": component_id,
                "created_at": now,
                "updated_at": now,
                **self._values(payload, exclude_unset=False),
            }
            for component_id, payload in items
        ]
        await self._session.execute(insert(self._row_cls), rows)


DETAIL_TABLES: dict[ComponentType, tuple[type[Base], type[DetailModel]]] = {
    ComponentType.flight: (FlightDetailRow, FlightDetails),
    ComponentType.lodging: (LodgingDetailRow, LodgingDetails),
    ComponentType.transportation: (TransportationDetailRow, TransportationDetails),
    ComponentType.dining: (DiningDetailRow, DiningDetails),
    ComponentType.port_info: (PortInfoDetailRow, PortInfoDetails),
    ComponentType.options: (OptionsDetailRow, OptionsDetails),
    ComponentType.custom_cruise: (CustomCruiseDetailRow, CustomCruiseDetails),
    ComponentType.custom_tour: (CustomTourDetailRow, CustomTourDetails),
    ComponentType.tour_day: (TourDayDetailRow, TourDayDetails),
}


def detail_store_for(session: AsyncSession, component_type: ComponentType) -> SqlDetailStore[Any]:
    """Build the detail store adapter for a component type."""
    row_cls, detail_cls = DETAIL_TABLES[component_type]
    return SqlDetailStore(session, row_cls, detail_cls)
