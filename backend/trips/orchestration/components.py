"""Component orchestration - atomic create/get/update/delete across base, detail and pricing."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.config import Settings, get_settings
from backend.trips.db.base_components import SqlComponentStore
from backend.trips.db.details import SqlDetailStore, detail_store_for
from backend.trips.db.itineraries import SqlItineraryStore
from backend.trips.db.models import Component
from backend.trips.db.pricing import SqlPricingStore, pricing_to_dto
from backend.trips.errors import InvalidInputError, NotFoundError
from backend.trips.models.common import ComponentType
from backend.trips.models.components import (
    BASE_UPDATE_FIELDS,
    NON_NULLABLE_FIELDS,
    PRICING_FIELDS,
    ComponentBaseDTO,
    ComponentCreate,
    ComponentUpdate,
    CustomCruiseCreate,
    CustomCruiseDTO,
    CustomCruiseUpdate,
    CustomTourCreate,
    CustomTourDTO,
    CustomTourUpdate,
    DiningCreate,
    DiningDTO,
    DiningUpdate,
    FlightCreate,
    FlightDTO,
    FlightUpdate,
    LodgingCreate,
    LodgingDetails,
    LodgingDTO,
    LodgingUpdate,
    OptionsCreate,
    OptionsDTO,
    OptionsUpdate,
    PortInfoCreate,
    PortInfoDTO,
    PortInfoUpdate,
    TourDayCreate,
    TourDayDTO,
    TourDayUpdate,
    TransportationCreate,
    TransportationDTO,
    TransportationUpdate,
)
from backend.trips.models.schedules import (
    CruiseScheduleRequest,
    CruiseScheduleResult,
    TourScheduleRequest,
    TourScheduleResult,
)
from backend.trips.orchestration.cruise_schedule import CruisePortScheduleGenerator
from backend.trips.orchestration.registry import (
    ComponentTypeSpec,
    build_component_dto,
    spec_for,
)
from backend.trips.orchestration.storage_cleanup import AttachmentCleaner, cleanup_after_delete
from backend.trips.orchestration.tour_schedule import TourDayScheduleGenerator
from backend.trips.orchestration.validation import lodging_datetimes
from backend.trips.utils.logging import StructuredScheduleLogger
from backend.trips.utils.metrics import PrometheusScheduleMetrics

logger = logging.getLogger(__name__)

_BASE_CREATE_FIELDS = frozenset(ComponentCreate.model_fields)


class ComponentOrchestrator:
    """Keeps a component's base row, detail row and pricing row consistent.

    Every mutating call runs in one transaction on the given session:
    commit on success, rollback on any error.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        settings: Settings | None = None,
        attachment_cleaner: AttachmentCleaner | None = None,
        log: StructuredScheduleLogger | None = None,
        metrics: PrometheusScheduleMetrics | None = None,
    ) -> None:
        self._session = session
        self._settings = settings or get_settings()
        self._attachment_cleaner = attachment_cleaner
        self._log = log or StructuredScheduleLogger()
        self._metrics = metrics or PrometheusScheduleMetrics()
        self._components = SqlComponentStore(session)
        self._pricing = SqlPricingStore(session)
        self._itineraries = SqlItineraryStore(session)

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

    # Generic dispatch

    async def create_component(
        self, component_type: ComponentType | str, payload: ComponentCreate | dict[str, Any]
    ) -> ComponentBaseDTO:
        """Create a component of any type.

        Args:
            component_type: Type tag selecting the detail store and pricing rules
            payload: Base fields, optional `details`, optional pricing fields

        Returns:
            Typed DTO with details and pricing

        Raises:
            InvalidInputError: Unknown type, missing/ownerless day, failed validation
            NotFoundError: The target day does not exist
        """
        type_spec = spec_for(component_type)
        data = self._coerce(type_spec.create_model, payload)
        async with self._transaction():
            dto = await self._create(type_spec, data)
        return dto

    async def get_component(self, component_id: UUID) -> ComponentBaseDTO:
        """Fetch any component as its typed DTO."""
        component = await self._components.find_by_id(component_id)
        return await self._load_dto(spec_for(component.component_type), component)

    async def update_component(
        self,
        component_type: ComponentType | str,
        component_id: UUID,
        patch: ComponentUpdate | dict[str, Any],
    ) -> ComponentBaseDTO:
        """Merge-patch a component: omitted keeps, value overwrites, null clears.

        Raises:
            NotFoundError: Unknown id, or the stored type differs from `component_type`
            InvalidInputError: Null on a non-nullable field or failed validation
        """
        type_spec = spec_for(component_type)
        data = self._coerce(type_spec.update_model, patch)
        async with self._transaction():
            component = await self._find_typed(type_spec, component_id)
            await self._update(type_spec, component, data)
            dto = await self._load_dto(type_spec, component)
        return dto

    async def delete_component(self, component_type: ComponentType | str, component_id: UUID) -> None:
        """Delete a component; detail, pricing and derived children cascade.

        Attachment cleanup runs after the commit and never fails the delete.
        """
        type_spec = spec_for(component_type)
        async with self._transaction():
            component = await self._find_typed(type_spec, component_id)
            await self._components.delete(component)

        await cleanup_after_delete(
            self._attachment_cleaner, component_id, log=self._log, metrics=self._metrics
        )

    async def list_day_components(self, day_id: UUID) -> list[ComponentBaseDTO]:
        """All components on an itinerary day, ordered by sequence."""
        await self._itineraries.require_day(day_id)
        return await self._load_dtos(await self._components.find_by_day(day_id))

    # Derived schedules

    async def generate_cruise_port_schedule(
        self, cruise_id: UUID, request: CruiseScheduleRequest | None = None
    ) -> CruiseScheduleResult:
        generator = CruisePortScheduleGenerator(
            self._session, settings=self._settings, log=self._log, metrics=self._metrics
        )
        return await generator.generate(cruise_id, request)

    async def get_cruise_port_schedule(self, cruise_id: UUID) -> list[PortInfoDTO]:
        """Derived port stops of a cruise, in day order."""
        type_spec = spec_for(ComponentType.custom_cruise)
        await self._find_typed(type_spec, cruise_id)
        children = await self._components.find_children(cruise_id)
        return await self._load_dtos(children)  # type: ignore[return-value]

    async def generate_tour_day_schedule(
        self, tour_id: UUID, request: TourScheduleRequest | None = None
    ) -> TourScheduleResult:
        generator = TourDayScheduleGenerator(
            self._session, settings=self._settings, log=self._log, metrics=self._metrics
        )
        return await generator.generate(tour_id, request)

    async def get_tour_day_schedule(self, tour_id: UUID) -> list[TourDayDTO]:
        """Derived tour days of a tour, in day order."""
        type_spec = spec_for(ComponentType.custom_tour)
        await self._find_typed(type_spec, tour_id)
        children = await self._components.find_children(tour_id)
        return await self._load_dtos(children)  # type: ignore[return-value]

    # Typed operations

    async def create_flight(self, payload: FlightCreate | dict[str, Any]) -> FlightDTO:
        return await self.create_component(ComponentType.flight, payload)  # type: ignore[return-value]

    async def get_flight(self, component_id: UUID) -> FlightDTO:
        return await self._get_typed(ComponentType.flight, component_id)  # type: ignore[return-value]

    async def update_flight(
        self, component_id: UUID, patch: FlightUpdate | dict[str, Any]
    ) -> FlightDTO:
        return await self.update_component(ComponentType.flight, component_id, patch)  # type: ignore[return-value]

    async def delete_flight(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.flight, component_id)

    async def create_lodging(self, payload: LodgingCreate | dict[str, Any]) -> LodgingDTO:
        return await self.create_component(ComponentType.lodging, payload)  # type: ignore[return-value]

    async def get_lodging(self, component_id: UUID) -> LodgingDTO:
        return await self._get_typed(ComponentType.lodging, component_id)  # type: ignore[return-value]

    async def update_lodging(
        self, component_id: UUID, patch: LodgingUpdate | dict[str, Any]
    ) -> LodgingDTO:
        return await self.update_component(ComponentType.lodging, component_id, patch)  # type: ignore[return-value]

    async def delete_lodging(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.lodging, component_id)

    async def create_transportation(
        self, payload: TransportationCreate | dict[str, Any]
    ) -> TransportationDTO:
        return await self.create_component(ComponentType.transportation, payload)  # type: ignore[return-value]

    async def get_transportation(self, component_id: UUID) -> TransportationDTO:
        return await self._get_typed(ComponentType.transportation, component_id)  # type: ignore[return-value]

    async def update_transportation(
        self, component_id: UUID, patch: TransportationUpdate | dict[str, Any]
    ) -> TransportationDTO:
        return await self.update_component(ComponentType.transportation, component_id, patch)  # type: ignore[return-value]

    async def delete_transportation(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.transportation, component_id)

    async def create_dining(self, payload: DiningCreate | dict[str, Any]) -> DiningDTO:
        return await self.create_component(ComponentType.dining, payload)  # type: ignore[return-value]

    async def get_dining(self, component_id: UUID) -> DiningDTO:
        return await self._get_typed(ComponentType.dining, component_id)  # type: ignore[return-value]

    async def update_dining(
        self, component_id: UUID, patch: DiningUpdate | dict[str, Any]
    ) -> DiningDTO:
        return await self.update_component(ComponentType.dining, component_id, patch)  # type: ignore[return-value]

    async def delete_dining(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.dining, component_id)

    async def create_port_info(self, payload: PortInfoCreate | dict[str, Any]) -> PortInfoDTO:
        return await self.create_component(ComponentType.port_info, payload)  # type: ignore[return-value]

    async def get_port_info(self, component_id: UUID) -> PortInfoDTO:
        return await self._get_typed(ComponentType.port_info, component_id)  # type: ignore[return-value]

    async def update_port_info(
        self, component_id: UUID, patch: PortInfoUpdate | dict[str, Any]
    ) -> PortInfoDTO:
        return await self.update_component(ComponentType.port_info, component_id, patch)  # type: ignore[return-value]

    async def delete_port_info(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.port_info, component_id)

    async def create_options(self, payload: OptionsCreate | dict[str, Any]) -> OptionsDTO:
        return await self.create_component(ComponentType.options, payload)  # type: ignore[return-value]

    async def get_options(self, component_id: UUID) -> OptionsDTO:
        return await self._get_typed(ComponentType.options, component_id)  # type: ignore[return-value]

    async def update_options(
        self, component_id: UUID, patch: OptionsUpdate | dict[str, Any]
    ) -> OptionsDTO:
        return await self.update_component(ComponentType.options, component_id, patch)  # type: ignore[return-value]

    async def delete_options(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.options, component_id)

    async def create_custom_cruise(
        self, payload: CustomCruiseCreate | dict[str, Any]
    ) -> CustomCruiseDTO:
        return await self.create_component(ComponentType.custom_cruise, payload)  # type: ignore[return-value]

    async def get_custom_cruise(self, component_id: UUID) -> CustomCruiseDTO:
        return await self._get_typed(ComponentType.custom_cruise, component_id)  # type: ignore[return-value]

    async def update_custom_cruise(
        self, component_id: UUID, patch: CustomCruiseUpdate | dict[str, Any]
    ) -> CustomCruiseDTO:
        return await self.update_component(ComponentType.custom_cruise, component_id, patch)  # type: ignore[return-value]

    async def delete_custom_cruise(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.custom_cruise, component_id)

    async def create_custom_tour(self, payload: CustomTourCreate | dict[str, Any]) -> CustomTourDTO:
        return await self.create_component(ComponentType.custom_tour, payload)  # type: ignore[return-value]

    async def get_custom_tour(self, component_id: UUID) -> CustomTourDTO:
        return await self._get_typed(ComponentType.custom_tour, component_id)  # type: ignore[return-value]

    async def update_custom_tour(
        self, component_id: UUID, patch: CustomTourUpdate | dict[str, Any]
    ) -> CustomTourDTO:
        return await self.update_component(ComponentType.custom_tour, component_id, patch)  # type: ignore[return-value]

    async def delete_custom_tour(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.custom_tour, component_id)

    async def create_tour_day(self, payload: TourDayCreate | dict[str, Any]) -> TourDayDTO:
        return await self.create_component(ComponentType.tour_day, payload)  # type: ignore[return-value]

    async def get_tour_day(self, component_id: UUID) -> TourDayDTO:
        return await self._get_typed(ComponentType.tour_day, component_id)  # type: ignore[return-value]

    async def update_tour_day(
        self, component_id: UUID, patch: TourDayUpdate | dict[str, Any]
    ) -> TourDayDTO:
        return await self.update_component(ComponentType.tour_day, component_id, patch)  # type: ignore[return-value]

    async def delete_tour_day(self, component_id: UUID) -> None:
        await self.delete_component(ComponentType.tour_day, component_id)

    # Internals

    @staticmethod
    def _coerce(model: type[Any], payload: Any) -> Any:
        if isinstance(payload, model):
            return payload
        if isinstance(payload, dict):
            try:
                return model.model_validate(payload)
            except ValidationError as e:
                raise InvalidInputError(f"Invalid {model.__name__} payload: {e}") from e
        raise InvalidInputError(f"Expected {model.__name__} payload")

    def _detail_store(self, type_spec: ComponentTypeSpec) -> SqlDetailStore[Any]:
        return detail_store_for(self._session, type_spec.component_type)

    async def _find_typed(self, type_spec: ComponentTypeSpec, component_id: UUID) -> Component:
        component = await self._components.find_by_id(component_id)
        if component.component_type != type_spec.component_type.value:
            raise NotFoundError(f"{type_spec.component_type.value} component {component_id} not found")
        return component

    async def _get_typed(self, component_type: ComponentType, component_id: UUID) -> ComponentBaseDTO:
        type_spec = spec_for(component_type)
        component = await self._find_typed(type_spec, component_id)
        return await self._load_dto(type_spec, component)

    async def _load_dto(self, type_spec: ComponentTypeSpec, component: Component) -> ComponentBaseDTO:
        details = await self._detail_store(type_spec).find_by_component_id(component.id)
        pricing = await self._pricing.find_by_component_id(component.id) if type_spec.priced else None
        return build_component_dto(
            type_spec.component_type, component, pricing=pricing_to_dto(pricing), details=details
        )

    async def _load_dtos(self, components: list[Component]) -> list[ComponentBaseDTO]:
        """Assemble DTOs for a mixed list with one detail query per type present."""
        by_type: dict[str, list[UUID]] = {}
        for component in components:
            by_type.setdefault(component.component_type, []).append(component.id)

        details: dict[UUID, Any] = {}
        for component_type, ids in by_type.items():
            details.update(
                await detail_store_for(self._session, ComponentType(component_type)).find_many(ids)
            )
        pricing = await self._pricing.find_many([c.id for c in components])

        return [
            build_component_dto(
                c.component_type,
                c,
                pricing=pricing_to_dto(pricing.get(c.id)),
                details=details.get(c.id),
            )
            for c in components
        ]

    def _validate_details(self, type_spec: ComponentTypeSpec, details: Any) -> None:
        if type_spec.validate is not None:
            type_spec.validate(details)

    async def _create(self, type_spec: ComponentTypeSpec, data: Any) -> ComponentBaseDTO:
        self._validate_details(type_spec, data.details)
        if type_spec.component_type is ComponentType.tour_day and (
            data.details is None or data.details.day_number is None
        ):
            raise InvalidInputError("day_number is required for tour days")

        agency_id = await self._itineraries.resolve_agency_id(data.itinerary_day_id)

        values = data.model_dump(include=_BASE_CREATE_FIELDS - {"currency"})
        currency = data.currency or self._settings.default_currency
        pricing_type = (
            data.pricing_type
            or type_spec.default_pricing_type
            or self._settings.default_pricing_type
        )

        if isinstance(data.details, LodgingDetails):
            start, end = lodging_datetimes(data.details)
            if values.get("start_datetime") is None:
                values["start_datetime"] = start
            if values.get("end_datetime") is None:
                values["end_datetime"] = end

        component, pricing = await self._components.create(
            agency_id=agency_id,
            component_type=type_spec.component_type.value,
            values=values,
            currency=currency,
            pricing_type=pricing_type,
        )

        details = None
        if data.details is not None:
            details = await self._detail_store(type_spec).create(component.id, data.details)

        if type_spec.priced:
            present = PRICING_FIELDS & data.model_fields_set
            if present:
                pricing = await self._pricing.update(pricing, self._pricing_values(data, present))

        logger.info(
            f"Created {type_spec.component_type.value} component",
            extra={"structured": {"component_id": str(component.id), "agency_id": str(agency_id)}},
        )
        return build_component_dto(
            type_spec.component_type, component, pricing=pricing_to_dto(pricing), details=details
        )

    async def _update(self, type_spec: ComponentTypeSpec, component: Component, data: Any) -> None:
        fields_set = data.model_fields_set
        base_keys = fields_set & BASE_UPDATE_FIELDS

        for key in sorted(base_keys & NON_NULLABLE_FIELDS):
            if getattr(data, key) is None:
                raise InvalidInputError(f"{key} cannot be null")

        if data.itinerary_day_id is not None and "itinerary_day_id" in base_keys:
            await self._itineraries.require_day(data.itinerary_day_id)

        store = self._detail_store(type_spec)
        derived_tour_day = (
            type_spec.component_type is ComponentType.tour_day
            and component.parent_component_id is not None
        )
        existing = None
        if data.details is not None or derived_tour_day:
            existing = await store.find_by_component_id(component.id)
        patch = data.details.model_dump(exclude_unset=True) if data.details is not None else {}

        # Locked derived days accept no edit of any field unless the same patch unlocks them
        if (
            derived_tour_day
            and existing is not None
            and existing.is_locked
            and patch.get("is_locked") is not False
        ):
            raise InvalidInputError("Tour day is locked; unlock it before editing")

        merged_details = None
        if data.details is not None:
            merged_details = existing.model_copy(update=patch) if existing else data.details
            self._validate_details(type_spec, merged_details)

        values = data.model_dump(include=base_keys)
        if isinstance(merged_details, LodgingDetails):
            start, end = lodging_datetimes(merged_details)
            if "start_datetime" not in base_keys and start is not None:
                values["start_datetime"] = start
            if "end_datetime" not in base_keys and end is not None:
                values["end_datetime"] = end

        await self._components.update(component, values)

        if data.details is not None:
            await store.upsert(component.id, data.details)

        if type_spec.priced:
            present = PRICING_FIELDS & fields_set
            if present:
                await self._patch_pricing(component, data, present)

    async def _patch_pricing(self, component: Component, data: Any, present: set[str]) -> None:
        """Patch existing pricing, or create it when absent and a total is given."""
        pricing = await self._pricing.find_by_component_id(component.id)
        values = self._pricing_values(data, present)
        if pricing is not None:
            await self._pricing.update(pricing, values)
            return

        if data.total_price_cents is None:
            return
        type_spec = spec_for(component.component_type)
        await self._pricing.create(
            component.id,
            pricing_type=(
                component.pricing_type
                or type_spec.default_pricing_type
                or self._settings.default_pricing_type
            ),
            currency=component.currency,
            values=values,
        )

    @staticmethod
    def _pricing_values(data: Any, present: set[str]) -> dict[str, Any]:
        values = data.model_dump(include=present)
        # invoice_type is NOT NULL; an explicit null keeps the stored value
        if values.get("invoice_type", "") is None:
            del values["invoice_type"]
        return values
