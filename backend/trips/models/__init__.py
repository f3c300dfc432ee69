"""Models package - re-exports for convenience."""

from backend.trips.models.common import (
    ComponentStatus,
    ComponentType,
    Coordinates,
    InvoiceType,
    PortType,
    PricingType,
    TransportationSubtype,
)
from backend.trips.models.components import (
    ComponentDTO,
    CruisePortCall,
    CustomCruiseCreate,
    CustomCruiseDetails,
    CustomCruiseDTO,
    CustomTourCreate,
    CustomTourDetails,
    CustomTourDTO,
    DiningCreate,
    DiningDetails,
    DiningDTO,
    FlightCreate,
    FlightDetails,
    FlightDTO,
    LodgingCreate,
    LodgingDetails,
    LodgingDTO,
    OptionsCreate,
    OptionsDetails,
    OptionsDTO,
    PortInfoCreate,
    PortInfoDetails,
    PortInfoDTO,
    TourDayCreate,
    TourDayDetails,
    TourDayDTO,
    TourItineraryDay,
    TransportationCreate,
    TransportationDetails,
    TransportationDTO,
)
from backend.trips.models.payment_schedules import (
    PaymentItemStatus,
    PaymentScheduleConfigDTO,
    PaymentScheduleInput,
    PaymentSchedulePatch,
    ScheduleType,
)
from backend.trips.models.pricing import ComponentPricingDTO
from backend.trips.models.schedules import (
    CruiseScheduleRequest,
    CruiseScheduleResult,
    TourScheduleRequest,
    TourScheduleResult,
)

__all__ = [
    "ComponentDTO",
    "ComponentPricingDTO",
    "ComponentStatus",
    "ComponentType",
    "Coordinates",
    "CruisePortCall",
    "CruiseScheduleRequest",
    "CruiseScheduleResult",
    "CustomCruiseCreate",
    "CustomCruiseDTO",
    "CustomCruiseDetails",
    "CustomTourCreate",
    "CustomTourDTO",
    "CustomTourDetails",
    "DiningCreate",
    "DiningDTO",
    "DiningDetails",
    "FlightCreate",
    "FlightDTO",
    "FlightDetails",
    "InvoiceType",
    "LodgingCreate",
    "LodgingDTO",
    "LodgingDetails",
    "OptionsCreate",
    "OptionsDTO",
    "OptionsDetails",
    "PaymentItemStatus",
    "PaymentScheduleConfigDTO",
    "PaymentScheduleInput",
    "PaymentSchedulePatch",
    "PortInfoCreate",
    "PortInfoDTO",
    "PortInfoDetails",
    "PortType",
    "PricingType",
    "ScheduleType",
    "TourDayCreate",
    "TourDayDTO",
    "TourDayDetails",
    "TourItineraryDay",
    "TourScheduleRequest",
    "TourScheduleResult",
    "TransportationCreate",
    "TransportationDTO",
    "TransportationDetails",
    "TransportationSubtype",
]
