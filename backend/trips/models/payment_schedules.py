"""Payment schedule configuration models."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ScheduleType(str, Enum):
    """How a component's price is expected to be paid."""

    full = "full"
    deposit = "deposit"
    installments = "installments"
    guarantee = "guarantee"


class DepositType(str, Enum):
    percentage = "percentage"
    fixed_amount = "fixed_amount"


class PaymentItemStatus(str, Enum):
    """Status of an expected payment; declared from best to worst."""

    paid = "paid"
    pending = "pending"
    partial = "partial"
    overdue = "overdue"


class ExpectedPaymentItemInput(BaseModel):
    """One expected payment. `status` is derived from the amounts and due date when stored."""

    model_config = ConfigDict(use_enum_values=True)

    payment_name: str = Field(..., min_length=1)
    expected_amount_cents: int
    due_date: date | None = None
    status: PaymentItemStatus = Field(PaymentItemStatus.pending, validate_default=True)
    sequence_order: int = 0
    paid_amount_cents: int = 0
    is_locked: bool = False


class CreditCardGuaranteeInput(BaseModel):
    card_holder_name: str = Field(..., min_length=1)
    card_last4: str
    authorization_code: str = Field(..., min_length=1)
    authorization_date: datetime
    authorization_amount_cents: int


class PaymentScheduleInput(BaseModel):
    """Full payment schedule configuration, as supplied on create."""

    model_config = ConfigDict(use_enum_values=True)

    schedule_type: ScheduleType
    allow_partial_payments: bool = False
    deposit_type: DepositType | None = None
    deposit_percentage: float | None = None
    deposit_amount_cents: int | None = None
    expected_payment_items: list[ExpectedPaymentItemInput] | None = None
    credit_card_guarantee: CreditCardGuaranteeInput | None = None


class PaymentSchedulePatch(BaseModel):
    """Merge-patch of a stored configuration."""

    model_config = ConfigDict(use_enum_values=True)

    schedule_type: ScheduleType | None = None
    allow_partial_payments: bool | None = None
    deposit_type: DepositType | None = None
    deposit_percentage: float | None = None
    deposit_amount_cents: int | None = None
    expected_payment_items: list[ExpectedPaymentItemInput] | None = None
    credit_card_guarantee: CreditCardGuaranteeInput | None = None


class ExpectedPaymentItemDTO(ExpectedPaymentItemInput):
    id: UUID | None = None


class CreditCardGuaranteeDTO(CreditCardGuaranteeInput):
    id: UUID | None = None


class PaymentScheduleConfigDTO(BaseModel):
    """Payment schedule with computed deposit/balance amounts.

    `id` and timestamps are None for a configuration that was only
    validated, not stored.
    """

    id: UUID | None = None
    component_pricing_id: UUID
    schedule_type: ScheduleType
    allow_partial_payments: bool = False
    deposit_type: DepositType | None = None
    deposit_percentage: float | None = None
    deposit_amount_cents: int | None = None
    total_price_cents: int
    computed_deposit_cents: int | None = None
    balance_cents: int | None = None
    expected_payment_items: list[ExpectedPaymentItemDTO] = Field(default_factory=list)
    credit_card_guarantee: CreditCardGuaranteeDTO | None = None
    payment_status: PaymentItemStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
