import datetime as dt
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ─────────────────────────── Клиенты ───────────────────────────


class ClientBase(BaseModel):
    name: str | None = None
    contact_number: str | None = None
    email: str | None = None
    alternate_contact: str | None = None
    notes: str | None = None


class ClientCreate(ClientBase):
    name: str
    contact_number: str
    allow_duplicate: bool = False


class ClientUpdate(ClientBase):
    pass


class ClientRead(ClientBase):
    id: int
    created_at: datetime | None = None

    class Config:
        from_attributes = True


# ─────────────────────────── Брони ───────────────────────────


class EventIn(BaseModel):
    id: int | None = None
    event_name: str = ""
    event_date: date | None = None
    time_slot: str = "morning"
    venue: str = ""
    notes: str | None = None
    photographers_required: int = 0
    videographers_required: int = 0
    drone_operators_required: int = 0
    editors_required: int = 0
    assigned_staff: list[int] = Field(default_factory=list)


class BookingIn(BaseModel):
    client_mode: str = "new"
    client_id: int | None = None
    client_name: str = ""
    contact_number: str = ""
    email: str | None = None
    alternate_contact: str | None = None
    client_notes: str | None = None
    booking_name: str | None = None
    package_amount: Decimal | None = None
    events: list[EventIn] = Field(default_factory=list)
    allow_duplicate: bool = False


class BookingRead(BaseModel):
    id: int
    client_id: int
    booking_name: str | None = None
    booking_date: date | None = None
    package_amount: Decimal | None = None
    notes: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class EventRead(BaseModel):
    id: int
    booking_id: int
    event_name: str
    event_date: date
    time_slot: str
    venue: str
    notes: str | None = None
    photographers_required: int = 0
    videographers_required: int = 0
    drone_operators_required: int = 0
    editors_required: int = 0

    class Config:
        from_attributes = True


class DeletionOptionsIn(BaseModel):
    client_payments: bool = True
    staff_agreed_payments: bool = True
    staff_made_payments: bool = True
    events: bool = True
    booking: bool = True


# ─────────────────────────── Workflow ───────────────────────────


class StepUpdate(BaseModel):
    category: str
    step_key: str
    action: str = "toggle"  # toggle | not_applicable | notes
    value: bool = True
    notes: str | None = None
    updated_by: str | None = None


class WorkflowRead(BaseModel):
    id: int
    booking_id: int
    event_id: int | None = None
    still_workflow: dict = Field(default_factory=dict)
    reel_workflow: dict = Field(default_factory=dict)
    video_workflow: dict = Field(default_factory=dict)
    portrait_workflow: dict = Field(default_factory=dict)

    class Config:
        from_attributes = True


# ─────────────────────────── Платежи ───────────────────────────


class ClientPaymentIn(BaseModel):
    client_id: int
    booking_id: int
    amount: Decimal
    payment_date: date | None = None
    payment_status: str = "received"
    payment_method: str | None = "cash"
    transaction_ref: str | None = None
    remarks: str | None = None


class ClientPaymentRead(BaseModel):
    id: int
    client_id: int
    booking_id: int | None = None
    amount: Decimal
    payment_date: date
    payment_status: str
    payment_method: str | None = None
    transaction_ref: str | None = None
    remarks: str | None = None

    class Config:
        from_attributes = True


class StaffPaymentIn(BaseModel):
    staff_id: int
    type: str
    amount: Decimal
    payment_date: date | None = None
    event_id: int | None = None
    payment_method: str | None = None
    remarks: str | None = None


class StaffPaymentRead(BaseModel):
    id: int
    staff_id: int
    type: str
    amount: Decimal
    payment_date: date
    event_id: int | None = None
    payment_method: str | None = None
    remarks: str | None = None

    class Config:
        from_attributes = True


class AgreedAmountIn(BaseModel):
    agreed_amount: Decimal


class TransactionIn(BaseModel):
    amount: Decimal
    transaction_date: date | None = None
    payment_mode: str | None = None
    transaction_ref: str | None = None
    notes: str | None = None


class PaymentRead(BaseModel):
    id: int
    event_id: int
    staff_id: int
    role: str
    agreed_amount: Decimal
    amount_paid: Decimal
    status: str
    payment_date: date | None = None
    payment_mode: str | None = None

    class Config:
        from_attributes = True


# ─────────────────────────── Расходы ───────────────────────────


class ExpenseIn(BaseModel):
    type: str = "general"
    amount: Decimal | None = None
    description: str | None = None
    date: dt.date | None = None
    payment_method: str = "cash"
    booking_id: int | None = None


class ExpenseUpdate(BaseModel):
    type: str | None = None
    amount: Decimal | None = None
    description: str | None = None
    date: dt.date | None = None
    payment_method: str | None = None
    booking_id: int | None = None


class ExpenseRead(BaseModel):
    id: int
    type: str
    amount: Decimal
    description: str
    date: dt.date
    payment_method: str
    booking_id: int | None = None

    class Config:
        from_attributes = True


# ─────────────────────────── Сотрудники ───────────────────────────


class StaffBase(BaseModel):
    name: str | None = None
    role: str | None = None
    contact_number: str | None = None
    email: str | None = None
    join_date: date | None = None
    status: str | None = None


class StaffCreate(StaffBase):
    name: str
    role: str
    contact_number: str


class StaffRead(StaffBase):
    id: int

    class Config:
        from_attributes = True


class AssignmentIn(BaseModel):
    staff_id: int
    role: str | None = None


class DataReceivedIn(BaseModel):
    received: bool = True
    received_by: str | None = None


class ChecklistItemIn(BaseModel):
    item: str
    staff_id: int | None = None
    notes: str | None = None


class LoginIn(BaseModel):
    email: str
    role: str = "staff"


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    role: str
    staff_id: int | None = None

    class Config:
        from_attributes = True
