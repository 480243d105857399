"""Плоские записи снимка данных студии.

Каждая запись является dataclass с ``from_model``; вычислительные модули работают
только с ними и не обращаются к базе.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from database import models
from utils.money import to_decimal


@dataclass
class ClientRecord:
    id: int
    name: str
    contact_number: str
    email: str | None = None
    alternate_contact: str | None = None
    notes: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, client: models.Client) -> "ClientRecord":
        return cls(
            id=client.id,
            name=client.name,
            contact_number=client.contact_number,
            email=client.email,
            alternate_contact=client.alternate_contact,
            notes=client.notes,
            created_at=client.created_at,
        )


@dataclass
class BookingRecord:
    id: int
    client_id: int
    booking_name: str | None = None
    booking_date: date | None = None
    package_amount: Decimal | None = None
    notes: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, booking: models.Booking) -> "BookingRecord":
        return cls(
            id=booking.id,
            client_id=booking.client_id,
            booking_name=booking.booking_name,
            booking_date=booking.booking_date,
            package_amount=(
                to_decimal(booking.package_amount)
                if booking.package_amount is not None
                else None
            ),
            notes=booking.notes,
            created_at=booking.created_at,
        )


@dataclass
class EventRecord:
    id: int
    booking_id: int
    event_date: date
    time_slot: str
    event_name: str = ""
    venue: str = ""
    notes: str | None = None
    photographers_required: int = 0
    videographers_required: int = 0
    drone_operators_required: int = 0
    editors_required: int = 0

    @classmethod
    def from_model(cls, event: models.Event) -> "EventRecord":
        return cls(
            id=event.id,
            booking_id=event.booking_id,
            event_date=event.event_date,
            time_slot=event.time_slot,
            event_name=event.event_name,
            venue=event.venue,
            notes=event.notes,
            photographers_required=event.photographers_required or 0,
            videographers_required=event.videographers_required or 0,
            drone_operators_required=event.drone_operators_required or 0,
            editors_required=event.editors_required or 0,
        )


@dataclass
class StaffRecord:
    id: int
    name: str
    role: str
    contact_number: str = ""
    email: str | None = None
    join_date: date | None = None
    status: str = "active"

    @classmethod
    def from_model(cls, staff: models.Staff) -> "StaffRecord":
        return cls(
            id=staff.id,
            name=staff.name,
            role=staff.role,
            contact_number=staff.contact_number,
            email=staff.email,
            join_date=staff.join_date,
            status=staff.status,
        )


@dataclass
class AssignmentRecord:
    id: int
    event_id: int
    staff_id: int
    role: str | None = None
    data_received: bool = False
    data_received_at: datetime | None = None
    data_received_by: str | None = None

    @classmethod
    def from_model(cls, assignment: models.StaffAssignment) -> "AssignmentRecord":
        return cls(
            id=assignment.id,
            event_id=assignment.event_id,
            staff_id=assignment.staff_id,
            role=assignment.role,
            data_received=bool(assignment.data_received),
            data_received_at=assignment.data_received_at,
            data_received_by=assignment.data_received_by,
        )


@dataclass
class WorkflowRecord:
    id: int
    booking_id: int
    event_id: int | None = None
    still_workflow: dict[str, Any] = field(default_factory=dict)
    reel_workflow: dict[str, Any] = field(default_factory=dict)
    video_workflow: dict[str, Any] = field(default_factory=dict)
    portrait_workflow: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_model(cls, workflow: models.Workflow) -> "WorkflowRecord":
        return cls(
            id=workflow.id,
            booking_id=workflow.booking_id,
            event_id=workflow.event_id,
            still_workflow=dict(workflow.still_workflow or {}),
            reel_workflow=dict(workflow.reel_workflow or {}),
            video_workflow=dict(workflow.video_workflow or {}),
            portrait_workflow=dict(workflow.portrait_workflow or {}),
        )


@dataclass
class PaymentRecord:
    """Строка помероприятийного реестра выплат сотруднику."""

    id: int
    event_id: int
    staff_id: int
    role: str = ""
    agreed_amount: Decimal = Decimal("0")
    amount_paid: Decimal = Decimal("0")
    status: str = "pending"
    payment_date: date | None = None
    payment_mode: str | None = None

    @classmethod
    def from_model(cls, payment: models.Payment) -> "PaymentRecord":
        return cls(
            id=payment.id,
            event_id=payment.event_id,
            staff_id=payment.staff_id,
            role=payment.role,
            agreed_amount=to_decimal(payment.agreed_amount),
            amount_paid=to_decimal(payment.amount_paid),
            status=payment.status,
            payment_date=payment.payment_date,
            payment_mode=payment.payment_mode,
        )


@dataclass
class StaffPaymentEntry:
    id: int
    staff_id: int
    type: str
    amount: Decimal
    payment_date: date
    event_id: int | None = None
    payment_method: str | None = None
    remarks: str | None = None

    @classmethod
    def from_model(cls, record: models.StaffPaymentRecord) -> "StaffPaymentEntry":
        return cls(
            id=record.id,
            staff_id=record.staff_id,
            type=record.type,
            amount=to_decimal(record.amount),
            payment_date=record.payment_date,
            event_id=record.event_id,
            payment_method=record.payment_method,
            remarks=record.remarks,
        )


@dataclass
class ClientPaymentEntry:
    id: int
    client_id: int
    booking_id: int | None
    amount: Decimal
    payment_date: date
    payment_status: str
    payment_method: str = "cash"
    transaction_ref: str | None = None
    remarks: str | None = None

    @classmethod
    def from_model(cls, record: models.ClientPaymentRecord) -> "ClientPaymentEntry":
        return cls(
            id=record.id,
            client_id=record.client_id,
            booking_id=record.booking_id,
            amount=to_decimal(record.amount),
            payment_date=record.payment_date,
            payment_status=record.payment_status,
            payment_method=record.payment_method,
            transaction_ref=record.transaction_ref,
            remarks=record.remarks,
        )


@dataclass
class ExpenseRecord:
    id: int
    type: str
    amount: Decimal
    description: str
    date: date
    payment_method: str
    booking_id: int | None = None

    @classmethod
    def from_model(cls, expense: models.Expense) -> "ExpenseRecord":
        return cls(
            id=expense.id,
            type=expense.type,
            amount=to_decimal(expense.amount),
            description=expense.description,
            date=expense.date,
            payment_method=expense.payment_method,
            booking_id=expense.booking_id,
        )


@dataclass
class TransactionRecord:
    id: int
    payment_id: int
    amount: Decimal
    transaction_date: date
    payment_mode: str | None = None
    transaction_ref: str | None = None
    notes: str | None = None

    @classmethod
    def from_model(cls, tx: models.PaymentTransaction) -> "TransactionRecord":
        return cls(
            id=tx.id,
            payment_id=tx.payment_id,
            amount=to_decimal(tx.amount),
            transaction_date=tx.transaction_date,
            payment_mode=tx.payment_mode,
            transaction_ref=tx.transaction_ref,
            notes=tx.notes,
        )
