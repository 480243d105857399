import json
from datetime import date, datetime
from enum import Enum

from peewee import (
    Model,
    BooleanField,
    CharField,
    DateField,
    DateTimeField,
    DecimalField,
    ForeignKeyField,
    IntegerField,
    TextField,
)

from database.db import db


class JSONField(TextField):
    """Текстовая колонка с JSON-содержимым (карты шагов workflow)."""

    def db_value(self, value):
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    def python_value(self, value):
        if value is None or value == "":
            return {}
        return json.loads(value)


class BaseModel(Model):
    class Meta:
        database = db


class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    FULL_DAY = "fullDay"


class StaffRole(str, Enum):
    PHOTOGRAPHER = "photographer"
    VIDEOGRAPHER = "videographer"
    DRONE_OPERATOR = "drone_operator"
    EDITOR = "editor"
    MANAGER = "manager"
    COORDINATOR = "coordinator"


class StaffStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class StaffPaymentType(str, Enum):
    AGREED = "agreed"
    MADE = "made"


class ClientPaymentStatus(str, Enum):
    AGREED = "agreed"
    RECEIVED = "received"


class ExpenseType(str, Enum):
    GENERAL = "general"
    BOOKING = "booking"


class ExpenseMethod(str, Enum):
    CASH = "cash"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class Client(BaseModel):
    name = CharField(index=True)
    contact_number = CharField(index=True)
    email = CharField(null=True)
    alternate_contact = CharField(null=True)
    notes = TextField(null=True)
    created_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "clients"

    def __str__(self) -> str:
        return self.name


class Booking(BaseModel):
    client = ForeignKeyField(Client, backref="bookings")
    booking_name = CharField(null=True)
    booking_date = DateField(default=date.today)
    package_amount = DecimalField(max_digits=12, decimal_places=2, null=True)
    notes = TextField(null=True)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "bookings"

    def __str__(self) -> str:
        client = self.client.name if self.client_id else ""
        return f"{client}: {self.booking_name or self.id}"


class Event(BaseModel):
    booking = ForeignKeyField(Booking, backref="events")
    event_name = CharField()
    event_date = DateField(index=True)
    time_slot = CharField(default=TimeSlot.MORNING.value)
    venue = CharField()
    notes = TextField(null=True)
    photographers_required = IntegerField(default=0)
    videographers_required = IntegerField(default=0)
    drone_operators_required = IntegerField(default=0)
    editors_required = IntegerField(default=0)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "events"


class Staff(BaseModel):
    name = CharField(index=True)
    role = CharField()
    contact_number = CharField()
    email = CharField(null=True)
    join_date = DateField(default=date.today)
    status = CharField(default=StaffStatus.ACTIVE.value)
    created_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "staff"

    def __str__(self) -> str:
        return self.name


class StaffAssignment(BaseModel):
    event = ForeignKeyField(Event, backref="staff_assignments")
    staff = ForeignKeyField(Staff, backref="assignments")
    role = CharField()
    data_received = BooleanField(default=False)
    data_received_at = DateTimeField(null=True)
    data_received_by = CharField(null=True)
    created_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "staff_assignments"


class Workflow(BaseModel):
    booking = ForeignKeyField(Booking, backref="workflows")
    event = ForeignKeyField(Event, backref="workflows", null=True)
    still_workflow = JSONField(default=dict)
    reel_workflow = JSONField(default=dict)
    video_workflow = JSONField(default=dict)
    portrait_workflow = JSONField(default=dict)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "workflows"


class Payment(BaseModel):
    event = ForeignKeyField(Event, backref="payments")
    staff = ForeignKeyField(Staff, backref="payments")
    role = CharField()
    agreed_amount = DecimalField(max_digits=12, decimal_places=2, default=0)
    amount_paid = DecimalField(max_digits=12, decimal_places=2, default=0)
    status = CharField(default=PaymentStatus.PENDING.value)
    payment_date = DateField(null=True)
    payment_mode = CharField(null=True)
    transaction_ref = CharField(null=True)
    notes = TextField(null=True)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "payments"


class PaymentTransaction(BaseModel):
    payment = ForeignKeyField(Payment, backref="transactions")
    amount = DecimalField(max_digits=12, decimal_places=2)
    transaction_date = DateField(default=date.today)
    payment_mode = CharField(null=True)
    transaction_ref = CharField(null=True)
    notes = TextField(null=True)
    created_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "payment_transactions"


class StaffPaymentRecord(BaseModel):
    staff = ForeignKeyField(Staff, backref="payment_records")
    type = CharField()
    amount = DecimalField(max_digits=12, decimal_places=2)
    payment_date = DateField()
    payment_method = CharField(null=True)
    remarks = TextField(null=True)
    event = ForeignKeyField(Event, backref="staff_payment_records", null=True)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "staff_payment_records"


class ClientPaymentRecord(BaseModel):
    client = ForeignKeyField(Client, backref="payment_records")
    booking = ForeignKeyField(Booking, backref="client_payment_records", null=True)
    amount = DecimalField(max_digits=12, decimal_places=2)
    payment_date = DateField()
    payment_method = CharField(default="cash")
    payment_status = CharField(default=ClientPaymentStatus.RECEIVED.value)
    transaction_ref = CharField(null=True)
    remarks = TextField(null=True)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "client_payment_records"


class Expense(BaseModel):
    type = CharField(default=ExpenseType.GENERAL.value)
    amount = DecimalField(max_digits=12, decimal_places=2)
    description = TextField()
    date = DateField()
    payment_method = CharField(default=ExpenseMethod.CASH.value)
    booking = ForeignKeyField(Booking, backref="expenses", null=True)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "expenses"


class User(BaseModel):
    email = CharField(unique=True)
    name = CharField()
    role = CharField(default=UserRole.STAFF.value)
    staff = ForeignKeyField(Staff, backref="users", null=True)
    created_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "users"


class EventDataCollection(BaseModel):
    event = ForeignKeyField(Event, backref="data_collection")
    staff = ForeignKeyField(Staff, backref="data_collection", null=True)
    item = CharField()
    received = BooleanField(default=False)
    received_at = DateTimeField(null=True)
    received_by = CharField(null=True)
    notes = TextField(null=True)

    class Meta:
        table_name = "event_data_collection"
