from datetime import date
from decimal import Decimal

import pytest

from database.models import Booking, Client, Event, Staff, StaffAssignment, User


@pytest.fixture()
def make_client(in_memory_db):
    counter = {"n": 0}

    def factory(name: str = "Ravi Kumar", contact_number: str | None = None, **kw) -> Client:
        counter["n"] += 1
        phone = contact_number or f"98765{counter['n']:05d}"
        return Client.create(name=name, contact_number=phone, **kw)

    return factory


@pytest.fixture()
def make_booking(make_client):
    def factory(client: Client | None = None, package_amount="100000", **kw) -> Booking:
        client = client or make_client()
        amount = Decimal(package_amount) if package_amount is not None else None
        return Booking.create(client=client, package_amount=amount, **kw)

    return factory


@pytest.fixture()
def make_event(make_booking):
    def factory(
        booking: Booking | None = None,
        event_date: date | None = None,
        time_slot: str = "morning",
        **kw,
    ) -> Event:
        booking = booking or make_booking()
        kw.setdefault("event_name", "Wedding")
        kw.setdefault("venue", "Grand Hall")
        return Event.create(
            booking=booking,
            event_date=event_date or date.today(),
            time_slot=time_slot,
            **kw,
        )

    return factory


@pytest.fixture()
def make_staff(in_memory_db):
    counter = {"n": 0}

    def factory(name: str = "Anil", role: str = "photographer", **kw) -> Staff:
        counter["n"] += 1
        kw.setdefault("contact_number", f"91234{counter['n']:05d}")
        return Staff.create(name=f"{name} {counter['n']}", role=role, **kw)

    return factory


@pytest.fixture()
def make_assignment():
    def factory(event: Event, staff: Staff, role: str | None = None, **kw) -> StaffAssignment:
        return StaffAssignment.create(event=event, staff=staff, role=role or staff.role, **kw)

    return factory


@pytest.fixture()
def make_user(in_memory_db):
    counter = {"n": 0}

    def factory(role: str = "admin", staff: Staff | None = None, **kw) -> User:
        counter["n"] += 1
        kw.setdefault("email", f"user{counter['n']}@studio.test")
        kw.setdefault("name", staff.name if staff else f"User {counter['n']}")
        return User.create(role=role, staff=staff, **kw)

    return factory
