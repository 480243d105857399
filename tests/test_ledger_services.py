"""Учёт agreed/made у сотрудников и agreed/received у клиентов."""

from datetime import date
from decimal import Decimal

import pytest

from services import client_payment_service as cps
from services import staff_payment_service as sps
from services.validators import FormValidationError

TODAY = date(2025, 6, 15)


# ─────────────────────────── Сотрудники ───────────────────────────


def test_validate_staff_payment_errors(in_memory_db):
    errors = sps.validate_staff_payment(None, "bonus", "abc", None, today=TODAY)

    assert set(errors) == {"staff_id", "type", "amount", "payment_date"}


def test_staff_made_payment_requires_method(in_memory_db, make_staff):
    member = make_staff()
    errors = sps.validate_staff_payment(member.id, "made", "500", TODAY, today=TODAY)
    assert errors == {"payment_method": "Payment method is required"}


@pytest.mark.parametrize("amount", ["0", "1000000"])
def test_staff_amount_bounds(in_memory_db, make_staff, amount):
    member = make_staff()
    errors = sps.validate_staff_payment(member.id, "agreed", amount, TODAY, today=TODAY)
    assert "amount" in errors


def test_staff_payment_date_limit(in_memory_db, make_staff):
    member = make_staff()
    errors = sps.validate_staff_payment(
        member.id, "agreed", "10", date(2026, 6, 16), today=TODAY
    )
    assert errors == {"payment_date": "Date cannot be more than 1 year ahead"}
    assert sps.validate_staff_payment(member.id, "agreed", "10", date(2026, 6, 15), today=TODAY) == {}


def test_add_update_delete_staff_payment(in_memory_db, make_staff, make_event):
    member = make_staff()
    event = make_event()
    record = sps.add_staff_payment(
        member.id, "agreed", "12000", TODAY, event_id=event.id, remarks="Wedding", today=TODAY
    )
    assert record.event_id == event.id
    assert [r.id for r in sps.get_staff_payment_records(member.id)] == [record.id]

    sps.update_staff_payment(record, amount="15000")
    assert sps.get_staff_payment_record(record.id).amount == Decimal("15000")

    with pytest.raises(FormValidationError):
        sps.update_staff_payment(record, type="made")

    assert sps.delete_staff_payment(record.id) is True
    assert sps.delete_staff_payment(record.id) is False


def test_add_staff_payment_unknown_event(in_memory_db, make_staff):
    member = make_staff()
    with pytest.raises(FormValidationError) as exc:
        sps.add_staff_payment(member.id, "agreed", "100", TODAY, event_id=555, today=TODAY)
    assert exc.value.errors == {"event_id": "Event not found"}


# ─────────────────────────── Клиенты ───────────────────────────


def test_client_received_payment_within_balance(in_memory_db, make_booking):
    booking = make_booking(package_amount="50000")
    client_id = booking.client_id

    cps.add_client_payment(client_id, booking.id, "30000", TODAY, payment_method="upi", today=TODAY)
    assert cps.booking_received_balance(booking) == Decimal("20000")

    with pytest.raises(FormValidationError) as exc:
        cps.add_client_payment(client_id, booking.id, "25000", TODAY, today=TODAY)
    assert "remaining balance" in exc.value.errors["amount"]

    cps.add_client_payment(client_id, booking.id, "20000", TODAY, today=TODAY)
    assert cps.booking_received_balance(booking) == Decimal("0")


def test_client_agreed_not_limited_by_balance(in_memory_db, make_booking):
    booking = make_booking(package_amount="1000")
    record = cps.add_client_payment(
        booking.client_id, booking.id, "90000", TODAY,
        payment_status="agreed", payment_method=None, today=TODAY,
    )
    assert record.payment_status == "agreed"
    assert record.payment_method == "cash"


def test_client_payment_booking_must_belong_to_client(in_memory_db, make_booking, make_client):
    booking = make_booking()
    other = make_client(name="Other")

    with pytest.raises(FormValidationError) as exc:
        cps.add_client_payment(other.id, booking.id, "10", TODAY, today=TODAY)
    assert exc.value.errors["booking_id"] == "Booking does not belong to the selected client"


def test_client_payment_validation_errors(in_memory_db, make_booking):
    booking = make_booking()
    with pytest.raises(FormValidationError) as exc:
        cps.add_client_payment(
            booking.client_id, booking.id, "0", None,
            payment_status="refund", payment_method="cheque", today=TODAY,
        )
    assert set(exc.value.errors) == {"payment_status", "amount", "payment_date"}

    with pytest.raises(FormValidationError) as exc:
        cps.add_client_payment(
            booking.client_id, booking.id, "10", TODAY, payment_method="cheque", today=TODAY
        )
    assert set(exc.value.errors) == {"payment_method"}


def test_update_and_delete_client_payment(in_memory_db, make_booking):
    booking = make_booking()
    record = cps.add_client_payment(booking.client_id, booking.id, "100", TODAY, today=TODAY)

    cps.update_client_payment(record, amount="150", remarks="advance")
    record = cps.get_client_payment_record(record.id)
    assert record.amount == Decimal("150")
    assert record.remarks == "advance"

    with pytest.raises(FormValidationError):
        cps.update_client_payment(record, amount="-1")

    assert [r.id for r in cps.get_client_payment_records(booking_id=booking.id)] == [record.id]
    assert cps.delete_client_payment(record.id) is True
    assert cps.delete_client_payment(record.id) is False
