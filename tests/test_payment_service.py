from datetime import date, timedelta
from decimal import Decimal

import pytest

from services import payment_service as ps
from services.records import EventRecord, PaymentRecord, StaffRecord, TransactionRecord

TODAY = date(2025, 6, 30)


def _payment(pay_id, staff_id, agreed, paid, event_id=1):
    return PaymentRecord(
        id=pay_id,
        event_id=event_id,
        staff_id=staff_id,
        agreed_amount=Decimal(agreed),
        amount_paid=Decimal(paid),
    )


def _event(event_id, days_ago):
    return EventRecord(
        id=event_id, booking_id=1, event_date=TODAY - timedelta(days=days_ago), time_slot="morning"
    )


@pytest.mark.parametrize(
    "agreed, paid, status",
    [("1000", "0", "pending"), ("1000", "400", "partial"), ("1000", "1000", "paid"), ("0", "0", "pending")],
)
def test_derive_payment_status(agreed, paid, status):
    assert ps.derive_payment_status(agreed, paid) == status


def test_remaining_balance_never_negative():
    assert ps.remaining_balance("1000", "1200") == Decimal("0")
    assert ps.remaining_balance("1000", "250") == Decimal("750")


def test_overdue_after_grace_period():
    payment = _payment(1, 1, "1000", "0")
    assert ps.is_payment_overdue(payment, _event(1, 31), TODAY, grace_days=30) is True
    assert ps.is_payment_overdue(payment, _event(1, 30), TODAY, grace_days=30) is False
    assert ps.is_payment_overdue(_payment(1, 1, "1000", "1000"), _event(1, 90), TODAY, 30) is False
    assert ps.is_payment_overdue(payment, None, TODAY, 30) is False


def test_group_payments_by_staff_orders_by_status():
    staff = [
        StaffRecord(id=1, name="Zoya", role="editor"),
        StaffRecord(id=2, name="Anil", role="photographer"),
        StaffRecord(id=3, name="Bina", role="photographer"),
    ]
    events = [_event(1, 60), _event(2, 1)]
    payments = [
        _payment(1, 1, "1000", "0", event_id=1),
        _payment(2, 2, "1000", "1000", event_id=2),
        _payment(3, 3, "1000", "500", event_id=2),
        _payment(4, 99, "1000", "0", event_id=2),
    ]
    txs = [TransactionRecord(id=1, payment_id=3, amount=Decimal("500"), transaction_date=TODAY)]

    groups = ps.group_payments_by_staff(payments, txs, events, staff, TODAY)

    assert [(g.staff_name, g.overall_status) for g in groups] == [
        ("Zoya", "overdue"),
        ("Bina", "partial"),
        ("Anil", "paid"),
    ]
    bina = groups[1]
    assert bina.total_balance == Decimal("500")
    assert bina.event_count == 1
    assert [t.id for t in bina.transactions[3]] == [1]


def test_validate_payment_amount():
    assert ps.validate_payment_amount("250", "1000", "500") == Decimal("250")
    with pytest.raises(ps.PaymentValidationError):
        ps.validate_payment_amount("0", "1000", "0")
    with pytest.raises(ps.PaymentValidationError, match="remaining balance"):
        ps.validate_payment_amount("600", "1000", "500")


def test_validate_agreed_amount():
    with pytest.raises(ps.PaymentValidationError):
        ps.validate_agreed_amount("0")
    with pytest.raises(ps.PaymentValidationError):
        ps.validate_agreed_amount("10000000")
    assert ps.validate_agreed_amount("9999999.99") == Decimal("9999999.99")


def test_record_transaction_updates_payment(in_memory_db, make_event, make_staff):
    event = make_event()
    member = make_staff()
    payment = ps.create_payment(event.id, member.id, member.role)
    ps.set_agreed_amount(payment.id, "10000")

    ps.record_transaction(payment.id, "4000", payment_mode="upi", transaction_ref="UTR1")
    payment = ps.get_payment_by_id(payment.id)
    assert payment.amount_paid == Decimal("4000")
    assert payment.status == "partial"
    assert payment.payment_mode == "upi"

    ps.record_transaction(payment.id, "6000")
    payment = ps.get_payment_by_id(payment.id)
    assert payment.status == "paid"
    assert ps.get_transactions(payment.id).count() == 2

    with pytest.raises(ps.PaymentValidationError):
        ps.record_transaction(payment.id, "1")


def test_record_transaction_unknown_payment(in_memory_db):
    with pytest.raises(ps.PaymentNotFoundError):
        ps.record_transaction(404, "10")


def test_delete_payment_removes_transactions(in_memory_db, make_event, make_staff):
    event = make_event()
    member = make_staff()
    payment = ps.create_payment(event.id, member.id, member.role, agreed_amount="500")
    ps.record_transaction(payment.id, "100")

    ps.delete_payment(payment.id)

    assert ps.get_payment_by_id(payment.id) is None
    assert ps.get_transactions().count() == 0
