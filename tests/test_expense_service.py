"""Tests for :mod:`services.expense_service`."""

from datetime import date
from decimal import Decimal

import pytest

from database.models import Expense
from services import expense_service as es
from services.records import ExpenseRecord
from services.validators import FormValidationError


def _rec(rec_id, day, amount="100", kind="general", method="cash", booking_id=None):
    return ExpenseRecord(
        id=rec_id,
        type=kind,
        amount=Decimal(amount),
        description="x",
        date=day,
        payment_method=method,
        booking_id=booking_id,
    )


def test_validate_expense_messages(in_memory_db):
    errors = es.validate_expense({"type": "booking", "amount": "0", "description": " "})

    assert errors == {
        "amount": "Amount must be greater than 0",
        "description": "Description is required",
        "date": "Date is required",
        "booking_id": "Please select a booking",
    }


def test_add_general_expense_ignores_booking(in_memory_db, make_booking):
    booking = make_booking()
    expense = es.add_expense(
        amount="1500.50", description="  Studio rent ", date=date(2025, 6, 1), booking_id=booking.id
    )

    assert expense.type == "general"
    assert expense.booking is None
    assert expense.description == "Studio rent"
    assert expense.payment_method == "cash"


def test_add_booking_expense(in_memory_db, make_booking):
    booking = make_booking()
    expense = es.add_expense(
        type="booking", amount=700, description="Travel", date=date(2025, 6, 1),
        payment_method="upi", booking_id=booking.id,
    )

    assert expense.booking_id == booking.id
    assert [e.id for e in es.get_expenses_by_booking(booking.id)] == [expense.id]


def test_add_expense_rejects_unknown_booking(in_memory_db):
    with pytest.raises(FormValidationError) as exc:
        es.add_expense(type="booking", amount=10, description="X", date=date(2025, 6, 1), booking_id=77)
    assert exc.value.errors == {"booking_id": "Booking not found"}
    assert Expense.select().count() == 0


def test_update_expense_switch_to_general(in_memory_db, make_booking):
    booking = make_booking()
    expense = es.add_expense(
        type="booking", amount=700, description="Travel", date=date(2025, 6, 1), booking_id=booking.id
    )

    es.update_expense(expense, type="general", amount="800")
    expense = es.get_expense_by_id(expense.id)

    assert expense.booking_id is None
    assert expense.amount == Decimal("800")


def test_update_expense_validation(in_memory_db):
    expense = es.add_expense(amount=5, description="Tea", date=date(2025, 6, 1))
    with pytest.raises(FormValidationError):
        es.update_expense(expense, amount=0)


def test_delete_expense(in_memory_db):
    expense = es.add_expense(amount=5, description="Tea", date=date(2025, 6, 1))
    es.delete_expense(expense.id)
    assert es.get_expense_by_id(expense.id) is None
    with pytest.raises(es.ExpenseNotFoundError):
        es.delete_expense(expense.id)


def test_filter_expenses_by_time_type_and_booking():
    today = date(2025, 6, 15)
    expenses = [
        _rec(1, date(2025, 6, 10)),
        _rec(2, date(2025, 6, 20), kind="booking", booking_id=3),
        _rec(3, date(2025, 5, 31)),
        _rec(4, date(2025, 1, 1), kind="booking", booking_id=4),
        _rec(5, date(2024, 12, 31)),
    ]

    this_month = es.filter_expenses(expenses, time_filter="this_month", today=today)
    assert [e.id for e in this_month] == [2, 1]
    last_month = es.filter_expenses(expenses, time_filter="last_month", today=today)
    assert [e.id for e in last_month] == [3]
    this_year = es.filter_expenses(expenses, time_filter="this_year", type_filter="booking", today=today)
    assert [e.id for e in this_year] == [2, 4]
    assert [e.id for e in es.filter_expenses(expenses, booking_id=4)] == [4]

    with pytest.raises(ValueError):
        es.filter_expenses(expenses, time_filter="yesterday")


def test_last_month_in_january():
    expenses = [_rec(1, date(2024, 12, 5)), _rec(2, date(2025, 1, 5))]
    result = es.filter_expenses(expenses, time_filter="last_month", today=date(2025, 1, 20))
    assert [e.id for e in result] == [1]


def test_summarize_expenses():
    totals = es.summarize_expenses(
        [
            _rec(1, date(2025, 6, 1), "100"),
            _rec(2, date(2025, 6, 1), "250", kind="booking", method="upi"),
            _rec(3, date(2025, 6, 1), "50", method="upi"),
        ]
    )

    assert totals.total == Decimal("400")
    assert totals.general == Decimal("150")
    assert totals.booking == Decimal("250")
    assert totals.by_method == {"cash": Decimal("100"), "upi": Decimal("300")}
    assert totals.count == 3


def test_expense_totals_period(in_memory_db):
    es.add_expense(amount=100, description="A", date=date(2025, 5, 31))
    es.add_expense(amount=200, description="B", date=date(2025, 6, 1))
    es.add_expense(amount=400, description="C", date=date(2025, 6, 30))

    totals = es.expense_totals(date(2025, 6, 1), date(2025, 6, 30))

    assert totals.total == Decimal("600")
    assert totals.count == 2
