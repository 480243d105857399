from datetime import date

from fastapi import APIRouter, Depends

from services import expense_service
from services.access_control import CurrentUser
from services.snapshot import Snapshot, SnapshotStore

from ..db import get_session, get_snapshot, get_store, route_guard
from ..schemas import ExpenseIn, ExpenseRead, ExpenseUpdate

router = APIRouter(prefix="/expenses", tags=["expenses"], dependencies=[Depends(get_session)])

guard = route_guard("/expenses")


@router.get("")
def list_expenses(
    type: str = "all",
    time: str = "all",
    booking_id: int | None = None,
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    expenses = expense_service.filter_expenses(
        snapshot.expenses, type_filter=type, time_filter=time, booking_id=booking_id
    )
    return {"expenses": expenses, "totals": expense_service.summarize_expenses(expenses)}


@router.get("/totals")
def totals(
    start: date | None = None,
    end: date | None = None,
    user: CurrentUser = Depends(guard),
):
    return expense_service.expense_totals(start, end)


@router.post("", response_model=ExpenseRead)
def add_expense(
    expense_in: ExpenseIn,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    expense = expense_service.add_expense(**expense_in.model_dump())
    store.invalidate("expenses")
    return expense


@router.put("/{expense_id}", response_model=ExpenseRead)
def edit_expense(
    expense_id: int,
    expense_in: ExpenseUpdate,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    expense = expense_service.get_expense_by_id(expense_id)
    if expense is None:
        raise expense_service.ExpenseNotFoundError(f"Расход id={expense_id} не найден")
    expense = expense_service.update_expense(expense, **expense_in.model_dump(exclude_unset=True))
    store.invalidate("expenses")
    return expense


@router.delete("/{expense_id}")
def remove_expense(
    expense_id: int,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    expense_service.delete_expense(expense_id)
    store.invalidate("expenses")
    return {"status": "deleted"}
