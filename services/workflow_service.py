"""Сервис workflow постпродакшна: подсчёт прогресса и отметка шагов."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

from database.db import db
from database.models import Booking, Workflow
from services.workflow_steps import (
    CATEGORIES,
    COLUMNS,
    empty_step_map,
    step_map,
    validate_category,
    validate_step,
)
from utils.time_utils import now_iso

logger = logging.getLogger(__name__)


class WorkflowNotFoundError(LookupError):
    """Workflow с указанным id отсутствует."""


@dataclass
class WorkflowProgress:
    still: int = 0
    still_total: int = 0
    reel: int = 0
    reel_total: int = 0
    video: int = 0
    video_total: int = 0
    portrait: int = 0
    portrait_total: int = 0

    @property
    def completed(self) -> int:
        return self.still + self.reel + self.video + self.portrait

    @property
    def total(self) -> int:
        return self.still_total + self.reel_total + self.video_total + self.portrait_total

    def __add__(self, other: "WorkflowProgress") -> "WorkflowProgress":
        return WorkflowProgress(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )


# ─────────────────────────── Прогресс ────────────────────────────


def _applicable_steps(steps: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    return [step or {} for step in steps.values() if not (step or {}).get("notApplicable")]


def count_steps(steps: Mapping[str, Any]) -> tuple[int, int]:
    """Вернуть (выполнено, всего) без шагов с пометкой ``notApplicable``."""
    applicable = _applicable_steps(steps)
    done = sum(1 for step in applicable if step.get("completed") is True)
    return done, len(applicable)


def workflow_progress(workflow: Any | None) -> WorkflowProgress:
    """Счётчики выполненных шагов по четырём категориям."""
    progress = WorkflowProgress()
    if workflow is None:
        return progress
    for category in CATEGORIES:
        done, total = count_steps(step_map(workflow, category))
        setattr(progress, category, done)
        setattr(progress, f"{category}_total", total)
    return progress


def booking_progress(workflows: Iterable[Any]) -> WorkflowProgress:
    """Сумма прогресса всех workflow брони (без дедупликации)."""
    total = WorkflowProgress()
    for workflow in workflows:
        total = total + workflow_progress(workflow)
    return total


def progress_percentage(progress: WorkflowProgress) -> int:
    if progress.total == 0:
        return 0
    ratio = Decimal(100 * progress.completed) / Decimal(progress.total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def pending_step_count(workflows: Iterable[Any]) -> int:
    """Количество невыполненных шагов (для виджета «задачи в работе»)."""
    count = 0
    for workflow in workflows:
        for category in CATEGORIES:
            count += sum(
                1 for step in step_map(workflow, category).values()
                if not (step or {}).get("completed")
            )
    return count


def has_workflow_progress(workflow: Any) -> bool:
    return any(
        (step or {}).get("completed")
        for category in CATEGORIES
        for step in step_map(workflow, category).values()
    )


# ─────────────────────────── CRUD ────────────────────────────


def get_workflow_by_id(workflow_id: int) -> Workflow | None:
    return Workflow.get_or_none(Workflow.id == workflow_id)


def create_workflow(booking_id: int, event_id: int | None = None) -> Workflow:
    """Создать workflow с пустыми картами шагов."""
    if not Booking.get_or_none(Booking.id == booking_id):
        raise ValueError("Бронь не найдена")
    data = {COLUMNS[c]: empty_step_map(c) for c in CATEGORIES}
    workflow = Workflow.create(booking=booking_id, event=event_id, **data)
    logger.info(
        "✅ Workflow id=%s создан для брони id=%s (мероприятие %s)",
        workflow.id,
        booking_id,
        event_id,
    )
    return workflow


def get_or_create_booking_workflow(booking_id: int) -> Workflow:
    existing = (
        Workflow.select()
        .where((Workflow.booking == booking_id) & Workflow.event.is_null(True))
        .first()
    )
    if existing:
        return existing
    return create_workflow(booking_id)


def _require_workflow(workflow_id: int) -> Workflow:
    workflow = get_workflow_by_id(workflow_id)
    if workflow is None:
        logger.warning("❗ Workflow id=%s не найден", workflow_id)
        raise WorkflowNotFoundError(f"Workflow id={workflow_id} не найден")
    return workflow


def _update_step(
    workflow_id: int, category: str, step_key: str, updated_by: str | None, mutate
) -> Workflow:
    validate_category(category)
    validate_step(category, step_key)
    with db.atomic():
        workflow = _require_workflow(workflow_id)
        column = COLUMNS[category]
        steps = dict(getattr(workflow, column) or {})
        step = dict(steps.get(step_key) or {"completed": False})
        mutate(step)
        if updated_by:
            step["updated_by"] = updated_by
        steps[step_key] = step
        setattr(workflow, column, steps)
        workflow.updated_at = datetime.now()
        workflow.save()
    return workflow


def toggle_step(
    workflow_id: int, category: str, step_key: str, updated_by: str | None = None
) -> Workflow:
    """Переключить отметку выполнения шага."""

    def _toggle(step: dict) -> None:
        step["completed"] = not step.get("completed", False)
        if step["completed"]:
            step["completed_at"] = now_iso()
        else:
            step.pop("completed_at", None)

    workflow = _update_step(workflow_id, category, step_key, updated_by, _toggle)
    logger.info("✏️ Workflow id=%s: шаг %s.%s переключён", workflow_id, category, step_key)
    return workflow


def set_step_not_applicable(
    workflow_id: int,
    category: str,
    step_key: str,
    value: bool = True,
    updated_by: str | None = None,
) -> Workflow:
    def _mark(step: dict) -> None:
        step["notApplicable"] = bool(value)

    workflow = _update_step(workflow_id, category, step_key, updated_by, _mark)
    logger.info(
        "✏️ Workflow id=%s: шаг %s.%s notApplicable=%s",
        workflow_id,
        category,
        step_key,
        value,
    )
    return workflow


def set_step_notes(
    workflow_id: int,
    category: str,
    step_key: str,
    notes: str | None,
    updated_by: str | None = None,
) -> Workflow:
    def _note(step: dict) -> None:
        if notes:
            step["notes"] = notes
        else:
            step.pop("notes", None)

    return _update_step(workflow_id, category, step_key, updated_by, _note)
