"""Общая схема шагов постобработки.

Подсчёт прогресса, вычисление статуса и обновление шагов берут ключи
шагов отсюда.
"""

from __future__ import annotations

from typing import Any, Mapping

STILL = "still"
REEL = "reel"
VIDEO = "video"
PORTRAIT = "portrait"

CATEGORIES: tuple[str, ...] = (STILL, REEL, VIDEO, PORTRAIT)

# категории, сдача которых определяет статус брони
DELIVERY_CATEGORIES: tuple[str, ...] = (STILL, REEL, VIDEO)

COLUMNS: dict[str, str] = {
    STILL: "still_workflow",
    REEL: "reel_workflow",
    VIDEO: "video_workflow",
    PORTRAIT: "portrait_workflow",
}

STEPS: dict[str, tuple[tuple[str, str], ...]] = {
    STILL: (
        ("rawDataSent", "Raw Data Sent to Client"),
        ("clientSelectionReceived", "Portrait / Album Selection Received"),
        ("sentToAlbumEditor", "Sent to Album Editor"),
        ("albumPreviewSent", "Album Preview / Soft Copy Sent to Client"),
        ("clientApproved", "Client Approved Album"),
        ("revisionRequested", "Revision Requested"),
        ("sentForPrinting", "Sent for Printing"),
        ("albumFinalized", "Album Finalized"),
        ("deliveredToClient", "Delivered to Client"),
    ),
    REEL: (
        ("reelSentToEditor", "Reel Sent to Editor"),
        ("reelReceivedFromEditor", "Reel Received from Editor"),
        ("reelSentToClient", "Reel Sent to Client for Approval"),
        ("reelDelivered", "Reel Delivered"),
    ),
    VIDEO: (
        ("videoSentToEditor", "Full Video Sent to Editor"),
        ("videoReceivedFromEditor", "Full Video Received from Editor"),
        ("videoSentToClient", "Full Video Sent to Client for Approval"),
        ("videoDelivered", "Full Video Delivered"),
    ),
    PORTRAIT: (
        ("portraitEdited", "Portrait Video Edited"),
        ("portraitDelivered", "Portrait Video Delivered"),
    ),
}

TERMINAL_STEPS: dict[str, str] = {
    STILL: "deliveredToClient",
    REEL: "reelDelivered",
    VIDEO: "videoDelivered",
    PORTRAIT: "portraitDelivered",
}


def step_keys(category: str) -> tuple[str, ...]:
    return tuple(key for key, _ in STEPS[validate_category(category)])


def validate_category(category: str) -> str:
    if category not in COLUMNS:
        raise ValueError(f"Неизвестная категория workflow: {category}")
    return category


def validate_step(category: str, step_key: str) -> str:
    if step_key not in step_keys(category):
        raise ValueError(f"Неизвестный шаг '{step_key}' в категории {category}")
    return step_key


def empty_step_map(category: str) -> dict[str, dict[str, Any]]:
    return {key: {"completed": False} for key in step_keys(category)}


def step_map(workflow: Any, category: str) -> Mapping[str, Any]:
    """Карта шагов ``category`` у записи, модели или словаря workflow."""
    column = COLUMNS[category]
    if isinstance(workflow, Mapping):
        value = workflow.get(column)
    else:
        value = getattr(workflow, column, None)
    return value or {}


def is_step_completed(workflow: Any, category: str, step_key: str) -> bool:
    step = step_map(workflow, category).get(step_key)
    return bool(step and step.get("completed"))


def is_delivered(workflow: Any, category: str) -> bool:
    return is_step_completed(workflow, category, TERMINAL_STEPS[category])
