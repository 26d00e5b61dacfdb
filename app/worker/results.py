# app/worker/results.py

import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.schemas.events import EventResult, ReminderEvent, SpecialDateAdvanceEvent


def event_type(event) -> str:
    if isinstance(event, ReminderEvent):
        return "reminder"
    if isinstance(event, SpecialDateAdvanceEvent):
        return "special_date"
    raise TypeError(f"Unsupported event kind: {type(event).__name__}")


def classify(outcome) -> str:
    if outcome.email_requested:
        if outcome.email_sent and outcome.in_app_sent:
            return "success"
        if outcome.email_sent or outcome.in_app_sent:
            return "partial_success"
        return "error"
    return "success_no_email" if outcome.in_app_sent else "error"


def describe(outcome) -> str:
    """Mensaje legible que nombra el canal que falló."""
    if outcome.email_requested:
        if outcome.email_sent and outcome.in_app_sent:
            return "Email and in-app notification sent"
        if outcome.in_app_sent:
            return f"In-app notification sent; email failed: {outcome.email_error}"
        if outcome.email_sent:
            return f"Email sent; in-app notification failed: {outcome.in_app_error}"
        return f"Email failed: {outcome.email_error}; in-app notification failed: {outcome.in_app_error}"
    if outcome.in_app_sent:
        return "In-app notification sent (email not requested)"
    return f"In-app notification failed: {outcome.in_app_error}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_result(event, outcome, processed_at: Optional[datetime] = None) -> EventResult:
    return EventResult(
        id=event.id,
        type=event_type(event),
        status=classify(outcome),
        message=describe(outcome),
        contact=event.contact_name,
        processed_at=processed_at or _utcnow(),
    )


def error_result(event, detail: str, processed_at: Optional[datetime] = None) -> EventResult:
    return EventResult(
        id=event.id,
        type=event_type(event),
        status="error",
        message=f"Unexpected error: {detail}",
        contact=event.contact_name,
        processed_at=processed_at or _utcnow(),
    )


class ResultCollector:
    """Acumula resultados desde varios hilos; `results` respeta el orden de los eventos."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_index: Dict[int, EventResult] = {}

    def add(self, index: int, result: EventResult) -> None:
        with self._lock:
            self._by_index[index] = result

    @property
    def results(self) -> List[EventResult]:
        with self._lock:
            return [self._by_index[i] for i in sorted(self._by_index)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_index)
