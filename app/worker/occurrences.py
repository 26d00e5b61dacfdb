# app/worker/occurrences.py

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, Iterator, Optional, Union

from dateutil.relativedelta import relativedelta
from pydantic import ValidationError

from app.schemas.events import ReminderEvent
from app.schemas.reminders import Reminder
from app.worker.errors import ParseError

logger = logging.getLogger(__name__)

LOOKAHEAD = timedelta(hours=24)
MAX_ADVANCES = 366

# k-ésimo paso desde el ancla (no acumulativo: mensual/anual no se desplazan)
_STEPS = {
    "daily": lambda k: timedelta(days=k),
    "weekly": lambda k: timedelta(days=7 * k),
    "monthly": lambda k: relativedelta(months=k),
    "yearly": lambda k: relativedelta(years=k),
}


def parse_reminder(row: Union[Dict[str, Any], Reminder]) -> Reminder:
    if isinstance(row, Reminder):
        return row
    try:
        return Reminder.model_validate(row)
    except ValidationError as e:
        record_id = row.get("id") if isinstance(row, dict) else None
        raise ParseError(record_id, f"invalid reminder row: {e.errors()[0].get('msg')}") from e


def anchor_of(reminder: Reminder) -> datetime:
    """Fecha/hora ancla en UTC. Sin `time` se toma 00:00."""
    t = reminder.time or time(0, 0)
    if t.tzinfo is not None:
        return datetime.combine(reminder.date, t).astimezone(timezone.utc)
    return datetime.combine(reminder.date, t, tzinfo=timezone.utc)


def iter_occurrences(
    anchor: datetime,
    frequency: Optional[str],
    recurring: bool = True,
    max_advances: int = MAX_ADVANCES,
) -> Iterator[datetime]:
    """
    Genera el ancla y, si es recurrente, hasta `max_advances` ocurrencias más.
    Una frecuencia desconocida solo produce el ancla.
    """
    yield anchor
    if not recurring:
        return

    step = _STEPS.get((frequency or "").strip().lower())
    if step is None:
        logger.warning("[occurrences] unknown frequency %r; treating as non-recurring", frequency)
        return

    for k in range(1, max_advances + 1):
        yield anchor + step(k)


def _due_instant(occurrence: datetime, all_day: bool, now: datetime) -> datetime:
    # Un recordatorio de día completo fechado hoy vence "ahora"
    if all_day and occurrence.date() == now.date():
        return now
    return occurrence


def next_occurrence(reminder: Reminder, now: datetime) -> Optional[datetime]:
    """
    Primera ocurrencia >= now, si cae dentro de [now, now+24h).
    Lanza ParseError si la fecha sale del rango representable.
    """
    all_day = reminder.time is None
    try:
        for occurrence in iter_occurrences(
            anchor_of(reminder),
            reminder.frequency,
            recurring=bool(reminder.is_recurring),
        ):
            instant = _due_instant(occurrence, all_day, now)
            if instant >= now:
                return instant if instant < now + LOOKAHEAD else None
    except (OverflowError, ValueError) as e:
        raise ParseError(reminder.id, f"date out of range: {e}") from e
    return None


def plan_reminder(row: Union[Dict[str, Any], Reminder], now: datetime) -> Optional[ReminderEvent]:
    """Devuelve cero o un ReminderEvent para esta corrida. Lanza ParseError si la fila es inválida."""
    reminder = parse_reminder(row)
    if reminder.is_completed:
        return None

    due_at = next_occurrence(reminder, now)
    if due_at is None:
        return None

    contact = reminder.contact_name
    purpose = (reminder.purpose or "").strip()
    when = due_at.date().isoformat()
    if reminder.time is not None:
        when += f" at {reminder.time.strftime('%H:%M')}"
    message = f"Reminder to connect with {contact} on {when}."
    if purpose:
        message += f" Purpose: {purpose}"

    return ReminderEvent(
        id=reminder.id,
        user_id=reminder.user_id,
        contact_name=contact,
        title=f"Reminder: Connect with {contact}",
        message=message,
        event_at=due_at,
        path="/reminders",
        reminder_id=reminder.id,
        purpose=purpose,
        reminder_date=due_at.date(),
        reminder_time=reminder.time,
        send_email_notification=bool(reminder.send_email_notification),
    )
