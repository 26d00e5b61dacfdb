# app/worker/special_dates.py

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Tuple, Union

from pydantic import ValidationError

from app.schemas.events import SpecialDateAdvanceEvent
from app.schemas.reminders import SpecialDate
from app.worker.errors import ParseError

# (días de anticipación, etiqueta)
ADVANCE_OFFSETS: Tuple[Tuple[int, str], ...] = (
    (30, "30 days away"),
    (7, "1 week away"),
    (1, "1 day away"),
)

# YYYY-MM-DD (con hora opcional) o MM-DD
_MONTH_DAY = re.compile(r"^(?:\d{4}-)?(\d{1,2})-(\d{1,2})(?:[T ].*)?$")


def parse_special_date(row: Union[Dict[str, Any], SpecialDate]) -> Tuple[SpecialDate, int, int]:
    """Valida la fila y extrae (mes, día). El año no tiene significado."""
    if isinstance(row, SpecialDate):
        special = row
    else:
        try:
            special = SpecialDate.model_validate(row)
        except ValidationError as e:
            record_id = row.get("id") if isinstance(row, dict) else None
            raise ParseError(record_id, f"invalid special date row: {e.errors()[0].get('msg')}") from e

    m = _MONTH_DAY.match(special.date.strip())
    if not m:
        raise ParseError(special.id, f"unparsable date {special.date!r}")
    month, day = int(m.group(1)), int(m.group(2))
    try:
        date(2000, month, day)  # año bisiesto: 02-29 es válido
    except ValueError:
        raise ParseError(special.id, f"invalid month/day in {special.date!r}")
    return special, month, day


def _on_year(year: int, month: int, day: int) -> date:
    if month == 2 and day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return date(year, month, day)


def target_anniversary(month: int, day: int, today: date) -> date:
    target = _on_year(today.year, month, day)
    if target < today:
        target = _on_year(today.year + 1, month, day)
    return target


def plan_special_date(row: Union[Dict[str, Any], SpecialDate], now: datetime) -> List[SpecialDateAdvanceEvent]:
    special, month, day = parse_special_date(row)
    today = now.date()
    target = target_anniversary(month, day, today)

    contact = special.contact_name
    kind = (special.type or "special date").strip() or "special date"
    events: List[SpecialDateAdvanceEvent] = []

    for offset, label in ADVANCE_OFFSETS:
        if target - timedelta(days=offset) != today:
            continue
        message = f"{contact}'s {kind} is {label}, on {target.strftime('%B')} {target.day}."
        if special.description:
            message += f" {special.description.strip()}"
        events.append(
            SpecialDateAdvanceEvent(
                id=f"{special.id}-{offset}d",
                user_id=special.user_id,
                contact_name=contact,
                title=f"Upcoming {kind}: {contact}",
                message=message,
                event_at=now,
                path="/contacts",
                special_date_id=special.id,
                special_date_type=kind,
                offset_days=offset,
                offset_label=label,
                target_date=target,
            )
        )
    return events
