import datetime as dt
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

EventType = Literal["reminder", "special_date"]
EventStatus = Literal["success", "partial_success", "success_no_email", "error"]


# ===========================
# UpcomingEvent (derivado, nunca se persiste)
# ===========================

class _UpcomingEventBase(BaseModel):
    id: str
    user_id: str
    contact_name: str
    title: str
    message: str
    event_at: dt.datetime                 # siempre dentro de [now, now+24h)
    path: str                             # navegación en la UI


class ReminderEvent(_UpcomingEventBase):
    kind: Literal["reminder"] = "reminder"
    reminder_id: str
    purpose: str = ""
    reminder_date: dt.date
    reminder_time: Optional[dt.time] = None
    # Elegibilidad: opt-in explícito del propio recordatorio
    send_email_notification: bool = False


class SpecialDateAdvanceEvent(_UpcomingEventBase):
    kind: Literal["special_date_advance"] = "special_date_advance"
    special_date_id: str
    special_date_type: str
    offset_days: int
    offset_label: str
    target_date: dt.date
    # Elegibilidad: user_settings.email_notifications (se resuelve al procesar)


UpcomingEvent = Annotated[
    Union[ReminderEvent, SpecialDateAdvanceEvent],
    Field(discriminator="kind"),
]


# ===========================
# Responses
# ===========================

class EventResult(BaseModel):
    id: str
    type: EventType
    status: EventStatus
    message: str
    contact: str
    processed_at: dt.datetime


class SchedulerRunOut(BaseModel):
    message: str
    results: List[EventResult]
