# app/worker/dispatcher.py

import logging
from dataclasses import dataclass
from typing import Optional

from app.schemas.events import ReminderEvent, SpecialDateAdvanceEvent
from app.schemas.notifications import NotificationCreate, ReminderEmailRequest

logger = logging.getLogger(__name__)


@dataclass
class DispatchOutcome:
    """Qué canales se intentaron para un evento y cuáles funcionaron."""
    email_requested: bool
    email_sent: bool = False
    email_error: Optional[str] = None
    in_app_sent: bool = False
    in_app_error: Optional[str] = None


def build_email_request(event, recipient_email: str) -> ReminderEmailRequest:
    if isinstance(event, ReminderEvent):
        return ReminderEmailRequest(
            recipient_email=recipient_email,
            contact_name=event.contact_name,
            reminder_date=event.reminder_date.isoformat(),
            reminder_time=event.reminder_time.strftime("%H:%M") if event.reminder_time else None,
            purpose=event.purpose or event.title,
        )
    if isinstance(event, SpecialDateAdvanceEvent):
        return ReminderEmailRequest(
            recipient_email=recipient_email,
            contact_name=event.contact_name,
            reminder_date=event.target_date.isoformat(),
            reminder_time=None,
            purpose=event.message,
        )
    raise TypeError(f"Unsupported event kind: {type(event).__name__}")


def build_notification_row(event) -> NotificationCreate:
    data = {"path": event.path, "event_at": event.event_at.isoformat()}

    if isinstance(event, ReminderEvent):
        return NotificationCreate(
            user_id=event.user_id,
            reminder_id=event.reminder_id,
            type="reminder_due",
            title=event.title,
            message=event.message,
            data=data,
        )
    if isinstance(event, SpecialDateAdvanceEvent):
        data.update({
            "special_date_id": event.special_date_id,
            "offset_days": event.offset_days,
            "target_date": event.target_date.isoformat(),
        })
        return NotificationCreate(
            user_id=event.user_id,
            reminder_id=None,
            type="special_date_advance",
            title=event.title,
            message=event.message,
            data=data,
        )
    raise TypeError(f"Unsupported event kind: {type(event).__name__}")


class NotificationDispatcher:
    """
    Intenta los dos canales de un evento de forma independiente:
    email (solo si es elegible y hay destinatario) e in-app (siempre).
    Ningún fallo sale de aquí; todo queda en el DispatchOutcome.
    """

    def __init__(self, store, mailer):
        self.store = store
        self.mailer = mailer

    def dispatch(self, event, eligible: bool, recipient_email: Optional[str]) -> DispatchOutcome:
        outcome = DispatchOutcome(email_requested=eligible)
        if eligible:
            self._send_email(event, recipient_email, outcome)
        self._insert_notification(event, outcome)
        return outcome

    def _send_email(self, event, recipient_email: Optional[str], outcome: DispatchOutcome) -> None:
        if not recipient_email:
            outcome.email_error = "no recipient email address for user"
            logger.error("[dispatcher] %s: email skipped, %s %s", event.id, outcome.email_error, event.user_id)
            return
        try:
            self.mailer.send_reminder_email(build_email_request(event, recipient_email))
            outcome.email_sent = True
        except Exception as e:
            outcome.email_error = str(e) or type(e).__name__
            logger.error("[dispatcher] %s: email failed: %s", event.id, outcome.email_error)

    def _insert_notification(self, event, outcome: DispatchOutcome) -> None:
        try:
            self.store.insert_notification(build_notification_row(event))
            outcome.in_app_sent = True
        except Exception as e:
            outcome.in_app_error = str(e) or type(e).__name__
            logger.error("[dispatcher] %s: in-app notification failed: %s", event.id, outcome.in_app_error)
