# app/core/mailer.py

import html
import logging
import os
from typing import Any, Dict, Optional

import httpx

from app.schemas.notifications import ReminderEmailRequest
from app.worker.errors import DispatchError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.resend.com/emails"
DEFAULT_SENDER = "ContactRemind <onboarding@resend.dev>"


class MailerError(DispatchError):
    pass


def render_reminder_email(req: ReminderEmailRequest) -> Dict[str, str]:
    """Asunto y HTML del correo 'Reminder: Connect with <contacto>'."""
    contact = html.escape(req.contact_name)
    time_info = f"at {html.escape(req.reminder_time)}" if req.reminder_time else ""
    body = f"""
        <h1>Reminder: Connect with {contact}</h1>
        <p>This is a reminder that you have scheduled to connect with {contact} on {html.escape(req.reminder_date)} {time_info}.</p>
        <p><strong>Purpose:</strong> {html.escape(req.purpose)}</p>
        <p>Don't forget to update your conversation history after connecting!</p>
        <hr />
        <p style="color: #666; font-size: 12px;">This email was sent from your ContactRemind application.</p>
    """
    return {"subject": f"Reminder: Connect with {req.contact_name}", "html": body}


class ResendMailer:
    """Envía correos transaccionales vía la API HTTP de Resend."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("RESEND_API_KEY", "")
        self.sender = sender or os.getenv("MAIL_FROM") or DEFAULT_SENDER
        self.api_url = api_url or os.getenv("RESEND_API_URL") or DEFAULT_API_URL
        self.timeout = timeout if timeout is not None else float(os.getenv("MAIL_TIMEOUT_SECONDS", "20"))
        self.transport = transport

    def send_reminder_email(self, req: ReminderEmailRequest) -> Dict[str, Any]:
        if not self.api_key:
            raise MailerError("Falta RESEND_API_KEY en .env")

        content = render_reminder_email(req)
        payload = {
            "from": self.sender,
            "to": [req.recipient_email],
            "subject": content["subject"],
            "html": content["html"],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                r = client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise MailerError(f"Mail request failed: {e}") from e

        try:
            data = r.json()
        except ValueError:
            data = {"status_code": r.status_code, "text": r.text}
        if r.status_code >= 300:
            raise MailerError(f"Mail error {r.status_code}: {data}")

        logger.info("[mailer] reminder email sent to %s (%s)", req.recipient_email, data.get("id"))
        return data


def get_mailer() -> ResendMailer:
    return ResendMailer()
