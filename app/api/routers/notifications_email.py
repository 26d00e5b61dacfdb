# app/api/routers/notifications_email.py

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from app.core.auth import require_scheduler_token
from app.core.cors import CORS_HEADERS
from app.core.mailer import MailerError, ResendMailer, get_mailer
from app.schemas.notifications import ReminderEmailRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notify/email", tags=["Notifications - Email"])


@router.options("/reminder", include_in_schema=False)
def send_reminder_email_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/reminder", dependencies=[Depends(require_scheduler_token)])
def send_reminder_email(
    payload: ReminderEmailRequest,
    response: Response,
    mailer: ResendMailer = Depends(get_mailer),
):
    """Envía el correo 'Reminder: Connect with <contacto>' y devuelve la respuesta del proveedor."""
    try:
        data = mailer.send_reminder_email(payload)
    except MailerError as e:
        logger.error("[notify.email] %s", e)
        return JSONResponse(status_code=500, content={"error": str(e)}, headers=CORS_HEADERS)

    response.headers.update(CORS_HEADERS)
    return data
