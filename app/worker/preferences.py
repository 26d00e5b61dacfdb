# app/worker/preferences.py

import logging

from app.schemas.events import ReminderEvent, SpecialDateAdvanceEvent

logger = logging.getLogger(__name__)


def resolve_email_eligibility(event, store) -> bool:
    """
    Decide si se intenta el canal de email para un evento.
    - Recordatorios: opt-in explícito del propio recordatorio, sin fallback.
    - Fechas especiales: `user_settings.email_notifications` del usuario;
      si la consulta falla o no hay fila, False (nunca enviar sin permiso).
    """
    if isinstance(event, ReminderEvent):
        return bool(event.send_email_notification)

    if isinstance(event, SpecialDateAdvanceEvent):
        try:
            settings = store.get_user_settings(event.user_id)
        except Exception as e:
            logger.warning("[preferences] settings lookup failed for user %s: %s", event.user_id, e)
            return False
        if settings is None:
            return False
        return bool(settings.email_notifications)

    raise TypeError(f"Unsupported event kind: {type(event).__name__}")
