# app/worker/store.py

from typing import Any, Dict, List, Optional

from supabase import Client

from app.core.supabase_client import get_service_supabase
from app.schemas.notifications import NotificationCreate
from app.schemas.settings import UserSettings
from app.worker.errors import FatalError, PersistenceError, UserLookupError

REMINDER_COLUMNS = (
    "id, user_id, contact_id, date, time, purpose, is_recurring, frequency, "
    "send_email_notification, is_completed, contacts(name, email)"
)
SPECIAL_DATE_COLUMNS = "id, user_id, contact_id, date, type, description, contacts(name, email)"


class SupabaseNotificationStore:
    """
    Acceso a Supabase para el barrido de eventos (service role, sin RLS).
    El cliente se crea al primer uso, así un error de configuración
    aparece como fallo de la lectura masiva y no al importar.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def sb(self) -> Client:
        if self._client is None:
            self._client = get_service_supabase()
        return self._client

    # -------------------------
    # Lecturas masivas (fatales)
    # -------------------------
    def fetch_reminders(self) -> List[Dict[str, Any]]:
        try:
            res = (
                self.sb.table("reminders")
                .select(REMINDER_COLUMNS)
                .eq("is_completed", False)
                .execute()
            )
        except Exception as e:
            raise FatalError(f"Error fetching reminders: {e}") from e
        return res.data or []

    def fetch_special_dates(self) -> List[Dict[str, Any]]:
        try:
            res = self.sb.table("special_dates").select(SPECIAL_DATE_COLUMNS).execute()
        except Exception as e:
            raise FatalError(f"Error fetching special dates: {e}") from e
        return res.data or []

    # -------------------------
    # Consultas por evento
    # -------------------------
    def get_user_settings(self, user_id: str) -> Optional[UserSettings]:
        try:
            res = (
                self.sb.table("user_settings")
                .select("id, email_notifications")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise UserLookupError(f"Cannot read settings for user {user_id}: {e}") from e
        rows = res.data or []
        if not rows:
            return None
        return UserSettings.model_validate(rows[0])

    def get_user_email(self, user_id: str) -> Optional[str]:
        # auth.users no es accesible vía PostgREST; se usa la API admin
        try:
            res = self.sb.auth.admin.get_user_by_id(user_id)
        except Exception as e:
            raise UserLookupError(f"Cannot read email for user {user_id}: {e}") from e
        user = getattr(res, "user", None)
        return getattr(user, "email", None) or None

    def insert_notification(self, notification: NotificationCreate) -> Dict[str, Any]:
        try:
            res = self.sb.table("notifications").insert(notification.model_dump()).execute()
        except Exception as e:
            raise PersistenceError(f"Notification insert failed: {e}") from e
        if not res.data:
            raise PersistenceError("Notification insert returned no rows")
        return res.data[0]


def get_notification_store() -> SupabaseNotificationStore:
    return SupabaseNotificationStore()
