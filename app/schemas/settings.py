from typing import Optional

from pydantic import BaseModel


class UserSettings(BaseModel):
    """Fila de `user_settings` (id = auth.uid())."""
    id: str
    email_notifications: bool = False
    timezone: Optional[str] = None
    reminder_advance_notice: Optional[int] = None
