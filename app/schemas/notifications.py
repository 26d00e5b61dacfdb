from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

NotificationType = Literal["reminder_due", "special_date_advance"]


class NotificationCreate(BaseModel):
    """Payload de insert en `notifications` (canal in-app)."""
    user_id: str
    reminder_id: Optional[str] = None
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)   # al menos {"path": ...}
    is_read: bool = False


class ReminderEmailRequest(BaseModel):
    """
    Cuerpo del correo de recordatorio. En el wire se usan las llaves camelCase
    (recipientEmail, contactName, reminderDate, reminderTime, purpose).
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "recipientEmail": "me@example.com",
                "contactName": "Ada Lovelace",
                "reminderDate": "2025-06-15",
                "reminderTime": "09:30:00",
                "purpose": "Catch up about the new project",
            }
        },
    )

    recipient_email: EmailStr = Field(..., alias="recipientEmail")
    contact_name: str = Field(..., alias="contactName")
    reminder_date: str = Field(..., alias="reminderDate")
    reminder_time: Optional[str] = Field(None, alias="reminderTime")
    purpose: str = ""
