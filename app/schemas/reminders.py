import datetime as dt
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator


class ContactRef(BaseModel):
    """Fila embebida `contacts(name, email)` del select de PostgREST."""
    name: Optional[str] = None
    email: Optional[str] = None


def _first_contact(value):
    # PostgREST devuelve objeto para FK many-to-one, pero toleramos lista
    if isinstance(value, list):
        return value[0] if value else None
    return value


EmbeddedContact = Annotated[Optional[ContactRef], BeforeValidator(_first_contact)]


class Reminder(BaseModel):
    id: str
    user_id: str
    contact_id: Optional[str] = None
    date: dt.date
    time: Optional[dt.time] = None
    purpose: Optional[str] = None
    is_recurring: Optional[bool] = None   # null equivale a False
    frequency: Optional[str] = None       # se valida en el calculador, no aquí
    send_email_notification: Optional[bool] = None
    is_completed: Optional[bool] = None
    contacts: EmbeddedContact = None

    @property
    def contact_name(self) -> str:
        return (self.contacts.name if self.contacts else None) or "your contact"


class SpecialDate(BaseModel):
    id: str
    user_id: str
    contact_id: Optional[str] = None
    date: str                             # solo importan mes/día
    type: str = "special date"
    description: Optional[str] = None
    contacts: EmbeddedContact = None

    @property
    def contact_name(self) -> str:
        return (self.contacts.name if self.contacts else None) or "your contact"
