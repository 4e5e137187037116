from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field

from eventhub.models.registration import RegistrationStatus, TicketType


class RegistrationForm(BaseModel):
    """Attendee form. Emptiness is checked by the registration service."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    agree_to_terms: bool = False
    subscribe_newsletter: bool = False
    special_requests: Optional[str] = None


# Payload inserted into the registrations table
class RegistrationCreate(BaseModel):
    full_name: str
    email: str
    phone: str
    event_type: str
    ticket_type: TicketType
    status: RegistrationStatus = RegistrationStatus.CONFIRMED


class Registration(BaseModel):
    id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    event_type: str
    ticket_type: TicketType
    status: RegistrationStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RegistrationStatusUpdate(BaseModel):
    status: RegistrationStatus


class RegistrationConfirmation(BaseModel):
    """Snapshot shown after a successful submission. Never persisted."""

    registration_id: str
    event_id: str
    event_title: str
    event_date: str
    event_time: str
    event_location: str
    event_category: str
    full_name: str
    email: str
    ticket_type: TicketType

    @computed_field  # type: ignore[prop-decorator]
    @property
    def share_text(self) -> str:
        return f"Just registered for {self.event_title} on {self.event_date}. Join me!"
