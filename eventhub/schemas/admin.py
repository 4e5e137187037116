from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from eventhub.schemas.event import Event
from eventhub.schemas.registration import Registration


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notice(BaseModel):
    level: NoticeLevel
    message: str


class AdminResult(BaseModel):
    ok: bool
    notice: Notice
    error_code: Optional[str] = None


class EventListResult(AdminResult):
    events: List[Event]


class RegistrationListResult(AdminResult):
    registrations: List[Registration]


class DashboardStats(BaseModel):
    total_events: int
    total_registrations: int
    active_events: int
    revenue: int
