from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

ALMOST_FULL_THRESHOLD = 10

Price = Union[Literal["Free"], int, float]


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    ALMOST_FULL = "almost_full"
    SOLD_OUT = "sold_out"


class Event(BaseModel):
    """Application-level event, as produced by the row mapper."""

    id: str
    title: str
    description: str = ""
    category: str = "Event"
    date: str
    time: str
    location: str
    capacity: int = 100
    registered: int = 0
    price: Price = "Free"
    image: str = "/placeholder.svg"
    long_description: Optional[str] = None
    features: Optional[List[str]] = None
    organizer: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def available_spots(self) -> int:
        # Negative when persisted data is over capacity
        return self.capacity - self.registered

    @computed_field  # type: ignore[prop-decorator]
    @property
    def availability(self) -> AvailabilityStatus:
        if self.available_spots <= 0:
            return AvailabilityStatus.SOLD_OUT
        if self.available_spots <= ALMOST_FULL_THRESHOLD:
            return AvailabilityStatus.ALMOST_FULL
        return AvailabilityStatus.AVAILABLE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def registration_open(self) -> bool:
        return self.available_spots > 0


# Admin create/edit form. Required fields are checked by the admin service so
# that every failure reports the same message.
class EventForm(BaseModel):
    title: str = ""
    date: str = ""
    time: str = ""
    location: str = ""
    category: str = "College Fest"
    price: str = "Free"
    capacity: Optional[int] = Field(default=100, ge=0)
    features: Union[str, List[str], None] = None
    image: Optional[str] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    organizer: Optional[str] = None


class CatalogPage(BaseModel):
    items: List[Event]
    total: int
    page: int
    page_size: int
    pages: int
    has_previous: bool
    has_next: bool
