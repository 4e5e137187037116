import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from ..database import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Category label. Registrations keep a copy of it, not a reference.
    event_type: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, index=True
    )
    date: Mapped[str] = mapped_column(String(20), nullable=False)
    time: Mapped[str] = mapped_column(String(20), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    # Stored as text: "Free" or a numeric amount
    price: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, default="Free"
    )
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=100)
    registered: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, default=0
    )
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    features: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    long_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    organizer: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_event_type_created", "event_type", "created_at"),)

    def __repr__(self) -> str:
        return f"<Event {self.id} {self.title!r}>"
