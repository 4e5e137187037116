import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy import Enum as SQLEnum
from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from ..database import Base


class TicketType(str, enum.Enum):
    FREE = "free"
    PAID = "paid"


class RegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Registration(Base):
    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    full_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # Copy of the event's category label at submission time
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    ticket_type: Mapped[TicketType] = mapped_column(
        SQLEnum(TicketType, name="ticket_type", values_callable=_enum_values),
        nullable=False,
    )
    status: Mapped[RegistrationStatus] = mapped_column(
        SQLEnum(
            RegistrationStatus,
            name="registration_status",
            values_callable=_enum_values,
        ),
        default=RegistrationStatus.CONFIRMED,
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_registration_status_created", "status", "created_at"),
        Index("idx_registration_ticket_type", "ticket_type"),
    )
