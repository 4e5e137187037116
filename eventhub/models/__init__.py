# Import all models for easier access
from .event import Event  # noqa: F401
from .registration import Registration, RegistrationStatus, TicketType  # noqa: F401
from .user import AdminUser  # noqa: F401
