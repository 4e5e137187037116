from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from eventhub.core.settings import settings


# Properties to receive via API on sign-up
class AdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=settings.security.PASSWORD_MIN_LENGTH)


class AdminUser(BaseModel):
    id: str
    email: EmailStr
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenPayload(BaseModel):
    sub: Optional[str] = None
