from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class ContactMessage(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
