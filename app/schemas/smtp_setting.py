# app/schemas/smtp_setting.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class SmtpSettingsIn(BaseModel):
    sender_email: EmailStr
    sender_password: str = Field(..., min_length=1)


class SmtpSettingsView(BaseModel):
    """Never carries the password itself."""

    sender_email: str = ""
    has_password: bool = False
    updated_at: Optional[datetime] = None
