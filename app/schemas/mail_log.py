# app/schemas/mail_log.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class MailLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    license_id: Optional[int] = None
    person_id: Optional[int] = None
    email: str
    mail_type: str
    subject: str
    body: str
    status: str
    error: Optional[str] = None
    sent_at: datetime

    # joined for the dashboard
    license_name: Optional[str] = None
    person_name: Optional[str] = None


class MailLogPage(BaseModel):
    items: List[MailLogOut]
    count: int
