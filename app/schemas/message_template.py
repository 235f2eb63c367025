# app/schemas/message_template.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from app.services.templates import PLACEHOLDERS


class MessageTemplateIn(BaseModel):
    responsible_subject: str = Field(..., min_length=1)
    responsible_body: str = Field(..., min_length=1)
    stakeholder_subject: str = Field(..., min_length=1)
    stakeholder_body: str = Field(..., min_length=1)


class MessageTemplateOut(MessageTemplateIn):
    model_config = ConfigDict(from_attributes=True)

    id: int = 1
    updated_at: Optional[datetime] = None
    # tokens the editor can offer; rendered as {{name}}
    placeholders: List[str] = Field(default_factory=lambda: list(PLACEHOLDERS))
