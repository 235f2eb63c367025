# app/models/message_template.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Text, DateTime

from app.db.base import Base

TEMPLATE_ROW_ID = 1


class MessageTemplate(Base):
    # singleton row (id=1)
    __tablename__ = "message_templates"

    id = Column(Integer, primary_key=True)
    responsible_subject = Column(Text, nullable=False)
    responsible_body = Column(Text, nullable=False)
    stakeholder_subject = Column(Text, nullable=False)
    stakeholder_body = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
