# app/models/smtp_setting.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime

from app.db.base import Base

SMTP_ROW_ID = 1


class SmtpSetting(Base):
    # singleton row (id=1); password is a Fernet token, never plaintext
    __tablename__ = "smtp_settings"

    id = Column(Integer, primary_key=True)
    sender_email = Column(String(320), nullable=True)
    sender_password_enc = Column(Text, nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
