# app/models/mail_log.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey

from app.db.base import Base


class MailLog(Base):
    """Append-only record of every attempted reminder send."""

    __tablename__ = "mail_logs"

    id = Column(Integer, primary_key=True, index=True)
    # keep history when a license/person is deleted
    license_id = Column(
        Integer, ForeignKey("licenses.id", ondelete="SET NULL"), nullable=True, index=True
    )
    person_id = Column(
        Integer, ForeignKey("people.id", ondelete="SET NULL"), nullable=True, index=True
    )

    email = Column(String(320), nullable=False)
    mail_type = Column(String(20), nullable=False)  # RESPONSIBLE | STAKEHOLDER
    subject = Column(Text, nullable=False)
    body = Column(Text, nullable=False)

    status = Column(String(20), nullable=False)  # SENT | FAILED
    error = Column(Text, nullable=True)

    sent_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True
    )
