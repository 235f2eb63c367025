# app/models/license.py
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, Boolean, Numeric, Index
)
from sqlalchemy.orm import relationship

from app.db.base import Base

LICENSE_STATUS_ACTIVE = "ACTIVE"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class License(Base):
    __tablename__ = "licenses"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False, index=True)
    provider = Column(String(255), nullable=False)
    cost = Column(Numeric(12, 2), nullable=True)

    issued_date = Column(Date, nullable=False)
    start_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=False, index=True)

    # ACTIVE | anything else is ignored by the daily scan
    status = Column(String(20), nullable=False, default=LICENSE_STATUS_ACTIVE, index=True)
    description = Column(Text, nullable=True)

    # Auto-mail configuration (three independent flags)
    notify_six_month = Column(Boolean, nullable=False, default=False)
    notify_monthly = Column(Boolean, nullable=False, default=False)
    notify_daily_last_30 = Column(Boolean, nullable=False, default=False)

    # One-shot marker for the six-month reminder; NULL = not sent yet
    six_month_sent_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    links = relationship(
        "LicensePerson",
        back_populates="license",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_licenses_status_expiry", "status", "expiry_date"),
    )

    def __repr__(self) -> str:
        return f"<License id={self.id} name={self.name!r} expiry={self.expiry_date} status={self.status}>"
