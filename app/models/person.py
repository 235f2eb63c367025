# app/models/person.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Index, func
from sqlalchemy.orm import relationship

from app.db.base import Base


class Person(Base):
    __tablename__ = "people"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(64), nullable=True)
    department = Column(String(255), nullable=True)

    # RESPONSIBLE | STAKEHOLDER (EMPLOYEE is normalised to STAKEHOLDER on input)
    role = Column(String(20), nullable=False)
    designation = Column(String(255), nullable=True)

    # INACTIVE people are hidden from lists and reactivated on re-create
    status = Column(String(20), nullable=False, default="ACTIVE")

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    links = relationship(
        "LicensePerson",
        back_populates="person",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        # case-insensitive uniqueness
        Index("uq_people_email_lower", func.lower(email), unique=True),
    )

    def __repr__(self) -> str:
        return f"<Person id={self.id} email={self.email!r} role={self.role}>"
