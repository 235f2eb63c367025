# app/models/license_person.py
from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base

RESPONSIBILITIES = ("RESPONSIBLE", "STAKEHOLDER")


class LicensePerson(Base):
    __tablename__ = "license_people"

    id = Column(Integer, primary_key=True, index=True)
    license_id = Column(
        Integer, ForeignKey("licenses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    person_id = Column(
        Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True
    )
    responsibility = Column(String(20), nullable=False)

    license = relationship("License", back_populates="links")
    person = relationship("Person", back_populates="links")

    __table_args__ = (
        UniqueConstraint(
            "license_id", "person_id", "responsibility", name="uq_license_person_role"
        ),
        CheckConstraint(
            f"responsibility IN {RESPONSIBILITIES}",
            name="ck_license_people_responsibility",
        ),
    )
