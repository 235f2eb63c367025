# app/crud/person.py
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.person import Person
from app.schemas.person import PersonCreate, PersonUpdate


def get_person(db: Session, person_id: int) -> Optional[Person]:
    return db.get(Person, person_id)


def get_person_by_email(db: Session, email: str) -> Optional[Person]:
    return (
        db.query(Person)
        .filter(func.lower(Person.email) == (email or "").strip().lower())
        .first()
    )


def list_people(db: Session, include_inactive: bool = False) -> List[Person]:
    q = db.query(Person)
    if not include_inactive:
        q = q.filter(Person.status != "INACTIVE")
    return q.order_by(Person.created_at.desc(), Person.id.desc()).all()


def create_or_reactivate_person(db: Session, payload: PersonCreate, existing: Optional[Person] = None) -> Person:
    """Insert, or overwrite an INACTIVE row that owns the same email."""
    obj = existing or Person()
    obj.name = payload.name
    obj.email = str(payload.email)
    obj.phone = payload.phone
    obj.department = payload.department
    obj.role = payload.role
    obj.designation = payload.designation or None
    obj.status = "ACTIVE"
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update_person(db: Session, obj: Person, payload: PersonUpdate) -> Person:
    data = payload.model_dump(exclude_unset=True)
    for k, v in data.items():
        if v is None and k != "designation":
            continue
        setattr(obj, k, str(v) if k == "email" else v)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def delete_person(db: Session, obj: Person) -> None:
    db.delete(obj)
    db.commit()
