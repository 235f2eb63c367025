# app/api/v1/people.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud.person import (
    create_or_reactivate_person,
    delete_person as crud_delete_person,
    get_person as crud_get_person,
    get_person_by_email,
    list_people as crud_list_people,
    update_person as crud_update_person,
)
from app.db.session import get_db
from app.schemas.person import PersonCreate, PersonOut, PersonUpdate

router = APIRouter(prefix="/people", tags=["people"])


def _designation_required(role, designation) -> bool:
    return role == "STAKEHOLDER" and not (designation or "").strip()


@router.get("", response_model=List[PersonOut])
def list_people(
    include_inactive: bool = Query(False, description="Also return INACTIVE people"),
    db: Session = Depends(get_db),
):
    return crud_list_people(db, include_inactive=include_inactive)


@router.get("/{person_id}", response_model=PersonOut)
def get_person(person_id: int, db: Session = Depends(get_db)):
    obj = crud_get_person(db, person_id)
    if not obj or obj.status == "INACTIVE":
        raise HTTPException(status_code=404, detail="Person not found")
    return obj


@router.post("", response_model=PersonOut, status_code=status.HTTP_201_CREATED)
def create_person(payload: PersonCreate, db: Session = Depends(get_db)):
    """
    Create a person. An INACTIVE person with the same email is reactivated
    and overwritten instead of failing on the unique email.
    """
    if _designation_required(payload.role, payload.designation):
        raise HTTPException(status_code=400, detail="Designation required for stakeholder")

    existing = get_person_by_email(db, str(payload.email))
    if existing and existing.status != "INACTIVE":
        raise HTTPException(status_code=409, detail="Person with this email already exists")

    try:
        return create_or_reactivate_person(db, payload, existing=existing)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Person already exists (duplicate unique value)")


@router.put("/{person_id}", response_model=PersonOut)
def update_person(person_id: int, payload: PersonUpdate, db: Session = Depends(get_db)):
    obj = crud_get_person(db, person_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Person not found")

    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No fields provided for update")

    next_role = data.get("role") or obj.role
    next_designation = data["designation"] if "designation" in data else obj.designation
    if _designation_required(next_role, next_designation):
        raise HTTPException(status_code=400, detail="Designation required for stakeholder")

    try:
        return crud_update_person(db, obj, payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Person already exists (duplicate unique value)")


@router.delete("/{person_id}")
def delete_person(person_id: int, db: Session = Depends(get_db)):
    obj = crud_get_person(db, person_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Person not found")
    crud_delete_person(db, obj)
    return {"ok": True, "deleted": True}
