# app/api/v1/licenses.py
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NOT_FOUND
from app.crud.license import (
    UnknownPeople,
    create_license as crud_create_license,
    delete_license as crud_delete_license,
    get_license as crud_get_license,
    link_ids,
    list_licenses as crud_list_licenses,
    update_license as crud_update_license,
)
from app.db.session import get_db
from app.models.license import License
from app.schemas.license import LicenseCreate, LicenseOut, LicenseUpdate
from app.schemas.notification import DispatchResult
from app.services.notifications import dispatch, notify_immediately_if_due

log = logging.getLogger("app.licenses")

router = APIRouter(prefix="/licenses", tags=["licenses"])


def _to_out(db: Session, obj: License, links=None) -> LicenseOut:
    links = links if links is not None else link_ids(db, [obj.id])[obj.id]
    out = LicenseOut.model_validate(obj)
    out.responsible_ids = list(links.get("RESPONSIBLE", []))
    out.stakeholder_ids = list(links.get("STAKEHOLDER", []))
    return out


def _get_or_404(db: Session, license_id: int) -> License:
    obj = crud_get_license(db, license_id)
    if not obj:
        raise HTTPException(status_code=404, detail="License not found")
    return obj


@router.get("", response_model=List[LicenseOut])
def list_licenses(db: Session = Depends(get_db)):
    """All licenses, soonest expiry first, with linked people ids."""
    rows = crud_list_licenses(db)
    links = link_ids(db, [r.id for r in rows])
    return [_to_out(db, r, links[r.id]) for r in rows]


@router.get("/{license_id}", response_model=LicenseOut)
def get_license(license_id: int, db: Session = Depends(get_db)):
    return _to_out(db, _get_or_404(db, license_id))


@router.post("", response_model=LicenseOut, status_code=status.HTTP_201_CREATED)
def create_license(payload: LicenseCreate, db: Session = Depends(get_db)):
    """
    Create a license and its people links.
    If the six-month reminder is enabled and already due, it is sent right away;
    a mail failure never fails the create.
    """
    try:
        obj = crud_create_license(db, payload)
    except UnknownPeople as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except IntegrityError:
        raise HTTPException(status_code=409, detail="License already exists (duplicate unique value)")

    if obj.notify_six_month:
        notify_immediately_if_due(db, obj)
    return _to_out(db, obj)


@router.put("/{license_id}", response_model=LicenseOut)
def update_license(license_id: int, payload: LicenseUpdate, db: Session = Depends(get_db)):
    """
    Partial update. Switching notify_six_month on re-arms the one-time reminder.
    """
    obj = _get_or_404(db, license_id)
    try:
        obj = crud_update_license(db, obj, payload)
    except UnknownPeople as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except IntegrityError:
        raise HTTPException(status_code=409, detail="License already exists (duplicate unique value)")

    if obj.notify_six_month:
        notify_immediately_if_due(db, obj)
    return _to_out(db, obj)


@router.delete("/{license_id}")
def delete_license(license_id: int, db: Session = Depends(get_db)):
    obj = _get_or_404(db, license_id)
    crud_delete_license(db, obj)
    return {"ok": True, "deleted": True}


@router.post("/{license_id}/notify", response_model=DispatchResult)
def notify_license(license_id: int, db: Session = Depends(get_db)):
    """Manual trigger: send the reminder to everyone linked to this license now."""
    result = dispatch(db, license_id)
    if not result.ok:
        code = 404 if result.code == NOT_FOUND else 400
        log.warning("manual notify failed license_id=%s code=%s: %s", license_id, result.code, result.error)
        raise HTTPException(status_code=code, detail=result.model_dump())
    return result
