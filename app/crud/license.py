# app/crud/license.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.models.license import License, LICENSE_STATUS_ACTIVE
from app.models.license_person import LicensePerson
from app.models.person import Person
from app.schemas.license import LicenseCreate, LicenseUpdate

_LICENSE_FIELDS = (
    "name",
    "provider",
    "cost",
    "issued_date",
    "start_date",
    "expiry_date",
    "status",
    "description",
    "notify_six_month",
    "notify_monthly",
    "notify_daily_last_30",
)


class UnknownPeople(ValueError):
    """Link payload references person ids that do not exist."""

    def __init__(self, ids: Iterable[int]):
        self.ids = sorted(set(ids))
        super().__init__(f"Invalid responsible/stakeholder selection: {self.ids}")


def get_license(db: Session, license_id: int) -> Optional[License]:
    return db.get(License, license_id)


def list_licenses(db: Session) -> List[License]:
    return db.query(License).order_by(License.expiry_date.asc(), License.id.asc()).all()


def get_active_licenses(db: Session) -> List[License]:
    return (
        db.query(License)
        .filter(License.status == LICENSE_STATUS_ACTIVE)
        .order_by(License.id.asc())
        .all()
    )


def get_linked_people(db: Session, license_id: int) -> List[Tuple[Person, str]]:
    rows = (
        db.query(Person, LicensePerson.responsibility)
        .join(LicensePerson, LicensePerson.person_id == Person.id)
        .filter(LicensePerson.license_id == license_id)
        .order_by(LicensePerson.id.asc())
        .all()
    )
    return [(p, resp) for p, resp in rows]


def link_ids(db: Session, license_ids: Iterable[int]) -> Dict[int, Dict[str, List[int]]]:
    """{license_id: {"RESPONSIBLE": [...], "STAKEHOLDER": [...]}} in one query."""
    ids = list(license_ids)
    out: Dict[int, Dict[str, List[int]]] = {
        i: {"RESPONSIBLE": [], "STAKEHOLDER": []} for i in ids
    }
    if not ids:
        return out
    rows = (
        db.query(LicensePerson.license_id, LicensePerson.person_id, LicensePerson.responsibility)
        .filter(LicensePerson.license_id.in_(ids))
        .order_by(LicensePerson.id.asc())
        .all()
    )
    for lid, pid, resp in rows:
        out[lid].setdefault(resp, []).append(pid)
    return out


def _check_people(db: Session, person_ids: Iterable[int]) -> None:
    wanted = set(person_ids)
    if not wanted:
        return
    found = {pid for (pid,) in db.query(Person.id).filter(Person.id.in_(wanted)).all()}
    missing = wanted - found
    if missing:
        raise UnknownPeople(missing)


def _replace_links(
    db: Session, obj: License, responsible_ids: Iterable[int], stakeholder_ids: Iterable[int]
) -> None:
    responsible_ids = list(dict.fromkeys(responsible_ids))
    stakeholder_ids = list(dict.fromkeys(stakeholder_ids))
    _check_people(db, responsible_ids + stakeholder_ids)

    obj.links.clear()
    db.flush()
    for pid in responsible_ids:
        obj.links.append(LicensePerson(person_id=pid, responsibility="RESPONSIBLE"))
    for pid in stakeholder_ids:
        obj.links.append(LicensePerson(person_id=pid, responsibility="STAKEHOLDER"))


def create_license(db: Session, payload: LicenseCreate) -> License:
    obj = License(**{k: getattr(payload, k) for k in _LICENSE_FIELDS})
    db.add(obj)
    try:
        db.flush()
        _replace_links(db, obj, payload.responsible_ids, payload.stakeholder_ids)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(obj)
    return obj


def update_license(db: Session, obj: License, payload: LicenseUpdate) -> License:
    data = payload.model_dump(exclude_unset=True)
    responsible_ids = data.pop("responsible_ids", None)
    stakeholder_ids = data.pop("stakeholder_ids", None)

    was_six_month = bool(obj.notify_six_month)

    for k, v in data.items():
        # None means "keep" (blank form inputs arrive as None)
        if v is None:
            continue
        setattr(obj, k, v)

    # re-arm the one-shot only when the flag is switched on
    if not was_six_month and bool(obj.notify_six_month):
        obj.six_month_sent_at = None

    try:
        if responsible_ids is not None or stakeholder_ids is not None:
            current = link_ids(db, [obj.id])[obj.id]
            _replace_links(
                db,
                obj,
                responsible_ids if responsible_ids is not None else current["RESPONSIBLE"],
                stakeholder_ids if stakeholder_ids is not None else current["STAKEHOLDER"],
            )
        db.add(obj)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(obj)
    return obj


def delete_license(db: Session, obj: License) -> None:
    db.delete(obj)
    db.commit()


def mark_six_month_sent(db: Session, license_id: int, ts: datetime) -> bool:
    """
    Set six_month_sent_at only if it is still NULL.
    Returns False when another writer got there first.
    """
    res = db.execute(
        update(License)
        .where(License.id == license_id, License.six_month_sent_at.is_(None))
        .values(six_month_sent_at=ts)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return bool(res.rowcount)
