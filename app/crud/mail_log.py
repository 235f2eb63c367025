# app/crud/mail_log.py
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.license import License
from app.models.mail_log import MailLog
from app.models.person import Person


def append_mail_log(
    db: Session,
    *,
    license_id: int,
    person_id: Optional[int],
    email: str,
    mail_type: str,
    subject: str,
    body: str,
    status: str,
    error: Optional[str] = None,
) -> MailLog:
    """Insert one immutable log row and commit it on its own."""
    row = MailLog(
        license_id=license_id,
        person_id=person_id,
        email=email,
        mail_type=mail_type,
        subject=subject,
        body=body,
        status=status,
        error=error,
    )
    db.add(row)
    db.commit()
    return row


def list_mail_logs(
    db: Session,
    *,
    status: Optional[str] = None,
    license_id: Optional[int] = None,
    limit: int = 100,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    q = (
        db.query(MailLog, License.name, Person.name)
        .outerjoin(License, License.id == MailLog.license_id)
        .outerjoin(Person, Person.id == MailLog.person_id)
    )
    if status:
        q = q.filter(MailLog.status == status.strip().upper())
    if license_id is not None:
        q = q.filter(MailLog.license_id == license_id)

    total = q.count()
    rows = (
        q.order_by(MailLog.sent_at.desc(), MailLog.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )

    items: List[Dict[str, Any]] = []
    for log_row, license_name, person_name in rows:
        d = {c.name: getattr(log_row, c.name) for c in MailLog.__table__.columns}
        d["license_name"] = license_name
        d["person_name"] = person_name
        items.append(d)
    return items, total
