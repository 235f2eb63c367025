# app/services/notifications.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from app.core.config import now_local
from app.core.errors import (
    NOT_FOUND,
    NO_RECIPIENTS,
    NO_TRANSPORT,
    SEND_FAILED,
    StoreUnavailable,
    store_guard,
)
from app.crud.license import get_license, get_linked_people, mark_six_month_sent
from app.crud.mail_log import append_mail_log
from app.crud.message_template import get_template_set
from app.models.license import License
from app.models.person import Person
from app.schemas.notification import DispatchResult
from app.services.expiry_rules import days_left, should_send_immediate_six_month
from app.services.mailer import (
    MailTransport,
    MailTransportNotConfigured,
    error_message,
    get_transport,
)
from app.services.templates import pick_templates, render_template

log = logging.getLogger("app.notifications")


# ---------------------------------
# Helpers
# ---------------------------------
def _fmt(v: Any) -> Any:
    return v.isoformat() if hasattr(v, "isoformat") else v


def build_message(
    license: License,
    person: Person,
    remaining: int,
    is_responsible: bool,
    templates: Dict[str, str],
) -> Dict[str, str]:
    """Render subject/body for one recipient."""
    values = {
        "person_name": person.name,
        "person_email": person.email,
        "license_name": license.name,
        "provider": license.provider,
        "expiry_date": _fmt(license.expiry_date),
        "issued_date": _fmt(license.issued_date),
        "start_date": _fmt(license.start_date),
        "days_left": remaining,
        "role": "RESPONSIBLE" if is_responsible else "STAKEHOLDER",
    }
    subject_t, body_t = pick_templates(templates, is_responsible)
    return {
        "subject": render_template(subject_t, values),
        "body": render_template(body_t, values),
    }


def _resolve_license(db: Session, license_or_id: Union[int, License]) -> Optional[License]:
    if isinstance(license_or_id, License):
        return license_or_id
    with store_guard("loading license"):
        return get_license(db, int(license_or_id))


# ---------------------------------
# Dispatcher
# ---------------------------------
def dispatch(
    db: Session,
    license_or_id: Union[int, License],
    *,
    transport: Optional[MailTransport] = None,
    now: Optional[datetime] = None,
) -> DispatchResult:
    """
    Send the reminder for one license to every linked person and log each attempt.

    Recipients are independent: a failed send is logged as FAILED and the
    loop continues. The result is ok as long as at least one send succeeded.
    Datastore connectivity errors raise StoreUnavailable.
    """
    license = _resolve_license(db, license_or_id)
    if license is None:
        return DispatchResult(ok=False, error="License not found", code=NOT_FOUND)

    if transport is None:
        try:
            with store_guard("loading SMTP settings"):
                transport = get_transport(db)
        except MailTransportNotConfigured as exc:
            return DispatchResult(ok=False, error=str(exc), code=NO_TRANSPORT)

    remaining = days_left(license.expiry_date, now if now is not None else now_local())
    templates = get_template_set(db)

    with store_guard("loading recipients"):
        recipients = get_linked_people(db, license.id)
    if not recipients:
        return DispatchResult(
            ok=False, error="No recipients linked to this license", code=NO_RECIPIENTS
        )

    sent = 0
    failed = 0
    first_failure: Optional[str] = None

    for person, responsibility in recipients:
        is_responsible = responsibility == "RESPONSIBLE"
        mail_type = "RESPONSIBLE" if is_responsible else "STAKEHOLDER"
        msg = build_message(license, person, remaining, is_responsible, templates)

        status, error = "SENT", None
        try:
            transport.send(to=person.email, subject=msg["subject"], body=msg["body"])
        except Exception as exc:
            status, error = "FAILED", error_message(exc)
            first_failure = first_failure or error
            log.warning(
                "reminder send failed license_id=%s person_id=%s email=%s: %s",
                license.id,
                person.id,
                person.email,
                error,
            )

        with store_guard("writing mail log"):
            append_mail_log(
                db,
                license_id=license.id,
                person_id=person.id,
                email=person.email,
                mail_type=mail_type,
                subject=msg["subject"],
                body=msg["body"],
                status=status,
                error=error,
            )

        if status == "SENT":
            sent += 1
        else:
            failed += 1

    total = sent + failed
    if sent == 0:
        return DispatchResult(
            ok=False,
            sent=sent,
            failed=failed,
            total=total,
            error=first_failure or "All notification sends failed",
            code=SEND_FAILED,
        )

    log.info(
        "reminders dispatched license_id=%s sent=%s failed=%s days_left=%s",
        license.id,
        sent,
        failed,
        remaining,
    )
    return DispatchResult(ok=True, sent=sent, failed=failed, total=total)


# ---------------------------------
# Immediate six-month path (create/update)
# ---------------------------------
def notify_immediately_if_due(
    db: Session,
    license: License,
    *,
    transport: Optional[MailTransport] = None,
    now: Optional[datetime] = None,
) -> Optional[DispatchResult]:
    """
    Fire the six-month reminder right after a create/update when the license
    is already inside its window. Never raises: failures are logged only,
    the caller's request must succeed regardless.
    Returns None when nothing was due.
    """
    now = now if now is not None else now_local()
    if not should_send_immediate_six_month(license, now):
        return None

    license_id = license.id
    try:
        result = dispatch(db, license, transport=transport, now=now)
        if not result.ok:
            log.warning(
                "Immediate six-month notification failed license_id=%s code=%s: %s",
                license_id,
                result.code,
                result.error,
            )
            return result
        with store_guard("marking six-month reminder"):
            mark_six_month_sent(db, license_id, now)
        db.refresh(license)
        return result
    except StoreUnavailable as exc:
        db.rollback()
        log.warning("Immediate six-month notification aborted license_id=%s: %s", license_id, exc)
    except Exception:
        db.rollback()
        log.exception("Immediate six-month notification crashed license_id=%s", license_id)
    return None


# ---------------------------------
# Test mail
# ---------------------------------
def send_test_mail(db: Session, *, transport: Optional[MailTransport] = None) -> Dict[str, Any]:
    """Send a probe message to the sender's own mailbox."""
    if transport is None:
        try:
            transport = get_transport(db)
        except MailTransportNotConfigured as exc:
            return {"ok": False, "error": str(exc), "code": NO_TRANSPORT}
    try:
        transport.send(
            to=transport.sender,
            subject="Mail test from License Management System",
            body="If you received this, SMTP auth is working.",
        )
    except Exception as exc:
        log.warning("test mail failed: %s", exc)
        return {"ok": False, "error": error_message(exc), "code": SEND_FAILED}
    return {"ok": True}
