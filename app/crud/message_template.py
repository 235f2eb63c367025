# app/crud/message_template.py
from __future__ import annotations

import logging
from typing import Dict

from sqlalchemy.orm import Session

from app.models.message_template import MessageTemplate, TEMPLATE_ROW_ID
from app.schemas.message_template import MessageTemplateIn
from app.services.templates import DEFAULT_TEMPLATES, TEMPLATE_FIELDS

log = logging.getLogger("app.notifications")


def ensure_template_row(db: Session) -> MessageTemplate:
    """Return the singleton row, seeding it with the built-in defaults."""
    row = db.get(MessageTemplate, TEMPLATE_ROW_ID)
    if row is None:
        row = MessageTemplate(id=TEMPLATE_ROW_ID, **DEFAULT_TEMPLATES)
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def get_template_set(db: Session) -> Dict[str, str]:
    """
    Template set for rendering. Never raises: any load problem falls back
    to DEFAULT_TEMPLATES so delivery is not blocked.
    """
    try:
        row = ensure_template_row(db)
        return {f: (getattr(row, f) or DEFAULT_TEMPLATES[f]) for f in TEMPLATE_FIELDS}
    except Exception as exc:
        db.rollback()
        log.warning("Message template lookup failed, using defaults: %s", exc)
        return dict(DEFAULT_TEMPLATES)


def save_templates(db: Session, payload: MessageTemplateIn) -> MessageTemplate:
    row = ensure_template_row(db)
    for f in TEMPLATE_FIELDS:
        setattr(row, f, getattr(payload, f))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
