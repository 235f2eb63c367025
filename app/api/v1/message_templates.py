# app/api/v1/message_templates.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud.message_template import ensure_template_row, save_templates
from app.db.session import get_db
from app.schemas.message_template import MessageTemplateIn, MessageTemplateOut

router = APIRouter(prefix="/message-templates", tags=["message_templates"])


@router.get("", response_model=MessageTemplateOut)
def get_message_templates(db: Session = Depends(get_db)):
    return ensure_template_row(db)


@router.put("", response_model=MessageTemplateOut)
def put_message_templates(payload: MessageTemplateIn, db: Session = Depends(get_db)):
    """All four fields are required; {{placeholders}} are stored verbatim."""
    return save_templates(db, payload)
