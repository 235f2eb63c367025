# app/api/v1/smtp_settings.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.smtp_setting import SmtpSettingsIn, SmtpSettingsView
from app.services.notifications import send_test_mail
from app.services.smtp_settings import save_smtp_settings, smtp_settings_view

router = APIRouter(prefix="/smtp-settings", tags=["smtp_settings"])


@router.get("", response_model=SmtpSettingsView)
def get_smtp_settings(db: Session = Depends(get_db)):
    return smtp_settings_view(db)


@router.put("", response_model=SmtpSettingsView)
def put_smtp_settings(payload: SmtpSettingsIn, db: Session = Depends(get_db)):
    save_smtp_settings(
        db,
        sender_email=str(payload.sender_email),
        sender_password=payload.sender_password,
    )
    return smtp_settings_view(db)


@router.post("/test")
def test_smtp_settings(db: Session = Depends(get_db)):
    """Send a probe mail to the configured sender address."""
    result = send_test_mail(db)
    if not result.get("ok"):
        raise HTTPException(status_code=400, detail=result)
    return {"ok": True, "status": "OK"}
