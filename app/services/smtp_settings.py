# app/services/smtp_settings.py
"""
SMTP sender credentials.

Stored in the smtp_settings singleton row; the password is encrypted with
Fernet using a key derived from SMTP_SECRET_KEY / APP_SECRET. MAIL_USER /
MAIL_PASS from the environment seed the row and act as fallback.
"""
from __future__ import annotations

import base64
import hashlib
import logging
from typing import Optional, Tuple

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.orm import Session

from app.core.config import env_mail_credentials, smtp_secret, smtp_secret_configured
from app.models.smtp_setting import SmtpSetting, SMTP_ROW_ID
from app.schemas.smtp_setting import SmtpSettingsView

log = logging.getLogger("app.mailer")


def _fernet() -> Fernet:
    # Fernet wants 32 url-safe base64 bytes; derive them from the configured secret
    digest = hashlib.sha256(smtp_secret().encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_secret(plain: str) -> str:
    if not smtp_secret_configured():
        log.warning(
            "SMTP_SECRET_KEY / APP_SECRET not set; the stored SMTP password uses the built-in key"
        )
    return _fernet().encrypt(str(plain).encode("utf-8")).decode("ascii")


def decrypt_secret(token: Optional[str]) -> str:
    if not token:
        return ""
    return _fernet().decrypt(token.encode("ascii")).decode("utf-8")


def ensure_smtp_row(db: Session) -> SmtpSetting:
    row = db.get(SmtpSetting, SMTP_ROW_ID)
    if row is None:
        env_user, env_pass = env_mail_credentials()
        row = SmtpSetting(
            id=SMTP_ROW_ID,
            sender_email=env_user or None,
            sender_password_enc=encrypt_secret(env_pass) if env_pass else None,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def get_smtp_credentials(db: Session) -> Tuple[str, str]:
    """(sender_email, sender_password); empty strings when unconfigured."""
    env_user, env_pass = env_mail_credentials()
    row = ensure_smtp_row(db)

    sender_email = row.sender_email or env_user
    sender_password = env_pass
    if row.sender_password_enc:
        try:
            sender_password = decrypt_secret(row.sender_password_enc)
        except InvalidToken:
            # key rotated or row copied from another deployment
            log.warning("Stored SMTP password cannot be decrypted; treating as unset")
            sender_password = ""
    return sender_email or "", sender_password or ""


def save_smtp_settings(db: Session, *, sender_email: str, sender_password: str) -> SmtpSetting:
    row = ensure_smtp_row(db)
    row.sender_email = sender_email.strip() or None
    row.sender_password_enc = encrypt_secret(sender_password) if sender_password else None
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def smtp_settings_view(db: Session) -> SmtpSettingsView:
    row = ensure_smtp_row(db)
    return SmtpSettingsView(
        sender_email=row.sender_email or "",
        has_password=bool(row.sender_password_enc),
        updated_at=row.updated_at,
    )
