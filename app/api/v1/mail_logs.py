# app/api/v1/mail_logs.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.crud.mail_log import list_mail_logs
from app.db.session import get_db
from app.schemas.mail_log import MailLogPage

router = APIRouter(prefix="/mail-logs", tags=["mail_logs"])


@router.get("", response_model=MailLogPage)
def get_mail_logs(
    status: Optional[str] = Query(None, pattern="(?i)^(sent|failed)$"),
    license_id: Optional[int] = Query(None, ge=1),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Newest first, joined with license and person names."""
    items, total = list_mail_logs(
        db, status=status, license_id=license_id, limit=limit, offset=offset
    )
    return {"items": items, "count": total}
