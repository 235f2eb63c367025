# app/schemas/notification.py
from typing import Optional

from pydantic import BaseModel, Field


class DispatchResult(BaseModel):
    ok: bool
    sent: int = 0
    failed: int = 0
    total: int = 0
    error: Optional[str] = Field(None, description="First failure reason when ok is false.")
    code: Optional[str] = Field(
        None,
        description=(
            "NOT_FOUND | NO_TRANSPORT | NO_RECIPIENTS | SEND_FAILED. "
            "STORE_UNAVAILABLE is never returned here: it is raised and answered with HTTP 503."
        ),
    )
