# app/schemas/license.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


def _blank_to_none(v):
    # dashboard forms send "" for untouched inputs
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _norm_status(v: Optional[str]) -> Optional[str]:
    return v.strip().upper() if isinstance(v, str) else v


class LicenseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="License name.")
    provider: str = Field(..., min_length=1, max_length=255, description="Vendor / provider.")
    cost: Optional[Decimal] = Field(None, ge=0, description="License cost.")
    issued_date: date = Field(..., description="Issue date (ISO 8601).")
    start_date: Optional[date] = Field(None, description="Start date (ISO 8601).")
    expiry_date: date = Field(..., description="Expiry date (ISO 8601).")
    status: str = Field("ACTIVE", max_length=20, description="ACTIVE or any inactive marker.")
    description: Optional[str] = Field(None, description="Free-text notes.")

    notify_six_month: bool = Field(False, description="One-time reminder six months before expiry.")
    notify_monthly: bool = Field(False, description="Reminder on the 1st of each month inside the six-month window.")
    notify_daily_last_30: bool = Field(False, description="Daily reminder during the last 30 days.")

    @field_validator("cost", "start_date", "description", mode="before")
    @classmethod
    def _blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status_upper(cls, v):
        v = _blank_to_none(v)
        return _norm_status(v) if v is not None else "ACTIVE"


class LicenseCreate(LicenseBase):
    responsible_ids: List[int] = Field(default_factory=list, description="People to tag RESPONSIBLE.")
    stakeholder_ids: List[int] = Field(default_factory=list, description="People to tag STAKEHOLDER.")

    @model_validator(mode="after")
    def _check_dates(self) -> "LicenseCreate":
        if self.expiry_date < self.issued_date:
            raise ValueError("expiry_date must be on or after issued_date.")
        return self


class LicenseUpdate(BaseModel):
    """
    Partial update. Blank strings keep the stored value.
    Link lists replace the current links only when supplied.
    """

    name: Optional[str] = Field(None, max_length=255)
    provider: Optional[str] = Field(None, max_length=255)
    cost: Optional[Decimal] = Field(None, ge=0)
    issued_date: Optional[date] = None
    start_date: Optional[date] = None
    expiry_date: Optional[date] = None
    status: Optional[str] = Field(None, max_length=20)
    description: Optional[str] = None

    notify_six_month: Optional[bool] = None
    notify_monthly: Optional[bool] = None
    notify_daily_last_30: Optional[bool] = None

    responsible_ids: Optional[List[int]] = None
    stakeholder_ids: Optional[List[int]] = None

    @field_validator(
        "name", "provider", "cost", "issued_date", "start_date",
        "expiry_date", "status", "description",
        mode="before",
    )
    @classmethod
    def _blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("status")
    @classmethod
    def _status_upper(cls, v: Optional[str]) -> Optional[str]:
        return _norm_status(v)


class LicenseOut(LicenseBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    six_month_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    responsible_ids: List[int] = Field(default_factory=list)
    stakeholder_ids: List[int] = Field(default_factory=list)
