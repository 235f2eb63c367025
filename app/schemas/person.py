# app/schemas/person.py
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator

PersonRole = Literal["RESPONSIBLE", "STAKEHOLDER"]

# UI and older rows call stakeholders "EMPLOYEE"
_ROLE_ALIASES = {"EMPLOYEE": "STAKEHOLDER"}


def normalize_role(v):
    if v is None:
        return None
    vv = str(v).strip().upper()
    return _ROLE_ALIASES.get(vv, vv)


class PersonBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=64)
    department: str = Field(..., min_length=1, max_length=255)
    role: PersonRole
    designation: Optional[str] = Field(None, max_length=255)

    @field_validator("role", mode="before")
    @classmethod
    def _norm_role(cls, v):
        return normalize_role(v)


class PersonCreate(PersonBase):
    pass


class PersonUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=64)
    department: Optional[str] = Field(None, max_length=255)
    role: Optional[PersonRole] = None
    designation: Optional[str] = Field(None, max_length=255)

    @field_validator("role", mode="before")
    @classmethod
    def _norm_role(cls, v):
        return normalize_role(v)


class PersonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    department: Optional[str] = None
    role: str
    designation: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
