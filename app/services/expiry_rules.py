# app/services/expiry_rules.py
"""
Expiry reminder rules.

Pure functions: given a license (ORM row or mapping) and the current day,
decide whether a reminder is due today and under which rule. No I/O.

Rules, first match wins (at most one reminder per license per day):
  1. expired (days_left < 0)                       -> nothing
  2. SIX_MONTH     one-shot once today >= expiry - 6 months
  3. MONTHLY       1st of the month, between the six-month point and T-30
  4. DAILY_LAST_30 every day in the last 30 days
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Mapping, Optional

from app.core.config import app_timezone, now_local

SIX_MONTHS = 6
LAST_WINDOW_DAYS = 30


class TriggerReason(str, Enum):
    NONE = "NONE"
    SIX_MONTH = "SIX_MONTH"
    MONTHLY = "MONTHLY"
    DAILY_LAST_30 = "DAILY_LAST_30"


@dataclass(frozen=True)
class TriggerDecision:
    should_send: bool
    reason: TriggerReason = TriggerReason.NONE
    mark_six_month_sent: bool = False


NO_SEND = TriggerDecision(should_send=False)


# ---------------------------------
# Helpers
# ---------------------------------
def _field(license: Any, name: str) -> Any:
    if isinstance(license, Mapping):
        return license.get(name)
    return getattr(license, name, None)


def to_bool(value: Any) -> bool:
    """Same leniency as the JSON payloads we accept: True, "true", 1, "1"."""
    return value is True or value == "true" or value == 1 or value == "1"


def start_of_day(value: Any) -> date:
    """
    Normalise a date / datetime / ISO string to a calendar day.
    Aware datetimes are converted to the app timezone first.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(app_timezone())
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return start_of_day(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    raise TypeError(f"Cannot interpret {value!r} as a date")


def add_months(d: date, months: int) -> date:
    """
    Month shift keeping the day number. Days past the end of the target month
    roll into the next one: Aug 31 - 6 months is Mar 3 (Mar 2 in leap years).
    """
    if months == 0:
        return d
    year = d.year + (d.month - 1 + months) // 12
    month = (d.month - 1 + months) % 12 + 1
    return date(year, month, 1) + timedelta(days=d.day - 1)


def six_month_point(expiry: Any) -> date:
    return add_months(start_of_day(expiry), -SIX_MONTHS)


def days_left(expiry: Any, today: Any) -> int:
    """Whole calendar days from today to the expiry day (negative once expired)."""
    return (start_of_day(expiry) - start_of_day(today)).days


def notify_flags(license: Any) -> tuple[bool, bool, bool]:
    return (
        to_bool(_field(license, "notify_six_month")),
        to_bool(_field(license, "notify_monthly")),
        to_bool(_field(license, "notify_daily_last_30")),
    )


def has_any_notify_flag(license: Any) -> bool:
    return any(notify_flags(license))


def _six_month_due(license: Any, today: date, expiry: date) -> bool:
    notify_six_month = notify_flags(license)[0]
    return (
        notify_six_month
        and not _field(license, "six_month_sent_at")
        and today >= six_month_point(expiry)
    )


# ---------------------------------
# Public API
# ---------------------------------
def evaluate(license: Any, today: Optional[Any] = None) -> TriggerDecision:
    """Decide today's reminder for one license."""
    today_d = start_of_day(today if today is not None else now_local())
    expiry = start_of_day(_field(license, "expiry_date"))
    left = (expiry - today_d).days

    if left < 0:
        return NO_SEND

    if _six_month_due(license, today_d, expiry):
        return TriggerDecision(True, TriggerReason.SIX_MONTH, mark_six_month_sent=True)

    _, notify_monthly, notify_daily = notify_flags(license)

    if (
        notify_monthly
        and today_d >= six_month_point(expiry)
        and left > LAST_WINDOW_DAYS
        and today_d.day == 1
    ):
        return TriggerDecision(True, TriggerReason.MONTHLY)

    if notify_daily and left <= LAST_WINDOW_DAYS:
        return TriggerDecision(True, TriggerReason.DAILY_LAST_30)

    return NO_SEND


def should_send_immediate_six_month(license: Any, now: Optional[Any] = None) -> bool:
    """Is the SIX_MONTH condition true right now (create/update fast path)?"""
    today_d = start_of_day(now if now is not None else now_local())
    expiry = start_of_day(_field(license, "expiry_date"))
    return (expiry - today_d).days >= 0 and _six_month_due(license, today_d, expiry)
