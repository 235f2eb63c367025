# tests/test_expiry_rules.py
from datetime import date, datetime, timedelta, timezone

import pytest

from app.services.expiry_rules import (
    TriggerReason,
    add_months,
    days_left,
    evaluate,
    should_send_immediate_six_month,
    six_month_point,
    start_of_day,
)

ALL_FLAGS = {"notify_six_month": True, "notify_monthly": True, "notify_daily_last_30": True}


def lic(expiry, **flags):
    row = {"expiry_date": expiry, "six_month_sent_at": None}
    row.update(flags)
    return row


@pytest.mark.parametrize("offset", [1, 2, 30, 400])
def test_expired_license_never_sends(offset):
    today = date(2026, 3, 15)
    d = evaluate(lic(today - timedelta(days=offset), **ALL_FLAGS), today)
    assert d.should_send is False
    assert d.reason is TriggerReason.NONE
    assert should_send_immediate_six_month(lic(today - timedelta(days=offset), **ALL_FLAGS), today) is False


def test_expiring_today_is_still_in_daily_window():
    today = date(2026, 3, 15)
    d = evaluate(lic(today, notify_daily_last_30=True), today)
    assert d.should_send and d.reason is TriggerReason.DAILY_LAST_30


def test_six_month_fires_on_the_exact_point():
    expiry = date(2026, 9, 15)
    row = lic(expiry, notify_six_month=True)

    assert evaluate(row, date(2026, 3, 14)).should_send is False

    d = evaluate(row, date(2026, 3, 15))
    assert d.should_send is True
    assert d.reason is TriggerReason.SIX_MONTH
    assert d.mark_six_month_sent is True


def test_six_month_is_one_shot_once_recorded():
    expiry = date(2026, 9, 15)
    row = lic(expiry, notify_six_month=True)
    row["six_month_sent_at"] = datetime(2026, 3, 15, 9, tzinfo=timezone.utc)

    for offset in range(0, 60):
        d = evaluate(row, date(2026, 3, 15) + timedelta(days=offset))
        assert d.reason is not TriggerReason.SIX_MONTH


def test_six_month_catches_up_inside_window():
    # created late: first scan after the point still fires once
    row = lic(date(2026, 5, 1), notify_six_month=True)
    d = evaluate(row, date(2026, 3, 15))
    assert d.reason is TriggerReason.SIX_MONTH


def test_six_month_has_priority_over_daily():
    today = date(2026, 3, 15)
    row = lic(today + timedelta(days=10), notify_six_month=True, notify_daily_last_30=True)
    d = evaluate(row, today)
    assert d.reason is TriggerReason.SIX_MONTH
    assert d.mark_six_month_sent is True


def test_monthly_fires_only_on_first_of_month_inside_window():
    today = date(2026, 3, 15)
    expiry = today + timedelta(days=200)
    assert expiry == date(2026, 10, 1)
    row = lic(expiry, notify_monthly=True)

    fired = []
    day = today
    while day <= expiry:
        d = evaluate(row, day)
        if d.should_send:
            assert d.reason is TriggerReason.MONTHLY
            assert d.mark_six_month_sent is False
            fired.append(day)
        day += timedelta(days=1)

    assert fired == [
        date(2026, 4, 1),
        date(2026, 5, 1),
        date(2026, 6, 1),
        date(2026, 7, 1),
        date(2026, 8, 1),
    ]


def test_monthly_stops_at_thirty_days_left():
    # 2026-09-01 is exactly 30 days before expiry: handed over to the daily rule
    row = lic(date(2026, 10, 1), notify_monthly=True)
    assert evaluate(row, date(2026, 9, 1)).should_send is False

    row["notify_daily_last_30"] = True
    assert evaluate(row, date(2026, 9, 1)).reason is TriggerReason.DAILY_LAST_30


def test_daily_window_boundary():
    today = date(2026, 3, 15)
    assert evaluate(lic(today + timedelta(days=30), notify_daily_last_30=True), today).reason is (
        TriggerReason.DAILY_LAST_30
    )
    assert evaluate(lic(today + timedelta(days=31), notify_daily_last_30=True), today).should_send is False


def test_no_flags_never_sends():
    today = date(2026, 3, 15)
    for offset in (0, 1, 15, 30, 100, 183):
        assert evaluate(lic(today + timedelta(days=offset)), today).should_send is False


def test_flags_accept_string_and_int_truthy_values():
    today = date(2026, 3, 15)
    assert evaluate(lic(today + timedelta(days=5), notify_daily_last_30="true"), today).should_send
    assert evaluate(lic(today + timedelta(days=5), notify_daily_last_30=1), today).should_send
    assert not evaluate(lic(today + timedelta(days=5), notify_daily_last_30="no"), today).should_send


def test_immediate_check_matches_six_month_rule():
    today = date(2026, 3, 15)
    assert should_send_immediate_six_month(lic(date(2026, 9, 15), notify_six_month=True), today)
    assert not should_send_immediate_six_month(lic(date(2026, 9, 16), notify_six_month=True), today)
    assert not should_send_immediate_six_month(lic(date(2026, 9, 15), notify_six_month=False), today)

    sent = lic(date(2026, 9, 15), notify_six_month=True)
    sent["six_month_sent_at"] = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert not should_send_immediate_six_month(sent, today)


def test_immediate_check_works_on_orm_rows(make_license):
    row = make_license(date(2026, 6, 1), notify_six_month=True)
    assert should_send_immediate_six_month(row, date(2026, 3, 15)) is True


@pytest.mark.parametrize(
    "expiry, point",
    [
        (date(2026, 8, 31), date(2026, 3, 3)),
        (date(2028, 8, 31), date(2028, 3, 2)),
        (date(2026, 9, 15), date(2026, 3, 15)),
        (date(2027, 3, 31), date(2026, 10, 1)),
        (date(2027, 1, 10), date(2026, 7, 10)),
    ],
)
def test_six_month_point_rolls_overflow_into_next_month(expiry, point):
    assert six_month_point(expiry) == point


def test_add_months_crosses_year_forward():
    assert add_months(date(2026, 11, 30), 3) == date(2027, 3, 2)


def test_days_left_ignores_time_of_day():
    assert days_left(date(2026, 3, 20), datetime(2026, 3, 15, 23, 59)) == 5
    assert days_left("2026-03-20", "2026-03-15T00:01:00") == 5


def test_start_of_day_uses_app_timezone(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "Europe/Berlin")
    late_utc = datetime(2026, 3, 31, 23, 30, tzinfo=timezone.utc)
    assert start_of_day(late_utc) == date(2026, 4, 1)


def test_start_of_day_rejects_garbage():
    with pytest.raises(TypeError):
        start_of_day(12345)


def test_six_month_for_month_end_expiry_waits_for_rolled_day():
    row = lic(date(2026, 8, 31), notify_six_month=True, notify_monthly=True)

    assert evaluate(row, date(2026, 2, 28)).should_send is False
    assert evaluate(row, date(2026, 3, 2)).should_send is False
    assert evaluate(row, date(2026, 3, 3)).reason is TriggerReason.SIX_MONTH

    # 1 March is before the six-month point, so no monthly reminder either
    row["six_month_sent_at"] = datetime(2026, 3, 3, 9, tzinfo=timezone.utc)
    assert evaluate(row, date(2026, 3, 1)).should_send is False
    assert evaluate(row, date(2026, 4, 1)).reason is TriggerReason.MONTHLY
