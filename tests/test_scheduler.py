# tests/test_scheduler.py
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import StoreUnavailable
from app.models.license import License
from app.models.mail_log import MailLog
from app.services import notifications as notifications_mod
from app.worker import scheduler as scheduler_mod
from app.worker.scheduler import JOB_ID, make_scheduler, run_daily_notifications, run_daily_scan
from tests.conftest import FakeTransport, utc

NOW = utc(2026, 3, 15)
TODAY = date(2026, 3, 15)


def test_scan_dispatches_due_licenses_and_marks_six_month(
    db, session_factory, make_license, make_person, transport
):
    ana = make_person(email="ana@acme.io")
    due = make_license(TODAY + timedelta(days=150), people=[(ana, "RESPONSIBLE")], notify_six_month=True)
    make_license(TODAY + timedelta(days=10), people=[(ana, "RESPONSIBLE")])  # no flags
    make_license(TODAY + timedelta(days=10), people=[(ana, "RESPONSIBLE")], notify_daily_last_30=True, status="INACTIVE")

    stats = run_daily_scan(session_factory=session_factory, transport=transport, now=NOW)

    assert stats["scanned"] == 2
    assert stats["skipped"] == 1
    assert stats["triggered"] == 1
    assert stats["dispatched"] == 1
    assert stats["marked"] == 1
    assert len(transport.sent) == 1

    db.expire_all()
    assert db.get(License, due.id).six_month_sent_at is not None


def test_scan_is_idempotent_for_six_month(session_factory, make_license, make_person, transport):
    ana = make_person(email="ana@acme.io")
    make_license(TODAY + timedelta(days=150), people=[(ana, "RESPONSIBLE")], notify_six_month=True)

    run_daily_scan(session_factory=session_factory, transport=transport, now=NOW)
    second = run_daily_scan(session_factory=session_factory, transport=transport, now=utc(2026, 3, 16))

    assert second["triggered"] == 0
    assert len(transport.sent) == 1


def test_failed_dispatch_does_not_mark_and_retries_next_day(
    db, session_factory, make_license, make_person
):
    ana = make_person(email="ana@acme.io")
    lic = make_license(TODAY + timedelta(days=150), people=[(ana, "RESPONSIBLE")], notify_six_month=True)

    stats = run_daily_scan(
        session_factory=session_factory, transport=FakeTransport(fail_for={"ana@acme.io"}), now=NOW
    )
    assert stats["failed"] == 1
    assert stats["marked"] == 0
    db.expire_all()
    assert db.get(License, lic.id).six_month_sent_at is None

    ok_transport = FakeTransport()
    stats = run_daily_scan(session_factory=session_factory, transport=ok_transport, now=utc(2026, 3, 16))
    assert stats["marked"] == 1
    assert len(ok_transport.sent) == 1


def test_one_bad_license_does_not_stop_the_scan(
    db, session_factory, make_license, make_person, transport, monkeypatch
):
    ana = make_person(email="ana@acme.io")
    bad = make_license(TODAY + timedelta(days=5), people=[(ana, "RESPONSIBLE")], notify_daily_last_30=True)
    good = make_license(TODAY + timedelta(days=6), people=[(ana, "RESPONSIBLE")], notify_daily_last_30=True)
    orphan = make_license(TODAY + timedelta(days=7), notify_daily_last_30=True)

    real_dispatch = scheduler_mod.dispatch

    def flaky_dispatch(session, lic, **kw):
        if lic.id == bad.id:
            raise RuntimeError("template engine exploded")
        return real_dispatch(session, lic, **kw)

    monkeypatch.setattr(scheduler_mod, "dispatch", flaky_dispatch)

    stats = run_daily_scan(session_factory=session_factory, transport=transport, now=NOW)

    assert stats["triggered"] == 3
    assert stats["dispatched"] == 1
    assert stats["failed"] == 2  # crash + no recipients
    logged = {row.license_id for row in db.query(MailLog).all()}
    assert logged == {good.id}
    assert orphan.id not in logged


def test_listing_failure_aborts_with_store_unavailable(session_factory, monkeypatch):
    def boom(_db):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(scheduler_mod, "get_active_licenses", boom)

    with pytest.raises(StoreUnavailable):
        run_daily_scan(session_factory=session_factory, now=NOW)


def test_store_outage_mid_scan_aborts_the_run(
    session_factory, make_license, make_person, transport, monkeypatch
):
    ana = make_person(email="ana@acme.io")
    first = make_license(TODAY + timedelta(days=5), people=[(ana, "RESPONSIBLE")], notify_daily_last_30=True)
    make_license(TODAY + timedelta(days=6), people=[(ana, "RESPONSIBLE")], notify_daily_last_30=True)

    real_linked = notifications_mod.get_linked_people

    def flaky_linked(session, license_id):
        if license_id == first.id:
            raise OperationalError("SELECT", {}, Exception("server closed the connection"))
        return real_linked(session, license_id)

    monkeypatch.setattr(notifications_mod, "get_linked_people", flaky_linked)

    with pytest.raises(StoreUnavailable):
        run_daily_scan(session_factory=session_factory, transport=transport, now=NOW)

    # the second license was never reached
    assert transport.attempts == 0


def test_job_wrapper_never_raises(monkeypatch):
    def boom(**_kw):
        raise StoreUnavailable("Datastore unavailable while listing active licenses")

    monkeypatch.setattr(scheduler_mod, "run_daily_scan", boom)
    assert run_daily_notifications() == {}

    def crash(**_kw):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(scheduler_mod, "run_daily_scan", crash)
    assert run_daily_notifications() == {}


def test_make_scheduler_registers_daily_job(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "Europe/Zagreb")
    monkeypatch.setenv("APP_SCHEDULER_HOUR", "7")
    monkeypatch.setenv("APP_SCHEDULER_MINUTE", "30")

    sched = make_scheduler()
    job = sched.get_job(JOB_ID)

    assert job is not None
    assert job.max_instances == 1
    assert job.coalesce is True
    fields = {f.name: str(f) for f in job.trigger.fields}
    assert fields["hour"] == "7"
    assert fields["minute"] == "30"
    assert str(job.trigger.timezone) == "Europe/Zagreb"
