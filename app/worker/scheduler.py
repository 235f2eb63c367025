# app/worker/scheduler.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from app.core.config import now_local, scheduler_time, timezone_name
from app.core.errors import StoreUnavailable, store_guard
from app.crud.license import get_active_licenses, mark_six_month_sent
from app.db.session import SessionLocal
from app.services.expiry_rules import evaluate, has_any_notify_flag
from app.services.mailer import MailTransport
from app.services.notifications import dispatch

log = logging.getLogger("app.scheduler")

JOB_ID = "license_expiry_scan"


def run_daily_scan(
    *,
    session_factory: Callable[[], Session] = SessionLocal,
    transport: Optional[MailTransport] = None,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    One sequential pass over all ACTIVE licenses.

    A failure for one license is logged and the scan moves on. A datastore
    failure at any point (listing, recipients, mail log, marker) aborts the
    run with StoreUnavailable. There is no checkpoint: the next run simply
    re-evaluates everything.
    """
    now = now if now is not None else now_local()
    stats = {"scanned": 0, "skipped": 0, "triggered": 0, "dispatched": 0, "failed": 0, "marked": 0}

    db = session_factory()
    try:
        with store_guard("listing active licenses"):
            licenses = get_active_licenses(db)

        for lic in licenses:
            stats["scanned"] += 1
            if not has_any_notify_flag(lic):
                stats["skipped"] += 1
                continue

            license_id = lic.id
            try:
                decision = evaluate(lic, now)
                if not decision.should_send:
                    continue
                stats["triggered"] += 1

                result = dispatch(db, lic, transport=transport, now=now)
                if not result.ok:
                    stats["failed"] += 1
                    log.warning(
                        "Mail not sent license_id=%s reason=%s code=%s: %s",
                        license_id,
                        decision.reason.value,
                        result.code,
                        result.error,
                    )
                    continue
                stats["dispatched"] += 1

                if decision.mark_six_month_sent:
                    with store_guard("marking six-month reminder"):
                        if mark_six_month_sent(db, license_id, now):
                            stats["marked"] += 1
            except StoreUnavailable:
                # datastore gone: abort the run, the next scheduled run starts over
                db.rollback()
                log.error("License expiry scan aborted at license_id=%s stats=%s", license_id, stats)
                raise
            except Exception:
                db.rollback()
                stats["failed"] += 1
                log.exception("License expiry scan failed for license_id=%s", license_id)
    finally:
        db.close()

    log.info("license expiry scan done %s", stats)
    return stats


def run_daily_notifications() -> Dict[str, int]:
    """Scheduler job: never lets an exception escape into APScheduler."""
    try:
        return run_daily_scan()
    except StoreUnavailable as exc:
        log.error("License expiry scan aborted, retrying at next run: %s", exc.cause or exc)
    except Exception:
        log.exception("License expiry scan crashed")
    return {}


def make_scheduler() -> BackgroundScheduler:
    """
    Create and return a BackgroundScheduler instance configured from env:
      - APP_TIMEZONE           (default: system tz via tzlocal or 'UTC')
      - APP_SCHEDULER_HOUR     (default: 9)
      - APP_SCHEDULER_MINUTE   (default: 0)
    """
    tzname = timezone_name()
    hour, minute = scheduler_time()

    sched = BackgroundScheduler(timezone=tzname)

    # Daily job
    sched.add_job(
        run_daily_notifications,
        CronTrigger(hour=hour, minute=minute, timezone=tzname),
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    return sched
