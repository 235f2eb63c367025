# app/api/health.py
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.worker.scheduler import JOB_ID

router = APIRouter(tags=["health"])

_STARTED = time.monotonic()


def _scheduler_state(request: Request) -> Dict[str, Any]:
    sched = getattr(request.app.state, "scheduler", None)
    if sched is None:
        return {"running": False, "next_run_at": None}
    job = sched.get_job(JOB_ID)
    next_run = getattr(job, "next_run_time", None) if job else None
    return {
        "running": bool(sched.running),
        "next_run_at": next_run.isoformat() if next_run else None,
    }


@router.get("/healthz")
def healthz() -> dict:
    """Liveness: answers as long as the process does."""
    return {
        "ok": True,
        "service": "licensure",
        "status": "UP",
        "uptime_s": round(time.monotonic() - _STARTED, 1),
        "ts": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/readyz")
def readyz(request: Request, db: Session = Depends(get_db)):
    """Readiness: DB round-trip plus the daily expiry job's next fire time."""
    scheduler = _scheduler_state(request)
    t0 = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except Exception as exc:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "db": "down", "error": str(exc), "scheduler": scheduler},
            headers={"Cache-Control": "no-store"},
        )
    return JSONResponse(
        status_code=200,
        content={
            "ok": True,
            "db": "up",
            "db_latency_ms": round((time.perf_counter() - t0) * 1000.0, 2),
            "scheduler": scheduler,
        },
        headers={"Cache-Control": "no-store"},
    )
