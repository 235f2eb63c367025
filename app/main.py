# app/main.py
from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv, find_dotenv
from fastapi import FastAPI

# ---------------------------
# Env loading (root .env first, then app/.env as fallback)
# ---------------------------
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(Path(__file__).resolve().parent / ".env", override=False)

from app.core import config  # noqa: E402
from app.core.errors import register_exception_handlers  # noqa: E402
from app.db.session import engine  # noqa: E402
from app.middleware.request_logging import RequestLoggingMiddleware  # noqa: E402
from app.models import Base  # noqa: E402  (registers every table)
from app.worker.scheduler import make_scheduler  # noqa: E402

from app.api import health  # noqa: E402
from app.api.v1 import (  # noqa: E402
    licenses,
    people,
    mail_logs,
    message_templates,
    smtp_settings,
)

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("app.main")

# ---------------------------
# APP
# ---------------------------
app = FastAPI(
    title="Licensure",
    version="1.0.0",
    description="License expiry tracking and reminder mail service",
)
app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)

# ---------------------------
# ROUTER MOUNT
# ---------------------------
app.include_router(licenses.router, prefix="/api/v1")
app.include_router(people.router, prefix="/api/v1")
app.include_router(mail_logs.router, prefix="/api/v1")
app.include_router(message_templates.router, prefix="/api/v1")
app.include_router(smtp_settings.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api")


@app.get("/", tags=["health"])
def root() -> dict:
    return {"status": "OK", "message": "License Management Backend is running"}


# ---------------------------
# Schema + scheduler lifecycle
# ---------------------------
@app.on_event("startup")
def _init_schema():
    # RUN_MIGRATIONS=1 for deployed databases; create_all is the dev shortcut
    if config.migrations_enabled():
        from app.db.migrate import run_migrations

        run_migrations()
    elif config.create_all_enabled():
        Base.metadata.create_all(bind=engine)


@app.on_event("startup")
def _warn_insecure_defaults():
    if not config.smtp_secret_configured():
        log.warning("SMTP_SECRET_KEY / APP_SECRET not set; stored SMTP passwords are only obscured")


@app.on_event("startup")
def _start_scheduler():
    app.state.scheduler = None
    if not config.scheduler_enabled():
        return
    try:
        app.state.scheduler = make_scheduler()
        app.state.scheduler.start()
        log.info("daily license expiry scan scheduled at %02d:%02d %s", *config.scheduler_time(), config.timezone_name())
    except Exception:
        # keep the API running if the scheduler cannot start
        log.exception("scheduler failed to start")
        app.state.scheduler = None


@app.on_event("shutdown")
def _stop_scheduler():
    sched = getattr(app.state, "scheduler", None)
    if sched:
        sched.shutdown(wait=False)
