# tests/conftest.py
import os

# must be set before app modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_SCHEDULER"] = "0"
os.environ["ENABLE_CREATE_ALL"] = "0"
os.environ["RUN_MIGRATIONS"] = "0"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ.pop("MAIL_USER", None)
os.environ.pop("MAIL_PASS", None)

from datetime import date, datetime, timezone  # noqa: E402
from typing import Iterable, List, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.models import Base  # noqa: E402
from app.models.license import License  # noqa: E402
from app.models.license_person import LicensePerson  # noqa: E402
from app.models.person import Person  # noqa: E402


class FakeTransport:
    """Records sends; raises for addresses listed in fail_for."""

    sender = "bot@acme.io"

    def __init__(self, fail_for: Iterable[str] = ()):
        self.fail_for = set(fail_for)
        self.sent: List[dict] = []
        self.attempts = 0

    def send(self, *, to: str, subject: str, body: str) -> None:
        self.attempts += 1
        if to in self.fail_for:
            raise RuntimeError(f"550 mailbox unavailable: {to}")
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(eng, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cur = dbapi_connection.cursor()
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.close()

    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture()
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def make_person(db):
    counter = {"n": 0}

    def _make(
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: str = "RESPONSIBLE",
        status: str = "ACTIVE",
    ) -> Person:
        counter["n"] += 1
        n = counter["n"]
        p = Person(
            name=name or f"Person {n}",
            email=email or f"person{n}@acme.io",
            phone="+385 1 000",
            department="IT",
            role=role,
            designation=None if role == "RESPONSIBLE" else "Analyst",
            status=status,
        )
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make


@pytest.fixture()
def make_license(db):
    def _make(
        expiry_date: date,
        *,
        people: Iterable[Tuple[Person, str]] = (),
        notify_six_month: bool = False,
        notify_monthly: bool = False,
        notify_daily_last_30: bool = False,
        status: str = "ACTIVE",
        six_month_sent_at: Optional[datetime] = None,
        name: str = "Acme CAD",
    ) -> License:
        lic = License(
            name=name,
            provider="Acme",
            issued_date=date(2020, 1, 1),
            start_date=date(2020, 1, 1),
            expiry_date=expiry_date,
            status=status,
            notify_six_month=notify_six_month,
            notify_monthly=notify_monthly,
            notify_daily_last_30=notify_daily_last_30,
            six_month_sent_at=six_month_sent_at,
        )
        db.add(lic)
        db.flush()
        for person, responsibility in people:
            db.add(LicensePerson(license_id=lic.id, person_id=person.id, responsibility=responsibility))
        db.commit()
        db.refresh(lic)
        return lic

    return _make


def utc(y: int, m: int, d: int, hh: int = 9) -> datetime:
    return datetime(y, m, d, hh, 0, tzinfo=timezone.utc)
