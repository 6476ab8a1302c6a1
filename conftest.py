from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finplan.db.session import init_db
from finplan.reminders.repository import SqlAlchemyReminderStore
from finplan.reminders.unified_service import ReminderScheduler


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return SqlAlchemyReminderStore(db)


class FrozenClock:
    """Settable stand-in for datetime.now"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 20, 12, 0))


@pytest.fixture
def scheduler(store, clock):
    return ReminderScheduler(store, clock=clock)
