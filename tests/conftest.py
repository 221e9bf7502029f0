"""
Shared fixtures: an in-memory database per test, the repository/service
stack bound to it, and an API client wired to the same database.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database.connection import build_engine, create_tables, get_db
from models.package import PackageStatus
from repositories.package_repository import PackageRepository
from services.package_service import PackageService


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2025, 3, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# Status changes that bring a fresh package into each status
PATHS_TO_STATUS = {
    PackageStatus.WAITING: [],
    PackageStatus.PICKED: [PackageStatus.PICKED],
    PackageStatus.HANDED_OVER: [PackageStatus.PICKED, PackageStatus.HANDED_OVER],
    PackageStatus.EXPIRED: [PackageStatus.EXPIRED],
}


@pytest.fixture
def engine():
    db_engine = build_engine("sqlite://")
    create_tables(bind=db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(db_session, clock):
    return PackageRepository(db_session, clock=clock)


@pytest.fixture
def service(repository, clock):
    return PackageService(repository, clock=clock, expiry_threshold=timedelta(hours=24))


@pytest.fixture
def package_in_status(service, clock):
    """Factory creating a package and driving it into the requested status."""
    counter = {"n": 0}

    def _make(status: PackageStatus, order_ref: str = None, driver_code: str = "DRV-1"):
        counter["n"] += 1
        package = service.create(order_ref or f"ORD-{counter['n']:03d}", driver_code)
        for step in PATHS_TO_STATUS[status]:
            clock.advance(minutes=1)
            package = service.update_status(package.id, step)
        clock.advance(seconds=1)
        return package

    return _make


@pytest.fixture
def client(session_factory):
    from main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
