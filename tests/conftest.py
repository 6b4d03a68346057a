"""Shared fixtures: in-memory database, API client, sample chart."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from poultry_ledger.core.config import LedgerConfig  # noqa: E402
from poultry_ledger.core.database import Base  # noqa: E402
from poultry_ledger.core.dependencies import get_db, get_ledger_config  # noqa: E402
from poultry_ledger.main import app  # noqa: E402
from poultry_ledger.models import GroupType  # noqa: E402
from tests.factories import make_group  # noqa: E402


@pytest.fixture
def config() -> LedgerConfig:
    """Default engine settings"""
    return LedgerConfig()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session on a fresh in-memory database"""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db, config):
    """API client sharing the test session"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger_config] = lambda: config
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def expense_groups():
    return [
        make_group("GRP-ROOT", "Direct Expenses", GroupType.EXPENSES),
        make_group("GRP-CHILD", "Feed Expenses", GroupType.EXPENSES, parent_id="GRP-ROOT"),
    ]
