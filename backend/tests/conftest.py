"""Shared test fixtures for the portfolio CMS backend test suite.

Tests run against a throwaway SQLite file with foreign keys enforced. Every
test starts from empty tables. Startup seeding is disabled through the
environment; fixtures create the default menus and accounts explicitly.
"""

import os
import tempfile

_DB_PATH = os.path.join(tempfile.gettempdir(), "portfolio_cms_test.db")

# Configure before any app imports.
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", f"sqlite:///{_DB_PATH}")
os.environ["SEED_DEFAULT_MENUS"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "development"
os.environ.pop("SUPER_ADMIN_EMAIL", None)
os.environ.pop("SUPER_ADMIN_PASSWORD", None)

if os.path.exists(_DB_PATH):
    os.remove(_DB_PATH)

import pytest
from fastapi.testclient import TestClient

from portfolio_cms.core import revalidation
from portfolio_cms.database import Base, get_db, engine, SessionLocal
from portfolio_cms.main import app
from portfolio_cms.middleware.request_context import _rate_buckets
from portfolio_cms.services import MenuService, auth_service
from portfolio_cms.services.scope_service import AdminContext, build_context

Base.metadata.create_all(bind=engine)

PASSWORD = "correct-horse-1"


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty every table before each test, children first."""
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture(autouse=True)
def revalidator():
    """Fresh recording revalidator per test."""
    recorder = revalidation.LoggingRevalidator()
    revalidation.set_revalidator(recorder)
    yield recorder
    revalidation.set_revalidator(revalidation.LoggingRevalidator())


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    _rate_buckets.clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def menus(db) -> dict:
    """The six default platform menus, keyed by menu key."""
    service = MenuService(db)
    service.ensure_default_platform_menus()
    return {m.key: m for m in service.list_platform_menus()}


@pytest.fixture()
def user_factory(db, menus):
    """Create regular users on demand: ``user_factory("a@example.com", name="A")``."""

    def _make(email: str, password: str = PASSWORD, name: str = None):
        return make_user(db, email, password, name)

    return _make


@pytest.fixture()
def login(client):
    """Log a client in through the API: ``login(email)``."""

    def _login(email: str, password: str = PASSWORD):
        return login_client(client, email, password)

    return _login


@pytest.fixture()
def owner(db, menus):
    return make_user(db, "owner@example.com", name="Olive Owner")


@pytest.fixture()
def other_owner(db, menus):
    return make_user(db, "other@example.com", name="Oscar Other")


@pytest.fixture()
def super_admin(db):
    return auth_service.ensure_super_admin(db, "root@example.com", PASSWORD)


@pytest.fixture()
def owner_ctx(db, owner) -> AdminContext:
    return context_for(db, owner)


@pytest.fixture()
def other_ctx(db, other_owner) -> AdminContext:
    return context_for(db, other_owner)


@pytest.fixture()
def admin_ctx(db, super_admin) -> AdminContext:
    return context_for(db, super_admin)


@pytest.fixture()
def impersonation_ctx(db, super_admin, owner) -> AdminContext:
    return context_for(db, super_admin, impersonate=owner.portfolio.id)


def make_user(db, email: str, password: str = PASSWORD, name: str = None):
    """Sign up a regular user (with its own draft portfolio)."""
    return auth_service.signup(db, email, password, name)


def context_for(db, user, impersonate: str = None) -> AdminContext:
    actor = auth_service.load_actor(db, user.id)
    return build_context(db, actor, impersonate)


def login_client(client, email: str, password: str = PASSWORD):
    """Log in through the API; the client keeps the session cookie."""
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp
