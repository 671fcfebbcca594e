"""Shared fixtures for the notification service tests."""

from __future__ import annotations

import os
import tempfile
from datetime import timedelta
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.gettempdir()) / f"notification_service_test_{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["CONSUMER_ENABLED"] = "false"

from notification_service.config import get_settings  # noqa: E402

get_settings.cache_clear()

from notification_service.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from notification_service.infrastructure.notifications import notification_manager  # noqa: E402
from notification_service.infrastructure.security import create_access_token  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure the test database starts from a clean state for each test."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def reset_connections():
    """Forget sockets left bound by a previous test."""

    for user_id in list(notification_manager.connected_users()):
        for connection in notification_manager.connections_for(user_id):
            notification_manager.unbind(connection)
    yield


@pytest.fixture(scope="session", autouse=True)
def remove_test_database():
    yield
    engine.dispose()
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()


@pytest.fixture()
def session():
    with SessionLocal() as db:
        yield db


@pytest.fixture()
def anyio_backend():
    return "asyncio"


def _make_token(user_id: int, *, role: str = "MEMBER", expires: timedelta | None = None) -> str:
    """Return a token shaped like the ones issued by the user service."""

    return create_access_token({"id": user_id, "role": role}, expires)


@pytest.fixture()
def make_token():
    return _make_token


@pytest.fixture()
def auth_headers():
    def _headers(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {_make_token(user_id)}"}

    return _headers
