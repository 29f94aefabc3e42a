import os
import tempfile

# configuration is read at import time, so it has to be in place before the app loads
_workdir = tempfile.mkdtemp(prefix="socialfeed-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_workdir, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_workdir, "uploads")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from main import app
from socialfeed.db.base import Base
from socialfeed.db.session import engine, SessionLocal

PASSWORD = "secret123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user and return ``(headers, user)``."""

    def _register(username: str, full_name: str = None):
        response = client.post(
            "/api/register",
            json={
                "username": username,
                "email": f"{username}@mail.com",
                "password": PASSWORD,
                "full_name": full_name,
            },
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return auth(data["token"]), data["user"]

    return _register


@pytest.fixture
def make_post(client):
    def _make_post(headers: dict, content: str = "hello") -> int:
        response = client.post("/api/posts", data={"content": content}, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["post_id"]

    return _make_post


@pytest.fixture
def fail_statement():
    """Make every statement starting with the given SQL prefix fail, e.g. ``"DELETE FROM follows"``."""
    prefixes = []

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if any(statement.lstrip().upper().startswith(prefix) for prefix in prefixes):
            raise OperationalError(statement, parameters, Exception("disk I/O error"))

    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    try:
        yield lambda prefix: prefixes.append(prefix.upper())
    finally:
        event.remove(engine, "before_cursor_execute", _before_cursor_execute)
