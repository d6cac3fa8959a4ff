from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from auth.security import TokenConfig, TokenService
from core.settings import Settings
from main import create_app
from users import repository

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256"


class RecordingLogger:
    def __init__(self) -> None:
        self.errors: list[str] = []

    def error(self, msg, *args, **kwargs) -> None:
        self.errors.append(msg % args if args else msg)


class InMemoryUsers:
    """Stands in for the asyncpg-backed functions in `users.repository`."""

    def __init__(self) -> None:
        self.rows: dict[int, dict] = {}
        self._next_id = 1

    async def create_user(self, *, name, email, password_hash, role="user"):
        now = datetime.now(timezone.utc)
        row = {
            "id": self._next_id,
            "name": name.strip(),
            "email": repository.normalize_email(email),
            "password": password_hash,
            "role": role,
            "created_at": now,
            "updated_at": now,
        }
        self.rows[row["id"]] = row
        self._next_id += 1
        return self._public(row)

    async def get_user_by_email(self, email):
        email = repository.normalize_email(email)
        for row in self.rows.values():
            if row["email"] == email:
                return dict(row)
        return None

    async def get_user_by_id(self, user_id):
        row = self.rows.get(user_id)
        return self._public(row) if row else None

    async def list_users(self, *, limit=100, offset=0):
        ordered = sorted(self.rows.values(), key=lambda r: r["id"])
        return [self._public(r) for r in ordered[offset : offset + limit]]

    async def update_user(self, user_id, *, name=None, email=None, role=None):
        row = self.rows.get(user_id)
        if row is None:
            return None
        if name is not None:
            row["name"] = name.strip()
        if email is not None:
            row["email"] = repository.normalize_email(email)
        if role is not None:
            row["role"] = role
        row["updated_at"] = datetime.now(timezone.utc)
        return self._public(row)

    async def delete_user(self, user_id):
        return self.rows.pop(user_id, None) is not None

    @staticmethod
    def _public(row):
        return {k: v for k, v in row.items() if k != "password"}


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def token_service(recording_logger) -> TokenService:
    return TokenService(TokenConfig(secret=TEST_SECRET), logger=recording_logger)


@pytest.fixture
def users_store(monkeypatch) -> InMemoryUsers:
    store = InMemoryUsers()
    for name in (
        "create_user",
        "get_user_by_email",
        "get_user_by_id",
        "list_users",
        "update_user",
        "delete_user",
    ):
        monkeypatch.setattr(repository, name, getattr(store, name))
    return store


@pytest.fixture
def app(users_store):
    return create_app(Settings(jwt_secret=TEST_SECRET))


@pytest.fixture
def client(app) -> TestClient:
    # No context manager: the lifespan (and its DB pool) is not started.
    return TestClient(app)
