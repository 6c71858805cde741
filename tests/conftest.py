# tests/conftest.py
import os
import time
import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

# Tests must not wait on the demo handlers' artificial latency, and always start from the memory backend.
os.environ["DEMO_DELAY_SECONDS"] = "0"
os.environ["CACHE_ENABLED"] = "true"
os.environ["CACHE_BACKEND"] = "memory"

from app.main import app  # import after env is set
from app.services import users_service
from app.services.users_service import UserData


class FakeRedis:
    """
    In-memory stand-in for redis.asyncio.Redis (decode_responses=True),
    covering the commands the cache uses. Expiry follows time.monotonic().
    """
    def __init__(self):
        self._data: dict[str, tuple[str, float | None]] = {}
        self.commands: list[str] = []

    def _live(self, key: str):
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and expires_at <= time.monotonic():
            self._data.pop(key, None)
            return None
        return value

    async def get(self, key: str):
        self.commands.append("GET")
        return self._live(key)

    async def exists(self, key: str) -> int:
        self.commands.append("EXISTS")
        return 1 if self._live(key) is not None else 0

    async def set(self, key: str, value: str, ex: int | None = None):
        self.commands.append("SET")
        expires_at = time.monotonic() + ex if ex else None
        self._data[key] = (value, expires_at)
        return True

    async def ping(self):
        return True

    async def aclose(self):
        pass


class BrokenRedis(FakeRedis):
    """Every command fails as if the server were unreachable."""
    async def get(self, key):
        raise RedisConnectionError("connection refused")

    async def exists(self, key):
        raise RedisConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("connection refused")

    async def ping(self):
        raise RedisConnectionError("connection refused")


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def broken_redis():
    return BrokenRedis()


@pytest.fixture
def user_data(monkeypatch):
    """Fresh demo dataset (no delay) so each test counts its own handler runs."""
    data = UserData(delay_seconds=0)
    monkeypatch.setattr(users_service, "_data", data)
    return data


@pytest.fixture(scope="function")
def client(user_data):
    """A FastAPI TestClient; entering it runs the lifespan and builds a fresh cache."""
    with TestClient(app) as c:
        yield c
