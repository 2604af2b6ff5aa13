# tests/conftest.py
import os

# Настройки должны быть заданы до импорта приложения
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.redis import get_redis_client
from app.main import app

from factories import make_token


class InMemoryRedis:
    """Минимальная замена redis.asyncio.Redis для тестов: get/set/delete поверх словаря."""

    def __init__(self):
        self.data = {}
        self.expirations = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.expirations[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def mock_supabase_client(mocker) -> MagicMock:
    """
    Подменяет клиент Supabase во всех сервисах, которые к нему обращаются.
    """
    client = MagicMock()
    client.select = AsyncMock()
    client.insert = AsyncMock()
    client.update = AsyncMock()
    client.delete = AsyncMock()
    client.invoke = AsyncMock()
    for module in (
        "app.services.catalog",
        "app.services.favorites",
        "app.services.order",
        "app.services.checkout",
    ):
        mocker.patch(f"{module}.supabase_client", client)
    return client


@pytest.fixture
async def client(fake_redis, mock_supabase_client):
    app.dependency_overrides[get_redis_client] = lambda: fake_redis
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as async_client:
        yield async_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
async def cart_session(client) -> str:
    response = await client.post("/api/v1/cart/session")
    assert response.status_code == 201
    return response.json()["session_id"]
