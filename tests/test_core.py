# tests/test_core.py

from unittest.mock import AsyncMock, MagicMock

from app.core.logging_config import build_logging_config
from app.core.redis import close_redis


def test_logging_level_applies_to_app_loggers():
    config = build_logging_config("DEBUG")

    assert config["loggers"]["app"]["level"] == "DEBUG"
    assert config["root"]["level"] == "DEBUG"
    # Запросы к Supabase не засоряют лог
    assert config["loggers"]["httpx"]["level"] == "WARNING"


async def test_close_redis_closes_connection_pool():
    client = MagicMock()
    client.aclose = AsyncMock()

    await close_redis(client)

    client.aclose.assert_awaited_once()
