# app/core/redis.py
import logging

import redis.asyncio as redis
from app.core.config import settings

logger = logging.getLogger(__name__)

# Один клиент на процесс: корзины сессий и кеш каталога
redis_client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)

async def get_redis_client() -> redis.Redis:
    """Зависимость FastAPI: общий клиент Redis."""
    return redis_client

async def close_redis(client: redis.Redis = redis_client) -> None:
    """Закрывает пул соединений при остановке приложения."""
    await client.aclose()
    logger.info("Redis connection pool closed.")
