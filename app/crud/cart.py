# app/crud/cart.py
import logging
import uuid
from typing import Optional

from redis.asyncio import Redis

from app.core.config import settings
from app.schemas.cart import CartSnapshot
from app.services.cart import CartStore

logger = logging.getLogger(__name__)

CART_KEY_PREFIX = "cart_session"


def _cart_key(session_id: str) -> str:
    return f"{CART_KEY_PREFIX}:{session_id}"

# --- CRUD для корзины сессии ---

async def start_session(redis: Redis) -> str:
    """Создает новую сессию с пустой корзиной и возвращает ее ID."""
    session_id = uuid.uuid4().hex
    await save_cart(redis, session_id, CartStore())
    logger.info(f"Cart session {session_id} started.")
    return session_id

async def get_cart(redis: Redis, session_id: str) -> Optional[CartStore]:
    """Загружает корзину сессии. None, если сессия не найдена или истекла."""
    raw = await redis.get(_cart_key(session_id))
    if raw is None:
        return None
    return CartStore.from_snapshot(CartSnapshot.model_validate_json(raw))

async def save_cart(redis: Redis, session_id: str, store: CartStore) -> None:
    """Сохраняет корзину и продлевает жизнь сессии."""
    await redis.set(
        _cart_key(session_id),
        store.to_snapshot().model_dump_json(),
        ex=settings.CART_SESSION_TTL_SECONDS
    )

async def end_session(redis: Redis, session_id: str) -> bool:
    deleted = await redis.delete(_cart_key(session_id))
    if deleted:
        logger.info(f"Cart session {session_id} ended.")
    return bool(deleted)
