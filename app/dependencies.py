# app/dependencies.py

import logging
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from redis.asyncio import Redis

from app.core import locales
from app.core.config import settings
from app.core.redis import get_redis_client
from app.crud import cart as crud_cart
from app.schemas.user import AuthUser
from app.services.cart import CartStore

# --- Инициализация логгера ---
logger = logging.getLogger(__name__)

# --- Схемы аутентификации ---
strict_bearer_scheme = HTTPBearer(auto_error=True)

# --- Зависимости аутентификации ---

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(strict_bearer_scheme)
) -> AuthUser:
    """
    ОБЯЗАТЕЛЬНАЯ зависимость.
    Требует валидный access token Supabase. Если его нет или он невалиден - ошибка 401.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = credentials.credentials

    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE
        )
    except JWTError as e:
        logger.warning(f"JWT Error during token decoding: {e}")
        raise credentials_exception

    user_id = payload.get("sub")
    if user_id is None:
        logger.warning("Token payload is missing 'sub' (user_id).")
        raise credentials_exception

    logger.debug(f"Successfully authenticated user ID: {user_id}")
    return AuthUser(id=user_id, email=payload.get("email"), access_token=token)


# --- Сессия корзины ---

@dataclass
class CartSession:
    session_id: str
    store: CartStore


async def get_cart_session(
    x_session_id: str = Header(..., alias="X-Session-Id"),
    redis: Redis = Depends(get_redis_client)
) -> CartSession:
    """Корзина текущей сессии. Сессия создается явно через POST /cart/session."""
    store = await crud_cart.get_cart(redis, x_session_id)
    if store is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=locales.ERROR_CART_SESSION_NOT_FOUND)
    return CartSession(session_id=x_session_id, store=store)
