# app/routers/cart.py

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status
from redis.asyncio import Redis

from app.core import locales
from app.core.redis import get_redis_client
from app.crud import cart as crud_cart
from app.dependencies import CartSession, get_cart_session, get_current_user
from app.schemas.cart import (
    CartItemCreate, CartItemQuantityUpdate, CartResponse, FavoriteDiscount, FavoriteItemUpdate
)
from app.schemas.product import Product
from app.schemas.user import AuthUser
from app.services import catalog as catalog_service
from app.services import favorites as favorites_service
from app.services.cart import CartStore, build_cart_response

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Эндпоинты для Корзины ---

@router.post("/cart/session", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def start_cart_session(redis: Redis = Depends(get_redis_client)):
    """Начало сессии: создается пустая корзина. ID сессии передается дальше в заголовке X-Session-Id."""
    session_id = await crud_cart.start_session(redis)
    return build_cart_response(session_id, CartStore())


@router.delete("/cart/session", status_code=status.HTTP_204_NO_CONTENT)
async def end_cart_session(
    cart: CartSession = Depends(get_cart_session),
    redis: Redis = Depends(get_redis_client)
):
    """Завершение сессии: корзина удаляется."""
    await crud_cart.end_session(redis, cart.session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/cart", response_model=CartResponse)
async def get_cart(cart: CartSession = Depends(get_cart_session)):
    """Получение содержимого корзины текущей сессии."""
    return build_cart_response(cart.session_id, cart.store)


@router.post("/cart/items", response_model=CartResponse)
async def add_cart_item(
    item_data: CartItemCreate,
    cart: CartSession = Depends(get_cart_session),
    redis: Redis = Depends(get_redis_client)
):
    """
    Добавление товара в корзину. Тот же товар с тем же цветом увеличивает количество,
    другой цвет создает новую позицию.
    """
    product = await catalog_service.get_product_by_id(item_data.product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=locales.ERROR_PRODUCT_NOT_FOUND)

    cart.store.add_item(product, item_data.quantity, item_data.selected_color)
    await crud_cart.save_cart(redis, cart.session_id, cart.store)
    return build_cart_response(cart.session_id, cart.store)


@router.put("/cart/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    item_data: CartItemQuantityUpdate,
    cart: CartSession = Depends(get_cart_session),
    redis: Redis = Depends(get_redis_client)
):
    """Изменение количества. Количество 0 и меньше удаляет позицию."""
    if not cart.store.contains(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=locales.ERROR_ITEM_NOT_IN_CART)

    cart.store.update_quantity(product_id, item_data.quantity)
    await crud_cart.save_cart(redis, cart.session_id, cart.store)
    return build_cart_response(cart.session_id, cart.store)


@router.delete("/cart/items/{product_id}", response_model=CartResponse)
async def delete_cart_item(
    product_id: str,
    cart: CartSession = Depends(get_cart_session),
    redis: Redis = Depends(get_redis_client)
):
    """Удаление товара из корзины (всех его вариантов цвета)."""
    if not cart.store.contains(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=locales.ERROR_ITEM_NOT_IN_CART)

    cart.store.remove_item(product_id)
    await crud_cart.save_cart(redis, cart.session_id, cart.store)
    return build_cart_response(cart.session_id, cart.store)


@router.post("/cart/toggle", response_model=CartResponse)
async def toggle_cart(
    cart: CartSession = Depends(get_cart_session),
    redis: Redis = Depends(get_redis_client)
):
    """Открыть/закрыть панель корзины."""
    cart.store.toggle_cart()
    await crud_cart.save_cart(redis, cart.session_id, cart.store)
    return build_cart_response(cart.session_id, cart.store)


# --- Эндпоинты для Избранного ---

@router.get("/favorites", response_model=List[Product])
async def get_favorites(current_user: AuthUser = Depends(get_current_user)):
    """Получение списка избранных товаров."""
    return await favorites_service.get_favorites(current_user)


@router.get("/favorites/discounts", response_model=List[FavoriteDiscount])
async def get_favorite_discounts(current_user: AuthUser = Depends(get_current_user)):
    """Избранные товары, на которые сейчас действует скидка."""
    return await favorites_service.check_for_discounts(current_user)


@router.post("/favorites/items")
async def add_favorite(
    item_data: FavoriteItemUpdate,
    current_user: AuthUser = Depends(get_current_user)
):
    """Добавление товара в избранное."""
    await favorites_service.add_favorite(current_user, item_data.product_id)
    return {"status": "ok", "message": locales.SUCCESS_ADDED_TO_FAVORITES}


@router.delete("/favorites/items/{product_id}")
async def remove_favorite(
    product_id: str,
    current_user: AuthUser = Depends(get_current_user)
):
    """Удаление товара из избранного."""
    await favorites_service.remove_favorite(current_user, product_id)
    return {"status": "ok", "message": locales.SUCCESS_REMOVED_FROM_FAVORITES}
