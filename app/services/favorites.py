# app/services/favorites.py

import logging
from typing import List

import httpx
from fastapi import HTTPException, status

from app.clients.supabase import supabase_client
from app.core import locales
from app.schemas.cart import FavoriteDiscount
from app.schemas.product import Product
from app.schemas.user import AuthUser
from app.services import catalog as catalog_service
from app.services import pricing

logger = logging.getLogger(__name__)


async def get_favorites(current_user: AuthUser) -> List[Product]:
    """Избранные товары пользователя вместе с действующими акциями."""
    try:
        response = await supabase_client.select("favorites", params={
            "select": "product_id,products(*)",
            "user_id": f"eq.{current_user.id}",
            "order": "created_at.desc",
        }, access_token=current_user.access_token)
        rows = response.json()
    except httpx.HTTPError:
        logger.error(f"Failed to load favorites for user {current_user.id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=locales.ERROR_LOADING_FAVORITES)

    products = []
    for row in rows:
        if not row.get("products"):
            continue
        try:
            products.append(Product.model_validate(row["products"]))
        except Exception:
            logger.warning(f"Failed to validate favorite product {row.get('product_id')}", exc_info=True)

    try:
        promotions = await catalog_service.get_active_promotions([p.id for p in products])
    except httpx.HTTPError:
        logger.error(f"Failed to load promotions for favorites of user {current_user.id}", exc_info=True)
        promotions = {}

    for product in products:
        product.promotion = promotions.get(product.id)
    return products


async def add_favorite(current_user: AuthUser, product_id: str) -> None:
    try:
        existing = await supabase_client.select("favorites", params={
            "select": "product_id",
            "user_id": f"eq.{current_user.id}",
            "product_id": f"eq.{product_id}",
        }, access_token=current_user.access_token)
        if existing.json():
            return
        await supabase_client.insert(
            "favorites",
            json={"user_id": current_user.id, "product_id": product_id},
            access_token=current_user.access_token
        )
    except httpx.HTTPError:
        logger.error(f"Failed to add product {product_id} to favorites of user {current_user.id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=locales.ERROR_UPDATING_FAVORITES)


async def remove_favorite(current_user: AuthUser, product_id: str) -> None:
    try:
        response = await supabase_client.delete("favorites", filters={
            "user_id": f"eq.{current_user.id}",
            "product_id": f"eq.{product_id}",
        }, access_token=current_user.access_token)
    except httpx.HTTPError:
        logger.error(f"Failed to remove product {product_id} from favorites of user {current_user.id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=locales.ERROR_UPDATING_FAVORITES)

    if not response:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=locales.ERROR_ITEM_NOT_IN_FAVORITES)


async def check_for_discounts(current_user: AuthUser) -> List[FavoriteDiscount]:
    """Избранные товары, на которые сейчас действует скидка с фиксированной ценой."""
    discounts = []
    for product in await get_favorites(current_user):
        price = pricing.promotional_price(product)
        label = pricing.promotion_label(product)
        if price is None or label is None:
            continue
        discounts.append(FavoriteDiscount(product=product, promotional_price=price, promotion_label=label))

    if discounts:
        logger.info(f"User {current_user.id} has {len(discounts)} discounted favorites.")
    return discounts
