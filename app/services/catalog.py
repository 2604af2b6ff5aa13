# app/services/catalog.py

import logging
import re
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx
from fastapi import HTTPException, status
from redis.asyncio import Redis

from app.clients.supabase import supabase_client
from app.core import locales
from app.core.config import settings
from app.schemas.product import Product, ProductListResponse, ProductWithRating, Promotion, SortBy
from app.services import pricing
from app.services.order_classifier import resolve_shipping_days

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "price_asc": "price.asc",
    "price_desc": "price.desc",
    "newest": "created_at.desc",
}
# Символы, ломающие синтаксис фильтра or=(...) в PostgREST
SEARCH_RESERVED_CHARS = re.compile(r"[,()*%]")


def _is_purchasable(product_data: dict) -> bool:
    """Скрываем товары, у которых выключены все способы оплаты."""
    methods = product_data.get("allowed_payment_methods") or {"cash_on_delivery": True, "card": True}
    return bool(methods.get("cash_on_delivery") or methods.get("card"))


async def get_active_promotions(product_ids: List[str]) -> Dict[str, Promotion]:
    """
    Возвращает действующие акции для товаров. Окно действия (active, start_date, end_date)
    проверяется запросом к базе, а не на клиенте.
    """
    if not product_ids:
        return {}

    now_iso = datetime.now(timezone.utc).isoformat()
    response = await supabase_client.select("promotion_products", params={
        "select": "product_id,promotion:promotions(*)",
        "product_id": f"in.({','.join(product_ids)})",
        "promotion.active": "eq.true",
        "promotion.start_date": f"lte.{now_iso}",
        "promotion.end_date": f"gte.{now_iso}",
    })

    promotions: Dict[str, Promotion] = {}
    for row in response.json():
        promotion_data = row.get("promotion")
        product_id = row.get("product_id")
        # Отфильтрованная встроенная запись приходит как null
        if not promotion_data or product_id in promotions:
            continue
        try:
            promotions[product_id] = Promotion.model_validate(promotion_data)
        except Exception:
            logger.warning(f"Skipping invalid promotion for product {product_id}", exc_info=True)
    return promotions


async def get_ratings(product_ids: List[str]) -> Dict[str, tuple]:
    """Средняя оценка и количество одобренных отзывов по каждому товару."""
    if not product_ids:
        return {}

    response = await supabase_client.select("reviews", params={
        "select": "product_id,rating",
        "approved": "eq.true",
        "product_id": f"in.({','.join(product_ids)})",
    })

    sums: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for review in response.json():
        sums[review["product_id"]] += review["rating"]
        counts[review["product_id"]] += 1

    return {product_id: (sums[product_id] / counts[product_id], counts[product_id]) for product_id in counts}


def _with_derived_fields(product: ProductWithRating) -> ProductWithRating:
    product.promotional_price = pricing.promotional_price(product)
    product.promotion_label = pricing.promotion_label(product)
    product.estimated_shipping_days = resolve_shipping_days(product)
    return product


async def get_products(
    redis: Redis,
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: SortBy = "newest"
) -> ProductListResponse:
    """
    Список товаров с поиском по названию/описанию, фильтром по категории и сортировкой.
    Товары обогащаются действующими акциями и рейтингом по одобренным отзывам.
    """
    search_term = SEARCH_RESERVED_CHARS.sub(" ", search).strip() if search else None

    # --- 1. Кеш ---
    cache_key_parts = [
        "products_v1", f"sort:{sort_by}",
        f"cat:{category}" if category else "",
        f"search:{search_term.lower()}" if search_term else "",
    ]
    cache_key = ":".join(filter(None, cache_key_parts))

    cached_products = await redis.get(cache_key)
    if cached_products:
        logger.info(f"Serving products from cache for key: {cache_key}")
        return ProductListResponse.model_validate_json(cached_products)

    # --- 2. Товары ---
    params = {"select": "*", "order": SORT_ORDERS.get(sort_by, SORT_ORDERS["newest"])}
    if search_term:
        params["or"] = f"(name.ilike.*{search_term}*,description.ilike.*{search_term}*)"
    if category:
        params["category"] = f"eq.{category}"

    try:
        response = await supabase_client.select("products", params=params)
        products_data = response.json()
    except httpx.HTTPError:
        logger.error("Failed to load products", exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=locales.ERROR_LOADING_PRODUCTS)

    if not isinstance(products_data, list):
        logger.error(f"Unexpected products payload: {type(products_data).__name__}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=locales.ERROR_LOADING_PRODUCTS)

    # Категории берем из всех полученных строк, до фильтрации по способам оплаты
    categories = list(dict.fromkeys(p.get("category") for p in products_data if p.get("category")))
    visible_data = [p for p in products_data if _is_purchasable(p)]
    product_ids = [str(p["id"]) for p in visible_data]

    # --- 3. Обогащение. Ошибки здесь не должны ронять весь каталог ---
    promotions: Dict[str, Promotion] = {}
    try:
        promotions = await get_active_promotions(product_ids)
    except httpx.HTTPError:
        logger.error("Failed to load promotions for products", exc_info=True)

    ratings: Dict[str, tuple] = {}
    try:
        ratings = await get_ratings(product_ids)
    except httpx.HTTPError:
        logger.error("Failed to load reviews for products", exc_info=True)

    items = []
    for product_data in visible_data:
        try:
            product = ProductWithRating.model_validate(product_data)
        except Exception:
            logger.warning(f"Failed to validate product data for product ID {product_data.get('id')}", exc_info=True)
            continue
        product.promotion = promotions.get(product.id)
        product.average_rating, product.review_count = ratings.get(product.id, (0.0, 0))
        items.append(_with_derived_fields(product))

    result = ProductListResponse(items=items, categories=categories)
    await redis.set(cache_key, result.model_dump_json(), ex=settings.CATALOG_CACHE_TTL_SECONDS)
    return result


async def get_product_by_id(product_id: str) -> Optional[Product]:
    """Товар с действующей акцией или None, если товара нет."""
    try:
        response = await supabase_client.select("products", params={"select": "*", "id": f"eq.{product_id}"})
        rows = response.json()
    except httpx.HTTPError:
        logger.error(f"Failed to load product {product_id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=locales.ERROR_LOADING_PRODUCTS)

    if not rows:
        return None

    product = Product.model_validate(rows[0])
    try:
        promotions = await get_active_promotions([product.id])
        product.promotion = promotions.get(product.id)
    except httpx.HTTPError:
        logger.error(f"Failed to load promotion for product {product_id}", exc_info=True)
    return product
