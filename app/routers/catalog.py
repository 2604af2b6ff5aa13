# app/routers/catalog.py

from fastapi import APIRouter, Depends, Query, HTTPException, status
from redis.asyncio import Redis
from typing import Optional

from app.core import locales
from app.core.redis import get_redis_client
from app.schemas.product import Product, ProductListResponse, SortBy
from app.services import catalog as catalog_service

router = APIRouter()


@router.get("/products", response_model=ProductListResponse)
async def get_all_products(
    search: Optional[str] = Query(None, description="Поиск по названию и описанию"),
    category: Optional[str] = Query(None, description="Категория для фильтрации"),
    sort_by: SortBy = Query("newest", description="Сортировка: newest, price_asc, price_desc"),
    redis: Redis = Depends(get_redis_client)
):
    """
    Получение списка товаров с поиском, фильтром по категории и сортировкой.
    Этот эндпоинт публичный и не требует аутентификации.
    """
    return await catalog_service.get_products(redis, search=search, category=category, sort_by=sort_by)


@router.get("/products/{product_id}", response_model=Product)
async def get_single_product(product_id: str):
    """Получение детальной информации о товаре вместе с действующей акцией."""
    product = await catalog_service.get_product_by_id(product_id)

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=locales.ERROR_PRODUCT_NOT_FOUND
        )

    return product
