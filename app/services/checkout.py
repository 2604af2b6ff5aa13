# app/services/checkout.py

import logging
from typing import Dict

import httpx
from fastapi import HTTPException, status

from app.clients.supabase import supabase_client
from app.core import locales
from app.schemas.order import CheckoutRequest, CheckoutResult
from app.schemas.product import Product
from app.schemas.user import AuthUser
from app.services import catalog as catalog_service
from app.services import order as order_service
from app.services import pricing
from app.services.cart import CartStore

logger = logging.getLogger(__name__)


async def refresh_cart_products(cart: CartStore) -> None:
    """
    Перечитывает товары корзины из каталога вместе с действующими акциями.
    Снимок в сессии мог устареть: акция закончилась или изменилась цена.
    """
    fresh_products: Dict[str, Product] = {}
    for item in cart.items:
        product_id = item.product.id
        if product_id not in fresh_products:
            product = await catalog_service.get_product_by_id(product_id)
            if product is None:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=locales.ERROR_PRODUCT_UNAVAILABLE.format(name=item.product.name)
                )
            fresh_products[product_id] = product
        item.product = fresh_products[product_id]


async def _abandon_order(current_user: AuthUser, order_id: str) -> None:
    """Заказ без позиций не должен висеть в ожидающих оплаты: отменяем его."""
    try:
        await supabase_client.update(
            "orders",
            filters={"id": f"eq.{order_id}"},
            json={"status": "cancelled", "payment_status": "failed"},
            access_token=current_user.access_token
        )
        logger.warning(f"Incomplete order {order_id} of user {current_user.id} was cancelled.")
    except httpx.HTTPError:
        logger.critical(f"Failed to cancel incomplete order {order_id} of user {current_user.id}", exc_info=True)


async def start_checkout(
    current_user: AuthUser,
    cart: CartStore,
    checkout_data: CheckoutRequest
) -> CheckoutResult:
    """
    Оформляет заказ из корзины сессии:
    1. обновляет цены и акции товаров по каталогу;
    2. создает заказ и снимок его позиций (цена фиксируется на момент покупки);
    3. для MercadoPago создает ссылку на оплату.
    Корзину очищает вызывающий код, и только при успешном результате.
    """
    if not cart.items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=locales.ERROR_CART_EMPTY)

    await refresh_cart_products(cart)
    total = round(cart.total, 2)

    # --- Шаг 1: Заказ ---
    try:
        created_rows = await supabase_client.insert("orders", json={
            "user_id": current_user.id,
            "total": total,
            "status": "pending",
            "payment_status": "pending",
            "payment_method": checkout_data.payment_method,
            "shipping_address": checkout_data.shipping_address.model_dump(),
        }, access_token=current_user.access_token)
        order_id = created_rows[0]["id"]
    except (httpx.HTTPError, KeyError, IndexError):
        logger.error(f"Failed to create order for user {current_user.id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=locales.ERROR_CREATING_ORDER)

    # --- Шаг 2: Позиции заказа. При ошибке заказ отменяется ---
    order_items_payload = [
        {
            "order_id": order_id,
            "product_id": item.product.id,
            "quantity": item.quantity,
            "price_at_time": pricing.unit_price(item.product),
            "selected_color": item.selected_color,
        }
        for item in cart.items
    ]
    try:
        await supabase_client.insert("order_items", json=order_items_payload, access_token=current_user.access_token)
        order = await order_service.get_owned_order(current_user, order_id)
    except (httpx.HTTPError, HTTPException):
        logger.error(f"Failed to store items of order {order_id}", exc_info=True)
        await _abandon_order(current_user, order_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=locales.ERROR_CREATING_ORDER)

    logger.info(f"Order {order_id} created for user {current_user.id} ({checkout_data.payment_method}, total {total})")

    if checkout_data.payment_method != "mercadopago":
        return CheckoutResult(order=order)

    # --- Шаг 3: Ссылка на оплату. Заказ при ошибке остается в "ожидающих оплаты" ---
    payment_items = [
        {"product": {"name": item.product.name, "price": pricing.unit_price(item.product)}, "quantity": item.quantity}
        for item in cart.items
    ]
    try:
        init_point = await order_service.create_payment_preference(
            order_id, payment_items, total, current_user.access_token
        )
        await supabase_client.update(
            "orders",
            filters={"id": f"eq.{order_id}"},
            json={"payment_url": init_point},
            access_token=current_user.access_token
        )
    except (httpx.HTTPError, ValueError):
        logger.error(f"Failed to start payment for order {order_id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=locales.ERROR_PAYMENT_NOT_STARTED)

    order = order.model_copy(update={"payment_url": init_point})
    return CheckoutResult(order=order, init_point=init_point)
