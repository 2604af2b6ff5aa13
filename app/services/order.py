# app/services/order.py

import logging
from typing import List

import httpx
from fastapi import HTTPException, status

from app.clients.supabase import parse_total_count, supabase_client
from app.core import locales
from app.core.config import settings
from app.schemas.order import Order, OrdersOverview, OrderView, PaymentRedirect
from app.schemas.user import AuthUser
from app.services import order_classifier

logger = logging.getLogger(__name__)

# Позиции заказа приходят вместе со снимком товара
ORDER_SELECT = (
    "*,order_items(quantity,price_at_time,selected_color,"
    "products(name,images,shipping_days,description))"
)
# Статусы, при которых пользователь может отменить заказ
CANCELLABLE_STATUSES = {"pending"}


def _to_view(order: Order, is_pending: bool) -> OrderView:
    return OrderView(
        **order.model_dump(by_alias=True),
        short_number=order.id[-8:].upper(),
        estimated_shipping_days=order_classifier.estimated_shipping_days(order),
        time_remaining=order_classifier.time_remaining(order.created_at) if is_pending else None
    )


async def get_user_orders(current_user: AuthUser) -> OrdersOverview:
    """
    Загружает все заказы пользователя (новые сверху) и делит их на завершенные
    и ожидающие оплаты.
    """
    try:
        response = await supabase_client.select("orders", params={
            "select": ORDER_SELECT,
            "user_id": f"eq.{current_user.id}",
            "order": "created_at.desc",
        }, access_token=current_user.access_token)
        orders_data = response.json()
    except httpx.HTTPError:
        logger.error(f"Failed to load orders for user {current_user.id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=locales.ERROR_LOADING_ORDERS)

    orders: List[Order] = []
    for order_data in orders_data:
        try:
            orders.append(Order.model_validate(order_data))
        except Exception:
            logger.error(f"Failed to validate order data for order ID {order_data.get('id')}", exc_info=True)

    completed, pending = order_classifier.classify(orders)
    return OrdersOverview(
        completed=[_to_view(order, is_pending=False) for order in completed],
        pending=[_to_view(order, is_pending=True) for order in pending],
        completed_count=len(completed),
        pending_count=len(pending)
    )


async def get_pending_payment_count(current_user: AuthUser) -> int:
    try:
        response = await supabase_client.select("orders", params={
            "select": "id",
            "user_id": f"eq.{current_user.id}",
            "payment_method": "eq.mercadopago",
            "payment_status": "eq.pending",
            "limit": 1,
        }, access_token=current_user.access_token, count=True)
    except httpx.HTTPError:
        logger.error(f"Failed to count pending payments for user {current_user.id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=locales.ERROR_LOADING_ORDERS)
    return parse_total_count(response)


async def get_owned_order(current_user: AuthUser, order_id: str) -> Order:
    """Заказ пользователя. 404, если заказа нет, 403, если он чужой."""
    try:
        response = await supabase_client.select("orders", params={
            "select": ORDER_SELECT,
            "id": f"eq.{order_id}",
        }, access_token=current_user.access_token)
        rows = response.json()
    except httpx.HTTPError:
        logger.error(f"Failed to load order {order_id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=locales.ERROR_LOADING_ORDERS)

    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=locales.ERROR_ORDER_NOT_FOUND)

    order = Order.model_validate(rows[0])
    if order.user_id != current_user.id:
        logger.warning(f"User {current_user.id} tried to access order {order_id} of user {order.user_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=locales.ERROR_ORDER_FORBIDDEN)
    return order


async def create_payment_preference(
    order_id: str,
    items: List[dict],
    total: float,
    access_token: str
) -> str:
    """
    Создает платежное предпочтение MercadoPago через Edge Function и возвращает
    init_point (URL для редиректа на оплату).
    """
    payment = await supabase_client.invoke(settings.PAYMENT_FUNCTION_NAME, json={
        "orderId": order_id,
        "items": items,
        "total": total,
    }, access_token=access_token)

    init_point = payment.get("init_point") if isinstance(payment, dict) else None
    if not init_point:
        raise ValueError(f"Payment function returned no init_point for order {order_id}")
    return init_point


async def retry_payment(current_user: AuthUser, order_id: str) -> PaymentRedirect:
    """Повторно создает ссылку на оплату для заказа, ожидающего оплаты."""
    order = await get_owned_order(current_user, order_id)
    if not order_classifier.is_payment_pending(order):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=locales.ERROR_ORDER_NOT_PAYMENT_PENDING)

    payment_items = [
        {
            "product": {"name": item.product.name or locales.UNAVAILABLE_PRODUCT_NAME, "price": item.price_at_time},
            "quantity": item.quantity
        }
        for item in order.order_items
    ]
    try:
        init_point = await create_payment_preference(
            order.id, payment_items, order.total, current_user.access_token
        )
    except (httpx.HTTPError, ValueError):
        logger.error(f"Error retrying payment for order {order_id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=locales.ERROR_PAYMENT_PREFERENCE)

    try:
        await supabase_client.update(
            "orders",
            filters={"id": f"eq.{order.id}"},
            json={"payment_url": init_point, "payment_status": "pending"},
            access_token=current_user.access_token
        )
    except httpx.HTTPError:
        # Ссылка на оплату уже создана, пользователь может по ней перейти
        logger.error(f"Failed to store payment URL for order {order_id}", exc_info=True)

    logger.info(f"Payment preference re-created for order {order_id}")
    return PaymentRedirect(order_id=order.id, init_point=init_point)


async def cancel_order(current_user: AuthUser, order_id: str) -> Order:
    """
    Отменяет заказ пользователя. Действие окончательное. Для заказа, ожидающего
    оплаты, оплата помечается как неуспешная.
    """
    order = await get_owned_order(current_user, order_id)
    if order.status not in CANCELLABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=locales.ERROR_ORDER_NOT_CANCELLABLE.format(status=order.status)
        )

    update_payload = {"status": "cancelled"}
    if order_classifier.is_payment_pending(order):
        update_payload["payment_status"] = "failed"

    try:
        await supabase_client.update(
            "orders",
            filters={"id": f"eq.{order.id}"},
            json=update_payload,
            access_token=current_user.access_token
        )
    except httpx.HTTPError:
        logger.error(f"Error cancelling order {order_id}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=locales.ERROR_CANCELLING_ORDER)

    logger.info(f"Order {order_id} cancelled by user {current_user.id}")
    return order.model_copy(update=update_payload)
