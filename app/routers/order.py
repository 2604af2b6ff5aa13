# app/routers/order.py
from fastapi import APIRouter, Depends
from redis.asyncio import Redis

from app.core.redis import get_redis_client
from app.crud import cart as crud_cart
from app.dependencies import CartSession, get_cart_session, get_current_user
from app.schemas.order import (
    CheckoutRequest, CheckoutResult, Order, OrdersOverview, PaymentRedirect, PendingPaymentCount
)
from app.schemas.user import AuthUser
from app.services import checkout as checkout_service
from app.services import order as order_service

router = APIRouter()


@router.get("/orders", response_model=OrdersOverview)
async def get_orders_history(current_user: AuthUser = Depends(get_current_user)):
    """
    История заказов текущего пользователя, разделенная на завершенные
    и ожидающие оплаты.
    """
    return await order_service.get_user_orders(current_user)


@router.get("/orders/pending-count", response_model=PendingPaymentCount)
async def get_pending_payment_count(current_user: AuthUser = Depends(get_current_user)):
    count = await order_service.get_pending_payment_count(current_user)
    return PendingPaymentCount(count=count)


@router.post("/orders/{order_id}/retry-payment", response_model=PaymentRedirect)
async def retry_order_payment(
    order_id: str,
    current_user: AuthUser = Depends(get_current_user)
):
    """Новая ссылка на оплату для заказа, ожидающего оплаты."""
    return await order_service.retry_payment(current_user, order_id)


@router.post("/orders/{order_id}/cancel", response_model=Order)
async def cancel_user_order(
    order_id: str,
    current_user: AuthUser = Depends(get_current_user)
):
    return await order_service.cancel_order(current_user, order_id)


@router.post("/checkout", response_model=CheckoutResult)
async def checkout(
    checkout_data: CheckoutRequest,
    current_user: AuthUser = Depends(get_current_user),
    cart: CartSession = Depends(get_cart_session),
    redis: Redis = Depends(get_redis_client)
):
    """
    Оформление заказа из корзины сессии. Для MercadoPago в ответе есть init_point
    для редиректа на оплату. Корзина очищается только при успехе.
    """
    result = await checkout_service.start_checkout(current_user, cart.store, checkout_data)
    cart.store.clear()
    await crud_cart.save_cart(redis, cart.session_id, cart.store)
    return result
