# app/services/order_classifier.py

import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Protocol, Tuple

from app.core import locales
from app.core.config import settings
from app.schemas.order import Order

# Старый формат: срок доставки зашит в описание товара
SHIPPING_DAYS_PATTERN = re.compile(r"\[shipping_days:(\d+)\]")
# Свободный текст в shipping_days ("7 days"): берем число в начале
LEADING_NUMBER_PATTERN = re.compile(r"\s*(\d+)")
FALLBACK_MAX_DAYS = 5
RANGE_LOWER_BOUND = 3


class ShippingInfo(Protocol):
    shipping_days: Optional[str]
    description: str


def is_payment_pending(order: Order) -> bool:
    """
    Заказ ждет оплаты, только если пользователя отправили в MercadoPago, а оплата
    не подтверждена. Наложенный платеж со статусом 'pending' ждет доставки, а не оплаты.
    """
    return order.payment_status == "pending" and order.payment_method == "mercadopago"


def classify(orders: Iterable[Order]) -> Tuple[List[Order], List[Order]]:
    """Делит заказы на (завершенные, ожидающие оплаты), сохраняя исходный порядок."""
    completed: List[Order] = []
    pending: List[Order] = []
    for order in orders:
        if is_payment_pending(order):
            pending.append(order)
        else:
            completed.append(order)
    return completed, pending


def resolve_shipping_days(product: ShippingInfo) -> str:
    if product.shipping_days:
        return product.shipping_days

    if product.description:
        match = SHIPPING_DAYS_PATTERN.search(product.description)
        if match:
            return match.group(1)

    return settings.DEFAULT_SHIPPING_DAYS


def _leading_number(text: str) -> Optional[int]:
    match = LEADING_NUMBER_PATTERN.match(text)
    return int(match.group(1)) if match else None


def _upper_bound(days: str) -> int:
    """Верхняя граница срока: правая часть диапазона ("3-7 days" -> 7), иначе само число."""
    lower, _, upper = days.partition("-")
    for part in (upper, lower):
        value = _leading_number(part)
        if value is not None:
            return value
    return FALLBACK_MAX_DAYS


def estimated_shipping_days(order: Order) -> str:
    """
    Общий срок доставки заказа. Если у всех позиций срок одинаковый, возвращается он,
    иначе диапазон от 3 до максимальной верхней границы среди позиций.
    """
    if not order.order_items:
        return settings.DEFAULT_SHIPPING_DAYS

    shipping_days = [resolve_shipping_days(item.product) for item in order.order_items]
    unique_days = list(dict.fromkeys(shipping_days))
    if len(unique_days) == 1:
        return unique_days[0]

    max_days = max(_upper_bound(days) for days in shipping_days)
    return f"{RANGE_LOWER_BOUND}-{max_days}"


def time_remaining(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Сколько осталось до истечения окна оплаты (48 часов с момента создания заказа)."""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    left = timedelta(hours=settings.PAYMENT_WINDOW_HOURS) - (now - created_at)
    if left <= timedelta(0):
        return locales.TIME_REMAINING_EXPIRED

    total_minutes = int(left.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    return locales.TIME_REMAINING.format(hours=hours, minutes=minutes)
