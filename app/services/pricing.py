# app/services/pricing.py

import math
from typing import Optional

from app.core import locales
from app.schemas.product import Product

# Подписи для акций "купи N, заплати M". На итоговую сумму корзины они
# не влияют: скидка по количеству на клиенте не рассчитывается.
QUANTITY_PROMOTION_LABELS = {
    "2x1": locales.PROMOTION_LABEL_2X1,
    "3x1": locales.PROMOTION_LABEL_3X1,
    "3x2": locales.PROMOTION_LABEL_3X2,
}


def promotional_price(product: Product) -> Optional[float]:
    """Цена по акции для type == 'discount' с заданной total_price, иначе None."""
    promotion = product.promotion
    if not promotion:
        return None
    if promotion.type == "discount" and promotion.total_price is not None:
        return promotion.total_price
    return None


def promotion_label(product: Product) -> Optional[str]:
    promotion = product.promotion
    if not promotion:
        return None

    if promotion.type in QUANTITY_PROMOTION_LABELS:
        return QUANTITY_PROMOTION_LABELS[promotion.type]

    if promotion.type == "discount" and promotion.total_price is not None and product.price:
        # Округление "половина вверх", как в витрине
        percent = math.floor((1 - promotion.total_price / product.price) * 100 + 0.5)
        return locales.PROMOTION_LABEL_DISCOUNT.format(percent=percent)
    return None


def unit_price(product: Product) -> float:
    """Цена единицы товара в корзине: цена по акции 'discount', иначе базовая."""
    if product.promotion and product.promotion.type == "discount" and product.promotion.total_price is not None:
        return product.promotion.total_price
    return product.price
