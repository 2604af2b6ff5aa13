# app/services/cart.py

from typing import List, Optional

from app.schemas.cart import CartItem, CartItemResponse, CartResponse, CartSnapshot
from app.schemas.product import Product
from app.services import pricing


class CartStore:
    """
    Состояние корзины одной сессии: позиции, количество, выбранный цвет
    и флаг открытой панели корзины.

    Позиция уникальна по паре (id товара, выбранный цвет). При этом
    update_quantity ищет позицию только по id товара (первое совпадение):
    при нескольких цветах одного товара меняется первая позиция.
    """

    def __init__(self, items: Optional[List[CartItem]] = None, is_open: bool = False):
        self.items: List[CartItem] = list(items or [])
        self.is_open = is_open

    def _find(self, product_id: str, selected_color: Optional[str]) -> Optional[CartItem]:
        for item in self.items:
            if item.product.id == product_id and item.selected_color == selected_color:
                return item
        return None

    def add_item(self, product: Product, quantity: int = 1, selected_color: Optional[str] = None) -> CartItem:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValueError(f"Quantity must be a positive integer, got {quantity!r}")

        existing = self._find(product.id, selected_color)
        if existing:
            existing.quantity += quantity
            return existing

        item = CartItem(product=product, quantity=quantity, selected_color=selected_color)
        self.items.append(item)
        return item

    def update_quantity(self, product_id: str, new_quantity: int) -> None:
        for index, item in enumerate(self.items):
            if item.product.id != product_id:
                continue
            if new_quantity <= 0:
                del self.items[index]
            else:
                item.quantity = new_quantity
            return

    def remove_item(self, product_id: str) -> None:
        self.items = [item for item in self.items if item.product.id != product_id]

    def clear(self) -> None:
        self.items = []

    def toggle_cart(self) -> bool:
        self.is_open = not self.is_open
        return self.is_open

    def contains(self, product_id: str) -> bool:
        return any(item.product.id == product_id for item in self.items)

    @property
    def total(self) -> float:
        # Акции 2x1 / 3x1 / 3x2 только подписываются и сумму не уменьшают
        return sum((pricing.unit_price(item.product) * item.quantity for item in self.items), 0.0)

    @property
    def items_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_snapshot(self) -> CartSnapshot:
        return CartSnapshot(items=self.items, is_open=self.is_open)

    @classmethod
    def from_snapshot(cls, snapshot: CartSnapshot) -> "CartStore":
        return cls(items=snapshot.items, is_open=snapshot.is_open)


def build_cart_response(session_id: str, store: CartStore) -> CartResponse:
    """Собирает ответ API: позиции с ценой за единицу, суммой по строке и подписью акции."""
    response_items = []
    for item in store.items:
        price = pricing.unit_price(item.product)
        response_items.append(CartItemResponse(
            product=item.product,
            quantity=item.quantity,
            selected_color=item.selected_color,
            unit_price=price,
            line_total=round(price * item.quantity, 2),
            promotion_label=pricing.promotion_label(item.product)
        ))

    return CartResponse(
        session_id=session_id,
        items=response_items,
        total=round(store.total, 2),
        items_count=store.items_count,
        is_open=store.is_open
    )
