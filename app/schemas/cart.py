# app/schemas/cart.py
from pydantic import BaseModel, Field
from typing import List, Optional
from .product import Product

# Схема для добавления товара в корзину
class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(1, gt=0) # Количество должно быть больше 0
    selected_color: Optional[str] = None

# Схема для изменения количества. 0 и меньше удаляют позицию
class CartItemQuantityUpdate(BaseModel):
    quantity: int

# Позиция корзины в том виде, в каком она хранится в сессии
class CartItem(BaseModel):
    product: Product
    quantity: int = Field(gt=0)
    selected_color: Optional[str] = None

class CartSnapshot(BaseModel):
    items: List[CartItem] = []
    is_open: bool = False

# Схема для одной позиции в ответе о содержимом корзины
class CartItemResponse(BaseModel):
    product: Product
    quantity: int
    selected_color: Optional[str] = None
    unit_price: float
    line_total: float
    promotion_label: Optional[str] = None

class CartResponse(BaseModel):
    session_id: str
    items: List[CartItemResponse]
    total: float
    items_count: int
    is_open: bool


# Схема для добавления товара в избранное
class FavoriteItemUpdate(BaseModel):
    product_id: str

class FavoriteDiscount(BaseModel):
    product: Product
    promotional_price: float
    promotion_label: str
