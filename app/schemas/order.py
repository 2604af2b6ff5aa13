# app/schemas/order.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentMethod = Literal["mercadopago", "cash_on_delivery"]

# Снимок адреса доставки на момент оформления заказа
class ShippingAddress(BaseModel):
    full_name: str
    address: str
    city: str
    postal_code: str
    country: Optional[str] = ""
    phone: Optional[str] = ""

# Снимок товара внутри позиции заказа (join по order_items -> products)
class OrderItemProduct(BaseModel):
    name: str = ""
    images: List[str] = []
    shipping_days: Optional[str] = None
    description: str = ""

    @field_validator('images', mode='before')
    @classmethod
    def validate_images(cls, v):
        return v or []

    @field_validator('description', mode='before')
    @classmethod
    def validate_description(cls, v):
        return v or ""

    @field_validator('shipping_days', mode='before')
    @classmethod
    def validate_shipping_days(cls, v):
        if isinstance(v, (int, float)):
            return str(int(v))
        return v or None

class OrderItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    quantity: int
    price_at_time: float
    selected_color: Optional[str] = None
    product: OrderItemProduct = Field(alias="products")

    @field_validator('product', mode='before')
    @classmethod
    def validate_product(cls, v):
        # Товар удален из каталога: embed приходит как null, позицию сохраняем
        return v or {}

class Order(BaseModel):
    id: str
    user_id: str
    total: float
    status: OrderStatus
    # Статус оплаты независим от статуса заказа: paid | pending | failed | ...
    payment_status: str
    payment_method: str
    payment_url: Optional[str] = None
    shipping_address: ShippingAddress
    created_at: datetime
    order_items: List[OrderItem] = []

    @field_validator('order_items', mode='before')
    @classmethod
    def validate_order_items(cls, v):
        return v or []

# Заказ в истории: исходные данные + производные значения для отображения
class OrderView(Order):
    short_number: str
    estimated_shipping_days: str
    time_remaining: Optional[str] = None

class OrdersOverview(BaseModel):
    completed: List[OrderView]
    pending: List[OrderView]
    completed_count: int
    pending_count: int

class PendingPaymentCount(BaseModel):
    count: int

class PaymentRedirect(BaseModel):
    order_id: str
    init_point: str

class CheckoutRequest(BaseModel):
    shipping_address: ShippingAddress
    payment_method: PaymentMethod

class CheckoutResult(BaseModel):
    order: Order
    init_point: Optional[str] = None
