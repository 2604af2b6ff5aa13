# app/schemas/product.py
from datetime import datetime
from pydantic import BaseModel, field_validator
from typing import List, Literal, Optional

PromotionType = Literal["2x1", "3x1", "3x2", "discount"]

class Promotion(BaseModel):
    id: Optional[str] = None
    type: PromotionType
    # Для type == "discount": итоговая цена товара по акции
    total_price: Optional[float] = None
    active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    class Config:
        from_attributes = True

class AllowedPaymentMethods(BaseModel):
    cash_on_delivery: bool = True
    card: bool = True

class Product(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float
    images: List[str] = []
    category: Optional[str] = None
    available_colors: List[str] = []
    # Одно число ("7") или диапазон ("3-5")
    shipping_days: Optional[str] = None
    allowed_payment_methods: AllowedPaymentMethods = AllowedPaymentMethods()
    created_at: Optional[datetime] = None
    promotion: Optional[Promotion] = None

    @field_validator('description', mode='before')
    @classmethod
    def validate_description(cls, v):
        return v or ""

    @field_validator('images', 'available_colors', mode='before')
    @classmethod
    def validate_lists(cls, v):
        # В базе эти колонки nullable
        return v or []

    @field_validator('allowed_payment_methods', mode='before')
    @classmethod
    def validate_payment_methods(cls, v):
        return v or {}

    @field_validator('shipping_days', mode='before')
    @classmethod
    def validate_shipping_days(cls, v):
        if isinstance(v, (int, float)):
            return str(int(v))
        return v or None

    class Config:
        from_attributes = True

class ProductWithRating(Product):
    average_rating: float = 0.0
    review_count: int = 0
    promotional_price: Optional[float] = None
    promotion_label: Optional[str] = None
    estimated_shipping_days: Optional[str] = None

SortBy = Literal["newest", "price_asc", "price_desc"]

class ProductListResponse(BaseModel):
    items: List[ProductWithRating]
    categories: List[str]
