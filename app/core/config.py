from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Настройки Supabase (REST + Edge Functions)
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str
    SUPABASE_JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    PAYMENT_FUNCTION_NAME: str = "create-payment"

    LOG_LEVEL: str = "INFO"

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379

    # Корзина живет, пока жива сессия: ключ в Redis с TTL
    CART_SESSION_TTL_SECONDS: int = 60 * 60 * 24 * 7  # 7 дней
    CATALOG_CACHE_TTL_SECONDS: int = 300

    # Окно оплаты для заказов MercadoPago
    PAYMENT_WINDOW_HOURS: int = 48
    DEFAULT_SHIPPING_DAYS: str = "3-5"

    STOREFRONT_URL: str = "http://localhost:5173"
    CORS_EXTRA_ORIGINS_STR: str = Field(default="", alias="CORS_EXTRA_ORIGINS")

    @property
    def CORS_ORIGINS(self) -> List[str]:
        extra = [origin.strip() for origin in self.CORS_EXTRA_ORIGINS_STR.split(',') if origin.strip()]
        return [self.STOREFRONT_URL, *extra]

    @property
    def REST_URL(self) -> str:
        return f"{self.SUPABASE_URL.rstrip('/')}/rest/v1"

    @property
    def FUNCTIONS_URL(self) -> str:
        return f"{self.SUPABASE_URL.rstrip('/')}/functions/v1"

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}"

    model_config = SettingsConfigDict(env_file=".env", populate_by_name=True)

settings = Settings()
