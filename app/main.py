# app/main.py

import logging
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

# Конфигурация и ядро
from app.core.config import settings as config
from app.core.logging_config import setup_logging
from app.core.redis import close_redis
from app.clients.supabase import supabase_client

# Роутеры FastAPI
from app.routers import catalog, cart, order

# --- Инициализация ---
logger = logging.getLogger(__name__)

# --- Обработчик критических ошибок ---
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Глобальный обработчик для всех необработанных исключений.
    Логирует ошибку и возвращает общее сообщение без подробностей.
    """
    logger.critical(f"Unhandled exception for request: {request.method} {request.url}", exc_info=exc)

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error."},
    )

# --- Lifespan Manager (запуск и остановка приложения) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Application lifespan startup...")

    yield

    # Код при остановке
    await supabase_client.async_client.aclose()
    await close_redis()
    logger.info("HTTP and Redis clients closed.")

# --- Создание FastAPI приложения ---
app = FastAPI(
    title="Storefront Service",
    description="Backend for Frontend service for the shop storefront",
    version="0.1.0",
    lifespan=lifespan
)

origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173", # для Vite
    *config.CORS_ORIGINS,
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Регистрация обработчика исключений ---
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Подключение роутеров FastAPI ---
api_router = APIRouter(prefix="/api/v1")

api_router.include_router(catalog.router, tags=["Catalog"])
api_router.include_router(cart.router, tags=["Cart & Favorites"])
api_router.include_router(order.router, tags=["Orders & Checkout"])

app.include_router(api_router)
