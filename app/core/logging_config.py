# app/core/logging_config.py

from logging.config import dictConfig

from app.core.config import settings


def build_logging_config(level: str) -> dict:
    """
    Конфигурация для dictConfig. Уровень `level` применяется к логгерам приложения,
    httpx пишет только предупреждения, иначе каждый запрос к Supabase попадает в лог.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["console"], "level": "INFO"},
            "httpx": {"handlers": ["console"], "level": "WARNING", "propagate": False},
            "app": {"handlers": ["console"], "level": level, "propagate": False},
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def setup_logging(level: str | None = None):
    dictConfig(build_logging_config((level or settings.LOG_LEVEL).upper()))
