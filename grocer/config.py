from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class OnBusyMode(Enum):
    fail = "fail"
    wait = "wait"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GROCER_")

    recipe_ttl_seconds: float = 300.0
    meal_planner_path: str = "/pages/meals-planner-root"
    payment_return_url: str = "nl.picnic-supermarkt://payment"
    tree_max_depth: int = 64
    checkout_on_busy: OnBusyMode = OnBusyMode.fail
    ingredient_concurrency: int = 1
    search_limit: int = 5
    deliveries_limit: int = 10
    categories_limit: int = 8
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the process-wide log format. Called by the embedding application."""
    settings = get_settings() if settings is None else settings
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
