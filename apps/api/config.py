from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal


@dataclass(frozen=True)
class Settings:
    app_name: str
    environment: Literal['dev', 'prod', 'test']
    cors_origins: str
    log_level: str
    max_min_candles: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    environment = os.getenv('ENVIRONMENT', 'dev').strip().lower()
    if environment not in {'dev', 'prod', 'test'}:
        environment = 'dev'

    try:
        max_min_candles = int(os.getenv('API_MAX_MIN_CANDLES', '5000'))
    except (TypeError, ValueError):
        max_min_candles = 5000

    return Settings(
        app_name=os.getenv('APP_NAME', 'swapcandles-api'),
        environment=environment,  # type: ignore[arg-type]
        cors_origins=os.getenv('CORS_ORIGINS', 'http://localhost:3000'),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        max_min_candles=max_min_candles
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
