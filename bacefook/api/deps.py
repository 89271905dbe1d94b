"""
bacefook.api.deps — FastAPI dependency injection
=================================================
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Engine

from bacefook.config import BacefookConfig, load_config
from bacefook.database.engine import create_db_engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> BacefookConfig:
    return load_config()
