"""
bacefook.config — YAML Configuration Loader
============================================

Reads ``config.yaml`` for **infrastructure-only** settings (service
identity, HTTP port, log level, pagination and leaderboard defaults).
The database connection string is a secret and comes from
``DATABASE_URL`` (see :mod:`bacefook.database.engine`).

Usage::

    from bacefook.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.service_name)      # "Bacefook API"
    print(cfg.default_page_size) # 10
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

CONFIG_ENV_VAR = "BACEFOOK_CONFIG"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class BacefookConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    service_name: str

    # HTTP
    api_port: int

    # Logging
    log_level: str = "INFO"

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # Leaderboards
    leaderboard_limit: int = 10


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
LOG_FORMAT = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Install the process-wide log format (no-op if handlers already exist)."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S")
    logging.getLogger("bacefook").setLevel(level)


def default_config_path() -> Path:
    """Resolve the config path from ``BACEFOOK_CONFIG`` or ``./config.yaml``."""
    return Path(os.getenv(CONFIG_ENV_VAR, "config.yaml"))


def load_config(path: str | Path | None = None) -> BacefookConfig:
    """Read *path* and return a :class:`BacefookConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``$BACEFOOK_CONFIG`` or ``config.yaml`` in the
        current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path) if path is not None else default_config_path()
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return BacefookConfig(
        service_name=raw["service_name"],
        api_port=int(raw["api_port"]),
        log_level=str(raw.get("log_level", "INFO")).upper(),
        default_page_size=int(raw.get("default_page_size", 10)),
        max_page_size=int(raw.get("max_page_size", 100)),
        leaderboard_limit=int(raw.get("leaderboard_limit", 10)),
    )
