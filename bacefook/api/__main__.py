"""
bacefook.api.__main__ — Entry point for ``python -m bacefook.api``
===================================================================

Wiring:
1. Load .env (``DATABASE_URL``, CORS origins).
2. Load config.yaml (port, log level).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Serve the FastAPI app with uvicorn (blocking).
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from bacefook.config import configure_logging, load_config
from bacefook.database.engine import create_db_engine, init_db

logger = logging.getLogger("bacefook")


def main() -> None:
    """Bootstrap and run the Bacefook API."""
    load_dotenv()

    cfg = load_config()
    configure_logging(cfg.log_level)
    logger.info("Config loaded — %s on port %d", cfg.service_name, cfg.api_port)

    engine = create_db_engine()
    init_db(engine)
    engine.dispose()

    try:
        uvicorn.run("bacefook.api.main:app", host="0.0.0.0", port=cfg.api_port, log_config=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
