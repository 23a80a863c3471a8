from __future__ import annotations

import logging
import sys

from memo_app.config import settings

# Client libraries that log every Supabase / OpenAI round trip at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "openai")


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for the API process.

    Args:
        level: Overrides ``APP_LOG_LEVEL`` when given
    """
    level_name = (level or settings.log_level).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout
    )

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    if level_name != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("memo_app").info("Logging configured", extra={"level": level_name})


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
