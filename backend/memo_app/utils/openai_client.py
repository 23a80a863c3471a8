from __future__ import annotations

from functools import lru_cache

from openai import AsyncOpenAI

from memo_app.config import settings
from memo_app.core.errors import ConfigurationError
from memo_app.utils.logging import get_logger


@lru_cache(maxsize=1)
def get_openai_client() -> AsyncOpenAI:
    """Return a singleton OpenAI client built from `APP_OPENAI_API_KEY`.

    Raises ConfigurationError when the key is not configured. The failure is not
    cached, so setting the key and retrying works without a restart.
    """
    logger = get_logger(__name__)
    if not settings.openai_api_key:
        logger.error("Summary requested but APP_OPENAI_API_KEY is not set")
        raise ConfigurationError("APP_OPENAI_API_KEY is not configured")
    logger.debug("Initializing OpenAI client with APP_OPENAI_API_KEY")
    return AsyncOpenAI(api_key=settings.openai_api_key)
