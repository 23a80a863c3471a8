from __future__ import annotations

from functools import lru_cache

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from memo_app.config import settings
from memo_app.core.errors import ConfigurationError
from memo_app.utils.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Return the process-wide Supabase client.

    Memos are not scoped to a user, so one client built from the configured
    project key serves every request.
    """
    if not settings.supabase_url or not settings.supabase_key:
        raise ConfigurationError("APP_SUPABASE_URL and APP_SUPABASE_KEY must be configured")
    logger.debug("Initializing Supabase client")
    return create_client(
        settings.supabase_url,
        settings.supabase_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
