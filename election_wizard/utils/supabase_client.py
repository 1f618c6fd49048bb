"""Supabase client factory used by the remote autosave slot."""

from functools import lru_cache

import httpx
from supabase.lib.client_options import SyncClientOptions

from election_wizard.config import Settings, settings
from election_wizard.utils.errors import ConfigurationError
from supabase import Client, create_client


def _build_sync_options(
    max_connections: int,
    max_keepalive_connections: int,
    timeout_seconds: int,
) -> SyncClientOptions:
    max_connections = max(1, max_connections)
    max_keepalive_connections = max(1, min(max_connections, max_keepalive_connections))
    timeout_seconds = max(1, timeout_seconds)

    httpx_client = httpx.Client(
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        ),
    )

    return SyncClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=timeout_seconds,
        httpx_client=httpx_client,
    )


@lru_cache(maxsize=4)
def _cached_client(
    url: str,
    service_key: str,
    max_connections: int,
    max_keepalive_connections: int,
    timeout_seconds: int,
) -> Client:
    return create_client(
        url,
        service_key,
        options=_build_sync_options(max_connections, max_keepalive_connections, timeout_seconds),
    )


def get_service_client(config: Settings | None = None) -> Client:
    """Return the service-role Supabase client described by ``config``.

    Clients are cached per URL, key and pool settings.

    Raises:
        ConfigurationError: when the URL or service key is not configured.
    """
    config = config or settings
    if not config.supabase_url or not config.supabase_service_key:
        raise ConfigurationError(
            "ELECTION_WIZARD_SUPABASE_URL and ELECTION_WIZARD_SUPABASE_SERVICE_KEY are required"
        )
    return _cached_client(
        config.supabase_url,
        config.supabase_service_key,
        config.supabase_http_max_connections,
        config.supabase_http_max_keepalive_connections,
        config.supabase_postgrest_timeout_seconds,
    )
