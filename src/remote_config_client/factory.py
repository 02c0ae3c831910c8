"""
Factory functions for creating config stores.

Stores are explicit values: build one at startup and pass it to the code
that needs it.
"""
from typing import Optional

import httpx

from .config import RemoteConfigSettings, load_env_file
from .store import AsyncConfigStore, ConfigStore
from .transport import AsyncHttpxTransport, HttpxTransport
from .types import AsyncTransport, TokenProvider, Transport


def create_config_store(
    project_id: Optional[str] = None,
    token_provider: Optional[TokenProvider] = None,
    transport: Optional[Transport] = None,
    settings: Optional[RemoteConfigSettings] = None,
    httpx_client: Optional[httpx.Client] = None,
) -> ConfigStore:
    """
    Create a synchronous ConfigStore.

    Args:
        project_id: Project id; falls back to FIREBASE_PROJECT_ID
        token_provider: Bearer token source; defaults to EnvTokenProvider
        transport: Custom transport; takes precedence over httpx_client
        settings: Explicit settings; defaults to RemoteConfigSettings.from_env()
        httpx_client: Pre-configured httpx.Client to send requests with

    Example:
        store = create_config_store("my-project", StaticTokenProvider(token))
        result = store.read()
    """
    settings = settings or RemoteConfigSettings.from_env()
    if transport is None and httpx_client is not None:
        transport = HttpxTransport(httpx_client)
    return ConfigStore(
        project_id=project_id,
        token_provider=token_provider,
        transport=transport,
        settings=settings,
    )


def create_async_config_store(
    project_id: Optional[str] = None,
    token_provider: Optional[TokenProvider] = None,
    transport: Optional[AsyncTransport] = None,
    settings: Optional[RemoteConfigSettings] = None,
    httpx_client: Optional[httpx.AsyncClient] = None,
) -> AsyncConfigStore:
    """Create an AsyncConfigStore. Arguments as for create_config_store."""
    settings = settings or RemoteConfigSettings.from_env()
    if transport is None and httpx_client is not None:
        transport = AsyncHttpxTransport(httpx_client)
    return AsyncConfigStore(
        project_id=project_id,
        token_provider=token_provider,
        transport=transport,
        settings=settings,
    )


def create_config_store_from_env_file(
    directory: str,
    file: str = ".env",
    project_id: Optional[str] = None,
    token_provider: Optional[TokenProvider] = None,
    transport: Optional[Transport] = None,
) -> ConfigStore:
    """
    Load a dotenv file, then create a ConfigStore from the environment.

    An explicit project_id wins over FIREBASE_PROJECT_ID from the file.

    Example:
        store = create_config_store_from_env_file(os.path.dirname(__file__))
    """
    load_env_file(directory, file)
    return create_config_store(
        project_id=project_id,
        token_provider=token_provider,
        transport=transport,
    )
