"""
Client for a remote configuration service with ETag optimistic concurrency.

Reads return the document together with its ETag; conditional writes send
that ETag back in If-Match so a concurrent change is reported as a
VersionConflictError instead of being overwritten.
"""
from .types import (
    ConfigDocument,
    Version,
    FetchResult,
    UpdateResult,
    TransportResponse,
    Outcome,
    TokenProvider,
    Transport,
    AsyncTransport,
)
from .errors import (
    RemoteConfigError,
    MissingProjectIdError,
    AuthError,
    PreconditionMissingError,
    VersionConflictError,
    TransportError,
    DecodeError,
)
from .config import (
    RemoteConfigSettings,
    REMOTE_CONFIG_SCOPES,
    resolve_project_id,
    load_env_file,
)
from .auth import (
    StaticTokenProvider,
    EnvTokenProvider,
    CallableTokenProvider,
    mask_sensitive,
)
from .transport import HttpxTransport, AsyncHttpxTransport
from .store import ConfigStore, AsyncConfigStore
from .factory import (
    create_config_store,
    create_async_config_store,
    create_config_store_from_env_file,
)

__all__ = [
    # Types
    "ConfigDocument",
    "Version",
    "FetchResult",
    "UpdateResult",
    "TransportResponse",
    "Outcome",
    "TokenProvider",
    "Transport",
    "AsyncTransport",
    # Errors
    "RemoteConfigError",
    "MissingProjectIdError",
    "AuthError",
    "PreconditionMissingError",
    "VersionConflictError",
    "TransportError",
    "DecodeError",
    # Config
    "RemoteConfigSettings",
    "REMOTE_CONFIG_SCOPES",
    "resolve_project_id",
    "load_env_file",
    # Auth
    "StaticTokenProvider",
    "EnvTokenProvider",
    "CallableTokenProvider",
    "mask_sensitive",
    # Transports
    "HttpxTransport",
    "AsyncHttpxTransport",
    # Stores
    "ConfigStore",
    "AsyncConfigStore",
    # Factory
    "create_config_store",
    "create_async_config_store",
    "create_config_store_from_env_file",
]

__version__ = "0.1.0"
