"""
Bearer token providers for remote_config_client.

Acquiring credentials from an identity provider is left to the caller;
these providers cover static tokens, tokens exported into the environment,
and arbitrary callbacks.
"""
import inspect
import logging
import os
from typing import Any, Awaitable, Callable, Optional, Sequence, Tuple, Union

from pydantic import SecretStr

from .errors import AuthError
from .types import TokenProvider

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_ENV_VARS: Tuple[str, ...] = ("FIREBASE_ACCESS_TOKEN", "GOOGLE_OAUTH_ACCESS_TOKEN")


def mask_sensitive(value: Optional[str], visible_chars: int = 10) -> str:
    """Mask sensitive value for safe logging."""
    if value is None:
        return "<None>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


class StaticTokenProvider:
    """Returns the same token for every call."""

    def __init__(self, token: Union[str, SecretStr]):
        self._token = token if isinstance(token, SecretStr) else SecretStr(token)

    def provide(self, scopes: Sequence[str]) -> str:
        token = self._token.get_secret_value()
        if not token:
            raise AuthError("Static token is empty")
        return token

    def __repr__(self) -> str:
        return f"StaticTokenProvider(token={self._token!r})"


class EnvTokenProvider:
    """Reads the token from the first set environment variable."""

    def __init__(self, env_vars: Sequence[str] = DEFAULT_TOKEN_ENV_VARS):
        if not env_vars:
            raise ValueError("env_vars must name at least one variable")
        self._env_vars = tuple(env_vars)

    def provide(self, scopes: Sequence[str]) -> str:
        for name in self._env_vars:
            value = os.environ.get(name)
            if value:
                logger.debug(f"EnvTokenProvider.provide: using {name}={mask_sensitive(value)}")
                return value
        raise AuthError(
            f"Could not obtain an access token. Set one of: {', '.join(self._env_vars)}"
        )


class CallableTokenProvider:
    """Delegates to a callback receiving the requested scopes.

    The callback may be a coroutine function when used with AsyncConfigStore.
    """

    def __init__(self, callback: Callable[[Sequence[str]], Union[str, Awaitable[str]]]):
        self._callback = callback

    def provide(self, scopes: Sequence[str]) -> Union[str, Awaitable[str]]:
        return self._callback(scopes)


def _check_token(token: Any) -> str:
    if not isinstance(token, str) or not token:
        raise AuthError("Token provider returned no access token")
    return token


def obtain_token(provider: TokenProvider, scopes: Sequence[str]) -> str:
    """Fetch a token, normalizing provider failures to AuthError."""
    try:
        token = provider.provide(scopes)
    except AuthError:
        raise
    except Exception as e:
        raise AuthError(f"Token provider failed: {e}") from e
    if inspect.isawaitable(token):
        # Close the coroutine so it is not reported as never awaited
        close = getattr(token, "close", None)
        if close:
            close()
        raise AuthError("Token provider is asynchronous; use AsyncConfigStore")
    token = _check_token(token)
    logger.debug(f"obtain_token: token={mask_sensitive(token)}")
    return token


async def obtain_token_async(provider: TokenProvider, scopes: Sequence[str]) -> str:
    """Async variant of obtain_token accepting sync or async providers."""
    try:
        token = provider.provide(scopes)
        if inspect.isawaitable(token):
            token = await token
    except AuthError:
        raise
    except Exception as e:
        raise AuthError(f"Token provider failed: {e}") from e
    token = _check_token(token)
    logger.debug(f"obtain_token_async: token={mask_sensitive(token)}")
    return token
