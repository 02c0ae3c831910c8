"""
Type definitions for remote_config_client.
"""
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Dict,
    Generic,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    Union,
)

import httpx

from .errors import RemoteConfigError, VersionConflictError


T = TypeVar("T")

# Opaque JSON object transported as-is
ConfigDocument = Dict[str, Any]

# Opaque ETag token; empty string means "no version present"
Version = str

HttpMethod = str


@dataclass(frozen=True)
class FetchResult:
    """Result of a read: the version token and the document it identifies."""

    version: Version
    document: ConfigDocument


@dataclass(frozen=True)
class UpdateResult:
    """Result of an accepted write."""

    success: bool
    version: Version
    document: ConfigDocument


@dataclass
class TransportResponse:
    """Raw response handed back by a Transport.

    headers is always an httpx.Headers instance so header lookups are
    case-insensitive regardless of what the transport returned.
    """

    status: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""
    reason: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers or {})

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class Outcome(Generic[T]):
    """Explicit per-call result returned by the try_* store methods."""

    ok: bool
    value: Optional[T] = None
    error: Optional[RemoteConfigError] = None

    @property
    def is_conflict(self) -> bool:
        """True when the write was rejected because the version was stale."""
        return isinstance(self.error, VersionConflictError)

    def unwrap(self) -> T:
        """Return the value, or raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: RemoteConfigError) -> "Outcome[T]":
        return cls(ok=False, error=error)


class TokenProvider(Protocol):
    """Supplies a bearer credential for the given OAuth scopes.

    Implementations raise AuthError when no credential is available.
    """

    def provide(self, scopes: Sequence[str]) -> Union[str, Awaitable[str]]:
        ...


class Transport(Protocol):
    """Synchronous HTTP transport contract."""

    def request(
        self,
        method: HttpMethod,
        url: str,
        headers: Mapping[str, str],
        content: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        ...

    def close(self) -> None:
        ...


class AsyncTransport(Protocol):
    """Asynchronous HTTP transport contract."""

    async def request(
        self,
        method: HttpMethod,
        url: str,
        headers: Mapping[str, str],
        content: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        ...

    async def close(self) -> None:
        ...
