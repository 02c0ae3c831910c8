"""
ConfigStore: ETag-based read-modify-write against one remote config document.

Typical usage:

    store = ConfigStore(project_id="my-project")
    current = store.read()
    document = dict(current.document)
    document["parameters"]["welcome"] = {"defaultValue": {"value": "hi"}}
    try:
        store.update(document, current.version)
    except VersionConflictError:
        ...  # someone else wrote first: read() again and reapply

The store keeps no state between calls beyond its endpoint, so one instance
can be shared across threads. Concurrent writers are arbitrated by the
server's If-Match check, not by the client.
"""
import logging
from typing import Optional

from .auth import EnvTokenProvider, obtain_token, obtain_token_async
from .config import REMOTE_CONFIG_SCOPES, RemoteConfigSettings, resolve_project_id
from .errors import PreconditionMissingError, RemoteConfigError, TransportError
from .protocol import (
    WILDCARD_MATCH,
    build_endpoint,
    build_read_headers,
    build_write_headers,
    decode_document,
    encode_document,
    extract_version,
    raise_for_status,
)
from .tracing import trace_request, trace_response
from .transport import AsyncHttpxTransport, HttpxTransport
from .types import (
    AsyncTransport,
    ConfigDocument,
    FetchResult,
    Outcome,
    TokenProvider,
    Transport,
    TransportResponse,
    UpdateResult,
    Version,
)

logger = logging.getLogger(__name__)


class _BaseConfigStore:
    """Construction and response handling shared by the sync and async stores."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        settings: Optional[RemoteConfigSettings] = None,
        timeout: Optional[float] = None,
        trace: Optional[bool] = None,
    ):
        settings = settings or RemoteConfigSettings.from_env()
        self._project_id = resolve_project_id(project_id, settings)
        self._endpoint = build_endpoint(settings.base_url, self._project_id)
        self._token_provider = token_provider or EnvTokenProvider()
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self._timeout = timeout if timeout is not None else settings.timeout
        self._trace = settings.trace if trace is None else trace
        logger.debug(
            f"{type(self).__name__}.__init__: endpoint={self._endpoint}, timeout={self._timeout}"
        )

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def timeout(self) -> float:
        return self._timeout

    def _trace_request(self, method: str, headers: dict, content: Optional[bytes] = None) -> None:
        if self._trace:
            trace_request(method, self._endpoint, headers, content)

    def _trace_response(self, response: TransportResponse) -> None:
        if self._trace:
            trace_response(self._endpoint, response)

    def _finish_read(self, response: TransportResponse) -> FetchResult:
        self._trace_response(response)
        raise_for_status(response, "GET", self._endpoint)
        result = FetchResult(
            version=extract_version(response.headers),
            document=decode_document(response.content),
        )
        logger.debug(f"{type(self).__name__}.read: version={result.version!r}")
        return result

    def _finish_write(self, response: TransportResponse, if_match: str) -> UpdateResult:
        self._trace_response(response)
        raise_for_status(response, "PUT", self._endpoint, expected_version=if_match)
        result = UpdateResult(
            success=True,
            version=extract_version(response.headers),
            document=decode_document(response.content),
        )
        logger.info(
            f"{type(self).__name__}: wrote {self._endpoint} "
            f"If-Match={if_match!r} -> version={result.version!r}"
        )
        return result

    @staticmethod
    def _require_version(expected_version: Optional[Version]) -> Version:
        if not expected_version:
            raise PreconditionMissingError()
        if expected_version == WILDCARD_MATCH:
            raise PreconditionMissingError(
                "update() requires a concrete ETag from read(); use force_update() to overwrite unconditionally."
            )
        return expected_version

    def _transport_failure(self, method: str, error: Exception) -> TransportError:
        logger.debug(
            f"{type(self).__name__}: {method} {self._endpoint} raised {type(error).__name__}"
        )
        return TransportError(f"{method} {self._endpoint} failed: {error}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(endpoint={self._endpoint!r})"


class ConfigStore(_BaseConfigStore):
    """Synchronous store bound to one project's configuration document."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[Transport] = None,
        settings: Optional[RemoteConfigSettings] = None,
        timeout: Optional[float] = None,
        trace: Optional[bool] = None,
    ):
        super().__init__(project_id, token_provider, settings, timeout, trace)
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(timeout=self._timeout)

    def get_token(self) -> str:
        """Return a freshly provided bearer token."""
        return obtain_token(self._token_provider, REMOTE_CONFIG_SCOPES)

    def read(self) -> FetchResult:
        """
        Fetch the current document and its version.

        Raises:
            AuthError: no bearer credential available (no request is made)
            TransportError: network failure, timeout, or non-2xx response
            DecodeError: body is not a JSON object
        """
        token = self.get_token()
        headers = build_read_headers(token)
        self._trace_request("GET", headers)
        response = self._send("GET", headers)
        return self._finish_read(response)

    def _send(self, method: str, headers: dict, content: Optional[bytes] = None) -> TransportResponse:
        """Run one transport call; any failure other than TransportError is wrapped."""
        try:
            return self._transport.request(
                method, self._endpoint, headers, content=content, timeout=self._timeout
            )
        except TransportError:
            raise
        except Exception as e:
            raise self._transport_failure(method, e) from e

    def current_version(self) -> Version:
        """Version from a fresh read()."""
        return self.read().version

    def current_document(self) -> ConfigDocument:
        """Document from a fresh read()."""
        return self.read().document

    def update(self, document: ConfigDocument, expected_version: Version) -> UpdateResult:
        """
        Replace the document if the server still holds expected_version.

        Args:
            document: New configuration document
            expected_version: Version returned by a prior read()

        Raises:
            PreconditionMissingError: expected_version is empty (no request is made)
            VersionConflictError: the server's version no longer matches
            AuthError, TransportError, DecodeError: as for read()
        """
        if_match = self._require_version(expected_version)
        return self._put(document, if_match)

    def force_update(self, document: ConfigDocument) -> UpdateResult:
        """
        Replace the document unconditionally (If-Match: *).

        Unsafe with concurrent writers: any change made since your last read
        is silently discarded. Prefer update() with a version.
        """
        logger.warning(f"ConfigStore.force_update: overwriting {self._endpoint} without version check")
        return self._put(document, WILDCARD_MATCH)

    def _put(self, document: ConfigDocument, if_match: str) -> UpdateResult:
        content = encode_document(document)
        token = self.get_token()
        headers = build_write_headers(token, if_match)
        self._trace_request("PUT", headers, content)
        response = self._send("PUT", headers, content)
        return self._finish_write(response, if_match)

    def try_read(self) -> Outcome[FetchResult]:
        try:
            return Outcome.success(self.read())
        except RemoteConfigError as e:
            return Outcome.failure(e)

    def try_update(self, document: ConfigDocument, expected_version: Version) -> Outcome[UpdateResult]:
        try:
            return Outcome.success(self.update(document, expected_version))
        except RemoteConfigError as e:
            return Outcome.failure(e)

    def try_force_update(self, document: ConfigDocument) -> Outcome[UpdateResult]:
        try:
            return Outcome.success(self.force_update(document))
        except RemoteConfigError as e:
            return Outcome.failure(e)

    def close(self) -> None:
        """Close the transport if this store created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "ConfigStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class AsyncConfigStore(_BaseConfigStore):
    """Asynchronous store; token providers may be sync or async."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[AsyncTransport] = None,
        settings: Optional[RemoteConfigSettings] = None,
        timeout: Optional[float] = None,
        trace: Optional[bool] = None,
    ):
        super().__init__(project_id, token_provider, settings, timeout, trace)
        self._owns_transport = transport is None
        self._transport = transport or AsyncHttpxTransport(timeout=self._timeout)

    async def get_token(self) -> str:
        return await obtain_token_async(self._token_provider, REMOTE_CONFIG_SCOPES)

    async def read(self) -> FetchResult:
        """Fetch the current document and its version. See ConfigStore.read."""
        token = await self.get_token()
        headers = build_read_headers(token)
        self._trace_request("GET", headers)
        response = await self._send("GET", headers)
        return self._finish_read(response)

    async def _send(
        self, method: str, headers: dict, content: Optional[bytes] = None
    ) -> TransportResponse:
        try:
            return await self._transport.request(
                method, self._endpoint, headers, content=content, timeout=self._timeout
            )
        except TransportError:
            raise
        except Exception as e:
            raise self._transport_failure(method, e) from e

    async def current_version(self) -> Version:
        return (await self.read()).version

    async def current_document(self) -> ConfigDocument:
        return (await self.read()).document

    async def update(self, document: ConfigDocument, expected_version: Version) -> UpdateResult:
        """Conditional write. See ConfigStore.update."""
        if_match = self._require_version(expected_version)
        return await self._put(document, if_match)

    async def force_update(self, document: ConfigDocument) -> UpdateResult:
        """Unconditional write (If-Match: *); discards concurrent changes."""
        logger.warning(
            f"AsyncConfigStore.force_update: overwriting {self._endpoint} without version check"
        )
        return await self._put(document, WILDCARD_MATCH)

    async def _put(self, document: ConfigDocument, if_match: str) -> UpdateResult:
        content = encode_document(document)
        token = await self.get_token()
        headers = build_write_headers(token, if_match)
        self._trace_request("PUT", headers, content)
        response = await self._send("PUT", headers, content)
        return self._finish_write(response, if_match)

    async def try_read(self) -> Outcome[FetchResult]:
        try:
            return Outcome.success(await self.read())
        except RemoteConfigError as e:
            return Outcome.failure(e)

    async def try_update(
        self, document: ConfigDocument, expected_version: Version
    ) -> Outcome[UpdateResult]:
        try:
            return Outcome.success(await self.update(document, expected_version))
        except RemoteConfigError as e:
            return Outcome.failure(e)

    async def try_force_update(self, document: ConfigDocument) -> Outcome[UpdateResult]:
        try:
            return Outcome.success(await self.force_update(document))
        except RemoteConfigError as e:
            return Outcome.failure(e)

    async def close(self) -> None:
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> "AsyncConfigStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
