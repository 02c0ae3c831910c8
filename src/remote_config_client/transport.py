"""
httpx-backed transports for remote_config_client.
"""
import logging
import os
from typing import Mapping, Optional

import httpx

from .config import DEFAULT_TIMEOUT
from .errors import TransportError
from .types import HttpMethod, TransportResponse

logger = logging.getLogger(__name__)


def _is_ssl_verify_disabled_by_env() -> bool:
    """
    Check if SSL verification is disabled via environment variables.

    Returns True if any of these are set:
    - NODE_TLS_REJECT_UNAUTHORIZED=0
    - SSL_CERT_VERIFY=0
    """
    node_tls = os.environ.get("NODE_TLS_REJECT_UNAUTHORIZED", "")
    ssl_cert_verify = os.environ.get("SSL_CERT_VERIFY", "")
    return node_tls == "0" or ssl_cert_verify == "0"


def _to_response(response: httpx.Response) -> TransportResponse:
    return TransportResponse(
        status=response.status_code,
        headers=response.headers,
        content=response.content,
        reason=response.reason_phrase or "",
    )


def _wrap_error(method: str, url: str, error: httpx.HTTPError) -> TransportError:
    if isinstance(error, httpx.TimeoutException):
        return TransportError(f"{method} {url} timed out: {error}", timeout=True)
    return TransportError(f"{method} {url} failed: {error}")


class HttpxTransport:
    """Synchronous transport over httpx.Client."""

    def __init__(
        self,
        httpx_client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._owns_client = httpx_client is None
        if httpx_client is not None:
            self._client = httpx_client
        else:
            self._client = httpx.Client(
                timeout=httpx.Timeout(timeout),
                verify=not _is_ssl_verify_disabled_by_env(),
            )

    def request(
        self,
        method: HttpMethod,
        url: str,
        headers: Mapping[str, str],
        content: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        kwargs = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = self._client.request(
                method, url, headers=dict(headers), content=content, **kwargs
            )
        except httpx.HTTPError as e:
            logger.debug(f"HttpxTransport.request: {method} {url} raised {type(e).__name__}")
            raise _wrap_error(method, url, e) from e
        return _to_response(response)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class AsyncHttpxTransport:
    """Asynchronous transport over httpx.AsyncClient."""

    def __init__(
        self,
        httpx_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._owns_client = httpx_client is None
        if httpx_client is not None:
            self._client = httpx_client
        else:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(timeout),
                verify=not _is_ssl_verify_disabled_by_env(),
            )

    async def request(
        self,
        method: HttpMethod,
        url: str,
        headers: Mapping[str, str],
        content: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        kwargs = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = await self._client.request(
                method, url, headers=dict(headers), content=content, **kwargs
            )
        except httpx.HTTPError as e:
            logger.debug(f"AsyncHttpxTransport.request: {method} {url} raised {type(e).__name__}")
            raise _wrap_error(method, url, e) from e
        return _to_response(response)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
