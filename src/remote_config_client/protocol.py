"""
Request building and response interpretation for the ETag protocol.

Shared by ConfigStore and AsyncConfigStore; nothing here performs I/O.
"""
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .errors import DecodeError, TransportError, VersionConflictError
from .types import ConfigDocument, TransportResponse, Version

logger = logging.getLogger(__name__)

ENDPOINT_TEMPLATE = "{base_url}/v1/projects/{project_id}/remoteConfig"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
WILDCARD_MATCH = "*"

# Statuses a server uses to reject a stale If-Match
CONFLICT_STATUSES = frozenset({409, 412})


def build_endpoint(base_url: str, project_id: str) -> str:
    """Resource address of the project's configuration document."""
    return ENDPOINT_TEMPLATE.format(
        base_url=base_url.rstrip("/"), project_id=quote(project_id, safe="")
    )


def build_read_headers(token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept-Encoding": "gzip",
    }


def build_write_headers(token: str, if_match: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "If-Match": if_match,
        "Content-Type": JSON_CONTENT_TYPE,
    }


def encode_document(document: ConfigDocument) -> bytes:
    """Serialize a document as UTF-8 JSON."""
    try:
        return json.dumps(document, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ValueError(f"Document is not JSON serializable: {e}") from e


def decode_document(content: bytes) -> ConfigDocument:
    """Parse a response body as a JSON object."""
    try:
        data = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"Response body is not valid JSON: {e}", body=content) from e
    if not isinstance(data, dict):
        raise DecodeError(
            f"Expected a JSON object, got {type(data).__name__}", body=content
        )
    return data


def extract_version(headers: httpx.Headers) -> Version:
    """Read the ETag header; empty string when absent."""
    version = headers.get("etag", "")
    if not version:
        logger.warning("extract_version: response carries no ETag header, using empty version")
    return version


def _error_message(response: TransportResponse) -> Optional[str]:
    """Pull the message out of a Google API style error body, if any."""
    try:
        data: Any = json.loads(response.content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"].get("message")
    return None


def raise_for_status(
    response: TransportResponse,
    method: str,
    url: str,
    expected_version: Optional[Version] = None,
) -> None:
    """
    Raise the protocol error matching a non-2xx response.

    Args:
        response: Response to check
        method: HTTP method, for the error message
        url: Request URL, for the error message
        expected_version: Version asserted through If-Match, None for reads
            and wildcard writes. Only conditional writes can conflict.
    """
    if response.ok:
        return

    message = _error_message(response)
    logger.debug(
        f"raise_for_status: {method} {url} -> {response.status} "
        f"expected_version={expected_version!r} message={message!r}"
    )

    if expected_version and expected_version != WILDCARD_MATCH and response.status in CONFLICT_STATUSES:
        raise VersionConflictError(expected_version, response.status, message)

    detail = message or response.reason or "request failed"
    raise TransportError(
        f"HTTP {response.status} for {method} {url}: {detail}",
        status=response.status,
        body=response.content,
    )
