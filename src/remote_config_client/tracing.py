"""
Human-readable request/response tracing with rich.

Enabled per store (trace=True) or with REMOTE_CONFIG_TRACE=1. Auth headers
are masked before printing.
"""
import json
from typing import Any, Mapping, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from .auth import mask_sensitive
from .types import TransportResponse

console = Console(stderr=True)

_SENSITIVE_HEADERS = {"authorization", "x-api-key"}


def mask_headers(headers: Mapping[str, str]) -> dict:
    """Copy headers with authorization values masked (15 visible chars)."""
    masked = dict(headers)
    for key in masked:
        if key.lower() in _SENSITIVE_HEADERS:
            masked[key] = mask_sensitive(masked[key], 15)
    return masked


def _format_body(body: Optional[bytes]) -> str:
    if not body:
        return ""
    try:
        return json.dumps(json.loads(body.decode("utf-8")), indent=2, ensure_ascii=False)
    except (UnicodeDecodeError, ValueError):
        return f"<binary data: {len(body)} bytes>"


def trace_request(
    method: str,
    url: str,
    headers: Mapping[str, str],
    content: Optional[bytes] = None,
    out: Optional[Console] = None,
) -> None:
    out = out or console
    out.print(Panel(f"[bold cyan]{method}[/bold cyan] {url}", title="[bold blue]Request[/bold blue]"))
    out.print("[bold]Headers:[/bold]", mask_headers(headers))
    body = _format_body(content)
    if body:
        out.print(Panel(Syntax(body, "json"), title="[bold]Request Body[/bold]"))


def trace_response(url: str, response: TransportResponse, out: Optional[Console] = None) -> None:
    out = out or console
    color = "green" if response.ok else "red"
    info: Any = f"[bold {color}]{response.status}[/bold {color}] {response.reason}"
    out.print(Panel(info, title=f"[bold blue]Response[/bold blue] ({url})"))
    out.print("[bold]Headers:[/bold]", dict(response.headers))
    body = _format_body(response.content)
    if body:
        out.print(Panel(Syntax(body, "json"), title="[bold]Response Body[/bold]"))
