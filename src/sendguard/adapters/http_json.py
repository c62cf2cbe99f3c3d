"""Shared JSON-over-HTTP helpers for the policy and audit adapters.

Calls are blocking urllib requests run on a worker thread so the send
attempt's event loop stays free while waiting on the network.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import http.client
import json
from typing import Any, Optional
import urllib.error
import urllib.request

# Everything a broken connection can raise out of urlopen.
TRANSPORT_ERRORS = (OSError, http.client.HTTPException)


@dataclass(frozen=True)
class JsonResponse:
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.body)


def _build_request(
    url: str,
    method: str,
    payload: Optional[Any],
    token: Optional[str],
) -> urllib.request.Request:
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    request = urllib.request.Request(url, data=data, method=method)
    request.add_header("Content-Type", "application/json")
    request.add_header("Accept", "application/json")
    if token:
        request.add_header("Authorization", f"Bearer {token}")
    return request


def _send(request: urllib.request.Request, timeout: float) -> JsonResponse:
    # Non-2xx responses surface as HTTPError; keep their body for the caller.
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = getattr(response, "status", None) or response.getcode()
            body = response.read().decode("utf-8", errors="replace")
            return JsonResponse(status=status, body=body)
    except urllib.error.HTTPError as e:
        body = e.read().decode("utf-8", errors="replace") if e.fp else ""
        return JsonResponse(status=e.code, body=body)


async def request_json(
    url: str,
    method: str = "GET",
    payload: Optional[Any] = None,
    token: Optional[str] = None,
    timeout: float = 10.0,
) -> JsonResponse:
    """Send one request. Transport failures raise one of TRANSPORT_ERRORS.

    urllib rejects malformed URLs (no scheme, non-ASCII host) with ValueError;
    those are reported as URLError so callers see one failure family.
    """

    try:
        request = _build_request(url, method, payload, token)
        return await asyncio.to_thread(_send, request, timeout)
    except ValueError as exc:
        raise urllib.error.URLError(f"invalid url {url!r}: {exc}") from exc
