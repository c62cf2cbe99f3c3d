"""Policy service adapter.

Fetches the allowed/blocked domain lists with one GET per send attempt. Any
failure yields an empty directory: an unreachable policy service must not
stop all outbound mail.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sendguard.adapters.http_json import TRANSPORT_ERRORS, request_json
from sendguard.core.errors import PolicyFetchError
from sendguard.core.models import PolicyDirectory

LOGGER = logging.getLogger(__name__)


def _domain_set(entry: dict, key: str) -> frozenset[str]:
    values = entry.get(key)
    if values is None:
        return frozenset()
    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        raise PolicyFetchError(f"'{key}' must be a list of strings")
    return frozenset(values)


def parse_policy_payload(payload: Any) -> PolicyDirectory:
    """Read ``{"data": [{"allowedDomains": [...], "blockedDomains": [...]}]}``.

    Only the first element of ``data`` is consulted; absent lists are empty.
    """

    if not isinstance(payload, dict):
        raise PolicyFetchError("Policy response is not a JSON object")
    data = payload.get("data")
    if data is None or data == []:
        return PolicyDirectory.empty()
    if not isinstance(data, list):
        raise PolicyFetchError("'data' must be a list")
    first = data[0]
    if first is None:
        return PolicyDirectory.empty()
    if not isinstance(first, dict):
        raise PolicyFetchError("'data[0]' must be an object")
    return PolicyDirectory(
        allowed_domains=_domain_set(first, "allowedDomains"),
        blocked_domains=_domain_set(first, "blockedDomains"),
    )


class HttpPolicySource:
    """Policy source adapter backed by the remote policy service."""

    def __init__(self, url: str, token: Optional[str] = None, timeout: float = 10.0) -> None:
        self._url = url
        self._token = token
        self._timeout = timeout

    async def _fetch_strict(self) -> PolicyDirectory:
        try:
            response = await request_json(self._url, "GET", token=self._token, timeout=self._timeout)
        except TRANSPORT_ERRORS as exc:
            raise PolicyFetchError(f"Policy service unreachable: {exc}") from exc

        if not response.ok:
            raise PolicyFetchError(f"Policy service returned HTTP {response.status}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise PolicyFetchError(f"Policy response is not valid JSON: {exc}") from exc
        return parse_policy_payload(payload)

    async def fetch(self) -> PolicyDirectory:
        """Return the current policy, or an empty one when it cannot be read."""

        try:
            return await self._fetch_strict()
        except PolicyFetchError as exc:
            LOGGER.warning("Error fetching policy domains, continuing without policy: %s", exc)
            return PolicyDirectory.empty()
