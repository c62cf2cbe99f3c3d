"""Audit service adapter.

Posts the audit record as JSON. A save only counts when the service's own
success flag is true; an HTTP 2xx alone is not enough.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sendguard.adapters.http_json import TRANSPORT_ERRORS, request_json
from sendguard.core.audit import audit_record_to_payload
from sendguard.core.errors import AuditPersistError
from sendguard.core.models import AuditRecord, PersistResult

LOGGER = logging.getLogger(__name__)

_SUCCESS_KEYS = ("success", "issuccess", "succeeded")


def _lookup(payload: dict, keys: tuple[str, ...]) -> Any:
    lowered = {str(key).lower(): value for key, value in payload.items()}
    for key in keys:
        if key in lowered:
            return lowered[key]
    return None


def read_sink_response(payload: Any) -> PersistResult:
    """Interpret the audit service's JSON body."""

    if not isinstance(payload, dict):
        raise AuditPersistError("Audit response is not a JSON object")
    success = _lookup(payload, _SUCCESS_KEYS)
    message = _lookup(payload, ("message", "error"))
    message = str(message) if message is not None else ""
    if success is not True:
        raise AuditPersistError(message or "Audit service did not confirm the save")
    return PersistResult.success(message)


class HttpAuditSink:
    """Audit sink adapter backed by the remote audit service."""

    def __init__(self, url: str, token: Optional[str] = None, timeout: float = 10.0) -> None:
        self._url = url
        self._token = token
        self._timeout = timeout

    async def _persist_strict(self, record: AuditRecord) -> PersistResult:
        payload = audit_record_to_payload(record)
        try:
            response = await request_json(
                self._url, "POST", payload=payload, token=self._token, timeout=self._timeout
            )
        except TRANSPORT_ERRORS as exc:
            raise AuditPersistError(f"Audit service unreachable: {exc}") from exc

        if not response.ok:
            raise AuditPersistError(f"Audit service returned HTTP {response.status}")
        try:
            body = response.json()
        except ValueError as exc:
            raise AuditPersistError("Audit response is not valid JSON") from exc
        return read_sink_response(body)

    async def persist(self, record: AuditRecord) -> PersistResult:
        """Save the record once. Failures are returned, never raised."""

        try:
            return await self._persist_strict(record)
        except AuditPersistError as exc:
            LOGGER.error("Error saving audit record %s: %s", record.id, exc)
            return PersistResult.failed(str(exc))
