"""Ports (interfaces) used by the send gate.

Ports define the minimal contracts for the policy source, audit sink, host
message and notification adapters so that the core can be reused with
different mail clients and backends.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, Union

from sendguard.core.models import AuditRecord, PersistResult, PolicyDirectory

RecipientField = Union[str, Sequence[str]]


class PolicySourcePort(Protocol):
    """Retrieves the current domain policy. Must not raise."""

    async def fetch(self) -> PolicyDirectory:
        ...


class AuditSinkPort(Protocol):
    """Persists audit records. Must not raise."""

    async def persist(self, record: AuditRecord) -> PersistResult:
        ...


class NotifierPort(Protocol):
    """Displays a short error-type notice to the user."""

    async def notify(self, title: str, message: str) -> None:
        ...


class HostMessage(Protocol):
    """Field access to the pending message, as exposed by the mail client.

    Each getter may raise to signal that the host failed to provide the field.
    Attachments are returned as mappings or objects carrying ``name``,
    ``type`` (or ``contentType``) and ``size``.
    """

    async def get_sender(self) -> str:
        ...

    async def get_to(self) -> RecipientField:
        ...

    async def get_cc(self) -> RecipientField:
        ...

    async def get_bcc(self) -> RecipientField:
        ...

    async def get_subject(self) -> str:
        ...

    async def get_body(self) -> str:
        ...

    async def get_attachments(self) -> Sequence[Any]:
        ...
