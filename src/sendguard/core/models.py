"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any mail-client or transport specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional, Tuple, Union
from uuid import UUID


@dataclass(frozen=True)
class AttachmentRef:
    """Attachment metadata. Content bytes are never inspected."""

    name: str
    mime_or_type_hint: str
    size_bytes: int

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"Attachment size must be >= 0, got {self.size_bytes}")


@dataclass(frozen=True)
class MessageSnapshot:
    """Immutable view of the pending message, built once per send attempt.

    Recipient tuples hold parsed, trimmed addresses; an empty field is an
    empty tuple.
    """

    sender: str
    to_recipients: Tuple[str, ...] = ()
    cc_recipients: Tuple[str, ...] = ()
    bcc_recipients: Tuple[str, ...] = ()
    subject: str = ""
    body_text: str = ""
    attachments: Tuple[AttachmentRef, ...] = ()

    def all_recipients(self) -> Iterator[str]:
        yield from self.to_recipients
        yield from self.cc_recipients
        yield from self.bcc_recipients

    def has_recipients(self) -> bool:
        return bool(self.to_recipients or self.cc_recipients or self.bcc_recipients)


@dataclass(frozen=True)
class PolicyDirectory:
    """Allowed/blocked recipient domains fetched for one send attempt."""

    allowed_domains: frozenset[str] = frozenset()
    blocked_domains: frozenset[str] = frozenset()

    @classmethod
    def empty(cls) -> "PolicyDirectory":
        return cls()

    @property
    def is_empty(self) -> bool:
        """True when no policy is deployed (both lists empty)."""

        return not self.allowed_domains and not self.blocked_domains


@dataclass(frozen=True)
class Allow:
    """The message may be sent."""


@dataclass(frozen=True)
class Block:
    """The message must not be sent.

    ``detail`` names the offending address, domain or attachment and is only
    used for logging.
    """

    reason: str
    detail: Optional[str] = None


Verdict = Union[Allow, Block]


@dataclass(frozen=True)
class AuditAttachment:
    id: UUID
    file_name: str
    file_type: str
    size_bytes: int
    upload_timestamp: datetime


@dataclass(frozen=True)
class AuditRecord:
    """Audit copy of an allowed message, handed to the audit sink."""

    id: UUID
    from_address: str
    to_list: Tuple[str, ...]
    cc_list: Tuple[str, ...]
    bcc_list: Tuple[str, ...]
    subject: str
    body: str
    attachments: Tuple[AuditAttachment, ...]
    created_at: datetime


@dataclass(frozen=True)
class PersistResult:
    """Outcome of one audit persistence attempt."""

    ok: bool
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> "PersistResult":
        return cls(ok=True, message=message)

    @classmethod
    def failed(cls, message: str) -> "PersistResult":
        return cls(ok=False, message=message)


SEND_PROCEEDS = "send proceeds"
SEND_CANCELLED = "send cancelled"


@dataclass(frozen=True)
class SendOutcome:
    """Final answer returned to the host for one send attempt."""

    proceed: bool
    reason: str
    verdict: Optional[Verdict] = None
    persist_result: Optional[PersistResult] = None

    @property
    def status(self) -> str:
        return SEND_PROCEEDS if self.proceed else SEND_CANCELLED
