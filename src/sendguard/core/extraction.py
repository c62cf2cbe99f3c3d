"""Build a MessageSnapshot from the host's pending message.

All field reads are started together; nothing here depends on the order in
which the host completes them. Any failed read aborts the whole extraction.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Sequence

from sendguard.core.addresses import split_addresses
from sendguard.core.errors import FieldExtractionError
from sendguard.core.models import AttachmentRef, MessageSnapshot
from sendguard.core.ports import HostMessage

_FIELDS = ("sender", "to", "cc", "bcc", "subject", "body", "attachments")


def _attr(raw: Any, *names: str) -> Any:
    for name in names:
        if isinstance(raw, Mapping):
            if name in raw:
                return raw[name]
        elif hasattr(raw, name):
            return getattr(raw, name)
    return None


def to_attachment_ref(raw: Any) -> AttachmentRef:
    """Map a host attachment (mapping or object) to an AttachmentRef."""

    if isinstance(raw, AttachmentRef):
        return raw
    name = _attr(raw, "name", "file_name")
    if not name:
        raise ValueError("Attachment without a name")
    type_hint = _attr(raw, "type", "contentType", "content_type", "attachmentType") or ""
    size = _attr(raw, "size", "size_bytes") or 0
    return AttachmentRef(name=str(name), mime_or_type_hint=str(type_hint), size_bytes=int(size))


async def extract_snapshot(item: HostMessage) -> MessageSnapshot:
    """Read every field of ``item`` and normalize it into a snapshot.

    Raises FieldExtractionError naming the first field that failed.
    """

    results = await asyncio.gather(
        item.get_sender(),
        item.get_to(),
        item.get_cc(),
        item.get_bcc(),
        item.get_subject(),
        item.get_body(),
        item.get_attachments(),
        return_exceptions=True,
    )
    for field, result in zip(_FIELDS, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, Exception):
            raise FieldExtractionError(field, result) from result

    sender, to_raw, cc_raw, bcc_raw, subject, body, attachments_raw = results
    try:
        attachments = tuple(to_attachment_ref(raw) for raw in _as_sequence(attachments_raw))
    except (TypeError, ValueError) as exc:
        raise FieldExtractionError("attachments", exc) from exc

    return MessageSnapshot(
        sender=(sender or "").strip(),
        to_recipients=split_addresses(to_raw),
        cc_recipients=split_addresses(cc_raw),
        bcc_recipients=split_addresses(bcc_raw),
        subject=subject or "",
        body_text=body or "",
        attachments=attachments,
    )


def _as_sequence(value: Any) -> Sequence[Any]:
    if value is None:
        return ()
    return list(value)
