"""Audit record construction and wire serialization (core domain)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable
import uuid

from sendguard.core.models import AuditAttachment, AuditRecord, MessageSnapshot


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_audit_record(
    snapshot: MessageSnapshot,
    clock: Callable[[], datetime] = _utc_now,
    id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
) -> AuditRecord:
    """Copy an allowed message's metadata into a fresh audit record.

    Attachments share the record's creation time as their upload timestamp;
    the hosting client does not expose a per-attachment upload time.
    """

    created_at = clock()
    attachments = tuple(
        AuditAttachment(
            id=id_factory(),
            file_name=attachment.name,
            file_type=attachment.mime_or_type_hint,
            size_bytes=attachment.size_bytes,
            upload_timestamp=created_at,
        )
        for attachment in snapshot.attachments
    )
    return AuditRecord(
        id=id_factory(),
        from_address=snapshot.sender,
        to_list=snapshot.to_recipients,
        cc_list=snapshot.cc_recipients,
        bcc_list=snapshot.bcc_recipients,
        subject=snapshot.subject,
        body=snapshot.body_text,
        attachments=attachments,
        created_at=created_at,
    )


def audit_record_to_payload(record: AuditRecord) -> dict[str, Any]:
    """Serialize a record using the audit sink's field names."""

    return {
        "Id": str(record.id),
        "FromEmailID": record.from_address,
        "Attachments": [
            {
                "Id": str(attachment.id),
                "FileName": attachment.file_name,
                "FileType": attachment.file_type,
                "FileSize": attachment.size_bytes,
                "UploadTime": attachment.upload_timestamp.isoformat(),
            }
            for attachment in record.attachments
        ],
        "EmailBcc": list(record.bcc_list),
        "EmailCc": list(record.cc_list),
        "EmailBody": record.body,
        "EmailSubject": record.subject,
        "EmailTo": list(record.to_list),
        "Timestamp": record.created_at.isoformat(),
    }
