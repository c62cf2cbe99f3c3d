from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from sendguard.core.errors import FieldExtractionError
from sendguard.core.extraction import extract_snapshot, to_attachment_ref
from sendguard.core.models import AttachmentRef


class FakeHostMessage:
    """Host message whose getters return canned values or raise."""

    def __init__(self, fail_field: Optional[str] = None, **fields: Any) -> None:
        self._fields = {
            "sender": "me@corp.com",
            "to": "a@good.com, b@good.com",
            "cc": "",
            "bcc": [],
            "subject": "Hello",
            "body": "see attached",
            "attachments": [],
        }
        self._fields.update(fields)
        self._fail_field = fail_field

    async def _get(self, name: str) -> Any:
        await asyncio.sleep(0)
        if name == self._fail_field:
            raise RuntimeError(f"{name} unavailable")
        return self._fields[name]

    async def get_sender(self) -> Any:
        return await self._get("sender")

    async def get_to(self) -> Any:
        return await self._get("to")

    async def get_cc(self) -> Any:
        return await self._get("cc")

    async def get_bcc(self) -> Any:
        return await self._get("bcc")

    async def get_subject(self) -> Any:
        return await self._get("subject")

    async def get_body(self) -> Any:
        return await self._get("body")

    async def get_attachments(self) -> Any:
        return await self._get("attachments")


def test_recipients_are_parsed_and_trimmed() -> None:
    snapshot = asyncio.run(extract_snapshot(FakeHostMessage()))

    assert snapshot.to_recipients == ("a@good.com", "b@good.com")
    assert snapshot.cc_recipients == ()
    assert snapshot.bcc_recipients == ()
    assert snapshot.body_text == "see attached"


def test_attachments_from_mappings() -> None:
    host = FakeHostMessage(
        attachments=[{"name": "notes.txt", "contentType": "text/plain", "size": 10}],
    )
    snapshot = asyncio.run(extract_snapshot(host))

    assert snapshot.attachments == (AttachmentRef("notes.txt", "text/plain", 10),)


def test_failed_field_aborts_extraction() -> None:
    with pytest.raises(FieldExtractionError) as excinfo:
        asyncio.run(extract_snapshot(FakeHostMessage(fail_field="body")))

    assert excinfo.value.field == "body"


def test_malformed_attachment_is_an_extraction_error() -> None:
    host = FakeHostMessage(attachments=[{"name": "x.txt", "size": -1}])
    with pytest.raises(FieldExtractionError) as excinfo:
        asyncio.run(extract_snapshot(host))

    assert excinfo.value.field == "attachments"


def test_attachment_objects_are_supported() -> None:
    class HostAttachment:
        name = "deck.pptx"
        type = "file"
        size = 2048

    assert to_attachment_ref(HostAttachment()) == AttachmentRef("deck.pptx", "file", 2048)
