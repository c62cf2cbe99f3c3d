"""User-facing notice text for blocked sends and failures."""

from __future__ import annotations

from sendguard.core.engine import (
    BLOCKED_DOMAIN,
    DOMAIN_NOT_ALLOWED,
    INVALID_ADDRESS,
    MISSING_RECIPIENTS,
    RESTRICTED_ATTACHMENT,
    RESTRICTED_CONTENT,
)
from sendguard.core.errors import FieldExtractionError
from sendguard.core.models import Block

AUDIT_FAILURE_TITLE = "Audit copy not saved"
EXTRACTION_FAILURE_TITLE = "Message could not be checked"


def block_message(verdict: Block) -> str:
    reason = verdict.reason
    if reason == BLOCKED_DOMAIN:
        return "A blocked domain policy was detected and the email was not sent."
    if reason == DOMAIN_NOT_ALLOWED:
        return "One or more recipients are outside the allowed domains. The email was not sent."
    if reason == MISSING_RECIPIENTS:
        return "The email has no recipients."
    if reason == INVALID_ADDRESS:
        return "One or more email addresses are invalid."
    if reason.startswith(RESTRICTED_CONTENT):
        return f"The email contains prohibited content in the body ({verdict.detail})."
    if reason.startswith(RESTRICTED_ATTACHMENT):
        return f'The attachment "{verdict.detail}" has a restricted file type.'
    return f"The email was not sent: {reason}."


def extraction_failure_message(error: FieldExtractionError) -> str:
    return f"The {error.field} of the message could not be read, so the email was not sent."


def audit_failure_message(detail: str, proceeding: bool) -> str:
    outcome = "The email will still be sent." if proceeding else "The email was not sent."
    return f"The audit copy of this email could not be saved ({detail}). {outcome}"
