from __future__ import annotations

from sendguard.core.config import EngineConfig
from sendguard.core.engine import DecisionEngine
from sendguard.core.models import Allow, AttachmentRef, Block, MessageSnapshot, PolicyDirectory
from sendguard.core.patterns import build_library

LIBRARY = build_library()


def _snapshot(
    *,
    to: tuple[str, ...] = ("a@good.com",),
    cc: tuple[str, ...] = (),
    bcc: tuple[str, ...] = (),
    body: str = "see attached",
    attachments: tuple[AttachmentRef, ...] = (),
) -> MessageSnapshot:
    return MessageSnapshot(
        sender="me@corp.com",
        to_recipients=to,
        cc_recipients=cc,
        bcc_recipients=bcc,
        subject="Weekly update",
        body_text=body,
        attachments=attachments,
    )


def _policy(allowed: tuple[str, ...] = (), blocked: tuple[str, ...] = ()) -> PolicyDirectory:
    return PolicyDirectory(allowed_domains=frozenset(allowed), blocked_domains=frozenset(blocked))


def test_allows_clean_message() -> None:
    engine = DecisionEngine(LIBRARY)
    verdict = engine.evaluate(
        _snapshot(attachments=(AttachmentRef("notes.txt", "text/plain", 12),)),
        _policy(blocked=("bad.com",)),
    )
    assert verdict == Allow()


def test_blocked_domain_in_any_recipient_field() -> None:
    engine = DecisionEngine(LIBRARY)
    policy = _policy(blocked=("bad.com",))
    for snapshot in (
        _snapshot(to=("x@bad.com",)),
        _snapshot(cc=("x@bad.com",)),
        _snapshot(to=("a@good.com",), bcc=("y@bad.com",)),
    ):
        verdict = engine.evaluate(snapshot, policy)
        assert isinstance(verdict, Block)
        assert verdict.reason == "blocked domain"


def test_empty_blocked_list_never_blocks_on_domain() -> None:
    engine = DecisionEngine(LIBRARY)
    verdict = engine.evaluate(_snapshot(to=("x@bad.com",)), _policy(allowed=("good.com",)))
    assert verdict == Allow()


def test_domain_rule_precedes_content_and_attachment_rules() -> None:
    engine = DecisionEngine(LIBRARY)
    verdict = engine.evaluate(
        _snapshot(
            to=("x@bad.com",),
            body="this is prohibited",
            attachments=(AttachmentRef("payload.exe", "application/octet-stream", 1),),
        ),
        _policy(blocked=("bad.com",)),
    )
    assert verdict == Block("blocked domain", detail="x@bad.com")


def test_domain_membership_is_case_sensitive() -> None:
    engine = DecisionEngine(LIBRARY)
    verdict = engine.evaluate(_snapshot(to=("x@BAD.com",)), _policy(blocked=("bad.com",)))
    assert verdict == Allow()


def test_missing_recipients_blocks_even_without_policy() -> None:
    engine = DecisionEngine(LIBRARY)
    verdict = engine.evaluate(_snapshot(to=()), PolicyDirectory.empty())
    assert verdict == Block("missing recipients")


def test_invalid_address_blocks() -> None:
    engine = DecisionEngine(LIBRARY)
    for bad in ("user@example", "user@ex.c", "user@example.corp"):
        verdict = engine.evaluate(_snapshot(cc=(bad,)), PolicyDirectory.empty())
        assert verdict == Block("invalid address", detail=bad)


def test_content_rules_apply_without_policy() -> None:
    engine = DecisionEngine(LIBRARY)
    verdict = engine.evaluate(_snapshot(body="Strictly Confidential"), PolicyDirectory.empty())
    assert isinstance(verdict, Block)
    assert verdict.reason == "restricted content: sensitive_keyword"


def test_first_restricted_attachment_is_reported() -> None:
    engine = DecisionEngine(LIBRARY)
    verdict = engine.evaluate(
        _snapshot(
            attachments=(
                AttachmentRef("report.pdf", "application/pdf", 100),
                AttachmentRef("payload.exe", "application/octet-stream", 200),
                AttachmentRef("run.bat", "application/octet-stream", 300),
            )
        ),
        PolicyDirectory.empty(),
    )
    assert isinstance(verdict, Block)
    assert verdict.reason.startswith("restricted attachment")
    assert verdict.reason == "restricted attachment: payload.exe"


def test_allowlist_is_not_enforced_by_default() -> None:
    engine = DecisionEngine(LIBRARY)
    verdict = engine.evaluate(_snapshot(to=("x@other.com",)), _policy(allowed=("good.com",)))
    assert verdict == Allow()


def test_allowlist_enforcement_opt_in() -> None:
    engine = DecisionEngine(LIBRARY, EngineConfig(enforce_allowlist=True))
    policy = _policy(allowed=("good.com",), blocked=("bad.com",))

    assert engine.evaluate(_snapshot(to=("a@good.com",)), policy) == Allow()
    assert engine.evaluate(_snapshot(to=("a@good.com",), cc=("x@other.com",)), policy) == Block(
        "domain not allowed", detail="x@other.com"
    )
    # The blocked list still wins when both would fire.
    verdict = engine.evaluate(_snapshot(to=("x@bad.com",)), policy)
    assert isinstance(verdict, Block) and verdict.reason == "blocked domain"
