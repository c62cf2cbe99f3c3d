"""Decision engine (core domain).

Evaluation order is significant and stops at the first rule that fires:

1) Blocked recipient domain (only when a blocked list is deployed)
   1a) Recipient domain missing from the allowed list (opt-in)
2) No recipients at all
3) Address syntax
4) Restricted body content
5) Restricted attachment names

Content and attachment rules are independent of domain policy, so they still
apply when no policy is deployed.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from sendguard.core.addresses import domain_of, is_valid_address
from sendguard.core.config import EngineConfig
from sendguard.core.models import Allow, Block, MessageSnapshot, PolicyDirectory, Verdict
from sendguard.core.patterns import PatternLibrary

LOGGER = logging.getLogger(__name__)

BLOCKED_DOMAIN = "blocked domain"
DOMAIN_NOT_ALLOWED = "domain not allowed"
MISSING_RECIPIENTS = "missing recipients"
INVALID_ADDRESS = "invalid address"
RESTRICTED_CONTENT = "restricted content"
RESTRICTED_ATTACHMENT = "restricted attachment"


def _first_blocked(recipients: Iterable[str], blocked_domains: frozenset[str]) -> Optional[str]:
    for address in recipients:
        if domain_of(address) in blocked_domains:
            return address
    return None


def _first_not_allowed(recipients: Iterable[str], allowed_domains: frozenset[str]) -> Optional[str]:
    for address in recipients:
        if domain_of(address) not in allowed_domains:
            return address
    return None


def _first_invalid(recipients: Iterable[str]) -> Optional[str]:
    for address in recipients:
        if not is_valid_address(address):
            return address
    return None


class DecisionEngine:
    """Evaluates a message snapshot against policy and the pattern library."""

    def __init__(self, patterns: PatternLibrary, config: EngineConfig = EngineConfig()) -> None:
        self._patterns = patterns
        self._config = config

    def evaluate(self, snapshot: MessageSnapshot, policy: PolicyDirectory) -> Verdict:
        """Return exactly one verdict for the snapshot."""

        if not policy.is_empty:
            if policy.blocked_domains:
                address = _first_blocked(snapshot.all_recipients(), policy.blocked_domains)
                if address is not None:
                    return Block(BLOCKED_DOMAIN, detail=address)

            if self._config.enforce_allowlist and policy.allowed_domains:
                address = _first_not_allowed(snapshot.all_recipients(), policy.allowed_domains)
                if address is not None:
                    return Block(DOMAIN_NOT_ALLOWED, detail=address)
        else:
            LOGGER.debug("No domain policy deployed, skipping domain checks")

        if not snapshot.has_recipients():
            return Block(MISSING_RECIPIENTS)

        address = _first_invalid(snapshot.all_recipients())
        if address is not None:
            return Block(INVALID_ADDRESS, detail=address)

        rule_name = self._patterns.scan(snapshot.body_text)
        if rule_name is not None:
            return Block(f"{RESTRICTED_CONTENT}: {rule_name}", detail=rule_name)

        for attachment in snapshot.attachments:
            if self._patterns.scan_attachment_name(attachment.name) is not None:
                return Block(f"{RESTRICTED_ATTACHMENT}: {attachment.name}", detail=attachment.name)

        return Allow()
