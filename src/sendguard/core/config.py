"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Decision engine switches."""

    # Off by default: the allowed list is fetched but not enforced unless
    # whoever owns the policy opts in.
    enforce_allowlist: bool = False


@dataclass(frozen=True)
class GateConfig:
    """Send orchestration settings."""

    block_on_audit_failure: bool = False
    notify_on_audit_failure: bool = True
    notification_title: str = "Send blocked"
