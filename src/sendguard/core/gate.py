"""Core send-gate pipeline.

This module is integration-agnostic. It only relies on ports for the policy
source, audit sink and notifications, enabling different mail clients or
backends without changes here.

The pipeline for one send attempt:
1) Extract the snapshot while the policy is fetched
2) Evaluate the snapshot against the policy and pattern library
3) Block: notify and cancel
4) Allow: build and persist the audit record, then proceed

Uncertainty about the message itself fails closed; policy and audit outages
fail open.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from sendguard.core.audit import build_audit_record
from sendguard.core.config import GateConfig
from sendguard.core.engine import DecisionEngine
from sendguard.core.errors import FieldExtractionError
from sendguard.core.extraction import extract_snapshot
from sendguard.core.models import Block, PersistResult, SendOutcome
from sendguard.core.notices import (
    AUDIT_FAILURE_TITLE,
    EXTRACTION_FAILURE_TITLE,
    audit_failure_message,
    block_message,
    extraction_failure_message,
)
from sendguard.core.ports import AuditSinkPort, HostMessage, NotifierPort, PolicySourcePort

LOGGER = logging.getLogger(__name__)


async def _discard(task: asyncio.Task) -> None:
    """Cancel ``task`` and wait until it has actually finished."""

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception:
        LOGGER.debug("Discarded policy fetch had failed", exc_info=True)


class SendGate:
    """Orchestrates extraction, policy fetch, evaluation, audit, and notices."""

    def __init__(
        self,
        engine: DecisionEngine,
        policy_source: PolicySourcePort,
        audit_sink: AuditSinkPort,
        notifier: NotifierPort,
        config: GateConfig = GateConfig(),
    ) -> None:
        self._engine = engine
        self._policy_source = policy_source
        self._audit_sink = audit_sink
        self._notifier = notifier
        self._config = config

    async def handle(self, item: HostMessage, timeout: Optional[float] = None) -> SendOutcome:
        """Run one send attempt and return the host's final answer.

        ``timeout`` is the host's deadline in seconds; exceeding it cancels
        the send. Without one, the gate waits for every step to finish.
        """

        if timeout is None:
            return await self._run(item)
        try:
            return await asyncio.wait_for(self._run(item), timeout)
        except asyncio.TimeoutError:
            LOGGER.warning("Send attempt exceeded the %.1fs deadline, cancelling", timeout)
            return SendOutcome(proceed=False, reason="timed out")

    async def _run(self, item: HostMessage) -> SendOutcome:
        try:
            return await self._evaluate_and_record(item)
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Unexpected error during send attempt, cancelling")
            return SendOutcome(proceed=False, reason="internal error")

    async def _evaluate_and_record(self, item: HostMessage) -> SendOutcome:
        # The policy does not depend on the message, so fetch it while the
        # host fields are being read.
        policy_task = asyncio.create_task(self._policy_source.fetch())
        try:
            snapshot = await extract_snapshot(item)
        except FieldExtractionError as exc:
            await _discard(policy_task)
            LOGGER.error("Field extraction failed, cancelling send: %s", exc)
            await self._notify(EXTRACTION_FAILURE_TITLE, extraction_failure_message(exc))
            return SendOutcome(proceed=False, reason=str(exc))
        except BaseException:
            await _discard(policy_task)
            raise

        policy = await policy_task
        LOGGER.info(
            "Policy check: %s allowed, %s blocked domains",
            len(policy.allowed_domains),
            len(policy.blocked_domains),
        )

        verdict = self._engine.evaluate(snapshot, policy)
        if isinstance(verdict, Block):
            LOGGER.warning("Send blocked: %s (%s)", verdict.reason, verdict.detail)
            await self._notify(self._config.notification_title, block_message(verdict))
            return SendOutcome(proceed=False, reason=verdict.reason, verdict=verdict)

        LOGGER.info("All checks passed, saving audit record")
        record = build_audit_record(snapshot)
        result = await self._audit_sink.persist(record)
        if result.ok:
            LOGGER.info("Audit record %s saved", record.id)
            return SendOutcome(proceed=True, reason="allowed", verdict=verdict, persist_result=result)

        return await self._audit_failed(result, verdict)

    async def _audit_failed(self, result: PersistResult, verdict) -> SendOutcome:
        proceed = not self._config.block_on_audit_failure
        LOGGER.error(
            "Audit record not saved (%s); send %s",
            result.message,
            "proceeds" if proceed else "cancelled",
        )
        if self._config.notify_on_audit_failure or not proceed:
            await self._notify(AUDIT_FAILURE_TITLE, audit_failure_message(result.message, proceed))
        return SendOutcome(
            proceed=proceed,
            reason="allowed" if proceed else "audit failed",
            verdict=verdict,
            persist_result=result,
        )

    async def _notify(self, title: str, message: str) -> None:
        # A notice that cannot be shown never changes the outcome.
        try:
            await self._notifier.notify(title, message)
        except Exception:
            LOGGER.exception("Failed to display notice '%s'", title)
