"""Application wiring for sendguard.

Hosts call ``build_gate`` once at startup and then ``SendGate.handle`` for
every send attempt.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from sendguard.adapters.console_notifier import ConsoleNotifier
from sendguard.adapters.http_audit_sink import HttpAuditSink
from sendguard.adapters.http_policy_source import HttpPolicySource
from sendguard.core.engine import DecisionEngine
from sendguard.core.gate import SendGate
from sendguard.core.models import SendOutcome
from sendguard.core.patterns import build_library
from sendguard.core.ports import HostMessage, NotifierPort
from sendguard.settings import PROJECT_ROOT, Settings, load_settings


# Environment variables whose values must never reach a log line.
SECRET_ENV_VARS = ("POLICY_API_TOKEN", "AUDIT_API_TOKEN")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DEFAULT_LOG_PATH = os.path.join("logs", "sendguard.log")


class _TokenMaskingFormatter(logging.Formatter):
    """Replaces API token values with a fixed mask after formatting.

    Masking runs on the final text, so tokens inside exception text and
    tracebacks are covered too.
    """

    MASK = "[masked]"

    def __init__(self, tokens: list[str]) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")
        # Longest first, so a token that contains another is masked whole.
        self._tokens = sorted({token for token in tokens if token}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        for token in self._tokens:
            text = text.replace(token, self.MASK)
        return text


def _token_values(masking_cfg: dict) -> list[str]:
    if not masking_cfg.get("enabled", True):
        return []
    names = masking_cfg.get("env_vars", SECRET_ENV_VARS)
    return [os.environ[name] for name in names if os.environ.get(name)]


def _rotating_file_handler(file_cfg: dict) -> RotatingFileHandler:
    path = file_cfg.get("path", DEFAULT_LOG_PATH)
    if not os.path.isabs(path):
        path = os.path.join(PROJECT_ROOT, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 2 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 3)),
        encoding="utf-8",
    )


def configure_logging(config: Optional[dict]) -> list[logging.Handler]:
    """Route sendguard's logs according to the ``logging`` config section.

    Send decisions go to stderr by default; ``file.enabled`` adds a rotating
    log under the project root. Token values are masked in both. Nothing is
    installed when the section is missing or disabled, leaving the host's own
    logging untouched.
    """

    config = config or {}
    if not config.get("enabled", False):
        return []

    level = logging.getLevelName(str(config.get("level", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_rotating_file_handler(file_cfg))
    if not handlers:
        return []

    formatter = _TokenMaskingFormatter(_token_values(config.get("masking", {})))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers)
    return handlers


def build_gate(settings: Settings, notifier: Optional[NotifierPort] = None) -> SendGate:
    """Wire adapters and the decision engine from settings.

    The pattern library is compiled here, once, and shared by every send
    attempt handled by the returned gate.
    """

    patterns = build_library(settings.pattern_rules, settings.attachment_regex)
    logging.getLogger(__name__).info("%s content patterns are loaded", len(patterns))

    return SendGate(
        engine=DecisionEngine(patterns, settings.engine),
        policy_source=HttpPolicySource(
            settings.policy.url,
            token=settings.policy.token,
            timeout=settings.policy.timeout_seconds,
        ),
        audit_sink=HttpAuditSink(
            settings.audit.url,
            token=settings.audit.token,
            timeout=settings.audit.timeout_seconds,
        ),
        notifier=notifier or ConsoleNotifier(),
        config=settings.gate,
    )


async def check_message(
    item: HostMessage,
    settings: Optional[Settings] = None,
    notifier: Optional[NotifierPort] = None,
    timeout: Optional[float] = None,
) -> SendOutcome:
    """One-shot helper: load settings, build a gate and handle ``item``."""

    settings = settings or load_settings()
    gate = build_gate(settings, notifier)
    return await gate.handle(item, timeout=timeout)
