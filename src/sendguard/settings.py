"""Configuration loading for sendguard.

User-editable settings (service URLs, engine switches, extra patterns,
logging) live in a single JSON file. Secrets such as API tokens come from the
environment, optionally via a .env file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from typing import Optional

from dotenv import load_dotenv

from sendguard.core.config import EngineConfig, GateConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

# Default config location; SENDGUARD_CONFIG points elsewhere.
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ServiceConfig:
    """Endpoint of one remote service."""

    url: str
    token: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class Settings:
    policy: ServiceConfig
    audit: ServiceConfig
    engine: EngineConfig = EngineConfig()
    gate: GateConfig = GateConfig()
    pattern_rules: list[dict] = field(default_factory=list)
    attachment_regex: Optional[str] = None
    logging: dict = field(default_factory=dict)


def _load_json_config(path: Optional[str]) -> dict:
    """Load config.json; an explicitly named file must exist."""

    explicit = path or os.getenv("SENDGUARD_CONFIG")
    config_path = explicit or CONFIG_PATH
    if not os.path.exists(config_path):
        if explicit:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return {}

    with open(config_path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _service(section: dict, url_env: str, token_env: str) -> ServiceConfig:
    # Environment wins over the file so deployments can repoint services
    # without editing config.json.
    url = os.getenv(url_env) or section.get("url")
    if not url:
        raise RuntimeError(f"{url_env} or a configured url is required")
    return ServiceConfig(
        url=url,
        token=os.getenv(token_env) or None,
        timeout_seconds=float(section.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
    )


def load_settings(path: Optional[str] = None) -> Settings:
    """Build Settings from config.json and the environment."""

    load_dotenv()
    config = _load_json_config(path)

    engine_cfg = config.get("engine", {})
    gate_cfg = config.get("gate", {})
    patterns_cfg = config.get("patterns", {})

    gate_defaults = GateConfig()
    return Settings(
        policy=_service(config.get("policy", {}), "POLICY_URL", "POLICY_API_TOKEN"),
        audit=_service(config.get("audit", {}), "AUDIT_URL", "AUDIT_API_TOKEN"),
        engine=EngineConfig(enforce_allowlist=bool(engine_cfg.get("enforce_allowlist", False))),
        gate=GateConfig(
            block_on_audit_failure=bool(gate_cfg.get("block_on_audit_failure", False)),
            notify_on_audit_failure=bool(gate_cfg.get("notify_on_audit_failure", True)),
            notification_title=gate_cfg.get("notification_title", gate_defaults.notification_title),
        ),
        pattern_rules=list(patterns_cfg.get("rules", [])),
        attachment_regex=patterns_cfg.get("attachment_regex"),
        logging=config.get("logging", {}),
    )
