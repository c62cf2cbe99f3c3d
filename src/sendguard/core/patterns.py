"""Pattern library: named content and attachment detectors (core domain).

The library is built once at startup and injected into the decision engine.
Rules keep their registration order so the first match is deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple

SENSITIVE_KEYWORD = "sensitive_keyword"
RESTRICTED_EXTENSION = "restricted_extension"

# Identifier detectors are wrapped in (?<![\w]) / (?![\w]) style delimiters so
# they never fire inside a longer token.
DEFAULT_BODY_PATTERNS: Tuple[Tuple[str, str], ...] = (
    (SENSITIVE_KEYWORD, r"\b(?:confidential|prohibited|restricted)\b"),
    (
        "device_identifier",
        # 15 digit IMEI or a colon/hyphen separated MAC address
        r"(?<![\w:-])(?:\d{15}|[0-9a-f]{2}(?:[:-][0-9a-f]{2}){5})(?![\w:-])",
    ),
    (
        "personal_name",
        # Case-sensitive: a capitalised title and name, so "20 ms" or "MS Word" stay clean
        r"(?<!\w)(?-i:(?:Mr|Mrs|Ms|Dr|Shri|Smt)\.?\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)(?!\w)",
    ),
    ("bank_branch_code", r"(?<!\w)[a-z]{4}0[a-z0-9]{6}(?!\w)"),
    (
        "utc_offset_timestamp",
        r"(?<![\w-])\d{4}-\d{2}-\d{2}[t ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:z|[+-]\d{2}:?\d{2})(?![\w:])",
    ),
    (
        "bank_account_number",
        r"(?<!\w)(?:a/c|acct|account)(?:\s*(?:no|number|#))?\.?\s*[:#-]?\s*\d{9,18}(?!\d)",
    ),
    (
        "national_id",
        # PAN (ABCDE1234F) or Aadhaar (12 digits, optionally grouped 4-4-4)
        r"(?<!\w)(?:[a-z]{5}\d{4}[a-z]|[2-9]\d{3}[ -]?\d{4}[ -]?\d{4})(?!\w)",
    ),
    (
        "phone_number",
        r"(?<![\w+])(?:\+91[ -]?|0)?[6-9]\d{4}[ -]?\d{5}(?!\d)"
        r"|(?<![\w+])\+\d{1,3}[ -]?\(?\d{2,4}\)?[ -]?\d{3,4}[ -]?\d{3,4}(?!\d)",
    ),
)

DEFAULT_ATTACHMENT_PATTERN = r"\.(?:exe|bat|cmd|com|msi|scr|ps1|vbs|sh)$"


@dataclass(frozen=True)
class PatternRule:
    """A named, compiled detector."""

    name: str
    pattern: re.Pattern

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


class PatternLibrary:
    """Immutable registry of named body rules plus one attachment rule."""

    def __init__(self, rules: Iterable[PatternRule], attachment_rule: PatternRule) -> None:
        ordered: dict[str, PatternRule] = {}
        for rule in rules:
            if rule.name in ordered:
                raise ValueError(f"Duplicate pattern rule name: {rule.name}")
            ordered[rule.name] = rule
        self._rules: Mapping[str, PatternRule] = MappingProxyType(ordered)
        self._attachment_rule = attachment_rule

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    @property
    def attachment_rule(self) -> PatternRule:
        return self._attachment_rule

    def __iter__(self) -> Iterator[PatternRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def scan(self, text: str) -> Optional[str]:
        """Return the name of the first rule matching ``text``, or None."""

        for rule in self._rules.values():
            if rule.matches(text):
                return rule.name
        return None

    def scan_attachment_name(self, name: str) -> Optional[str]:
        if self._attachment_rule.matches(name):
            return self._attachment_rule.name
        return None


def compile_rule(name: str, regex: str) -> PatternRule:
    """Compile one case-insensitive rule, naming it in the error on failure."""

    try:
        return PatternRule(name=name, pattern=re.compile(regex, re.IGNORECASE))
    except re.error as exc:
        raise ValueError(f"Invalid regex for pattern rule '{name}': {exc}") from exc


def build_library(
    extra_rules_config: Iterable[dict] = (),
    attachment_pattern: Optional[str] = None,
) -> PatternLibrary:
    """Compile the default detectors followed by enabled config rules.

    Config rules use the same flat shape as the rest of config.json:
    ``{"name": ..., "regex": ..., "enabled": true}``.
    """

    rules = [compile_rule(name, regex) for name, regex in DEFAULT_BODY_PATTERNS]
    for entry in extra_rules_config:
        if not entry.get("enabled", True):
            continue
        rules.append(compile_rule(entry["name"], entry["regex"]))

    attachment_rule = compile_rule(
        RESTRICTED_EXTENSION,
        attachment_pattern or DEFAULT_ATTACHMENT_PATTERN,
    )
    return PatternLibrary(rules, attachment_rule)
