from __future__ import annotations

import pytest

from sendguard.core.patterns import (
    RESTRICTED_EXTENSION,
    SENSITIVE_KEYWORD,
    build_library,
)


def test_keywords_match_whole_words_case_insensitively() -> None:
    library = build_library()
    assert library.scan("This is CONFIDENTIAL material") == SENSITIVE_KEYWORD
    assert library.scan("unrestricted access for everyone") is None


def test_clean_text_has_no_match() -> None:
    library = build_library()
    assert library.scan("see attached") is None
    assert library.scan("Lunch at noon? Bring the slides.") is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("imei 490154203237518 on the handset", "device_identifier"),
        ("router mac 00:1A:2B:3C:4D:5E", "device_identifier"),
        ("Please ask Mr. Sharma to call back", "personal_name"),
        ("branch code SBIN0001234 for the transfer", "bank_branch_code"),
        ("logged at 2024-03-01T10:15:00+05:30 by the server", "utc_offset_timestamp"),
        ("account no: 123456789012 at the bank", "bank_account_number"),
        ("PAN ABCDE1234F attached", "national_id"),
        ("aadhaar 2345 6789 0123", "national_id"),
        ("call me on 9876543210 tomorrow", "phone_number"),
        ("office +44 20 7946 0958", "phone_number"),
    ],
)
def test_identifier_detectors(text: str, expected: str) -> None:
    assert build_library().scan(text) == expected


def test_identifiers_inside_longer_tokens_do_not_match() -> None:
    library = build_library()
    assert library.scan("order ref X9876543210Y") is None
    assert library.scan("build 4901542032375181234") is None


def test_units_and_product_names_are_not_personal_names() -> None:
    library = build_library()
    assert library.scan("The build finished in 20 ms today") is None
    assert library.scan("open it in MS Word") is None
    assert library.scan("join the call on MS Teams") is None
    assert library.scan("Dr. Mehta Rao will join") == "personal_name"


def test_scan_is_deterministic() -> None:
    library = build_library()
    text = "restricted: call 9876543210"
    assert library.scan(text) == library.scan(text) == SENSITIVE_KEYWORD


def test_attachment_extensions() -> None:
    library = build_library()
    assert library.scan_attachment_name("payload.exe") == RESTRICTED_EXTENSION
    assert library.scan_attachment_name("INSTALL.BAT") == RESTRICTED_EXTENSION
    assert library.scan_attachment_name("deploy.sh") == RESTRICTED_EXTENSION
    assert library.scan_attachment_name("report.pdf") is None
    assert library.scan_attachment_name("exe.notes.txt") is None


def test_config_rules_follow_defaults_in_order() -> None:
    library = build_library(
        [
            {"name": "codename", "regex": r"\bfalcon\b"},
            {"name": "disabled", "regex": r"\bnoon\b", "enabled": False},
        ]
    )
    assert library.names[0] == SENSITIVE_KEYWORD
    assert library.names[-1] == "codename"
    assert "disabled" not in library.names
    assert library.scan("Project FALCON kickoff") == "codename"


def test_custom_attachment_pattern() -> None:
    library = build_library(attachment_pattern=r"\.zip$")
    assert library.scan_attachment_name("archive.zip") == RESTRICTED_EXTENSION
    assert library.scan_attachment_name("payload.exe") is None


def test_invalid_regex_names_the_rule() -> None:
    with pytest.raises(ValueError, match="broken"):
        build_library([{"name": "broken", "regex": "(unclosed"}])


def test_duplicate_rule_names_are_rejected() -> None:
    with pytest.raises(ValueError, match="Duplicate"):
        build_library([{"name": SENSITIVE_KEYWORD, "regex": "x"}])
