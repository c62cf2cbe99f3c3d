"""Recipient address helpers (core domain)."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple, Union

# General email shape: local part, "@", dotted domain, 2-3 letter TLD.
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,3}")


def split_addresses(raw: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """Parse a recipient field into trimmed, non-empty addresses.

    Hosts hand recipients over either as one comma-separated string or as a
    sequence of addresses (whose items may themselves contain commas).
    """

    if raw is None:
        return ()
    chunks = [raw] if isinstance(raw, str) else list(raw)
    addresses = []
    for chunk in chunks:
        for entry in str(chunk).split(","):
            entry = entry.strip()
            if entry:
                addresses.append(entry)
    return tuple(addresses)


def domain_of(address: str) -> Optional[str]:
    """Return the part after "@", or None when there is no "@"."""

    parts = address.split("@")
    if len(parts) < 2:
        return None
    return parts[1]


def is_valid_address(address: str) -> bool:
    return EMAIL_PATTERN.fullmatch(address) is not None
