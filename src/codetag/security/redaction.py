"""Redaction of credentials before they reach logs or the console."""

from __future__ import annotations

import re

REDACTED = "[REDACTED]"
URL_USERINFO_PATTERN = re.compile(r"(?P<scheme>[A-Za-z][\w+.-]*://)(?P<userinfo>[^@/\s]+)@")
SENSITIVE_PATTERNS = [
    re.compile(r"\b(gh[pousr]_[A-Za-z0-9]{20,})\b"),
    re.compile(r"\b(glpat-[A-Za-z0-9_-]{16,})\b"),
]
KEYED_PATTERNS = [
    re.compile(r"(?i)\b(authorization\s*:\s*bearer\s+)[A-Za-z0-9._:-]+"),
    re.compile(r"(?i)\b((?:api[-_ ]?key|token|password)\s*[=:]\s*)[\"']?[^\s\"']{4,}[\"']?"),
]


def redact_text(value: str) -> str:
    """Redact URL credentials and token-looking strings."""
    redacted = URL_USERINFO_PATTERN.sub(
        lambda match: f"{match.group('scheme')}{REDACTED}@", value
    )
    for pattern in SENSITIVE_PATTERNS:
        redacted = pattern.sub(REDACTED, redacted)
    for pattern in KEYED_PATTERNS:
        redacted = pattern.sub(r"\1" + REDACTED, redacted)
    return redacted
