"""Reference pattern scanner.

Detects credentials and personal identifiers in free text and reports each
match as a ``Finding`` whose value is the literal as typed. Matches are
returned in text order; when two rules match overlapping spans the one that
starts first wins, and on equal starts the rule listed first in
``DEFAULT_RULES`` wins.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from privacy_shield.core.findings import Finding

__all__ = [
    "API_KEY_PATTERN",
    "AWS_ACCESS_KEY_PATTERN",
    "CREDIT_CARD_PATTERN",
    "DEFAULT_RULES",
    "EMAIL_PATTERN",
    "GITHUB_TOKEN_PATTERN",
    "JWT_PATTERN",
    "PHONE_PATTERN",
    "PRIVATE_KEY_PATTERN",
    "SLACK_TOKEN_PATTERN",
    "SSN_PATTERN",
    "PatternRule",
    "PatternScanner",
    "luhn_valid",
    "ssn_valid",
]


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def luhn_valid(number: str) -> bool:
    """Luhn checksum over the digits of *number* (13-19 digits)."""
    digits = [int(d) for d in re.sub(r"\D", "", number)]
    if not 13 <= len(digits) <= 19:
        return False
    checksum = 0
    for i, digit in enumerate(reversed(digits)):
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        checksum += digit
    return checksum % 10 == 0


def ssn_valid(ssn: str) -> bool:
    """Reject SSNs with never-issued area, group or serial numbers."""
    digits = re.sub(r"\D", "", ssn)
    if len(digits) != 9:
        return False
    area, group, serial = digits[:3], digits[3:5], digits[5:]
    if area in ("000", "666") or area[0] == "9":
        return False
    return group != "00" and serial != "0000"


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

PRIVATE_KEY_PATTERN: re.Pattern[str] = re.compile(
    r"-----BEGIN (?:RSA |DSA |EC |OPENSSH |ENCRYPTED )?PRIVATE KEY-----"
)
JWT_PATTERN: re.Pattern[str] = re.compile(
    r"\beyJ[A-Za-z0-9_\-]+\.eyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"
)
AWS_ACCESS_KEY_PATTERN: re.Pattern[str] = re.compile(r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b")
GITHUB_TOKEN_PATTERN: re.Pattern[str] = re.compile(r"\bgh[pousr]_[A-Za-z0-9]{36,}\b")
SLACK_TOKEN_PATTERN: re.Pattern[str] = re.compile(r"\bxox[abprs]-[0-9A-Za-z\-]{10,}")
# OpenAI-style secret keys
API_KEY_PATTERN: re.Pattern[str] = re.compile(r"\bsk-[A-Za-z0-9_\-]{20,}")
EMAIL_PATTERN: re.Pattern[str] = re.compile(
    r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}"
)
# 13-19 digits, optionally grouped by single spaces or hyphens
CREDIT_CARD_PATTERN: re.Pattern[str] = re.compile(r"\b\d(?:[ \-]?\d){12,18}\b")
SSN_PATTERN: re.Pattern[str] = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
PHONE_PATTERN: re.Pattern[str] = re.compile(
    r"(?<![\w+])(?:\+?1[\s.\-]?)?(?:\(\d{3}\)|\d{3})[\s.\-]?\d{3}[\s.\-]\d{4}\b"
)


@dataclass(frozen=True, slots=True)
class PatternRule:
    """One detector.

    Attributes
    ----------
    name : str
        Finding type reported for matches.
    pattern : re.Pattern[str]
        Regex locating candidates.
    validator : Callable[[str], bool] | None
        Optional check a candidate must pass (e.g. Luhn).
    """

    name: str
    pattern: re.Pattern[str]
    validator: Callable[[str], bool] | None = None

    def matches(self, text: str) -> list[re.Match[str]]:
        return [
            m for m in self.pattern.finditer(text)
            if self.validator is None or self.validator(m.group(0))
        ]


# Listed by priority: more specific detectors first
DEFAULT_RULES: tuple[PatternRule, ...] = (
    PatternRule("private_key", PRIVATE_KEY_PATTERN),
    PatternRule("jwt", JWT_PATTERN),
    PatternRule("aws_access_key", AWS_ACCESS_KEY_PATTERN),
    PatternRule("github_token", GITHUB_TOKEN_PATTERN),
    PatternRule("slack_token", SLACK_TOKEN_PATTERN),
    PatternRule("api_key", API_KEY_PATTERN),
    PatternRule("email", EMAIL_PATTERN),
    PatternRule("credit_card", CREDIT_CARD_PATTERN, luhn_valid),
    PatternRule("ssn", SSN_PATTERN, ssn_valid),
    PatternRule("phone", PHONE_PATTERN),
)


class PatternScanner:
    """Regex scanner satisfying the ``Scanner`` protocol.

    Parameters
    ----------
    rules:
        Detectors in priority order; defaults to ``DEFAULT_RULES``.
    """

    __slots__ = ("rules",)

    def __init__(self, rules: Sequence[PatternRule] | None = None) -> None:
        self.rules: tuple[PatternRule, ...] = tuple(DEFAULT_RULES if rules is None else rules)

    def scan(self, text: str) -> list[Finding]:
        candidates: list[tuple[int, int, int, str, str]] = []
        for priority, rule in enumerate(self.rules):
            for match in rule.matches(text):
                candidates.append((match.start(), priority, -match.end(), rule.name, match.group(0)))
        candidates.sort()

        findings: list[Finding] = []
        covered_until = -1
        for start, _priority, neg_end, name, value in candidates:
            if start < covered_until:
                continue
            findings.append(Finding(type=name, value=value))
            covered_until = -neg_end
        return findings
