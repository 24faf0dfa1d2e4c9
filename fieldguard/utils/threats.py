"""
Injection Threat Detection

Pattern-based scanners for SQL injection, script injection (XSS) and inputs made up
mostly of special characters. Detection favours false positives: ordinary prose
containing a SQL keyword such as "select" or "update" is reported as a threat.

Patterns are compiled once at import time and shared by every ThreatDetector
instance, so detectors are cheap to build and safe to use from any thread.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Tuple

import structlog

from fieldguard.config.security import SecurityConfiguration


logger = structlog.get_logger(__name__)

MIN_RATIO_INPUT_LENGTH = 10

DANGEROUS_CHARACTERS = frozenset('<>"\'&%$()*+,-./:;=?@[\\]^`{|}~')

SQL_INJECTION_PATTERN = re.compile(
    r'(\b(ALTER|CREATE|DELETE|DROP|EXEC(UTE)?|INSERT( +INTO)?|MERGE|SELECT|UPDATE|UNION( +ALL)?)\b)',
    re.IGNORECASE,
)

_CLOSABLE_TAGS = ('script', 'iframe', 'object', 'embed', 'link', 'meta')
_INLINE_HANDLERS = (
    'onload', 'onerror', 'onclick', 'onmouseover', 'onmouseout',
    'onkeydown', 'onkeyup', 'onfocus', 'onblur', 'onchange', 'onsubmit',
)

SCRIPT_INJECTION_PATTERN = re.compile(
    '|'.join(
        [rf'<{tag}[^>]*(?:>.*?</{tag}>|/>)' for tag in _CLOSABLE_TAGS]
        + [r'javascript:', r'vbscript:', r'data:text/html']
        + [rf'{handler}=' for handler in _INLINE_HANDLERS]
    ),
    re.IGNORECASE,
)


class ThreatType(str, Enum):
    SQL_INJECTION = "sql_injection"
    SCRIPT_INJECTION = "script_injection"


@dataclass(frozen=True)
class ThreatFinding:
    """One pattern match inside scanned input."""

    kind: ThreatType
    match: str
    position: Tuple[int, int]

    def to_dict(self):
        return {'type': self.kind.value, 'match': self.match, 'position': self.position}


_SCANNERS: Tuple[Tuple[ThreatType, Pattern], ...] = (
    (ThreatType.SQL_INJECTION, SQL_INJECTION_PATTERN),
    (ThreatType.SCRIPT_INJECTION, SCRIPT_INJECTION_PATTERN),
)


class ThreatDetector:
    """
    Stateless injection scanner.

    The dangerous character threshold comes from the injected configuration
    unless a call passes its own.
    """

    def __init__(self, config: Optional[SecurityConfiguration] = None):
        self.config = config or SecurityConfiguration()

    @property
    def default_threshold(self) -> float:
        return self.config.input_validation.dangerous_character_threshold

    def contains_sql_injection_pattern(self, input_value: Optional[str]) -> bool:
        """True when any SQL statement keyword appears as a whole word."""
        if not input_value:
            return False
        return SQL_INJECTION_PATTERN.search(input_value) is not None

    def contains_script_injection_pattern(self, input_value: Optional[str]) -> bool:
        """True for script-capable tags, script URL schemes and inline event handlers."""
        if not input_value:
            return False
        return SCRIPT_INJECTION_PATTERN.search(input_value) is not None

    def has_excessive_dangerous_character_ratio(
        self,
        input_value: Optional[str],
        threshold: Optional[float] = None,
    ) -> bool:
        """
        Check whether special characters make up too much of the input.

        Inputs shorter than MIN_RATIO_INPUT_LENGTH are never flagged.

        Args:
            input_value: Text to measure
            threshold: Maximum allowed share of dangerous characters

        Returns:
            True when the share strictly exceeds the threshold
        """
        if not input_value or len(input_value) < MIN_RATIO_INPUT_LENGTH:
            return False

        if threshold is None:
            threshold = self.default_threshold

        dangerous_count = sum(1 for c in input_value if c in DANGEROUS_CHARACTERS)
        return dangerous_count / len(input_value) > threshold

    def scan(self, input_value: Optional[str]) -> List[ThreatFinding]:
        """
        List every SQL and script pattern match in the input, in scan order.

        Used to give rejected input structured log context; validation itself
        only needs the boolean checks.
        """
        findings: List[ThreatFinding] = []
        if not input_value:
            return findings

        for kind, pattern in _SCANNERS:
            for match in pattern.finditer(input_value):
                findings.append(ThreatFinding(kind=kind, match=match.group(), position=match.span()))

        if findings:
            logger.debug(
                "Threat patterns matched",
                threat_count=len(findings),
                threat_types=sorted({f.kind.value for f in findings}),
            )
        return findings


__all__ = [
    'DANGEROUS_CHARACTERS',
    'MIN_RATIO_INPUT_LENGTH',
    'SCRIPT_INJECTION_PATTERN',
    'SQL_INJECTION_PATTERN',
    'ThreatDetector',
    'ThreatFinding',
    'ThreatType',
]
