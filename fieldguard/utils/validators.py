"""
Field Format Validators

Per-type format checks used by the validation engine once an input has passed the
required, threat and length checks. Each check answers a single question about the
raw text and never raises.

Validation Types:
- Email: regex pre-filter plus a strict email-validator parse (no DNS lookups)
- URL: absolute http/https URL with a host, matched against URL_REGEX
- Phone: optional leading plus, up to 16 digits, separators ignored
- Numbers: 32/64-bit integers, fixed-point and floating point numbers
- Temporal: dates, date-times and times of day via python-dateutil
- Custom regex: schema-supplied pattern with search semantics

The custom regex check reports an explicit RegexOutcome so that a malformed
pattern can degrade to a warning instead of an error.
"""

import re
from enum import Enum
from typing import Callable, FrozenSet, Optional, Tuple
from urllib.parse import urlsplit

import structlog
from email_validator import EmailNotValidError, validate_email

from fieldguard.business.models import (
    BIG_INTEGER_TYPES,
    DATE_TYPES,
    DATETIME_TYPES,
    INTEGER_TYPES,
    NUMBER_TYPES,
    PHONE_TYPES,
    TIME_TYPES,
    DataType,
    FieldSchema,
)
from fieldguard.utils.parsing import (
    parse_date,
    parse_datetime,
    parse_float,
    parse_int,
    parse_time,
)


logger = structlog.get_logger(__name__)

EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

URL_REGEX = re.compile(
    r'^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b'
    r'([-a-zA-Z0-9()@:%_+.~#?&/=]*)$'
)

PHONE_REGEX = re.compile(r'^\+?[1-9]\d{0,15}$')
PHONE_SEPARATORS_REGEX = re.compile(r'[\s\-()]')

ALLOWED_URL_SCHEMES = ('http', 'https')


def is_valid_email(value: str) -> bool:
    """
    Validate an email address without deliverability checks.

    The address must match EMAIL_REGEX and survive email-validator's syntax
    checks unchanged apart from letter case.
    """
    if not EMAIL_REGEX.match(value):
        return False

    try:
        validated = validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        logger.debug("Email rejected by email-validator", error=str(e))
        return False

    return validated.normalized.lower() == value.lower()


def is_valid_url(value: str) -> bool:
    """Validate an absolute http or https URL."""
    try:
        parts = urlsplit(value)
    except ValueError:
        return False

    if parts.scheme.lower() not in ALLOWED_URL_SCHEMES or not parts.netloc:
        return False
    return URL_REGEX.match(value) is not None


def is_valid_phone(value: str) -> bool:
    """Validate a phone number, ignoring whitespace, hyphens and parentheses."""
    cleaned = PHONE_SEPARATORS_REGEX.sub('', value)
    return PHONE_REGEX.match(cleaned) is not None


def is_valid_integer(value: str, bits: int = 32) -> bool:
    return parse_int(value, bits=bits) is not None


def is_valid_number(value: str) -> bool:
    return parse_float(value) is not None


def is_valid_date(value: str) -> bool:
    return parse_date(value) is not None


def is_valid_datetime(value: str) -> bool:
    return parse_datetime(value) is not None


def is_valid_time(value: str) -> bool:
    return parse_time(value) is not None


# ============================================================================
# TYPE FORMAT DISPATCH
# ============================================================================

_TYPE_CHECKS: Tuple[Tuple[FrozenSet[DataType], Callable[[str], bool], str], ...] = (
    (frozenset({DataType.EMAIL}), is_valid_email, "must be a valid email address."),
    (frozenset({DataType.URL}), is_valid_url, "must be a valid URL."),
    (PHONE_TYPES, is_valid_phone, "must be a valid phone number."),
    (INTEGER_TYPES, is_valid_integer, "must be a valid integer."),
    (BIG_INTEGER_TYPES, lambda v: is_valid_integer(v, bits=64), "must be a valid integer."),
    (NUMBER_TYPES, is_valid_number, "must be a valid number."),
    (DATE_TYPES, is_valid_date, "must be a valid date."),
    (DATETIME_TYPES, is_valid_datetime, "must be a valid date and time."),
    (TIME_TYPES, is_valid_time, "must be a valid time."),
)


class TypeValidator:
    """Format check for a field's declared data type."""

    def validate(self, value: str, schema: FieldSchema) -> Optional[str]:
        """
        Check the value against the schema's data type.

        Returns:
            The error message, or None when the value is acceptable or the data
            type has no format rule
        """
        kind = schema.data_type_kind
        for family, check, message in _TYPE_CHECKS:
            if kind in family:
                if check(value):
                    return None
                return f"{schema.display_name} {message}"
        return None


# ============================================================================
# CUSTOM REGEX
# ============================================================================

class RegexOutcome(str, Enum):
    SKIPPED = "skipped"
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    INVALID_PATTERN = "invalid_pattern"


def check_custom_regex(value: str, pattern: Optional[str]) -> RegexOutcome:
    """
    Apply a schema-supplied regex with search semantics.

    A blank pattern is skipped. A pattern that fails to compile yields
    INVALID_PATTERN rather than an exception.
    """
    if pattern is None or not pattern.strip():
        return RegexOutcome.SKIPPED

    try:
        compiled = re.compile(pattern)
    except re.error as e:
        logger.debug("Custom regex failed to compile", pattern=pattern, error=str(e))
        return RegexOutcome.INVALID_PATTERN

    if compiled.search(value):
        return RegexOutcome.MATCHED
    return RegexOutcome.MISMATCHED


__all__ = [
    'EMAIL_REGEX',
    'PHONE_REGEX',
    'URL_REGEX',
    'RegexOutcome',
    'TypeValidator',
    'check_custom_regex',
    'is_valid_date',
    'is_valid_datetime',
    'is_valid_email',
    'is_valid_integer',
    'is_valid_number',
    'is_valid_phone',
    'is_valid_time',
    'is_valid_url',
]
