"""
Fallible Text Parsers

Shared parsing primitives for the type validator and the type coercer. Every
parser takes untrusted text and returns the parsed value, or None when the text
does not represent a value of that type. None of them raise.

Accepted number formats:
- Integers: optional sign and ASCII digits, range-checked to 32 or 64 bits
- Decimals: optional sign, digits with optional thousands separators, optional
  fractional part; no exponent
- Floats: decimal format plus an optional exponent; non-finite results rejected

Date and time parsing uses python-dateutil for flexible formats. Purely numeric
text is never treated as a date, since dateutil would otherwise read "15" as the
15th of the current month.
"""

import math
import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Optional

import structlog
from dateutil import parser as date_parser


logger = structlog.get_logger(__name__)

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

INTEGER_REGEX = re.compile(r'^[+-]?\d+$')
DECIMAL_REGEX = re.compile(r'^[+-]?(?=[\d.,]*\d)(?:\d[\d,]*)?(?:\.\d*)?$')
FLOAT_REGEX = re.compile(r'^[+-]?(?=[\d.,]*\d)(?:\d[\d,]*)?(?:\.\d*)?(?:[eE][+-]?\d+)?$')
DIGITS_ONLY_REGEX = re.compile(r'^\d+$')
# INT64_MIN and INT64_MAX have 19 digits
MAX_INTEGER_DIGITS = 19

_BOOLEAN_TOKENS = {'true': True, 'false': False}


def parse_int(text: Optional[str], bits: int = 32) -> Optional[int]:
    """
    Parse a signed integer of the given width.

    Example:
        parse_int("42")            # 42
        parse_int("3000000000")    # None, outside 32-bit range
        parse_int("3000000000", bits=64)  # 3000000000
    """
    if text is None:
        return None

    cleaned = text.strip()
    if not INTEGER_REGEX.match(cleaned):
        return None
    digits = cleaned.lstrip('+-').lstrip('0') or '0'
    if len(digits) > MAX_INTEGER_DIGITS:
        return None

    value = -int(digits) if cleaned.startswith('-') else int(digits)
    if bits == 64:
        low, high = INT64_MIN, INT64_MAX
    else:
        low, high = INT32_MIN, INT32_MAX

    if not low <= value <= high:
        return None
    return value


def parse_decimal(text: Optional[str]) -> Optional[Decimal]:
    """Parse a fixed-point number such as ``"1,234.50"``."""
    if text is None:
        return None

    cleaned = text.strip()
    if not DECIMAL_REGEX.match(cleaned):
        return None

    try:
        return Decimal(cleaned.replace(',', ''))
    except InvalidOperation:
        return None


def parse_float(text: Optional[str]) -> Optional[float]:
    """Parse a finite floating point number, exponent allowed."""
    if text is None:
        return None

    cleaned = text.strip()
    if not FLOAT_REGEX.match(cleaned):
        return None

    try:
        value = float(cleaned.replace(',', ''))
    except (ValueError, OverflowError):
        return None

    if not math.isfinite(value):
        return None
    return value


def parse_boolean_token(text: Optional[str]) -> Optional[bool]:
    """Parse the canonical tokens ``true``/``false`` (case-insensitive)."""
    if text is None:
        return None
    return _BOOLEAN_TOKENS.get(text.strip().lower())


def parse_datetime(text: Optional[str]) -> Optional[datetime]:
    """
    Parse a date and time in any format python-dateutil understands.

    Missing components default to the current date and midnight, matching
    dateutil's behaviour.
    """
    if text is None:
        return None

    cleaned = text.strip()
    if not cleaned or DIGITS_ONLY_REGEX.match(cleaned):
        return None

    try:
        return date_parser.parse(cleaned)
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug("Date parsing failed", input=cleaned, error=str(e))
        return None


def parse_date(text: Optional[str]) -> Optional[date]:
    """Parse a date, discarding any time component."""
    parsed = parse_datetime(text)
    return parsed.date() if parsed is not None else None


def parse_time(text: Optional[str]) -> Optional[time]:
    """
    Parse a time of day.

    ISO formats (``HH:MM``, ``HH:MM:SS``, ``HH:MM:SS.ffffff``) are tried first;
    otherwise the text is parsed as a full date-time and its time of day is used.
    """
    if text is None:
        return None

    cleaned = text.strip()
    if not cleaned:
        return None

    try:
        return time.fromisoformat(cleaned)
    except ValueError:
        pass

    parsed = parse_datetime(cleaned)
    if parsed is None:
        return None
    return parsed.timetz() if parsed.tzinfo is not None else parsed.time()


__all__ = [
    'INT32_MAX',
    'INT32_MIN',
    'INT64_MAX',
    'INT64_MIN',
    'MAX_INTEGER_DIGITS',
    'parse_boolean_token',
    'parse_date',
    'parse_datetime',
    'parse_decimal',
    'parse_float',
    'parse_int',
    'parse_time',
]
