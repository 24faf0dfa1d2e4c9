"""
Utility package: text parsing, threat detection, format validation, output
sanitization, CSV formula injection checks and upload policy checks.

Module Organization:
- parsing: fallible number, boolean, date and time parsers
- threats: SQL/script injection and special character ratio scanners
- validators: per-type format checks and custom regex evaluation
- sanitizers: HTML entity encoding by data type
- csv_guard: spreadsheet formula injection detection
- file_utils: upload size, extension and MIME type policy
"""

from .parsing import (
    parse_boolean_token,
    parse_date,
    parse_datetime,
    parse_decimal,
    parse_float,
    parse_int,
    parse_time,
)
from .threats import ThreatDetector, ThreatFinding, ThreatType
from .validators import RegexOutcome, TypeValidator, check_custom_regex
from .sanitizers import Sanitizer, html_encode
from .csv_guard import CsvCellGuard
from .file_utils import FileUploadValidator

__all__ = [
    'CsvCellGuard',
    'FileUploadValidator',
    'RegexOutcome',
    'Sanitizer',
    'ThreatDetector',
    'ThreatFinding',
    'ThreatType',
    'TypeValidator',
    'check_custom_regex',
    'html_encode',
    'parse_boolean_token',
    'parse_date',
    'parse_datetime',
    'parse_decimal',
    'parse_float',
    'parse_int',
    'parse_time',
]
