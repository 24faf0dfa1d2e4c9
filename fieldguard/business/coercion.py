"""
String to Typed Value Coercion

Converts submitted form text into the Python value matching a field's storage
type. Conversion never raises: coerce() reports failure explicitly through
CoercionResult.ok, and convert_string_to_typed() falls back to the trimmed text
for callers that only want a value.

Precedence:
    1. checkbox control or bit column -> bool (unparsable text is False)
    2. integer, bigint, decimal and float columns -> int / int / Decimal / float
    3. date, datetime-local and time controls or columns -> date / datetime / time
    4. anything else -> trimmed string
"""

from typing import Any, Callable, List, Optional, Tuple

import structlog

from fieldguard.utils.parsing import (
    parse_boolean_token,
    parse_date,
    parse_datetime,
    parse_decimal,
    parse_float,
    parse_int,
    parse_time,
)

from .models import (
    BIG_INTEGER_TYPES,
    DATE_TYPES,
    DATETIME_TYPES,
    DECIMAL_TYPES,
    FLOAT_TYPES,
    INTEGER_TYPES,
    TIME_TYPES,
    CoercionResult,
    ControlType,
    DataType,
)


logger = structlog.get_logger(__name__)


def to_boolean(text: str) -> bool:
    """Checkbox semantics: true/false tokens, then 1/0, anything else is False."""
    token = parse_boolean_token(text)
    if token is not None:
        return token
    return text == "1"


class TypeCoercer:
    """
    Typed conversion for a (data type, control type) pair.

    Example:
        coercer = TypeCoercer()
        coercer.coerce("int", "input", "42")        # CoercionResult(value=42, raw='42', ok=True)
        coercer.coerce("int", "input", "abc").ok    # False
        coercer.convert_string_to_typed("bit", None, "1")  # True
    """

    def __init__(self):
        # Ordered (matcher, parser) pairs; the first matching rule decides.
        self._rules: List[Tuple[Callable[[DataType, Optional[ControlType]], bool], Callable[[str], Any]]] = [
            (lambda dt, ct: dt in INTEGER_TYPES, parse_int),
            (lambda dt, ct: dt in BIG_INTEGER_TYPES, lambda s: parse_int(s, bits=64)),
            (lambda dt, ct: dt in DECIMAL_TYPES, parse_decimal),
            (lambda dt, ct: dt in FLOAT_TYPES, parse_float),
            (lambda dt, ct: ct is ControlType.DATE or dt in DATE_TYPES, parse_date),
            (lambda dt, ct: ct is ControlType.DATETIME_LOCAL or dt in DATETIME_TYPES, parse_datetime),
            (lambda dt, ct: ct is ControlType.TIME or dt in TIME_TYPES, parse_time),
        ]

    def coerce(
        self,
        data_type: Optional[str],
        control_type: Optional[str],
        raw: Optional[str],
    ) -> CoercionResult:
        text = (raw or "").strip()
        if not text:
            return CoercionResult.converted("", text)

        kind = DataType.parse(data_type)
        control = ControlType.parse(control_type)

        if control is ControlType.CHECKBOX or kind is DataType.BIT:
            return CoercionResult.converted(to_boolean(text), text)

        for matches, parse in self._rules:
            if matches(kind, control):
                value = parse(text)
                if value is None:
                    logger.debug(
                        "Value could not be coerced",
                        data_type=data_type,
                        control_type=control_type,
                    )
                    return CoercionResult.unparsable(text)
                return CoercionResult.converted(value, text)

        return CoercionResult.converted(text, text)

    def convert_string_to_typed(
        self,
        data_type: Optional[str],
        control_type: Optional[str],
        raw: Optional[str],
    ) -> Any:
        """Typed value, or the trimmed text when it cannot be converted."""
        return self.coerce(data_type, control_type, raw).value


__all__ = [
    'TypeCoercer',
    'to_boolean',
]
