"""
Field Rendering Helpers

Helpers that interpret a FieldSchema for form rendering: which control to show,
which HTML input type to use, and how to decode the serialized dropdown options.

Dropdown options are stored as a free-form text blob in one of three encodings,
tried in order until one succeeds:

1. JSON array of strings: ``["Red", "Green"]``
2. JSON array of objects: ``[{"value": "r", "text": "Red"}]`` (keys may be capitalized)
3. Plain text: one option per line, or the whole blob as a single option
"""

from typing import Callable, List, Optional, Sequence, Tuple

import structlog
from pydantic import TypeAdapter, ValidationError

from .models import (
    BIG_INTEGER_TYPES,
    CHARACTER_TYPES,
    DATETIME_TYPES,
    DECIMAL_TYPES,
    FLOAT_TYPES,
    INTEGER_TYPES,
    ControlType,
    DataType,
    DropdownOption,
    FieldSchema,
)


logger = structlog.get_logger(__name__)

LONG_TEXT_THRESHOLD = 255

OptionPair = Tuple[str, str]

_STRING_LIST_ADAPTER = TypeAdapter(Optional[List[str]])
_OPTION_LIST_ADAPTER = TypeAdapter(Optional[List[DropdownOption]])


# ============================================================================
# DROPDOWN OPTIONS
# ============================================================================

def _decode_string_list(blob: str) -> Optional[List[OptionPair]]:
    values = _STRING_LIST_ADAPTER.validate_json(blob)
    if values is None:
        return []
    return [(value, value) for value in values]


def _decode_option_objects(blob: str) -> Optional[List[OptionPair]]:
    options = _OPTION_LIST_ADAPTER.validate_json(blob)
    if options is None:
        return []
    return [option.as_tuple() for option in options]


def _decode_plain_text(blob: str) -> Optional[List[OptionPair]]:
    if '\n' in blob or '\r' in blob:
        lines = blob.replace('\r', '\n').split('\n')
        return [(line.strip(), line.strip()) for line in lines if line]
    return [(blob, blob)]


_DROPDOWN_DECODERS: Sequence[Callable[[str], Optional[List[OptionPair]]]] = (
    _decode_string_list,
    _decode_option_objects,
    _decode_plain_text,
)


def decode_dropdown_options(blob: Optional[str]) -> List[OptionPair]:
    """
    Decode a serialized option list into ``(value, text)`` pairs.

    A JSON ``null`` decodes to no options. Never raises.

    Example:
        decode_dropdown_options('["a","b"]')                     # [('a', 'a'), ('b', 'b')]
        decode_dropdown_options('[{"value":"1","text":"One"}]')  # [('1', 'One')]
        decode_dropdown_options('x\\ny\\n')                       # [('x', 'x'), ('y', 'y')]
    """
    if blob is None or not blob.strip():
        return []

    for decoder in _DROPDOWN_DECODERS:
        try:
            options = decoder(blob)
        except ValidationError:
            continue
        if options is not None:
            return options

    return []


# ============================================================================
# CONTROL AND INPUT TYPES
# ============================================================================

_CONTROL_BY_DATA_TYPE = {
    DataType.BIT: ControlType.CHECKBOX,
    DataType.DATE: ControlType.DATE,
    DataType.DATETIME: ControlType.DATETIME_LOCAL,
    DataType.DATETIME2: ControlType.DATETIME_LOCAL,
    DataType.SMALLDATETIME: ControlType.DATETIME_LOCAL,
    DataType.TIME: ControlType.TIME,
    DataType.TEXT: ControlType.TEXTAREA,
    DataType.NTEXT: ControlType.TEXTAREA,
}


def is_long_text(schema: FieldSchema) -> bool:
    """True for character columns declared longer than LONG_TEXT_THRESHOLD."""
    if schema.data_type_kind not in CHARACTER_TYPES:
        return False
    length = schema.declared_length
    return length is not None and length > LONG_TEXT_THRESHOLD


def determine_control_type(schema: FieldSchema) -> ControlType:
    """
    Pick the UI control for a field.

    An explicit control type always wins; otherwise it is inferred from the data
    type, with long character columns rendered as a textarea.
    """
    explicit = ControlType.parse(schema.control_type)
    if explicit is not None:
        return explicit

    inferred = _CONTROL_BY_DATA_TYPE.get(schema.data_type_kind)
    if inferred is not None:
        return inferred
    return ControlType.TEXTAREA if is_long_text(schema) else ControlType.INPUT


_NATIVE_INPUT_TYPES = frozenset({'number', 'date', 'datetime-local', 'time', 'email', 'text'})


def get_input_type(data_type: Optional[str]) -> str:
    """Map a data type token to an HTML ``<input type>`` value."""
    token = (data_type or "text").strip().lower()
    if token in _NATIVE_INPUT_TYPES:
        return token

    kind = DataType.parse(token)
    if kind is DataType.BIT:
        return 'checkbox'
    if kind in INTEGER_TYPES or kind in BIG_INTEGER_TYPES or kind in DECIMAL_TYPES or kind in FLOAT_TYPES:
        return 'number'
    if kind in DATETIME_TYPES:
        return 'datetime-local'
    return 'text'


__all__ = [
    'LONG_TEXT_THRESHOLD',
    'decode_dropdown_options',
    'determine_control_type',
    'get_input_type',
    'is_long_text',
]
