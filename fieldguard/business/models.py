"""
Field Schema and Validation Result Models

This module defines the data model shared by every fieldguard component: the
declarative field schema supplied by the form-definition subsystem, the closed
enumerations used to dispatch on storage and control types, and the result
containers returned by validation and type coercion.

Model Categories:
    Enumerations:
        DataType: storage type tokens with an explicit OTHER variant
        ControlType: UI control tokens with an explicit OTHER variant

    Schema Models:
        FieldSchema: immutable descriptor of one form field
        DropdownOption: value/label pair decoded from a field's option blob

    Result Containers:
        ValidationResult: ordered errors and warnings of one validation pass
        CoercionResult: explicit outcome of converting raw text to a typed value
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# ============================================================================
# TYPE ENUMERATIONS
# ============================================================================

_LENGTH_SUFFIX = re.compile(r'^\s*([A-Za-z0-9_-]+)\s*(?:\(\s*(\w+)\s*(?:,\s*\w+\s*)?\))?\s*$')


class DataType(str, Enum):
    """Canonical storage type tokens accepted in FieldSchema.data_type."""

    TINYINT = "tinyint"
    SMALLINT = "smallint"
    INT = "int"
    INTEGER = "integer"
    BIGINT = "bigint"
    DECIMAL = "decimal"
    NUMERIC = "numeric"
    MONEY = "money"
    SMALLMONEY = "smallmoney"
    FLOAT = "float"
    REAL = "real"
    DOUBLE = "double"
    BIT = "bit"
    DATE = "date"
    DATETIME = "datetime"
    DATETIME2 = "datetime2"
    SMALLDATETIME = "smalldatetime"
    TIME = "time"
    TEXT = "text"
    NTEXT = "ntext"
    TEXTAREA = "textarea"
    VARCHAR = "varchar"
    NVARCHAR = "nvarchar"
    CHAR = "char"
    NCHAR = "nchar"
    EMAIL = "email"
    URL = "url"
    PHONE = "phone"
    TEL = "tel"
    HTML = "html"
    OTHER = "other"

    @classmethod
    def parse(cls, token: Optional[str]) -> 'DataType':
        """
        Map a raw type token to a member, case-insensitively.

        A SQL length suffix is ignored: ``NVARCHAR(500)`` parses as NVARCHAR.
        Unknown or empty tokens give OTHER.
        """
        if not token:
            return cls.OTHER

        match = _LENGTH_SUFFIX.match(token)
        base = match.group(1) if match else token.strip()
        try:
            return cls(base.lower())
        except ValueError:
            return cls.OTHER


class ControlType(str, Enum):
    """UI control tokens accepted in FieldSchema.control_type."""

    INPUT = "input"
    TEXTAREA = "textarea"
    CHECKBOX = "checkbox"
    SELECT = "select"
    DATE = "date"
    DATETIME_LOCAL = "datetime-local"
    TIME = "time"
    OTHER = "other"

    @classmethod
    def parse(cls, token: Optional[str]) -> Optional['ControlType']:
        """Map a raw token to a member; None for blank, OTHER for unknown."""
        if token is None or not token.strip():
            return None
        try:
            return cls(token.strip().lower())
        except ValueError:
            return cls.OTHER


# Type families used for dispatch; membership tests over enum members
INTEGER_TYPES: FrozenSet[DataType] = frozenset({
    DataType.TINYINT, DataType.SMALLINT, DataType.INT, DataType.INTEGER,
})
BIG_INTEGER_TYPES: FrozenSet[DataType] = frozenset({DataType.BIGINT})
DECIMAL_TYPES: FrozenSet[DataType] = frozenset({
    DataType.DECIMAL, DataType.NUMERIC, DataType.MONEY, DataType.SMALLMONEY,
})
FLOAT_TYPES: FrozenSet[DataType] = frozenset({DataType.FLOAT, DataType.REAL, DataType.DOUBLE})
NUMBER_TYPES: FrozenSet[DataType] = DECIMAL_TYPES | FLOAT_TYPES
DATE_TYPES: FrozenSet[DataType] = frozenset({DataType.DATE})
DATETIME_TYPES: FrozenSet[DataType] = frozenset({
    DataType.DATETIME, DataType.DATETIME2, DataType.SMALLDATETIME,
})
TIME_TYPES: FrozenSet[DataType] = frozenset({DataType.TIME})
FREE_TEXT_TYPES: FrozenSet[DataType] = frozenset({
    DataType.TEXT, DataType.TEXTAREA, DataType.NTEXT, DataType.VARCHAR, DataType.NVARCHAR,
})
CHARACTER_TYPES: FrozenSet[DataType] = frozenset({
    DataType.VARCHAR, DataType.NVARCHAR, DataType.CHAR, DataType.NCHAR,
})
PHONE_TYPES: FrozenSet[DataType] = frozenset({DataType.PHONE, DataType.TEL})


# ============================================================================
# SCHEMA MODELS
# ============================================================================

class DropdownOption(BaseModel):
    """
    One selectable option of a dropdown field.

    Accepts both ``{"value": ..., "text": ...}`` and the capitalized
    ``{"Value": ..., "Text": ...}`` shape; missing keys become empty strings.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: str = Field(default="", validation_alias=AliasChoices('value', 'Value'))
    text: str = Field(default="", validation_alias=AliasChoices('text', 'Text'))

    def as_tuple(self):
        return (self.value, self.text)


class FieldSchema(BaseModel):
    """
    Immutable descriptor of one logical form field.

    Instances are created by the form-definition subsystem and passed read-only
    into validation, sanitization and coercion.

    Example:
        schema = FieldSchema(
            display_name="Contact Email",
            data_type="email",
            is_required=True,
            max_length=254,
        )
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=False)

    display_name: str
    name: str = ""
    is_required: bool = False
    max_length: int = Field(default=0, ge=0)
    data_type: str = ""
    control_type: Optional[str] = None
    validation_regex: Optional[str] = None
    validation_message: Optional[str] = None
    dropdown_options: Optional[str] = None
    is_visible: bool = True

    @field_validator('max_length', mode='before')
    @classmethod
    def _none_is_unbounded(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator('data_type', mode='before')
    @classmethod
    def _none_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @model_validator(mode='before')
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get('name'):
            data = dict(data)
            data['name'] = data.get('display_name') or ""
        return data

    @property
    def data_type_kind(self) -> DataType:
        """Parsed storage type."""
        return DataType.parse(self.data_type)

    @property
    def control_type_kind(self) -> ControlType:
        """Explicit control type, or the one inferred from the data type."""
        from .field_utils import determine_control_type
        return determine_control_type(self)

    @property
    def declared_length(self) -> Optional[int]:
        """Length from a SQL suffix such as ``nvarchar(500)``; None when absent or MAX."""
        match = _LENGTH_SUFFIX.match(self.data_type or "")
        if not match or not match.group(2):
            return None
        try:
            return int(match.group(2))
        except ValueError:
            return None

    @property
    def options(self) -> List[DropdownOption]:
        """Decoded dropdown options (empty when the field has none)."""
        from .field_utils import decode_dropdown_options
        return [DropdownOption(value=v, text=t) for v, t in decode_dropdown_options(self.dropdown_options)]


# ============================================================================
# RESULT CONTAINERS
# ============================================================================

class ValidationResult:
    """
    Outcome of one validation pass.

    ``is_valid`` is derived from ``errors`` so the two can never disagree.
    Warnings never affect validity.
    """

    def __init__(
        self,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
        field_name: Optional[str] = None,
    ):
        self.errors: List[str] = list(errors or [])
        self.warnings: List[str] = list(warnings or [])
        self.field_name = field_name
        self.timestamp = datetime.now(timezone.utc)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def success(cls, field_name: Optional[str] = None) -> 'ValidationResult':
        return cls(field_name=field_name)

    @classmethod
    def failure(cls, *errors: str, field_name: Optional[str] = None) -> 'ValidationResult':
        return cls(errors=list(errors), field_name=field_name)

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Append another result's errors and warnings, preserving order."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'field_name': self.field_name,
            'timestamp': self.timestamp.isoformat(),
        }

    def __bool__(self) -> bool:
        return self.is_valid

    def __repr__(self) -> str:
        return (
            f"ValidationResult(is_valid={self.is_valid}, errors={self.errors!r}, "
            f"warnings={self.warnings!r})"
        )


@dataclass(frozen=True)
class CoercionResult:
    """
    Explicit outcome of converting raw text to a typed value.

    ``ok`` is False only when a typed field's text could not be parsed; ``value``
    then holds the trimmed raw string so callers that ignore ``ok`` still see the
    original text.
    """

    value: Any
    raw: str
    ok: bool = True

    @classmethod
    def converted(cls, value: Any, raw: str) -> 'CoercionResult':
        return cls(value=value, raw=raw, ok=True)

    @classmethod
    def unparsable(cls, raw: str) -> 'CoercionResult':
        return cls(value=raw, raw=raw, ok=False)

    @property
    def is_empty(self) -> bool:
        return self.raw == ""


__all__ = [
    'BIG_INTEGER_TYPES',
    'CHARACTER_TYPES',
    'DATETIME_TYPES',
    'DATE_TYPES',
    'DECIMAL_TYPES',
    'FLOAT_TYPES',
    'FREE_TEXT_TYPES',
    'INTEGER_TYPES',
    'NUMBER_TYPES',
    'PHONE_TYPES',
    'TIME_TYPES',
    'CoercionResult',
    'ControlType',
    'DataType',
    'DropdownOption',
    'FieldSchema',
    'ValidationResult',
]
