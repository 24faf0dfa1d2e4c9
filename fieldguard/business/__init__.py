"""
Business layer: the field schema model, result containers, type coercion and
form rendering helpers.
"""

from .models import (
    CoercionResult,
    ControlType,
    DataType,
    DropdownOption,
    FieldSchema,
    ValidationResult,
)
from .field_utils import decode_dropdown_options, determine_control_type, get_input_type
from .coercion import TypeCoercer

__all__ = [
    'CoercionResult',
    'ControlType',
    'DataType',
    'DropdownOption',
    'FieldSchema',
    'TypeCoercer',
    'ValidationResult',
    'decode_dropdown_options',
    'determine_control_type',
    'get_input_type',
]
