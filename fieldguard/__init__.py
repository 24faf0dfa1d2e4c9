"""
fieldguard - schema-driven field validation, threat detection and type coercion.

Typical usage:

    from fieldguard import FieldSchema, SecurityConfiguration, ValidationEngine

    engine = ValidationEngine(SecurityConfiguration.from_environment())
    schema = FieldSchema(display_name="Email", data_type="email", is_required=True)

    result = engine.validate_input(submitted, schema)
    if result.is_valid:
        stored = engine.sanitize_input(submitted, schema)
"""

from fieldguard.config import ConfigurationError, SecurityConfiguration, configure_logging
from fieldguard.business import (
    CoercionResult,
    ControlType,
    DataType,
    DropdownOption,
    FieldSchema,
    ValidationResult,
)
from fieldguard.services import FieldOutcome, InputValidationService, ValidationEngine

__version__ = "1.0.0"

__all__ = [
    'CoercionResult',
    'ConfigurationError',
    'ControlType',
    'DataType',
    'DropdownOption',
    'FieldOutcome',
    'FieldSchema',
    'InputValidationService',
    'SecurityConfiguration',
    'ValidationEngine',
    'ValidationResult',
    'configure_logging',
    '__version__',
]
