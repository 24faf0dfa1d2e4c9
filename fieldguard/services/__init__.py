"""
Service layer: the validation engine and form-level input validation service.
"""

from .validation_engine import ValidationEngine
from .validation_service import FieldOutcome, InputValidationService

__all__ = [
    'FieldOutcome',
    'InputValidationService',
    'ValidationEngine',
]
