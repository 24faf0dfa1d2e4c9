"""
Validation Engine

Single entry point for accepting untrusted field input. The engine composes the
threat detector, type validator, sanitizer, type coercer, CSV cell guard and file
upload validator around one injected SecurityConfiguration.

validate_input() runs its checks in a fixed order:

    1. blank input      -> valid unless required ("is required.")
    2. SQL keywords     -> "contains potentially dangerous content."
    3. script patterns  -> "contains potentially dangerous script content."
    4. maximum length   -> "must be no longer than N characters."
    5. type format      -> one type-specific error, does not stop step 6
    6. custom regex     -> schema message or "format is invalid."; a malformed
                           pattern only adds a warning

Steps 1 to 4 stop at the first failure.
"""

from typing import Any, Optional

import structlog

from fieldguard.business.coercion import TypeCoercer
from fieldguard.business.models import FieldSchema, ValidationResult
from fieldguard.config.security import SecurityConfiguration
from fieldguard.utils.csv_guard import CsvCellGuard
from fieldguard.utils.file_utils import FileUploadValidator
from fieldguard.utils.sanitizers import Sanitizer
from fieldguard.utils.threats import ThreatDetector
from fieldguard.utils.validators import RegexOutcome, TypeValidator, check_custom_regex


logger = structlog.get_logger(__name__)


class ValidationEngine:
    """
    Field validation, sanitization and coercion bound to one configuration.

    Example:
        engine = ValidationEngine(SecurityConfiguration.from_environment())
        schema = FieldSchema(display_name="Age", data_type="int", is_required=True)

        result = engine.validate_input("42", schema)
        if result.is_valid:
            value = engine.convert_string_to_typed(schema.data_type, schema.control_type, "42")
    """

    def __init__(self, config: Optional[SecurityConfiguration] = None):
        self.config = config or SecurityConfiguration()
        self.threat_detector = ThreatDetector(self.config)
        self.type_validator = TypeValidator()
        self.sanitizer = Sanitizer()
        self.type_coercer = TypeCoercer()
        self.csv_guard = CsvCellGuard(self.config)
        self.file_validator = FileUploadValidator(self.config)

    def validate_input(self, raw: Optional[str], schema: FieldSchema) -> ValidationResult:
        name = schema.display_name
        result = ValidationResult(field_name=schema.name)

        if raw is None or not raw.strip():
            if schema.is_required:
                result.add_error(f"{name} is required.")
            return result

        if self.threat_detector.contains_sql_injection_pattern(raw):
            result.add_error(f"{name} contains potentially dangerous content.")
            return result

        if self.threat_detector.contains_script_injection_pattern(raw):
            result.add_error(f"{name} contains potentially dangerous script content.")
            return result

        if schema.max_length > 0 and len(raw) > schema.max_length:
            result.add_error(f"{name} must be no longer than {schema.max_length} characters.")
            return result

        type_error = self.type_validator.validate(raw, schema)
        if type_error:
            result.add_error(type_error)

        outcome = check_custom_regex(raw, schema.validation_regex)
        if outcome is RegexOutcome.MISMATCHED:
            if schema.validation_message is not None:
                result.add_error(schema.validation_message)
            else:
                result.add_error(f"{name} format is invalid.")
        elif outcome is RegexOutcome.INVALID_PATTERN:
            result.add_warning(f"Invalid regex pattern for {name}. Regex validation skipped.")

        logger.debug(
            "Field validated",
            field=schema.name,
            is_valid=result.is_valid,
            error_count=len(result.errors),
            warning_count=len(result.warnings),
        )
        return result

    def sanitize_input(self, raw: Optional[str], schema: FieldSchema) -> str:
        return self.sanitizer.sanitize_input(raw, schema)

    def convert_string_to_typed(
        self,
        data_type: Optional[str],
        control_type: Optional[str],
        raw: Optional[str],
    ) -> Any:
        return self.type_coercer.convert_string_to_typed(data_type, control_type, raw)

    def has_excessive_dangerous_characters(
        self,
        input_value: Optional[str],
        threshold: Optional[float] = None,
    ) -> bool:
        return self.threat_detector.has_excessive_dangerous_character_ratio(input_value, threshold)

    def validate_file_upload(
        self,
        file_name: Optional[str],
        file_size: int,
        content_type: Optional[str],
    ) -> ValidationResult:
        return self.file_validator.validate(file_name, file_size, content_type)

    def is_csv_injection_risk(self, cell_value: Optional[str]) -> bool:
        return self.csv_guard.is_csv_injection_risk(cell_value)


# Convenience functions for direct usage with the default configuration
_default_engine = ValidationEngine()


def validate_input(raw: Optional[str], schema: FieldSchema) -> ValidationResult:
    return _default_engine.validate_input(raw, schema)


def sanitize_input(raw: Optional[str], schema: FieldSchema) -> str:
    return _default_engine.sanitize_input(raw, schema)


def convert_string_to_typed(
    data_type: Optional[str],
    control_type: Optional[str],
    raw: Optional[str],
) -> Any:
    return _default_engine.convert_string_to_typed(data_type, control_type, raw)


def has_excessive_dangerous_characters(
    input_value: Optional[str],
    threshold: Optional[float] = None,
) -> bool:
    return _default_engine.has_excessive_dangerous_characters(input_value, threshold)


def validate_file_upload(
    file_name: Optional[str],
    file_size: int,
    content_type: Optional[str],
) -> ValidationResult:
    return _default_engine.validate_file_upload(file_name, file_size, content_type)


def is_csv_injection_risk(cell_value: Optional[str]) -> bool:
    return _default_engine.is_csv_injection_risk(cell_value)


__all__ = [
    'ValidationEngine',
    'convert_string_to_typed',
    'has_excessive_dangerous_characters',
    'is_csv_injection_risk',
    'sanitize_input',
    'validate_file_upload',
    'validate_input',
]
