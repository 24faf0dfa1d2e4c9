"""
Input Validation Service

Form-level orchestration on top of the ValidationEngine. Where the engine answers
questions about one field, this service validates whole submissions and CSV
uploads, produces sanitized values, and logs rejected input.

Logging:
- Failed validations are logged as warnings when
  ``input_validation.log_validation_failures`` is enabled; logged input is cut to
  50 characters (100 for special character alerts)
- Unexpected errors are always logged with their traceback and reported to the
  caller as a failed result rather than raised
"""

from typing import Any, BinaryIO, Iterable, List, Mapping, NamedTuple, Optional, TextIO, Union

import structlog

from fieldguard.business.models import FieldSchema, ValidationResult
from fieldguard.config.security import SecurityConfiguration
from fieldguard.services.validation_engine import ValidationEngine


logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Validation error occurred"
FIELD_LOG_EXCERPT_LENGTH = 50
ALERT_LOG_EXCERPT_LENGTH = 100

COMMENTS_SCHEMA = FieldSchema(
    display_name="Comments",
    name="Comments",
    data_type="textarea",
    max_length=1000,
)


class FieldOutcome(NamedTuple):
    is_valid: bool
    sanitized_value: str
    errors: List[str]
    warnings: List[str]


def _excerpt(value: Optional[str], length: int) -> Optional[str]:
    if value is None:
        return None
    return value[:length]


class InputValidationService:
    """
    Validates and sanitizes user submissions.

    Example:
        service = InputValidationService(SecurityConfiguration.from_environment())
        result = service.validate_form_submission(request_values, form_fields)
        if not result.is_valid:
            return render_errors(result.errors)
    """

    def __init__(
        self,
        config: Optional[SecurityConfiguration] = None,
        engine: Optional[ValidationEngine] = None,
    ):
        self.config = config or (engine.config if engine else SecurityConfiguration())
        self.engine = engine or ValidationEngine(self.config)

    @property
    def log_failures(self) -> bool:
        return self.config.input_validation.log_validation_failures

    def validate_and_sanitize_field(self, raw: Optional[str], schema: FieldSchema) -> FieldOutcome:
        """
        Validate one field and return its sanitized value alongside the outcome.

        The sanitized value is produced even when validation fails so callers can
        redisplay the submitted text safely.
        """
        try:
            result = self.engine.validate_input(raw, schema)
            sanitized = self.engine.sanitize_input(raw, schema)
        except Exception:
            logger.exception(
                "Error validating field",
                field=schema.name,
                input=_excerpt(raw, FIELD_LOG_EXCERPT_LENGTH),
            )
            return FieldOutcome(False, "", [GENERIC_ERROR_MESSAGE], [])

        if not result.is_valid and self.log_failures:
            logger.warning(
                "Field validation failed",
                field=schema.name,
                input=_excerpt(raw, FIELD_LOG_EXCERPT_LENGTH),
                errors=result.errors,
            )

        return FieldOutcome(result.is_valid, sanitized, list(result.errors), list(result.warnings))

    def validate_form_submission(
        self,
        values: Mapping[str, Any],
        fields: Iterable[FieldSchema],
    ) -> ValidationResult:
        """
        Validate every visible field of a submitted form.

        Values are looked up by field name and converted to text. Errors and
        warnings of all fields are collected in field order. A non-empty value made
        up mostly of special characters is rejected as well.

        Args:
            values: Submitted values keyed by field name
            fields: Form field definitions

        Returns:
            Aggregated ValidationResult
        """
        result = ValidationResult()

        try:
            for schema in fields:
                if not schema.is_visible:
                    continue

                value = values.get(schema.name)
                text = str(value) if value is not None else None

                result.merge(self.engine.validate_input(text, schema))

                if text and self.engine.has_excessive_dangerous_characters(text):
                    result.add_error(
                        f"{schema.display_name} contains an excessive number of special characters."
                    )
                    if self.log_failures:
                        logger.warning(
                            "Potentially malicious input detected",
                            field=schema.name,
                            input=_excerpt(text, ALERT_LOG_EXCERPT_LENGTH),
                        )
        except Exception:
            logger.exception("Error during form submission validation")
            result.add_error(GENERIC_ERROR_MESSAGE)
            return result

        if not result.is_valid and self.log_failures:
            logger.warning("Form submission validation failed", error_count=len(result.errors))
        return result

    def validate_csv_upload(
        self,
        stream: Union[BinaryIO, TextIO],
        file_name: Optional[str],
        file_size: int,
        content_type: Optional[str],
    ) -> ValidationResult:
        """
        Validate an uploaded CSV file: upload policy first, then cell content.

        The stream is rewound before reading and again afterwards when it is
        seekable, so the caller can go on to import it.
        """
        try:
            file_result = self.engine.validate_file_upload(file_name, file_size, content_type)
            if not file_result.is_valid:
                if self.log_failures:
                    logger.warning(
                        "CSV upload rejected",
                        file_name=file_name,
                        errors=file_result.errors,
                    )
                return file_result

            seekable = _is_seekable(stream)
            if seekable:
                stream.seek(0)

            try:
                content = stream.read()
            finally:
                if seekable:
                    stream.seek(0)

            if isinstance(content, bytes):
                try:
                    content = content.decode('utf-8-sig')
                except UnicodeDecodeError:
                    return ValidationResult.failure(
                        "CSV file must be UTF-8 encoded.", field_name="file_upload"
                    )
            elif content.startswith('\ufeff'):
                content = content[1:]

            result = self.engine.csv_guard.validate_csv_content(content)
        except Exception:
            logger.exception("Error validating CSV upload", file_name=file_name)
            return ValidationResult.failure(GENERIC_ERROR_MESSAGE, field_name="file_upload")

        if not result.is_valid and self.log_failures:
            logger.warning("CSV upload validation failed", file_name=file_name, errors=result.errors)
        return result

    def sanitize_comments(self, text: Optional[str]) -> str:
        if text is None or not text.strip():
            return ""

        try:
            return self.engine.sanitize_input(text, COMMENTS_SCHEMA)
        except Exception:
            logger.exception(
                "Error sanitizing comments",
                input=_excerpt(text, FIELD_LOG_EXCERPT_LENGTH),
            )
            return ""


def _is_seekable(stream: Any) -> bool:
    seekable = getattr(stream, 'seekable', None)
    return bool(seekable and seekable())


__all__ = [
    'FieldOutcome',
    'InputValidationService',
]
