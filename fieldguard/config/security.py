"""
Security Configuration Module

This module defines the process-wide, read-only security configuration consumed by
the validation engine, the file upload validator and the CSV cell guard.

Key Security Settings:
- Input validation: dangerous character ratio threshold and failure logging toggle
- File upload: maximum size, allowed extensions and allowed MIME types
- CSV security: formula injection detection toggle and dangerous leading characters

Loading:
- SecurityConfiguration() gives the built-in defaults
- SecurityConfiguration.from_environment() reads FIELDGUARD_* variables via python-dotenv
- SecurityConfiguration.from_mapping() loads an application settings document
  ({"InputValidation": {...}, "FileUpload": {...}, "CsvSecurity": {...}}) validated
  with marshmallow schemas

All configuration objects are frozen dataclasses holding tuples and frozensets. They
are built once at startup and injected into each component; there is no module-level
singleton.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

import structlog
from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_load,
    validate,
    validates,
)

from .settings import ENV_PREFIX, ConfigurationError, EnvironmentManager


logger = structlog.get_logger(__name__)

DEFAULT_DANGEROUS_CHARACTER_THRESHOLD = 0.3
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_ALLOWED_EXTENSIONS = ('.csv',)
DEFAULT_ALLOWED_MIME_TYPES = ('text/csv', 'application/csv', 'text/plain')
DEFAULT_DANGEROUS_START_CHARACTERS = ('=', '+', '-', '@', '\t', '\r')


def _normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if extension and not extension.startswith('.'):
        extension = f".{extension}"
    return extension


def _normalize_extensions(extensions: Iterable[str]) -> FrozenSet[str]:
    return frozenset(e for e in (_normalize_extension(x) for x in extensions) if e)


def _normalize_mime_types(mime_types: Iterable[str]) -> FrozenSet[str]:
    return frozenset(m.strip().lower() for m in mime_types if m and m.strip())


@dataclass(frozen=True)
class InputValidationSettings:
    """Thresholds for the auxiliary input heuristics."""

    dangerous_character_threshold: float = DEFAULT_DANGEROUS_CHARACTER_THRESHOLD
    log_validation_failures: bool = True

    def __post_init__(self):
        if not 0.0 <= self.dangerous_character_threshold <= 1.0:
            raise ConfigurationError(
                "Dangerous character threshold must be between 0.0 and 1.0, "
                f"got {self.dangerous_character_threshold}"
            )


@dataclass(frozen=True)
class FileUploadSettings:
    """Limits applied to uploaded files before their content is read."""

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_extensions: FrozenSet[str] = field(
        default_factory=lambda: frozenset(DEFAULT_ALLOWED_EXTENSIONS)
    )
    allowed_mime_types: FrozenSet[str] = field(
        default_factory=lambda: frozenset(DEFAULT_ALLOWED_MIME_TYPES)
    )

    def __post_init__(self):
        if self.max_file_size <= 0:
            raise ConfigurationError(
                f"Maximum file size must be positive, got {self.max_file_size}"
            )
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, 'allowed_extensions', _normalize_extensions(self.allowed_extensions))
        object.__setattr__(self, 'allowed_mime_types', _normalize_mime_types(self.allowed_mime_types))


@dataclass(frozen=True)
class CsvSecuritySettings:
    """Spreadsheet formula injection detection settings."""

    enable_csv_injection_detection: bool = True
    dangerous_start_characters: Tuple[str, ...] = DEFAULT_DANGEROUS_START_CHARACTERS

    def __post_init__(self):
        object.__setattr__(
            self,
            'dangerous_start_characters',
            tuple(c for c in self.dangerous_start_characters if c),
        )


@dataclass(frozen=True)
class SecurityConfiguration:
    """
    Root security configuration injected into validation components.

    Example:
        config = SecurityConfiguration(
            input_validation=InputValidationSettings(dangerous_character_threshold=0.5)
        )
        engine = ValidationEngine(config)
    """

    input_validation: InputValidationSettings = field(default_factory=InputValidationSettings)
    file_upload: FileUploadSettings = field(default_factory=FileUploadSettings)
    csv_security: CsvSecuritySettings = field(default_factory=CsvSecuritySettings)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> 'SecurityConfiguration':
        """
        Build configuration from a settings document section.

        Missing sections and keys keep their defaults. Unknown keys are ignored.

        Args:
            data: Mapping with optional InputValidation, FileUpload and CsvSecurity sections

        Returns:
            Validated SecurityConfiguration

        Raises:
            ConfigurationError: When any value fails schema validation
        """
        try:
            config = SecurityConfigurationSchema().load(dict(data or {}))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid security configuration: {e.messages}")

        logger.debug("Security configuration loaded from mapping", **config.summary())
        return config

    @classmethod
    def from_environment(
        cls,
        env: Optional[EnvironmentManager] = None,
        prefix: str = ENV_PREFIX,
    ) -> 'SecurityConfiguration':
        """
        Build configuration from FIELDGUARD_* environment variables.

        Args:
            env: Environment manager, a new one loading .env is created when omitted
            prefix: Variable name prefix

        Returns:
            SecurityConfiguration with environment overrides applied
        """
        env = env or EnvironmentManager()

        extensions = env.get_optional_env(f"{prefix}ALLOWED_EXTENSIONS", None, list)
        mime_types = env.get_optional_env(f"{prefix}ALLOWED_MIME_TYPES", None, list)
        start_chars = env.get_optional_env(f"{prefix}CSV_DANGEROUS_START_CHARACTERS", None, list)

        config = cls(
            input_validation=InputValidationSettings(
                dangerous_character_threshold=env.get_optional_env(
                    f"{prefix}DANGEROUS_CHARACTER_THRESHOLD",
                    DEFAULT_DANGEROUS_CHARACTER_THRESHOLD,
                    float,
                ),
                log_validation_failures=env.get_optional_env(
                    f"{prefix}LOG_VALIDATION_FAILURES", True, bool
                ),
            ),
            file_upload=FileUploadSettings(
                max_file_size=env.get_optional_env(
                    f"{prefix}MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE, int
                ),
                allowed_extensions=frozenset(extensions or DEFAULT_ALLOWED_EXTENSIONS),
                allowed_mime_types=frozenset(mime_types or DEFAULT_ALLOWED_MIME_TYPES),
            ),
            csv_security=CsvSecuritySettings(
                enable_csv_injection_detection=env.get_optional_env(
                    f"{prefix}ENABLE_CSV_INJECTION_DETECTION", True, bool
                ),
                dangerous_start_characters=tuple(start_chars or DEFAULT_DANGEROUS_START_CHARACTERS),
            ),
        )

        logger.info("Security configuration loaded from environment", **config.summary())
        return config

    def summary(self) -> Dict[str, Any]:
        """Flat, log-friendly view of the configuration."""
        return {
            'dangerous_character_threshold': self.input_validation.dangerous_character_threshold,
            'log_validation_failures': self.input_validation.log_validation_failures,
            'max_file_size': self.file_upload.max_file_size,
            'allowed_extensions': sorted(self.file_upload.allowed_extensions),
            'allowed_mime_types': sorted(self.file_upload.allowed_mime_types),
            'csv_injection_detection': self.csv_security.enable_csv_injection_detection,
            'dangerous_start_characters': [
                repr(c) for c in self.csv_security.dangerous_start_characters
            ],
        }


# ============================================================================
# MARSHMALLOW SCHEMAS FOR SETTINGS DOCUMENTS
# ============================================================================

class InputValidationSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    dangerous_character_threshold = fields.Float(
        data_key='DangerousCharacterThreshold',
        load_default=DEFAULT_DANGEROUS_CHARACTER_THRESHOLD,
        validate=validate.Range(min=0.0, max=1.0),
    )
    log_validation_failures = fields.Boolean(
        data_key='LogValidationFailures',
        load_default=True,
    )

    @post_load
    def make_settings(self, data, **kwargs):
        return InputValidationSettings(**data)


class FileUploadSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    max_file_size = fields.Integer(
        data_key='MaxFileSize',
        load_default=DEFAULT_MAX_FILE_SIZE,
        validate=validate.Range(min=1),
    )
    allowed_extensions = fields.List(
        fields.String(),
        data_key='AllowedExtensions',
        load_default=lambda: list(DEFAULT_ALLOWED_EXTENSIONS),
    )
    allowed_mime_types = fields.List(
        fields.String(),
        data_key='AllowedMimeTypes',
        load_default=lambda: list(DEFAULT_ALLOWED_MIME_TYPES),
    )

    @validates('allowed_extensions')
    def validate_extensions(self, value, **kwargs):
        if not _normalize_extensions(value):
            raise ValidationError("At least one allowed extension is required.")

    @validates('allowed_mime_types')
    def validate_mime_types(self, value, **kwargs):
        if not _normalize_mime_types(value):
            raise ValidationError("At least one allowed MIME type is required.")

    @post_load
    def make_settings(self, data, **kwargs):
        return FileUploadSettings(
            max_file_size=data['max_file_size'],
            allowed_extensions=frozenset(data['allowed_extensions']),
            allowed_mime_types=frozenset(data['allowed_mime_types']),
        )


class CsvSecuritySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    enable_csv_injection_detection = fields.Boolean(
        data_key='EnableCsvInjectionDetection',
        load_default=True,
    )
    dangerous_start_characters = fields.List(
        fields.String(validate=validate.Length(min=1)),
        data_key='DangerousStartCharacters',
        load_default=lambda: list(DEFAULT_DANGEROUS_START_CHARACTERS),
    )

    @post_load
    def make_settings(self, data, **kwargs):
        return CsvSecuritySettings(
            enable_csv_injection_detection=data['enable_csv_injection_detection'],
            dangerous_start_characters=tuple(data['dangerous_start_characters']),
        )


class SecurityConfigurationSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    input_validation = fields.Nested(
        InputValidationSchema,
        data_key='InputValidation',
        load_default=InputValidationSettings,
    )
    file_upload = fields.Nested(
        FileUploadSchema,
        data_key='FileUpload',
        load_default=FileUploadSettings,
    )
    csv_security = fields.Nested(
        CsvSecuritySchema,
        data_key='CsvSecurity',
        load_default=CsvSecuritySettings,
    )

    @post_load
    def make_configuration(self, data, **kwargs):
        return SecurityConfiguration(**data)


__all__ = [
    'DEFAULT_ALLOWED_EXTENSIONS',
    'DEFAULT_ALLOWED_MIME_TYPES',
    'DEFAULT_DANGEROUS_CHARACTER_THRESHOLD',
    'DEFAULT_DANGEROUS_START_CHARACTERS',
    'DEFAULT_MAX_FILE_SIZE',
    'CsvSecuritySettings',
    'FileUploadSettings',
    'InputValidationSettings',
    'SecurityConfiguration',
    'SecurityConfigurationSchema',
]
