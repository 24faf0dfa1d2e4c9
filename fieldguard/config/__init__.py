"""
Configuration package: environment loading, security settings and logging setup.
"""

from .settings import ConfigurationError, EnvironmentManager, parse_list_value
from .security import (
    CsvSecuritySettings,
    FileUploadSettings,
    InputValidationSettings,
    SecurityConfiguration,
)
from .logging import configure_logging, configure_logging_from_environment

__all__ = [
    'ConfigurationError',
    'CsvSecuritySettings',
    'EnvironmentManager',
    'FileUploadSettings',
    'InputValidationSettings',
    'SecurityConfiguration',
    'configure_logging',
    'configure_logging_from_environment',
    'parse_list_value',
]
