"""
Shared pytest fixtures for the fieldguard test suite.

Provides default and customized security configurations, a validation engine
bound to the default configuration, a FieldSchema factory and an environment
cleaned of FIELDGUARD_* variables.
"""

import logging
import os

import pytest
import structlog

from fieldguard.business.models import FieldSchema
from fieldguard.config.security import (
    CsvSecuritySettings,
    InputValidationSettings,
    SecurityConfiguration,
)
from fieldguard.config.settings import ENV_PREFIX
from fieldguard.services.validation_engine import ValidationEngine
from fieldguard.services.validation_service import InputValidationService


@pytest.fixture
def security_config():
    """Built-in default configuration."""
    return SecurityConfiguration()


@pytest.fixture
def quiet_config():
    """Configuration with validation failure logging switched off."""
    return SecurityConfiguration(
        input_validation=InputValidationSettings(log_validation_failures=False)
    )


@pytest.fixture
def csv_detection_disabled_config():
    return SecurityConfiguration(
        csv_security=CsvSecuritySettings(enable_csv_injection_detection=False)
    )


@pytest.fixture
def engine(security_config):
    return ValidationEngine(security_config)


@pytest.fixture
def service(security_config):
    return InputValidationService(security_config)


@pytest.fixture
def make_schema():
    """Factory building a FieldSchema with sensible defaults."""
    def _make(display_name="Field", **overrides):
        data = {'display_name': display_name, 'data_type': 'nvarchar'}
        data.update(overrides)
        return FieldSchema(**data)
    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every FIELDGUARD_* variable for the duration of a test."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults and root handlers after a test reconfigures logging."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
