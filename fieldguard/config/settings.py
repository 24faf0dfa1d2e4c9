"""
Environment Configuration Loading

This module provides secure loading of environment variables through python-dotenv
with typed accessors used by the security and logging configuration modules.

Key Components:
- EnvironmentManager: .env discovery and loading with typed readers
- ConfigurationError: raised when a configuration value is missing or malformed
- parse_list_value: comma-separated list parsing with escape handling

Environment values are read once at process start. Nothing in this module keeps
mutable state after construction, so a manager can be shared across threads.
"""

import os
import logging
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv, find_dotenv


logger = logging.getLogger(__name__)

ENV_PREFIX = "FIELDGUARD_"

_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off')

# Escapes understood inside list values so control characters can be configured
_LIST_ESCAPES = {
    '\\t': '\t',
    '\\r': '\r',
    '\\n': '\n',
    '\\,': ',',
}


class ConfigurationError(Exception):
    """Custom exception for configuration validation errors."""
    pass


def parse_list_value(raw: str) -> List[str]:
    """
    Split a comma-separated configuration value into its items.

    Items are stripped of surrounding spaces unless they consist solely of an
    escaped control character. ``\\t``, ``\\r``, ``\\n`` and ``\\,`` are
    translated to the characters they name.

    Args:
        raw: Raw configuration string, e.g. ``"=,+,-,@,\\t,\\r"``

    Returns:
        List of non-empty items in declaration order
    """
    items: List[str] = []
    current = ''
    index = 0

    while index < len(raw):
        pair = raw[index:index + 2]
        if pair in _LIST_ESCAPES:
            current += _LIST_ESCAPES[pair]
            index += 2
            continue

        char = raw[index]
        if char == ',':
            items.append(current)
            current = ''
        else:
            current += char
        index += 1

    items.append(current)

    cleaned = []
    for item in items:
        stripped = item.strip(' ')
        if stripped:
            cleaned.append(stripped)
    return cleaned


class EnvironmentManager:
    """
    Secure environment variable management using python-dotenv with
    typed accessors and validation.

    Variables already present in the process environment win over values
    from the .env file.
    """

    def __init__(self, env_file: Optional[str] = None, load_file: bool = True):
        """
        Initialize environment manager.

        Args:
            env_file: Optional path to .env file, defaults to auto-discovery
            load_file: Whether to load the .env file at all
        """
        self.env_file = env_file or (find_dotenv(usecwd=True) if load_file else None)
        self.logger = logging.getLogger(f"{__name__}.EnvironmentManager")
        if load_file:
            self._load_environment_variables()
            self._validate_environment_file_security()

    def _load_environment_variables(self) -> None:
        """
        Load environment variables from .env file.

        Raises:
            ConfigurationError: When the file exists but cannot be read
        """
        if not self.env_file:
            self.logger.debug("No .env file found, using process environment only")
            return

        try:
            load_dotenv(self.env_file, override=False)
            self.logger.info("Environment variables loaded from %s", self.env_file)
        except OSError as e:
            error_msg = f"Failed to load environment variables: {str(e)}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

    def _validate_environment_file_security(self) -> None:
        """Warn when the .env file is readable by other users."""
        if not self.env_file or not os.path.exists(self.env_file):
            return

        if os.name == 'posix':
            try:
                file_mode = oct(Path(self.env_file).stat().st_mode)[-3:]
                if file_mode not in ['600', '644']:
                    self.logger.warning(
                        "Environment file permissions (%s) may be too permissive. "
                        "Recommended: 600.", file_mode
                    )
            except OSError as e:
                self.logger.warning("Could not check environment file permissions: %s", e)

    @staticmethod
    def _convert(key: str, value: str, var_type: type) -> Any:
        if var_type == bool:
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
            raise ValueError(f"'{value}' is not a boolean")
        elif var_type == int:
            return int(value)
        elif var_type == float:
            return float(value)
        elif var_type == list:
            return parse_list_value(value)
        return var_type(value)

    def get_required_env(self, key: str, var_type: type = str) -> Any:
        """
        Get required environment variable with type validation.

        Args:
            key: Environment variable name
            var_type: Expected type (str, int, float, bool or list)

        Returns:
            Converted environment variable value

        Raises:
            ConfigurationError: When the variable is missing or invalid
        """
        value = os.getenv(key)
        if value is None:
            raise ConfigurationError(f"Required environment variable '{key}' not found")

        try:
            return self._convert(key, value, var_type)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Environment variable '{key}' has invalid type: {str(e)}")

    def get_optional_env(self, key: str, default: Any = None, var_type: type = str) -> Any:
        """
        Get optional environment variable with default value and type validation.

        A variable that is set but malformed raises instead of falling back
        to the default.

        Args:
            key: Environment variable name
            default: Value returned when the variable is not set
            var_type: Expected type (str, int, float, bool or list)

        Returns:
            Converted environment variable value or default

        Raises:
            ConfigurationError: When the variable is set but cannot be converted
        """
        value = os.getenv(key)
        if value is None or value == '':
            return default

        try:
            return self._convert(key, value, var_type)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Environment variable '{key}' has invalid type: {str(e)}")


__all__ = [
    'ENV_PREFIX',
    'ConfigurationError',
    'EnvironmentManager',
    'parse_list_value',
]
