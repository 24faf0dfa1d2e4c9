"""
Structured Logging Configuration

Wires structlog onto the standard library logging module so that fieldguard
events carry keyword context (field, error_count, threat_types) and render either
as JSON for log aggregation or as console output for development.

Environment:
- FIELDGUARD_LOG_LEVEL: standard level name, default INFO
- FIELDGUARD_LOG_FORMAT: "json" or "console", default json

Applications embedding fieldguard usually own logging setup already; in that case
they can skip configure_logging() entirely and fieldguard loggers follow whatever
structlog configuration is active.
"""

import logging
import sys
from typing import Any, Dict, List, Optional

import structlog
from structlog.types import EventDict, WrappedLogger

from .settings import ENV_PREFIX, ConfigurationError, EnvironmentManager


MAX_LOGGED_VALUE_LENGTH = 100

_SENSITIVE_KEYS = ('password', 'secret', 'token', 'credential')
_VALID_FORMATS = ('json', 'console')


def truncate_input_values(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Keep untrusted input excerpts short and mask credential-like keys.

    Any ``input`` value longer than MAX_LOGGED_VALUE_LENGTH is cut with an
    ellipsis marker.
    """
    for key, value in list(event_dict.items()):
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS):
            event_dict[key] = "***"
        elif key_lower == 'input' and isinstance(value, str) and len(value) > MAX_LOGGED_VALUE_LENGTH:
            event_dict[key] = value[:MAX_LOGGED_VALUE_LENGTH] + "..."
    return event_dict


def build_processors(json_format: bool = True) -> List[Any]:
    """Processor chain shared by every fieldguard logger."""
    processors: List[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        truncate_input_values,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    stream: Optional[Any] = None,
) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Logging level name
        json_format: Render JSON lines when True, console output otherwise
        stream: Output stream, defaults to stdout

    Raises:
        ConfigurationError: When the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Unknown log level: {level}")

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)

    structlog.configure(
        processors=build_processors(json_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging_from_environment(env: Optional[EnvironmentManager] = None) -> Dict[str, Any]:
    """
    Configure logging from FIELDGUARD_LOG_LEVEL and FIELDGUARD_LOG_FORMAT.

    Returns:
        The applied settings
    """
    env = env or EnvironmentManager()
    level = env.get_optional_env(f"{ENV_PREFIX}LOG_LEVEL", "INFO")
    log_format = env.get_optional_env(f"{ENV_PREFIX}LOG_FORMAT", "json").lower()

    if log_format not in _VALID_FORMATS:
        raise ConfigurationError(
            f"Unknown log format '{log_format}', expected one of {list(_VALID_FORMATS)}"
        )

    configure_logging(level=level, json_format=(log_format == 'json'))
    return {'level': level.upper(), 'format': log_format}


__all__ = [
    'MAX_LOGGED_VALUE_LENGTH',
    'build_processors',
    'configure_logging',
    'configure_logging_from_environment',
    'truncate_input_values',
]
