"""
Upload policy checks for files received by the application.

Size, extension and content type are checked independently; every violated rule
is reported so the caller can show all problems at once.
"""

import os
from typing import Optional

import structlog

from fieldguard.business.models import ValidationResult
from fieldguard.config.security import SecurityConfiguration


logger = structlog.get_logger(__name__)

BYTES_PER_MB = 1024 * 1024


def get_file_extension(file_name: Optional[str]) -> str:
    """Lowercase extension including the dot, empty when there is none."""
    return os.path.splitext(file_name or "")[1].lower()


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lowercase MIME type with parameters such as ``; charset=utf-8`` removed."""
    return (content_type or "").split(';', 1)[0].strip().lower()


class FileUploadValidator:

    def __init__(self, config: Optional[SecurityConfiguration] = None):
        self.config = config or SecurityConfiguration()

    def validate(
        self,
        file_name: Optional[str],
        file_size: int,
        content_type: Optional[str],
    ) -> ValidationResult:
        """
        Check an upload against the configured file policy.

        Args:
            file_name: Client supplied file name
            file_size: Size in bytes
            content_type: Client supplied MIME type

        Returns:
            ValidationResult with one error per violated rule
        """
        settings = self.config.file_upload
        result = ValidationResult(field_name="file_upload")

        if file_size > settings.max_file_size:
            result.add_error(
                f"File size ({file_size / BYTES_PER_MB:.2f} MB) exceeds the maximum limit "
                f"of {settings.max_file_size / BYTES_PER_MB:g} MB."
            )

        extension = get_file_extension(file_name)
        if extension not in settings.allowed_extensions:
            allowed = ', '.join(sorted(settings.allowed_extensions))
            result.add_error(
                f"File type '{extension}' is not allowed. Allowed file types: {allowed}."
            )

        if normalize_content_type(content_type) not in settings.allowed_mime_types:
            allowed = ', '.join(sorted(settings.allowed_mime_types))
            result.add_error(
                f"Content type '{content_type}' is not allowed. Allowed content types: {allowed}."
            )

        if not result.is_valid:
            logger.debug(
                "File upload rejected",
                file_name=file_name,
                file_size=file_size,
                content_type=content_type,
                error_count=len(result.errors),
            )
        return result


__all__ = [
    'FileUploadValidator',
    'get_file_extension',
    'normalize_content_type',
]
