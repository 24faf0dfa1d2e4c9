"""
CSV Formula Injection Guard

Flags cell values that spreadsheet software would evaluate as formulas when the
data is exported to or imported from CSV. A cell is risky when it starts with one
of the configured dangerous characters (``= + - @`` TAB CR by default), checked
both on the value as given and after trimming surrounding whitespace.
"""

import csv
import io
from typing import Optional

import structlog

from fieldguard.business.models import ValidationResult
from fieldguard.config.security import SecurityConfiguration


logger = structlog.get_logger(__name__)


class CsvCellGuard:
    """Formula injection checks driven by the CSV security settings."""

    def __init__(self, config: Optional[SecurityConfiguration] = None):
        self.config = config or SecurityConfiguration()

    @property
    def enabled(self) -> bool:
        return self.config.csv_security.enable_csv_injection_detection

    def is_csv_injection_risk(self, value: Optional[str]) -> bool:
        if not self.enabled or not value:
            return False

        prefixes = self.config.csv_security.dangerous_start_characters
        if not prefixes:
            return False
        return value.startswith(prefixes) or value.strip().startswith(prefixes)

    def validate_csv_content(self, text: Optional[str]) -> ValidationResult:
        """
        Scan every cell of a CSV document for formula injection.

        Args:
            text: Decoded CSV document

        Returns:
            ValidationResult with one error per risky cell (1-based row and
            column), or a single error when the document is empty or malformed
        """
        if text is None or not text.strip():
            return ValidationResult.failure("CSV file is empty.")

        result = ValidationResult()
        try:
            reader = csv.reader(io.StringIO(text, newline=''), strict=True)
            for row_number, row in enumerate(reader, start=1):
                for column_number, cell in enumerate(row, start=1):
                    if self.is_csv_injection_risk(cell):
                        result.add_error(
                            f"Row {row_number}, column {column_number} contains a value "
                            "that could be interpreted as a spreadsheet formula."
                        )
        except csv.Error as e:
            logger.debug("CSV parsing failed", error=str(e))
            return ValidationResult.failure(f"CSV file could not be parsed: {e}")

        if not result.is_valid:
            logger.debug("CSV injection risks found", error_count=len(result.errors))
        return result


__all__ = ['CsvCellGuard']
