"""
Output Sanitization

HTML entity encoding applied to accepted input before it is stored or rendered.
Free-text fields receive extra hardening against script URLs; rich-text (html)
fields are fully encoded since no allow-list sanitizer is wired in.

Encoding escapes ``& < > " '`` with ``'`` rendered as ``&#39;``. Text without any of
those characters comes back unchanged, so sanitizing is a fixed point on plain
text.
"""

import html
import re
from typing import Optional

import structlog

from fieldguard.business.models import FREE_TEXT_TYPES, DataType, FieldSchema


logger = structlog.get_logger(__name__)

ENCODED_SCRIPT_TAG = "&#60;script"
DOUBLE_ENCODED_SCRIPT_TAG = "&amp;#60;script"

_SCRIPT_SCHEME_REGEX = re.compile(r'(java|vb)(script:)', re.IGNORECASE)


def html_encode(text: str) -> str:
    """Encode ``& < > " '`` as HTML entities."""
    return html.escape(text, quote=True).replace('&#x27;', '&#39;')


class Sanitizer:
    """
    Data-type aware output encoder.

    Example:
        sanitizer = Sanitizer()
        sanitizer.sanitize_input('<b>"hi"</b>', FieldSchema(display_name="Notes", data_type="text"))
        # '&lt;b&gt;&quot;hi&quot;&lt;/b&gt;'
    """

    def sanitize_input(self, raw: Optional[str], schema: FieldSchema) -> str:
        if not raw:
            return ""

        kind = schema.data_type_kind
        if kind in FREE_TEXT_TYPES:
            return self.sanitize_text(raw)
        if kind is DataType.HTML:
            return self.sanitize_html(raw)
        return html_encode(raw)

    def sanitize_text(self, text: str) -> str:
        """
        Encode free text and break script URL schemes.

        ``javascript:`` becomes ``java-script:`` and ``vbscript:`` becomes
        ``vb-script:`` whatever their letter case; an already encoded
        ``&#60;script`` is encoded once more.
        """
        sanitized = html_encode(text)
        sanitized = sanitized.replace(ENCODED_SCRIPT_TAG, DOUBLE_ENCODED_SCRIPT_TAG)
        return _SCRIPT_SCHEME_REGEX.sub(r'\1-\2', sanitized)

    def sanitize_html(self, text: str) -> str:
        # TODO: plug in an allow-list HTML sanitizer for rich-text fields
        return html_encode(text)

    def sanitize_comments(self, text: Optional[str]) -> str:
        """Sanitize free-form review comments like a textarea field."""
        if text is None or not text.strip():
            return ""
        return self.sanitize_text(text)


__all__ = [
    'Sanitizer',
    'html_encode',
]
