"""
Input validation service tests.

Exercises field-level validate-and-sanitize, whole form submissions, CSV uploads
and comment sanitizing, including the structured log events emitted for rejected
input (asserted with structlog.testing.capture_logs).
"""

import io
from unittest.mock import Mock

import pytest
from structlog.testing import capture_logs

from fieldguard.business.models import FieldSchema
from fieldguard.services.validation_engine import ValidationEngine
from fieldguard.services.validation_service import FieldOutcome, InputValidationService


@pytest.fixture
def form_fields():
    return [
        FieldSchema(display_name="Full Name", name="full_name", is_required=True, max_length=50),
        FieldSchema(display_name="Email", name="email", data_type="email"),
        FieldSchema(display_name="Age", name="age", data_type="int"),
        FieldSchema(display_name="Internal Code", name="code", is_required=True, is_visible=False),
    ]


@pytest.fixture
def failing_engine(security_config):
    engine = Mock(spec=ValidationEngine)
    engine.config = security_config
    engine.validate_input.side_effect = RuntimeError("boom")
    engine.sanitize_input.side_effect = RuntimeError("boom")
    engine.validate_file_upload.side_effect = RuntimeError("boom")
    return engine


class NonSeekableStream:
    """Stream wrapper exposing only read(), like some upload transports."""

    def __init__(self, data):
        self._data = data

    def read(self):
        return self._data

    def seekable(self):
        return False


class TestValidateAndSanitizeField:

    def test_valid_input(self, service, make_schema):
        outcome = service.validate_and_sanitize_field("<b>Hi</b>", make_schema("Notes", data_type="text"))

        assert outcome == FieldOutcome(True, "&lt;b&gt;Hi&lt;/b&gt;", [], [])

    def test_invalid_input_is_logged(self, service, make_schema):
        schema = make_schema("Notes", name="notes")

        with capture_logs() as logs:
            outcome = service.validate_and_sanitize_field("DROP TABLE users", schema)

        assert outcome.is_valid is False
        assert outcome.errors == ["Notes contains potentially dangerous content."]
        assert outcome.sanitized_value == "DROP TABLE users"

        warnings = [log for log in logs if log['log_level'] == 'warning']
        assert len(warnings) == 1
        assert warnings[0]['event'] == "Field validation failed"
        assert warnings[0]['field'] == "notes"

    def test_logged_input_is_truncated(self, service, make_schema):
        raw = "SELECT " + "x" * 200

        with capture_logs() as logs:
            service.validate_and_sanitize_field(raw, make_schema("Notes"))

        warning = next(log for log in logs if log['log_level'] == 'warning')
        assert warning['input'] == raw[:50]

    def test_logging_can_be_disabled(self, quiet_config, make_schema):
        service = InputValidationService(quiet_config)

        with capture_logs() as logs:
            outcome = service.validate_and_sanitize_field("DROP TABLE users", make_schema("Notes"))

        assert not outcome.is_valid
        assert [log for log in logs if log['log_level'] == 'warning'] == []

    def test_warnings_are_returned(self, service, make_schema):
        outcome = service.validate_and_sanitize_field("abc", make_schema("Code", validation_regex="("))

        assert outcome.is_valid
        assert outcome.warnings == ["Invalid regex pattern for Code. Regex validation skipped."]

    def test_unexpected_error_becomes_failed_outcome(self, failing_engine, make_schema):
        service = InputValidationService(engine=failing_engine)

        with capture_logs() as logs:
            outcome = service.validate_and_sanitize_field("abc", make_schema("Notes"))

        assert outcome == FieldOutcome(False, "", ["Validation error occurred"], [])
        assert logs[-1]['log_level'] == 'error'
        assert logs[-1]['event'] == "Error validating field"


class TestValidateFormSubmission:

    def test_valid_submission(self, service, form_fields):
        values = {"full_name": "Ada Lovelace", "email": "ada@example.com", "age": 36}

        result = service.validate_form_submission(values, form_fields)

        assert result.is_valid
        assert result.errors == []

    def test_errors_are_aggregated_in_field_order(self, service, form_fields):
        values = {"email": "not-an-email", "age": "old"}

        result = service.validate_form_submission(values, form_fields)

        assert result.errors == [
            "Full Name is required.",
            "Email must be a valid email address.",
            "Age must be a valid integer.",
        ]

    def test_hidden_fields_are_skipped(self, service, form_fields):
        values = {"full_name": "Ada", "code": "DROP TABLE x"}

        assert service.validate_form_submission(values, form_fields).is_valid

    def test_excessive_special_characters_are_rejected(self, service):
        fields = [FieldSchema(display_name="Notes", name="notes")]

        with capture_logs() as logs:
            result = service.validate_form_submission({"notes": "<<<<>>>>{{}}"}, fields)

        assert result.errors == ["Notes contains an excessive number of special characters."]
        events = [log['event'] for log in logs if log['log_level'] == 'warning']
        assert "Potentially malicious input detected" in events
        assert "Form submission validation failed" in events

    def test_warnings_are_collected(self, service):
        fields = [FieldSchema(display_name="Code", name="code", validation_regex="[")]

        result = service.validate_form_submission({"code": "abc"}, fields)

        assert result.is_valid
        assert result.warnings == ["Invalid regex pattern for Code. Regex validation skipped."]

    def test_unexpected_error_becomes_failed_result(self, failing_engine, form_fields):
        service = InputValidationService(engine=failing_engine)

        with capture_logs() as logs:
            result = service.validate_form_submission({"full_name": "Ada"}, form_fields)

        assert result.errors == ["Validation error occurred"]
        assert logs[-1]['log_level'] == 'error'


class TestValidateCsvUpload:

    def test_clean_upload_rewinds_stream(self, service):
        stream = io.BytesIO(b"name,amount\nwidget,5\n")

        result = service.validate_csv_upload(stream, "items.csv", 22, "text/csv")

        assert result.is_valid
        assert stream.tell() == 0

    def test_file_policy_failure_is_returned_before_reading(self, service):
        stream = io.BytesIO(b"=1+1\n")

        result = service.validate_csv_upload(stream, "items.txt", 5, "text/plain")

        assert result.errors == ["File type '.txt' is not allowed. Allowed file types: .csv."]
        assert stream.tell() == 0

    def test_formula_cells_after_byte_order_mark(self, service):
        stream = io.BytesIO(b"\xef\xbb\xbf=cmd,1\nsafe,2\n")

        result = service.validate_csv_upload(stream, "items.csv", 20, "text/csv")

        assert result.errors == [
            "Row 1, column 1 contains a value that could be interpreted as a spreadsheet formula."
        ]

    def test_non_utf8_content(self, service):
        stream = io.BytesIO(b"\xff\xfe\x00a,b")

        result = service.validate_csv_upload(stream, "items.csv", 6, "text/csv")

        assert result.errors == ["CSV file must be UTF-8 encoded."]

    def test_non_utf8_content_rewinds_stream(self, service):
        stream = io.BytesIO(b"a,b\n\xff\xfe,c\n")

        service.validate_csv_upload(stream, "data.csv", 10, "text/csv")

        assert stream.tell() == 0

    def test_rejected_content_rewinds_stream(self, service):
        stream = io.BytesIO(b"=1+1,x\n")

        result = service.validate_csv_upload(stream, "data.csv", 7, "text/csv")

        assert not result.is_valid
        assert stream.tell() == 0

    def test_text_and_non_seekable_streams(self, service):
        assert service.validate_csv_upload(io.StringIO("a,b\n"), "x.csv", 4, "text/csv").is_valid
        assert service.validate_csv_upload(NonSeekableStream(b"a,b\n"), "x.csv", 4, "text/csv").is_valid

    def test_empty_upload(self, service):
        result = service.validate_csv_upload(io.BytesIO(b""), "x.csv", 0, "text/csv")
        assert result.errors == ["CSV file is empty."]

    def test_unexpected_error_becomes_failed_result(self, failing_engine):
        service = InputValidationService(engine=failing_engine)

        with capture_logs():
            result = service.validate_csv_upload(io.BytesIO(b"a"), "x.csv", 1, "text/csv")

        assert result.errors == ["Validation error occurred"]


class TestSanitizeComments:

    @pytest.mark.parametrize("text", [None, "", "  "])
    def test_blank_comments(self, service, text):
        assert service.sanitize_comments(text) == ""

    def test_comments_are_encoded(self, service):
        assert service.sanitize_comments('Looks "good" <3') == "Looks &quot;good&quot; &lt;3"

    def test_unexpected_error_gives_empty_string(self, failing_engine):
        service = InputValidationService(engine=failing_engine)

        with capture_logs() as logs:
            assert service.sanitize_comments("fine") == ""

        assert logs[-1]['event'] == "Error sanitizing comments"
