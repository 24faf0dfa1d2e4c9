"""
Field schema model and rendering helper tests: dropdown option decoding, control
type inference, HTML input types and ValidationResult behaviour.
"""

import pytest
from pydantic import ValidationError

from fieldguard.business.field_utils import (
    decode_dropdown_options,
    determine_control_type,
    get_input_type,
)
from fieldguard.business.models import (
    ControlType,
    DataType,
    DropdownOption,
    FieldSchema,
    ValidationResult,
)


class TestDropdownDecoding:

    def test_json_string_list(self):
        assert decode_dropdown_options('["a","b"]') == [("a", "a"), ("b", "b")]

    def test_json_object_list(self):
        assert decode_dropdown_options('[{"value":"1","text":"One"}]') == [("1", "One")]

    def test_capitalized_object_keys(self):
        assert decode_dropdown_options('[{"Value":"r","Text":"Red"}]') == [("r", "Red")]

    def test_missing_object_keys_become_empty(self):
        assert decode_dropdown_options('[{"value":"1"}]') == [("1", "")]

    def test_line_separated_values(self):
        assert decode_dropdown_options("x\ny\n") == [("x", "x"), ("y", "y")]
        assert decode_dropdown_options(" a \r\nb") == [("a", "a"), ("b", "b")]

    def test_single_token_is_one_option(self):
        assert decode_dropdown_options("single") == [("single", "single")]

    def test_unusable_json_falls_back_to_single_option(self):
        assert decode_dropdown_options('["a", 1]') == [('["a", 1]', '["a", 1]')]
        assert decode_dropdown_options("{broken") == [("{broken", "{broken")]

    @pytest.mark.parametrize("blob", [None, "", "  ", "null"])
    def test_blank_and_null_give_no_options(self, blob):
        assert decode_dropdown_options(blob) == []

    def test_schema_options_property(self, make_schema):
        schema = make_schema("Colour", dropdown_options='["red"]')
        assert schema.options == [DropdownOption(value="red", text="red")]


class TestControlTypeInference:

    @pytest.mark.parametrize("data_type,expected", [
        ("bit", ControlType.CHECKBOX),
        ("date", ControlType.DATE),
        ("datetime", ControlType.DATETIME_LOCAL),
        ("datetime2", ControlType.DATETIME_LOCAL),
        ("smalldatetime", ControlType.DATETIME_LOCAL),
        ("time", ControlType.TIME),
        ("text", ControlType.TEXTAREA),
        ("ntext", ControlType.TEXTAREA),
        ("nvarchar(500)", ControlType.TEXTAREA),
        ("char(256)", ControlType.TEXTAREA),
        ("nvarchar(255)", ControlType.INPUT),
        ("nvarchar(max)", ControlType.INPUT),
        ("int", ControlType.INPUT),
        ("", ControlType.INPUT),
    ])
    def test_inferred_from_data_type(self, make_schema, data_type, expected):
        schema = make_schema(data_type=data_type)

        assert determine_control_type(schema) is expected
        assert schema.control_type_kind is expected

    def test_explicit_control_type_wins(self, make_schema):
        assert determine_control_type(make_schema(data_type="bit", control_type="Select")) is ControlType.SELECT

    def test_unknown_control_type_is_other(self, make_schema):
        assert determine_control_type(make_schema(control_type="slider")) is ControlType.OTHER

    def test_blank_control_type_is_ignored(self, make_schema):
        assert determine_control_type(make_schema(data_type="date", control_type=" ")) is ControlType.DATE


class TestInputType:

    @pytest.mark.parametrize("data_type,expected", [
        ("number", "number"),
        ("TIME", "time"),
        ("email", "email"),
        ("datetime-local", "datetime-local"),
        ("bit", "checkbox"),
        ("tinyint", "number"),
        ("bigint", "number"),
        ("money", "number"),
        ("real", "number"),
        ("decimal(18,2)", "number"),
        ("smalldatetime", "datetime-local"),
        ("nvarchar(50)", "text"),
        ("url", "text"),
        (None, "text"),
    ])
    def test_mapping(self, data_type, expected):
        assert get_input_type(data_type) == expected


class TestFieldSchema:

    def test_name_defaults_to_display_name(self):
        assert FieldSchema(display_name="Email").name == "Email"
        assert FieldSchema(display_name="Email", name="email").name == "email"

    def test_negative_max_length_is_rejected(self):
        with pytest.raises(ValidationError):
            FieldSchema(display_name="Bad", max_length=-1)

    def test_none_values_normalize(self):
        schema = FieldSchema(display_name="Loose", max_length=None, data_type=None)
        assert schema.max_length == 0
        assert schema.data_type == ""
        assert schema.data_type_kind is DataType.OTHER

    def test_schema_is_immutable(self, make_schema):
        schema = make_schema()
        with pytest.raises(ValidationError):
            schema.display_name = "Changed"

    def test_declared_length(self, make_schema):
        assert make_schema(data_type="NVARCHAR(500)").declared_length == 500
        assert make_schema(data_type="nvarchar(max)").declared_length is None
        assert make_schema(data_type="int").declared_length is None

    @pytest.mark.parametrize("token,expected", [
        ("NVARCHAR(500)", DataType.NVARCHAR),
        ("Decimal(10, 2)", DataType.DECIMAL),
        ("datetime2", DataType.DATETIME2),
        ("geography", DataType.OTHER),
        (None, DataType.OTHER),
    ])
    def test_data_type_parse(self, token, expected):
        assert DataType.parse(token) is expected


class TestValidationResult:

    def test_validity_follows_errors(self):
        result = ValidationResult.success()
        assert result.is_valid and bool(result)

        result.add_warning("just a warning")
        assert result.is_valid

        result.add_error("broken")
        assert not result.is_valid and not bool(result)

    def test_failure_and_merge_preserve_order(self):
        first = ValidationResult.failure("a", "b")
        second = ValidationResult(errors=["c"], warnings=["w"])

        first.merge(second)

        assert first.errors == ["a", "b", "c"]
        assert first.warnings == ["w"]

    def test_to_dict(self):
        data = ValidationResult.failure("x", field_name="code").to_dict()

        assert data['is_valid'] is False
        assert data['errors'] == ["x"]
        assert data['warnings'] == []
        assert data['field_name'] == "code"
        assert 'timestamp' in data
