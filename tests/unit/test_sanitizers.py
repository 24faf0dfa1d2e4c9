"""
Sanitizer tests: entity encoding by data type, script scheme breaking for free
text and comment sanitizing.
"""

import pytest

from fieldguard.utils.sanitizers import Sanitizer, html_encode


@pytest.fixture
def sanitizer():
    return Sanitizer()


class TestHtmlEncode:

    def test_encodes_markup_characters(self):
        assert html_encode('<b>"Tom\'s"</b> & co') == "&lt;b&gt;&quot;Tom&#39;s&quot;&lt;/b&gt; &amp; co"

    def test_leaves_plain_text_unchanged(self):
        assert html_encode("Hello world 123") == "Hello world 123"


class TestSanitizeInput:

    @pytest.mark.parametrize("data_type", ["text", "nvarchar(500)", "html", "int", "email", ""])
    def test_plain_text_is_a_fixed_point(self, sanitizer, make_schema, data_type):
        schema = make_schema(data_type=data_type)
        value = "Plain words, numbers 42 and symbols like #!"

        once = sanitizer.sanitize_input(value, schema)

        assert once == value
        assert sanitizer.sanitize_input(once, schema) == value

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty_input_gives_empty_output(self, sanitizer, make_schema, raw):
        assert sanitizer.sanitize_input(raw, make_schema(data_type="text")) == ""

    def test_free_text_breaks_script_schemes(self, sanitizer, make_schema):
        schema = make_schema(data_type="textarea")

        assert sanitizer.sanitize_input("javascript:alert(1)", schema) == "java-script:alert(1)"
        assert sanitizer.sanitize_input("JavaScript:x", schema) == "Java-Script:x"
        assert sanitizer.sanitize_input("see VBScript:run", schema) == "see VB-Script:run"

    def test_free_text_family_includes_length_suffixed_types(self, sanitizer, make_schema):
        schema = make_schema(data_type="NVARCHAR(500)")
        assert sanitizer.sanitize_input("javascript:x", schema) == "java-script:x"

    def test_other_types_are_only_encoded(self, sanitizer, make_schema):
        schema = make_schema(data_type="url")
        assert sanitizer.sanitize_input("javascript:x", schema) == "javascript:x"
        assert sanitizer.sanitize_input("a<b", schema) == "a&lt;b"

    def test_html_fields_are_fully_encoded(self, sanitizer, make_schema):
        schema = make_schema(data_type="html")
        assert sanitizer.sanitize_input("<p>hi</p>", schema) == "&lt;p&gt;hi&lt;/p&gt;"

    def test_encoded_script_tag_is_encoded_again(self, sanitizer, make_schema):
        schema = make_schema(data_type="text")
        assert sanitizer.sanitize_input("&#60;script", schema) == "&amp;#60;script"


class TestSanitizeComments:

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_comments(self, sanitizer, text):
        assert sanitizer.sanitize_comments(text) == ""

    def test_comments_use_free_text_rules(self, sanitizer):
        assert sanitizer.sanitize_comments("<i>ok</i> javascript:x") == "&lt;i&gt;ok&lt;/i&gt; java-script:x"
