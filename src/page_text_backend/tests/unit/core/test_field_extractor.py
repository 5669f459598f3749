"""
Tests for editable field extraction.

Every test checks the fields against the raw source bytes, since the
offsets are what the patch applier later splices.
"""

import pytest

from page_text_backend.core.template_parser import parse_template
from page_text_backend.core.text_fields import (
    FieldExtractor,
    FieldKind,
    extract_text_fields,
)
from page_text_backend.exceptions import TemplateParseError


def _assert_fields_match_source(source, fields):
    source_bytes = source.encode("utf-8")
    for text_field in fields:
        span = source_bytes[text_field.offset:text_field.offset + text_field.length]
        assert span.decode("utf-8") == text_field.value
        assert text_field.length == len(text_field.value.encode("utf-8"))


class TestTextFields:
    """Tests for text content fields."""

    def test_basic_text_field(self):
        fields = extract_text_fields("<section><h1>Hello</h1></section>")
        assert len(fields) == 1
        text_field = fields[0]
        assert text_field.id == "text:13"
        assert text_field.label == "h1 text"
        assert text_field.value == "Hello"
        assert text_field.kind is FieldKind.TEXT
        assert text_field.offset == 13
        assert text_field.length == 5
        assert text_field.group == "section"

    def test_multibyte_text_uses_byte_offsets(self):
        source = "<p>café 🎉</p><p>Next</p>"
        fields = extract_text_fields(source)
        assert [f.value for f in fields] == ["café 🎉", "Next"]
        assert fields[0].offset == 3
        assert fields[0].length == 10
        assert fields[1].id == "text:20"
        _assert_fields_match_source(source, fields)

    def test_extraction_is_deterministic(self):
        source = '<main><h1>Title</h1><img alt="Picture"><p>Body</p><h2></h2></main>'
        assert extract_text_fields(source) == extract_text_fields(source)

    def test_text_keeps_surrounding_whitespace(self):
        fields = extract_text_fields("<p>\n  Hello there\n</p>")
        assert fields[0].value == "\n  Hello there\n"
        assert fields[0].multiline is True

    def test_long_single_line_text_is_multiline(self):
        long_text = "word " * 20
        fields = extract_text_fields(f"<p>{long_text}</p>")
        assert fields[0].multiline is True

    def test_short_text_is_single_line(self):
        fields = extract_text_fields("<p>Short</p>")
        assert fields[0].multiline is False

    def test_text_outside_elements(self):
        fields = extract_text_fields("Loose text")
        assert fields[0].label == "text"
        assert fields[0].group == ""


class TestWhitespace:
    """Tests for whitespace-only text."""

    def test_indentation_is_not_a_field(self):
        source = "<div>\n  <p>Hi</p>\n</div>"
        fields = extract_text_fields(source)
        assert [f.value for f in fields] == ["Hi"]

    def test_whitespace_content_of_content_element_is_kept(self):
        fields = extract_text_fields("<p> </p>")
        assert len(fields) == 1
        assert fields[0].value == " "
        assert fields[0].offset == 3

    def test_whitespace_in_non_content_element_is_dropped(self):
        assert extract_text_fields("<div> </div>") == []

    def test_whitespace_beside_markup_is_dropped(self):
        fields = extract_text_fields("<p> <b>Bold</b> </p>")
        assert [f.value for f in fields] == ["Bold"]


class TestPhantomFields:
    """Tests for insertion points in empty content elements."""

    def test_empty_heading_gets_phantom_field(self):
        fields = extract_text_fields("<h2></h2>")
        assert len(fields) == 1
        phantom = fields[0]
        assert phantom.id == "text:4"
        assert phantom.offset == 4
        assert phantom.length == 0
        assert phantom.value == ""
        assert phantom.label == "h2 text"

    def test_phantom_after_attributes(self):
        source = '<p class="lead" data-x={a > b}></p>'
        fields = extract_text_fields(source)
        assert fields[0].offset == source.index("></p>") + 1

    def test_no_phantom_for_non_content_element(self):
        assert extract_text_fields("<div></div>") == []

    def test_no_phantom_for_self_closing_element(self):
        assert extract_text_fields("<p />") == []

    def test_no_phantom_when_element_holds_expression(self):
        assert extract_text_fields("<p>{message}</p>") == []

    def test_phantom_inherits_group(self):
        fields = extract_text_fields("<footer><p></p></footer>")
        assert fields[0].group == "footer"


class TestAttributeFields:
    """Tests for attribute and prop fields."""

    def test_literal_alt_is_extracted_dynamic_src_is_not(self):
        source = '<img alt="A cat" src={dynamicUrl}>'
        fields = extract_text_fields(source)
        assert len(fields) == 1
        alt = fields[0]
        assert alt.id == "attr:10:alt"
        assert alt.kind is FieldKind.ATTRIBUTE
        assert alt.label == "img alt"
        assert alt.value == "A cat"

    def test_expression_valued_alt_is_skipped(self):
        assert extract_text_fields("<img alt={altText}>") == []

    def test_short_values_are_skipped(self):
        assert extract_text_fields('<img alt="x"><img alt=" y ">') == []

    def test_only_allowlisted_element_attributes(self):
        source = '<a href="/about" title="About us" class="nav-link">About</a>'
        fields = extract_text_fields(source)
        assert [(f.label, f.value) for f in fields] == [
            ("a title", "About us"),
            ("a text", "About"),
        ]

    def test_component_props_use_their_own_allowlist(self):
        source = '<Hero heading="Big news" href="/x" alt="Banner" />'
        fields = extract_text_fields(source)
        assert [(f.label, f.value) for f in fields] == [
            ("Hero heading", "Big news"),
            ("Hero alt", "Banner"),
        ]

    def test_element_does_not_use_component_props(self):
        assert extract_text_fields('<div heading="Not content"></div>') == []

    def test_single_quoted_value(self):
        source = "<input placeholder='Your email'>"
        fields = extract_text_fields(source)
        assert fields[0].value == "Your email"
        _assert_fields_match_source(source, fields)

    def test_attribute_name_inside_another_value(self):
        source = "<img title=\"see alt='x'\" alt=\"Real text\">"
        fields = extract_text_fields(source)
        assert [f.value for f in fields] == ["see alt='x'", "Real text"]
        alt = fields[1]
        assert alt.id == f"attr:{source.index('Real text')}:alt"
        _assert_fields_match_source(source, fields)

    def test_multibyte_attribute_offset(self):
        source = '<p>é</p><img alt="Café sign">'
        fields = extract_text_fields(source)
        alt = fields[1]
        assert alt.offset == len('<p>é</p><img alt="'.encode("utf-8"))
        _assert_fields_match_source(source, fields)

    def test_attribute_beyond_open_tag_window_is_dropped(self):
        source = '<img data-long="' + "x" * 50 + '" alt="Far away">'
        document = parse_template(source)
        assert FieldExtractor(open_tag_window=20).extract(document, source) == []
        assert len(FieldExtractor().extract(document, source)) == 1


class TestSkipRegions:
    """Tests for code regions that are never editable."""

    def test_code_regions_are_skipped(self):
        source = (
            "---\nconst title = \"Hi\";\n---\n"
            "<head><title>Page</title></head>"
            "<style>h1 { color: red; }</style>"
            "<script>let x = \"<p>no</p>\";</script>"
            "<pre>preformatted</pre>"
            "<code>inline()</code>"
            "<p>{title}</p>"
            "<h1>Yes</h1>"
        )
        fields = extract_text_fields(source)
        assert [f.value for f in fields] == ["Yes"]

    def test_markup_inside_expressions_is_skipped(self):
        source = "<ul>{items.map(item => <li>Static</li>)}</ul>"
        assert extract_text_fields(source) == []

    def test_attributes_inside_skip_regions_are_skipped(self):
        assert extract_text_fields('<pre><img alt="Diagram"></pre>') == []


class TestGrouping:
    """Tests for landmark-based groups."""

    def test_repeated_landmarks_are_numbered(self):
        source = (
            "<section><p>One</p></section>"
            "<section><p>Two</p></section>"
            "<footer><p>Three</p></footer>"
            "<p>Four</p>"
        )
        fields = extract_text_fields(source)
        assert [(f.value, f.group) for f in fields] == [
            ("One", "section"),
            ("Two", "section:2"),
            ("Three", "footer"),
            ("Four", ""),
        ]

    def test_nearest_landmark_wins(self):
        source = "<main><h1>Top</h1><article><p>Inner</p></article></main>"
        fields = extract_text_fields(source)
        assert [f.group for f in fields] == ["main", "article"]

    def test_counters_restart_per_extraction(self):
        source = "<section><p>One</p></section>"
        first = extract_text_fields(source)
        second = extract_text_fields(source)
        assert first[0].group == second[0].group == "section"


class TestExtractionFailures:
    """Tests for sources that cannot be parsed."""

    def test_parse_failure_is_fatal(self):
        with pytest.raises(TemplateParseError):
            extract_text_fields("<p>Hello</span>")

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            FieldExtractor(open_tag_window=0)
