"""
Unit tests for the typed field materializer.

Content types are built in memory; no database is involved.
"""

import json

import pytest
from starlette.datastructures import FormData

from portal.features.dynamic_content.content import (
    ContentItem,
    ContentPart,
    ContentType,
    DataType,
    FieldDefinition,
    FieldKind,
    UnderlyingDataType,
)
from portal.features.dynamic_content.exceptions import ContentDefinitionError
from portal.features.dynamic_content_viewer.exceptions import FieldCoercionError
from portal.features.dynamic_content_viewer.materializer import COERCERS, process_fields, read_raw_value

BOOLEAN = DataType("Boolean", UnderlyingDataType.BOOLEAN)
INTEGER = DataType("Integer", UnderlyingDataType.INTEGER)
FLOAT = DataType("Float", UnderlyingDataType.FLOAT)
STRING = DataType("String", UnderlyingDataType.STRING)
DATE = DataType("Date", UnderlyingDataType.DATE_TIME)
RICH_TEXT = DataType("Rich Text", UnderlyingDataType.STRING)
MARKDOWN = DataType("Markdown", UnderlyingDataType.STRING)

COUNTRY = ContentType(
    name="Country",
    field_definitions=(FieldDefinition("Code", STRING),),
)
ADDRESS = ContentType(
    name="Address",
    field_definitions=(
        FieldDefinition("City", STRING),
        FieldDefinition("Country", content_type=COUNTRY),
    ),
)
ARTICLE = ContentType(
    name="Article",
    field_definitions=(
        FieldDefinition("Title", STRING),
        FieldDefinition("Body", RICH_TEXT),
        FieldDefinition("Summary", MARKDOWN),
        FieldDefinition("Featured", BOOLEAN),
        FieldDefinition("Views", INTEGER),
        FieldDefinition("Rating", FLOAT),
        FieldDefinition("Published", DATE),
        FieldDefinition("Address", content_type=ADDRESS),
    ),
)


def fresh_part() -> ContentPart:
    return ContentPart.from_content_type(ARTICLE)


def values(part: ContentPart) -> dict:
    return part.to_dict()


class TestReadRawValue:
    def test_joins_repeated_keys_from_multidict(self):
        form = FormData([("Featured", "true"), ("Featured", "false")])
        assert read_raw_value(form, "Featured") == "true;false"

    def test_missing_key_is_none(self):
        assert read_raw_value(FormData([]), "Featured") is None
        assert read_raw_value({}, "Featured") is None

    def test_plain_mapping_with_list_value(self):
        assert read_raw_value({"Featured": ["true", "false"]}, "Featured") == "true;false"

    def test_plain_mapping_with_string_value(self):
        assert read_raw_value({"Title": "Hello"}, "Title") == "Hello"


class TestBooleanFields:
    def test_checked_checkbox_pair_is_true(self):
        part = fresh_part()
        process_fields(part, FormData([("Featured", "true"), ("Featured", "false")]))
        assert part["Featured"].value is True

    def test_joined_string_is_true(self):
        part = fresh_part()
        process_fields(part, {"Featured": "true;false"})
        assert part["Featured"].value is True

    def test_unchecked_is_false(self):
        part = fresh_part()
        process_fields(part, {"Featured": "false"})
        assert part["Featured"].value is False

    def test_absent_key_is_false(self):
        part = fresh_part()
        part["Featured"].value = True
        process_fields(part, {})
        assert part["Featured"].value is False


class TestNumericFields:
    @pytest.mark.parametrize(
        "raw, expected",
        [("42", 42), ("", 0), ("abc", 0), ("-7", -7), ("+8", 8), (" 12 ", 12), ("1_000", 0), ("\u0663", 0), ("4.0", 0)],
    )
    def test_integer(self, raw, expected):
        part = fresh_part()
        process_fields(part, {"Views": raw})
        assert part["Views"].value == expected
        assert isinstance(part["Views"].value, int)

    def test_integer_absent_is_zero(self):
        part = fresh_part()
        part["Views"].value = 99
        process_fields(part, {})
        assert part["Views"].value == 0

    @pytest.mark.parametrize(
        "raw, expected",
        [("4.5", 4.5), ("3", 3.0), ("", 0.0), ("n/a", 0.0), ("nan", 0.0), ("inf", 0.0), ("-Infinity", 0.0), ("1e999", 0.0)],
    )
    def test_float(self, raw, expected):
        part = fresh_part()
        process_fields(part, {"Rating": raw})
        assert part["Rating"].value == expected
        assert isinstance(part["Rating"].value, float)


class TestTextFields:
    def test_rich_text_is_html_escaped(self):
        part = fresh_part()
        process_fields(part, {"Body": "<b>hi</b>"})
        assert part["Body"].value == "&lt;b&gt;hi&lt;/b&gt;"

    @pytest.mark.parametrize("form", [{"Body": ""}, {}])
    def test_rich_text_empty_or_absent(self, form):
        part = fresh_part()
        process_fields(part, form)
        assert part["Body"].value == ""

    def test_markdown_is_verbatim(self):
        part = fresh_part()
        process_fields(part, {"Summary": "**hi** <i>there</i>"})
        assert part["Summary"].value == "**hi** <i>there</i>"

    def test_markdown_absent_is_empty(self):
        part = fresh_part()
        process_fields(part, {})
        assert part["Summary"].value == ""

    def test_other_underlying_types_are_verbatim(self):
        part = fresh_part()
        process_fields(part, {"Title": "Hello <world>", "Published": "2024-05-01T10:00:00"})
        assert part["Title"].value == "Hello <world>"
        assert part["Published"].value == "2024-05-01T10:00:00"

    def test_text_absent_is_empty(self):
        part = fresh_part()
        part["Title"].value = "old"
        process_fields(part, {})
        assert part["Title"].value == ""


class TestNestedParts:
    def test_nested_key_sets_nested_field(self):
        part = fresh_part()
        process_fields(part, {"Address/City": "Springfield"})
        assert part["Address"].value["City"].value == "Springfield"

    def test_prefixes_compose_across_levels(self):
        part = fresh_part()
        process_fields(part, {"Address/Country/Code": "NZ", "Code": "ignored", "Country/Code": "ignored"})
        assert part["Address"].value["Country"].value["Code"].value == "NZ"

    def test_unqualified_key_does_not_reach_nested_field(self):
        part = fresh_part()
        process_fields(part, {"City": "Springfield"})
        assert part["Address"].value["City"].value == ""

    def test_explicit_prefix_is_applied(self):
        address = ContentPart.from_content_type(ADDRESS)
        process_fields(address, {"Location/City": "Shelbyville"}, prefix="Location/")
        assert address["City"].value == "Shelbyville"

    def test_absent_nested_part_is_skipped(self):
        part = fresh_part()
        part["Address"].value = None

        process_fields(part, {"Address/City": "Springfield", "Title": "Still set"})

        assert part["Address"].value is None
        assert part["Title"].value == "Still set"


class TestWholeTree:
    FORM = FormData(
        [
            ("Title", "Hello"),
            ("Body", "<p>x</p>"),
            ("Summary", "# Heading"),
            ("Featured", "true"),
            ("Featured", "false"),
            ("Views", "12"),
            ("Rating", "4.25"),
            ("Published", "2024-01-01"),
            ("Address/City", "Springfield"),
            ("Address/Country/Code", "US"),
        ]
    )

    def test_every_field_is_typed(self):
        part = fresh_part()
        process_fields(part, self.FORM)

        assert values(part) == {
            "Title": "Hello",
            "Body": "&lt;p&gt;x&lt;/p&gt;",
            "Summary": "# Heading",
            "Featured": True,
            "Views": 12,
            "Rating": 4.25,
            "Published": "2024-01-01",
            "Address": {"City": "Springfield", "Country": {"Code": "US"}},
        }

    def test_idempotent_on_fresh_items(self):
        first = ContentItem(content=fresh_part())
        second = ContentItem(content=fresh_part())

        process_fields(first.content, self.FORM)
        process_fields(second.content, self.FORM)

        assert values(first.content) == values(second.content)

    def test_repeat_on_same_part_is_stable(self):
        part = fresh_part()
        process_fields(part, self.FORM)
        once = values(part)
        process_fields(part, self.FORM)
        assert values(part) == once

    def test_returns_nothing(self):
        assert process_fields(fresh_part(), {}) is None

    def test_does_not_add_or_remove_fields(self):
        part = fresh_part()
        process_fields(part, {"Unknown": "x", "Address/Unknown": "y"})
        assert list(part.fields) == [definition.name for definition in ARTICLE.field_definitions]
        assert list(part["Address"].value.fields) == ["City", "Country"]


class TestStrictMode:
    def test_collects_every_unparseable_key(self):
        part = fresh_part()
        form = {"Views": "many", "Rating": "high", "Title": "Kept", "Address/City": "Springfield"}

        with pytest.raises(FieldCoercionError) as exc_info:
            process_fields(part, form, strict=True)

        assert set(exc_info.value.field_errors) == {"Views", "Rating"}
        assert part["Title"].value == "Kept"
        assert part["Address"].value["City"].value == "Springfield"
        assert part["Views"].value == 0

    def test_missing_keys_still_default(self):
        part = fresh_part()
        process_fields(part, {}, strict=True)
        assert part["Views"].value == 0
        assert part["Rating"].value == 0.0

    def test_nested_errors_use_qualified_keys(self):
        scores = ContentType("Scores", (FieldDefinition("Total", INTEGER),))
        outer = ContentType("Outer", (FieldDefinition("Scores", content_type=scores),))
        part = ContentPart.from_content_type(outer)

        with pytest.raises(FieldCoercionError) as exc_info:
            process_fields(part, {"Scores/Total": "ten"}, strict=True)

        assert list(exc_info.value.field_errors) == ["Scores/Total"]

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity", "1e999"])
    def test_non_finite_floats_are_rejected(self, raw):
        part = fresh_part()

        with pytest.raises(FieldCoercionError) as exc_info:
            process_fields(part, {"Rating": raw}, strict=True)

        assert list(exc_info.value.field_errors) == ["Rating"]
        assert part["Rating"].value == 0.0
        json.dumps(part.to_dict(), allow_nan=False)

    @pytest.mark.parametrize("raw", ["1_000", "\u0663", "12abc"])
    def test_integer_text_outside_ascii_digits_is_rejected(self, raw):
        with pytest.raises(FieldCoercionError) as exc_info:
            process_fields(fresh_part(), {"Views": raw}, strict=True)
        assert list(exc_info.value.field_errors) == ["Views"]

    def test_permissive_by_default(self):
        part = fresh_part()
        process_fields(part, {"Views": "many"})
        assert part["Views"].value == 0


class TestKindCoverage:
    def test_every_scalar_kind_has_a_coercion(self):
        scalar_kinds = {kind for kind in FieldKind if kind is not FieldKind.PART}
        assert scalar_kinds <= set(COERCERS)

    def test_missing_coercion_is_a_definition_error(self, monkeypatch):
        monkeypatch.delitem(COERCERS, FieldKind.FLOAT)
        with pytest.raises(ContentDefinitionError):
            process_fields(fresh_part(), {"Rating": "1.5"})
