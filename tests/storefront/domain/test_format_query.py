"""Tests for placeholder substitution in trace query text."""

import pytest

from storefront.trace import Identifier, format_query, placeholders
from storefront.trace.params import render_value


class TestRenderValue:
    def test_string_is_quote_escaped(self):
        assert render_value("O'Brien") == "O''Brien"

    def test_integer_is_rendered_in_decimal(self):
        assert render_value(42) == "42"

    def test_identifier_is_rendered_verbatim(self):
        assert render_value(Identifier("it's-an-id")) == "it's-an-id"

    def test_boolean_is_rejected(self):
        with pytest.raises(TypeError):
            render_value(True)

    def test_other_types_are_rejected(self):
        with pytest.raises(TypeError):
            render_value(1.5)


class TestFormatQuery:
    def test_substitutes_every_named_placeholder(self):
        text = "SELECT * FROM products WHERE category = '<category>' AND color IN ('<color0>', '<color1>')"
        rendered = format_query(text, {"category": "Laptops", "color0": "Silver", "color1": "Space Black"})
        assert rendered == (
            "SELECT * FROM products WHERE category = 'Laptops' AND color IN ('Silver', 'Space Black')"
        )

    def test_repeated_placeholder_is_substituted_everywhere(self):
        assert format_query("<id> = <id>", {"id": Identifier("abc")}) == "abc = abc"

    def test_unknown_placeholder_is_left_in_place(self):
        assert format_query("WHERE a = '<a>' AND b = '<b>'", {"a": "x"}) == "WHERE a = 'x' AND b = '<b>'"

    def test_no_params_returns_text_unchanged(self):
        assert format_query("SELECT 1 WHERE '<x>'") == "SELECT 1 WHERE '<x>'"

    def test_search_value_with_quote_cannot_break_out_of_literal(self):
        rendered = format_query("name ILIKE '%<search>%'", {"search": "x' OR '1'='1"})
        assert rendered == "name ILIKE '%x'' OR ''1''=''1%'"

    def test_substituted_value_is_not_rescanned(self):
        assert format_query("'<a>'", {"a": "<b>", "b": "boom"}) == "'<b>'"


class TestPlaceholders:
    def test_lists_names_in_first_appearance_order(self):
        assert placeholders("<b> <a> <b> <c>") == ["b", "a", "c"]

    def test_ignores_text_that_is_not_an_identifier(self):
        assert placeholders("a <> b AND c < 3 AND <1bad>") == []
