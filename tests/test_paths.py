"""Tests for field path parsing and path based access."""

import pytest

from syncstate import (
    MISSING,
    get_value_at_path,
    has_value_at_path,
    parse_field_path,
    set_value_at_path,
    stringify_field_path,
)


class TestParseFieldPath:
    """Dot and bracket notation parsing"""

    def test_brackets_and_dots(self):
        assert parse_field_path("addresses[0].street") == ["addresses", 0, "street"]

    def test_nested_indices(self):
        assert parse_field_path("users[0].addresses[1].street") == ["users", 0, "addresses", 1, "street"]

    def test_numeric_name_segments_become_indices(self):
        assert parse_field_path("tags.1") == ["tags", 1]

    def test_empty_path(self):
        assert parse_field_path("") == []

    def test_redundant_dots_are_dropped(self):
        assert parse_field_path("a..b.") == ["a", "b"]


class TestStringifyFieldPath:
    """Rendering segments back to a path string"""

    def test_indices_use_brackets(self):
        assert stringify_field_path(["a", 1]) == "a[1]"

    def test_mixed_segments(self):
        assert stringify_field_path(["users", 0, "addresses", 1, "street"]) == "users[0].addresses[1].street"

    def test_empty(self):
        assert stringify_field_path([]) == ""

    @pytest.mark.parametrize("path", [
        "name",
        "address.city",
        "addresses[0].street",
        "matrix[0][1]",
    ])
    def test_canonical_round_trip(self, path):
        assert stringify_field_path(parse_field_path(path)) == path


class TestGetValueAtPath:
    """Reading values by path"""

    def test_nested_value(self):
        model = {"addresses": [{"street": "Main"}]}
        assert get_value_at_path(model, "addresses[0].street") == "Main"

    def test_empty_path_returns_root(self):
        model = {"a": 1}
        assert get_value_at_path(model, "") is model

    def test_missing_returns_default(self):
        assert get_value_at_path({"a": None}, "a.b") is None
        assert get_value_at_path({"a": 1}, "a.b", MISSING) is MISSING
        assert get_value_at_path({"a": [1]}, "a[5]", "fallback") == "fallback"

    def test_stored_none_is_present(self):
        assert has_value_at_path({"a": None}, "a")
        assert not has_value_at_path({}, "a")


class TestSetValueAtPath:
    """Writing values by path"""

    def test_get_after_set(self):
        model = {}
        set_value_at_path(model, "profile.name", "Ada")
        assert get_value_at_path(model, "profile.name") == "Ada"

    def test_creates_list_for_index_segment(self):
        model = {}
        set_value_at_path(model, "items[1].label", "second")
        assert model == {"items": [None, {"label": "second"}]}

    def test_replaces_non_container_intermediate(self):
        model = {"address": "unknown"}
        set_value_at_path(model, "address.city", "Paris")
        assert model == {"address": {"city": "Paris"}}

    def test_empty_path_is_noop(self):
        model = {"a": 1}
        set_value_at_path(model, "", {"b": 2})
        assert model == {"a": 1}

    def test_unwritable_root_is_ignored(self):
        set_value_at_path("text", "a.b", 1)
        set_value_at_path(None, "a", 1)
