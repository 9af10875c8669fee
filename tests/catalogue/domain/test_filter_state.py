"""Tests for FilterState: value semantics, storage normalization and sort lookup."""

import pytest
from pydantic import ValidationError

from catalogue.filters import FilterState, normalize_storage, resolve_sort
from storefront.errors import InvalidFilterError
from storefront.store import Direction, Sort


class TestNormalizeStorage:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("128GB", 128), ("512GB", 512), ("1TB", 1000), ("2TB", 2000), (" 256 gb ", 256)],
    )
    def test_converts_to_gigabytes(self, value, expected):
        assert normalize_storage(value) == expected

    @pytest.mark.parametrize("value", ["512", "1PB", "GB", "", "1.5TB", "-1GB"])
    def test_rejects_unsupported_values(self, value):
        with pytest.raises(InvalidFilterError):
            normalize_storage(value)


class TestResolveSort:
    def test_known_key(self):
        assert resolve_sort("price-desc") == Sort(field="price", direction=Direction.DESC)

    def test_unknown_key_falls_back_to_name_ascending(self):
        assert resolve_sort("popularity") == Sort(field="name", direction=Direction.ASC)


class TestFilterState:
    def test_default_is_unconstrained(self):
        state = FilterState.default()
        assert state.search == ""
        assert state.category == "All"
        assert state.sort_by == "name-asc"
        assert state.colors == ()
        assert state.storage == ()
        assert state.active_filter_count == 0

    def test_states_are_immutable(self):
        state = FilterState()
        with pytest.raises(ValidationError):
            state.category = "Laptops"

    def test_replace_returns_new_state(self):
        state = FilterState()
        narrowed = state.replace(category="Laptops")
        assert narrowed.category == "Laptops"
        assert state.category == "All"

    def test_duplicate_selections_collapse_keeping_order(self):
        state = FilterState(colors=("Silver", "Pink", "Silver"))
        assert state.colors == ("Silver", "Pink")

    def test_invalid_storage_is_rejected_on_construction(self):
        with pytest.raises(ValidationError):
            FilterState(storage=("huge",))

    def test_invalid_storage_is_rejected_on_replace(self):
        with pytest.raises(ValidationError):
            FilterState().replace(storage=("10XB",))

    def test_toggle_adds_then_removes(self):
        state = FilterState().toggled("colors", "Silver").toggled("colors", "Pink")
        assert state.colors == ("Silver", "Pink")
        assert state.toggled("colors", "Silver").colors == ("Pink",)

    def test_toggle_rejects_single_value_fields(self):
        with pytest.raises(ValueError):
            FilterState().toggled("category", "Laptops")

    def test_cleared_resets_everything(self):
        state = FilterState(search="pro", category="Laptops", colors=("Silver",), storage=("1TB",))
        assert state.cleared() == FilterState()

    def test_storage_gb(self):
        assert FilterState(storage=("512GB", "1TB")).storage_gb == (512, 1000)

    def test_unknown_sort_key_still_resolves(self):
        assert FilterState(sort_by="bogus").sort == Sort(field="name", direction=Direction.ASC)

    def test_active_filter_count_ignores_search_and_sort(self):
        state = FilterState(
            search="pro",
            sort_by="price-desc",
            category="Laptops",
            price_range="1000-2000",
            colors=("Silver", "Space Black"),
            storage=("1TB",),
        )
        assert state.active_filter_count == 5
