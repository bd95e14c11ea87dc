"""Derived-view tests — product filtering and the three-state sort toggle."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from trend_analyzer.schemas.trend_schema import ProductTrend
from trend_analyzer.services.product_view import (
    SortState,
    derive_product_view,
    filter_products,
    next_sort_state,
    sort_products,
)


def _product(name, demand, score=None, suppliers=()):
    return ProductTrend(
        name=name,
        demand_rate=demand,
        regions="Global",
        reasons="Trend",
        profitability_score=score,
        suppliers=list(suppliers),
    )


PRODUCTS = [
    _product("Smart Ring", 18.0, 8, ["Oura", "Ultrahuman"]),
    _product("Air Purifier", 25.0, 6, ["Dyson"]),
    _product("Portable Blender", 12.0, None, ["BlendJet"]),
    _product("Solar Charger", 25.0, 9, ["Anker"]),
]


def _names(products):
    return [p.name for p in products]


class TestFilter:
    def test_matches_product_name_case_insensitive(self):
        assert _names(filter_products(PRODUCTS, "smart")) == ["Smart Ring"]

    def test_matches_supplier_name(self):
        assert _names(filter_products(PRODUCTS, "ANKER")) == ["Solar Charger"]

    def test_empty_query_returns_everything(self):
        assert _names(filter_products(PRODUCTS, "")) == _names(PRODUCTS)
        assert _names(filter_products(PRODUCTS, "   ")) == _names(PRODUCTS)

    def test_no_match_returns_empty_list(self):
        assert filter_products(PRODUCTS, "zzz-nothing") == []


class TestSortToggle:
    def test_cycle_none_desc_asc_none(self):
        state = SortState()
        state = next_sort_state(state, "demandRate")
        assert (state.field, state.direction) == ("demandRate", "desc")
        state = next_sort_state(state, "demandRate")
        assert (state.field, state.direction) == ("demandRate", "asc")
        state = next_sort_state(state, "demandRate")
        assert state == SortState()

    def test_switching_field_starts_descending(self):
        state = next_sort_state(SortState(), "demandRate")
        state = next_sort_state(state, "profitabilityScore")
        assert (state.field, state.direction) == ("profitabilityScore", "desc")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            next_sort_state(SortState(), "name")

    def test_three_toggles_restore_original_order(self):
        state = SortState()
        for _ in range(3):
            state = next_sort_state(state, "demandRate")
        assert _names(sort_products(PRODUCTS, state)) == _names(PRODUCTS)


class TestSort:
    def test_descending_is_stable(self):
        state = SortState(field="demandRate", direction="desc")
        assert _names(sort_products(PRODUCTS, state)) == [
            "Air Purifier", "Solar Charger", "Smart Ring", "Portable Blender",
        ]

    def test_ascending_is_stable(self):
        state = SortState(field="demandRate", direction="asc")
        assert _names(sort_products(PRODUCTS, state)) == [
            "Portable Blender", "Smart Ring", "Air Purifier", "Solar Charger",
        ]

    def test_missing_values_go_last(self):
        for direction in ("asc", "desc"):
            state = SortState(field="profitabilityScore", direction=direction)
            assert _names(sort_products(PRODUCTS, state))[-1] == "Portable Blender"

    def test_input_is_not_mutated(self):
        before = _names(PRODUCTS)
        sort_products(PRODUCTS, SortState(field="demandRate", direction="desc"))
        assert _names(PRODUCTS) == before


class TestDerivedView:
    def test_filter_then_sort(self):
        state = SortState(field="profitabilityScore", direction="desc")
        view = derive_product_view(PRODUCTS, "ar", state)
        assert _names(view) == ["Solar Charger", "Smart Ring"]

    def test_defaults_leave_list_untouched(self):
        assert _names(derive_product_view(PRODUCTS)) == _names(PRODUCTS)

    def test_explicit_none_state_keeps_model_order(self):
        assert _names(derive_product_view(PRODUCTS, "", None)) == _names(PRODUCTS)
