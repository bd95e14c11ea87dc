"""Derived views over an already-fetched sector's product list.

Pure, in-memory helpers: they filter and sort what is on screen and never
trigger a generation call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..schemas.trend_schema import ProductTrend

SORT_FIELDS: dict[str, str] = {
    "demandRate": "demand_rate",
    "profitabilityScore": "profitability_score",
}

SORT_NONE = "none"
SORT_DESC = "desc"
SORT_ASC = "asc"

# unsorted → descending → ascending → unsorted
_NEXT_DIRECTION = {SORT_NONE: SORT_DESC, SORT_DESC: SORT_ASC, SORT_ASC: SORT_NONE}


@dataclass(frozen=True)
class SortState:
    field: Optional[str] = None
    direction: str = SORT_NONE

    @property
    def is_sorted(self) -> bool:
        return self.field is not None and self.direction != SORT_NONE


def next_sort_state(state: SortState, field: str) -> SortState:
    """Advance the three-state toggle. Picking a new field starts at descending."""
    if field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {field}")
    if state.field != field or not state.is_sorted:
        return SortState(field=field, direction=SORT_DESC)
    direction = _NEXT_DIRECTION[state.direction]
    if direction == SORT_NONE:
        return SortState()
    return SortState(field=field, direction=direction)


def filter_products(products: Sequence[ProductTrend], query: str) -> list[ProductTrend]:
    """Case-insensitive substring match on the product name OR any supplier."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(products)
    return [
        product
        for product in products
        if needle in product.name.lower()
        or any(needle in supplier.lower() for supplier in product.suppliers)
    ]


def sort_products(products: Sequence[ProductTrend], state: SortState) -> list[ProductTrend]:
    """Stable sort on one numeric field; products without a value go last."""
    if not state.is_sorted:
        return list(products)
    attr = SORT_FIELDS[state.field]
    present = [p for p in products if getattr(p, attr) is not None]
    missing = [p for p in products if getattr(p, attr) is None]
    # sorted() is stable for reverse=True as well: ties keep input order.
    present = sorted(present, key=lambda p: getattr(p, attr), reverse=state.direction == SORT_DESC)
    return present + missing


def derive_product_view(
    products: Sequence[ProductTrend],
    query: str = "",
    state: Optional[SortState] = None,
) -> list[ProductTrend]:
    return sort_products(filter_products(products, query), state or SortState())
