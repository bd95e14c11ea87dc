"""Pydantic models for the sector and product drill-down levels.

Neither level is merged back into the report. Each is a standalone,
on-demand expansion kept only while its modal is open.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..constants import DIFFICULTY_LABELS


def difficulty_level(label: str) -> Optional[str]:
    """Map a localized difficulty label (``"Élevée"``, ``"high"``) to low/medium/high."""
    needle = (label or "").strip().lower()
    for labels in DIFFICULTY_LABELS.values():
        for level, surface in labels.items():
            if needle in (level, surface.lower()):
                return level
    return None


class DetailedProductSuggestion(BaseModel):
    name: str = Field(..., description="Suggested product name")
    description: str = Field(..., description="Short product description")
    target_audience: str = Field(..., alias="targetAudience")
    selling_points: List[str] = Field(default_factory=list, alias="sellingPoints")
    price_range: str = Field(..., alias="priceRange")
    suppliers: List[str] = Field(default_factory=list)
    profitability_score: int = Field(..., alias="profitabilityScore", ge=0, le=10)
    market_entry_difficulty: str = Field(
        ...,
        alias="marketEntryDifficulty",
        description="Locale surface form of low / medium / high",
    )

    class Config:
        populate_by_name = True

    @property
    def difficulty_level(self) -> Optional[str]:
        return difficulty_level(self.market_entry_difficulty)


class DetailedSectorAnalysis(BaseModel):
    """Higher-resolution expansion of a single sector."""

    sector_name: str = Field(..., alias="sectorName")
    in_depth_analysis: str = Field(..., alias="inDepthAnalysis")
    product_suggestions: List[DetailedProductSuggestion] = Field(
        default_factory=list, alias="productSuggestions"
    )

    class Config:
        populate_by_name = True

    def find_suggestion(self, name: str) -> Optional[DetailedProductSuggestion]:
        for suggestion in self.product_suggestions:
            if suggestion.name == name:
                return suggestion
        return None


class ProductAnalysis(BaseModel):
    """Deepest drill-down level: one product."""

    product_name: str = Field(..., alias="productName")
    market_analysis: str = Field(..., alias="marketAnalysis")
    key_regions: List[str] = Field(default_factory=list, alias="keyRegions")
    target_audience: str = Field(..., alias="targetAudience")
    selling_points: List[str] = Field(default_factory=list, alias="sellingPoints")
    price_range: str = Field(..., alias="priceRange")
    suppliers: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True
