"""Pydantic models for the top-level trend report.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON returned by the generative model and consumed by the browser.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ProductTrend(BaseModel):
    """One trending product inside a sector."""

    name: str = Field(..., description="Product name")
    demand_rate: float = Field(
        ...,
        alias="demandRate",
        description="Estimated demand rate in percent (15 means 15%)",
    )
    regions: str = Field(..., description="World regions with the strongest demand")
    reasons: str = Field(..., description="Key demand drivers")
    profitability_score: Optional[int] = Field(
        default=None,
        alias="profitabilityScore",
        ge=0,
        le=10,
        description="Estimated profitability for a reseller, 0-10",
    )
    suppliers: List[str] = Field(
        default_factory=list,
        description="Potential suppliers or marketplaces, in model order",
    )

    class Config:
        populate_by_name = True


class Sector(BaseModel):
    """A consumer sector and its trending products, in model output order."""

    name: str = Field(..., alias="sectorName", description="Sector name")
    products: List[ProductTrend] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class TrendReport(BaseModel):
    """Complete output of a top-level report generation."""

    sectors: List[Sector] = Field(default_factory=list)
    global_analysis: str = Field(
        ...,
        alias="globalAnalysis",
        description="Short global market analysis",
    )

    class Config:
        populate_by_name = True

    def find_sector(self, name: str) -> Optional[Sector]:
        for sector in self.sectors:
            if sector.name == name:
                return sector
        return None
