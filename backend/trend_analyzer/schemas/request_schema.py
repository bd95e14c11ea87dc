"""Request-side schemas: report options and view-utility parameters."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..constants import (
    DEFAULT_LANGUAGE,
    DEFAULT_PERIOD_MONTHS,
    MODE_RELIABLE,
    PERIOD_CHOICES,
    TIER_FREE,
)

Language = Literal["en", "fr"]
GenerationMode = Literal["reliable", "creative"]
Tier = Literal["free", "premium"]
SortField = Literal["demandRate", "profitabilityScore"]
SortDirection = Literal["none", "desc", "asc"]


def validate_period(value: int) -> int:
    if value not in PERIOD_CHOICES:
        raise ValueError(f"Period must be one of {list(PERIOD_CHOICES)} months.")
    return value


class ReportOptions(BaseModel):
    """Everything the Request/Schema Builder needs for one generation."""

    period_months: int = Field(default=DEFAULT_PERIOD_MONTHS, description="Forecast horizon: 1, 3 or 6 months")
    tier: Tier = Field(default=TIER_FREE)
    language: Language = Field(default=DEFAULT_LANGUAGE)
    regions: str = Field(default="", description="Free-text regions to focus on")
    keywords: str = Field(default="", description="Free-text keywords to favour")
    excluded_keywords: str = Field(default="", description="Free-text keywords to avoid")
    industries: str = Field(default="", description="Free-text industries to focus on")
    mode: GenerationMode = Field(default=MODE_RELIABLE)

    @field_validator("period_months")
    @classmethod
    def check_period(cls, v: int) -> int:
        return validate_period(v)


class PreferencesUpdate(BaseModel):
    """Partial update of the session preferences sent by the browser."""

    language: Optional[Language] = None
    period_months: Optional[int] = Field(default=None, alias="periodMonths")
    regions: Optional[str] = None
    keywords: Optional[str] = None
    excluded_keywords: Optional[str] = Field(default=None, alias="excludedKeywords")
    industries: Optional[str] = None
    mode: Optional[GenerationMode] = None

    class Config:
        populate_by_name = True

    @field_validator("period_months")
    @classmethod
    def check_period(cls, v: Optional[int]) -> Optional[int]:
        return v if v is None else validate_period(v)


class SectorRequest(BaseModel):
    sector_name: str = Field(..., alias="sectorName", min_length=1)

    class Config:
        populate_by_name = True


class ProductRequest(BaseModel):
    product_name: str = Field(..., alias="productName", min_length=1)

    class Config:
        populate_by_name = True
