"""View-state schemas returned to the browser after every UI trigger."""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from .analysis_schema import DetailedSectorAnalysis, ProductAnalysis
from .auth_schema import UserProfile
from .trend_schema import TrendReport

SlotStatus = Literal["idle", "loading", "success", "error"]


class PendingAction(BaseModel):
    """One-shot request queued behind the upgrade prompt."""

    kind: Literal["analyze_sector"] = "analyze_sector"
    payload: str = Field(..., description="Sector name")


class SlotView(BaseModel):
    status: SlotStatus = "idle"
    is_open: bool = Field(default=False, alias="isOpen")
    error: Optional[str] = None
    data: Optional[Union[TrendReport, DetailedSectorAnalysis, ProductAnalysis]] = None

    class Config:
        populate_by_name = True


class SessionSnapshot(BaseModel):
    user: Optional[UserProfile] = None
    language: str
    period_months: int = Field(..., alias="periodMonths")
    mode: str
    report: SlotView
    sector_analysis: SlotView = Field(..., alias="sectorAnalysis")
    product_analysis: SlotView = Field(..., alias="productAnalysis")
    auth_prompt_open: bool = Field(default=False, alias="authPromptOpen")
    upgrade_prompt_open: bool = Field(default=False, alias="upgradePromptOpen")
    pending_action: Optional[PendingAction] = Field(default=None, alias="pendingAction")
    notice: Optional[str] = None

    class Config:
        populate_by_name = True
