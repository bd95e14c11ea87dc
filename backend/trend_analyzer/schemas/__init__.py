# Schemas package
from .trend_schema import ProductTrend, Sector, TrendReport
from .analysis_schema import DetailedProductSuggestion, DetailedSectorAnalysis, ProductAnalysis
from .request_schema import ReportOptions, PreferencesUpdate
from .auth_schema import LoginRequest, SettingsUpdate, SignupRequest, UserProfile
from .session_schema import PendingAction, SessionSnapshot, SlotView

__all__ = [
    "ProductTrend",
    "Sector",
    "TrendReport",
    "DetailedProductSuggestion",
    "DetailedSectorAnalysis",
    "ProductAnalysis",
    "ReportOptions",
    "PreferencesUpdate",
    "LoginRequest",
    "SettingsUpdate",
    "SignupRequest",
    "UserProfile",
    "PendingAction",
    "SessionSnapshot",
    "SlotView",
]
