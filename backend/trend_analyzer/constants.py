"""Centralized constants shared across the trend agent, session and routes.

Product counts per tier are read from the environment so the free/premium
caps can be tuned without touching prompt code.
"""

from __future__ import annotations

import os


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


# ── Forecast horizon ────────────────────────────────────────────────────
PERIOD_CHOICES: tuple[int, ...] = (1, 3, 6)
DEFAULT_PERIOD_MONTHS: int = 1

# ── Languages ───────────────────────────────────────────────────────────
LANGUAGES: tuple[str, ...] = ("en", "fr")
DEFAULT_LANGUAGE: str = "en"

# ── Subscription tiers ──────────────────────────────────────────────────
TIER_FREE = "free"
TIER_PREMIUM = "premium"

# ── Generation modes → sampling temperature ─────────────────────────────
MODE_RELIABLE = "reliable"
MODE_CREATIVE = "creative"

MODE_TEMPERATURES: dict[str, float] = {
    MODE_RELIABLE: _env_float("TREND_RELIABLE_TEMPERATURE", 0.2),
    MODE_CREATIVE: _env_float("TREND_CREATIVE_TEMPERATURE", 0.9),
}

# ── Consumer sectors requested in every report ──────────────────────────
SECTORS: dict[str, list[str]] = {
    "en": [
        "Technology",
        "Home & Decor",
        "Beauty",
        "Fashion",
        "Sports",
        "Food",
        "Health",
        "Entertainment",
    ],
    "fr": [
        "Technologie",
        "Maison & Déco",
        "Beauté",
        "Mode",
        "Sport",
        "Alimentation",
        "Santé",
        "Divertissement",
    ],
}

# ── Products per sector, by tier ────────────────────────────────────────
# Hard ceiling applied to every configured count.
MAX_PRODUCTS: int = max(1, _env_int("TREND_MAX_PRODUCTS", 20))

FREE_PRODUCTS_PER_SECTOR: int = _env_int("TREND_FREE_PRODUCTS_PER_SECTOR", 3)
PREMIUM_PRODUCTS_PER_SECTOR: int = _env_int("TREND_PREMIUM_PRODUCTS_PER_SECTOR", 5)

FREE_SECTOR_SUGGESTIONS: int = _env_int("TREND_FREE_SECTOR_SUGGESTIONS", 3)
PREMIUM_SECTOR_SUGGESTIONS: int = _env_int("TREND_PREMIUM_SECTOR_SUGGESTIONS", 6)

# ── Market entry difficulty surface forms ───────────────────────────────
DIFFICULTY_LEVELS: tuple[str, ...] = ("low", "medium", "high")

DIFFICULTY_LABELS: dict[str, dict[str, str]] = {
    "en": {"low": "Low", "medium": "Medium", "high": "High"},
    "fr": {"low": "Faible", "medium": "Moyenne", "high": "Élevée"},
}

# ── Month names used when naming the forecast window ────────────────────
MONTH_NAMES: dict[str, list[str]] = {
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
    "fr": [
        "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
        "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
    ],
}
