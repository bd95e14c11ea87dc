from .generator import (
    generate_product_analysis,
    generate_sector_analysis,
    generate_trend_report,
    temperature_for_mode,
)

__all__ = [
    "generate_trend_report",
    "generate_sector_analysis",
    "generate_product_analysis",
    "temperature_for_mode",
]
