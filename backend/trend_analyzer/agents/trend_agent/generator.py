"""Trend Generator — Gemini-powered, schema-constrained, three detail levels.

Uses the centralized Gemini client (`call_structured_generation`) for
single-attempt generation. Each entry point builds its prompt and schema
from the report options, then validates the parsed JSON against the
pydantic entity. A shape mismatch is reported as MalformedResponse, the
same as unparseable text. No session state is touched here.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ...constants import MODE_CREATIVE, MODE_RELIABLE, MODE_TEMPERATURES
from ...schemas.analysis_schema import DetailedSectorAnalysis, ProductAnalysis
from ...schemas.request_schema import ReportOptions
from ...schemas.trend_schema import TrendReport
from ...services.gemini_client import (
    CONTEXT_PRODUCT,
    CONTEXT_REPORT,
    CONTEXT_SECTOR,
    MalformedResponse,
    call_structured_generation,
)
from .prompts import (
    build_product_analysis_prompt,
    build_report_prompt,
    build_sector_analysis_prompt,
)
from .schema import (
    build_product_analysis_schema,
    build_report_schema,
    build_sector_analysis_schema,
)

EntityT = TypeVar("EntityT", bound=BaseModel)


def temperature_for_mode(mode: str) -> float:
    """Reliable mode samples conservatively, creative mode explores."""
    return MODE_TEMPERATURES.get(mode, MODE_TEMPERATURES[MODE_RELIABLE])


def _validate(payload: Any, model: Type[EntityT], context: str) -> EntityT:
    if not isinstance(payload, dict):
        raise MalformedResponse(context, f"expected a JSON object, got {type(payload).__name__}")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        print(f"❌ [TREND] {context} payload failed validation ({exc.error_count()} errors)")
        raise MalformedResponse(context, str(exc).splitlines()[0]) from exc


def _require_scores(report: TrendReport, mode: str) -> None:
    """Reliable mode asks for a score on every product; a missing one is a contract break."""
    if mode == MODE_CREATIVE:
        return
    for sector in report.sectors:
        for product in sector.products:
            if product.profitability_score is None:
                print(f"❌ [TREND] {sector.name} / {product.name} has no profitability score")
                raise MalformedResponse(
                    CONTEXT_REPORT,
                    f"profitabilityScore missing for {product.name!r} in reliable mode",
                )


async def generate_trend_report(
    options: ReportOptions,
    reference_date: Optional[date] = None,
) -> TrendReport:
    """Generate the top-level report: every sector, summary level.

    Raises
    ------
    GenerationFailed
        Transport or backend failure.
    MalformedResponse
        Output is not JSON or does not match the report shape.
    """
    reference_date = reference_date or date.today()
    print(
        f"📈 [TREND] Report requested: period={options.period_months}m, tier={options.tier}, "
        f"lang={options.language}, mode={options.mode}"
    )

    payload = await call_structured_generation(
        prompt=build_report_prompt(options, reference_date),
        schema=build_report_schema(options.language, options.tier, options.mode),
        context=CONTEXT_REPORT,
        temperature=temperature_for_mode(options.mode),
    )
    report = _validate(payload, TrendReport, CONTEXT_REPORT)
    _require_scores(report, options.mode)

    product_count = sum(len(sector.products) for sector in report.sectors)
    print(f"✅ [TREND] Report ready: {len(report.sectors)} sectors, {product_count} products")
    return report


async def generate_sector_analysis(
    sector_name: str,
    options: ReportOptions,
    reference_date: Optional[date] = None,
) -> DetailedSectorAnalysis:
    """Generate the detailed analysis of one sector."""
    reference_date = reference_date or date.today()
    print(f"🔎 [TREND] Sector analysis requested: {sector_name} (tier={options.tier})")

    payload = await call_structured_generation(
        prompt=build_sector_analysis_prompt(sector_name, options, reference_date),
        schema=build_sector_analysis_schema(options.language, options.tier),
        context=CONTEXT_SECTOR,
        temperature=temperature_for_mode(options.mode),
    )
    analysis = _validate(payload, DetailedSectorAnalysis, CONTEXT_SECTOR)

    print(f"✅ [TREND] Sector analysis ready: {len(analysis.product_suggestions)} suggestions")
    return analysis


async def generate_product_analysis(
    product_name: str,
    sector_name: str,
    options: ReportOptions,
    reference_date: Optional[date] = None,
) -> ProductAnalysis:
    """Generate the deepest drill-down level for one product."""
    reference_date = reference_date or date.today()
    print(f"🔎 [TREND] Product analysis requested: {product_name} ({sector_name or 'no sector'})")

    payload = await call_structured_generation(
        prompt=build_product_analysis_prompt(product_name, sector_name, options, reference_date),
        schema=build_product_analysis_schema(options.language),
        context=CONTEXT_PRODUCT,
        temperature=temperature_for_mode(options.mode),
    )
    analysis = _validate(payload, ProductAnalysis, CONTEXT_PRODUCT)

    print(f"✅ [TREND] Product analysis ready: {analysis.product_name}")
    return analysis
