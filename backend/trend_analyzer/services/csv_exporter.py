"""CSV export for the three detail levels.

Cells containing a comma, quote or newline are quoted with inner quotes
doubled (csv.QUOTE_MINIMAL); list-valued cells are joined with "; ".
Every exporter returns ``(filename, csv_text)``; the route adds the BOM.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Callable, Iterable, Mapping, Optional

from ..schemas.analysis_schema import DetailedSectorAnalysis, ProductAnalysis
from ..schemas.trend_schema import TrendReport

TFunction = Callable[..., str]

LIST_SEPARATOR = "; "


def csv_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(str(item) for item in value)
    return str(value)


def _write_rows(rows: Iterable[list[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    for row in rows:
        writer.writerow([csv_cell(cell) for cell in row])
    return buffer.getvalue()


def _translate(t: TFunction, key: str, replacements: Optional[Mapping[str, Any]] = None) -> str:
    return t(key, replacements) if replacements else t(key)


def export_report_csv(report: TrendReport, period: int, t: TFunction) -> tuple[str, str]:
    """One row per product, then a blank row and the global analysis."""
    rows: list[list[Any]] = [[
        t("csv.report.sector"),
        t("csv.report.product"),
        t("csv.report.demandRate"),
        t("csv.report.profitabilityScore"),
        t("csv.report.keyRegions"),
        t("csv.report.reasons"),
        t("csv.report.suppliers"),
    ]]
    for sector in report.sectors:
        for product in sector.products:
            rows.append([
                sector.name,
                product.name,
                product.demand_rate,
                product.profitability_score,
                product.regions,
                product.reasons,
                product.suppliers,
            ])
    rows.append([])
    rows.append([t("csv.report.globalAnalysis")])
    rows.append([report.global_analysis])

    filename = _translate(t, "csv.report.filename", {"period": period})
    return filename, _write_rows(rows)


def export_sector_analysis_csv(analysis: DetailedSectorAnalysis, t: TFunction) -> tuple[str, str]:
    """In-depth analysis first, then one row per product suggestion."""
    rows: list[list[Any]] = [
        [t("csv.detailed.inDepthAnalysis")],
        [analysis.in_depth_analysis],
        [],
        [
            t("csv.detailed.productSuggestions"),
            t("csv.detailed.description"),
            t("csv.detailed.targetAudience"),
            t("csv.detailed.sellingPoints"),
            t("csv.detailed.priceRange"),
            t("csv.detailed.potentialSuppliers"),
            t("csv.detailed.profitabilityScore"),
            t("csv.detailed.marketEntryDifficulty"),
        ],
    ]
    for suggestion in analysis.product_suggestions:
        rows.append([
            suggestion.name,
            suggestion.description,
            suggestion.target_audience,
            suggestion.selling_points,
            suggestion.price_range,
            suggestion.suppliers,
            suggestion.profitability_score,
            suggestion.market_entry_difficulty,
        ])

    filename = _translate(t, "csv.detailed.filename", {"sectorName": analysis.sector_name})
    return filename, _write_rows(rows)


def export_product_analysis_csv(analysis: ProductAnalysis, t: TFunction) -> tuple[str, str]:
    """A single header row and a single value row."""
    headers = [
        t("csv.product.product"),
        t("csv.product.marketAnalysis"),
        t("csv.product.keyRegions"),
        t("csv.product.targetAudience"),
        t("csv.product.sellingPoints"),
        t("csv.product.priceRange"),
        t("csv.product.suppliers"),
        t("csv.product.risks"),
    ]
    values = [
        analysis.product_name,
        analysis.market_analysis,
        analysis.key_regions,
        analysis.target_audience,
        analysis.selling_points,
        analysis.price_range,
        analysis.suppliers,
        analysis.risks,
    ]

    filename = _translate(t, "csv.product.filename", {"productName": analysis.product_name})
    return filename, _write_rows([headers, values])
