"""Drill-down routes — sector and product analysis modals.

Endpoints:
  POST   /analysis/sector          — Analyse a sector (auth + premium gated)
  DELETE /analysis/sector          — Close the sector modal
  GET    /analysis/sector/export   — Download the sector analysis as CSV
  POST   /analysis/product         — Analyse a suggested product (not gated)
  DELETE /analysis/product         — Close the product modal
  GET    /analysis/product/export  — Download the product analysis as CSV

A failed sector or product analysis closes its modal and the localized
message is published in the snapshot's ``notice`` field (cleared with
DELETE /notice). The ``report`` slot never carries modal errors.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from ..schemas.analysis_schema import DetailedSectorAnalysis, ProductAnalysis
from ..schemas.request_schema import ProductRequest, SectorRequest
from ..schemas.session_schema import SessionSnapshot
from ..services.csv_exporter import export_product_analysis_csv, export_sector_analysis_csv
from ..services.report_session import GateOutcome, ReportSession
from ..services.session_dependency import get_report_session
from .report import csv_response

router = APIRouter(prefix="/analysis", tags=["Analysis"])


# ── Sector ───────────────────────────────────────────────────────────────

@router.post(
    "/sector",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Analyse one sector in depth",
)
async def analyze_sector(
    payload: SectorRequest,
    session: ReportSession = Depends(get_report_session),
) -> SessionSnapshot:
    """Gating is reported through the snapshot (auth / upgrade prompt flags), not an error status.

    A generation failure closes the modal and lands in ``notice``.
    """
    outcome = await session.analyze_sector(payload.sector_name)
    print(f"📊 [SESSION] analyze_sector('{payload.sector_name}') → {outcome.value}")
    return session.snapshot()


@router.delete(
    "/sector",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Close the sector modal",
)
def close_sector(session: ReportSession = Depends(get_report_session)) -> SessionSnapshot:
    session.close_sector_modal()
    return session.snapshot()


@router.get("/sector/export", summary="Export the sector analysis as CSV")
def export_sector(session: ReportSession = Depends(get_report_session)) -> Response:
    analysis = session.sector_analysis.data
    if not isinstance(analysis, DetailedSectorAnalysis):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No sector analysis is open",
        )
    filename, text = export_sector_analysis_csv(analysis, session.context.t)
    return csv_response(filename, text)


# ── Product ──────────────────────────────────────────────────────────────

@router.post(
    "/product",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Analyse one suggested product",
)
async def analyze_product(
    payload: ProductRequest,
    session: ReportSession = Depends(get_report_session),
) -> SessionSnapshot:
    """Only a suggestion of the open sector analysis can be analysed (409 otherwise).

    A generation failure closes the modal and lands in ``notice``.
    """
    outcome = await session.analyze_product(payload.product_name)
    if outcome == GateOutcome.NOT_SUGGESTED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{payload.product_name} is not a suggestion of the open sector analysis",
        )
    return session.snapshot()


@router.delete(
    "/product",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Close the product modal",
)
def close_product(session: ReportSession = Depends(get_report_session)) -> SessionSnapshot:
    session.close_product_modal()
    return session.snapshot()


@router.get("/product/export", summary="Export the product analysis as CSV")
def export_product(session: ReportSession = Depends(get_report_session)) -> Response:
    analysis = session.product_analysis.data
    if not isinstance(analysis, ProductAnalysis):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No product analysis is open",
        )
    filename, text = export_product_analysis_csv(analysis, session.context.t)
    return csv_response(filename, text)
