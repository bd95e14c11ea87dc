"""Report routes — session state, preferences, report generation and export.

Endpoints:
  GET  /state                           — Current view snapshot
  PUT  /preferences                     — Update language / period / filters / mode
  DELETE /notice                        — Dismiss the sector / product failure notice
  POST /report/generate                 — Generate (or regenerate) the report
  GET  /report/export                   — Download the report as CSV
  GET  /report/sectors/{name}/products  — Filtered / sorted product list of one sector
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from ..schemas.request_schema import PreferencesUpdate, SortDirection, SortField
from ..schemas.session_schema import SessionSnapshot
from ..schemas.trend_schema import ProductTrend, TrendReport
from ..services.csv_exporter import export_report_csv
from ..services.product_view import SortState, derive_product_view
from ..services.profile_store import ProfileStore
from ..services.report_session import ReportSession
from ..services.session_dependency import get_profile_store, get_report_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Report"])

CSV_BOM = "\ufeff"


def csv_response(filename: str, text: str) -> Response:
    """Serve CSV text with a UTF-8 BOM so spreadsheet tools pick the encoding."""
    # Header values must stay latin-1; the RFC 5987 form carries the real name.
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "")
    disposition = f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
    return Response(
        content=(CSV_BOM + text).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": disposition},
    )


# ── State / preferences ──────────────────────────────────────────────────

@router.get(
    "/state",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Current session view state",
)
def get_state(session: ReportSession = Depends(get_report_session)) -> SessionSnapshot:
    return session.snapshot()


@router.put(
    "/preferences",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Update session preferences",
)
def update_preferences(
    payload: PreferencesUpdate,
    session: ReportSession = Depends(get_report_session),
    store: ProfileStore = Depends(get_profile_store),
) -> SessionSnapshot:
    """Changes apply to the next generation; current results stay on screen."""
    previous_language = session.context.language
    session.context.apply_preferences(payload)
    if session.context.language != previous_language:
        store.save_language(session.context.language)
        print(f"🌐 [SESSION] Language switched to {session.context.language}")
    return session.snapshot()


@router.delete(
    "/notice",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Dismiss the analysis failure notice",
)
def dismiss_notice(session: ReportSession = Depends(get_report_session)) -> SessionSnapshot:
    """Sector and product failures are reported here, never in the report slot."""
    session.dismiss_notice()
    return session.snapshot()


# ── Report ───────────────────────────────────────────────────────────────

@router.post(
    "/report/generate",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Generate the trend report",
)
async def generate_report(session: ReportSession = Depends(get_report_session)) -> SessionSnapshot:
    """Generation errors land in the report slot; the request itself succeeds."""
    await session.generate_report()
    return session.snapshot()


def _current_report(session: ReportSession) -> TrendReport:
    report = session.report.data
    if not isinstance(report, TrendReport):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No report has been generated yet",
        )
    return report


@router.get("/report/export", summary="Export the report as CSV")
def export_report(session: ReportSession = Depends(get_report_session)) -> Response:
    report = _current_report(session)
    filename, text = export_report_csv(report, session.context.period_months, session.context.t)
    return csv_response(filename, text)


@router.get(
    "/report/sectors/{name}/products",
    response_model=List[ProductTrend],
    response_model_by_alias=True,
    summary="Filter and sort one sector's products",
)
def sector_products(
    name: str,
    q: str = Query(default="", description="Case-insensitive match on product or supplier name"),
    sort: Optional[SortField] = Query(default=None, description="demandRate or profitabilityScore"),
    direction: SortDirection = Query(default="none"),
    session: ReportSession = Depends(get_report_session),
) -> List[ProductTrend]:
    """Pure view over the already-fetched report; never triggers generation."""
    _current_report(session)
    sector = session.find_report_sector(name)
    if sector is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sector not found: {name}",
        )
    state = SortState(field=sort, direction=direction) if sort else None
    return derive_product_view(sector.products, q, state)
