"""
Reporting endpoints

Reports are returned as JSON with decimals kept as strings, or as CSV rows
with `?format=csv`.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..reporting import ReportFormat, ReportResult
from ..tracker import FinanceTracker
from .dependencies import get_tracker


router = APIRouter()


def _render(tracker: FinanceTracker, result: ReportResult, format: str) -> Response:
    if format == ReportFormat.CSV.value:
        content = tracker.reporting_engine.export_report(result, ReportFormat.CSV)
        return Response(content=content, media_type="text/csv")
    content = tracker.reporting_engine.export_report(result, ReportFormat.JSON)
    return Response(content=content, media_type="application/json")


@router.get("/dashboard")
async def dashboard_summary(
    as_of: Optional[date] = None,
    format: str = Query("json", pattern="^(json|csv)$"),
    tracker: FinanceTracker = Depends(get_tracker)
):
    return _render(tracker, tracker.reporting_engine.dashboard_summary(as_of), format)


@router.get("/category-spending")
async def category_spending(
    start: date,
    end: date,
    account_id: Optional[str] = None,
    format: str = Query("json", pattern="^(json|csv)$"),
    tracker: FinanceTracker = Depends(get_tracker)
):
    result = tracker.reporting_engine.category_spending(start, end, account_id)
    return _render(tracker, result, format)


@router.get("/cash-flow")
async def monthly_cash_flow(
    months: int = Query(6, ge=1, le=120),
    as_of: Optional[date] = None,
    format: str = Query("json", pattern="^(json|csv)$"),
    tracker: FinanceTracker = Depends(get_tracker)
):
    return _render(tracker, tracker.reporting_engine.monthly_cash_flow(months, as_of), format)


@router.get("/portfolio")
async def portfolio_summary(
    account_id: Optional[str] = None,
    format: str = Query("json", pattern="^(json|csv)$"),
    tracker: FinanceTracker = Depends(get_tracker)
):
    return _render(tracker, tracker.reporting_engine.portfolio_summary(account_id), format)


@router.get("/allocations")
async def allocation_summary(
    account_id: Optional[str] = None,
    format: str = Query("json", pattern="^(json|csv)$"),
    tracker: FinanceTracker = Depends(get_tracker)
):
    return _render(tracker, tracker.reporting_engine.allocation_summary(account_id), format)
