"""
Budget endpoints
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, status

from ..tracker import FinanceTracker
from .dependencies import get_tracker
from .schemas import CreateBudgetRequest, UpdateBudgetRequest, record_response


router = APIRouter()


@router.get("")
async def list_budgets(active_only: bool = False, tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(b) for b in tracker.budget_manager.list_budgets(active_only)]


@router.get("/account/{account_id}")
async def list_by_account(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(b) for b in tracker.budget_manager.list_by_account(account_id)]


@router.get("/category/{category_id}")
async def list_by_category(category_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(b) for b in tracker.budget_manager.list_by_category(category_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_budget(request: CreateBudgetRequest, tracker: FinanceTracker = Depends(get_tracker)):
    budget = tracker.budget_manager.create_budget(
        name=request.name,
        amount=request.amount,
        period=request.period,
        account_id=request.account_id,
        category_id=request.category_id,
        description=request.description,
        is_active=request.is_active,
        alert_threshold=request.alert_threshold
    )
    return record_response(budget)


@router.get("/{budget_id}")
async def get_budget(budget_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    budget = tracker.budget_manager.get_budget(budget_id)
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    return record_response(budget)


@router.put("/{budget_id}")
async def update_budget(
    budget_id: str,
    request: UpdateBudgetRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    budget = tracker.budget_manager.update_budget(budget_id, request.to_updates())
    return record_response(budget)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(budget_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    tracker.budget_manager.delete_budget(budget_id)


@router.get("/{budget_id}/spending")
async def get_budget_spending(
    budget_id: str,
    as_of: Optional[date] = None,
    tracker: FinanceTracker = Depends(get_tracker)
):
    """Expense spending in the current window; zero for an unknown budget"""
    spent = tracker.budget_manager.get_budget_spending(budget_id, as_of)
    return {"budget_id": budget_id, "spent": str(spent)}


@router.get("/{budget_id}/status")
async def get_budget_status(
    budget_id: str,
    as_of: Optional[date] = None,
    tracker: FinanceTracker = Depends(get_tracker)
):
    report = tracker.budget_manager.get_budget_status(budget_id, as_of)
    return {
        "budget_id": report.budget_id,
        "spent": str(report.spent),
        "amount": str(report.amount),
        "percentage": str(report.percentage),
        "remaining": str(report.remaining),
        "status": report.status.value,
        "threshold_reached": report.threshold_reached,
        "start": report.start.isoformat(),
        "end": report.end.isoformat()
    }
