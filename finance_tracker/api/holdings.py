"""
Investment holding endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..tracker import FinanceTracker
from .dependencies import get_tracker
from .schemas import (
    CreateHoldingRequest, UpdateHoldingRequest, UpdatePriceRequest, holding_response
)


router = APIRouter()


@router.get("")
async def list_holdings(tracker: FinanceTracker = Depends(get_tracker)):
    return [holding_response(h) for h in tracker.holding_manager.list_holdings()]


@router.get("/account/{account_id}")
async def list_by_account(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    return [holding_response(h) for h in tracker.holding_manager.list_by_account(account_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_holding(request: CreateHoldingRequest, tracker: FinanceTracker = Depends(get_tracker)):
    """Record a holding; the account balance is recomputed"""
    holding = tracker.holding_manager.create_holding(
        symbol=request.symbol,
        name=request.name,
        shares=request.shares,
        purchase_price=request.purchase_price,
        current_price=request.current_price,
        account_id=request.account_id,
        purchase_date=request.purchase_date,
        notes=request.notes
    )
    return holding_response(holding)


@router.get("/{holding_id}")
async def get_holding(holding_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    holding = tracker.holding_manager.get_holding(holding_id)
    if not holding:
        raise HTTPException(status_code=404, detail="Holding not found")
    return holding_response(holding)


@router.put("/{holding_id}")
async def update_holding(
    holding_id: str,
    request: UpdateHoldingRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    holding = tracker.holding_manager.update_holding(holding_id, request.to_updates())
    return holding_response(holding)


@router.put("/{holding_id}/price")
async def update_price(
    holding_id: str,
    request: UpdatePriceRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    """Set the latest price per share and revalue the account"""
    holding = tracker.holding_manager.update_price(holding_id, request.current_price)
    return holding_response(holding)


@router.delete("/{holding_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holding(holding_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    tracker.holding_manager.delete_holding(holding_id)
