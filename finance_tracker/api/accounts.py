"""
Account management endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..tracker import FinanceTracker
from .dependencies import get_tracker
from .schemas import CreateAccountRequest, UpdateAccountRequest, record_response


router = APIRouter()


@router.get("")
async def list_accounts(active_only: bool = False, tracker: FinanceTracker = Depends(get_tracker)):
    """List accounts"""
    return [record_response(account) for account in tracker.account_manager.list_accounts(active_only)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(
    request: CreateAccountRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    """Create a new account"""
    account = tracker.account_manager.create_account(
        name=request.name,
        account_type=request.account_type,
        initial_balance=request.initial_balance,
        color=request.color,
        is_active=request.is_active
    )
    return record_response(account)


@router.get("/{account_id}")
async def get_account(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    """Get account details"""
    account = tracker.account_manager.get_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return record_response(account)


@router.put("/{account_id}")
async def update_account(
    account_id: str,
    request: UpdateAccountRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    """Update account fields; balances are derived and cannot be set"""
    account = tracker.account_manager.update_account(account_id, request.to_updates())
    return record_response(account)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    """Delete an account that nothing references"""
    tracker.account_manager.delete_account(account_id)


@router.get("/{account_id}/transactions")
async def get_account_transactions(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    """Transactions of an account, newest first"""
    tracker.account_manager.require_account(account_id)
    return [record_response(t) for t in tracker.transaction_manager.list_by_account(account_id)]


@router.get("/{account_id}/allocations")
async def get_account_allocations(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    """Allocated total and remaining headroom for goal allocations"""
    tracker.account_manager.require_account(account_id)
    available = tracker.allocation_manager.get_available(account_id)
    return {
        "account_id": account_id,
        "allocated": str(tracker.allocation_manager.get_allocated_total(account_id)),
        "available": str(available)
    }


@router.post("/{account_id}/recompute")
async def recompute_balance(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    """Recompute the cached balance from the account's records"""
    tracker.account_manager.require_account(account_id)
    balance = tracker.balance_calculator.recompute_balance(account_id)
    return {"account_id": account_id, "balance": str(balance)}
