"""
Transaction endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..tracker import FinanceTracker
from .dependencies import get_tracker
from .schemas import CreateTransactionRequest, UpdateTransactionRequest, record_response


router = APIRouter()


@router.get("")
async def list_transactions(tracker: FinanceTracker = Depends(get_tracker)):
    """All transactions, newest first"""
    return [record_response(t) for t in tracker.transaction_manager.list_transactions()]


@router.get("/account/{account_id}")
async def list_by_account(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(t) for t in tracker.transaction_manager.list_by_account(account_id)]


@router.get("/category/{category_id}")
async def list_by_category(category_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(t) for t in tracker.transaction_manager.list_by_category(category_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    request: CreateTransactionRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    """Record a transaction; the account balance is recomputed"""
    transaction = tracker.transaction_manager.create_transaction(
        description=request.description,
        amount=request.amount,
        transaction_type=request.transaction_type,
        date=request.date,
        account_id=request.account_id,
        category_id=request.category_id,
        notes=request.notes
    )
    return record_response(transaction)


@router.get("/{transaction_id}")
async def get_transaction(transaction_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    transaction = tracker.transaction_manager.get_transaction(transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return record_response(transaction)


@router.put("/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    request: UpdateTransactionRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    transaction = tracker.transaction_manager.update_transaction(transaction_id, request.to_updates())
    return record_response(transaction)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(transaction_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    tracker.transaction_manager.delete_transaction(transaction_id)
