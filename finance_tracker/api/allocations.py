"""
Goal allocation endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..tracker import FinanceTracker
from .dependencies import get_tracker
from .schemas import CreateAllocationRequest, UpdateAllocationRequest, record_response


router = APIRouter()


@router.get("")
async def list_allocations(tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(a) for a in tracker.allocation_manager.list_allocations()]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_allocation(request: CreateAllocationRequest, tracker: FinanceTracker = Depends(get_tracker)):
    """Allocate part of the funding account's balance; 409 when it does not fit"""
    allocation = tracker.allocation_manager.create_allocation(
        goal_id=request.goal_id,
        amount=request.amount,
        date=request.date,
        description=request.description
    )
    return record_response(allocation)


@router.get("/{allocation_id}")
async def get_allocation(allocation_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    allocation = tracker.allocation_manager.get_allocation(allocation_id)
    if not allocation:
        raise HTTPException(status_code=404, detail="Goal allocation not found")
    return record_response(allocation)


@router.put("/{allocation_id}")
async def update_allocation(
    allocation_id: str,
    request: UpdateAllocationRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    allocation = tracker.allocation_manager.update_allocation(allocation_id, request.to_updates())
    return record_response(allocation)


@router.delete("/{allocation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_allocation(allocation_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    tracker.allocation_manager.delete_allocation(allocation_id)
