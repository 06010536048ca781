"""
Saving tactic endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..tracker import FinanceTracker
from .dependencies import get_tracker
from .schemas import CreateTacticRequest, UpdateTacticRequest, record_response


router = APIRouter()


@router.get("")
async def list_tactics(active_only: bool = False, tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(t) for t in tracker.tactic_manager.list_tactics(active_only)]


@router.get("/personal")
async def list_personal(tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(t) for t in tracker.tactic_manager.list_personal()]


@router.get("/category/{category}")
async def list_by_category(category: str, tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(t) for t in tracker.tactic_manager.list_by_category(category)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tactic(request: CreateTacticRequest, tracker: FinanceTracker = Depends(get_tracker)):
    tactic = tracker.tactic_manager.create_tactic(
        title=request.title,
        description=request.description,
        category=request.category,
        difficulty=request.difficulty,
        estimated_savings=request.estimated_savings,
        time_to_implement=request.time_to_implement,
        tags=request.tags,
        is_personal=request.is_personal,
        is_active=request.is_active
    )
    return record_response(tactic)


@router.get("/{tactic_id}")
async def get_tactic(tactic_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    tactic = tracker.tactic_manager.get_tactic(tactic_id)
    if not tactic:
        raise HTTPException(status_code=404, detail="Saving tactic not found")
    return record_response(tactic)


@router.put("/{tactic_id}")
async def update_tactic(
    tactic_id: str,
    request: UpdateTacticRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    tactic = tracker.tactic_manager.update_tactic(tactic_id, request.to_updates())
    return record_response(tactic)


@router.delete("/{tactic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tactic(tactic_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    tracker.tactic_manager.delete_tactic(tactic_id)
