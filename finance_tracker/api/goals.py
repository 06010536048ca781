"""
Savings goal endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..tracker import FinanceTracker
from .dependencies import get_tracker
from .schemas import CreateGoalRequest, UpdateGoalRequest, progress_response, record_response


router = APIRouter()


def _goal_response(tracker: FinanceTracker, goal) -> dict:
    result = record_response(goal)
    result["progress"] = progress_response(tracker.goal_manager.get_progress(goal.id))
    return result


@router.get("")
async def list_goals(tracker: FinanceTracker = Depends(get_tracker)):
    """Goals with their progress computed from allocations"""
    return [_goal_response(tracker, goal) for goal in tracker.goal_manager.list_goals()]


@router.get("/account/{account_id}")
async def list_by_account(account_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    return [_goal_response(tracker, goal) for goal in tracker.goal_manager.list_by_account(account_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_goal(request: CreateGoalRequest, tracker: FinanceTracker = Depends(get_tracker)):
    goal = tracker.goal_manager.create_goal(
        name=request.name,
        target_amount=request.target_amount,
        account_id=request.account_id,
        deadline=request.deadline,
        description=request.description,
        is_completed=request.is_completed
    )
    return _goal_response(tracker, goal)


@router.get("/{goal_id}")
async def get_goal(goal_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    goal = tracker.goal_manager.get_goal(goal_id)
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")
    return _goal_response(tracker, goal)


@router.put("/{goal_id}")
async def update_goal(
    goal_id: str,
    request: UpdateGoalRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    goal = tracker.goal_manager.update_goal(goal_id, request.to_updates())
    return _goal_response(tracker, goal)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(goal_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    """Delete a goal and all of its allocations"""
    tracker.goal_manager.delete_goal(goal_id)


@router.get("/{goal_id}/allocations")
async def list_goal_allocations(goal_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    tracker.goal_manager.require_goal(goal_id)
    return [record_response(a) for a in tracker.allocation_manager.list_by_goal(goal_id)]


@router.get("/{goal_id}/current-amount")
async def get_current_amount(goal_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    """Sum of the goal's allocations"""
    return {
        "goal_id": goal_id,
        "current_amount": str(tracker.goal_manager.get_current_amount(goal_id))
    }


@router.get("/{goal_id}/progress")
async def get_progress(goal_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    return progress_response(tracker.goal_manager.get_progress(goal_id))
