"""
Category endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..tracker import FinanceTracker
from .dependencies import get_tracker
from .schemas import CreateCategoryRequest, UpdateCategoryRequest, record_response


router = APIRouter()


@router.get("")
async def list_categories(tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(category) for category in tracker.category_manager.list_categories()]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(request: CreateCategoryRequest, tracker: FinanceTracker = Depends(get_tracker)):
    category = tracker.category_manager.create_category(
        name=request.name,
        category_type=request.category_type,
        color=request.color,
        parent_id=request.parent_id
    )
    return record_response(category)


@router.get("/{category_id}")
async def get_category(category_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    category = tracker.category_manager.get_category(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return record_response(category)


@router.get("/{category_id}/subcategories")
async def list_subcategories(category_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    return [record_response(c) for c in tracker.category_manager.list_subcategories(category_id)]


@router.put("/{category_id}")
async def update_category(
    category_id: str,
    request: UpdateCategoryRequest,
    tracker: FinanceTracker = Depends(get_tracker)
):
    category = tracker.category_manager.update_category(category_id, request.to_updates())
    return record_response(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, tracker: FinanceTracker = Depends(get_tracker)):
    tracker.category_manager.delete_category(category_id)
