"""
Request dependencies
"""

from fastapi import Request

from ..tracker import FinanceTracker


def get_tracker(request: Request) -> FinanceTracker:
    return request.app.state.tracker
