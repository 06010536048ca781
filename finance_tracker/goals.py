"""
Savings Goal Module

Goals are funded by an account. A goal's current amount is never stored: it
is the sum of its allocations, computed on every read. Deleting a goal
cascades to its allocations.
"""

from decimal import Decimal
from datetime import date, datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .locking import AccountLockRegistry
from .logging_config import get_logger, log_action
from .money import ZERO, parse_amount, parse_date, quantize
from .schema import GOAL_ALLOCATIONS, GOALS
from .storage import StorageRecord
from .store import LedgerStore
from .validation import check_update_fields, optional_text, require_text

if TYPE_CHECKING:
    from .allocations import AllocationManager


@dataclass
class Goal(StorageRecord):
    name: str
    target_amount: Decimal
    account_id: str
    deadline: Optional[date] = None
    description: Optional[str] = None
    is_completed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Goal':
        deadline = data.get('deadline')
        return cls(
            **cls._timestamps(data),
            name=data['name'],
            target_amount=Decimal(data['target_amount']),
            account_id=data['account_id'],
            deadline=date.fromisoformat(deadline) if deadline else None,
            description=data.get('description'),
            is_completed=data.get('is_completed', False)
        )


@dataclass
class GoalAllocation(StorageRecord):
    """Money set aside from the goal's funding account; moves no funds"""
    goal_id: str
    amount: Decimal
    date: date
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GoalAllocation':
        return cls(
            **cls._timestamps(data),
            goal_id=data['goal_id'],
            amount=Decimal(data['amount']),
            date=date.fromisoformat(data['date']),
            description=data.get('description')
        )


@dataclass
class GoalProgress:
    """Point-in-time view of how far a goal has come"""
    goal_id: str
    current_amount: Decimal
    target_amount: Decimal
    percentage: Decimal
    remaining: Decimal
    is_reached: bool


class GoalManager:
    """Manages goals and derives their progress from allocations"""

    UPDATABLE_FIELDS = ("name", "target_amount", "account_id", "deadline", "description", "is_completed")

    def __init__(
        self,
        store: LedgerStore,
        allocation_manager: 'AllocationManager',
        locks: AccountLockRegistry
    ):
        self.store = store
        self.allocation_manager = allocation_manager
        self.locks = locks
        self.table_name = GOALS
        self.logger = get_logger("finance_tracker.goals")

    def create_goal(
        self,
        name: str,
        target_amount: Any,
        account_id: str,
        deadline: Any = None,
        description: Optional[str] = None,
        is_completed: bool = False
    ) -> Goal:
        now = datetime.now(timezone.utc)
        goal = Goal(
            id=self.store.new_id(),
            created_at=now,
            updated_at=now,
            name=require_text(name, "name"),
            target_amount=parse_amount(target_amount, "target_amount", positive=True),
            account_id=require_text(account_id, "account_id"),
            deadline=parse_date(deadline, "deadline") if deadline else None,
            description=optional_text(description, "description"),
            is_completed=bool(is_completed)
        )
        self.store.save(self.table_name, goal)

        log_action(
            self.logger, "info", f"Goal created: {goal.name}",
            action="create_goal", resource=f"goal:{goal.id}",
            extra={"account_id": goal.account_id, "target_amount": str(goal.target_amount)}
        )
        return goal

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        data = self.store.load(self.table_name, goal_id)
        if data:
            return Goal.from_dict(data)
        return None

    def require_goal(self, goal_id: str) -> Goal:
        return Goal.from_dict(self.store.require(self.table_name, goal_id))

    def list_goals(self) -> List[Goal]:
        return [Goal.from_dict(data) for data in self.store.load_all(self.table_name)]

    def list_by_account(self, account_id: str) -> List[Goal]:
        return [Goal.from_dict(data) for data in self.store.find(self.table_name, {"account_id": account_id})]

    def update_goal(self, goal_id: str, updates: Dict[str, Any]) -> Goal:
        """
        Apply a partial update. Moving the goal to another funding account
        carries its allocations along, so they must fit in the new account's
        headroom.
        """
        check_update_fields(updates, self.UPDATABLE_FIELDS)
        requested_account_id = None
        if "account_id" in updates:
            requested_account_id = require_text(updates["account_id"], "account_id")

        while True:
            locked_account_id = self.require_goal(goal_id).account_id
            new_account_id = requested_account_id or locked_account_id
            with self.locks.hold(locked_account_id, new_account_id):
                goal = self.require_goal(goal_id)
                if goal.account_id == locked_account_id:
                    self._apply_updates(goal, goal_id, updates, new_account_id)
                    break

        log_action(
            self.logger, "info", f"Goal updated: {goal.name}",
            action="update_goal", resource=f"goal:{goal_id}",
            extra={"fields": sorted(updates)}
        )
        return goal

    def _apply_updates(self, goal: Goal, goal_id: str, updates: Dict[str, Any], new_account_id: str) -> None:
        """Apply and save an update; the caller holds the old and new account locks"""
        if "name" in updates:
            goal.name = require_text(updates["name"], "name")
        if "target_amount" in updates:
            goal.target_amount = parse_amount(updates["target_amount"], "target_amount", positive=True)
        if "deadline" in updates:
            goal.deadline = parse_date(updates["deadline"], "deadline") if updates["deadline"] else None
        if "description" in updates:
            goal.description = optional_text(updates["description"], "description")
        if "is_completed" in updates:
            goal.is_completed = bool(updates["is_completed"])

        if new_account_id != goal.account_id:
            self.allocation_manager.check_capacity(
                new_account_id, self.get_current_amount(goal_id)
            )
            goal.account_id = new_account_id

        goal.updated_at = datetime.now(timezone.utc)
        self.store.save(self.table_name, goal)

    def delete_goal(self, goal_id: str) -> int:
        """
        Delete a goal together with all of its allocations.

        Returns:
            Number of allocations removed with the goal
        """
        removed = self.store.delete(self.table_name, goal_id)
        log_action(
            self.logger, "info", "Goal deleted",
            action="delete_goal", resource=f"goal:{goal_id}",
            extra={"allocations_removed": removed - 1}
        )
        return removed - 1

    def get_current_amount(self, goal_id: str) -> Decimal:
        """Sum of the goal's allocations"""
        self.store.require(self.table_name, goal_id)
        rows = self.store.find(GOAL_ALLOCATIONS, {"goal_id": goal_id})
        return quantize(sum((Decimal(row['amount']) for row in rows), ZERO))

    def get_progress(self, goal_id: str) -> GoalProgress:
        goal = self.require_goal(goal_id)
        current = self.get_current_amount(goal_id)
        percentage = quantize(current / goal.target_amount * 100)
        return GoalProgress(
            goal_id=goal_id,
            current_amount=current,
            target_amount=goal.target_amount,
            percentage=percentage,
            remaining=max(goal.target_amount - current, ZERO),
            is_reached=current >= goal.target_amount
        )
