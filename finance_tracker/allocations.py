"""
Goal Allocation Validator

Allocations earmark part of an account's balance for a goal. Across all goals
funded by one account the allocations may never exceed the account's balance
at the moment of the write:

    available = account.balance - sum(allocations of every goal on the account)

A write asking for more than `available` is rejected with
CapacityExceededError, never clamped. Validation and the write happen under
the funding account's lock so two concurrent allocations cannot both pass
against the same headroom.

The check is advisory with respect to later spending: an expense recorded
after the allocation can leave an account over-allocated, which reporting
surfaces instead of reconciling.
"""

from contextlib import contextmanager
from decimal import Decimal
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .accounts import Account
from .exceptions import CapacityExceededError
from .goals import Goal, GoalAllocation
from .locking import AccountLockRegistry
from .logging_config import get_logger, log_action
from .money import ZERO, parse_amount, parse_date, quantize
from .schema import ACCOUNTS, GOAL_ALLOCATIONS, GOALS
from .store import LedgerStore
from .validation import check_update_fields, optional_text, require_text


class AllocationManager:
    """Creates and edits goal allocations within account headroom"""

    UPDATABLE_FIELDS = ("goal_id", "amount", "date", "description")

    def __init__(self, store: LedgerStore, locks: AccountLockRegistry):
        self.store = store
        self.locks = locks
        self.table_name = GOAL_ALLOCATIONS
        self.logger = get_logger("finance_tracker.allocations")

    def get_allocated_total(self, account_id: str, exclude_allocation_id: Optional[str] = None) -> Decimal:
        """Sum of allocations across every goal funded by the account"""
        total = ZERO
        for goal in self.store.find(GOALS, {"account_id": account_id}):
            for row in self.store.find(self.table_name, {"goal_id": goal['id']}):
                if row['id'] == exclude_allocation_id:
                    continue
                total += Decimal(row['amount'])
        return quantize(total)

    def get_available(self, account_id: str, exclude_allocation_id: Optional[str] = None) -> Decimal:
        """Balance not yet earmarked for any goal; negative when over-allocated"""
        account = Account.from_dict(self.store.require(ACCOUNTS, account_id))
        return quantize(account.balance - self.get_allocated_total(account_id, exclude_allocation_id))

    def check_capacity(
        self,
        account_id: str,
        requested: Decimal,
        exclude_allocation_id: Optional[str] = None
    ) -> Decimal:
        """
        Ensure `requested` fits in the account's headroom.

        Returns:
            The headroom the request was checked against

        Raises:
            NotFoundError: account does not exist
            CapacityExceededError: requested exceeds available
        """
        with self.locks.hold(account_id):
            available = self.get_available(account_id, exclude_allocation_id)
            if requested > available:
                self.logger.warning(
                    f"Allocation rejected for account {account_id}: "
                    f"requested {requested}, available {available}"
                )
                raise CapacityExceededError(account_id, available, requested)
            return available

    def create_allocation(
        self,
        goal_id: str,
        amount: Any,
        date: Any = None,
        description: Optional[str] = None
    ) -> GoalAllocation:
        """
        Allocate part of the funding account's balance to a goal

        Args:
            goal_id: Goal receiving the allocation
            amount: Positive decimal string
            date: Allocation date, defaults to today
            description: Free text

        Returns:
            Created GoalAllocation

        Raises:
            NotFoundError: goal or its funding account does not exist
            CapacityExceededError: amount exceeds the account's headroom
        """
        requested = parse_amount(amount, positive=True)
        allocation_date = parse_date(date) if date else datetime.now(timezone.utc).date()
        note = optional_text(description, "description")
        goal_id = require_text(goal_id, "goal_id")

        with self._hold_funding_accounts(lambda: [self._require_goal(goal_id)]) as (goal,):
            self.check_capacity(goal.account_id, requested)

            now = datetime.now(timezone.utc)
            allocation = GoalAllocation(
                id=self.store.new_id(),
                created_at=now,
                updated_at=now,
                goal_id=goal.id,
                amount=requested,
                date=allocation_date,
                description=note
            )
            self.store.save(self.table_name, allocation)

        log_action(
            self.logger, "info", "Goal allocation created",
            action="create_allocation", resource=f"goal_allocation:{allocation.id}",
            extra={"goal_id": goal.id, "account_id": goal.account_id, "amount": str(requested)}
        )
        return allocation

    def get_allocation(self, allocation_id: str) -> Optional[GoalAllocation]:
        data = self.store.load(self.table_name, allocation_id)
        if data:
            return GoalAllocation.from_dict(data)
        return None

    def list_allocations(self) -> List[GoalAllocation]:
        return [GoalAllocation.from_dict(data) for data in self.store.load_all(self.table_name)]

    def list_by_goal(self, goal_id: str) -> List[GoalAllocation]:
        allocations = [
            GoalAllocation.from_dict(data)
            for data in self.store.find(self.table_name, {"goal_id": goal_id})
        ]
        allocations.sort(key=lambda a: (a.date, a.created_at), reverse=True)
        return allocations

    def update_allocation(self, allocation_id: str, updates: Dict[str, Any]) -> GoalAllocation:
        """
        Apply a partial update. Changing the amount or the goal re-validates
        against the (possibly different) funding account, excluding this
        allocation's current amount from the total.
        """
        check_update_fields(updates, self.UPDATABLE_FIELDS)
        target_goal_id = None
        if "goal_id" in updates:
            target_goal_id = require_text(updates["goal_id"], "goal_id")

        def resolve() -> List[Goal]:
            current = GoalAllocation.from_dict(self.store.require(self.table_name, allocation_id))
            goals = [self._require_goal(current.goal_id)]
            if target_goal_id:
                goals.append(self._require_goal(target_goal_id))
            return goals

        with self._hold_funding_accounts(resolve) as goals:
            new_goal = goals[-1]
            allocation = GoalAllocation.from_dict(self.store.require(self.table_name, allocation_id))
            if "amount" in updates:
                allocation.amount = parse_amount(updates["amount"], positive=True)
            if "date" in updates:
                allocation.date = parse_date(updates["date"])
            if "description" in updates:
                allocation.description = optional_text(updates["description"], "description")

            if "amount" in updates or "goal_id" in updates:
                self.check_capacity(new_goal.account_id, allocation.amount, exclude_allocation_id=allocation_id)
            allocation.goal_id = new_goal.id

            allocation.updated_at = datetime.now(timezone.utc)
            self.store.save(self.table_name, allocation)

        log_action(
            self.logger, "info", "Goal allocation updated",
            action="update_allocation", resource=f"goal_allocation:{allocation_id}",
            extra={"fields": sorted(updates), "goal_id": allocation.goal_id, "amount": str(allocation.amount)}
        )
        return allocation

    def delete_allocation(self, allocation_id: str) -> None:
        self.store.delete(self.table_name, allocation_id)
        log_action(
            self.logger, "info", "Goal allocation deleted",
            action="delete_allocation", resource=f"goal_allocation:{allocation_id}"
        )

    @contextmanager
    def _hold_funding_accounts(self, resolve: Callable[[], List[Goal]]):
        """
        Hold the locks of the accounts funding the goals `resolve` returns.

        A goal can move to another account while we wait for its lock, so the
        goals are resolved again once the locks are held; if any funding
        account changed in between, the locks are released and taken again.
        """
        while True:
            expected = [goal.account_id for goal in resolve()]
            with self.locks.hold(*expected):
                goals = resolve()
                if [goal.account_id for goal in goals] == expected:
                    yield goals
                    return
            self.logger.debug("Goal moved to another account while locking; retrying")

    def _require_goal(self, goal_id: str) -> Goal:
        return Goal.from_dict(self.store.require(GOALS, goal_id))
