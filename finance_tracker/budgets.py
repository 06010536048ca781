"""
Budget Module

Budgets cap expense spending over a rolling period. Spending is never cached:
every read re-aggregates expense transactions inside the budget's current
window, optionally narrowed to one account and/or one category.

Period windows run from the period start to `as_of` inclusive:

    weekly   most recent Sunday (the same day when `as_of` is a Sunday)
    monthly  first day of the month
    yearly   January 1st
"""

from decimal import Decimal
from datetime import date, datetime, timedelta, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum

from .logging_config import get_logger, log_action
from .money import ZERO, parse_amount, parse_decimal, quantize
from .schema import BUDGETS, TRANSACTIONS
from .storage import StorageRecord
from .store import LedgerStore
from .transactions import Transaction, TransactionType
from .validation import check_update_fields, optional_id, optional_text, parse_enum, require_text


class BudgetPeriod(Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetStatus(Enum):
    ON_TRACK = "on_track"
    NEAR_LIMIT = "near_limit"
    OVER_BUDGET = "over_budget"


DEFAULT_ALERT_THRESHOLD = Decimal("0.80")


@dataclass
class Budget(StorageRecord):
    name: str
    amount: Decimal
    period: str
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    alert_threshold: Decimal = DEFAULT_ALERT_THRESHOLD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Budget':
        return cls(
            **cls._timestamps(data),
            name=data['name'],
            amount=Decimal(data['amount']),
            period=data.get('period') or BudgetPeriod.MONTHLY.value,
            account_id=data.get('account_id'),
            category_id=data.get('category_id'),
            description=data.get('description'),
            is_active=data.get('is_active', True),
            alert_threshold=Decimal(data.get('alert_threshold') or DEFAULT_ALERT_THRESHOLD)
        )


@dataclass
class BudgetReport:
    """Spending against a budget within its current window"""
    budget_id: str
    spent: Decimal
    amount: Decimal
    percentage: Decimal
    remaining: Decimal
    status: BudgetStatus
    threshold_reached: bool
    start: date
    end: date


def period_window(period: str, as_of: date) -> Tuple[date, date]:
    """
    Window [start, as_of] for a budget period. Unrecognized periods, which
    can only come from stored data, fall back to monthly.
    """
    if period == BudgetPeriod.WEEKLY.value:
        # weekday() is Monday=0; weeks start on Sunday
        start = as_of - timedelta(days=(as_of.weekday() + 1) % 7)
    elif period == BudgetPeriod.YEARLY.value:
        start = as_of.replace(month=1, day=1)
    else:
        start = as_of.replace(day=1)
    return start, as_of


def classify_budget(spent: Decimal, amount: Decimal, alert_threshold: Decimal) -> BudgetStatus:
    ratio = spent / amount
    if ratio >= 1:
        return BudgetStatus.OVER_BUDGET
    if ratio >= alert_threshold:
        return BudgetStatus.NEAR_LIMIT
    return BudgetStatus.ON_TRACK


def _parse_threshold(value: Any) -> Decimal:
    return parse_decimal(
        value, "alert_threshold", minimum=Decimal("0"), allow_minimum=False, maximum=Decimal("1")
    )


class BudgetManager:
    """Manages budgets and aggregates spending against them"""

    UPDATABLE_FIELDS = (
        "name", "amount", "period", "account_id", "category_id",
        "description", "is_active", "alert_threshold"
    )

    def __init__(self, store: LedgerStore, default_alert_threshold: Decimal = DEFAULT_ALERT_THRESHOLD):
        self.store = store
        self.default_alert_threshold = default_alert_threshold
        self.table_name = BUDGETS
        self.logger = get_logger("finance_tracker.budgets")

    def create_budget(
        self,
        name: str,
        amount: Any,
        period: Any = BudgetPeriod.MONTHLY,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        description: Optional[str] = None,
        is_active: bool = True,
        alert_threshold: Any = None
    ) -> Budget:
        """
        Create a budget

        Args:
            name: Display name
            amount: Spending cap per period, positive decimal string
            period: weekly, monthly or yearly
            account_id: Only count spending on this account
            category_id: Only count spending in this category
            description: Free text
            is_active: Whether the budget is shown as active
            alert_threshold: Fraction of the cap that flags the budget as
                near its limit; defaults to the configured threshold

        Returns:
            Created Budget
        """
        now = datetime.now(timezone.utc)
        threshold = self.default_alert_threshold if alert_threshold is None else alert_threshold
        budget = Budget(
            id=self.store.new_id(),
            created_at=now,
            updated_at=now,
            name=require_text(name, "name"),
            amount=parse_amount(amount, positive=True),
            period=parse_enum(BudgetPeriod, period, "period").value,
            account_id=optional_id(account_id, "account_id"),
            category_id=optional_id(category_id, "category_id"),
            description=optional_text(description, "description"),
            is_active=bool(is_active),
            alert_threshold=_parse_threshold(threshold)
        )
        self.store.save(self.table_name, budget)

        log_action(
            self.logger, "info", f"Budget created: {budget.name}",
            action="create_budget", resource=f"budget:{budget.id}",
            extra={
                "amount": str(budget.amount),
                "period": budget.period,
                "account_id": budget.account_id,
                "category_id": budget.category_id
            }
        )
        return budget

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        data = self.store.load(self.table_name, budget_id)
        if data:
            return Budget.from_dict(data)
        return None

    def list_budgets(self, active_only: bool = False) -> List[Budget]:
        budgets = [Budget.from_dict(data) for data in self.store.load_all(self.table_name)]
        if active_only:
            budgets = [budget for budget in budgets if budget.is_active]
        return budgets

    def list_by_account(self, account_id: str) -> List[Budget]:
        return [Budget.from_dict(data) for data in self.store.find(self.table_name, {"account_id": account_id})]

    def list_by_category(self, category_id: str) -> List[Budget]:
        return [Budget.from_dict(data) for data in self.store.find(self.table_name, {"category_id": category_id})]

    def update_budget(self, budget_id: str, updates: Dict[str, Any]) -> Budget:
        check_update_fields(updates, self.UPDATABLE_FIELDS)
        budget = Budget.from_dict(self.store.require(self.table_name, budget_id))

        if "name" in updates:
            budget.name = require_text(updates["name"], "name")
        if "amount" in updates:
            budget.amount = parse_amount(updates["amount"], positive=True)
        if "period" in updates:
            budget.period = parse_enum(BudgetPeriod, updates["period"], "period").value
        if "account_id" in updates:
            budget.account_id = optional_id(updates["account_id"], "account_id")
        if "category_id" in updates:
            budget.category_id = optional_id(updates["category_id"], "category_id")
        if "description" in updates:
            budget.description = optional_text(updates["description"], "description")
        if "is_active" in updates:
            budget.is_active = bool(updates["is_active"])
        if "alert_threshold" in updates:
            budget.alert_threshold = _parse_threshold(updates["alert_threshold"])

        budget.updated_at = datetime.now(timezone.utc)
        self.store.save(self.table_name, budget)

        log_action(
            self.logger, "info", f"Budget updated: {budget.name}",
            action="update_budget", resource=f"budget:{budget_id}",
            extra={"fields": sorted(updates)}
        )
        return budget

    def delete_budget(self, budget_id: str) -> None:
        self.store.delete(self.table_name, budget_id)
        log_action(
            self.logger, "info", "Budget deleted",
            action="delete_budget", resource=f"budget:{budget_id}"
        )

    def get_budget_spending(self, budget_id: str, as_of: Optional[date] = None) -> Decimal:
        """
        Total expense spending in the budget's current window.

        A missing budget yields zero rather than an error.
        """
        data = self.store.load(self.table_name, budget_id)
        if data is None:
            return ZERO
        budget = Budget.from_dict(data)
        start, end = period_window(budget.period, as_of or date.today())
        return self._spending(budget, start, end)

    def get_budget_status(self, budget_id: str, as_of: Optional[date] = None) -> BudgetReport:
        """Spending, headroom and alert status for the current window"""
        budget = Budget.from_dict(self.store.require(self.table_name, budget_id))
        start, end = period_window(budget.period, as_of or date.today())
        spent = self._spending(budget, start, end)
        status = classify_budget(spent, budget.amount, budget.alert_threshold)

        return BudgetReport(
            budget_id=budget_id,
            spent=spent,
            amount=budget.amount,
            percentage=quantize(spent / budget.amount * 100),
            remaining=max(budget.amount - spent, ZERO),
            status=status,
            threshold_reached=status != BudgetStatus.ON_TRACK,
            start=start,
            end=end
        )

    def _spending(self, budget: Budget, start: date, end: date) -> Decimal:
        filters = {"transaction_type": TransactionType.EXPENSE.value}
        if budget.account_id:
            filters["account_id"] = budget.account_id
        if budget.category_id:
            filters["category_id"] = budget.category_id

        total = ZERO
        for row in self.store.find(TRANSACTIONS, filters):
            transaction = Transaction.from_dict(row)
            if start <= transaction.date <= end:
                total += transaction.amount
        return quantize(total)
