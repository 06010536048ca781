"""
Reporting Engine Module

Read-only summaries computed fresh from the record store on every call:
dashboard totals, spending per category, monthly cash flow, investment
portfolio and per-account goal allocation headroom. Results share one
ReportResult shape and can be exported as dict, JSON or CSV.
"""

from decimal import Decimal
from datetime import date, datetime, timedelta, timezone
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple, Union
from enum import Enum
import csv
import io
import json

from .accounts import AccountManager
from .allocations import AllocationManager
from .budgets import BudgetManager, BudgetStatus
from .categories import CategoryManager
from .exceptions import ValidationError
from .goals import GoalManager
from .holdings import HoldingManager
from .money import ZERO, quantize
from .transactions import TransactionManager, TransactionType


class ReportFormat(Enum):
    """Output formats for reports"""
    DICT = "dict"
    CSV = "csv"
    JSON = "json"


@dataclass
class ReportResult:
    """Result of a report execution"""
    report_id: str
    generated_at: datetime
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    data: List[Dict[str, Any]] = field(default_factory=list)
    totals: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.metadata:
            self.metadata = {'row_count': len(self.data)}


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if not whole:
        return ZERO
    return quantize(part / whole * 100)


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _shift_months(month: date, offset: int) -> date:
    index = month.year * 12 + (month.month - 1) + offset
    return date(index // 12, index % 12 + 1, 1)


class ReportingEngine:
    """
    Summaries over accounts, transactions, holdings, goals and budgets
    """

    def __init__(
        self,
        account_manager: AccountManager,
        category_manager: CategoryManager,
        transaction_manager: TransactionManager,
        holding_manager: HoldingManager,
        goal_manager: GoalManager,
        allocation_manager: AllocationManager,
        budget_manager: BudgetManager
    ):
        self.account_manager = account_manager
        self.category_manager = category_manager
        self.transaction_manager = transaction_manager
        self.holding_manager = holding_manager
        self.goal_manager = goal_manager
        self.allocation_manager = allocation_manager
        self.budget_manager = budget_manager

    def dashboard_summary(self, as_of: Optional[date] = None) -> ReportResult:
        """
        Net worth across active accounts plus this month's income and
        spending, goal progress and budget alerts
        """
        as_of = as_of or date.today()
        month_start = _month_start(as_of)

        data = []
        total_balance = ZERO
        for account in self.account_manager.list_accounts(active_only=True):
            total_balance += account.balance
            data.append({
                'account_id': account.id,
                'name': account.name,
                'account_type': account.account_type.value,
                'balance': account.balance
            })

        income, expenses, _ = self._flows(month_start, as_of)

        goals = self.goal_manager.list_goals()
        goals_reached = sum(1 for goal in goals if self.goal_manager.get_progress(goal.id).is_reached)

        budget_alerts = 0
        budgets_over = 0
        for budget in self.budget_manager.list_budgets(active_only=True):
            status = self.budget_manager.get_budget_status(budget.id, as_of).status
            if status == BudgetStatus.OVER_BUDGET:
                budgets_over += 1
            if status != BudgetStatus.ON_TRACK:
                budget_alerts += 1

        totals = {
            'total_balance': quantize(total_balance),
            'account_count': len(data),
            'monthly_income': income,
            'monthly_expenses': expenses,
            'monthly_net': quantize(income - expenses),
            'goal_count': len(goals),
            'goals_reached': goals_reached,
            'budget_alerts': budget_alerts,
            'budgets_over': budgets_over
        }

        return ReportResult(
            report_id="dashboard_summary",
            generated_at=datetime.now(timezone.utc),
            period_start=month_start,
            period_end=as_of,
            data=data,
            totals=totals
        )

    def category_spending(
        self,
        start: date,
        end: date,
        account_id: Optional[str] = None
    ) -> ReportResult:
        """
        Expense spending per category in [start, end]; subcategory totals are
        also rolled up into their parent's `rollup_total`.
        """
        if start > end:
            raise ValidationError.for_field("start", "must not be after end")

        categories = {category.id: category for category in self.category_manager.list_categories()}
        direct: Dict[Optional[str], Decimal] = {}
        counts: Dict[Optional[str], int] = {}

        for transaction in self.transaction_manager.list_transactions():
            if not transaction.is_expense or not start <= transaction.date <= end:
                continue
            if account_id and transaction.account_id != account_id:
                continue
            direct[transaction.category_id] = direct.get(transaction.category_id, ZERO) + transaction.amount
            counts[transaction.category_id] = counts.get(transaction.category_id, 0) + 1

        rollup: Dict[Optional[str], Decimal] = dict(direct)
        for category_id, amount in direct.items():
            category = categories.get(category_id)
            if category is not None and category.parent_id:
                rollup[category.parent_id] = rollup.get(category.parent_id, ZERO) + amount

        total = sum(direct.values(), ZERO)
        data = []
        for category_id in set(direct) | set(rollup):
            category = categories.get(category_id)
            spent = direct.get(category_id, ZERO)
            data.append({
                'category_id': category_id,
                'name': category.name if category else "Uncategorized",
                'parent_id': category.parent_id if category else None,
                'total': quantize(spent),
                'rollup_total': quantize(rollup.get(category_id, ZERO)),
                'transaction_count': counts.get(category_id, 0),
                'percentage': _percentage(spent, total)
            })
        data.sort(key=lambda row: (-row['rollup_total'], row['name']))

        return ReportResult(
            report_id="category_spending",
            generated_at=datetime.now(timezone.utc),
            period_start=start,
            period_end=end,
            data=data,
            totals={'total_spent': quantize(total), 'category_count': len(data)}
        )

    def monthly_cash_flow(self, months: int = 6, as_of: Optional[date] = None) -> ReportResult:
        """Income, expenses and transfers per calendar month, oldest first"""
        if months < 1:
            raise ValidationError.for_field("months", "must be at least 1")
        as_of = as_of or date.today()
        current = _month_start(as_of)

        data = []
        for offset in range(months - 1, -1, -1):
            month = _shift_months(current, -offset)
            month_end = min(_shift_months(month, 1) - timedelta(days=1), as_of)
            income, expenses, transfers = self._flows(month, month_end)
            data.append({
                'month': month.strftime("%Y-%m"),
                'income': income,
                'expenses': expenses,
                'transfers': transfers,
                'net': quantize(income - expenses - transfers)
            })

        totals = {
            'income': quantize(sum((row['income'] for row in data), ZERO)),
            'expenses': quantize(sum((row['expenses'] for row in data), ZERO)),
            'transfers': quantize(sum((row['transfers'] for row in data), ZERO)),
        }
        totals['net'] = quantize(totals['income'] - totals['expenses'] - totals['transfers'])

        return ReportResult(
            report_id="monthly_cash_flow",
            generated_at=datetime.now(timezone.utc),
            period_start=_shift_months(current, -(months - 1)),
            period_end=as_of,
            data=data,
            totals=totals
        )

    def portfolio_summary(self, account_id: Optional[str] = None) -> ReportResult:
        """Market value, cost basis and unrealized gain per holding"""
        if account_id:
            self.account_manager.require_account(account_id)
            holdings = self.holding_manager.list_by_account(account_id)
        else:
            holdings = self.holding_manager.list_holdings()

        data = []
        market_value = ZERO
        cost_basis = ZERO
        for holding in holdings:
            market_value += holding.market_value
            cost_basis += holding.cost_basis
            data.append({
                'holding_id': holding.id,
                'symbol': holding.symbol,
                'account_id': holding.account_id,
                'shares': holding.shares,
                'current_price': holding.current_price,
                'market_value': quantize(holding.market_value),
                'cost_basis': quantize(holding.cost_basis),
                'unrealized_gain': holding.unrealized_gain,
                'gain_percentage': _percentage(holding.market_value - holding.cost_basis, holding.cost_basis)
            })
        data.sort(key=lambda row: -row['market_value'])

        totals = {
            'market_value': quantize(market_value),
            'cost_basis': quantize(cost_basis),
            'unrealized_gain': quantize(market_value - cost_basis),
            'gain_percentage': _percentage(market_value - cost_basis, cost_basis),
            'holding_count': len(data)
        }

        return ReportResult(
            report_id="portfolio_summary",
            generated_at=datetime.now(timezone.utc),
            data=data,
            totals=totals
        )

    def allocation_summary(self, account_id: Optional[str] = None) -> ReportResult:
        """
        Allocated total and headroom per account. Accounts whose balance fell
        below their allocations after later spending are flagged
        `over_allocated`; nothing is reconciled automatically.
        """
        if account_id:
            accounts = [self.account_manager.require_account(account_id)]
        else:
            accounts = self.account_manager.list_accounts()

        data = []
        for account in accounts:
            allocated = self.allocation_manager.get_allocated_total(account.id)
            available = quantize(account.balance - allocated)
            data.append({
                'account_id': account.id,
                'name': account.name,
                'balance': account.balance,
                'allocated': allocated,
                'available': available,
                'goal_count': len(self.goal_manager.list_by_account(account.id)),
                'over_allocated': available < 0
            })

        return ReportResult(
            report_id="allocation_summary",
            generated_at=datetime.now(timezone.utc),
            data=data,
            totals={
                'allocated': quantize(sum((row['allocated'] for row in data), ZERO)),
                'over_allocated_accounts': sum(1 for row in data if row['over_allocated'])
            }
        )

    def export_report(self, result: ReportResult, format: ReportFormat) -> Union[Dict, str]:
        """
        Export report result in specified format
        """
        if format == ReportFormat.DICT:
            return {
                'report_id': result.report_id,
                'generated_at': result.generated_at.isoformat(),
                'period_start': result.period_start.isoformat() if result.period_start else None,
                'period_end': result.period_end.isoformat() if result.period_end else None,
                'data': result.data,
                'totals': result.totals,
                'metadata': result.metadata
            }

        elif format == ReportFormat.JSON:
            export_dict = self.export_report(result, ReportFormat.DICT)
            return json.dumps(export_dict, indent=2, default=str)

        elif format == ReportFormat.CSV:
            output = io.StringIO()

            if result.data:
                headers = list(result.data[0].keys())
                writer = csv.DictWriter(output, fieldnames=headers)
                writer.writeheader()

                for row in result.data:
                    writer.writerow(row)

            csv_content = output.getvalue()
            output.close()
            return csv_content

        else:
            raise ValueError(f"Unsupported export format: {format}")

    def _flows(self, start: date, end: date) -> Tuple[Decimal, Decimal, Decimal]:
        """(income, expenses, transfers) over [start, end] across all accounts"""
        totals = {kind: ZERO for kind in TransactionType}
        for transaction in self.transaction_manager.list_transactions():
            if start <= transaction.date <= end:
                totals[transaction.transaction_type] += transaction.amount
        return (
            quantize(totals[TransactionType.INCOME]),
            quantize(totals[TransactionType.EXPENSE]),
            quantize(totals[TransactionType.TRANSFER])
        )
