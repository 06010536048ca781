"""
Tests for investment holdings
"""

import pytest
from decimal import Decimal
from datetime import date

from finance_tracker.config import FinanceTrackerConfig
from finance_tracker.exceptions import NotFoundError, ValidationError
from finance_tracker.storage import InMemoryStorage
from finance_tracker.tracker import FinanceTracker


class TestHoldingManager:
    """Holding CRUD and account revaluation"""

    def setup_method(self):
        self.tracker = FinanceTracker(InMemoryStorage(), FinanceTrackerConfig(_env_file=None))
        self.manager = self.tracker.holding_manager
        self.accounts = self.tracker.account_manager
        self.brokerage = self.accounts.create_account("Brokerage", "investment", "0.00")
        self.retirement = self.accounts.create_account("401k", "investment", "0.00")

    def balance(self, account):
        return self.accounts.get_account(account.id).balance

    def test_create_holding(self):
        holding = self.manager.create_holding(
            "aapl", "Apple Inc.", "10.12345", "150.00", "175.00", self.brokerage.id, "2024-01-02",
            notes="long term"
        )

        assert holding.symbol == "AAPL"
        assert holding.shares == Decimal("10.1235")
        assert holding.purchase_date == date(2024, 1, 2)
        assert self.manager.get_holding(holding.id) == holding

    def test_derived_values(self):
        holding = self.manager.create_holding(
            "TSLA", "Tesla", "3", "200.00", "180.50", self.brokerage.id, date(2024, 1, 2)
        )
        assert holding.market_value == Decimal("541.50")
        assert holding.cost_basis == Decimal("600.00")
        assert holding.unrealized_gain == Decimal("-58.50")

    @pytest.mark.parametrize("shares", ["0", "-1", 1.5])
    def test_shares_must_be_positive_decimal(self, shares):
        with pytest.raises(ValidationError):
            self.manager.create_holding("X", "X", shares, "1.00", "1.00", self.brokerage.id, "2024-01-02")

    def test_missing_account(self):
        with pytest.raises(NotFoundError):
            self.manager.create_holding("X", "X", "1", "1.00", "1.00", "missing", "2024-01-02")
        assert self.manager.list_holdings() == []

    def test_non_investment_account_logs_warning(self, caplog):
        checking = self.accounts.create_account("Checking", "checking", "10.00")
        with caplog.at_level("WARNING", logger="finance_tracker.holdings"):
            self.manager.create_holding("X", "X", "1", "1.00", "5.00", checking.id, "2024-01-02")

        assert "non-investment" in caplog.text
        assert self.balance(checking) == Decimal("10.00")

    def test_price_update_revalues_account(self):
        holding = self.manager.create_holding(
            "NVDA", "NVIDIA", "4", "100.00", "100.00", self.brokerage.id, "2024-01-02"
        )
        assert self.balance(self.brokerage) == Decimal("400.00")

        updated = self.manager.update_price(holding.id, "125.25")
        assert updated.current_price == Decimal("125.25")
        assert self.balance(self.brokerage) == Decimal("501.00")

    def test_moving_holding_recomputes_both(self):
        holding = self.manager.create_holding(
            "AMD", "AMD", "2", "100.00", "150.00", self.brokerage.id, "2024-01-02"
        )
        self.manager.update_holding(holding.id, {"account_id": self.retirement.id})

        assert self.balance(self.brokerage) == Decimal("0.00")
        assert self.balance(self.retirement) == Decimal("300.00")
        assert [h.id for h in self.manager.list_by_account(self.retirement.id)] == [holding.id]

    def test_delete_recomputes(self):
        holding = self.manager.create_holding(
            "AMD", "AMD", "2", "100.00", "150.00", self.brokerage.id, "2024-01-02"
        )
        self.manager.delete_holding(holding.id)

        assert self.manager.get_holding(holding.id) is None
        assert self.balance(self.brokerage) == Decimal("0.00")

    def test_update_rejects_unknown_field(self):
        holding = self.manager.create_holding("AMD", "AMD", "1", "1.00", "1.00", self.brokerage.id, "2024-01-02")
        with pytest.raises(ValidationError):
            self.manager.update_holding(holding.id, {"market_value": "10"})
