"""
Test suite for accounts module

Tests account lifecycle and the rule that balances are derived, never set.
"""

import pytest
from decimal import Decimal
from datetime import date, datetime, timezone

from finance_tracker.accounts import Account, AccountType, DEFAULT_ACCOUNT_COLOR
from finance_tracker.config import FinanceTrackerConfig
from finance_tracker.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from finance_tracker.storage import InMemoryStorage
from finance_tracker.tracker import FinanceTracker


class TestAccount:
    """Test Account record"""

    def test_storage_roundtrip(self):
        now = datetime.now(timezone.utc)
        account = Account(
            id="acc-1",
            created_at=now,
            updated_at=now,
            name="Brokerage",
            account_type=AccountType.INVESTMENT,
            initial_balance=Decimal("100.00"),
            balance=Decimal("250.00")
        )

        data = account.to_dict()
        assert data["account_type"] == "investment"
        assert data["balance"] == "250.00"

        restored = Account.from_dict(data)
        assert restored == account
        assert restored.is_investment


class TestAccountManager:
    """Test account lifecycle"""

    def setup_method(self):
        self.tracker = FinanceTracker(InMemoryStorage(), FinanceTrackerConfig(_env_file=None))
        self.manager = self.tracker.account_manager

    def test_create_account_defaults(self):
        account = self.manager.create_account("Checking", "checking", "1000.00")

        assert account.balance == Decimal("1000.00")
        assert account.initial_balance == Decimal("1000.00")
        assert account.color == DEFAULT_ACCOUNT_COLOR
        assert account.is_active
        assert self.manager.get_account(account.id) == account

    def test_create_credit_account_with_negative_balance(self):
        account = self.manager.create_account("Visa", "CREDIT", "-347.89")
        assert account.account_type == AccountType.CREDIT
        assert account.balance == Decimal("-347.89")

    def test_create_rejects_bad_input(self):
        with pytest.raises(ValidationError) as exc_info:
            self.manager.create_account("Checking", "brokerage", "0")
        assert "account_type" in exc_info.value.field_errors

        with pytest.raises(ValidationError):
            self.manager.create_account("", "checking", "0")

        with pytest.raises(ValidationError):
            self.manager.create_account("Checking", "checking", 10.5)

    def test_list_accounts(self):
        self.manager.create_account("A", "checking")
        inactive = self.manager.create_account("B", "savings", is_active=False)

        assert len(self.manager.list_accounts()) == 2
        assert [a.name for a in self.manager.list_accounts(active_only=True)] == ["A"]
        assert self.manager.get_account(inactive.id).is_active is False

    def test_get_missing_account(self):
        assert self.manager.get_account("missing") is None
        with pytest.raises(NotFoundError):
            self.manager.require_account("missing")

    def test_update_fields(self):
        account = self.manager.create_account("Checking", "checking", "10.00")
        updated = self.manager.update_account(account.id, {"name": "Main", "color": "#000000", "is_active": False})

        assert updated.name == "Main"
        assert updated.color == "#000000"
        assert updated.is_active is False
        assert updated.balance == Decimal("10.00")

    @pytest.mark.parametrize("field", ["balance", "initial_balance"])
    def test_update_rejects_derived_fields(self, field):
        account = self.manager.create_account("Checking", "checking", "10.00")

        with pytest.raises(ValidationError) as exc_info:
            self.manager.update_account(account.id, {field: "999.00"})

        assert exc_info.value.field_errors == {field: "cannot be changed directly"}
        assert self.manager.get_account(account.id).balance == Decimal("10.00")

    def test_update_rejects_unknown_fields(self):
        account = self.manager.create_account("Checking", "checking")
        with pytest.raises(ValidationError) as exc_info:
            self.manager.update_account(account.id, {"owner": "someone"})
        assert exc_info.value.field_errors == {"owner": "unknown field"}

    def test_update_missing_account(self):
        with pytest.raises(NotFoundError):
            self.manager.update_account("missing", {"name": "x"})

    def test_changing_type_recomputes_balance(self):
        account = self.manager.create_account("Brokerage", "investment", "100.00")
        self.tracker.holding_manager.create_holding(
            "AAPL", "Apple Inc.", "2", "150.00", "200.00", account.id, date(2024, 1, 2)
        )
        assert self.manager.get_account(account.id).balance == Decimal("500.00")

        savings = self.manager.update_account(account.id, {"account_type": "savings"})
        assert savings.balance == Decimal("100.00")

        investment = self.manager.update_account(account.id, {"account_type": "investment"})
        assert investment.balance == Decimal("500.00")

    def test_delete_unreferenced_account(self):
        account = self.manager.create_account("Old", "checking")
        lock = self.tracker.locks.lock_for(account.id)
        self.manager.delete_account(account.id)
        assert self.manager.get_account(account.id) is None
        assert self.tracker.locks.lock_for(account.id) is not lock

    def test_delete_referenced_account_is_refused(self):
        account = self.manager.create_account("Checking", "checking", "100.00")
        self.tracker.goal_manager.create_goal("Trip", "500.00", account.id)

        lock = self.tracker.locks.lock_for(account.id)
        with pytest.raises(ReferenceInUseError):
            self.manager.delete_account(account.id)
        assert self.manager.get_account(account.id) is not None
        assert self.tracker.locks.lock_for(account.id) is lock
