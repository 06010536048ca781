"""
Tests for the ledger record store: reference checks and restrict/cascade deletes
"""

import pytest
from datetime import date

from finance_tracker.config import FinanceTrackerConfig
from finance_tracker.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from finance_tracker.schema import (
    ACCOUNTS, BUDGETS, CATEGORIES, GOAL_ALLOCATIONS, GOALS, HOLDINGS, TRANSACTIONS,
    OnDelete, references_from, references_to
)
from finance_tracker.storage import InMemoryStorage
from finance_tracker.tracker import FinanceTracker


class TestForeignKeyMap:
    """Declared referential constraints"""

    def test_goal_allocations_cascade(self):
        keys = references_to(GOALS)
        assert [(fk.table, fk.on_delete) for fk in keys] == [(GOAL_ALLOCATIONS, OnDelete.CASCADE)]

    def test_account_children_restrict(self):
        children = {fk.table for fk in references_to(ACCOUNTS)}
        assert children == {TRANSACTIONS, HOLDINGS, GOALS, BUDGETS}
        assert all(fk.on_delete == OnDelete.RESTRICT for fk in references_to(ACCOUNTS))

    def test_transactions_reference_accounts_and_categories(self):
        parents = {(fk.field, fk.parent_table) for fk in references_from(TRANSACTIONS)}
        assert parents == {("account_id", ACCOUNTS), ("category_id", CATEGORIES)}


class TestLedgerStore:
    """Reference enforcement through the store"""

    def setup_method(self):
        self.tracker = FinanceTracker(InMemoryStorage(), FinanceTrackerConfig(_env_file=None))
        self.store = self.tracker.store
        self.account = self.tracker.account_manager.create_account("Checking", "checking", "1000.00")

    def test_new_ids_are_unique_uuid_strings(self):
        ids = {self.store.new_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(len(i) == 36 for i in ids)

    def test_write_with_missing_parent_fails(self):
        with pytest.raises(NotFoundError) as exc_info:
            self.tracker.transaction_manager.create_transaction(
                "Coffee", "4.50", "expense", date(2024, 5, 1), "no-such-account"
            )
        assert exc_info.value.entity == "account"
        assert self.store.load_all(TRANSACTIONS) == []

    def test_write_with_missing_optional_parent_fails(self):
        with pytest.raises(NotFoundError) as exc_info:
            self.tracker.transaction_manager.create_transaction(
                "Coffee", "4.50", "expense", date(2024, 5, 1), self.account.id, category_id="nope"
            )
        assert exc_info.value.entity == "category"

    def test_restrict_blocks_delete(self):
        self.tracker.transaction_manager.create_transaction(
            "Rent", "500.00", "expense", date(2024, 5, 1), self.account.id
        )

        with pytest.raises(ReferenceInUseError) as exc_info:
            self.store.delete(ACCOUNTS, self.account.id)

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.referencing_table == TRANSACTIONS
        assert self.store.exists(ACCOUNTS, self.account.id)

    def test_cascade_removes_children(self):
        goal = self.tracker.goal_manager.create_goal("Trip", "800.00", self.account.id)
        self.tracker.allocation_manager.create_allocation(goal.id, "100.00")
        self.tracker.allocation_manager.create_allocation(goal.id, "50.00")

        removed = self.store.delete(GOALS, goal.id)

        assert removed == 3
        assert self.store.load_all(GOAL_ALLOCATIONS) == []

    def test_delete_missing_record(self):
        with pytest.raises(NotFoundError):
            self.store.delete(GOALS, "missing")

    def test_require_and_load(self):
        assert self.store.load(ACCOUNTS, None) is None
        assert self.store.require(ACCOUNTS, self.account.id)["name"] == "Checking"
        with pytest.raises(NotFoundError) as exc_info:
            self.store.require(ACCOUNTS, "missing")
        assert str(exc_info.value) == "Account missing not found"
