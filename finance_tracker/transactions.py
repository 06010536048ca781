"""
Transaction Recording Module

Records income, expense and transfer transactions against an account.
Every create, update and delete recomputes the owning account's balance from
scratch; moving a transaction to another account recomputes both accounts.
"""

from decimal import Decimal
from datetime import date, datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from enum import Enum

from .locking import AccountLockRegistry
from .logging_config import get_logger, log_action
from .money import parse_amount, parse_date
from .schema import TRANSACTIONS
from .storage import StorageRecord
from .store import LedgerStore
from .validation import (
    check_update_fields, optional_id, optional_text, parse_enum, require_text
)

if TYPE_CHECKING:
    from .balances import BalanceCalculator


class TransactionType(Enum):
    """Types of recorded transactions"""
    INCOME = "income"        # Adds to the account
    EXPENSE = "expense"      # Subtracts from the account
    TRANSFER = "transfer"    # Money leaving the account; no paired credit leg


@dataclass
class Transaction(StorageRecord):
    """
    A single movement of money on one account. `amount` is always a
    non-negative magnitude; the type decides the sign.
    """
    description: str
    amount: Decimal
    transaction_type: TransactionType
    date: date
    account_id: str
    category_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this transaction on its account's balance"""
        if self.transaction_type == TransactionType.INCOME:
            return self.amount
        return -self.amount

    @property
    def is_expense(self) -> bool:
        return self.transaction_type == TransactionType.EXPENSE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            **cls._timestamps(data),
            description=data['description'],
            amount=Decimal(data['amount']),
            transaction_type=TransactionType(data['transaction_type']),
            date=date.fromisoformat(data['date']),
            account_id=data['account_id'],
            category_id=data.get('category_id'),
            notes=data.get('notes')
        )


class TransactionManager:
    """
    Records transactions and keeps account balances in step with them
    """

    UPDATABLE_FIELDS = (
        "description", "amount", "transaction_type", "date",
        "account_id", "category_id", "notes"
    )

    def __init__(
        self,
        store: LedgerStore,
        balance_calculator: 'BalanceCalculator',
        locks: AccountLockRegistry
    ):
        self.store = store
        self.balance_calculator = balance_calculator
        self.locks = locks
        self.table_name = TRANSACTIONS
        self.logger = get_logger("finance_tracker.transactions")

    def create_transaction(
        self,
        description: str,
        amount: Any,
        transaction_type: Any,
        date: Any,
        account_id: str,
        category_id: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Transaction:
        """
        Record a transaction and recompute the account balance

        Args:
            description: What the money was for
            amount: Non-negative decimal string
            transaction_type: income, expense or transfer
            date: ISO date or date object
            account_id: Owning account (must exist)
            category_id: Optional category (must exist when given)
            notes: Free text

        Returns:
            Created Transaction
        """
        now = datetime.now(timezone.utc)
        transaction = Transaction(
            id=self.store.new_id(),
            created_at=now,
            updated_at=now,
            description=require_text(description, "description"),
            amount=parse_amount(amount),
            transaction_type=parse_enum(TransactionType, transaction_type, "transaction_type"),
            date=parse_date(date),
            account_id=require_text(account_id, "account_id"),
            category_id=optional_id(category_id, "category_id"),
            notes=optional_text(notes, "notes")
        )

        with self.locks.hold(transaction.account_id):
            with self.store.atomic():
                self.store.save(self.table_name, transaction)
                self.balance_calculator.recompute_balance(transaction.account_id)

        log_action(
            self.logger, "info", f"Transaction created: {transaction.transaction_type.value}",
            action="create_transaction", resource=f"transaction:{transaction.id}",
            extra={
                "account_id": transaction.account_id,
                "category_id": transaction.category_id,
                "amount": str(transaction.amount),
                "date": transaction.date.isoformat()
            }
        )
        return transaction

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID"""
        data = self.store.load(self.table_name, transaction_id)
        if data:
            return Transaction.from_dict(data)
        return None

    def list_transactions(self) -> List[Transaction]:
        return self._sorted(self.store.load_all(self.table_name))

    def list_by_account(self, account_id: str) -> List[Transaction]:
        return self._sorted(self.store.find(self.table_name, {"account_id": account_id}))

    def list_by_category(self, category_id: str) -> List[Transaction]:
        return self._sorted(self.store.find(self.table_name, {"category_id": category_id}))

    def update_transaction(self, transaction_id: str, updates: Dict[str, Any]) -> Transaction:
        """
        Apply a partial update. If the account changes, both the old and the
        new account are recomputed.
        """
        check_update_fields(updates, self.UPDATABLE_FIELDS)
        current = Transaction.from_dict(self.store.require(self.table_name, transaction_id))
        old_account_id = current.account_id
        new_account_id = old_account_id
        if "account_id" in updates:
            new_account_id = require_text(updates["account_id"], "account_id")

        with self.locks.hold(old_account_id, new_account_id):
            with self.store.atomic():
                transaction = Transaction.from_dict(self.store.require(self.table_name, transaction_id))
                self._apply_updates(transaction, updates)
                transaction.updated_at = datetime.now(timezone.utc)
                self.store.save(self.table_name, transaction)

                self.balance_calculator.recompute_balance(transaction.account_id)
                if transaction.account_id != old_account_id:
                    self.balance_calculator.recompute_balance(old_account_id)

        log_action(
            self.logger, "info", "Transaction updated",
            action="update_transaction", resource=f"transaction:{transaction_id}",
            extra={"fields": sorted(updates), "account_id": transaction.account_id}
        )
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction; the balance is recomputed, not reversed"""
        transaction = Transaction.from_dict(self.store.require(self.table_name, transaction_id))

        with self.locks.hold(transaction.account_id):
            with self.store.atomic():
                self.store.delete(self.table_name, transaction_id)
                self.balance_calculator.recompute_balance(transaction.account_id)

        log_action(
            self.logger, "info", "Transaction deleted",
            action="delete_transaction", resource=f"transaction:{transaction_id}",
            extra={"account_id": transaction.account_id}
        )

    def _apply_updates(self, transaction: Transaction, updates: Dict[str, Any]) -> None:
        if "description" in updates:
            transaction.description = require_text(updates["description"], "description")
        if "amount" in updates:
            transaction.amount = parse_amount(updates["amount"])
        if "transaction_type" in updates:
            transaction.transaction_type = parse_enum(
                TransactionType, updates["transaction_type"], "transaction_type"
            )
        if "date" in updates:
            transaction.date = parse_date(updates["date"])
        if "account_id" in updates:
            transaction.account_id = require_text(updates["account_id"], "account_id")
        if "category_id" in updates:
            transaction.category_id = optional_id(updates["category_id"], "category_id")
        if "notes" in updates:
            transaction.notes = optional_text(updates["notes"], "notes")

    @staticmethod
    def _sorted(rows: List[Dict[str, Any]]) -> List[Transaction]:
        transactions = [Transaction.from_dict(data) for data in rows]
        transactions.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return transactions
