"""
Account Management Module

Manages accounts and their cached balances. The balance on an account is a
derived value: it is written only by the BalanceCalculator and is never
accepted from callers.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from enum import Enum

from .locking import AccountLockRegistry
from .logging_config import get_logger, log_action
from .money import parse_signed_amount
from .schema import ACCOUNTS
from .storage import StorageRecord
from .store import LedgerStore
from .validation import check_update_fields, parse_enum, require_text

if TYPE_CHECKING:
    from .balances import BalanceCalculator


class AccountType(Enum):
    """Kinds of tracked accounts"""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"


DEFAULT_ACCOUNT_COLOR = "#2563EB"


@dataclass
class Account(StorageRecord):
    """
    Tracked account. `initial_balance` is the immutable baseline the
    balance is recomputed from; `balance` is the cached result.
    """
    name: str
    account_type: AccountType
    initial_balance: Decimal
    balance: Decimal
    color: str = DEFAULT_ACCOUNT_COLOR
    is_active: bool = True

    @property
    def is_investment(self) -> bool:
        """Investment accounts include holdings market value in their balance"""
        return self.account_type == AccountType.INVESTMENT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        return cls(
            **cls._timestamps(data),
            name=data['name'],
            account_type=AccountType(data['account_type']),
            initial_balance=Decimal(data['initial_balance']),
            balance=Decimal(data['balance']),
            color=data.get('color') or DEFAULT_ACCOUNT_COLOR,
            is_active=data.get('is_active', True)
        )


class AccountManager:
    """
    Manages account lifecycle; balance changes go through the calculator
    """

    UPDATABLE_FIELDS = ("name", "account_type", "color", "is_active")
    DERIVED_FIELDS = ("balance", "initial_balance")

    def __init__(
        self,
        store: LedgerStore,
        balance_calculator: 'BalanceCalculator',
        locks: AccountLockRegistry
    ):
        self.store = store
        self.balance_calculator = balance_calculator
        self.locks = locks
        self.table_name = ACCOUNTS
        self.logger = get_logger("finance_tracker.accounts")

    def create_account(
        self,
        name: str,
        account_type: Any,
        initial_balance: Any = "0",
        color: Optional[str] = None,
        is_active: bool = True
    ) -> Account:
        """
        Create a new account

        Args:
            name: Display name
            account_type: checking, savings, credit or investment
            initial_balance: Opening balance as a decimal string; may be
                negative for credit accounts
            color: Display color
            is_active: Whether the account is shown as active

        Returns:
            Created Account whose balance equals its initial balance
        """
        now = datetime.now(timezone.utc)
        opening = parse_signed_amount(initial_balance, "initial_balance")

        account = Account(
            id=self.store.new_id(),
            created_at=now,
            updated_at=now,
            name=require_text(name, "name"),
            account_type=parse_enum(AccountType, account_type, "account_type"),
            initial_balance=opening,
            balance=opening,
            color=color or DEFAULT_ACCOUNT_COLOR,
            is_active=bool(is_active)
        )
        self.store.save(self.table_name, account)

        log_action(
            self.logger, "info", f"Account created: {account.name}",
            action="create_account", resource=f"account:{account.id}",
            extra={
                "account_type": account.account_type.value,
                "initial_balance": str(opening)
            }
        )
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID"""
        data = self.store.load(self.table_name, account_id)
        if data:
            return Account.from_dict(data)
        return None

    def require_account(self, account_id: str) -> Account:
        return Account.from_dict(self.store.require(self.table_name, account_id))

    def list_accounts(self, active_only: bool = False) -> List[Account]:
        """Get all accounts"""
        accounts = [Account.from_dict(data) for data in self.store.load_all(self.table_name)]
        if active_only:
            accounts = [account for account in accounts if account.is_active]
        return accounts

    def update_account(self, account_id: str, updates: Dict[str, Any]) -> Account:
        """
        Apply a partial update. Balances cannot be set directly; changing the
        account type recomputes the balance since holdings only count for
        investment accounts.
        """
        check_update_fields(updates, self.UPDATABLE_FIELDS, self.DERIVED_FIELDS)

        with self.locks.hold(account_id):
            account = self.require_account(account_id)
            old_type = account.account_type

            if "name" in updates:
                account.name = require_text(updates["name"], "name")
            if "account_type" in updates:
                account.account_type = parse_enum(AccountType, updates["account_type"], "account_type")
            if "color" in updates:
                account.color = updates["color"] or DEFAULT_ACCOUNT_COLOR
            if "is_active" in updates:
                account.is_active = bool(updates["is_active"])

            account.updated_at = datetime.now(timezone.utc)
            self.store.save(self.table_name, account)

            if account.account_type != old_type:
                self.balance_calculator.recompute_balance(account_id)
                account = self.require_account(account_id)

        log_action(
            self.logger, "info", f"Account updated: {account.name}",
            action="update_account", resource=f"account:{account_id}",
            extra={"fields": sorted(updates)}
        )
        return account

    def delete_account(self, account_id: str) -> None:
        """Delete an account; refused while anything still references it"""
        with self.locks.hold(account_id):
            self.store.delete(self.table_name, account_id)
        self.locks.forget(account_id)
        log_action(
            self.logger, "info", "Account deleted",
            action="delete_account", resource=f"account:{account_id}"
        )
