"""
Balance Calculator

Derives an account's balance from source records on every change:

    balance = initial_balance
              + sum(income) - sum(expense) - sum(transfer)
              + sum(shares * current_price)   (investment accounts only)

rounded half-up to two places. The cached balance is never adjusted by a
delta; recomputation from scratch is the single source of truth, which keeps
out-of-order edits and deletes exact.
"""

from decimal import Decimal
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from .accounts import Account
from .holdings import Holding
from .locking import AccountLockRegistry
from .logging_config import get_logger, log_action
from .money import ZERO, quantize
from .schema import ACCOUNTS, HOLDINGS, TRANSACTIONS
from .store import LedgerStore
from .transactions import Transaction


class BalanceCalculator:
    """Stateless balance derivation over the record store"""

    def __init__(self, store: LedgerStore, locks: AccountLockRegistry):
        self.store = store
        self.locks = locks
        self.logger = get_logger("finance_tracker.balances")

    def transactions_total(self, account_id: str) -> Decimal:
        """Net effect of all transactions on the account"""
        rows = self.store.find(TRANSACTIONS, {"account_id": account_id})
        return sum((Transaction.from_dict(row).signed_amount for row in rows), Decimal("0"))

    def holdings_value(self, account_id: str) -> Decimal:
        """Current market value of the account's holdings, rounded to cents"""
        rows = self.store.find(HOLDINGS, {"account_id": account_id})
        return quantize(self._market_value(Holding.from_dict(row) for row in rows))

    def calculate_balance(self, account: Account) -> Decimal:
        """Compute the balance for an account without persisting it"""
        total = account.initial_balance + self.transactions_total(account.id)
        if account.is_investment:
            rows = self.store.find(HOLDINGS, {"account_id": account.id})
            total += self._market_value(Holding.from_dict(row) for row in rows)
        return quantize(total)

    def recompute_balance(self, account_id: str) -> Optional[Decimal]:
        """
        Recompute and persist an account's balance.

        Returns:
            The new balance, or None when the account does not exist. A
            missing account is logged and otherwise ignored; it may have been
            deleted between the mutation and the recomputation.
        """
        with self.locks.hold(account_id):
            data = self.store.load(ACCOUNTS, account_id)
            if data is None:
                self.logger.warning(f"Balance recomputation skipped: account {account_id} not found")
                return None

            account = Account.from_dict(data)
            old_balance = account.balance
            account.balance = self.calculate_balance(account)

            if account.balance != old_balance:
                account.updated_at = datetime.now(timezone.utc)
                self.store.save(ACCOUNTS, account)
                log_action(
                    self.logger, "info", "Account balance recomputed",
                    action="recompute_balance", resource=f"account:{account_id}",
                    extra={"old_balance": str(old_balance), "new_balance": str(account.balance)}
                )
            return account.balance

    def recompute_all(self) -> Dict[str, Decimal]:
        """Recompute every account, e.g. after a bulk import"""
        results = {}
        for data in self.store.load_all(ACCOUNTS):
            balance = self.recompute_balance(data['id'])
            if balance is not None:
                results[data['id']] = balance
        return results

    @staticmethod
    def _market_value(holdings: Iterable[Holding]) -> Decimal:
        return sum((holding.market_value for holding in holdings), ZERO)
