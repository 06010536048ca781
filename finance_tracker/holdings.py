"""
Investment Holdings Module

Tracks stock positions held in investment accounts. A holding's market value
(shares x current price) is part of its account's balance, so every holding
mutation, including a price update, recomputes that balance.
"""

from decimal import Decimal
from datetime import date, datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .accounts import Account
from .locking import AccountLockRegistry
from .logging_config import get_logger, log_action
from .money import SHARE_PLACES, parse_amount, parse_date, parse_decimal, quantize
from .schema import ACCOUNTS, HOLDINGS
from .storage import StorageRecord
from .store import LedgerStore
from .validation import check_update_fields, optional_text, require_text

if TYPE_CHECKING:
    from .balances import BalanceCalculator


@dataclass
class Holding(StorageRecord):
    """A position of `shares` units of `symbol` in an account"""
    symbol: str
    name: str
    shares: Decimal
    purchase_price: Decimal
    current_price: Decimal
    account_id: str
    purchase_date: date
    notes: Optional[str] = None

    @property
    def market_value(self) -> Decimal:
        """Unrounded current value; the balance rounds the account total once"""
        return self.shares * self.current_price

    @property
    def cost_basis(self) -> Decimal:
        return self.shares * self.purchase_price

    @property
    def unrealized_gain(self) -> Decimal:
        return quantize(self.market_value - self.cost_basis)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Holding':
        return cls(
            **cls._timestamps(data),
            symbol=data['symbol'],
            name=data['name'],
            shares=Decimal(data['shares']),
            purchase_price=Decimal(data['purchase_price']),
            current_price=Decimal(data['current_price']),
            account_id=data['account_id'],
            purchase_date=date.fromisoformat(data['purchase_date']),
            notes=data.get('notes')
        )


def _parse_shares(value: Any) -> Decimal:
    return parse_decimal(value, "shares", SHARE_PLACES, minimum=Decimal("0"), allow_minimum=False)


class HoldingManager:
    """
    Manages holdings and keeps investment account balances current
    """

    UPDATABLE_FIELDS = (
        "symbol", "name", "shares", "purchase_price", "current_price",
        "account_id", "purchase_date", "notes"
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
        self.table_name = HOLDINGS
        self.logger = get_logger("finance_tracker.holdings")

    def create_holding(
        self,
        symbol: str,
        name: str,
        shares: Any,
        purchase_price: Any,
        current_price: Any,
        account_id: str,
        purchase_date: Any,
        notes: Optional[str] = None
    ) -> Holding:
        """
        Record a holding and recompute the account balance

        Args:
            symbol: Ticker, e.g. "AAPL"
            name: Security name
            shares: Positive decimal string, up to 4 places
            purchase_price: Price per share paid
            current_price: Latest known price per share
            account_id: Owning account, expected to be an investment account
            purchase_date: ISO date or date object
            notes: Free text

        Returns:
            Created Holding
        """
        now = datetime.now(timezone.utc)
        holding = Holding(
            id=self.store.new_id(),
            created_at=now,
            updated_at=now,
            symbol=require_text(symbol, "symbol").upper(),
            name=require_text(name, "name"),
            shares=_parse_shares(shares),
            purchase_price=parse_amount(purchase_price, "purchase_price"),
            current_price=parse_amount(current_price, "current_price"),
            account_id=require_text(account_id, "account_id"),
            purchase_date=parse_date(purchase_date, "purchase_date"),
            notes=optional_text(notes, "notes")
        )

        with self.locks.hold(holding.account_id):
            with self.store.atomic():
                self.store.save(self.table_name, holding)
                self._warn_if_not_investment(holding.account_id)
                self.balance_calculator.recompute_balance(holding.account_id)

        log_action(
            self.logger, "info", f"Holding created: {holding.symbol}",
            action="create_holding", resource=f"holding:{holding.id}",
            extra={
                "account_id": holding.account_id,
                "shares": str(holding.shares),
                "current_price": str(holding.current_price)
            }
        )
        return holding

    def get_holding(self, holding_id: str) -> Optional[Holding]:
        """Get holding by ID"""
        data = self.store.load(self.table_name, holding_id)
        if data:
            return Holding.from_dict(data)
        return None

    def list_holdings(self) -> List[Holding]:
        return [Holding.from_dict(data) for data in self.store.load_all(self.table_name)]

    def list_by_account(self, account_id: str) -> List[Holding]:
        return [Holding.from_dict(data) for data in self.store.find(self.table_name, {"account_id": account_id})]

    def update_holding(self, holding_id: str, updates: Dict[str, Any]) -> Holding:
        """Apply a partial update; moving accounts recomputes both"""
        check_update_fields(updates, self.UPDATABLE_FIELDS)
        current = Holding.from_dict(self.store.require(self.table_name, holding_id))
        old_account_id = current.account_id
        new_account_id = old_account_id
        if "account_id" in updates:
            new_account_id = require_text(updates["account_id"], "account_id")

        with self.locks.hold(old_account_id, new_account_id):
            with self.store.atomic():
                holding = Holding.from_dict(self.store.require(self.table_name, holding_id))
                self._apply_updates(holding, updates)
                holding.updated_at = datetime.now(timezone.utc)
                self.store.save(self.table_name, holding)

                if holding.account_id != old_account_id:
                    self._warn_if_not_investment(holding.account_id)
                    self.balance_calculator.recompute_balance(old_account_id)
                self.balance_calculator.recompute_balance(holding.account_id)

        log_action(
            self.logger, "info", f"Holding updated: {holding.symbol}",
            action="update_holding", resource=f"holding:{holding_id}",
            extra={"fields": sorted(updates), "account_id": holding.account_id}
        )
        return holding

    def update_price(self, holding_id: str, new_price: Any) -> Holding:
        """Set the current price per share and revalue the account"""
        return self.update_holding(holding_id, {"current_price": new_price})

    def delete_holding(self, holding_id: str) -> None:
        holding = Holding.from_dict(self.store.require(self.table_name, holding_id))

        with self.locks.hold(holding.account_id):
            with self.store.atomic():
                self.store.delete(self.table_name, holding_id)
                self.balance_calculator.recompute_balance(holding.account_id)

        log_action(
            self.logger, "info", f"Holding deleted: {holding.symbol}",
            action="delete_holding", resource=f"holding:{holding_id}",
            extra={"account_id": holding.account_id}
        )

    def _apply_updates(self, holding: Holding, updates: Dict[str, Any]) -> None:
        if "symbol" in updates:
            holding.symbol = require_text(updates["symbol"], "symbol").upper()
        if "name" in updates:
            holding.name = require_text(updates["name"], "name")
        if "shares" in updates:
            holding.shares = _parse_shares(updates["shares"])
        if "purchase_price" in updates:
            holding.purchase_price = parse_amount(updates["purchase_price"], "purchase_price")
        if "current_price" in updates:
            holding.current_price = parse_amount(updates["current_price"], "current_price")
        if "account_id" in updates:
            holding.account_id = require_text(updates["account_id"], "account_id")
        if "purchase_date" in updates:
            holding.purchase_date = parse_date(updates["purchase_date"], "purchase_date")
        if "notes" in updates:
            holding.notes = optional_text(updates["notes"], "notes")

    def _warn_if_not_investment(self, account_id: str) -> None:
        data = self.store.load(ACCOUNTS, account_id)
        if data and not Account.from_dict(data).is_investment:
            self.logger.warning(
                f"Holding recorded on non-investment account {account_id}; "
                f"it will not count towards the balance"
            )
