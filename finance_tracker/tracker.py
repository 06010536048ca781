"""
Finance tracker system wiring

Builds the storage backend named by configuration and wires every manager
onto one record store and one account lock registry.
"""

from typing import Optional

from .accounts import AccountManager
from .allocations import AllocationManager
from .balances import BalanceCalculator
from .budgets import BudgetManager
from .categories import CategoryManager
from .config import FinanceTrackerConfig, get_config
from .goals import GoalManager
from .holdings import HoldingManager
from .locking import AccountLockRegistry
from .logging_config import get_logger
from .reporting import ReportingEngine
from .seed import seed_default_categories
from .storage import StorageInterface, create_storage
from .store import LedgerStore
from .tactics import SavingTacticManager
from .transactions import TransactionManager


class FinanceTracker:
    """Finance tracker with all components initialized"""

    def __init__(self, storage: StorageInterface, config: Optional[FinanceTrackerConfig] = None):
        self.config = config or get_config()
        self.logger = get_logger("finance_tracker.tracker")

        self.storage = storage
        self.store = LedgerStore(storage)
        self.locks = AccountLockRegistry()

        self.balance_calculator = BalanceCalculator(self.store, self.locks)
        self.account_manager = AccountManager(self.store, self.balance_calculator, self.locks)
        self.category_manager = CategoryManager(self.store)
        self.transaction_manager = TransactionManager(self.store, self.balance_calculator, self.locks)
        self.holding_manager = HoldingManager(self.store, self.balance_calculator, self.locks)
        self.allocation_manager = AllocationManager(self.store, self.locks)
        self.goal_manager = GoalManager(self.store, self.allocation_manager, self.locks)
        self.budget_manager = BudgetManager(self.store, self.config.alert_threshold)
        self.tactic_manager = SavingTacticManager(self.store)

        self.reporting_engine = ReportingEngine(
            self.account_manager, self.category_manager, self.transaction_manager,
            self.holding_manager, self.goal_manager, self.allocation_manager,
            self.budget_manager
        )

        if self.config.seed_default_categories:
            seed_default_categories(self.category_manager)

    @classmethod
    def from_config(cls, config: Optional[FinanceTrackerConfig] = None) -> 'FinanceTracker':
        """Create the configured storage backend and wire the system onto it"""
        config = config or get_config()
        storage = create_storage(config.storage_backend, config.database_path)
        get_logger("finance_tracker.tracker").info(
            f"Finance tracker starting with {config.storage_backend} storage"
        )
        return cls(storage, config)

    def close(self) -> None:
        self.storage.close()
