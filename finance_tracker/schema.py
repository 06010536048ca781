"""
Table names and the foreign-key map the record store enforces.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


ACCOUNTS = "accounts"
CATEGORIES = "categories"
TRANSACTIONS = "transactions"
HOLDINGS = "holdings"
GOALS = "goals"
GOAL_ALLOCATIONS = "goal_allocations"
BUDGETS = "budgets"
SAVING_TACTICS = "saving_tactics"

ENTITY_NAMES = {
    ACCOUNTS: "account",
    CATEGORIES: "category",
    TRANSACTIONS: "transaction",
    HOLDINGS: "holding",
    GOALS: "goal",
    GOAL_ALLOCATIONS: "goal allocation",
    BUDGETS: "budget",
    SAVING_TACTICS: "saving tactic",
}


class OnDelete(Enum):
    """What happens to child rows when the parent is deleted"""
    RESTRICT = "restrict"
    CASCADE = "cascade"


@dataclass(frozen=True)
class ForeignKey:
    table: str
    field: str
    parent_table: str
    on_delete: OnDelete = OnDelete.RESTRICT


FOREIGN_KEYS: List[ForeignKey] = [
    ForeignKey(TRANSACTIONS, "account_id", ACCOUNTS),
    ForeignKey(TRANSACTIONS, "category_id", CATEGORIES),
    ForeignKey(HOLDINGS, "account_id", ACCOUNTS),
    ForeignKey(GOALS, "account_id", ACCOUNTS),
    ForeignKey(GOAL_ALLOCATIONS, "goal_id", GOALS, OnDelete.CASCADE),
    ForeignKey(BUDGETS, "account_id", ACCOUNTS),
    ForeignKey(BUDGETS, "category_id", CATEGORIES),
    ForeignKey(CATEGORIES, "parent_id", CATEGORIES),
]


def entity_name(table: str) -> str:
    return ENTITY_NAMES.get(table, table)


def references_from(table: str) -> List[ForeignKey]:
    """Foreign keys declared on a child table"""
    return [fk for fk in FOREIGN_KEYS if fk.table == table]


def references_to(parent_table: str) -> List[ForeignKey]:
    """Foreign keys pointing at a parent table"""
    return [fk for fk in FOREIGN_KEYS if fk.parent_table == parent_table]
