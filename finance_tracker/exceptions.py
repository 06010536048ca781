"""
Error taxonomy for the ledger engine.

Every failure surfaced to callers is one of these types so the HTTP layer
(or any other caller) can tell a bad request from a missing record from a
capacity violation from a broken store.
"""

from decimal import Decimal
from typing import Dict, Optional


class FinanceTrackerError(Exception):
    """Base class for all ledger engine errors"""


class ValidationError(FinanceTrackerError):
    """Malformed or missing fields, with per-field detail"""

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> 'ValidationError':
        return cls(f"{field}: {message}", {field: message})


class ReferenceInUseError(ValidationError):
    """A delete was blocked because other records still reference the target"""

    def __init__(self, entity: str, entity_id: str, referencing_table: str, count: int):
        super().__init__(
            f"Cannot delete {entity} {entity_id}: referenced by {count} record(s) in {referencing_table}",
            {"id": f"referenced by {referencing_table}"}
        )
        self.entity = entity
        self.entity_id = entity_id
        self.referencing_table = referencing_table
        self.count = count


class NotFoundError(FinanceTrackerError):
    """A referenced record does not exist"""

    def __init__(self, entity: str, entity_id: Optional[str]):
        super().__init__(f"{entity.capitalize()} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class CapacityExceededError(FinanceTrackerError):
    """An allocation would push an account's allocated total past its balance"""

    def __init__(self, account_id: str, available: Decimal, requested: Decimal):
        super().__init__(
            f"Allocation would exceed account balance. "
            f"Available: {available:.2f}, Requested: {requested:.2f}"
        )
        self.account_id = account_id
        self.available = available
        self.requested = requested


class StorageError(FinanceTrackerError):
    """The persistence layer failed"""
