"""
Ledger Record Store

Owns the entity tables on top of a storage backend and enforces the
referential constraints declared in schema.py: writes must point at existing
parents, deletes are restricted while children exist unless the key cascades.
"""

from typing import Any, Dict, List, Optional
import uuid

from .exceptions import NotFoundError, ReferenceInUseError
from .logging_config import get_logger, log_action
from .schema import OnDelete, entity_name, references_from, references_to
from .storage import StorageInterface, StorageRecord


class LedgerStore:
    """Referentially checked access to the ledger tables"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.logger = get_logger("finance_tracker.store")

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    def atomic(self):
        return self.storage.atomic()

    def load(self, table: str, record_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not record_id:
            return None
        return self.storage.load(table, record_id)

    def require(self, table: str, record_id: Optional[str]) -> Dict[str, Any]:
        """Load a record or raise NotFoundError"""
        data = self.load(table, record_id)
        if data is None:
            raise NotFoundError(entity_name(table), record_id)
        return data

    def exists(self, table: str, record_id: Optional[str]) -> bool:
        return bool(record_id) and self.storage.exists(table, record_id)

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        return self.storage.load_all(table)

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self.storage.find(table, filters)

    def check_references(self, table: str, data: Dict[str, Any]) -> None:
        """Every non-null foreign key must name an existing parent"""
        for fk in references_from(table):
            value = data.get(fk.field)
            if value is not None and not self.storage.exists(fk.parent_table, value):
                raise NotFoundError(entity_name(fk.parent_table), value)

    def save(self, table: str, record: StorageRecord) -> None:
        """Insert or replace a record after checking its foreign keys"""
        data = record.to_dict()
        self.check_references(table, data)
        self.storage.save(table, record.id, data)

    def delete(self, table: str, record_id: str) -> int:
        """
        Delete a record, cascading or restricting per the foreign-key map.

        Returns:
            Number of rows removed, cascaded children included

        Raises:
            NotFoundError: record does not exist
            ReferenceInUseError: a restricting child still references it
        """
        self.require(table, record_id)
        with self.storage.atomic():
            removed = self._delete(table, record_id)

        if removed > 1:
            log_action(
                self.logger, "info", f"Cascade delete from {table}",
                action="cascade_delete", resource=f"{entity_name(table)}:{record_id}",
                extra={"rows_removed": removed}
            )
        return removed

    def _delete(self, table: str, record_id: str) -> int:
        children = []
        for fk in references_to(table):
            rows = self.storage.find(fk.table, {fk.field: record_id})
            if not rows:
                continue
            if fk.on_delete == OnDelete.RESTRICT:
                raise ReferenceInUseError(entity_name(table), record_id, fk.table, len(rows))
            children.extend((fk.table, row['id']) for row in rows)

        removed = 0
        for child_table, child_id in children:
            removed += self._delete(child_table, child_id)

        if self.storage.delete(table, record_id):
            removed += 1
        return removed
