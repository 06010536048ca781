"""
Storage Backend Module

Provides abstract storage interface and implementations for in-memory (testing)
and SQLite (persistence). All monetary values stored as Decimal strings.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Union
from decimal import Decimal
from datetime import date, datetime
from enum import Enum
import sqlite3
import json
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from contextlib import contextmanager

from .exceptions import StorageError
from .logging_config import get_logger


logger = get_logger("finance_tracker.storage")


def _to_storable(value: Any) -> Any:
    """Convert a field value into its JSON-safe stored form"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, list):
        return [_to_storable(item) for item in value]
    return value


@dataclass
class StorageRecord:
    """Base class for all stored records"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {key: _to_storable(value) for key, value in asdict(self).items()}

    @staticmethod
    def _timestamps(data: Dict[str, Any]) -> Dict[str, datetime]:
        return {
            'id': data['id'],
            'created_at': datetime.fromisoformat(data['created_at']),
            'updated_at': datetime.fromisoformat(data['updated_at']),
        }


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to storage"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        pass

    @abstractmethod
    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from storage"""
        pass

    @abstractmethod
    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close storage connection"""
        pass

    def begin_transaction(self) -> None:
        """Start a database transaction (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current transaction (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current transaction (default no-op)"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations; nested blocks join the outer one"""
        self.begin_transaction()
        try:
            yield
            self.commit()
        except Exception:
            self.rollback()
            raise


def _matches(record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    for key, value in filters.items():
        if key not in record or record[key] != value:
            return False
    return True


class InMemoryStorage(StorageInterface):
    """In-memory storage implementation for testing and development"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._depth = 0
        self._snapshot: Optional[str] = None

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists"""
        if table not in self._data:
            self._data[table] = {}

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to memory"""
        with self._lock:
            self._ensure_table(table)
            # Deep copy to prevent external mutation
            self._data[table][record_id] = json.loads(json.dumps(data, default=str))

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from memory"""
        with self._lock:
            self._ensure_table(table)
            record = self._data[table].get(record_id)
            if record:
                return json.loads(json.dumps(record))
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            return [json.loads(json.dumps(record)) for record in self._data[table].values()]

    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from memory"""
        with self._lock:
            self._ensure_table(table)
            if record_id in self._data[table]:
                del self._data[table][record_id]
                return True
            return False

    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            return record_id in self._data[table]

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        with self._lock:
            self._ensure_table(table)
            return [
                json.loads(json.dumps(record))
                for record in self._data[table].values()
                if _matches(record, filters)
            ]

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            return len(self._data[table])

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            self._data[table] = {}

    def begin_transaction(self) -> None:
        """Snapshot the data so a rollback can restore it"""
        self._lock.acquire()
        if self._depth == 0:
            self._snapshot = json.dumps(self._data)
        self._depth += 1

    def commit(self) -> None:
        """Drop the snapshot once the outermost block finishes"""
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth == 0:
            self._snapshot = None
        self._lock.release()

    def rollback(self) -> None:
        """Restore the snapshot taken when the outermost block began"""
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth == 0 and self._snapshot is not None:
            self._data = json.loads(self._snapshot)
            self._snapshot = None
        self._lock.release()

    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass

    def get_all_data(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Get all data for debugging/inspection"""
        with self._lock:
            return json.loads(json.dumps(self._data, default=str))


class SQLiteStorage(StorageInterface):
    """SQLite storage implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._lock = threading.RLock()
        self._depth = 0
        self._tables: set = set()
        try:
            # Manual transaction control; commits happen outside atomic blocks only
            self._connection = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level='DEFERRED')
            self._connection.row_factory = sqlite3.Row

            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
                self._connection.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to open SQLite database {self.db_path}", exc_info=True)
            raise StorageError(f"Failed to open database {self.db_path}: {e}") from e

    @contextmanager
    def _guard(self, operation: str):
        """Serialize access and translate sqlite errors into StorageError"""
        with self._lock:
            if self._connection is None:
                raise StorageError("Storage is closed")
            try:
                yield self._connection
            except sqlite3.Error as e:
                logger.error(f"SQLite {operation} failed", exc_info=True)
                raise StorageError(f"Storage {operation} failed: {e}") from e

    def _ensure_table(self, connection: sqlite3.Connection, table: str) -> None:
        """Ensure table exists with proper schema"""
        if table in self._tables:
            return
        connection.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        connection.execute(f"""
            CREATE INDEX IF NOT EXISTS idx_{table}_created_at
            ON {table}(created_at)
        """)
        self._tables.add(table)

    def _maybe_commit(self, connection: sqlite3.Connection) -> None:
        # Only commit if not in transaction
        if self._depth == 0:
            connection.commit()

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to SQLite"""
        with self._guard("save") as connection:
            self._ensure_table(connection, table)
            data_json = json.dumps(data, default=str)
            created_at = data.get('created_at') or datetime.now().isoformat()
            updated_at = data.get('updated_at') or created_at

            connection.execute(f"""
                INSERT INTO {table} (id, data, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    data = excluded.data,
                    updated_at = excluded.updated_at
            """, (record_id, data_json, created_at, updated_at))
            self._maybe_commit(connection)

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from SQLite"""
        with self._guard("load") as connection:
            self._ensure_table(connection, table)
            row = connection.execute(f"""
                SELECT data FROM {table} WHERE id = ?
            """, (record_id,)).fetchone()
            if row:
                return json.loads(row['data'])
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._guard("load_all") as connection:
            self._ensure_table(connection, table)
            cursor = connection.execute(f"""
                SELECT data FROM {table} ORDER BY created_at, rowid
            """)
            return [json.loads(row['data']) for row in cursor.fetchall()]

    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from SQLite"""
        with self._guard("delete") as connection:
            self._ensure_table(connection, table)
            cursor = connection.execute(f"""
                DELETE FROM {table} WHERE id = ?
            """, (record_id,))
            self._maybe_commit(connection)
            return cursor.rowcount > 0

    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        with self._guard("exists") as connection:
            self._ensure_table(connection, table)
            cursor = connection.execute(f"""
                SELECT 1 FROM {table} WHERE id = ? LIMIT 1
            """, (record_id,))
            return cursor.fetchone() is not None

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters (JSON key matching)"""
        with self._guard("find") as connection:
            self._ensure_table(connection, table)
            if not filters:
                cursor = connection.execute(f"""
                    SELECT data FROM {table} ORDER BY created_at, rowid
                """)
                return [json.loads(row['data']) for row in cursor.fetchall()]

            conditions = []
            params: List[Any] = []
            for key, value in filters.items():
                if value is None:
                    conditions.append("json_extract(data, ?) IS NULL")
                    params.append(f"$.{key}")
                else:
                    conditions.append("json_extract(data, ?) = ?")
                    params.extend([f"$.{key}", value])

            cursor = connection.execute(f"""
                SELECT data FROM {table}
                WHERE {' AND '.join(conditions)}
                ORDER BY created_at, rowid
            """, params)
            # json_extract coerces types; re-check exact equality in Python
            return [
                record for record in (json.loads(row['data']) for row in cursor.fetchall())
                if _matches(record, filters)
            ]

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._guard("count") as connection:
            self._ensure_table(connection, table)
            cursor = connection.execute(f"""
                SELECT COUNT(*) as count FROM {table}
            """)
            return cursor.fetchone()['count']

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._guard("clear_table") as connection:
            self._ensure_table(connection, table)
            connection.execute(f"DELETE FROM {table}")
            self._maybe_commit(connection)

    def begin_transaction(self) -> None:
        """Start a database transaction"""
        self._lock.acquire()
        # isolation_level='DEFERRED' opens the transaction on the first write
        self._depth += 1

    def commit(self) -> None:
        """Commit current transaction"""
        if self._depth == 0:
            return
        try:
            self._depth -= 1
            if self._depth == 0:
                with self._guard("commit") as connection:
                    connection.commit()
        finally:
            self._lock.release()

    def rollback(self) -> None:
        """Rollback current transaction"""
        if self._depth == 0:
            return
        try:
            self._depth -= 1
            if self._depth == 0 and self._connection is not None:
                self._connection.rollback()
                # Tables created inside the transaction are gone again
                self._tables.clear()
        finally:
            self._lock.release()

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


def create_storage(backend: str, database_path: Optional[str] = None) -> StorageInterface:
    """
    Build the storage backend named by configuration.

    Args:
        backend: "memory" or "sqlite"
        database_path: SQLite file path (ignored for memory)
    """
    backend = backend.lower()
    if backend == "memory":
        return InMemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(database_path or ":memory:")
    raise ValueError(f"Unknown storage backend: {backend}")
