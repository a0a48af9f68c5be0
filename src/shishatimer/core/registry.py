"""
Table registry: the ordered table collection and its durable snapshot.

The collection is copy-on-write. Every change builds a new mapping and
installs it with a single assignment, so a reader holding `tables` keeps a
consistent view while the registry moves on.

Snapshots are JSON arrays of table records written through a snapshot
store. A file store keeps them at {data_dir}/{key}.json.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from shishatimer.logger import get_logger
from shishatimer.models import Table

logger = get_logger(__name__)

DEFAULT_TABLE_COUNT = 25
DEFAULT_SNAPSHOT_KEY = "shisha-tables"

_TABLE_LIST = TypeAdapter(List[Table])


class SnapshotStore(ABC):
    """Where a registry snapshot is read from and written to."""

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the stored snapshot text, or None if nothing was saved."""

    @abstractmethod
    def write(self, payload: str) -> None:
        """Overwrite the stored snapshot."""


class FileSnapshotStore(SnapshotStore):
    """Keeps the snapshot as a JSON file under a data directory."""

    def __init__(self, base_dir: Path, key: str = DEFAULT_SNAPSHOT_KEY):
        self.base_dir = Path(base_dir)
        self.key = key

    @property
    def path(self) -> Path:
        return self.base_dir / f"{self.key}.json"

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, payload: str) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".json.tmp")
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(self.path)


class MemorySnapshotStore(SnapshotStore):
    """Keeps the snapshot in memory. Used by tests and throwaway runs."""

    def __init__(self, payload: Optional[str] = None):
        self.payload = payload
        self.writes = 0

    def read(self) -> Optional[str]:
        return self.payload

    def write(self, payload: str) -> None:
        self.payload = payload
        self.writes += 1


def default_tables(count: int = DEFAULT_TABLE_COUNT) -> Dict[int, Table]:
    """Tables 1..count, all available."""
    return {n: Table(id=n, table_number=n) for n in range(1, count + 1)}


def parse_snapshot(payload: str) -> Dict[int, Table]:
    """
    Decode a snapshot into a mapping keyed by table number.

    Raises:
        ValueError: on invalid JSON, invalid records, duplicate table
            numbers or an empty table list
    """
    tables = _TABLE_LIST.validate_json(payload)
    if not tables:
        raise ValueError("snapshot contains no tables")

    result: Dict[int, Table] = {}
    for table in tables:
        if table.table_number in result:
            raise ValueError(f"duplicate table_number {table.table_number}")
        result[table.table_number] = table
    return result


def dump_snapshot(tables: Iterable[Table]) -> str:
    return json.dumps(
        [table.model_dump(mode="json") for table in tables],
        indent=2,
        ensure_ascii=False,
    )


class TableRegistry:
    """Ordered, copy-on-write table collection backed by a snapshot store."""

    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        table_count: int = DEFAULT_TABLE_COUNT,
    ):
        self.store = store or MemorySnapshotStore()
        self.table_count = table_count
        self.version = 0
        self._tables: Dict[int, Table] = {}

    @property
    def tables(self) -> Mapping[int, Table]:
        """Read-only view of the current collection."""
        return MappingProxyType(self._tables)

    def get(self, table_number: int) -> Optional[Table]:
        return self._tables.get(table_number)

    def ordered(self) -> List[Table]:
        """Tables sorted by table number, for display."""
        return sorted(self._tables.values(), key=lambda t: t.table_number)

    def load(self) -> Mapping[int, Table]:
        """
        Restore the collection from the store.

        Falls back to the default table set when there is no snapshot or
        the snapshot cannot be used. Never raises.
        """
        tables = None
        try:
            payload = self.store.read()
            if payload is not None:
                tables = parse_snapshot(payload)
                logger.info(f"Restored {len(tables)} tables from snapshot")
        except (ValidationError, ValueError) as e:
            logger.warning(f"Ignoring malformed table snapshot: {e}")
        except Exception as e:
            logger.warning(f"Failed to read table snapshot: {e}")

        if tables is None:
            tables = default_tables(self.table_count)
            logger.info(f"Initialized {len(tables)} available tables")

        self._install(tables)
        return self.tables

    def replace(self, updates: Mapping[int, Table]) -> Mapping[int, Table]:
        """Swap the given tables in, producing a new collection."""
        tables = dict(self._tables)
        tables.update(updates)
        self._install(tables)
        return self.tables

    def save(self) -> bool:
        """
        Write the full collection to the store, overwriting the last snapshot.

        Best effort: a failure is logged and reported as False, the
        in-memory collection stays as it is.
        """
        try:
            self.store.write(dump_snapshot(self.ordered()))
            return True
        except Exception as e:
            logger.error(f"Failed to persist table snapshot: {e}")
            return False

    def _install(self, tables: Dict[int, Table]) -> None:
        self._tables = tables
        self.version += 1
