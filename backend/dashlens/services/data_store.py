"""
In-memory registry of named data sources.

Widgets bind to a data source by id; the analysis engine only ever sees a
source's rows. Nothing is persisted: the registry lives as long as the
process, and the oldest source is evicted once the configured capacity is
reached.
"""
import time
import random
import string
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional

from dashlens.core.config import get_settings
from dashlens.core.sanitization import sanitize_source_name
from dashlens.core.schemas import DataSourceOption, Row

logger = logging.getLogger(__name__)

# Rows scanned when collecting the keys of a source
KEY_SCAN_ROWS = 200

_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class DataSource:
    id: str
    name: str
    rows: List[Row]
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))


def generate_source_id() -> str:
    """Ids look like ds-<epoch ms>-<8 random chars>."""
    suffix = ''.join(random.choices(_ID_ALPHABET, k=8))
    return f"ds-{int(time.time() * 1000)}-{suffix}"


class DataSourceStore:
    """Thread-safe, insertion-ordered store of data sources."""

    def __init__(self, max_sources: int = 50):
        self._sources: "OrderedDict[str, DataSource]" = OrderedDict()
        self._lock = Lock()
        self.max_sources = max_sources

    def add_data_source(self, name: str, rows: List[Row]) -> str:
        source = DataSource(id=generate_source_id(), name=sanitize_source_name(name), rows=list(rows))
        with self._lock:
            self._sources[source.id] = source
            while len(self._sources) > self.max_sources:
                evicted_id, _ = self._sources.popitem(last=False)
                logger.info(f"Evicted data source {evicted_id} (capacity {self.max_sources})")

        logger.info(f"Registered data source {source.id} with {len(source.rows)} rows")
        return source.id

    def get_data_source(self, source_id: Optional[str]) -> Optional[DataSource]:
        if not source_id:
            return None
        with self._lock:
            return self._sources.get(source_id)

    def get_data_keys(self, source_id: Optional[str]) -> List[str]:
        """Union of row keys over the first rows of a source, in first-seen order."""
        source = self.get_data_source(source_id)
        if source is None:
            return []

        keys: Dict[str, None] = {}
        for row in source.rows[:KEY_SCAN_ROWS]:
            if isinstance(row, dict):
                for key in row:
                    keys.setdefault(str(key), None)
        return list(keys)

    def data_source_options(self) -> List[DataSourceOption]:
        with self._lock:
            sources = list(self._sources.values())
        return [DataSourceOption(id=s.id, name=s.name, row_count=len(s.rows)) for s in sources]

    def remove_data_source(self, source_id: str) -> bool:
        with self._lock:
            return self._sources.pop(source_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._sources.clear()

    def size(self) -> int:
        return len(self._sources)


_store_instance: Optional[DataSourceStore] = None


def get_data_store() -> DataSourceStore:
    """Get the process-wide data-source store (singleton)."""
    global _store_instance
    if _store_instance is None:
        _store_instance = DataSourceStore(max_sources=get_settings().max_data_sources)
    return _store_instance


def reset_data_store() -> None:
    """Reset the store instance (for testing)."""
    global _store_instance
    _store_instance = None
