"""In-memory scan record repository (tests and local runs)."""

from typing import Optional

import structlog

from iscale.domain.persistence.models import PersistedRecord
from iscale.domain.shared.errors import RecordStoreError
from iscale.domain.shared.value_objects import ScanId

logger = structlog.get_logger(__name__)


class InMemoryScanRecordRepository:
    """
    In-memory implementation of IScanRecordRepository.

    Records are immutable, so the stored instances are shared safely.
    """

    def __init__(self) -> None:
        self._storage: dict[str, PersistedRecord] = {}

    async def add(self, record: PersistedRecord) -> None:
        """Store record; duplicate IDs are rejected."""
        if record.id.value in self._storage:
            raise RecordStoreError(f"Record already exists: {record.id.value}")
        self._storage[record.id.value] = record
        logger.debug("Record stored", record_id=record.id.value, mode=record.mode.value)

    async def get(self, record_id: ScanId) -> Optional[PersistedRecord]:
        """Get record from memory."""
        return self._storage.get(record_id.value)

    async def list_recent(self, limit: int = 50) -> list[PersistedRecord]:
        """Newest first."""
        records = sorted(self._storage.values(), key=lambda r: r.created_at, reverse=True)
        return records[:limit]

    async def delete(self, record_id: ScanId) -> bool:
        """Remove record from memory."""
        return self._storage.pop(record_id.value, None) is not None

    async def count(self) -> int:
        return len(self._storage)

    def clear(self) -> None:
        """Clear all records (for testing)."""
        self._storage.clear()
