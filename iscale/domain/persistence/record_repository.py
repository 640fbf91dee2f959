"""
Scan record repository interface.

Protocol for durable scan history storage.
"""

from typing import Protocol, Optional, runtime_checkable

from iscale.domain.persistence.models import PersistedRecord
from iscale.domain.shared.value_objects import ScanId


@runtime_checkable
class IScanRecordRepository(Protocol):
    """
    Repository interface for persisted scan records.

    Implementations must provide:
    - Atomic single-record writes
    - Recency-ordered queries (newest first)
    - Deletion by ID

    Design Pattern: Repository Pattern + Protocol (Dependency Injection)

    Example:
        >>> repository = InMemoryScanRecordRepository()
        >>> await repository.add(record)
        >>> recent = await repository.list_recent(limit=20)
    """

    async def add(self, record: PersistedRecord) -> None:
        """
        Store a new record.

        Raises:
            RecordStoreError: On storage failure or duplicate ID
        """
        ...

    async def get(self, record_id: ScanId) -> Optional[PersistedRecord]:
        """
        Retrieve record by ID.

        Returns:
            PersistedRecord if found, None otherwise
        """
        ...

    async def list_recent(self, limit: int = 50) -> list[PersistedRecord]:
        """
        Get most recent records, ordered by created_at DESC.

        Args:
            limit: Maximum number to return

        Returns:
            List of PersistedRecord (may be empty)
        """
        ...

    async def delete(self, record_id: ScanId) -> bool:
        """
        Delete record by ID.

        Returns:
            True if a record was deleted, False if not found
        """
        ...

    async def count(self) -> int:
        """Number of stored records."""
        ...
