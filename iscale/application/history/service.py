"""Scan history service: persist outcomes and restore them for display."""

from typing import List, Optional, Union

import structlog

from iscale.domain.analysis.models import AnalysisOutcome
from iscale.domain.persistence.codec import ScanRecordCodec
from iscale.domain.persistence.models import PersistedRecord
from iscale.domain.persistence.record_repository import IScanRecordRepository
from iscale.domain.shared.value_objects import ScanId

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 50


def _as_scan_id(record_id: Union[ScanId, str]) -> ScanId:
    if isinstance(record_id, ScanId):
        return record_id
    return ScanId.from_string(record_id)


class ScanHistoryService:
    """
    Save and browse past scans.

    Example:
        >>> history = ScanHistoryService(InMemoryScanRecordRepository())
        >>> record = await history.save(outcome)
        >>> restored = await history.load(record.id)
    """

    def __init__(self, repository: IScanRecordRepository):
        self._repository = repository

    async def save(self, outcome: AnalysisOutcome) -> PersistedRecord:
        """Encode an outcome and store it as a new record."""
        record = ScanRecordCodec.to_record(outcome)
        await self._repository.add(record)
        logger.info(
            "Scan saved",
            record_id=record.id.value,
            mode=record.mode.value,
            has_payload=record.payload_blob is not None,
        )
        return record

    async def recent(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[PersistedRecord]:
        """History rows, newest first."""
        return await self._repository.list_recent(limit)

    async def load(self, record_id: Union[ScanId, str]) -> Optional[AnalysisOutcome]:
        """Rebuild the outcome for a stored record, None if not found."""
        record = await self._repository.get(_as_scan_id(record_id))
        if record is None:
            return None
        return ScanRecordCodec.decode(record)

    async def delete(self, record_id: Union[ScanId, str]) -> bool:
        scan_id = _as_scan_id(record_id)
        deleted = await self._repository.delete(scan_id)
        if deleted:
            logger.info("Scan deleted", record_id=scan_id.value)
        return deleted
