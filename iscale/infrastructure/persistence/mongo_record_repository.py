"""
MongoDB implementation of scan record repository.

Thumbnail and payload blob are stored as BSON binary alongside the
scalar fields.
"""

from __future__ import annotations

from typing import Optional, Any

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from iscale.domain.analysis.modes import Mode
from iscale.domain.persistence.models import PersistedRecord
from iscale.domain.shared.errors import RecordStoreError
from iscale.domain.shared.value_objects import ScanId

logger = structlog.get_logger(__name__)


class ScanRecordRepositoryMongo:
    """
    MongoDB implementation of scan record repository.

    Storage design:
    - Collection: scan_records
    - Unique index on record_id
    - Index on created_at DESC (history queries)

    Example:
        >>> from motor.motor_asyncio import AsyncIOMotorClient
        >>> client = AsyncIOMotorClient("mongodb://localhost:27017")
        >>> repository = ScanRecordRepositoryMongo(client.iscale)
        >>> await repository.add(record)
    """

    COLLECTION_NAME = "scan_records"

    def __init__(self, db: AsyncIOMotorDatabase[Any]):
        """
        Initialize repository with MongoDB database.

        Creates indexes on first use.

        Args:
            db: Motor AsyncIOMotorDatabase instance
        """
        self.db = db
        self.collection = db[self.COLLECTION_NAME]
        self._indexes_created = False

    async def _ensure_indexes(self) -> None:
        """Create indexes if not already created."""
        if self._indexes_created:
            return

        try:
            await self.collection.create_index(
                "record_id",
                unique=True,
                name="unique_record_id",
            )

            # Newest first for history list
            await self.collection.create_index(
                [("created_at", -1)],
                name="idx_created_at_desc",
            )
        except PyMongoError as e:
            raise RecordStoreError(f"Failed to create indexes: {e}") from e

        self._indexes_created = True

    def _to_document(self, record: PersistedRecord) -> dict[str, Any]:
        """Convert PersistedRecord to MongoDB document."""
        return {
            "record_id": record.id.value,
            "created_at": record.created_at,
            "mode": record.mode.value,
            "title": record.title,
            "primary_value": record.primary_value,
            "detail": record.detail,
            "explanation": record.explanation,
            "thumbnail": record.thumbnail_bytes,
            "payload": record.payload_blob,
        }

    def _from_document(self, doc: dict[str, Any]) -> PersistedRecord:
        """Convert MongoDB document to PersistedRecord."""
        thumbnail = doc.get("thumbnail")
        payload = doc.get("payload")
        return PersistedRecord(
            id=ScanId(value=doc["record_id"]),
            created_at=doc["created_at"],
            mode=Mode.from_stored(doc["mode"]),
            title=doc.get("title", ""),
            primary_value=doc.get("primary_value", ""),
            detail=doc.get("detail", ""),
            explanation=doc.get("explanation", ""),
            thumbnail_bytes=bytes(thumbnail) if thumbnail is not None else None,
            payload_blob=bytes(payload) if payload is not None else None,
        )

    async def add(self, record: PersistedRecord) -> None:
        """Insert a new record."""
        await self._ensure_indexes()

        try:
            await self.collection.insert_one(self._to_document(record))
        except DuplicateKeyError as e:
            raise RecordStoreError(f"Record already exists: {record.id.value}") from e
        except PyMongoError as e:
            raise RecordStoreError(f"Failed to store record: {e}") from e

        logger.debug("Record stored", record_id=record.id.value, mode=record.mode.value)

    async def get(self, record_id: ScanId) -> Optional[PersistedRecord]:
        """Retrieve record by ID."""
        await self._ensure_indexes()

        try:
            doc = await self.collection.find_one({"record_id": record_id.value})
        except PyMongoError as e:
            raise RecordStoreError(f"Failed to load record: {e}") from e
        if doc is None:
            return None

        return self._from_document(doc)

    async def list_recent(self, limit: int = 50) -> list[PersistedRecord]:
        """Get most recent records."""
        await self._ensure_indexes()

        cursor = self.collection.find({}).sort("created_at", -1).limit(limit)

        try:
            docs = await cursor.to_list(length=limit)
        except PyMongoError as e:
            raise RecordStoreError(f"Failed to list records: {e}") from e
        return [self._from_document(doc) for doc in docs]

    async def delete(self, record_id: ScanId) -> bool:
        """Delete record by ID."""
        await self._ensure_indexes()

        try:
            result = await self.collection.delete_one({"record_id": record_id.value})
        except PyMongoError as e:
            raise RecordStoreError(f"Failed to delete record: {e}") from e
        return bool(result.deleted_count)

    async def count(self) -> int:
        await self._ensure_indexes()

        try:
            return int(await self.collection.count_documents({}))
        except PyMongoError as e:
            raise RecordStoreError(f"Failed to count records: {e}") from e
