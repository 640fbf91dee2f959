"""Factory for creating scan record repositories.

Uses SCAN_REPOSITORY environment variable:
- inmemory: InMemoryScanRecordRepository (default, transient)
- mongodb: ScanRecordRepositoryMongo (requires MONGODB_URL)
"""

import os
from typing import Optional

from iscale.domain.persistence.record_repository import IScanRecordRepository
from iscale.infrastructure.config import (
    get_mongodb_database,
    get_mongodb_url,
    load_environment,
)

_repository_instance: Optional[IScanRecordRepository] = None


def create_scan_repository() -> IScanRecordRepository:
    """Create scan record repository based on SCAN_REPOSITORY env var.

    Returns:
        IScanRecordRepository: Repository instance

    Raises:
        ValueError: If mongodb selected without MONGODB_URL, or unknown value

    Examples:
        >>> # .env
        >>> SCAN_REPOSITORY=mongodb
        >>> MONGODB_URL=mongodb://localhost:27017
        >>>
        >>> repo = create_scan_repository()
    """
    load_environment()
    mode = os.getenv("SCAN_REPOSITORY", "inmemory").lower()

    if mode == "inmemory":
        from iscale.infrastructure.persistence.in_memory_record_repository import (
            InMemoryScanRecordRepository,
        )

        return InMemoryScanRecordRepository()

    if mode == "mongodb":
        mongodb_url = get_mongodb_url()
        if not mongodb_url:
            raise ValueError(
                "SCAN_REPOSITORY=mongodb but MONGODB_URL not set. "
                "Set MONGODB_URL in .env or use SCAN_REPOSITORY=inmemory"
            )

        from motor.motor_asyncio import AsyncIOMotorClient

        from iscale.infrastructure.persistence.mongo_record_repository import (
            ScanRecordRepositoryMongo,
        )

        client: AsyncIOMotorClient = AsyncIOMotorClient(mongodb_url)
        return ScanRecordRepositoryMongo(client[get_mongodb_database()])

    raise ValueError(
        f"Unknown SCAN_REPOSITORY value: '{mode}'. " f"Supported values: inmemory, mongodb"
    )


def get_scan_repository() -> IScanRecordRepository:
    """Get singleton scan record repository instance."""
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = create_scan_repository()
    return _repository_instance


def reset_scan_repository() -> None:
    """Reset singleton for testing purposes."""
    global _repository_instance
    _repository_instance = None
