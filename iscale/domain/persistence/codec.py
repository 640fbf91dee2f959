"""
Persistence codec for analysis outcomes.

Converts outcomes to generic records and back. The payload blob is UTF-8
JSON with the same camelCase field names the model replies with, minus
``explanation``. Per-item thumbnails are not stored; on decode every item
gets the record's single thumbnail.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Type

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from iscale.domain.analysis.models import (
    PAYLOAD_TYPES,
    AnalysisOutcome,
    CalorieItem,
    DimensionItem,
    ObjectCountItem,
    Payload,
    PlantItem,
    TranslationPayload,
    WeightItem,
    attach_thumbnail,
)
from iscale.domain.analysis.modes import Mode
from iscale.domain.persistence.models import PersistedRecord

logger = structlog.get_logger(__name__)

_ITEM_TYPES: Dict[Mode, Type[BaseModel]] = {
    Mode.WEIGHT: WeightItem,
    Mode.DIMENSIONS: DimensionItem,
    Mode.CALORIES: CalorieItem,
    Mode.PLANT_ID: PlantItem,
    Mode.OBJECT_COUNT: ObjectCountItem,
}

_LIST_ADAPTERS: Dict[Mode, TypeAdapter[Any]] = {
    mode: TypeAdapter(List[item_type])  # type: ignore[valid-type]
    for mode, item_type in _ITEM_TYPES.items()
}


class ScanRecordCodec:
    """
    Outcome <-> record conversion.

    Stateless: every method is a pure function of its arguments.

    Example:
        >>> record = ScanRecordCodec.to_record(outcome)
        >>> restored = ScanRecordCodec.decode(record)
        >>> assert restored.weight_items == outcome.weight_items
    """

    @staticmethod
    def encode(outcome: AnalysisOutcome) -> Optional[bytes]:
        """
        Encode the mode-specific payload.

        Returns:
            JSON blob, or None when there is no payload data
        """
        payload = outcome.payload
        if payload is None or not outcome.has_payload:
            return None

        if isinstance(payload, TranslationPayload):
            return payload.model_dump_json(by_alias=True, exclude={"kind"}).encode("utf-8")

        return _LIST_ADAPTERS[outcome.mode].dump_json(payload.items, by_alias=True)

    @staticmethod
    def decode_payload(
        mode: Mode,
        blob: Optional[bytes],
        thumbnail: Optional[bytes] = None,
    ) -> Optional[Payload]:
        """
        Decode a payload blob for a mode.

        A missing blob, invalid JSON or a shape that does not match the
        mode yields None instead of raising.
        """
        if not blob:
            return None

        try:
            if mode is Mode.TRANSLATE:
                payload: Payload = TranslationPayload.model_validate_json(blob)
            else:
                items = _LIST_ADAPTERS[mode].validate_json(blob)
                payload = PAYLOAD_TYPES[mode](items=items)
        except ValidationError as e:
            logger.warning(
                "Payload blob does not match mode, dropping payload",
                mode=mode.value,
                errors=e.error_count(),
            )
            return None

        return attach_thumbnail(payload, thumbnail)

    @staticmethod
    def to_record(
        outcome: AnalysisOutcome,
        created_at: Optional[datetime] = None,
    ) -> PersistedRecord:
        """Build a new record from an outcome."""
        fields: Dict[str, Any] = {
            "mode": outcome.mode,
            "title": outcome.title,
            "primary_value": outcome.primary_value,
            "detail": outcome.detail,
            "explanation": outcome.explanation,
            "thumbnail_bytes": outcome.thumbnail,
            "payload_blob": ScanRecordCodec.encode(outcome),
        }
        if created_at is not None:
            fields["created_at"] = created_at
        return PersistedRecord(**fields)

    @staticmethod
    def decode(record: PersistedRecord) -> AnalysisOutcome:
        """Rebuild a transient outcome from a record. Never raises on bad blobs."""
        return AnalysisOutcome(
            mode=record.mode,
            title=record.title,
            primary_value=record.primary_value,
            detail=record.detail,
            explanation=record.explanation,
            thumbnail=record.thumbnail_bytes,
            payload=ScanRecordCodec.decode_payload(
                record.mode, record.payload_blob, record.thumbnail_bytes
            ),
        )
