"""
Domain models for scan persistence.

A record stores the common outcome fields natively and keeps the
mode-specific payload as an opaque JSON blob.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from iscale.domain.analysis.modes import Mode
from iscale.domain.shared.value_objects import ScanId

SUMMARY_MAX_CHARS = 60


class PersistedRecord(BaseModel):
    """
    Durable scan record.

    Created once at save time from an ``AnalysisOutcome``; immutable
    afterwards except for deletion.

    Attributes:
        id: Unique record identifier
        created_at: Save time (UTC)
        mode: Analysis mode
        title: Outcome title
        primary_value: Outcome main value
        detail: Outcome secondary line
        explanation: Model explanation
        thumbnail_bytes: Compressed JPEG thumbnail (optional)
        payload_blob: Encoded mode-specific payload (optional)

    Example:
        >>> record = PersistedRecord(
        ...     mode=Mode.WEIGHT,
        ...     title="apple",
        ...     primary_value="150 g",
        ... )
        >>> record.summary
        '150 g'
    """

    model_config = ConfigDict(frozen=True)

    id: ScanId = Field(default_factory=ScanId.generate)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    mode: Mode
    title: str = ""
    primary_value: str = ""
    detail: str = ""
    explanation: str = ""
    thumbnail_bytes: Optional[bytes] = Field(default=None, repr=False)
    payload_blob: Optional[bytes] = Field(default=None, repr=False)

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Ensure timestamps are UTC timezone-aware."""
        if v.tzinfo is None:
            # Naive datetime → assume UTC
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def summary(self) -> str:
        """One-line summary for the history list."""
        if self.mode is Mode.TRANSLATE:
            text = self.primary_value
            if len(text) > SUMMARY_MAX_CHARS:
                return text[:SUMMARY_MAX_CHARS] + "…"
            return text
        return self.primary_value or self.title
