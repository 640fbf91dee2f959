"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

import re
import uuid
from pydantic import BaseModel, Field, field_validator, ConfigDict


class ScanId(BaseModel):
    """
    Scan record ID value object.

    Format: 32 lowercase hex chars (uuid4 hex).

    Example:
        >>> scan_id = ScanId.generate()
        >>> assert len(scan_id.value) == 32
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Record identifier")

    @field_validator("value")
    @classmethod
    def valid_format(cls, v: str) -> str:
        """Accept uuid hex with or without dashes, normalize to plain hex."""
        normalized = v.strip().lower().replace("-", "")
        if not re.fullmatch(r"[a-f0-9]{32}", normalized):
            raise ValueError(f"Invalid ScanId: {v!r}")
        return normalized

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"ScanId('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    @classmethod
    def generate(cls) -> ScanId:
        """Generate new random ID."""
        return cls(value=uuid.uuid4().hex)

    @classmethod
    def from_string(cls, s: str) -> ScanId:
        """Create from string."""
        return cls(value=s)
