"""
Analysis mode registry.

Static table of the six analysis intents. Each mode maps to exactly one
response shape; prompt text lives in ``prompts.py``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class UnitSystem(str, Enum):
    """User unit preference."""

    METRIC = "metric"
    IMPERIAL = "imperial"

    @classmethod
    def parse(cls, value: Optional[str], default: Optional[UnitSystem] = None) -> UnitSystem:
        """Parse a stored preference, case-insensitive."""
        fallback = default or cls.METRIC
        if not value:
            return fallback
        try:
            return cls(value.strip().lower())
        except ValueError:
            return fallback


class ResponseShape(str, Enum):
    """Reply shape expected from the model for a mode."""

    WEIGHT_LIST = "weight_list"
    DIMENSION_LIST = "dimension_list"
    CALORIE_LIST = "calorie_list"
    TRANSLATION = "translation"
    PLANT_LIST = "plant_list"
    OBJECT_COUNT_LIST = "object_count_list"

    @property
    def list_field(self) -> Optional[str]:
        """Name of the reply array, None for singleton shapes."""
        return _LIST_FIELDS[self]


_LIST_FIELDS = {
    ResponseShape.WEIGHT_LIST: "objects",
    ResponseShape.DIMENSION_LIST: "objects",
    ResponseShape.CALORIE_LIST: "items",
    ResponseShape.TRANSLATION: None,
    ResponseShape.PLANT_LIST: "plants",
    ResponseShape.OBJECT_COUNT_LIST: "objects",
}


class Mode(str, Enum):
    """
    Analysis intent selected by the user.

    Values are persisted in records and must never change.

    Example:
        >>> Mode.WEIGHT.response_shape
        <ResponseShape.WEIGHT_LIST: 'weight_list'>
        >>> Mode.WEIGHT.label
        'Digital Scale'
    """

    WEIGHT = "weight"
    DIMENSIONS = "dimensions"
    CALORIES = "calories"
    PLANT_ID = "plant_id"
    TRANSLATE = "translate"
    OBJECT_COUNT = "object_count"

    @property
    def label(self) -> str:
        """Display name, also the default outcome title."""
        return _LABELS[self]

    @property
    def response_shape(self) -> ResponseShape:
        return _SHAPES[self]

    def unit_hint(self, units: UnitSystem) -> Optional[str]:
        """Unit phrasing for prompts, None when the mode has no units."""
        hints = _UNIT_HINTS.get(self)
        if hints is None:
            return None
        return hints[units]

    def system_prompt(self, units: UnitSystem, locale: str = "en_US") -> str:
        from iscale.domain.analysis.prompts import build_system_prompt

        return build_system_prompt(self, units, locale)

    def user_prompt(self, units: UnitSystem, locale: str = "en_US") -> str:
        from iscale.domain.analysis.prompts import build_user_prompt

        return build_user_prompt(self, units, locale)

    @classmethod
    def from_stored(cls, value: str) -> Mode:
        """
        Resolve a persisted mode value.

        Accepts the enum value or the display label (older records stored
        labels). Unknown values fall back to WEIGHT.
        """
        try:
            return cls(value)
        except ValueError:
            pass
        for mode in cls:
            if mode.label == value:
                return mode
        logger.warning("Unknown stored mode, falling back", stored_mode=value)
        return cls.WEIGHT


_LABELS = {
    Mode.WEIGHT: "Digital Scale",
    Mode.DIMENSIONS: "Tape Measure",
    Mode.CALORIES: "Calorie Counter",
    Mode.PLANT_ID: "Plant Identifier",
    Mode.TRANSLATE: "Translate",
    Mode.OBJECT_COUNT: "Object Counter",
}

_SHAPES = {
    Mode.WEIGHT: ResponseShape.WEIGHT_LIST,
    Mode.DIMENSIONS: ResponseShape.DIMENSION_LIST,
    Mode.CALORIES: ResponseShape.CALORIE_LIST,
    Mode.PLANT_ID: ResponseShape.PLANT_LIST,
    Mode.TRANSLATE: ResponseShape.TRANSLATION,
    Mode.OBJECT_COUNT: ResponseShape.OBJECT_COUNT_LIST,
}

_UNIT_HINTS = {
    Mode.WEIGHT: {
        UnitSystem.METRIC: "grams (g) or kilograms (kg)",
        UnitSystem.IMPERIAL: "ounces (oz) or pounds (lb)",
    },
    Mode.DIMENSIONS: {
        UnitSystem.METRIC: "centimeters (cm) or meters (m)",
        UnitSystem.IMPERIAL: "inches (in) or feet (ft)",
    },
    Mode.CALORIES: {
        UnitSystem.METRIC: "grams (g) or milliliters (ml)",
        UnitSystem.IMPERIAL: "ounces (oz) or cups",
    },
}
