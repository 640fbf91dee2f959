"""
Domain models for analysis outcomes.

An outcome carries the common display fields plus exactly one
mode-specific payload. Payload variants form a discriminated union keyed
by ``kind`` (the mode value), so a payload for the wrong mode cannot be
attached to an outcome.

Field aliases mirror the reply JSON (camelCase) and are used verbatim by
the persistence codec.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from iscale.domain.analysis.coercion import format_decimal
from iscale.domain.analysis.modes import Mode

_ITEM_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


class PlantConfidence(str, Enum):
    """Identification confidence reported by the model."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ═══════════════════════════════════════════════════════════
# ITEMS
# ═══════════════════════════════════════════════════════════


class WeightItem(BaseModel):
    """
    Single object weight estimate.

    Example:
        >>> item = WeightItem(name="apple", weight="150", unit="g")
        >>> item.formatted_weight
        '150 g'
    """

    model_config = _ITEM_CONFIG

    name: str
    weight: str = Field(..., description="Decimal as string")
    unit: str
    thumbnail: Optional[bytes] = Field(default=None, exclude=True, repr=False)

    @property
    def formatted_weight(self) -> str:
        return f"{self.weight} {self.unit}"


class DimensionItem(BaseModel):
    """Single object dimension estimate (decimal strings)."""

    model_config = _ITEM_CONFIG

    name: str
    length: str
    width: str
    height: str
    unit: str
    thumbnail: Optional[bytes] = Field(default=None, exclude=True, repr=False)

    @property
    def formatted_dimensions(self) -> str:
        """E.g. ``30 × 20 × 15 cm``."""
        return f"{self.length} × {self.width} × {self.height} {self.unit}"


class CalorieItem(BaseModel):
    """Single food item with calories and macros (grams)."""

    model_config = _ITEM_CONFIG

    name: str
    portion: str = ""
    calories: int = 0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    thumbnail: Optional[bytes] = Field(default=None, exclude=True, repr=False)

    @property
    def formatted_macros(self) -> str:
        """E.g. ``P: 12g · C: 30.5g · F: 4g``."""
        return (
            f"P: {_macro(self.protein)}g · C: {_macro(self.carbs)}g · F: {_macro(self.fat)}g"
        )


def _macro(value: float) -> str:
    if float(value).is_integer():
        return format_decimal(value)
    return f"{value:.1f}"


class PlantItem(BaseModel):
    """Single plant identification."""

    model_config = _ITEM_CONFIG

    common_name: str = Field(..., alias="commonName")
    scientific_name: str = Field(..., alias="scientificName")
    description: str = ""
    confidence: PlantConfidence = PlantConfidence.MEDIUM
    thumbnail: Optional[bytes] = Field(default=None, exclude=True, repr=False)


class ObjectCountItem(BaseModel):
    """Single object type with its count."""

    model_config = _ITEM_CONFIG

    name: str
    count: int = 1
    category: str = "Other"
    thumbnail: Optional[bytes] = Field(default=None, exclude=True, repr=False)


# ═══════════════════════════════════════════════════════════
# PAYLOADS (one variant per mode)
# ═══════════════════════════════════════════════════════════


class WeightPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["weight"] = "weight"
    items: List[WeightItem] = Field(default_factory=list)


class DimensionPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["dimensions"] = "dimensions"
    items: List[DimensionItem] = Field(default_factory=list)


class CaloriePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["calories"] = "calories"
    items: List[CalorieItem] = Field(default_factory=list)


class PlantPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["plant_id"] = "plant_id"
    items: List[PlantItem] = Field(default_factory=list)


class ObjectCountPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["object_count"] = "object_count"
    items: List[ObjectCountItem] = Field(default_factory=list)


class TranslationPayload(BaseModel):
    """
    Translation result (singleton, not a list).

    Example:
        >>> payload = TranslationPayload(
        ...     translated_text="Exit",
        ...     source_language="Italian",
        ...     notes="",
        ... )
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    kind: Literal["translate"] = "translate"
    translated_text: str = Field(..., alias="translatedText")
    source_language: str = Field("Unknown", alias="sourceLanguage")
    notes: str = Field("", alias="translationNotes")
    thumbnail: Optional[bytes] = Field(default=None, exclude=True, repr=False)


Payload = Annotated[
    Union[
        WeightPayload,
        DimensionPayload,
        CaloriePayload,
        PlantPayload,
        ObjectCountPayload,
        TranslationPayload,
    ],
    Field(discriminator="kind"),
]

PAYLOAD_TYPES = {
    Mode.WEIGHT: WeightPayload,
    Mode.DIMENSIONS: DimensionPayload,
    Mode.CALORIES: CaloriePayload,
    Mode.PLANT_ID: PlantPayload,
    Mode.OBJECT_COUNT: ObjectCountPayload,
    Mode.TRANSLATE: TranslationPayload,
}


def attach_thumbnail(payload: Optional[Payload], thumbnail: Optional[bytes]) -> Optional[Payload]:
    """Return a copy of payload with thumbnail set on every item."""
    if payload is None:
        return None
    if isinstance(payload, TranslationPayload):
        return payload.model_copy(update={"thumbnail": thumbnail})
    items = [item.model_copy(update={"thumbnail": thumbnail}) for item in payload.items]
    return payload.model_copy(update={"items": items})


# ═══════════════════════════════════════════════════════════
# OUTCOME
# ═══════════════════════════════════════════════════════════


class AnalysisOutcome(BaseModel):
    """
    Parsed, typed result of one analysis attempt.

    Value-typed: every transformation returns a copy.

    Attributes:
        mode: Analysis mode
        title: Headline (first item name or mode label)
        primary_value: Main value shown to the user
        detail: Secondary line (item count note, portion, ...)
        explanation: Model's explanation
        raw_text: Untouched model reply (diagnostics)
        thumbnail: Capture thumbnail (JPEG bytes)
        payload: Mode-specific payload, None in the generic state

    Example:
        >>> outcome = AnalysisOutcome(
        ...     mode=Mode.WEIGHT,
        ...     title="apple",
        ...     primary_value="150 g",
        ...     payload=WeightPayload(
        ...         items=[WeightItem(name="apple", weight="150", unit="g")]
        ...     ),
        ... )
        >>> len(outcome.weight_items)
        1
    """

    model_config = ConfigDict(frozen=True)

    mode: Mode
    title: str
    primary_value: str
    detail: str = ""
    explanation: str = ""
    raw_text: str = ""
    thumbnail: Optional[bytes] = Field(default=None, repr=False)
    payload: Optional[Payload] = None

    @model_validator(mode="after")
    def payload_matches_mode(self) -> AnalysisOutcome:
        """Only the payload variant of the outcome's own mode is allowed."""
        if self.payload is not None and self.payload.kind != self.mode.value:
            raise ValueError(
                f"Payload kind '{self.payload.kind}' does not match mode '{self.mode.value}'"
            )
        return self

    def with_thumbnail(self, thumbnail: Optional[bytes]) -> AnalysisOutcome:
        """Copy with thumbnail attached to the outcome and every item."""
        return self.model_copy(
            update={
                "thumbnail": thumbnail,
                "payload": attach_thumbnail(self.payload, thumbnail),
            }
        )

    # Typed accessors

    @property
    def weight_items(self) -> List[WeightItem]:
        return self.payload.items if isinstance(self.payload, WeightPayload) else []

    @property
    def dimension_items(self) -> List[DimensionItem]:
        return self.payload.items if isinstance(self.payload, DimensionPayload) else []

    @property
    def calorie_items(self) -> List[CalorieItem]:
        return self.payload.items if isinstance(self.payload, CaloriePayload) else []

    @property
    def plant_items(self) -> List[PlantItem]:
        return self.payload.items if isinstance(self.payload, PlantPayload) else []

    @property
    def object_counts(self) -> List[ObjectCountItem]:
        return self.payload.items if isinstance(self.payload, ObjectCountPayload) else []

    @property
    def translation(self) -> Optional[TranslationPayload]:
        return self.payload if isinstance(self.payload, TranslationPayload) else None

    @property
    def has_payload(self) -> bool:
        """True if the mode-specific payload holds any data."""
        if self.payload is None:
            return False
        if isinstance(self.payload, TranslationPayload):
            return True
        return bool(self.payload.items)

    # Derived aggregates (never stored)

    @property
    def total_calories(self) -> int:
        return sum(item.calories for item in self.calorie_items)

    @property
    def total_protein(self) -> float:
        return sum((item.protein for item in self.calorie_items), 0.0)

    @property
    def total_carbs(self) -> float:
        return sum((item.carbs for item in self.calorie_items), 0.0)

    @property
    def total_fat(self) -> float:
        return sum((item.fat for item in self.calorie_items), 0.0)

    @property
    def total_object_count(self) -> int:
        return sum(item.count for item in self.object_counts)
