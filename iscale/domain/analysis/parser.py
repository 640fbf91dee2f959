"""
Response parser for vision replies.

Turns the raw chat-completions body into an ``AnalysisOutcome``.
Three tiers, most specific first:

1. Typed: reply is a JSON object with the mode's expected shape.
2. Generic JSON: ``title``/``value``/``detail``/``explanation`` keys.
3. Plain text: whole trimmed reply becomes the value.

Only an unrecognized transport envelope raises; everything past the
envelope degrades to a best-effort outcome.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import structlog

from iscale.domain.analysis.coercion import (
    coerce_decimal_string,
    coerce_float,
    coerce_int,
    coerce_text,
)
from iscale.domain.analysis.models import (
    AnalysisOutcome,
    CalorieItem,
    CaloriePayload,
    DimensionItem,
    DimensionPayload,
    ObjectCountItem,
    ObjectCountPayload,
    PlantConfidence,
    PlantItem,
    PlantPayload,
    TranslationPayload,
    WeightItem,
    WeightPayload,
)
from iscale.domain.analysis.modes import Mode, ResponseShape
from iscale.domain.shared.errors import InvalidResponseError

logger = structlog.get_logger(__name__)

ENVELOPE_ERROR = "Could not extract content from response."


# ═══════════════════════════════════════════════════════════
# ENVELOPE & JSON EXTRACTION
# ═══════════════════════════════════════════════════════════


def extract_reply_text(body: bytes) -> str:
    """
    Extract ``choices[0].message.content`` from a chat-completions body.

    Raises:
        InvalidResponseError: If the envelope shape is unrecognized
    """
    try:
        envelope = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidResponseError(ENVELOPE_ERROR) from e

    if not isinstance(envelope, dict):
        raise InvalidResponseError(ENVELOPE_ERROR)
    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise InvalidResponseError(ENVELOPE_ERROR)
    message = choices[0].get("message")
    if not isinstance(message, dict):
        raise InvalidResponseError(ENVELOPE_ERROR)
    content = message.get("content")
    if not isinstance(content, str):
        raise InvalidResponseError(ENVELOPE_ERROR)
    return content


def parse_reply_json(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse reply text as a JSON object.

    Tries the trimmed text first, then the outermost ``{...}`` span
    (handles replies wrapped in markdown fences). Returns None when no
    JSON object can be read.
    """
    candidate = text.strip()
    try:
        data = json.loads(candidate)
    except ValueError:
        first = candidate.find("{")
        last = candidate.rfind("}")
        if first == -1 or last <= first:
            return None
        try:
            data = json.loads(candidate[first : last + 1])
        except ValueError:
            return None
    return data if isinstance(data, dict) else None


# ═══════════════════════════════════════════════════════════
# ELEMENT PARSERS (drop elements missing identifying fields)
# ═══════════════════════════════════════════════════════════


def _parse_weight(obj: Dict[str, Any]) -> Optional[WeightItem]:
    name = coerce_text(obj.get("name"))
    unit = coerce_text(obj.get("unit"))
    weight = coerce_decimal_string(obj.get("weight"))
    if name is None or unit is None or weight is None:
        return None
    return WeightItem(name=name, weight=weight, unit=unit)


def _parse_dimension(obj: Dict[str, Any]) -> Optional[DimensionItem]:
    name = coerce_text(obj.get("name"))
    unit = coerce_text(obj.get("unit"))
    length = coerce_decimal_string(obj.get("length"))
    width = coerce_decimal_string(obj.get("width"))
    height = coerce_decimal_string(obj.get("height"))
    if name is None or unit is None or length is None or width is None or height is None:
        return None
    return DimensionItem(name=name, length=length, width=width, height=height, unit=unit)


def _parse_calorie(obj: Dict[str, Any]) -> Optional[CalorieItem]:
    name = coerce_text(obj.get("name"))
    if name is None:
        return None
    return CalorieItem(
        name=name,
        portion=coerce_text(obj.get("portion")) or "",
        calories=coerce_int(obj.get("calories"), default=0),
        protein=coerce_float(obj.get("protein"), default=0.0),
        carbs=coerce_float(obj.get("carbs"), default=0.0),
        fat=coerce_float(obj.get("fat"), default=0.0),
    )


def _parse_confidence(value: Any) -> PlantConfidence:
    text = coerce_text(value)
    try:
        return PlantConfidence((text or "").lower())
    except ValueError:
        return PlantConfidence.MEDIUM


def _parse_plant(obj: Dict[str, Any]) -> Optional[PlantItem]:
    common_name = coerce_text(obj.get("commonName"))
    scientific_name = coerce_text(obj.get("scientificName"))
    if common_name is None or scientific_name is None:
        return None
    return PlantItem(
        common_name=common_name,
        scientific_name=scientific_name,
        description=coerce_text(obj.get("description")) or "",
        confidence=_parse_confidence(obj.get("confidence")),
    )


def _parse_object_count(obj: Dict[str, Any]) -> Optional[ObjectCountItem]:
    name = coerce_text(obj.get("name"))
    if name is None:
        return None
    return ObjectCountItem(
        name=name,
        count=coerce_int(obj.get("count"), default=1),
        category=coerce_text(obj.get("category")) or "Other",
    )


def _parse_elements(raw: List[Any], parse_one: Callable[[Dict[str, Any]], Any]) -> List[Any]:
    items = []
    for element in raw:
        if not isinstance(element, dict):
            continue
        item = parse_one(element)
        if item is not None:
            items.append(item)
    dropped = len(raw) - len(items)
    if dropped:
        logger.debug("Dropped malformed reply elements", dropped=dropped)
    return items


def _count_note(count: int, noun: str) -> str:
    return f"{count} {noun} detected" if count > 1 else ""


# ═══════════════════════════════════════════════════════════
# PARSER
# ═══════════════════════════════════════════════════════════


class ResponseParser:
    """
    Parse vision replies into typed outcomes.

    Stateless; safe to share.

    Example:
        >>> parser = ResponseParser()
        >>> outcome = parser.parse_reply(
        ...     '{"objects":[{"name":"apple","weight":150,"unit":"g"}]}',
        ...     Mode.WEIGHT,
        ... )
        >>> outcome.primary_value
        '150 g'
    """

    def parse(self, body: bytes, mode: Mode) -> AnalysisOutcome:
        """
        Parse a chat-completions response body.

        Raises:
            InvalidResponseError: If the envelope is unrecognized
        """
        return self.parse_reply(extract_reply_text(body), mode)

    def parse_reply(self, content: str, mode: Mode) -> AnalysisOutcome:
        """Parse the model's reply text. Never raises."""
        parsed = parse_reply_json(content)
        if parsed is None:
            logger.info("Reply is not JSON, using plain text", mode=mode.value)
            return self._plain_text(content, mode)

        outcome = self._typed(parsed, content, mode)
        if outcome is not None:
            return outcome

        logger.info("Reply JSON not in expected shape, using generic fields", mode=mode.value)
        return self._generic(parsed, content, mode)

    # Tier 1

    def _typed(self, parsed: Dict[str, Any], content: str, mode: Mode) -> Optional[AnalysisOutcome]:
        shape = mode.response_shape
        explanation = coerce_text(parsed.get("explanation")) or ""

        if shape is ResponseShape.TRANSLATION:
            return self._translation(parsed, content, mode)

        raw = parsed.get(shape.list_field or "")
        if not isinstance(raw, list):
            return None

        if shape is ResponseShape.WEIGHT_LIST:
            weights: List[WeightItem] = _parse_elements(raw, _parse_weight)
            first_weight = weights[0] if weights else None
            return AnalysisOutcome(
                mode=mode,
                title=first_weight.name if first_weight else mode.label,
                primary_value=first_weight.formatted_weight if first_weight else content,
                detail=_count_note(len(weights), "objects"),
                explanation=explanation,
                raw_text=content,
                payload=WeightPayload(items=weights),
            )

        if shape is ResponseShape.DIMENSION_LIST:
            dimensions: List[DimensionItem] = _parse_elements(raw, _parse_dimension)
            first_dim = dimensions[0] if dimensions else None
            return AnalysisOutcome(
                mode=mode,
                title=first_dim.name if first_dim else mode.label,
                primary_value=first_dim.formatted_dimensions if first_dim else content,
                detail=_count_note(len(dimensions), "objects"),
                explanation=explanation,
                raw_text=content,
                payload=DimensionPayload(items=dimensions),
            )

        if shape is ResponseShape.CALORIE_LIST:
            foods: List[CalorieItem] = _parse_elements(raw, _parse_calorie)
            total_calories = sum(item.calories for item in foods)
            if len(foods) > 1:
                detail = _count_note(len(foods), "food items")
            else:
                # single item: detail carries its portion size
                detail = foods[0].portion if foods else ""
            return AnalysisOutcome(
                mode=mode,
                title=foods[0].name if foods else mode.label,
                primary_value=f"{total_calories} kcal",
                detail=detail,
                explanation=explanation,
                raw_text=content,
                payload=CaloriePayload(items=foods),
            )

        if shape is ResponseShape.PLANT_LIST:
            plants: List[PlantItem] = _parse_elements(raw, _parse_plant)
            first_plant = plants[0] if plants else None
            if len(plants) > 1:
                detail = _count_note(len(plants), "plants")
            else:
                detail = first_plant.scientific_name if first_plant else ""
            return AnalysisOutcome(
                mode=mode,
                title=first_plant.common_name if first_plant else mode.label,
                primary_value=first_plant.common_name if first_plant else content,
                detail=detail,
                explanation=explanation,
                raw_text=content,
                payload=PlantPayload(items=plants),
            )

        counts: List[ObjectCountItem] = _parse_elements(raw, _parse_object_count)
        total = sum(item.count for item in counts)
        return AnalysisOutcome(
            mode=mode,
            title=counts[0].name if counts else mode.label,
            primary_value=f"{total} object{'' if total == 1 else 's'}",
            detail=_count_note(len(counts), "types"),
            explanation=explanation,
            raw_text=content,
            payload=ObjectCountPayload(items=counts),
        )

    def _translation(self, parsed: Dict[str, Any], content: str, mode: Mode) -> Optional[AnalysisOutcome]:
        translated_text = coerce_text(parsed.get("translatedText"))
        if translated_text is None:
            return None
        source_language = coerce_text(parsed.get("sourceLanguage")) or "Unknown"
        notes = coerce_text(parsed.get("translationNotes")) or ""
        return AnalysisOutcome(
            mode=mode,
            title="Translation",
            primary_value=translated_text,
            detail=f"From {source_language}",
            explanation=notes,
            raw_text=content,
            payload=TranslationPayload(
                translated_text=translated_text,
                source_language=source_language,
                notes=notes,
            ),
        )

    # Tier 2

    def _generic(self, parsed: Dict[str, Any], content: str, mode: Mode) -> AnalysisOutcome:
        return AnalysisOutcome(
            mode=mode,
            title=_string_or(parsed.get("title"), mode.label),
            primary_value=_string_or(parsed.get("value"), content),
            detail=_string_or(parsed.get("detail"), ""),
            explanation=_string_or(parsed.get("explanation"), ""),
            raw_text=content,
        )

    # Tier 3

    def _plain_text(self, content: str, mode: Mode) -> AnalysisOutcome:
        return AnalysisOutcome(
            mode=mode,
            title=mode.label,
            primary_value=content.strip(),
            raw_text=content,
        )


def _string_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default
