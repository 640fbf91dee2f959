"""
Vision prompts for each analysis mode.

System prompts pin the exact reply JSON shape; user prompts carry the
unit preference and, for translation, the target language. Both are
deterministic functions of (mode, units, locale).
"""

from typing import Dict

from iscale.domain.analysis.modes import Mode, UnitSystem


# ═══════════════════════════════════════════════════════════
# REPLY SHAPES (contract with the remote model)
# ═══════════════════════════════════════════════════════════

REPLY_SHAPES: Dict[Mode, str] = {
    Mode.WEIGHT: (
        '{"objects":[{"name":"<object name>","weight":"<number>","unit":"<unit>"}],'
        '"explanation":"<how the estimate was made>"}'
    ),
    Mode.DIMENSIONS: (
        '{"objects":[{"name":"<object name>","length":"<number>","width":"<number>",'
        '"height":"<number>","unit":"<unit>"}],"explanation":"<how the estimate was made>"}'
    ),
    Mode.CALORIES: (
        '{"items":[{"name":"<food name>","portion":"<portion size>","calories":250,'
        '"protein":12.5,"carbs":30,"fat":8}],'
        '"explanation":"<how the estimate was made>"}'
    ),
    Mode.TRANSLATE: (
        '{"translatedText":"<translation>","sourceLanguage":"<detected language>",'
        '"translationNotes":"<notes on idioms, ambiguity or context>"}'
    ),
    Mode.PLANT_ID: (
        '{"plants":[{"commonName":"<common name>","scientificName":"<scientific name>",'
        '"description":"<short description>","confidence":"high|medium|low"}],'
        '"explanation":"<visible features used>"}'
    ),
    Mode.OBJECT_COUNT: (
        '{"objects":[{"name":"<object type>","count":3,"category":"<category>"}],'
        '"explanation":"<how the objects were counted>"}'
    ),
}

_OUTPUT_RULES = (
    "MUST: reply with ONLY valid UTF-8 JSON using exactly this shape: {shape}. "
    "DO_NOT: add extra text, markdown or code fences."
)


# ═══════════════════════════════════════════════════════════
# SYSTEM PROMPTS
# ═══════════════════════════════════════════════════════════

_SYSTEM_TASKS: Dict[Mode, str] = {
    Mode.WEIGHT: (
        "You are a precise digital scale. Estimate the weight of every distinct "
        "object in the photo using visual cues such as size, material and "
        "reference objects. Express weights in {units}."
    ),
    Mode.DIMENSIONS: (
        "You are a precise tape measure. Estimate length, width and height of "
        "every distinct object in the photo using perspective and reference "
        "objects. Express dimensions in {units}."
    ),
    Mode.CALORIES: (
        "You are a nutritionist. Identify every food item in the photo, estimate "
        "its portion size in {units}, its calories (kcal, integer) and its "
        "protein, carbohydrate and fat content in grams."
    ),
    Mode.PLANT_ID: (
        "You are a botanist. Identify every plant species visible in the photo "
        "with its common and scientific name, a one-sentence description and "
        "your confidence (high, medium or low)."
    ),
    Mode.TRANSLATE: (
        "You are a professional translator. Read all text visible in the photo, "
        "detect its language and translate it into {language}. Preserve line "
        "breaks and note idioms or ambiguous words."
    ),
    Mode.OBJECT_COUNT: (
        "You are a meticulous counter. Group the objects in the photo by type and "
        "count each group exactly. Assign every group a short category such as "
        "Food, Tools, Electronics, Nature or Other."
    ),
}

_LANGUAGE_NAMES = {
    "en": "English",
    "it": "Italian",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "pt": "Portuguese",
    "nl": "Dutch",
    "ja": "Japanese",
    "zh": "Chinese",
    "ko": "Korean",
    "ru": "Russian",
    "ar": "Arabic",
    "hi": "Hindi",
}


def target_language(locale: str) -> str:
    """Language name for a locale such as ``en_US`` or ``pt-BR``."""
    code = locale.replace("-", "_").split("_")[0].strip().lower()
    if not code:
        return "English"
    return _LANGUAGE_NAMES.get(code, code)


def build_system_prompt(mode: Mode, units: UnitSystem, locale: str = "en_US") -> str:
    """Build the system prompt for a mode.

    Args:
        mode: Analysis mode
        units: Unit preference (ignored by unit-less modes)
        locale: Device locale (only used by translation)

    Returns:
        System prompt text
    """
    task = _SYSTEM_TASKS[mode].format(
        units=mode.unit_hint(units) or "",
        language=target_language(locale),
    )
    return f"{task} {_OUTPUT_RULES.format(shape=REPLY_SHAPES[mode])}"


# ═══════════════════════════════════════════════════════════
# USER PROMPTS
# ═══════════════════════════════════════════════════════════


def build_user_prompt(mode: Mode, units: UnitSystem, locale: str = "en_US") -> str:
    """Build the user message text sent alongside the image."""
    if mode is Mode.TRANSLATE:
        return f"Translate all visible text in this image into {target_language(locale)}."
    if mode is Mode.PLANT_ID:
        return "Identify the plants in this image."
    if mode is Mode.OBJECT_COUNT:
        return "Count the objects in this image, grouped by type."

    subject = {
        Mode.WEIGHT: "Estimate the weight of each object in this image",
        Mode.DIMENSIONS: "Estimate the dimensions of each object in this image",
        Mode.CALORIES: "Estimate the calories and macros of each food item in this image",
    }[mode]
    return f"{subject}. Use {mode.unit_hint(units)}."
