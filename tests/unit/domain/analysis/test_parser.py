"""
Unit tests for ResponseParser.

Covers the three fallback tiers and each mode's typed mapping.
"""

import json

import pytest

from iscale.domain.analysis.models import PlantConfidence
from iscale.domain.analysis.modes import Mode
from iscale.domain.analysis.parser import (
    ENVELOPE_ERROR,
    ResponseParser,
    extract_reply_text,
    parse_reply_json,
)
from iscale.domain.shared.errors import InvalidResponseError


@pytest.fixture
def parser() -> ResponseParser:
    return ResponseParser()


class TestEnvelope:
    """Test chat-completions envelope extraction."""

    def test_extracts_content(self, make_chat_body) -> None:
        assert extract_reply_text(make_chat_body("hello")) == "hello"

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"[]",
            b"{}",
            b'{"choices": []}',
            b'{"choices": [{"message": {}}]}',
            b'{"choices": [{"message": {"content": 42}}]}',
        ],
    )
    def test_unrecognized_envelope_raises(self, body: bytes) -> None:
        with pytest.raises(InvalidResponseError) as exc_info:
            extract_reply_text(body)
        assert exc_info.value.reason == ENVELOPE_ERROR

    def test_parse_raises_only_for_envelope(self, parser: ResponseParser) -> None:
        with pytest.raises(InvalidResponseError):
            parser.parse(b'{"error": "boom"}', Mode.WEIGHT)


class TestReplyJson:
    def test_plain_object(self) -> None:
        assert parse_reply_json(' {"a": 1} ') == {"a": 1}

    def test_fenced_object(self) -> None:
        assert parse_reply_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_non_object_json_is_rejected(self) -> None:
        assert parse_reply_json("[1, 2]") is None
        assert parse_reply_json("42") is None

    def test_text_is_rejected(self) -> None:
        assert parse_reply_json("about 2 kilograms") is None


class TestWeight:
    """Weight mode mapping."""

    def test_single_item(self, parser: ResponseParser) -> None:
        reply = '{"objects":[{"name":"apple","weight":150,"unit":"g"}],"explanation":"x"}'

        outcome = parser.parse_reply(reply, Mode.WEIGHT)

        assert len(outcome.weight_items) == 1
        item = outcome.weight_items[0]
        assert (item.name, item.weight, item.unit) == ("apple", "150", "g")
        assert outcome.title == "apple"
        assert outcome.primary_value == "150 g"
        assert outcome.detail == ""
        assert outcome.explanation == "x"
        assert outcome.raw_text == reply

    def test_two_items_count_note(self, parser: ResponseParser) -> None:
        reply = (
            '{"objects":[{"name":"apple","weight":"150","unit":"g"},'
            '{"name":"pen","weight":"20","unit":"g"}]}'
        )

        outcome = parser.parse_reply(reply, Mode.WEIGHT)

        assert outcome.detail == "2 objects detected"
        assert outcome.primary_value == "150 g"

    def test_malformed_elements_dropped(self, parser: ResponseParser) -> None:
        reply = json.dumps(
            {
                "objects": [
                    {"weight": 10, "unit": "g"},
                    "pen",
                    {"name": "cup", "weight": 300, "unit": "g"},
                ]
            }
        )

        outcome = parser.parse_reply(reply, Mode.WEIGHT)

        assert [i.name for i in outcome.weight_items] == ["cup"]
        assert outcome.detail == ""

    def test_empty_list_keeps_raw_text_as_value(self, parser: ResponseParser) -> None:
        reply = '{"objects":[]}'

        outcome = parser.parse_reply(reply, Mode.WEIGHT)

        assert outcome.title == "Digital Scale"
        assert outcome.primary_value == reply
        assert outcome.weight_items == []
        assert not outcome.has_payload


class TestDimensions:
    def test_formatted_value(self, parser: ResponseParser) -> None:
        reply = json.dumps(
            {
                "objects": [
                    {"name": "box", "length": 30, "width": 20.5, "height": "15", "unit": "cm"}
                ]
            }
        )

        outcome = parser.parse_reply(reply, Mode.DIMENSIONS)

        assert outcome.primary_value == "30 × 20.5 × 15 cm"
        assert outcome.dimension_items[0].width == "20.5"

    def test_missing_dimension_drops_element(self, parser: ResponseParser) -> None:
        reply = json.dumps({"objects": [{"name": "box", "length": 30, "width": 20, "unit": "cm"}]})

        outcome = parser.parse_reply(reply, Mode.DIMENSIONS)

        assert outcome.dimension_items == []


class TestCalories:
    def test_total_across_items(self, parser: ResponseParser) -> None:
        reply = json.dumps(
            {
                "items": [
                    {"name": "pasta", "portion": "100 g", "calories": 200, "protein": 7},
                    {"name": "sauce", "calories": "150", "fat": "12.5"},
                    {"name": "basil", "calories": 50.9},
                ],
                "explanation": "Standard portions",
            }
        )

        outcome = parser.parse_reply(reply, Mode.CALORIES)

        assert [i.calories for i in outcome.calorie_items] == [200, 150, 50]
        assert outcome.total_calories == 400
        assert outcome.primary_value == "400 kcal"
        assert outcome.detail == "3 food items detected"
        assert outcome.total_fat == 12.5

    def test_single_item_detail_is_portion(self, parser: ResponseParser) -> None:
        reply = '{"items":[{"name":"banana","portion":"1 medium","calories":105}]}'

        outcome = parser.parse_reply(reply, Mode.CALORIES)

        assert outcome.title == "banana"
        assert outcome.detail == "1 medium"

    def test_defaults(self, parser: ResponseParser) -> None:
        outcome = parser.parse_reply('{"items":[{"name":"water"}]}', Mode.CALORIES)

        item = outcome.calorie_items[0]
        assert item.portion == ""
        assert item.calories == 0
        assert item.protein == 0.0


class TestTranslation:
    def test_typed(self, parser: ResponseParser) -> None:
        reply = json.dumps(
            {
                "translatedText": "Exit",
                "sourceLanguage": "Italian",
                "translationNotes": "Sign above a door",
            }
        )

        outcome = parser.parse_reply(reply, Mode.TRANSLATE)

        assert outcome.title == "Translation"
        assert outcome.primary_value == "Exit"
        assert outcome.detail == "From Italian"
        assert outcome.explanation == "Sign above a door"
        assert outcome.translation is not None
        assert outcome.translation.source_language == "Italian"

    def test_missing_source_language(self, parser: ResponseParser) -> None:
        outcome = parser.parse_reply('{"translatedText":"Hello"}', Mode.TRANSLATE)

        assert outcome.detail == "From Unknown"
        assert outcome.translation.notes == ""

    def test_missing_translated_text_falls_to_generic(self, parser: ResponseParser) -> None:
        outcome = parser.parse_reply('{"value":"Ciao","sourceLanguage":"Italian"}', Mode.TRANSLATE)

        assert outcome.translation is None
        assert outcome.title == "Translate"
        assert outcome.primary_value == "Ciao"


class TestPlants:
    def test_single_plant(self, parser: ResponseParser) -> None:
        reply = json.dumps(
            {
                "plants": [
                    {
                        "commonName": "Monstera",
                        "scientificName": "Monstera deliciosa",
                        "confidence": "HIGH",
                    }
                ]
            }
        )

        outcome = parser.parse_reply(reply, Mode.PLANT_ID)

        plant = outcome.plant_items[0]
        assert plant.confidence is PlantConfidence.HIGH
        assert plant.description == ""
        assert outcome.primary_value == "Monstera"
        assert outcome.detail == "Monstera deliciosa"

    def test_unknown_confidence_defaults_medium(self, parser: ResponseParser) -> None:
        reply = json.dumps(
            {
                "plants": [
                    {"commonName": "Fern", "scientificName": "Polypodiopsida", "confidence": "sure"},
                    {"commonName": "Moss", "scientificName": "Bryophyta"},
                    {"commonName": "Unnamed"},
                ]
            }
        )

        outcome = parser.parse_reply(reply, Mode.PLANT_ID)

        assert len(outcome.plant_items) == 2
        assert all(p.confidence is PlantConfidence.MEDIUM for p in outcome.plant_items)
        assert outcome.detail == "2 plants detected"


class TestObjectCount:
    def test_total_and_types(self, parser: ResponseParser) -> None:
        reply = json.dumps(
            {
                "objects": [
                    {"name": "apple", "count": 3, "category": "Food"},
                    {"name": "fork", "count": "2"},
                ]
            }
        )

        outcome = parser.parse_reply(reply, Mode.OBJECT_COUNT)

        assert outcome.total_object_count == 5
        assert outcome.primary_value == "5 objects"
        assert outcome.detail == "2 types detected"
        assert outcome.object_counts[1].category == "Other"

    def test_singular(self, parser: ResponseParser) -> None:
        outcome = parser.parse_reply('{"objects":[{"name":"cat"}]}', Mode.OBJECT_COUNT)

        assert outcome.object_counts[0].count == 1
        assert outcome.primary_value == "1 object"


class TestFallbackTiers:
    """Generic and plain-text tiers."""

    @pytest.mark.parametrize("mode", list(Mode))
    def test_plain_text(self, parser: ResponseParser, mode: Mode) -> None:
        outcome = parser.parse_reply("  about 2 kilograms \n", mode)

        assert outcome.primary_value == "about 2 kilograms"
        assert outcome.title == mode.label
        assert outcome.detail == ""
        assert outcome.explanation == ""
        assert outcome.payload is None
        assert outcome.weight_items == []
        assert outcome.calorie_items == []
        assert outcome.translation is None

    def test_generic_fields(self, parser: ResponseParser) -> None:
        reply = '{"title":"Mug","value":"about 300 g","detail":"ceramic","explanation":"size"}'

        outcome = parser.parse_reply(reply, Mode.WEIGHT)

        assert outcome.title == "Mug"
        assert outcome.primary_value == "about 300 g"
        assert outcome.detail == "ceramic"
        assert outcome.explanation == "size"
        assert outcome.payload is None

    def test_generic_defaults(self, parser: ResponseParser) -> None:
        reply = '{"answer": 42}'

        outcome = parser.parse_reply(reply, Mode.CALORIES)

        assert outcome.title == "Calorie Counter"
        assert outcome.primary_value == reply

    def test_list_field_of_wrong_type_is_generic(self, parser: ResponseParser) -> None:
        outcome = parser.parse_reply('{"objects":"none","value":"n/a"}', Mode.WEIGHT)

        assert outcome.payload is None
        assert outcome.primary_value == "n/a"

    def test_full_body(self, parser: ResponseParser, make_chat_body) -> None:
        body = make_chat_body('```json\n{"objects":[{"name":"apple","weight":150,"unit":"g"}]}\n```')

        outcome = parser.parse(body, Mode.WEIGHT)

        assert outcome.primary_value == "150 g"
