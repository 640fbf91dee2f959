"""
Shared fixtures for iscale tests.

Images are generated with Pillow; the transport uses httpx.MockTransport
so no test touches the network.
"""

import io
import json
from typing import Any, Callable, Dict

import pytest
from PIL import Image

from iscale.domain.analysis.models import (
    AnalysisOutcome,
    CalorieItem,
    CaloriePayload,
    WeightItem,
    WeightPayload,
)
from iscale.domain.analysis.modes import Mode
from iscale.infrastructure.credentials.key_store import InMemoryCredentialStore


# ═══════════════════════════════════════════════════════════
# IMAGE FIXTURES
# ═══════════════════════════════════════════════════════════


def make_image_bytes(size=(64, 48), mode: str = "RGB", fmt: str = "PNG") -> bytes:
    """Encode a solid-color image."""
    color: Any = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    if mode == "L":
        color = 128
    img = Image.new(mode, size, color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    return make_image_bytes


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def large_png_bytes() -> bytes:
    return make_image_bytes(size=(2048, 1536))


# ═══════════════════════════════════════════════════════════
# REPLY FIXTURES
# ═══════════════════════════════════════════════════════════


def chat_body(content: str) -> bytes:
    """Wrap reply text in a chat-completions envelope."""
    return json.dumps({"choices": [{"message": {"role": "assistant", "content": content}}]}).encode(
        "utf-8"
    )


@pytest.fixture
def make_chat_body() -> Callable[[str], bytes]:
    return chat_body


@pytest.fixture
def weight_outcome() -> AnalysisOutcome:
    return AnalysisOutcome(
        mode=Mode.WEIGHT,
        title="apple",
        primary_value="150 g",
        detail="2 objects detected",
        explanation="Compared with the mug",
        payload=WeightPayload(
            items=[
                WeightItem(name="apple", weight="150", unit="g"),
                WeightItem(name="pen", weight="20", unit="g"),
            ]
        ),
    )


@pytest.fixture
def calorie_outcome() -> AnalysisOutcome:
    return AnalysisOutcome(
        mode=Mode.CALORIES,
        title="pasta",
        primary_value="400 kcal",
        detail="3 food items detected",
        payload=CaloriePayload(
            items=[
                CalorieItem(name="pasta", portion="100 g", calories=200, protein=7, carbs=40, fat=1.5),
                CalorieItem(name="sauce", portion="50 g", calories=150, protein=2, carbs=8, fat=12),
                CalorieItem(name="basil", portion="2 g", calories=50, protein=0.5, carbs=1, fat=0),
            ]
        ),
    )


# ═══════════════════════════════════════════════════════════
# COLLABORATOR FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def key_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore("sk-test-key")


@pytest.fixture
def empty_key_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def request_body() -> Dict[str, Any]:
    return {"model": "gpt-4o-mini", "max_tokens": 800, "messages": []}
