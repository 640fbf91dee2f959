"""
Request builder for vision analysis.

Turns a capture plus a mode into a chat-completions request body.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, Optional

import structlog

from iscale.domain.analysis.modes import Mode, UnitSystem
from iscale.infrastructure.config import DEFAULT_LOCALE, get_vision_model
from iscale.infrastructure.imaging import MAX_UPLOAD_DIMENSION, encode_jpeg

logger = structlog.get_logger(__name__)

MAX_REPLY_TOKENS = 800
IMAGE_DETAIL = "low"


class VisionRequestBuilder:
    """
    Build multimodal request bodies.

    Fixed model parameters: bounded reply length and low image detail.

    Example:
        >>> builder = VisionRequestBuilder()
        >>> body = builder.build(jpeg_bytes, Mode.WEIGHT, UnitSystem.METRIC)
        >>> body["max_tokens"]
        800
    """

    def __init__(
        self,
        model: Optional[str] = None,
        max_tokens: int = MAX_REPLY_TOKENS,
        max_dimension: int = MAX_UPLOAD_DIMENSION,
    ):
        """
        Args:
            model: Vision model name, defaults to ISCALE_VISION_MODEL
            max_tokens: Reply length bound
            max_dimension: Largest image side sent upstream
        """
        self.model = model or get_vision_model()
        self.max_tokens = max_tokens
        self.max_dimension = max_dimension

    def encode_image(self, image_data: bytes) -> str:
        """
        Downscale, JPEG-compress and base64-encode the capture.

        Raises:
            ImageConversionError: If the image cannot be compressed/encoded
        """
        jpeg = encode_jpeg(image_data, max_dimension=self.max_dimension)
        return base64.b64encode(jpeg).decode("ascii")

    def build(
        self,
        image_data: bytes,
        mode: Mode,
        units: UnitSystem,
        locale: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build the request body for a mode.

        Args:
            image_data: Raw capture bytes (any format Pillow reads)
            mode: Analysis mode
            units: Unit preference used in prompts
            locale: Device locale for translation target

        Returns:
            JSON-serializable request body

        Raises:
            ImageConversionError: If the image cannot be compressed/encoded
        """
        encoded = self.encode_image(image_data)
        resolved_locale = locale or DEFAULT_LOCALE

        logger.debug(
            "Built vision request",
            mode=mode.value,
            units=units.value,
            encoded_chars=len(encoded),
        )

        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "system", "content": mode.system_prompt(units, resolved_locale)},
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": f"data:image/jpeg;base64,{encoded}",
                                "detail": IMAGE_DETAIL,
                            },
                        },
                        {"type": "text", "text": mode.user_prompt(units, resolved_locale)},
                    ],
                },
            ],
        }
