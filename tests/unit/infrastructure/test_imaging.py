"""Unit tests for image helpers."""

import io

import pytest
from PIL import Image

from iscale.domain.shared.errors import ImageConversionError
from iscale.infrastructure.imaging import (
    THUMBNAIL_DIMENSION,
    encode_jpeg,
    make_thumbnail,
    target_size,
)


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


class TestTargetSize:
    @pytest.mark.parametrize(
        "size,expected",
        [
            ((4032, 3024), (1024, 768)),
            ((3024, 4032), (768, 1024)),
            ((1024, 1024), (1024, 1024)),
            ((800, 600), (800, 600)),
            ((5000, 10), (1024, 2)),
        ],
    )
    def test_preserves_aspect_ratio(self, size, expected) -> None:
        assert target_size(size, 1024) == expected


class TestEncodeJpeg:
    @pytest.mark.parametrize("mode", ["RGBA", "L", "RGB"])
    def test_modes_convert_to_rgb_jpeg(self, make_image, mode: str) -> None:
        jpeg = encode_jpeg(make_image(mode=mode))

        img = _open(jpeg)
        assert img.format == "JPEG"
        assert img.mode == "RGB"

    def test_transparency_flattened_on_white(self) -> None:
        img = Image.new("RGBA", (8, 8), (0, 0, 0, 0))
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")

        pixel = _open(encode_jpeg(buffer.getvalue())).getpixel((4, 4))

        assert all(channel > 240 for channel in pixel)

    def test_palette_image(self) -> None:
        img = Image.new("P", (10, 10))
        buffer = io.BytesIO()
        img.save(buffer, format="GIF")

        assert _open(encode_jpeg(buffer.getvalue())).format == "JPEG"

    def test_empty_bytes(self) -> None:
        with pytest.raises(ImageConversionError):
            encode_jpeg(b"")

    def test_undecodable_bytes(self) -> None:
        with pytest.raises(ImageConversionError):
            encode_jpeg(b"GIF89a not really")

    def test_oversized_image_rejected(self, png_bytes: bytes, monkeypatch) -> None:
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        with pytest.raises(ImageConversionError):
            encode_jpeg(png_bytes)


class TestThumbnail:
    def test_thumbnail_is_small_jpeg(self, large_png_bytes: bytes) -> None:
        img = _open(make_thumbnail(large_png_bytes))
        assert img.format == "JPEG"
        assert max(img.size) == THUMBNAIL_DIMENSION
