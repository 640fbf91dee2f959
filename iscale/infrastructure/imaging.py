"""Image helpers: downscale and JPEG encoding for captures."""

import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from iscale.domain.shared.errors import ImageConversionError

MAX_UPLOAD_DIMENSION = 1024
THUMBNAIL_DIMENSION = 512
JPEG_QUALITY = 70


def target_size(size: Tuple[int, int], max_dimension: int) -> Tuple[int, int]:
    """
    Scale (width, height) so the largest side is at most max_dimension.

    Example:
        >>> target_size((4032, 3024), 1024)
        (1024, 768)
        >>> target_size((800, 600), 1024)
        (800, 600)
    """
    width, height = size
    if width <= max_dimension and height <= max_dimension:
        return size
    ratio = min(max_dimension / width, max_dimension / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def _to_rgb(img: Image.Image) -> Image.Image:
    """Flatten transparency on white, JPEG has no alpha."""
    if img.mode in ("RGBA", "LA", "P"):
        if img.mode == "P":
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def encode_jpeg(
    image_data: bytes,
    max_dimension: int = MAX_UPLOAD_DIMENSION,
    quality: int = JPEG_QUALITY,
) -> bytes:
    """
    Downscale (if needed) and re-encode image bytes as JPEG.

    The input bytes are never modified; resizing works on a decoded copy.

    Raises:
        ImageConversionError: If bytes are empty or not a decodable image
    """
    if not image_data:
        raise ImageConversionError("Empty image data")

    try:
        with Image.open(io.BytesIO(image_data)) as img:
            img.load()
            new_size = target_size(img.size, max_dimension)
            scaled = img.resize(new_size, Image.Resampling.LANCZOS) if new_size != img.size else img.copy()

        rgb_img = _to_rgb(scaled)
        output = io.BytesIO()
        rgb_img.save(output, format="JPEG", quality=quality, optimize=True)
        return output.getvalue()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        EOFError,
        ValueError,
    ) as e:
        raise ImageConversionError(f"Cannot encode image: {e}") from e


def make_thumbnail(image_data: bytes) -> bytes:
    """Compressed JPEG thumbnail stored with history records."""
    return encode_jpeg(image_data, max_dimension=THUMBNAIL_DIMENSION)
