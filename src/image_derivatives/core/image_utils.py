"""Image processing utilities for the image derivatives pipeline."""

import io
import math
from fractions import Fraction
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, EncodeError, ImageProcessingError
from .models import ImageType

# Encoder quality is fixed; derivatives are not tunable per request.
JPEG_QUALITY = 75
OUTPUT_MODE = "RGB"

# Multi-picture JPEGs from phones and cameras open as MPO, a JpegImageFile subclass
DECODED_FORMATS = {
    ImageType.JPEG: frozenset({"JPEG", "MPO"}),
    ImageType.PNG: frozenset({"PNG"}),
}


def decode_image(data: bytes, image_type: ImageType) -> Image.Image:
    """
    Decode raw bytes into a PIL image of the expected type.

    Args:
        data: Encoded source image
        image_type: Format inferred from the object key

    Returns:
        Fully loaded PIL Image

    Raises:
        DecodeError: If the bytes are corrupt, truncated, or a different format
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as exc:
        raise DecodeError(f"Cannot decode {image_type.pil_format} image: {exc}") from exc

    if image.format not in DECODED_FORMATS[image_type]:
        raise DecodeError(
            f"Expected {image_type.pil_format} image but decoded {image.format or 'unknown'}"
        )
    return image


def calculate_scaled_size(
    width: int, height: int, max_dimension: float
) -> Tuple[int, int]:
    """
    Compute scale-to-fit dimensions for a square bounding box.

    The scale is min(max_dimension / width, max_dimension / height) and both
    sides are truncated. Sources smaller than the box are enlarged.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        max_dimension: Side of the bounding box

    Returns:
        (new_width, new_height)

    Raises:
        ValueError: If a source dimension is not positive
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Source dimensions must be positive, got {width}x{height}")

    # Exact arithmetic keeps the constraining side on max_dimension
    bound = Fraction(max_dimension)
    scale = min(bound / width, bound / height)
    return math.floor(scale * width), math.floor(scale * height)


def resize_image(image: Image.Image, max_dimension: float) -> Image.Image:
    """Scale an image to fit max_dimension using bilinear resampling, as RGB."""
    new_width, new_height = calculate_scaled_size(image.width, image.height, max_dimension)
    if new_width == 0 or new_height == 0:
        raise ImageProcessingError(
            f"Cannot fit {image.width}x{image.height} image into {max_dimension:g}px: "
            f"scaled size {new_width}x{new_height} is empty"
        )

    source = image if image.mode == OUTPUT_MODE else image.convert(OUTPUT_MODE)
    return source.resize((new_width, new_height), Image.Resampling.BILINEAR)


def encode_image(image: Image.Image, image_type: ImageType) -> bytes:
    """
    Serialize an image in the given format.

    Raises:
        EncodeError: If the encoder rejects the image
    """
    options = {"quality": JPEG_QUALITY} if image_type is ImageType.JPEG else {}
    output = io.BytesIO()
    try:
        image.save(output, format=image_type.pil_format, **options)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(f"Cannot encode {image_type.pil_format} image: {exc}") from exc
    return output.getvalue()
