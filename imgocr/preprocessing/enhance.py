"""Contrast enhancement and grayscale conversion for OCR input images.

Pixel arrays are RGB or RGBA with shape ``(height, width, channels)``.
Only the first three channels are transformed; alpha is carried through
unchanged.
"""

import io

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from imgocr.ocr.errors import DecodeError, EncodeError
from imgocr.ocr.models import ImageAsset
from imgocr.utils.config import CONTRAST_SINGULARITY
from imgocr.utils.logger import get_logger

logger = get_logger(__name__)

_MID_GRAY = 128.0


def contrast_factor(boost: float) -> float:
    """Compute the contrast multiplier for a boost value.

    The boost is scaled by 100 and plugged into the classic
    ``259 * (C + 255) / (255 * (259 - C))`` contrast formula, so a boost
    of 0 is the identity.

    Args:
        boost: Contrast boost, must be below 2.59.

    Returns:
        Multiplier applied to each channel's distance from mid-gray.

    Raises:
        ValueError: If the boost would make the denominator zero or negative.
    """
    if boost >= CONTRAST_SINGULARITY:
        raise ValueError(
            f"contrast boost {boost} must be below {CONTRAST_SINGULARITY}"
        )
    contrast = boost * 100
    return (259 * (contrast + 255)) / (255 * (259 - contrast))


def apply_contrast(pixels: np.ndarray, boost: float) -> np.ndarray:
    """Stretch each color channel away from mid-gray.

    Args:
        pixels: RGB or RGBA image array.
        boost: Contrast boost passed to :func:`contrast_factor`.

    Returns:
        Float32 array of the same shape with color channels in [0, 255].
    """
    factor = contrast_factor(boost)
    result = pixels.astype(np.float32)
    color = result[..., :3]
    result[..., :3] = np.clip(factor * (color - _MID_GRAY) + _MID_GRAY, 0.0, 255.0)
    return result


def apply_grayscale(pixels: np.ndarray) -> np.ndarray:
    """Collapse the color channels to luma, keeping the channel layout.

    Uses ``0.299 R + 0.587 G + 0.114 B``; every color channel is set to
    the resulting gray value.

    Args:
        pixels: RGB or RGBA image array (uint8 or float32).

    Returns:
        Uint8 array of the same shape.
    """
    color = np.ascontiguousarray(pixels[..., :3], dtype=np.float32)
    gray = cv2.cvtColor(color, cv2.COLOR_RGB2GRAY)
    gray = np.clip(np.rint(gray), 0, 255).astype(np.uint8)

    result = np.empty(pixels.shape, dtype=np.uint8)
    result[..., :3] = gray[..., np.newaxis]
    if pixels.shape[-1] > 3:
        result[..., 3:] = np.clip(np.rint(pixels[..., 3:]), 0, 255).astype(np.uint8)
    return result


def decode_image(asset: ImageAsset) -> np.ndarray:
    """Decode an asset into an RGB or RGBA pixel array.

    Images with an alpha channel or palette transparency decode to RGBA,
    everything else to RGB. Multi-frame files yield their first frame.

    Raises:
        DecodeError: If the bytes are not a readable raster image.
    """
    try:
        with Image.open(io.BytesIO(asset.data)) as img:
            if "A" in img.getbands() or "transparency" in img.info:
                img = img.convert("RGBA")
            else:
                img = img.convert("RGB")
            return np.array(img)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as exc:
        raise DecodeError(f"Could not decode {asset.name}: {exc}") from exc


def encode_image(pixels: np.ndarray, image_format: str = "PNG") -> bytes:
    """Serialize a uint8 RGB/RGBA array.

    Raises:
        EncodeError: If Pillow cannot write the array in the given format.
    """
    buf = io.BytesIO()
    try:
        Image.fromarray(pixels).save(buf, format=image_format)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        raise EncodeError(f"Could not encode image as {image_format}: {exc}") from exc
    return buf.getvalue()


def calculate_contrast(pixels: np.ndarray) -> float:
    """Calculate image contrast as the standard deviation of luma values."""
    color = np.ascontiguousarray(pixels[..., :3], dtype=np.float32)
    return float(cv2.cvtColor(color, cv2.COLOR_RGB2GRAY).std())


def preprocess(
    image: ImageAsset, contrast_boost: float, image_format: str = "PNG"
) -> ImageAsset:
    """Enhance contrast and convert an image to grayscale.

    The input asset is left untouched; a new asset with freshly encoded
    bytes is returned.

    Args:
        image: Source image asset.
        contrast_boost: Contrast boost, must be below 2.59.
        image_format: Pillow format name used to re-encode the result.

    Returns:
        New asset with the processed image and its decoded dimensions.

    Raises:
        DecodeError: If the source cannot be decoded.
        EncodeError: If the result cannot be serialized.
    """
    pixels = decode_image(image)
    processed = apply_grayscale(apply_contrast(pixels, contrast_boost))
    data = encode_image(processed, image_format)

    height, width = processed.shape[:2]
    logger.debug(
        "Preprocessed %s (%dx%d, boost %.2f)", image.name, width, height, contrast_boost
    )
    return ImageAsset(
        data=data,
        media_type=Image.MIME.get(image_format.upper(), "image/png"),
        name=image.name,
        width=width,
        height=height,
    )
