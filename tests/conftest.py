"""Shared test fixtures for the image OCR test suite."""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from imgocr.ocr.models import ImageAsset


def encode_png(pixels: np.ndarray) -> bytes:
    """Encode a pixel array as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def sample_rgb() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.full((60, 80, 3), 200, dtype=np.uint8)
    image[20:40, 10:70] = (30, 60, 90)
    return image


@pytest.fixture
def sample_rgba(sample_rgb: np.ndarray) -> np.ndarray:
    """RGB test image with a half-transparent alpha channel."""
    alpha = np.full(sample_rgb.shape[:2] + (1,), 128, dtype=np.uint8)
    return np.concatenate([sample_rgb, alpha], axis=2)


@pytest.fixture
def png_asset(sample_rgb: np.ndarray) -> ImageAsset:
    """PNG image asset built from the sample RGB image."""
    return ImageAsset(data=encode_png(sample_rgb), media_type="image/png", name="scan.png")


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
