"""Configurable image preprocessing stage for OCR.

Applies contrast enhancement followed by grayscale conversion, clamping
the contrast boost to a safe range and logging contrast before and after.
"""

from dataclasses import dataclass

from imgocr.ocr.models import ImageAsset
from imgocr.utils.config import PreprocessingConfig
from imgocr.utils.logger import get_logger

from .enhance import calculate_contrast, decode_image, preprocess

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Before/after image contrast measurements."""

    contrast_before: float
    contrast_after: float


class ImagePreprocessor:
    """Contrast and grayscale preprocessing driven by configuration.

    Args:
        config: Preprocessing configuration. Defaults are used when omitted.
    """

    def __init__(self, config: PreprocessingConfig | None = None) -> None:
        self.config = config or PreprocessingConfig()

    def effective_boost(self, contrast_boost: float) -> float:
        """Clamp a requested boost to the configured safe maximum."""
        if contrast_boost > self.config.max_contrast_boost:
            logger.warning(
                "Contrast boost %.2f exceeds the safe maximum, using %.2f",
                contrast_boost,
                self.config.max_contrast_boost,
            )
            return self.config.max_contrast_boost
        return contrast_boost

    def process(
        self, image: ImageAsset, contrast_boost: float
    ) -> tuple[ImageAsset, QualityMetrics]:
        """Run contrast enhancement and grayscale conversion on an image.

        Args:
            image: Source image asset; never modified.
            contrast_boost: Requested contrast boost.

        Returns:
            Tuple of (preprocessed_asset, quality_metrics).

        Raises:
            DecodeError: If the source image cannot be decoded.
            EncodeError: If the processed image cannot be re-encoded.
        """
        boost = self.effective_boost(contrast_boost)
        result = preprocess(image, boost, image_format=self.config.output_format)

        metrics = QualityMetrics(
            contrast_before=calculate_contrast(decode_image(image)),
            contrast_after=calculate_contrast(decode_image(result)),
        )
        logger.info(
            "Preprocessing complete: contrast %.1f->%.1f",
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics
