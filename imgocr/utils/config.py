"""Configuration management for the image OCR pipeline.

Defines the per-invocation OCR settings and the application
configuration, which is loaded from YAML with sensible defaults for
preprocessing, the Tesseract engine, and the default OCR settings.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from imgocr.ocr.languages import PageSegmentationMode, resolve_languages

logger = logging.getLogger(__name__)

MIN_CONTRAST_BOOST = 0.5
MAX_CONTRAST_BOOST = 3.0

# The contrast factor's denominator reaches zero at this boost.
CONTRAST_SINGULARITY = 2.59


def _unique_chars(chars: Iterable[str]) -> str:
    return "".join(dict.fromkeys(chars))


class OCRSettings(BaseModel):
    """User-adjustable settings for a single OCR invocation.

    When a character appears in both ``whitelist_chars`` and
    ``blacklist_chars`` the blacklist wins: it is removed from the
    effective whitelist.
    """

    model_config = ConfigDict(frozen=True)

    language: str = "eng"
    page_segmentation_mode: PageSegmentationMode = PageSegmentationMode.AUTOMATIC
    enable_preprocessing: bool = True
    contrast_boost: float = Field(
        default=1.0, ge=MIN_CONTRAST_BOOST, le=MAX_CONTRAST_BOOST
    )
    blacklist_chars: str = ""
    whitelist_chars: str = ""

    @field_validator("language")
    @classmethod
    def _language_not_empty(cls, value: str) -> str:
        if not resolve_languages(value):
            raise ValueError("at least one language code is required")
        return value.strip()

    @model_validator(mode="after")
    def _whitelist_not_emptied(self) -> "OCRSettings":
        if self.whitelist_chars and not self.effective_whitelist:
            raise ValueError(
                "whitelist_chars is empty once blacklisted characters are removed"
            )
        return self

    @property
    def languages(self) -> tuple[str, ...]:
        """Ordered, de-duplicated language codes for this invocation."""
        return resolve_languages(self.language)

    @property
    def effective_whitelist(self) -> str:
        """Whitelisted characters minus any blacklisted ones."""
        blacklist = set(self.blacklist_chars)
        return _unique_chars(c for c in self.whitelist_chars if c not in blacklist)

    @property
    def effective_blacklist(self) -> str:
        return _unique_chars(self.blacklist_chars)


class PreprocessingConfig(BaseModel):
    """Configuration for the image preprocessing stage."""

    max_contrast_boost: float = Field(default=2.5, gt=0.0, lt=CONTRAST_SINGULARITY)
    output_format: str = "PNG"


class EngineConfig(BaseModel):
    """Configuration for the Tesseract recognition engine."""

    tesseract_cmd: str | None = None
    oem: int = 1
    timeout: float = 0
    progress_interval: float = Field(default=0.25, gt=0.0)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    defaults: OCRSettings = Field(default_factory=OCRSettings)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
