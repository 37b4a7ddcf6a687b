"""Tests for settings, configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from imgocr.ocr.languages import PageSegmentationMode
from imgocr.utils.config import (
    AppConfig,
    EngineConfig,
    OCRSettings,
    PreprocessingConfig,
    load_config,
)


class TestOCRSettings:
    """Tests for OCRSettings defaults and validation."""

    def test_defaults(self) -> None:
        settings = OCRSettings()
        assert settings.language == "eng"
        assert settings.languages == ("eng",)
        assert settings.page_segmentation_mode is PageSegmentationMode.AUTOMATIC
        assert settings.enable_preprocessing is True
        assert settings.contrast_boost == 1.0
        assert settings.whitelist_chars == ""
        assert settings.blacklist_chars == ""

    def test_multi_language_keeps_order_and_dedupes(self) -> None:
        settings = OCRSettings(language="fra+eng+fra")
        assert settings.languages == ("fra", "eng")

    def test_recommended_composite(self) -> None:
        settings = OCRSettings(language="recommended")
        assert settings.languages == ("eng", "spa", "fra", "deu", "ita")

    @pytest.mark.parametrize("language", ["", "  ", "+", " + "])
    def test_empty_language_rejected(self, language: str) -> None:
        with pytest.raises(ValidationError):
            OCRSettings(language=language)

    @pytest.mark.parametrize("boost", [0.5, 1.0, 2.5, 3.0])
    def test_contrast_within_domain(self, boost: float) -> None:
        assert OCRSettings(contrast_boost=boost).contrast_boost == boost

    @pytest.mark.parametrize("boost", [0.49, 3.01, -1.0])
    def test_contrast_outside_domain_rejected(self, boost: float) -> None:
        with pytest.raises(ValidationError):
            OCRSettings(contrast_boost=boost)

    def test_psm_from_string(self) -> None:
        settings = OCRSettings(page_segmentation_mode="single_line")
        assert settings.page_segmentation_mode is PageSegmentationMode.SINGLE_LINE

    def test_unknown_psm_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OCRSettings(page_segmentation_mode="diagonal")

    def test_blacklist_wins_over_whitelist(self) -> None:
        settings = OCRSettings(whitelist_chars="ABC123", blacklist_chars="B2")
        assert settings.effective_whitelist == "AC13"
        assert settings.effective_blacklist == "B2"

    def test_whitelist_emptied_by_blacklist_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OCRSettings(whitelist_chars="AB", blacklist_chars="BA")

    def test_whitelist_duplicates_removed(self) -> None:
        assert OCRSettings(whitelist_chars="AABBA").effective_whitelist == "AB"

    def test_settings_are_frozen(self) -> None:
        settings = OCRSettings()
        with pytest.raises(ValidationError):
            settings.language = "fra"


class TestPreprocessingConfig:
    """Tests for PreprocessingConfig defaults and limits."""

    def test_defaults(self) -> None:
        cfg = PreprocessingConfig()
        assert cfg.max_contrast_boost == 2.5
        assert cfg.output_format == "PNG"

    def test_max_boost_must_stay_below_singularity(self) -> None:
        with pytest.raises(ValidationError):
            PreprocessingConfig(max_contrast_boost=2.59)


class TestEngineConfig:
    """Tests for EngineConfig defaults."""

    def test_defaults(self) -> None:
        cfg = EngineConfig()
        assert cfg.tesseract_cmd is None
        assert cfg.oem == 1
        assert cfg.timeout == 0
        assert cfg.progress_interval == 0.25


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.preprocessing, PreprocessingConfig)
        assert isinstance(cfg.engine, EngineConfig)
        assert isinstance(cfg.defaults, OCRSettings)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(
            defaults=OCRSettings(language="deu", enable_preprocessing=False),
            log_level="DEBUG",
        )
        assert cfg.defaults.languages == ("deu",)
        assert cfg.defaults.enable_preprocessing is False
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_bundled_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.defaults.language == "eng"
        assert cfg.engine.oem == 1

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert isinstance(cfg, AppConfig)
        assert cfg.defaults.language == "eng"

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "engine": {"oem": 3, "tesseract_cmd": "/opt/tesseract"},
            "defaults": {
                "language": "eng+deu",
                "page_segmentation_mode": "sparse_text",
                "contrast_boost": 2.0,
            },
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.engine.oem == 3
        assert cfg.engine.tesseract_cmd == "/opt/tesseract"
        assert cfg.defaults.languages == ("eng", "deu")
        assert cfg.defaults.page_segmentation_mode is PageSegmentationMode.SPARSE_TEXT
        assert cfg.defaults.contrast_boost == 2.0
        assert cfg.log_level == "DEBUG"

    def test_load_invalid_yaml_values(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("defaults:\n  contrast_boost: 9\n")
        with pytest.raises(ValidationError):
            load_config(config_file)

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert isinstance(load_config(config_file), AppConfig)

    def test_load_none_defaults_to_standard_path(self) -> None:
        assert isinstance(load_config(), AppConfig)
