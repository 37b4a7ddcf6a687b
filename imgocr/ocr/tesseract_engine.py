"""Tesseract OCR engine backed by pytesseract.

Recognition runs on a dedicated worker thread so that progress can be
reported while the Tesseract process works. Tesseract does not stream
its own progress through the CLI, so ``recognizing`` percentages are an
eased estimate that stops at 95 until the result arrives.
"""

import io
import shlex
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

import pytesseract
from PIL import Image, UnidentifiedImageError

from imgocr.utils.config import EngineConfig, OCRSettings
from imgocr.utils.logger import get_logger

from .engine import RecognitionEngine
from .errors import EngineInitError, RecognitionError
from .languages import LANGUAGE_CATALOG
from .models import ImageAsset, RawRecognition

logger = get_logger(__name__)

# Favor literal character recognition over language-model correction.
ACCURACY_PARAMETERS: dict[str, str] = {
    "load_system_dawg": "0",
    "load_freq_dawg": "0",
    "load_unambig_dawg": "0",
    "load_punc_dawg": "0",
    "load_number_dawg": "0",
    "load_bigram_dawg": "0",
    "classify_enable_learning": "0",
    "segment_penalty_dict_nonword": "1.0",
    "segment_penalty_garbage": "1.0",
    "language_model_penalty_non_dict_word": "0",
    "language_model_penalty_non_freq_dict_word": "0",
}

_ESTIMATE_CEILING = 95


def _next_estimate(percent: int) -> int:
    return min(_ESTIMATE_CEILING, percent + max(1, (_ESTIMATE_CEILING - percent) // 5))


def assemble_text(data: dict[str, list[Any]]) -> RawRecognition:
    """Rebuild text and mean confidence from ``image_to_data`` output.

    Words sharing a block, paragraph and line are joined with spaces,
    lines with newlines and blocks with a blank line. Words reported
    with a negative confidence still contribute text but not confidence.
    """
    lines: dict[tuple[int, int, int], list[str]] = {}
    confidences: list[float] = []

    for i, raw_word in enumerate(data["text"]):
        word = str(raw_word).strip()
        if not word:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        conf = float(data["conf"][i])
        if conf >= 0:
            confidences.append(conf)

    chunks: list[str] = []
    previous_block = None
    for (block, _, _), words in lines.items():
        if previous_block is not None:
            chunks.append("\n\n" if block != previous_block else "\n")
        chunks.append(" ".join(words))
        previous_block = block

    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return RawRecognition(
        text="".join(chunks),
        confidence=min(max(confidence, 0.0), 100.0),
        word_count=sum(len(words) for words in lines.values()),
    )


class TesseractEngine(RecognitionEngine):
    """Recognition engine running the Tesseract CLI through pytesseract.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        oem: Tesseract OCR engine mode.
        timeout: Per-call Tesseract timeout in seconds, 0 for none.
        progress_interval: Seconds between progress estimates.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        oem: int = 1,
        timeout: float = 0,
        progress_interval: float = 0.25,
    ) -> None:
        super().__init__()
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.oem = oem
        self.timeout = timeout
        self.progress_interval = progress_interval
        self.config_string = ""
        self._executor: ThreadPoolExecutor | None = None

    @classmethod
    def from_config(cls, config: EngineConfig) -> "TesseractEngine":
        return cls(
            tesseract_cmd=config.tesseract_cmd,
            oem=config.oem,
            timeout=config.timeout,
            progress_interval=config.progress_interval,
        )

    def _load(self, languages: tuple[str, ...]) -> None:
        unknown = [code for code in languages if code not in LANGUAGE_CATALOG]
        if unknown:
            raise EngineInitError(
                self.language_label,
                f"unsupported language code(s): {', '.join(unknown)}",
            )

        try:
            installed = set(pytesseract.get_languages(config=""))
        except pytesseract.TesseractNotFoundError as exc:
            raise EngineInitError(
                self.language_label, "Tesseract is not installed or not on PATH"
            ) from exc

        missing = [code for code in languages if code not in installed]
        if missing:
            raise EngineInitError(
                self.language_label,
                f"language data not installed: {', '.join(missing)}",
            )

        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="tesseract"
        )

    def _apply_settings(self, settings: OCRSettings) -> None:
        params = dict(ACCURACY_PARAMETERS)
        if settings.effective_whitelist:
            params["tessedit_char_whitelist"] = settings.effective_whitelist
        if settings.effective_blacklist:
            params["tessedit_char_blacklist"] = settings.effective_blacklist

        parts = [
            f"--oem {self.oem}",
            f"--psm {settings.page_segmentation_mode.tesseract_psm}",
        ]
        parts.extend(f"-c {key}={shlex.quote(value)}" for key, value in params.items())
        self.config_string = " ".join(parts)
        logger.debug("Tesseract config: %s", self.config_string)

    def _run(self, image: ImageAsset, emit: Callable[[int], None]) -> RawRecognition:
        pil_image = self._load_image(image)
        if self._executor is None:
            raise RecognitionError("Engine has no worker; was it opened?")

        future = self._executor.submit(
            pytesseract.image_to_data,
            pil_image,
            lang=self.language_label,
            config=self.config_string,
            timeout=self.timeout,
            output_type=pytesseract.Output.DICT,
        )
        try:
            data = self._wait(future, emit)
        except (pytesseract.TesseractError, RuntimeError, OSError) as exc:
            raise RecognitionError(f"Tesseract failed on {image.name}: {exc}") from exc

        raw = assemble_text(data)
        logger.info(
            "OCR extracted %d words with average confidence %.1f",
            raw.word_count,
            raw.confidence,
        )
        return raw

    def _wait(
        self, future: "Future[dict[str, list[Any]]]", emit: Callable[[int], None]
    ) -> dict[str, list[Any]]:
        percent = 0
        emit(percent)
        while True:
            done, _ = wait([future], timeout=self.progress_interval)
            if done:
                data = future.result()
                emit(100)
                return data
            estimate = _next_estimate(percent)
            if estimate != percent:
                percent = estimate
                emit(percent)

    def _release(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    @staticmethod
    def _load_image(image: ImageAsset) -> Image.Image:
        try:
            pil_image = Image.open(io.BytesIO(image.data))
            pil_image.load()
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise RecognitionError(f"Could not read image {image.name}: {exc}") from exc
        return pil_image
