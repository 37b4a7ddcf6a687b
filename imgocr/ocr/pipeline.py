"""End-to-end OCR pipeline for a single image.

Validates the input, optionally preprocesses it, runs a fresh
recognition engine, cleans up the text, and reports the outcome as a
:class:`PipelineOutcome` instead of raising.
"""

import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from imgocr.preprocessing.pipeline import ImagePreprocessor
from imgocr.utils.config import AppConfig, OCRSettings
from imgocr.utils.logger import get_logger

from .engine import ProgressCallback, RecognitionEngine, engine_session
from .errors import (
    PipelineError,
    PreprocessingError,
    RecognitionError,
    UnsupportedTypeError,
)
from .models import (
    ImageAsset,
    PipelineOutcome,
    ProgressStage,
    RecognitionResult,
)
from .postprocess import post_process, text_or_placeholder
from .progress import ProgressTracker
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

EngineFactory = Callable[[], RecognitionEngine]


class OCRPipeline:
    """Single-image OCR pipeline.

    Each call to :meth:`run` creates its own engine through
    ``engine_factory`` and closes it before returning, so concurrent runs
    share no engine state.

    Args:
        config: Application configuration. Defaults are used when omitted.
        engine_factory: Creates a fresh, unopened engine per invocation.
            Defaults to a Tesseract engine built from ``config.engine``.
        preprocessor: Image preprocessor. Defaults to one built from
            ``config.preprocessing``.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        engine_factory: EngineFactory | None = None,
        preprocessor: ImagePreprocessor | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.engine_factory = engine_factory or (
            lambda: TesseractEngine.from_config(self.config.engine)
        )
        self.preprocessor = preprocessor or ImagePreprocessor(self.config.preprocessing)
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def run(
        self,
        image: ImageAsset,
        settings: OCRSettings | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineOutcome:
        """Extract text from an image.

        Args:
            image: Image to process.
            settings: OCR settings; the configured defaults when omitted.
            on_progress: Receives progress events in order.

        Returns:
            Outcome holding either the recognition result or the error.
        """
        return self._execute(image, settings, ProgressTracker(on_progress))

    def _execute(
        self,
        image: ImageAsset,
        settings: OCRSettings | None,
        tracker: ProgressTracker,
    ) -> PipelineOutcome:
        settings = settings or self.config.defaults
        outcome = PipelineOutcome()
        started = time.monotonic()
        logger.info("Processing image: %s", image.name)

        try:
            outcome.result = self._run(image, settings, tracker, outcome, started)
        except PipelineError as exc:
            logger.error("OCR failed for %s: %s", image.name, exc.message)
            outcome.error = exc
        except Exception as exc:
            logger.exception("Unexpected failure while processing %s", image.name)
            outcome.error = RecognitionError(
                f"Failed to extract text from image: {exc}"
            )
        finally:
            tracker.abandon()
        return outcome

    def _run(
        self,
        image: ImageAsset,
        settings: OCRSettings,
        tracker: ProgressTracker,
        outcome: PipelineOutcome,
        started: float,
    ) -> RecognitionResult:
        if not image.is_supported:
            raise UnsupportedTypeError(image.media_type)

        target = image
        if settings.enable_preprocessing:
            tracker.report(ProgressStage.PREPROCESSING, 0)
            target = self._preprocess(image, settings, outcome)
            tracker.report(ProgressStage.PREPROCESSING, 100)

        if tracker.abandoned:
            raise RecognitionError("Text extraction was abandoned.")
        tracker.report(ProgressStage.INITIALIZING, 0)
        with engine_session(self.engine_factory(), settings) as engine:
            tracker.report(ProgressStage.INITIALIZING, 100)
            raw = engine.recognize(target, tracker)
        elapsed_millis = int((time.monotonic() - started) * 1000)

        text = text_or_placeholder(post_process(raw.text))
        tracker.report(ProgressStage.DONE, 100)
        logger.info(
            "Extracted %d characters from %s in %d ms (confidence %.1f)",
            len(text),
            image.name,
            elapsed_millis,
            raw.confidence,
        )
        return RecognitionResult(
            text=text, confidence=raw.confidence, elapsed_millis=elapsed_millis
        )

    def _preprocess(
        self, image: ImageAsset, settings: OCRSettings, outcome: PipelineOutcome
    ) -> ImageAsset:
        try:
            processed, _ = self.preprocessor.process(image, settings.contrast_boost)
            return processed
        except PreprocessingError as exc:
            logger.warning(
                "Preprocessing failed for %s, using original image: %s",
                image.name,
                exc.message,
            )
            outcome.warnings.append(
                f"Image enhancement skipped: {exc.message}"
            )
            return image

    def submit(
        self,
        image: ImageAsset,
        settings: OCRSettings | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> "Future[PipelineOutcome]":
        """Run the pipeline on a background thread.

        Progress callbacks are invoked from that thread.
        """
        return self._submit(image, settings, ProgressTracker(on_progress))

    def _submit(
        self,
        image: ImageAsset,
        settings: OCRSettings | None,
        tracker: ProgressTracker,
    ) -> "Future[PipelineOutcome]":
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(thread_name_prefix="imgocr")
            future = self._executor.submit(self._execute, image, settings, tracker)
        return future

    def run_with_timeout(
        self,
        image: ImageAsset,
        timeout: float,
        settings: OCRSettings | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineOutcome:
        """Run on a background thread, giving up after ``timeout`` seconds.

        On timeout the run is abandoned: ``on_progress`` receives no further
        events, and the run keeps going only until its engine call returns
        and the engine is closed. Its result is discarded.
        """
        tracker = ProgressTracker(on_progress)
        future = self._submit(image, settings, tracker)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            tracker.abandon()
            logger.warning("OCR for %s timed out after %.1fs", image.name, timeout)
            return PipelineOutcome(
                error=RecognitionError(
                    f"Text extraction timed out after {timeout:g} seconds."
                )
            )

    def close(self) -> None:
        """Shut down the background executor, waiting for in-flight runs."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self) -> "OCRPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
