"""Recognition engine lifecycle shared by all OCR backends.

An engine moves through ``UNOPENED -> OPENING -> OPEN -> CONFIGURED ->
RECOGNIZING -> CONFIGURED -> ... -> CLOSED``. Backends only implement the
``_load``, ``_apply_settings``, ``_run`` and ``_release`` hooks; the base
class enforces the state machine and guarantees that whatever ``_load``
acquired is released exactly once.
"""

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from enum import StrEnum

from imgocr.utils.config import OCRSettings
from imgocr.utils.logger import get_logger

from .errors import EngineInitError, InvalidStateError, PipelineError, RecognitionError
from .models import ImageAsset, ProgressEvent, ProgressStage, RawRecognition

logger = get_logger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class EngineState(StrEnum):
    """Lifecycle states of a recognition engine."""

    UNOPENED = "unopened"
    OPENING = "opening"
    OPEN = "open"
    CONFIGURED = "configured"
    RECOGNIZING = "recognizing"
    CLOSED = "closed"


class RecognitionEngine:
    """Base class for OCR engines with a guarded lifecycle."""

    def __init__(self) -> None:
        self.state = EngineState.UNOPENED
        self.languages: tuple[str, ...] = ()

    @property
    def language_label(self) -> str:
        return "+".join(self.languages)

    def open(self, languages: Sequence[str]) -> "RecognitionEngine":
        """Load language models for every requested code.

        Args:
            languages: Ordered language codes.

        Returns:
            The engine itself, now in the ``OPEN`` state.

        Raises:
            EngineInitError: If no language is given, a code is unknown,
                or the models fail to load. The engine is left ``CLOSED``.
            InvalidStateError: If the engine was already opened.
        """
        if self.state is not EngineState.UNOPENED:
            raise InvalidStateError(f"Cannot open an engine in state {self.state}")
        self.languages = tuple(languages)
        if not self.languages:
            self.state = EngineState.CLOSED
            raise EngineInitError("", "no language requested")

        self.state = EngineState.OPENING
        try:
            self._load(self.languages)
        except Exception as exc:
            self.state = EngineState.CLOSED
            self._release()
            if isinstance(exc, EngineInitError):
                raise
            raise EngineInitError(self.language_label, str(exc)) from exc

        self.state = EngineState.OPEN
        logger.debug("Opened engine for %s", self.language_label)
        return self

    def configure(self, settings: OCRSettings) -> None:
        """Apply page segmentation, character filters and fixed tuning."""
        if self.state not in (EngineState.OPEN, EngineState.CONFIGURED):
            raise InvalidStateError(
                f"Cannot configure an engine in state {self.state}"
            )
        self._apply_settings(settings)
        self.state = EngineState.CONFIGURED

    def recognize(
        self, image: ImageAsset, on_progress: ProgressCallback | None = None
    ) -> RawRecognition:
        """Recognize text in an image.

        Args:
            image: Image to recognize.
            on_progress: Receives ``recognizing`` events with
                non-decreasing percentages, ending at 100.

        Returns:
            Raw text and the engine's mean confidence (0-100).

        Raises:
            InvalidStateError: If the engine is not configured.
            RecognitionError: If the engine fails.
        """
        if self.state is not EngineState.CONFIGURED:
            raise InvalidStateError(
                f"Cannot recognize with an engine in state {self.state}"
            )

        def emit(percent: int) -> None:
            if on_progress is not None:
                on_progress(ProgressEvent(ProgressStage.RECOGNIZING, percent))

        self.state = EngineState.RECOGNIZING
        try:
            return self._run(image, emit)
        except PipelineError:
            raise
        except Exception as exc:
            raise RecognitionError(f"Recognition failed: {exc}") from exc
        finally:
            if self.state is EngineState.RECOGNIZING:
                self.state = EngineState.CONFIGURED

    def close(self) -> None:
        """Release the engine's resources.

        Closing twice is a no-op; closing an engine that was never opened
        raises ``InvalidStateError``.
        """
        if self.state is EngineState.UNOPENED:
            raise InvalidStateError("Cannot close an engine that was never opened")
        if self.state is EngineState.CLOSED:
            logger.debug("Engine for %s already closed", self.language_label)
            return
        self.state = EngineState.CLOSED
        self._release()
        logger.debug("Closed engine for %s", self.language_label)

    def _load(self, languages: tuple[str, ...]) -> None:
        raise NotImplementedError

    def _apply_settings(self, settings: OCRSettings) -> None:
        raise NotImplementedError

    def _run(
        self, image: ImageAsset, emit: Callable[[int], None]
    ) -> RawRecognition:
        raise NotImplementedError

    def _release(self) -> None:
        raise NotImplementedError


@contextmanager
def engine_session(
    engine: RecognitionEngine, settings: OCRSettings
) -> Iterator[RecognitionEngine]:
    """Open and configure an engine, closing it on every exit path.

    Args:
        engine: A fresh, unopened engine.
        settings: Settings providing the languages and engine options.

    Yields:
        The configured engine.
    """
    engine.open(settings.languages)
    try:
        engine.configure(settings)
        yield engine
    finally:
        engine.close()
