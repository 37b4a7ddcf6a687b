"""Ordered progress delivery for a single pipeline invocation."""

import threading

from imgocr.utils.logger import get_logger

from .engine import ProgressCallback
from .models import ProgressEvent, ProgressStage

logger = get_logger(__name__)


class ProgressTracker:
    """Forwards progress events to a callback, keeping them ordered.

    Percentages never go backwards within a stage, a stage that has been
    left is never re-entered, and nothing is forwarded after ``done``.
    Events breaking these rules are dropped. Once :meth:`abandon` has
    returned, the callback is never invoked again.

    Args:
        callback: Receiver for accepted events, or ``None`` to only track.
    """

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self.callback = callback
        self.current: ProgressEvent | None = None
        self._finished: set[ProgressStage] = set()
        self._abandoned = False
        self._lock = threading.RLock()

    def __call__(self, event: ProgressEvent) -> None:
        with self._lock:
            if self._abandoned:
                logger.debug("Dropping %s from abandoned run", event)
                return
            current = self.current
            if current is not None:
                if current.stage is ProgressStage.DONE:
                    logger.debug("Dropping %s after completion", event)
                    return
                if event.stage is current.stage and event.percent < current.percent:
                    logger.debug("Dropping regressing %s", event)
                    return
                if event.stage is not current.stage:
                    if event.stage in self._finished:
                        logger.debug("Dropping re-entry into %s", event.stage)
                        return
                    self._finished.add(current.stage)

            self.current = event
            if self.callback is not None:
                self.callback(event)

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    def report(self, stage: ProgressStage, percent: int) -> None:
        self(ProgressEvent(stage, percent))

    def reset(self) -> None:
        """Forget in-flight progress so the next invocation starts clean."""
        with self._lock:
            self.current = None
            self._finished.clear()

    def abandon(self) -> None:
        """Detach the callback and drop every later event.

        Blocks until an event being forwarded at the time of the call has
        been delivered.
        """
        with self._lock:
            self._abandoned = True
            self.callback = None
            self.current = None
            self._finished.clear()
