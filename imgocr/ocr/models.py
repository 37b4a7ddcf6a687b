"""Data types passed between the OCR pipeline stages."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from .errors import PipelineError

SUPPORTED_MEDIA_TYPES = frozenset(
    {
        "image/png",
        "image/jpeg",
        "image/gif",
        "image/bmp",
        "image/tiff",
        "image/webp",
    }
)

_MEDIA_TYPE_ALIASES = {"image/jpg": "image/jpeg"}

_SUFFIX_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".webp": "image/webp",
}


def normalize_media_type(media_type: str) -> str:
    """Lower-case a media type and map known aliases to their canonical form."""
    media_type = media_type.strip().lower()
    return _MEDIA_TYPE_ALIASES.get(media_type, media_type)


@dataclass(frozen=True)
class ImageAsset:
    """Raw image bytes with their declared media type.

    ``width`` and ``height`` are only known once the image has been
    decoded, e.g. after preprocessing.
    """

    data: bytes
    media_type: str
    name: str = "image"
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_path(cls, path: Path) -> "ImageAsset":
        """Read an image file, deriving its media type from the suffix.

        Args:
            path: Path to the image file.

        Returns:
            Asset holding the file bytes. Unknown suffixes are declared as
            ``application/octet-stream``.
        """
        path = Path(path)
        media_type = _SUFFIX_MEDIA_TYPES.get(
            path.suffix.lower(), "application/octet-stream"
        )
        return cls(data=path.read_bytes(), media_type=media_type, name=path.name)

    @property
    def is_supported(self) -> bool:
        return normalize_media_type(self.media_type) in SUPPORTED_MEDIA_TYPES


class ProgressStage(StrEnum):
    """Stages reported on the progress channel."""

    INITIALIZING = "initializing"
    PREPROCESSING = "preprocessing"
    RECOGNIZING = "recognizing"
    DONE = "done"


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress notification."""

    stage: ProgressStage
    percent: int

    def __post_init__(self) -> None:
        if not 0 <= self.percent <= 100:
            raise ValueError(f"percent must be within 0..100, got {self.percent}")


@dataclass(frozen=True)
class RawRecognition:
    """Engine output before post-processing."""

    text: str
    confidence: float
    word_count: int = 0


@dataclass(frozen=True)
class RecognitionResult:
    """Final result of a successful pipeline invocation.

    ``confidence`` is Tesseract's mean word confidence on a 0-100 scale.
    """

    text: str
    confidence: float
    elapsed_millis: int


@dataclass
class PipelineOutcome:
    """Either a recognition result or the error that ended the invocation."""

    result: RecognitionResult | None = None
    error: PipelineError | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None
