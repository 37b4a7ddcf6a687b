"""Error types raised by the OCR pipeline stages.

Every error carries a human-readable ``message`` suitable for showing to
the end user and a short ``code`` identifying its kind.
"""


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    code = "pipeline_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedTypeError(PipelineError):
    """The input media type is not a supported raster format."""

    code = "unsupported_type"

    def __init__(self, media_type: str) -> None:
        self.media_type = media_type
        super().__init__(
            f"File type {media_type or 'unknown'} is not supported. Please upload "
            "an image file (PNG, JPG, GIF, BMP, TIFF, WebP)."
        )


class PreprocessingError(PipelineError):
    """Image preprocessing failed; callers fall back to the original image."""

    code = "preprocessing_error"


class DecodeError(PreprocessingError):
    code = "decode_error"


class EncodeError(PreprocessingError):
    code = "encode_error"


class EngineInitError(PipelineError):
    """The recognition engine could not load the requested languages."""

    code = "engine_init_error"

    def __init__(self, language: str, reason: str) -> None:
        self.language = language
        self.reason = reason
        super().__init__(
            f"Could not initialize OCR for language '{language}': {reason}"
        )


class InvalidStateError(PipelineError):
    """An engine operation was called in the wrong lifecycle state."""

    code = "invalid_state"


class RecognitionError(PipelineError):
    """The engine failed while recognizing text."""

    code = "recognition_error"
