"""Helpers for saving extracted text next to its source image."""

import re
from pathlib import Path

from imgocr.utils.logger import get_logger

logger = get_logger(__name__)

EXPORT_SUFFIX = "_extracted.txt"

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def export_filename(source_name: str) -> str:
    """Derive the text export name for a source file.

    Only the last extension is dropped:
    ``scan.final.png`` becomes ``scan.final_extracted.txt``.
    """
    base = _EXTENSION_RE.sub("", Path(source_name).name)
    return f"{base}{EXPORT_SUFFIX}"


def write_export(text: str, source_name: str, directory: Path) -> Path:
    """Write extracted text to ``directory`` as UTF-8.

    Args:
        text: Extracted text.
        source_name: Name of the image the text came from.
        directory: Destination directory, created if missing.

    Returns:
        Path of the written file.
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(source_name)
    path.write_text(text, encoding="utf-8")
    logger.info("Exported text to %s", path)
    return path
