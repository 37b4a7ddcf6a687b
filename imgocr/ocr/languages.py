"""Language catalog and page segmentation modes for Tesseract.

Language selections are written the way Tesseract expects them: a single
code (``eng``) or several codes joined with ``+`` (``eng+fra``). Two
composite names expand to predefined sets: ``recommended`` and ``all``.
"""

from enum import StrEnum

LANGUAGE_CATALOG: dict[str, str] = {
    "eng": "English",
    "spa": "Spanish",
    "fra": "French",
    "deu": "German",
    "ita": "Italian",
    "por": "Portuguese",
    "nld": "Dutch",
    "pol": "Polish",
    "ces": "Czech",
    "hun": "Hungarian",
    "ron": "Romanian",
    "swe": "Swedish",
    "dan": "Danish",
    "nor": "Norwegian",
    "fin": "Finnish",
    "tur": "Turkish",
    "ell": "Greek",
    "rus": "Russian",
    "ukr": "Ukrainian",
    "ara": "Arabic",
    "heb": "Hebrew",
    "hin": "Hindi",
    "tha": "Thai",
    "vie": "Vietnamese",
    "jpn": "Japanese",
    "kor": "Korean",
    "chi_sim": "Chinese (Simplified)",
    "chi_tra": "Chinese (Traditional)",
}

RECOMMENDED_LANGUAGES: tuple[str, ...] = ("eng", "spa", "fra", "deu", "ita")

COMPOSITE_LANGUAGES: dict[str, tuple[str, ...]] = {
    "recommended": RECOMMENDED_LANGUAGES,
    "all": tuple(LANGUAGE_CATALOG),
}


class PageSegmentationMode(StrEnum):
    """Layout assumptions Tesseract can make about the page."""

    AUTOMATIC = "automatic"
    SINGLE_BLOCK = "single_block"
    SINGLE_COLUMN = "single_column"
    SINGLE_WORD = "single_word"
    SINGLE_LINE = "single_line"
    SINGLE_CHAR = "single_char"
    SPARSE_TEXT = "sparse_text"
    SPARSE_TEXT_OSD = "sparse_text_osd"

    @property
    def tesseract_psm(self) -> int:
        """Numeric ``--psm`` value understood by the Tesseract CLI."""
        return _PSM_VALUES[self]


_PSM_VALUES: dict[PageSegmentationMode, int] = {
    PageSegmentationMode.AUTOMATIC: 3,
    PageSegmentationMode.SINGLE_COLUMN: 4,
    PageSegmentationMode.SINGLE_BLOCK: 6,
    PageSegmentationMode.SINGLE_LINE: 7,
    PageSegmentationMode.SINGLE_WORD: 8,
    PageSegmentationMode.SINGLE_CHAR: 10,
    PageSegmentationMode.SPARSE_TEXT: 11,
    PageSegmentationMode.SPARSE_TEXT_OSD: 12,
}


def resolve_languages(selection: str) -> tuple[str, ...]:
    """Expand a language selection into an ordered tuple of codes.

    Composite names are expanded in place, surrounding whitespace and
    empty segments are ignored, and duplicates keep their first position.
    Codes are not checked against the catalog here; the recognition
    engine rejects unknown codes when it opens.

    Args:
        selection: Selection string such as ``"eng"``, ``"eng+fra"``
            or ``"recommended"``.

    Returns:
        Ordered tuple of language codes, possibly empty.
    """
    codes: list[str] = []
    for part in selection.split("+"):
        part = part.strip()
        if not part:
            continue
        for code in COMPOSITE_LANGUAGES.get(part.lower(), (part,)):
            if code not in codes:
                codes.append(code)
    return tuple(codes)


def describe_language(code: str) -> str:
    """Return the display name for a language code, or the code itself."""
    return LANGUAGE_CATALOG.get(code, code)
