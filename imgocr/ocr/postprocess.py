"""Cleanup of raw OCR text.

Normalizes whitespace and fixes a few character confusions Tesseract
makes inside runs of letters and digits.
"""

import re

NO_TEXT_MESSAGE = "No text detected in the image."

_WHITESPACE_RE = re.compile(r"\s+")
_ZERO_IN_WORD_RE = re.compile(r"(?<=\w)0(?=\w)")
_FIVE_IN_WORD_RE = re.compile(r"(?<=\w)5(?=\w)")


def post_process(raw: str) -> str:
    """Normalize OCR output.

    Steps, in order: collapse whitespace runs to one space, turn ``|``
    into ``I``, turn a ``0`` between two word characters into ``O``, turn
    a ``5`` between two word characters into ``S``, trim.

    >>> post_process("a0b  x|y")
    'aOb xIy'
    >>> post_process("5")
    '5'
    """
    text = _WHITESPACE_RE.sub(" ", raw)
    text = text.replace("|", "I")
    text = _ZERO_IN_WORD_RE.sub("O", text)
    text = _FIVE_IN_WORD_RE.sub("S", text)
    return text.strip()


def text_or_placeholder(text: str) -> str:
    """Return ``text``, or the no-text message when it is empty."""
    return text if text else NO_TEXT_MESSAGE
