"""Tests for OCR text cleanup and export naming."""

from pathlib import Path

import pytest

from imgocr.ocr.export import export_filename, write_export
from imgocr.ocr.postprocess import NO_TEXT_MESSAGE, post_process, text_or_placeholder


class TestPostProcess:
    """Tests for the post_process function."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("a0b", "aOb"),
            ("a5b", "aSb"),
            ("x|y", "xIy"),
            ("5", "5"),
            ("0", "0"),
            ("0ab", "0ab"),
            ("ab5", "ab5"),
            ("a.0b", "a.0b"),
            ("a 5 b", "a 5 b"),
            ("(5)", "(5)"),
            ("1024", "1O24"),
            ("a00b", "aOOb"),
            ("a50b", "aSOb"),
            ("  HELLO \n\n WORLD\t", "HELLO WORLD"),
            ("|0a", "IOa"),
        ],
    )
    def test_rules(self, raw: str, expected: str) -> None:
        assert post_process(raw) == expected

    def test_collapses_all_whitespace_kinds(self) -> None:
        assert post_process("one\r\ntwo  three\f") == "one two three"

    def test_empty_input(self) -> None:
        assert post_process("") == ""
        assert post_process(" \n\t ") == ""

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "a0b",
            "a05b",
            "a50b",
            "|0|5|",
            "INV0ICE 5ALE  T0TAL: 50.00",
            "  mixed\twhite\n\nspace  ",
            "x|y|0|5|z",
            "0505",
        ],
    )
    def test_idempotent(self, raw: str) -> None:
        once = post_process(raw)
        assert post_process(once) == once


class TestPlaceholder:
    """Tests for the no-text placeholder."""

    def test_empty_text_replaced(self) -> None:
        assert text_or_placeholder("") == NO_TEXT_MESSAGE
        assert NO_TEXT_MESSAGE == "No text detected in the image."

    def test_text_kept(self) -> None:
        assert text_or_placeholder("HELLO") == "HELLO"


class TestExport:
    """Tests for export file naming and writing."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("scan.png", "scan_extracted.txt"),
            ("scan.final.jpeg", "scan.final_extracted.txt"),
            ("README", "README_extracted.txt"),
            ("photos/receipt.webp", "receipt_extracted.txt"),
        ],
    )
    def test_export_filename(self, source: str, expected: str) -> None:
        assert export_filename(source) == expected

    def test_write_export(self, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        path = write_export("Grüße HELLO", "scan.png", out_dir)
        assert path == out_dir / "scan_extracted.txt"
        assert path.read_text(encoding="utf-8") == "Grüße HELLO"
