"""Command-line interface for extracting text from a single image.

Provides an ``extract`` subcommand that runs the OCR pipeline with
progress output and optional text export, and a ``languages`` subcommand
listing the language catalog.
"""

import argparse
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from imgocr.ocr.export import write_export
from imgocr.ocr.languages import (
    COMPOSITE_LANGUAGES,
    LANGUAGE_CATALOG,
    PageSegmentationMode,
    describe_language,
)
from imgocr.ocr.models import ImageAsset, PipelineOutcome, ProgressEvent
from imgocr.ocr.pipeline import OCRPipeline
from imgocr.utils.config import AppConfig, OCRSettings, load_config
from imgocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def _print_progress(event: ProgressEvent) -> None:
    """Render a progress event on stderr."""
    print(f"[{event.stage.value:>13}] {event.percent:3d}%", file=sys.stderr)


def build_settings(args: argparse.Namespace, defaults: OCRSettings) -> OCRSettings:
    """Overlay command-line options on the configured default settings.

    Args:
        args: Parsed ``extract`` arguments.
        defaults: Default settings from the configuration file.

    Returns:
        Validated settings.

    Raises:
        ValidationError: If the combined settings are invalid.
    """
    overrides: dict[str, object] = {}
    if args.lang is not None:
        overrides["language"] = args.lang
    if args.psm is not None:
        overrides["page_segmentation_mode"] = args.psm
    if args.no_preprocess:
        overrides["enable_preprocessing"] = False
    if args.contrast is not None:
        overrides["contrast_boost"] = args.contrast
    if args.whitelist is not None:
        overrides["whitelist_chars"] = args.whitelist
    if args.blacklist is not None:
        overrides["blacklist_chars"] = args.blacklist
    return OCRSettings(**{**defaults.model_dump(), **overrides})


def extract_single(
    file_path: Path,
    settings: OCRSettings,
    config: AppConfig,
    show_progress: bool = False,
) -> PipelineOutcome:
    """Run the OCR pipeline on one image file.

    Args:
        file_path: Image file to process.
        settings: OCR settings for this run.
        config: Application configuration.
        show_progress: Whether to print progress events to stderr.

    Returns:
        Pipeline outcome for the file.
    """
    image = ImageAsset.from_path(file_path)
    logger.debug("Settings for %s: %s", file_path.name, settings)
    pipeline = OCRPipeline(config)
    return pipeline.run(
        image, settings, on_progress=_print_progress if show_progress else None
    )


def _print_languages() -> None:
    """Print the language catalog and composite selections to stdout."""
    for code in LANGUAGE_CATALOG:
        print(f"{code:<10} {describe_language(code)}")
    for name, codes in COMPOSITE_LANGUAGES.items():
        print(f"{name:<10} {'+'.join(codes)}")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Extract text from an image with Tesseract OCR",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: configs/config.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser("extract", help="Extract text from an image")
    extract_parser.add_argument("file", type=Path, help="Image file to process")
    extract_parser.add_argument(
        "-l",
        "--lang",
        help="Language code, '+'-joined codes, 'recommended' or 'all'",
    )
    extract_parser.add_argument(
        "--psm",
        choices=[mode.value for mode in PageSegmentationMode],
        help="Page segmentation mode",
    )
    extract_parser.add_argument(
        "--no-preprocess",
        action="store_true",
        help="Skip contrast enhancement and grayscale conversion",
    )
    extract_parser.add_argument(
        "--contrast", type=float, help="Contrast boost between 0.5 and 3.0"
    )
    extract_parser.add_argument("--whitelist", help="Only recognize these characters")
    extract_parser.add_argument("--blacklist", help="Never recognize these characters")
    extract_parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Write <name>_extracted.txt to this directory",
    )
    extract_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show progress on stderr"
    )

    subparsers.add_parser("languages", help="List supported languages")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, yaml.YAMLError, ValidationError) as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)
    setup_logging(config.log_level)

    if args.command == "extract":
        if not args.file.is_file():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            settings = build_settings(args, config.defaults)
        except ValidationError as exc:
            print(f"Error: invalid settings: {exc}", file=sys.stderr)
            sys.exit(1)

        try:
            outcome = extract_single(args.file, settings, config, args.verbose)
        except OSError as exc:
            print(f"Error: cannot read {args.file}: {exc}", file=sys.stderr)
            sys.exit(1)
        for warning in outcome.warnings:
            print(f"Warning: {warning}", file=sys.stderr)
        if not outcome.ok:
            print(f"Error: {outcome.error.message}", file=sys.stderr)
            sys.exit(1)

        result = outcome.result
        if args.output_dir:
            path = write_export(result.text, args.file.name, args.output_dir)
            print(f"Output written to {path}")
        else:
            print(result.text)
        if args.verbose:
            print(
                f"Confidence: {result.confidence:.1f}  "
                f"Time: {result.elapsed_millis} ms",
                file=sys.stderr,
            )
    elif args.command == "languages":
        _print_languages()
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
