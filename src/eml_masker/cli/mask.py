"""
Command-line interface for email masking.

Loads .eml files, hides the requested display ranges and prints the canonical
header and body masks a proof would be generated over.

Usage:
    # Hide the subject and the first five body characters
    python -m eml_masker.cli.mask input.eml --hide-field subject --hide body:0:5

    # Directory batch processing
    python -m eml_masker.cli.mask emails/ --hide-field to --output masks.jsonl

    # Show the masked canonical text
    python -m eml_masker.cli.mask input.eml --hide from:0:5 --preview
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import structlog

from eml_masker.logging_config import setup_logging
from eml_masker.masking.session import MaskingSession
from eml_masker.models.fields import DisplayField
from eml_masker.parsing.eml_parser import build_loaded_email
from eml_masker.verification.masked_header import apply_mask, null_bytes_to_display_marker
from eml_masker.version import get_current_masking_version


# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)

HideRange = Tuple[DisplayField, int, int]


# ============================================================================
# ARGUMENT TYPES
# ============================================================================

def parse_field(value: str) -> DisplayField:
    """argparse type for a display field name."""
    try:
        return DisplayField(value.strip().lower())
    except ValueError:
        choices = ", ".join(field.value for field in DisplayField)
        raise argparse.ArgumentTypeError(
            f"unknown field '{value}' (expected one of: {choices})"
        ) from None


def parse_hide_range(value: str) -> HideRange:
    """argparse type for FIELD:START:END."""
    parts = value.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected FIELD:START:END, got '{value}'")
    field = parse_field(parts[0])
    try:
        start, end = int(parts[1]), int(parts[2])
    except ValueError:
        raise argparse.ArgumentTypeError(f"offsets must be integers, got '{value}'") from None
    if start < 0 or end < 0:
        raise argparse.ArgumentTypeError(f"offsets must be non-negative, got '{value}'")
    return field, start, end


# ============================================================================
# CLI FUNCTIONS
# ============================================================================

def mask_single_file(
    eml_path: Path,
    hide_ranges: Sequence[HideRange] = (),
    hide_fields: Sequence[DisplayField] = (),
    preview: bool = False,
    verbose: bool = False,
) -> dict:
    """
    Load one .eml file, apply the edits as one logical edit and return its masks.

    Args:
        eml_path: Path to .eml file
        hide_ranges: (field, start, end) display ranges to hide
        hide_fields: Fields to hide entirely
        preview: Include the masked canonical text
        verbose: Enable verbose output

    Returns:
        Mask result as dict

    Raises:
        ValueError: If the file cannot be parsed
    """
    if verbose:
        logger.info("processing_file", path=str(eml_path))

    with open(eml_path, "rb") as f:
        eml_bytes = f.read()

    email = build_loaded_email(eml_bytes)
    session = MaskingSession(email)

    with session.edit():
        for field in hide_fields:
            session.set_field(field, reveal=False)
        for field, start, end in hide_ranges:
            session.mask_range(field, start, end)

    aligned = session.aligned_mask
    result = {
        "file": str(eml_path),
        "document_id": email.document_id,
        "header_mask": list(aligned.header_mask),
        "body_mask": list(aligned.body_mask),
        "diagnostics": [d.model_dump() for d in aligned.diagnostics],
        "masking_version": get_current_masking_version().model_dump(),
    }

    if preview:
        result["preview"] = {
            "headers": null_bytes_to_display_marker(
                apply_mask(email.canonical_headers, aligned.header_mask)
            ),
            "body": null_bytes_to_display_marker(
                apply_mask(email.canonical_body, aligned.body_mask)
            ),
        }

    if verbose:
        logger.info(
            "file_masked",
            document_id=email.document_id,
            hidden_header_bytes=aligned.hidden_header_bytes,
            hidden_body_bytes=aligned.hidden_body_bytes,
            diagnostics=len(aligned.diagnostics),
        )

    return result


def mask_directory(
    dir_path: Path,
    hide_ranges: Sequence[HideRange] = (),
    hide_fields: Sequence[DisplayField] = (),
    preview: bool = False,
    verbose: bool = False,
) -> List[dict]:
    """
    Mask all .eml files in a directory with the same edits.

    Files that fail to parse are logged and skipped.
    """
    eml_files = sorted(dir_path.glob("**/*.eml"))

    if not eml_files:
        logger.warning("no_eml_files_found", directory=str(dir_path))
        return []

    logger.info("processing_directory", files_count=len(eml_files))

    results = []
    errors = 0

    for eml_file in eml_files:
        try:
            results.append(
                mask_single_file(
                    eml_path=eml_file,
                    hide_ranges=hide_ranges,
                    hide_fields=hide_fields,
                    preview=preview,
                    verbose=verbose,
                )
            )
        except (OSError, ValueError) as e:
            logger.error("file_processing_failed", file=str(eml_file), error=str(e))
            errors += 1

    logger.info(
        "directory_processing_completed",
        total=len(eml_files),
        success=len(results),
        errors=errors,
    )

    return results


def write_output(results: List[dict], output_path: Optional[Path], format: str = "json"):
    """
    Write results to stdout or a file.

    Args:
        results: List of mask results
        output_path: Output file path (stdout when None)
        format: Output format ("json" or "jsonl")
    """
    if not output_path:
        if format == "jsonl":
            for result in results:
                print(json.dumps(result, ensure_ascii=False))
        else:
            payload = results[0] if len(results) == 1 else results
            print(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        if format == "jsonl":
            for result in results:
                f.write(json.dumps(result, ensure_ascii=False) + "\n")
        else:
            payload = results[0] if len(results) == 1 else results
            json.dump(payload, f, ensure_ascii=False, indent=2)

    logger.info("output_written", path=str(output_path), count=len(results))


# ============================================================================
# MAIN CLI
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eml-mask",
        description="Email Masking CLI - compute canonical DKIM masks for hidden display ranges",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Hide the whole subject
  %(prog)s input.eml --hide-field subject

  # Hide "Bob" in the body "Hello Bob, meet at noon."
  %(prog)s input.eml --hide body:6:9

  # Process directory, save to file
  %(prog)s emails/ --hide-field to --output masks.jsonl

Fields: from, to, sent_on, subject, body
        """,
    )

    parser.add_argument(
        "input",
        type=str,
        help="Path to .eml file or directory containing .eml files",
    )

    parser.add_argument(
        "--hide",
        type=parse_hide_range,
        action="append",
        default=[],
        metavar="FIELD:START:END",
        help="Hide display characters [START, END) of FIELD (repeatable)",
    )

    parser.add_argument(
        "--hide-field",
        type=parse_field,
        action="append",
        default=[],
        metavar="FIELD",
        help="Hide a whole field (repeatable)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Output file path (default: stdout). Format auto-detected from extension (.json or .jsonl)",
    )

    parser.add_argument(
        "--format",
        "-f",
        type=str,
        choices=["json", "jsonl"],
        default="json",
        help="Output format (default: json)",
    )

    parser.add_argument(
        "--preview",
        action="store_true",
        help="Include the canonical text with hidden characters shown as blocks",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    input_path = Path(args.input)

    if not input_path.exists():
        print(f"Error: Path not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    try:
        if input_path.is_file():
            results = [
                mask_single_file(
                    eml_path=input_path,
                    hide_ranges=args.hide,
                    hide_fields=args.hide_field,
                    preview=args.preview,
                    verbose=args.verbose,
                )
            ]
        else:
            results = mask_directory(
                dir_path=input_path,
                hide_ranges=args.hide,
                hide_fields=args.hide_field,
                preview=args.preview,
                verbose=args.verbose,
            )

        output_path = Path(args.output) if args.output else None

        # Auto-detect format from file extension
        format = args.format
        if output_path and output_path.suffix == ".jsonl":
            format = "jsonl"

        write_output(results, output_path, format)

        if args.verbose:
            print(f"\n✓ Masked {len(results)} emails", file=sys.stderr)

    except Exception as e:
        logger.error("cli_failed", error=str(e), exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
