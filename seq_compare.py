#!/usr/bin/env python3
"""Command line comparison of two DNA sequences.

Aligns an edited sequence against an original one, prints the annotated
alignment rows and a summary, and optionally writes a colour-coded figure
(.svg or .png) of the differences.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from core.config import configure_logging
from core.inputs import parse_fasta_pair
from core.params import AUTO_SIZE_TOKEN, DEFAULT_LINE_WIDTH, DEFAULT_MAX_LENGTH, CompareParams
from core.render import format_diff_text, plot_comparison
from core.service import compare_sequences, report_to_payload

logger = logging.getLogger("seq_compare")


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Align two DNA sequences and show their differences."
    )
    parser.add_argument("original", nargs="?", help="Original sequence (A/C/G/T)")
    parser.add_argument("edited", nargs="?", help="Edited sequence (A/C/G/T)")
    parser.add_argument(
        "--fasta",
        type=Path,
        help="FASTA file with two records: the original first, the edited second",
    )
    parser.add_argument(
        "--line-width",
        type=int,
        default=DEFAULT_LINE_WIDTH,
        help="Alignment columns per printed row",
    )
    parser.add_argument(
        "--max-length",
        type=int,
        default=DEFAULT_MAX_LENGTH,
        help="Reject sequences longer than this many symbols",
    )
    parser.add_argument("--json", action="store_true", help="Print the comparison as JSON")
    parser.add_argument(
        "--output",
        type=Path,
        help="Write a figure of the alignment (.svg, .png, .pdf, ...)",
    )
    parser.add_argument("--width", default=AUTO_SIZE_TOKEN, help="Figure width in inches or 'auto'")
    parser.add_argument("--height", default=AUTO_SIZE_TOKEN, help="Figure height in inches or 'auto'")
    parser.add_argument("--dpi", type=int, default=150, help="Figure resolution in dots per inch")
    parser.add_argument("--font-size", type=float, default=9.0, help="Figure font size in points")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if args.fasta is None and (args.original is None or args.edited is None):
        parser.error("provide ORIGINAL and EDITED sequences or --fasta FILE")
    if args.fasta is not None and (args.original is not None or args.edited is not None):
        parser.error("--fasta cannot be combined with positional sequences")
    return args


def main(argv: Sequence[str]) -> int:
    args = parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "WARNING")

    original_name = "original"
    edited_name = "edited"
    try:
        if args.fasta is not None:
            original, edited, original_name, edited_name = parse_fasta_pair(args.fasta)
        else:
            original, edited = args.original, args.edited
        params = CompareParams.from_cli_args(args)
        report = compare_sequences(
            original,
            edited,
            params,
            original_name=original_name,
            edited_name=edited_name,
        )
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report_to_payload(report), indent=2))
    else:
        print(
            format_diff_text(
                report.result,
                params.line_width,
                original_label=report.original_label,
                edited_label=report.edited_label,
            )
        )

    if args.output is not None:
        try:
            plot_comparison(
                report.result,
                params.line_width,
                params.width,
                params.height,
                params.dpi,
                params.font_size,
                args.output,
                original_label=report.original_label,
                edited_label=report.edited_label,
            )
        except Exception as exc:  # pragma: no cover - runtime safety
            print(f"Error while creating figure: {exc}", file=sys.stderr)
            return 1
        logger.debug("Wrote figure to %s", args.output)

    return 0


def _console_main() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main(sys.argv[1:]))
