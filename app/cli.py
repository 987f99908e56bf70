"""
ACORD 25 Analyzer CLI.

Usage:
    acord-analyze certificate.pdf
    acord-analyze page1.png page2.jpg --url http://localhost:8000
    acord-analyze certificate.pdf --json

A single PDF is converted to page images locally (first 5 pages); images are
sent as-is (first 5, at most 4 MB combined).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from app.client import (
    AnalyzeClient,
    describe_selection,
    format_file_size,
    load_files,
)
from app.core.exceptions import AppException
from app.schemas.acord import AcordCertificate

NOT_RECOGNIZED_NOTICE = "This does not appear to be an ACORD 25 certificate."

_SUMMARY_LABELS = (
    ("certificate_number", "Certificate number"),
    ("certificate_holder", "Certificate holder"),
    ("issue_date", "Issue date"),
    ("insurers", "Insurers"),
    ("policies", "Policies"),
    ("coverages", "Coverage limits"),
)


def render_result(response: dict[str, Any]) -> str:
    """Text rendering of a success envelope."""
    data = response.get("data")
    if data is None:
        return NOT_RECOGNIZED_NOTICE

    lines = ["Analysis Results"]
    certificate = AcordCertificate.from_extraction(data)
    if certificate is not None:
        summary = certificate.summary()
        for key, label in _SUMMARY_LABELS:
            if summary[key] is not None:
                lines.append(f"  {label}: {summary[key]}")
    if response.get("model"):
        lines.append(f"  Model: {response['model']}")
    lines.append("")
    lines.append(json.dumps(data, indent=2))
    return "\n".join(lines)


def render_error(exc: AppException) -> str:
    return f"Error [{exc.code}]: {exc.message}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acord-analyze",
        description="Extract structured data from an ACORD 25 certificate.",
    )
    parser.add_argument("files", nargs="+", help="A single PDF, or up to 5 PNG/JPEG images")
    parser.add_argument("--url", default=None, help="API base URL (default: $ACORD_API_URL or http://localhost:8000)")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--json", action="store_true", help="Print the raw response envelope")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    client = AnalyzeClient(args.url, timeout=args.timeout)
    try:
        blobs = load_files(args.files)
        selection = client.select(blobs)
        print(f"Selected: {describe_selection(selection)}", file=sys.stderr)
        print(f"Total size: {format_file_size(selection.total_size)}", file=sys.stderr)

        images = client.prepare(selection)
        print("Analyzing your document. This may take a moment...", file=sys.stderr)
        response = client.submit(images)
    except OSError as exc:
        print(f"Error: cannot read {exc.filename}: {exc.strerror}", file=sys.stderr)
        return 1
    except AppException as exc:
        print(render_error(exc), file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(response, indent=2))
    else:
        print(render_result(response))
    return 0


if __name__ == "__main__":
    sys.exit(main())
