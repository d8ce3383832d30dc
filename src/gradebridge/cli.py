"""
Module: gradebridge.cli

Purpose:
    Command line entry point.

    gradebridge render ASSIGNMENT [--submission BACKUP] [--format html|pdf|both] ...
    gradebridge plan ASSIGNMENT [--submission BACKUP]

Key Functions:
    - main(): Parse arguments and dispatch; returns the exit code

Dependencies:
    - argparse (std)
    - gradebridge.controller: Build pipeline
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gradebridge import __version__
from gradebridge.config import BuilderConfig
from gradebridge.controller import BuildError, build_document, prepare_plan
from gradebridge.layout import DocumentPlan

logger = logging.getLogger("gradebridge")

_FORMATS = {
    "html": ("html",),
    "pdf": ("pdf",),
    "both": ("html", "pdf"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gradebridge",
        description="Render assignment submissions into printable pages.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_inputs(p: argparse.ArgumentParser) -> None:
        p.add_argument("assignment", type=Path, help="Assignment JSON file")
        p.add_argument("--submission", type=Path, default=None, help="Submission backup JSON file")
        p.add_argument("--student-name", default=None, help="Override student name")
        p.add_argument("--student-id", default=None, help="Override student id")
        p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    render = sub.add_parser("render", help="Render HTML and/or PDF")
    add_inputs(render)
    render.add_argument("--output-dir", type=Path, default=None, help="Output directory")
    render.add_argument("--format", choices=sorted(_FORMATS), default="html", help="Output format")
    render.add_argument(
        "--math-timeout",
        type=float,
        default=30.0,
        help="Seconds to wait for the math backend (default: 30)",
    )
    render.add_argument("--no-math", action="store_true", help="Print math as source text")
    render.add_argument("--no-footer", action="store_true", help="Omit PDF footer")
    render.add_argument("--pdf-font", type=Path, default=None, help="TrueType font for PDF text")

    plan = sub.add_parser("plan", help="Print the page plan without rendering")
    add_inputs(plan)

    return parser


def _config_from_args(args: argparse.Namespace) -> BuilderConfig:
    return BuilderConfig(
        assignment_path=args.assignment,
        submission_path=args.submission,
        student_name=args.student_name,
        student_id=args.student_id,
        output_dir=getattr(args, "output_dir", None),
        formats=_FORMATS[getattr(args, "format", "html")],
        render_math=not getattr(args, "no_math", False),
        math_timeout=getattr(args, "math_timeout", 30.0),
        show_footer=not getattr(args, "no_footer", False),
        pdf_font=getattr(args, "pdf_font", None),
    )


def format_plan(plan: DocumentPlan) -> str:
    """One line per page: number, kind, slot, subtitle."""
    lines = []
    for index, page in enumerate(plan.pages, start=1):
        header = page.header
        subtitle = header.subtitle if header is not None else "Title"
        slot = getattr(page, "slot_id", None) or "-"
        lines.append(f"{index:>3}  {page.kind.value:<15} {slot:<8} {subtitle}")
    lines.append(f"{plan.page_count} pages")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    try:
        config = _config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        if args.command == "plan":
            _, _, plan = prepare_plan(config)
            print(format_plan(plan))
            for warning in plan.warnings:
                print(f"warning: {warning}", file=sys.stderr)
            return 0

        result = build_document(config)
    except BuildError as e:
        logger.error(str(e))
        return 1

    for path in (result.html_path, result.pdf_path):
        if path is not None:
            print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
