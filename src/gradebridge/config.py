"""
Module: gradebridge.config

Purpose:
    Configuration dataclass for the print pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - BuilderConfig: Main configuration for building a submission packet

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - gradebridge.controller: Main build controller
    - gradebridge.cli: Command line
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from gradebridge.layout.config import PageConfig

SUPPORTED_FORMATS = ("html", "pdf")


@dataclass(frozen=True)
class BuilderConfig:
    """
    Configuration for building a printable submission (immutable).

    Attributes:
        assignment_path: Assignment JSON file
        submission_path: Optional submission backup JSON (answers + identity)
        student_name: Overrides the backup's student name when set
        student_id: Overrides the backup's student id when set
        output_dir: Output directory (timestamped default when None)
        formats: Output formats, any of "html" / "pdf"
        render_math: Load the math backend; False prints math as raw text
        math_timeout: Seconds to wait for the math backend before falling back
        show_footer: Draw version footer and page numbers in the PDF
        pdf_font: TTF file for PDF text; an installed DejaVu family is used
            when None (Type1 fonts if none is found)
        page_config: Page geometry

    Example:
        >>> config = BuilderConfig(
        ...     assignment_path=Path("hw1.json"),
        ...     submission_path=Path("hw1_backup.json"),
        ...     formats=("html", "pdf"),
        ... )
    """

    # Required
    assignment_path: Path

    # Submission
    submission_path: Optional[Path] = None
    student_name: Optional[str] = None
    student_id: Optional[str] = None

    # Output
    output_dir: Optional[Path] = None
    formats: Tuple[str, ...] = ("html",)
    show_footer: bool = True
    pdf_font: Optional[Path] = None

    # Math
    render_math: bool = True
    math_timeout: float = 30.0

    # Layout
    page_config: PageConfig = field(default_factory=PageConfig)

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not self.formats:
            raise ValueError("At least one output format is required")
        unknown = [f for f in self.formats if f not in SUPPORTED_FORMATS]
        if unknown:
            raise ValueError(f"Unsupported output format(s): {unknown}")
        if len(set(self.formats)) != len(self.formats):
            raise ValueError(f"Duplicate output formats: {list(self.formats)}")
        if self.math_timeout < 0:
            raise ValueError(f"math_timeout must be non-negative: {self.math_timeout}")

    @property
    def wants_html(self) -> bool:
        return "html" in self.formats

    @property
    def wants_pdf(self) -> bool:
        return "pdf" in self.formats
