"""
Module: layout.config

Purpose:
    Configuration for the printable page format.
    Defines page dimensions, margins and per-context image footprints.

Key Classes:
    - PageConfig: Immutable page configuration (millimetres)

Dependencies:
    - dataclasses (std)

Used By:
    - output.html_renderer: Page boxes
    - output.pdf_renderer: Canvas geometry
"""

from __future__ import annotations

from dataclasses import dataclass


# A4
DEFAULT_PAGE_WIDTH_MM = 210.0
DEFAULT_PAGE_HEIGHT_MM = 297.0
MM_TO_PT = 72.0 / 25.4


@dataclass(frozen=True)
class PageConfig:
    """
    Configuration for page geometry (immutable).

    Attributes:
        page_width_mm: Sheet width
        page_height_mm: Sheet height
        margin_top_mm: Top margin
        margin_bottom_mm: Bottom margin
        margin_left_mm: Left margin
        margin_right_mm: Right margin
        header_height_mm: Height reserved for the header band
        answer_image_max_mm: Max height of the first answer image
        overflow_image_max_mm: Max height of an overflow-page image
        problem_image_max_mm: Max height of a problem diagram on an answer page
        statement_image_max_mm: Max height of a diagram on a statement-only page

    Example:
        >>> config = PageConfig()
        >>> config.content_width_mm
        170.0
    """

    page_width_mm: float = DEFAULT_PAGE_WIDTH_MM
    page_height_mm: float = DEFAULT_PAGE_HEIGHT_MM

    margin_top_mm: float = 15.0
    margin_bottom_mm: float = 15.0
    margin_left_mm: float = 20.0
    margin_right_mm: float = 20.0

    header_height_mm: float = 22.0

    answer_image_max_mm: float = 140.0
    overflow_image_max_mm: float = 240.0
    problem_image_max_mm: float = 120.0
    statement_image_max_mm: float = 160.0

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width_mm <= 0:
            raise ValueError(f"page_width_mm must be positive: {self.page_width_mm}")
        if self.page_height_mm <= 0:
            raise ValueError(f"page_height_mm must be positive: {self.page_height_mm}")
        if self.content_width_mm <= 0:
            raise ValueError("Margins exceed page width")
        if self.content_height_mm <= self.header_height_mm:
            raise ValueError("Margins and header exceed page height")
        for name in (
            "answer_image_max_mm",
            "overflow_image_max_mm",
            "problem_image_max_mm",
            "statement_image_max_mm",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive: {getattr(self, name)}")

    @property
    def content_width_mm(self) -> float:
        """Width available for content (excluding margins)."""
        return self.page_width_mm - self.margin_left_mm - self.margin_right_mm

    @property
    def content_height_mm(self) -> float:
        """Height available for content (excluding margins)."""
        return self.page_height_mm - self.margin_top_mm - self.margin_bottom_mm

    @property
    def body_height_mm(self) -> float:
        """Height below the header band."""
        return self.content_height_mm - self.header_height_mm


def mm_to_pt(mm: float) -> float:
    """Convert millimetres to PDF points (1/72 inch)."""
    return mm * MM_TO_PT
