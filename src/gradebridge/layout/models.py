"""
Module: layout.models

Purpose:
    Page descriptors produced by the planner.
    Immutable dataclasses; each page carries everything needed to draw it
    (including its own header), so pages can be rendered in any order.

Key Classes:
    - PageHeader: Student identity + title/subtitle band
    - AnswerContent: Inline answer shown on a main content page
    - TitlePage: Cover page
    - ContentPage: Statement (+ answer) page
    - OverflowImagePage: One additional image slot
    - DocumentPlan: Ordered pages with diagnostics

Dependencies:
    - dataclasses (std)
    - core.models: AssignmentImage, SubmissionKind

Used By:
    - layout.planner: Creates descriptors
    - output.html_renderer / output.pdf_renderer: Draw descriptors
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from gradebridge.core.models import AssignmentImage, SubmissionKind


class PageKind(str, Enum):
    TITLE = "title"
    CONTENT = "content"
    OVERFLOW_IMAGE = "overflow_image"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class PageHeader:
    """Header band drawn on every non-title page."""
    student_name: str
    student_id: str
    title: str
    subtitle: str


@dataclass(frozen=True, slots=True)
class AnswerContent:
    """
    Answer material for the main page of a slot.

    Attributes:
        elements: Element kinds in display order
        submitted: False when the slot has no entry at all
        text_answer: Text answer, if any
        first_image: First image (slot 1), None if unfilled
        image_total: Image count shown as "Image 1 of N"
        ai_reflective: AI reflection text, if any
    """
    elements: Tuple[SubmissionKind, ...]
    submitted: bool
    text_answer: Optional[str] = None
    first_image: Optional[str] = None
    image_total: int = 0
    ai_reflective: Optional[str] = None

    @property
    def shows_image(self) -> bool:
        return SubmissionKind.IMAGE in self.elements


@dataclass(frozen=True, slots=True)
class TitlePage:
    """Cover page; always first, no page break before it."""
    course_code: str
    assignment_title: str
    student_name: str
    student_id: str
    total_points: float
    course_name: Optional[str] = None
    preamble: Optional[str] = None

    kind = PageKind.TITLE

    @property
    def header(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class ContentPage:
    """
    Statement page, optionally carrying the first part of an answer.

    Attributes:
        header: Header band
        slot_id: Answer slot, None for statement-only pages
        heading: "Problem 1" or "Part a"
        label: Subsection letter, None for problems
        points: Points for the problem/subsection
        statement: Statement text (may embed math)
        problem_image: Diagram shipped with the problem
        answer: Inline answer; None for statement-only pages
        has_leading_answer_marker: Draw "Start of Answer"
        has_trailing_answer_marker: Draw "End of Answer" pinned to bottom
    """
    header: PageHeader
    slot_id: Optional[str]
    heading: str
    points: float
    statement: str
    label: Optional[str] = None
    problem_image: Optional[AssignmentImage] = None
    answer: Optional[AnswerContent] = None
    has_leading_answer_marker: bool = False
    has_trailing_answer_marker: bool = False

    kind = PageKind.CONTENT

    @property
    def is_statement_only(self) -> bool:
        return self.answer is None


@dataclass(frozen=True, slots=True)
class OverflowImagePage:
    """
    Page holding one additional image slot (slot 2..capacity).

    Attributes:
        header: Header band
        slot_id: Answer slot
        image_index: 0-based image position (>= 1)
        total_images: Slot image capacity
        image: Submitted image data URI, None renders a placeholder
        is_last_overflow: Last overflow page of its slot
    """
    header: PageHeader
    slot_id: str
    image_index: int
    total_images: int
    image: Optional[str] = None
    is_last_overflow: bool = False

    kind = PageKind.OVERFLOW_IMAGE

    @property
    def has_trailing_answer_marker(self) -> bool:
        return self.is_last_overflow

    @property
    def image_number(self) -> int:
        """1-based image number for display."""
        return self.image_index + 1


PageDescriptor = Union[TitlePage, ContentPage, OverflowImagePage]


@dataclass(frozen=True)
class DocumentPlan:
    """
    Planner output.

    Attributes:
        pages: Ordered page descriptors
        slot_page_map: slot_id -> page indices carrying that slot
        warnings: Non-fatal notes about the input

    Example:
        >>> plan = plan_document(assignment, submissions)
        >>> plan.page_count
        4
    """
    pages: Tuple[PageDescriptor, ...]
    slot_page_map: Dict[str, List[int]] = field(default_factory=dict)
    warnings: Tuple[str, ...] = ()

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def pages_for_slot(self, slot: str) -> Tuple[PageDescriptor, ...]:
        return tuple(self.pages[i] for i in self.slot_page_map.get(slot, []))
