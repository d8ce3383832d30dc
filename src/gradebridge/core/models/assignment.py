"""
Module: assignment

Purpose:
    Immutable assignment definition: the assignment, its problems, their
    optional subsections, and the enumerated submission element kinds.
    A problem either carries submission elements directly or delegates
    them entirely to its subsections - never both.

Key Classes:
    - SubmissionKind: TEXT / IMAGE / AI_REFLECTIVE tag
    - AssignmentImage: Base64 image embedded in a problem
    - Subsection: Answerable part of a problem
    - Problem: Top-level problem
    - Assignment: Complete assignment definition

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.utils.serialization: Loading from JSON
    - layout.planner: Page planning
    - output.html_renderer / output.pdf_renderer: Statement rendering
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple


class SubmissionKind(str, Enum):
    """Kind of answer widget attached to a slot."""
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    AI_REFLECTIVE = "AI-REFLECTIVE"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> SubmissionKind:
        """
        Parse a stored element kind.

        Accepts the enum values and the display labels older assignment
        files were written with ("Answer as text", ...).

        Raises:
            ValueError: If the string names no known kind
        """
        key = raw.strip()
        if key in _LEGACY_LABELS:
            return _LEGACY_LABELS[key]
        try:
            return cls(key.upper().replace("_", "-"))
        except ValueError:
            raise ValueError(f"Unknown submission element kind: {raw!r}") from None

    @property
    def label(self) -> str:
        """Human-readable label shown in the editing surface."""
        return _DISPLAY_LABELS[self]


_DISPLAY_LABELS = {
    SubmissionKind.TEXT: "Answer as text",
    SubmissionKind.IMAGE: "Answer as image",
    SubmissionKind.AI_REFLECTIVE: "AI Reflective",
}
_LEGACY_LABELS = {label: kind for kind, label in _DISPLAY_LABELS.items()}


@dataclass(frozen=True, slots=True)
class AssignmentImage:
    """
    Image shipped with the assignment definition.

    Attributes:
        data: Base64 payload (no data-URI prefix)
        content_type: MIME type, e.g. "image/png"
        filename: Original file name
    """
    data: str
    content_type: str = "image/png"
    filename: str = ""

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError("AssignmentImage data cannot be empty")
        if "/" not in self.content_type:
            raise ValueError(f"Invalid content_type: {self.content_type!r}")

    @property
    def data_uri(self) -> str:
        """Data URI suitable for direct display."""
        return f"data:{self.content_type};base64,{self.data}"


@dataclass(frozen=True, slots=True)
class Subsection:
    """
    Lettered part of a problem with its own answer slot.

    Attributes:
        statement: Statement text (may embed math)
        points: Points available
        submission_elements: Ordered answer kinds for this slot
        max_images_allowed: Image-slot capacity
        allow_pdf_upload: Whether the editor offers PDF upload
    """
    statement: str
    points: float
    submission_elements: Tuple[SubmissionKind, ...] = ()
    max_images_allowed: int = 0
    allow_pdf_upload: bool = False

    def __post_init__(self) -> None:
        if self.points < 0:
            raise ValueError(f"Points cannot be negative: {self.points}")
        if self.max_images_allowed < 0:
            raise ValueError(
                f"max_images_allowed cannot be negative: {self.max_images_allowed}"
            )


@dataclass(frozen=True, slots=True)
class Problem:
    """
    Top-level problem.

    Invariants:
        - Subsections and own submission elements are mutually exclusive
        - points >= 0, max_images_allowed >= 0
    """
    statement: str
    points: float
    problem_image: Optional[AssignmentImage] = None
    submission_elements: Tuple[SubmissionKind, ...] = ()
    max_images_allowed: int = 0
    allow_pdf_upload: bool = False
    subsections: Tuple[Subsection, ...] = ()

    def __post_init__(self) -> None:
        if self.points < 0:
            raise ValueError(f"Points cannot be negative: {self.points}")
        if self.max_images_allowed < 0:
            raise ValueError(
                f"max_images_allowed cannot be negative: {self.max_images_allowed}"
            )
        if self.subsections and self.submission_elements:
            raise ValueError(
                "Problem cannot carry submission elements when it has subsections"
            )

    @property
    def has_subsections(self) -> bool:
        return len(self.subsections) > 0


@dataclass(frozen=True, slots=True)
class Assignment:
    """
    Complete assignment definition (immutable once loaded).

    Example:
        >>> a = Assignment("Homework 1", "MATH101", 10, (Problem("$x$", 10),))
        >>> a.problem_count
        1
    """
    title: str
    course_code: str
    total_points: float
    problems: Tuple[Problem, ...] = field(default_factory=tuple)
    course_name: Optional[str] = None
    preamble: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Assignment title cannot be empty")
        if not self.course_code:
            raise ValueError("Assignment course_code cannot be empty")

    @property
    def problem_count(self) -> int:
        return len(self.problems)

    def iter_problems(self) -> Iterator[Tuple[int, Problem]]:
        """Yield (index, problem) pairs in order."""
        return iter(enumerate(self.problems))
