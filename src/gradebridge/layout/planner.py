"""
Module: layout.planner

Purpose:
    Flatten assignment -> problems -> subsections into an ordered list of
    page descriptors with a fixed shape per assignment definition.

Algorithm:
    1. TitlePage
    2. For each problem:
       - No subsections: one answer unit for slot p{i}
       - Subsections: statement-only ContentPage, then one answer unit per
         subsection for slot p{i}_s{j}
    An answer unit is one main ContentPage followed by capacity - 1
    OverflowImagePages. The start marker goes on the main page; the end
    marker goes on the main page when capacity <= 1, otherwise on the last
    overflow page.

    Overflow pages are always emitted up to the declared capacity, even for
    slots whose element kinds do not include IMAGE, so page count depends
    only on the assignment definition.

Key Functions:
    - plan_document(): Main planning function

Dependencies:
    - core.models: Assignment, SubmissionData, slot helpers
    - layout.models: Page descriptors

Used By:
    - gradebridge.controller: Build pipeline
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from gradebridge.core.models import (
    Assignment,
    AssignmentImage,
    SubmissionEntry,
    SubmissionKind,
    slot_id,
    subsection_label,
)

from .models import (
    AnswerContent,
    ContentPage,
    DocumentPlan,
    OverflowImagePage,
    PageDescriptor,
    PageHeader,
    TitlePage,
)

logger = logging.getLogger(__name__)


def plan_document(
    assignment: Assignment,
    submission_data: Mapping[str, SubmissionEntry],
    *,
    student_name: str = "",
    student_id: str = "",
) -> DocumentPlan:
    """
    Plan the printable document.

    Pure function: the same inputs always produce an equal plan.

    Args:
        assignment: Assignment definition
        submission_data: slot_id -> SubmissionEntry (may be sparse)
        student_name: Shown on the title page and every header
        student_id: Shown on the title page and every header

    Returns:
        DocumentPlan with pages in print order

    Example:
        >>> plan = plan_document(assignment, SubmissionData())
        >>> [p.kind.value for p in plan.pages]
        ['title', 'content', 'overflow_image', 'overflow_image']
    """
    pages: List[PageDescriptor] = []
    slot_pages: Dict[str, List[int]] = {}
    warnings: List[str] = []

    pages.append(TitlePage(
        course_code=assignment.course_code,
        assignment_title=assignment.title,
        student_name=student_name,
        student_id=student_id,
        total_points=assignment.total_points,
        course_name=assignment.course_name,
        preamble=assignment.preamble,
    ))

    def header(subtitle: str) -> PageHeader:
        return PageHeader(student_name, student_id, assignment.course_code, subtitle)

    for p_idx, problem in assignment.iter_problems():
        number = p_idx + 1

        if not problem.has_subsections:
            unit = _answer_unit(
                slot=slot_id(p_idx),
                entry=submission_data.get(slot_id(p_idx)),
                elements=problem.submission_elements,
                capacity=problem.max_images_allowed,
                heading=f"Problem {number}",
                label=None,
                points=problem.points,
                statement=problem.statement,
                problem_image=problem.problem_image,
                main_header=header(f"Problem {number}"),
                overflow_subtitle=lambda k, n=number: f"Problem {n} (Image {k})",
                header=header,
                warnings=warnings,
            )
            _append(pages, slot_pages, slot_id(p_idx), unit)
            continue

        pages.append(ContentPage(
            header=header(f"Problem {number}"),
            slot_id=None,
            heading=f"Problem {number}",
            points=problem.points,
            statement=problem.statement,
            problem_image=problem.problem_image,
        ))

        for s_idx, sub in enumerate(problem.subsections):
            letter = subsection_label(s_idx)
            sid = slot_id(p_idx, s_idx)
            unit = _answer_unit(
                slot=sid,
                entry=submission_data.get(sid),
                elements=sub.submission_elements,
                capacity=sub.max_images_allowed,
                heading=f"Part {letter}",
                label=letter,
                points=sub.points,
                statement=sub.statement,
                problem_image=None,
                main_header=header(f"Problem {number} - Part ({letter})"),
                overflow_subtitle=lambda k, n=number, lt=letter: f"Problem {n}({lt}) - Image {k}",
                header=header,
                warnings=warnings,
            )
            _append(pages, slot_pages, sid, unit)

    logger.info(
        f"Planned {len(pages)} pages for '{assignment.title}' "
        f"({len(slot_pages)} answer slots)"
    )
    return DocumentPlan(pages=tuple(pages), slot_page_map=slot_pages, warnings=tuple(warnings))


def _answer_unit(
    *,
    slot: str,
    entry: Optional[SubmissionEntry],
    elements: Tuple[SubmissionKind, ...],
    capacity: int,
    heading: str,
    label: Optional[str],
    points: float,
    statement: str,
    problem_image: Optional[AssignmentImage],
    main_header: PageHeader,
    overflow_subtitle: Callable[[int], str],
    header: Callable[[str], PageHeader],
    warnings: List[str],
) -> List[PageDescriptor]:
    """One main content page + (capacity - 1) overflow pages for a slot."""
    overflow_count = max(0, capacity - 1)

    if overflow_count and SubmissionKind.IMAGE not in elements:
        # Capacity is honoured even without an IMAGE element
        logger.debug(
            f"Slot {slot} has image capacity {capacity} but no IMAGE element; "
            f"emitting {overflow_count} overflow page(s) anyway"
        )

    if entry is not None:
        stored = len(entry.image_answers)
        if stored > max(capacity, 1):
            warnings.append(
                f"Slot {slot} holds {stored} images but capacity is {capacity}; "
                "extra images are not printed"
            )

    answer = AnswerContent(
        elements=tuple(elements),
        submitted=entry is not None,
        text_answer=entry.text_answer if entry else None,
        first_image=entry.image_at(0) if entry else None,
        image_total=max(capacity, 1),
        ai_reflective=entry.ai_reflective if entry else None,
    )

    unit: List[PageDescriptor] = [ContentPage(
        header=main_header,
        slot_id=slot,
        heading=heading,
        label=label,
        points=points,
        statement=statement,
        problem_image=problem_image,
        answer=answer,
        has_leading_answer_marker=True,
        has_trailing_answer_marker=overflow_count == 0,
    )]

    for offset in range(overflow_count):
        image_index = offset + 1
        unit.append(OverflowImagePage(
            header=header(overflow_subtitle(image_index + 1)),
            slot_id=slot,
            image_index=image_index,
            total_images=capacity,
            image=entry.image_at(image_index) if entry else None,
            is_last_overflow=offset == overflow_count - 1,
        ))

    return unit


def _append(
    pages: List[PageDescriptor],
    slot_pages: Dict[str, List[int]],
    slot: str,
    unit: List[PageDescriptor],
) -> None:
    start = len(pages)
    pages.extend(unit)
    slot_pages[slot] = list(range(start, len(pages)))
