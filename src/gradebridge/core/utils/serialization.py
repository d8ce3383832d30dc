"""
Serialization Utilities

to/from JSON helpers for assignment definitions and submission backups.

Assignment files use the snake_case keys of the authoring tool
(``assignment_title``, ``problem_statement``, ...); backups use the keys
the editing surface exports (``textAnswer``, ``imageAnswers``, ...).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from ..models.assignment import (
    Assignment,
    AssignmentImage,
    Problem,
    Subsection,
    SubmissionKind,
)
from ..models.submission import BackupData, SubmissionData
from ..schemas.validator import ValidationError, validate_assignment, validate_backup

logger = logging.getLogger(__name__)


class LoaderError(Exception):
    """Error reading an assignment or backup file."""
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Assignment
# ─────────────────────────────────────────────────────────────────────────────

def deserialize_assignment(data: dict[str, Any], *, validate: bool = True) -> Assignment:
    """
    Build an Assignment from its JSON dictionary.

    Raises:
        ValidationError: If validate=True and data is invalid
    """
    if validate:
        validate_assignment(data)

    problems = tuple(_problem_from_dict(p) for p in data.get("problems", []))
    return Assignment(
        title=data["assignment_title"],
        course_code=data["course_code"],
        total_points=data["total_points"],
        problems=problems,
        course_name=data.get("course_name"),
        preamble=data.get("preamble"),
    )


def _elements(raw: list[str] | None) -> tuple[SubmissionKind, ...]:
    return tuple(SubmissionKind.parse(e) for e in raw or [])


def _problem_from_dict(data: dict[str, Any]) -> Problem:
    image = data.get("problem_image")
    return Problem(
        statement=data.get("problem_statement", ""),
        points=data.get("points", 0),
        problem_image=AssignmentImage(
            data=image["data"],
            content_type=image.get("content_type", "image/png"),
            filename=image.get("filename", ""),
        ) if image else None,
        submission_elements=_elements(data.get("submission_elements")),
        max_images_allowed=data.get("max_images_allowed") or 0,
        allow_pdf_upload=bool(data.get("allow_pdf_upload", False)),
        subsections=tuple(
            Subsection(
                statement=sub.get("subsection_statement", ""),
                points=sub.get("points", 0),
                submission_elements=_elements(sub.get("submission_elements")),
                max_images_allowed=sub.get("max_images_allowed") or 0,
                allow_pdf_upload=bool(sub.get("allow_pdf_upload", False)),
            )
            for sub in data.get("subsections") or []
        ),
    )


def serialize_assignment(assignment: Assignment) -> dict[str, Any]:
    """Serialize an Assignment back to the authoring JSON shape."""
    d: dict[str, Any] = {
        "assignment_title": assignment.title,
        "course_code": assignment.course_code,
        "total_points": assignment.total_points,
        "problems": [],
    }
    if assignment.course_name is not None:
        d["course_name"] = assignment.course_name
    if assignment.preamble is not None:
        d["preamble"] = assignment.preamble

    for problem in assignment.problems:
        p: dict[str, Any] = {
            "problem_statement": problem.statement,
            "points": problem.points,
            "max_images_allowed": problem.max_images_allowed,
            "allow_pdf_upload": problem.allow_pdf_upload,
        }
        if problem.problem_image:
            p["problem_image"] = {
                "data": problem.problem_image.data,
                "content_type": problem.problem_image.content_type,
                "filename": problem.problem_image.filename,
            }
        if problem.subsections:
            p["subsections"] = [
                {
                    "subsection_statement": sub.statement,
                    "points": sub.points,
                    "submission_elements": [str(e) for e in sub.submission_elements],
                    "max_images_allowed": sub.max_images_allowed,
                    "allow_pdf_upload": sub.allow_pdf_upload,
                }
                for sub in problem.subsections
            ]
        else:
            p["submission_elements"] = [str(e) for e in problem.submission_elements]
        d["problems"].append(p)
    return d


def load_assignment(path: Path) -> Assignment:
    """
    Load and validate an assignment JSON file.

    Raises:
        LoaderError: If the file is missing, unreadable or invalid
    """
    data = _read_json(path)
    try:
        assignment = deserialize_assignment(data)
    except (ValidationError, ValueError) as e:
        raise LoaderError(f"Invalid assignment file {path}: {e}") from e
    logger.info(
        f"Loaded assignment '{assignment.title}' ({assignment.problem_count} problems) from {path}"
    )
    return assignment


# ─────────────────────────────────────────────────────────────────────────────
# Submission backups
# ─────────────────────────────────────────────────────────────────────────────

def load_submission_backup(path: Path) -> BackupData:
    """
    Load and validate an exported submission backup.

    Raises:
        LoaderError: If the file is missing, unreadable or invalid
    """
    data = _read_json(path)
    try:
        validate_backup(data)
    except ValidationError as e:
        raise LoaderError(f"Invalid submission backup {path}: {e}") from e
    backup = BackupData.from_dict(data)
    logger.info(f"Loaded {len(backup.submission_data)} submission slots from {path}")
    return backup


def write_submission_backup(
    path: Path,
    student_name: str,
    student_id: str,
    submission_data: SubmissionData,
    assignment: Assignment,
) -> BackupData:
    """
    Write a backup file for the given submission state.

    Returns:
        The BackupData that was written
    """
    backup = BackupData(
        student_name=student_name,
        student_id=student_id,
        submission_data=submission_data,
        assignment_title=assignment.title,
        course_code=assignment.course_code,
        exported_at=datetime.now().isoformat(),
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(backup.to_dict(), f, indent=2)
    logger.debug(f"Wrote submission backup to {path}")
    return backup


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise LoaderError(f"File does not exist: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise LoaderError(f"Failed to read {path}: {e}") from e
