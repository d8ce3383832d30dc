"""
Core Models Package

Immutable, validated data models shared by planning and rendering.

All assignment models are frozen dataclasses: the definition is loaded once
per session and never mutated. Submission data is a read-only mapping; only
the editing surface (outside this package) produces new versions of it.
"""

from .assignment import Assignment, AssignmentImage, Problem, Subsection, SubmissionKind
from .submission import (
    VERSION,
    BackupData,
    SubmissionData,
    SubmissionEntry,
    slot_id,
    subsection_label,
)

__all__ = [
    "Assignment",
    "AssignmentImage",
    "Problem",
    "Subsection",
    "SubmissionKind",
    "BackupData",
    "SubmissionData",
    "SubmissionEntry",
    "VERSION",
    "slot_id",
    "subsection_label",
]
