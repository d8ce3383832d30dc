"""
GradeBridge Core Package

Shared data models, schema validation and serialization for the print core.
"""

from .models import (
    Assignment,
    AssignmentImage,
    BackupData,
    Problem,
    Subsection,
    SubmissionData,
    SubmissionEntry,
    SubmissionKind,
    slot_id,
    subsection_label,
)

__all__ = [
    "Assignment",
    "AssignmentImage",
    "BackupData",
    "Problem",
    "Subsection",
    "SubmissionData",
    "SubmissionEntry",
    "SubmissionKind",
    "slot_id",
    "subsection_label",
]
