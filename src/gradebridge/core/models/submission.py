"""
Module: submission

Purpose:
    Student submission data as consumed by the print core. Entries are
    addressed by positional slot identifiers so lookups stay stable even
    when the mapping is sparse.

Key Functions:
    - slot_id(): Positional slot identifier for a problem/subsection
    - subsection_label(): Sequential lowercase letter for a subsection

Key Classes:
    - SubmissionEntry: Answers for one slot
    - SubmissionData: Read-only slot_id -> SubmissionEntry mapping
    - BackupData: Exported submission file contents

Dependencies:
    - dataclasses (std)
    - collections.abc (std)

Used By:
    - layout.planner: Answer lookup per slot
    - core.utils.serialization: Backup load/save
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

VERSION = "v3.0.0"


def slot_id(problem_index: int, subsection_index: Optional[int] = None) -> str:
    """
    Build the slot identifier for a problem or subsection.

    Derived purely from position, never from content.

    Example:
        >>> slot_id(0)
        'p0'
        >>> slot_id(2, 1)
        'p2_s1'
    """
    if problem_index < 0:
        raise ValueError(f"problem_index cannot be negative: {problem_index}")
    if subsection_index is None:
        return f"p{problem_index}"
    if subsection_index < 0:
        raise ValueError(f"subsection_index cannot be negative: {subsection_index}")
    return f"p{problem_index}_s{subsection_index}"


def subsection_label(index: int) -> str:
    """
    Letter label for a subsection position: 0 -> 'a', 25 -> 'z', 26 -> 'aa'.
    """
    if index < 0:
        raise ValueError(f"index cannot be negative: {index}")
    label = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        label = chr(ord("a") + rem) + label
    return label


@dataclass(frozen=True, slots=True)
class SubmissionEntry:
    """
    Answers submitted for one slot.

    Attributes:
        text_answer: Free text answer (may embed math)
        image_answers: Data-URI images by position; gaps are None or ""
        ai_reflective: AI reflection text
    """
    text_answer: Optional[str] = None
    image_answers: Tuple[Optional[str], ...] = ()
    ai_reflective: Optional[str] = None

    def image_at(self, index: int) -> Optional[str]:
        """Image at a 0-based slot position, or None when the slot is empty."""
        if index < 0 or index >= len(self.image_answers):
            return None
        return self.image_answers[index] or None

    @property
    def image_count(self) -> int:
        """Number of non-empty image slots."""
        return sum(1 for img in self.image_answers if img)

    @property
    def is_empty(self) -> bool:
        return not (self.text_answer or self.image_count or self.ai_reflective)

    def to_dict(self) -> dict:
        d: dict = {}
        if self.text_answer is not None:
            d["textAnswer"] = self.text_answer
        if self.image_answers:
            d["imageAnswers"] = [img or "" for img in self.image_answers]
        if self.ai_reflective is not None:
            d["aiReflective"] = self.ai_reflective
        return d

    @classmethod
    def from_dict(cls, data: dict) -> SubmissionEntry:
        images = data.get("imageAnswers") or []
        return cls(
            text_answer=data.get("textAnswer"),
            image_answers=tuple(img or None for img in images),
            ai_reflective=data.get("aiReflective"),
        )


class SubmissionData(Mapping):
    """
    Read-only mapping from slot identifier to SubmissionEntry.

    Missing slots are simply absent; callers use ``get`` and render a
    placeholder.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, SubmissionEntry]] = None):
        self._entries: Dict[str, SubmissionEntry] = dict(entries or {})

    def __getitem__(self, key: str) -> SubmissionEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SubmissionData({sorted(self._entries)})"

    def to_dict(self) -> dict:
        return {key: entry.to_dict() for key, entry in self._entries.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, dict]) -> SubmissionData:
        return cls({key: SubmissionEntry.from_dict(value or {}) for key, value in data.items()})


@dataclass(frozen=True)
class BackupData:
    """
    Exported submission file: student identity plus submission data.

    Attributes:
        student_name: Student display name
        student_id: Student identifier
        submission_data: Answers by slot
        assignment_title: Title of the assignment answered
        course_code: Course code of the assignment answered
        exported_at: ISO timestamp of export
        version: Writer version string
    """
    student_name: str
    student_id: str
    submission_data: SubmissionData = field(default_factory=SubmissionData)
    assignment_title: str = ""
    course_code: str = ""
    exported_at: str = ""
    version: str = VERSION

    def to_dict(self) -> dict:
        return {
            "student_name": self.student_name,
            "student_id": self.student_id,
            "submission_data": self.submission_data.to_dict(),
            "assignment_title": self.assignment_title,
            "course_code": self.course_code,
            "exported_at": self.exported_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> BackupData:
        return cls(
            student_name=data.get("student_name", ""),
            student_id=data.get("student_id", ""),
            submission_data=SubmissionData.from_dict(data.get("submission_data") or {}),
            assignment_title=data.get("assignment_title", ""),
            course_code=data.get("course_code", ""),
            exported_at=data.get("exported_at", ""),
            version=data.get("version", VERSION),
        )
