"""
Module: layout

Purpose:
    Deterministic page planning for the printable submission packet.
    Converts an assignment + submission data into ordered page descriptors.

Key Functions:
    - plan_document(): Main entry point for planning

Key Classes:
    - PageConfig: Page geometry
    - TitlePage / ContentPage / OverflowImagePage: Page descriptors
    - DocumentPlan: Planner output

Dependencies:
    - gradebridge.core.models: Assignment, SubmissionData

Used By:
    - gradebridge.controller: Build pipeline
    - gradebridge.output: Page rendering
"""

from .config import PageConfig, mm_to_pt
from .models import (
    AnswerContent,
    ContentPage,
    DocumentPlan,
    OverflowImagePage,
    PageDescriptor,
    PageHeader,
    PageKind,
    TitlePage,
)
from .planner import plan_document

__all__ = [
    # Config
    "PageConfig",
    "mm_to_pt",
    # Models
    "AnswerContent",
    "ContentPage",
    "DocumentPlan",
    "OverflowImagePage",
    "PageDescriptor",
    "PageHeader",
    "PageKind",
    "TitlePage",
    # Functions
    "plan_document",
]
