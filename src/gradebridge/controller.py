"""
Module: gradebridge.controller

Purpose:
    Orchestrate the complete print pipeline.
    Load -> Plan -> (wait for math backend) -> Render HTML / PDF -> Metadata

Key Functions:
    - build_document(): Main entry point for building a submission packet
    - prepare_plan(): Load inputs and plan pages without rendering

Key Classes:
    - BuildResult: Complete build result
    - BuildError: Exception for build failures

Dependencies:
    - gradebridge.core: Loading and validation
    - gradebridge.layout: Page planning
    - gradebridge.mathtext: Backend loading and readiness
    - gradebridge.output: HTML and PDF rendering

Used By:
    - gradebridge.cli: Command line
"""

from __future__ import annotations

import json
import logging
import re
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from gradebridge.core.models import Assignment, BackupData, slot_id
from gradebridge.core.utils import LoaderError, load_assignment, load_submission_backup
from gradebridge.layout import DocumentPlan, plan_document
from gradebridge.mathtext import (
    BackendMonitor,
    MathSpanRenderer,
    installed_backend,
    load_default_backend,
)
from gradebridge.output import FontError, HtmlPageRenderer, PdfFonts, render_to_pdf

from .config import BuilderConfig

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """Error during build pipeline."""
    pass


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        output_dir: Directory holding all outputs
        html_path: Generated HTML document (if requested)
        pdf_path: Generated PDF (if requested)
        plan: The page plan that was rendered
        page_count: Number of pages generated
        math_ready: Whether math rendered through the backend
        metadata: Build metadata dictionary
        warnings: Any warnings during build

    Example:
        >>> result = build_document(config)
        >>> print(f"Generated {result.page_count} pages")
    """
    output_dir: Path
    html_path: Optional[Path]
    pdf_path: Optional[Path]
    plan: DocumentPlan
    page_count: int
    math_ready: bool
    metadata: dict
    warnings: Tuple[str, ...]


def prepare_plan(config: BuilderConfig) -> Tuple[Assignment, BackupData, DocumentPlan]:
    """
    Load the assignment (+ optional backup) and plan its pages.

    Returns:
        (assignment, backup, plan); backup is empty when no submission
        file was given

    Raises:
        BuildError: If any input fails to load
    """
    try:
        assignment = load_assignment(config.assignment_path)
    except LoaderError as e:
        raise BuildError(f"Failed to load assignment: {e}") from e

    backup = BackupData(student_name="", student_id="")
    if config.submission_path is not None:
        try:
            backup = load_submission_backup(config.submission_path)
        except LoaderError as e:
            raise BuildError(f"Failed to load submission: {e}") from e
        _check_backup_matches(backup, assignment)

    student_name = config.student_name if config.student_name is not None else backup.student_name
    student_id = config.student_id if config.student_id is not None else backup.student_id

    plan = plan_document(
        assignment,
        backup.submission_data,
        student_name=student_name,
        student_id=student_id,
    )
    return assignment, backup, plan


def build_document(
    config: BuilderConfig,
    *,
    monitor: Optional[BackendMonitor] = None,
) -> BuildResult:
    """
    Build a printable submission from start to finish.

    Pipeline:
    1. Load assignment and optional submission backup
    2. Plan pages
    3. Load the math backend and wait (bounded) for it
    4. Render HTML and/or PDF
    5. Write build_metadata.json

    Args:
        config: Build configuration
        monitor: Backend monitor; a fresh one probing the installed
            backend is used when omitted

    Returns:
        BuildResult with paths and metadata

    Raises:
        BuildError: If any step fails
    """
    warnings: List[str] = []
    start_time = time.perf_counter()

    logger.info(f"Starting build for {config.assignment_path}")

    # 1-2. Load and plan
    assignment, backup, plan = prepare_plan(config)
    warnings.extend(plan.warnings)
    for warning in plan.warnings:
        logger.warning(warning)

    # 3. Math backend
    math_ready = False
    renderer: Optional[MathSpanRenderer] = None
    if config.wants_html:
        if not config.render_math:
            monitor = BackendMonitor(_no_backend, timeout=0.0)
        elif monitor is None:
            if installed_backend() is None:
                load_default_backend(background=True)
            monitor = BackendMonitor(installed_backend, timeout=config.math_timeout)
        math_ready = config.render_math and _wait_for_math(monitor, config.math_timeout)
        if config.render_math and not math_ready:
            warnings.append("Math backend unavailable; math printed as source text")
            logger.warning("Math backend not ready, falling back to source text")
        renderer = MathSpanRenderer(monitor)

    # 4. Output directory
    if config.output_dir:
        output_dir = Path(config.output_dir)
    else:
        output_dir = _generate_output_dir(assignment, plan)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BuildError(f"Cannot create output directory {output_dir}: {e}") from e
    logger.info(f"Output directory: {output_dir}")

    stem = _output_stem(assignment, plan)

    # 5. Render
    html_path = None
    if config.wants_html:
        html_path = output_dir / f"{stem}.html"
        html = HtmlPageRenderer(config.page_config, renderer).render_document(
            plan, title=f"{assignment.course_code} - {assignment.title}"
        )
        try:
            html_path.write_text(html, encoding="utf-8")
        except OSError as e:
            raise BuildError(f"Failed to write HTML: {e}") from e
        logger.info(f"Rendered HTML: {html_path}")

    pdf_path = None
    if config.wants_pdf:
        pdf_path = output_dir / f"{stem}.pdf"
        fonts = None
        if config.pdf_font is not None:
            try:
                fonts = PdfFonts.from_ttf(config.pdf_font)
            except FontError as e:
                raise BuildError(str(e)) from e
        try:
            render_to_pdf(
                plan,
                pdf_path,
                config.page_config,
                show_footer=config.show_footer,
                fonts=fonts,
            )
        except OSError as e:
            raise BuildError(f"Failed to write PDF: {e}") from e
        logger.info(f"Rendered PDF: {pdf_path}")

    elapsed = time.perf_counter() - start_time
    logger.info(f"Build completed in {elapsed:.2f}s")

    # 6. Metadata
    metadata = _build_metadata(config, assignment, backup, plan, math_ready, html_path, pdf_path)
    _write_metadata(output_dir, metadata)

    return BuildResult(
        output_dir=output_dir,
        html_path=html_path,
        pdf_path=pdf_path,
        plan=plan,
        page_count=plan.page_count,
        math_ready=math_ready,
        metadata=metadata,
        warnings=tuple(warnings),
    )


def _no_backend() -> None:
    return None


def _wait_for_math(monitor: BackendMonitor, timeout: float) -> bool:
    """Block until the monitor reports ready, expires, or timeout elapses."""
    ready = threading.Event()
    unsubscribe = monitor.on_ready(ready.set)
    try:
        if not monitor.ready() and not monitor.expired:
            ready.wait(timeout)
    finally:
        unsubscribe()
    return monitor.ready()


def _check_backup_matches(backup: BackupData, assignment: Assignment) -> None:
    """Log slots in the backup that the assignment does not define."""
    known = set()
    for p_idx, problem in assignment.iter_problems():
        known.add(slot_id(p_idx))
        known.update(slot_id(p_idx, s_idx) for s_idx in range(len(problem.subsections)))
    unknown = sorted(set(backup.submission_data) - known)
    if unknown:
        logger.warning(f"Submission has answers for unknown slots (ignored): {unknown}")
    if backup.course_code and backup.course_code != assignment.course_code:
        logger.warning(
            f"Submission course code {backup.course_code!r} does not match "
            f"assignment {assignment.course_code!r}"
        )


def _slug(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "-", value).strip("-").lower()


def _student_slug(plan: DocumentPlan) -> str:
    student_id = getattr(plan.pages[0], "student_id", "") if plan.pages else ""
    return _slug(student_id) or "submission"


def _output_stem(assignment: Assignment, plan: DocumentPlan) -> str:
    """e.g. ``math101_s1234567`` or ``math101_submission``."""
    return f"{_slug(assignment.course_code) or 'assignment'}_{_student_slug(plan)}"


def _generate_output_dir(assignment: Assignment, plan: DocumentPlan) -> Path:
    """
    Generate default output directory path with timestamp.

    Returns:
        Path like output/math101/20250116-103045__s1234567, made unique
    """
    base = Path("output") / (_slug(assignment.course_code) or "assignment")
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    folder_name = f"{timestamp}__{_student_slug(plan)}"

    candidate = base / folder_name
    suffix = 1
    while candidate.exists():
        candidate = base / f"{folder_name} ({suffix})"
        suffix += 1
    return candidate


def _build_metadata(
    config: BuilderConfig,
    assignment: Assignment,
    backup: BackupData,
    plan: DocumentPlan,
    math_ready: bool,
    html_path: Optional[Path],
    pdf_path: Optional[Path],
) -> dict:
    """
    Build metadata dictionary for the generated document.

    Contains the page manifest (1-indexed), the slot -> page map and
    the outputs written.
    """
    from gradebridge import __version__

    title = plan.pages[0] if plan.pages else None
    manifest = []
    for index, page in enumerate(plan.pages):
        header = page.header
        manifest.append({
            "page": index + 1,
            "kind": page.kind.value,
            "slot_id": getattr(page, "slot_id", None),
            "subtitle": header.subtitle if header is not None else None,
        })

    return {
        "generated_at": datetime.now().isoformat(),
        "builder_version": __version__,
        "assignment_title": assignment.title,
        "course_code": assignment.course_code,
        "total_points": assignment.total_points,
        "student_name": getattr(title, "student_name", ""),
        "student_id": getattr(title, "student_id", ""),
        "submission_file": str(config.submission_path) if config.submission_path else None,
        "submitted_slots": sorted(backup.submission_data),
        "page_count": plan.page_count,
        "slot_pages": {
            slot: [i + 1 for i in indices] for slot, indices in plan.slot_page_map.items()
        },
        "math_backend_ready": math_ready,
        "outputs": {
            "html": str(html_path) if html_path else None,
            "pdf": str(pdf_path) if pdf_path else None,
        },
        "warnings": list(plan.warnings),
        "manifest": manifest,
    }


def _write_metadata(output_dir: Path, metadata: dict) -> None:
    """
    Write metadata JSON file to output directory.

    Raises:
        BuildError: If writing fails
    """
    metadata_path = output_dir / "build_metadata.json"
    try:
        with open(metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2)
        logger.debug(f"Wrote metadata to {metadata_path}")
    except (OSError, TypeError) as e:
        raise BuildError(f"Failed to write metadata: {e}") from e
