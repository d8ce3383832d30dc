import base64
import io
import json
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import gradebridge
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from gradebridge.mathtext import BackendMonitor, ManualScheduler, MathSpanRenderer  # noqa: E402


def png_base64(size=(200, 100), color="white") -> str:
    """Base64 PNG payload (no data-URI prefix)."""
    img = Image.new("RGB", size, color=color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def png_data_uri(size=(200, 100), color="white") -> str:
    return f"data:image/png;base64,{png_base64(size, color)}"


class FakeBackend:
    """Math backend recording its calls; wraps the bare expression in <math>."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def render(self, expression, *, display_mode, throw_on_error=False):
        self.calls.append((expression, display_mode, throw_on_error))
        if expression in self.fail_on:
            raise RuntimeError(f"cannot parse {expression}")
        mode = "block" if display_mode else "inline"
        return f'<math display="{mode}">{expression}</math>'


# Common test fixtures
@pytest.fixture
def sample_image() -> str:
    """A small white PNG as a data URI."""
    return png_data_uri()


@pytest.fixture
def make_image():
    """Factory: make_image(size, color) -> data URI."""
    return png_data_uri


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def ready_monitor(fake_backend, scheduler) -> BackendMonitor:
    """Monitor whose backend is present on first check."""
    return BackendMonitor(lambda: fake_backend, scheduler=scheduler)


@pytest.fixture
def absent_monitor(scheduler) -> BackendMonitor:
    """Monitor whose backend never appears."""
    return BackendMonitor(lambda: None, scheduler=scheduler, timeout=1.0)


@pytest.fixture
def ready_renderer(ready_monitor) -> MathSpanRenderer:
    return MathSpanRenderer(ready_monitor)


@pytest.fixture
def fallback_renderer(absent_monitor) -> MathSpanRenderer:
    return MathSpanRenderer(absent_monitor)


@pytest.fixture
def assignment_data() -> dict:
    """
    Assignment JSON with three problems:
    p0: text + image, capacity 3
    p1: subsections (a) text only, (b) image capacity 2
    p2: AI reflection with a problem diagram
    """
    return {
        "assignment_title": "Homework 1",
        "course_code": "MATH101",
        "course_name": "Calculus I",
        "total_points": 30,
        "problems": [
            {
                "problem_statement": "Differentiate $x^2$ and sketch $$y = x^2$$",
                "points": 10,
                "submission_elements": ["TEXT", "IMAGE"],
                "max_images_allowed": 3,
            },
            {
                "problem_statement": "Consider the sequence $a_n = 1/n$.",
                "points": 12,
                "subsections": [
                    {
                        "subsection_statement": "Find the limit.",
                        "points": 4,
                        "submission_elements": ["Answer as text"],
                    },
                    {
                        "subsection_statement": "Plot the first terms.",
                        "points": 8,
                        "submission_elements": ["IMAGE"],
                        "max_images_allowed": 2,
                    },
                ],
            },
            {
                "problem_statement": "Reflect on the diagram.",
                "points": 8,
                "problem_image": {
                    "data": png_base64((300, 150), "gray"),
                    "content_type": "image/png",
                    "filename": "diagram.png",
                },
                "submission_elements": ["TEXT", "AI-REFLECTIVE"],
                "max_images_allowed": 0,
            },
        ],
    }


@pytest.fixture
def assignment(assignment_data):
    from gradebridge.core.utils import deserialize_assignment
    return deserialize_assignment(assignment_data)


@pytest.fixture
def backup_data(sample_image) -> dict:
    return {
        "student_name": "Ada Lovelace",
        "student_id": "S1234567",
        "assignment_title": "Homework 1",
        "course_code": "MATH101",
        "exported_at": "2025-01-16T10:30:45",
        "version": "v3.0.0",
        "submission_data": {
            "p0": {
                "textAnswer": "The derivative is $2x$.",
                "imageAnswers": [sample_image, "", sample_image],
            },
            "p1_s0": {"textAnswer": "It tends to $0$."},
            "p2": {"textAnswer": "Looks fine.", "aiReflective": "Used a CAS to check."},
        },
    }


@pytest.fixture
def assignment_file(tmp_path, assignment_data) -> Path:
    path = tmp_path / "assignment.json"
    path.write_text(json.dumps(assignment_data), encoding="utf-8")
    return path


@pytest.fixture
def backup_file(tmp_path, backup_data) -> Path:
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(backup_data), encoding="utf-8")
    return path
