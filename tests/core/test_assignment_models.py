"""
Unit Tests for Assignment Models

Tests for SubmissionKind, AssignmentImage, Subsection, Problem, Assignment.
"""

import pytest

from gradebridge.core.models import (
    Assignment,
    AssignmentImage,
    Problem,
    Subsection,
    SubmissionKind,
)


class TestSubmissionKind:
    """Tests for SubmissionKind parsing."""

    @pytest.mark.parametrize("raw, expected", [
        ("TEXT", SubmissionKind.TEXT),
        ("IMAGE", SubmissionKind.IMAGE),
        ("AI-REFLECTIVE", SubmissionKind.AI_REFLECTIVE),
        ("ai_reflective", SubmissionKind.AI_REFLECTIVE),
        (" text ", SubmissionKind.TEXT),
        ("Answer as text", SubmissionKind.TEXT),
        ("Answer as image", SubmissionKind.IMAGE),
        ("AI Reflective", SubmissionKind.AI_REFLECTIVE),
    ])
    def test_parse_when_known_value_or_label_then_returns_kind(self, raw, expected):
        assert SubmissionKind.parse(raw) is expected

    def test_parse_when_unknown_then_raises_value_error(self):
        with pytest.raises(ValueError, match="Unknown submission element kind"):
            SubmissionKind.parse("VIDEO")

    def test_str_is_stored_value(self):
        assert str(SubmissionKind.AI_REFLECTIVE) == "AI-REFLECTIVE"

    def test_label_round_trips_through_parse(self):
        for kind in SubmissionKind:
            assert SubmissionKind.parse(kind.label) is kind


class TestAssignmentImage:
    """Tests for AssignmentImage."""

    def test_data_uri_when_built_then_includes_content_type(self):
        image = AssignmentImage(data="AAAA", content_type="image/jpeg")
        assert image.data_uri == "data:image/jpeg;base64,AAAA"

    def test_init_when_empty_data_then_raises(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            AssignmentImage(data="")

    def test_init_when_bad_content_type_then_raises(self):
        with pytest.raises(ValueError, match="Invalid content_type"):
            AssignmentImage(data="AAAA", content_type="png")


class TestProblem:
    """Tests for Problem invariants."""

    def test_init_when_subsections_and_elements_then_raises(self):
        with pytest.raises(ValueError, match="cannot carry submission elements"):
            Problem(
                statement="x",
                points=1,
                submission_elements=(SubmissionKind.TEXT,),
                subsections=(Subsection("a", 1),),
            )

    def test_init_when_negative_points_then_raises(self):
        with pytest.raises(ValueError, match="negative"):
            Problem(statement="x", points=-1)

    def test_init_when_negative_capacity_then_raises(self):
        with pytest.raises(ValueError, match="max_images_allowed"):
            Subsection(statement="x", points=1, max_images_allowed=-2)

    def test_has_subsections(self):
        assert Problem("x", 1, subsections=(Subsection("a", 1),)).has_subsections
        assert not Problem("x", 1).has_subsections

    def test_problems_are_value_objects(self):
        a = Problem("x", 1, submission_elements=(SubmissionKind.TEXT,))
        b = Problem("x", 1, submission_elements=(SubmissionKind.TEXT,))
        assert a == b


class TestAssignment:
    """Tests for Assignment."""

    def test_iter_problems_yields_indices_in_order(self):
        problems = (Problem("one", 1), Problem("two", 2))
        assignment = Assignment("HW", "C1", 3, problems)

        assert [(i, p.statement) for i, p in assignment.iter_problems()] == [
            (0, "one"),
            (1, "two"),
        ]
        assert assignment.problem_count == 2

    def test_init_when_empty_title_then_raises(self):
        with pytest.raises(ValueError, match="title"):
            Assignment("", "C1", 0)

    def test_init_when_empty_course_code_then_raises(self):
        with pytest.raises(ValueError, match="course_code"):
            Assignment("HW", "", 0)
