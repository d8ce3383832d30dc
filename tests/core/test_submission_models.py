"""
Unit Tests for Submission Models

Tests for slot ids, subsection labels, SubmissionEntry, SubmissionData
and BackupData.
"""

import pytest

from gradebridge.core.models import (
    BackupData,
    SubmissionData,
    SubmissionEntry,
    slot_id,
    subsection_label,
)


class TestSlotId:
    """Tests for slot_id()."""

    def test_problem_slot(self):
        assert slot_id(0) == "p0"
        assert slot_id(12) == "p12"

    def test_subsection_slot(self):
        assert slot_id(2, 1) == "p2_s1"
        assert slot_id(0, 0) == "p0_s0"

    def test_negative_index_raises(self):
        with pytest.raises(ValueError):
            slot_id(-1)
        with pytest.raises(ValueError):
            slot_id(0, -1)


class TestSubsectionLabel:
    """Tests for subsection_label()."""

    @pytest.mark.parametrize("index, label", [
        (0, "a"),
        (1, "b"),
        (25, "z"),
        (26, "aa"),
        (27, "ab"),
        (51, "az"),
        (52, "ba"),
    ])
    def test_label_for_index(self, index, label):
        assert subsection_label(index) == label


class TestSubmissionEntry:
    """Tests for SubmissionEntry."""

    def test_image_at_when_gap_then_none(self):
        entry = SubmissionEntry(image_answers=("data:image/png;base64,A", "", None))
        assert entry.image_at(0) == "data:image/png;base64,A"
        assert entry.image_at(1) is None
        assert entry.image_at(2) is None

    def test_image_at_when_out_of_range_then_none(self):
        entry = SubmissionEntry(image_answers=("data:image/png;base64,A",))
        assert entry.image_at(5) is None
        assert entry.image_at(-1) is None

    def test_image_count_ignores_gaps(self):
        entry = SubmissionEntry(image_answers=("x", "", None, "y"))
        assert entry.image_count == 2

    def test_is_empty(self):
        assert SubmissionEntry().is_empty
        assert SubmissionEntry(image_answers=("", None)).is_empty
        assert not SubmissionEntry(text_answer="hi").is_empty

    def test_from_dict_reads_editor_keys(self):
        entry = SubmissionEntry.from_dict({
            "textAnswer": "t",
            "imageAnswers": ["a", "", None],
            "aiReflective": "r",
        })
        assert entry == SubmissionEntry("t", ("a", None, None), "r")

    def test_to_dict_omits_absent_fields(self):
        assert SubmissionEntry(text_answer="t").to_dict() == {"textAnswer": "t"}

    def test_to_dict_writes_gaps_as_empty_strings(self):
        entry = SubmissionEntry(image_answers=("a", None))
        assert entry.to_dict() == {"imageAnswers": ["a", ""]}


class TestSubmissionData:
    """Tests for SubmissionData mapping."""

    def test_mapping_interface(self):
        data = SubmissionData({"p0": SubmissionEntry(text_answer="x")})
        assert "p0" in data
        assert data.get("p1") is None
        assert len(data) == 1
        assert list(data) == ["p0"]

    def test_is_read_only(self):
        data = SubmissionData()
        with pytest.raises(TypeError):
            data["p0"] = SubmissionEntry()  # type: ignore[index]

    def test_copy_is_independent_of_source_dict(self):
        source = {"p0": SubmissionEntry(text_answer="x")}
        data = SubmissionData(source)
        source["p1"] = SubmissionEntry()
        assert "p1" not in data

    def test_from_dict_tolerates_null_entries(self):
        data = SubmissionData.from_dict({"p0": None})
        assert data["p0"] == SubmissionEntry()


class TestBackupData:
    """Tests for BackupData."""

    def test_from_dict_defaults(self):
        backup = BackupData.from_dict({"submission_data": {}})
        assert backup.student_name == ""
        assert backup.version == "v3.0.0"
        assert len(backup.submission_data) == 0

    def test_to_dict_contains_export_fields(self, backup_data):
        backup = BackupData.from_dict(backup_data)
        d = backup.to_dict()

        assert d["student_name"] == "Ada Lovelace"
        assert d["student_id"] == "S1234567"
        assert d["submission_data"]["p1_s0"] == {"textAnswer": "It tends to $0$."}
        assert d["submission_data"]["p0"]["imageAnswers"][1] == ""
