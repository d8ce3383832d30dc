"""
Unit tests for the build controller.

Tests the load -> plan -> render pipeline and the metadata it writes.
"""

import json
from pathlib import Path

import pytest
from pypdf import PdfReader

from gradebridge.config import BuilderConfig
from gradebridge.controller import (
    BuildError,
    _write_metadata,
    build_document,
    prepare_plan,
)
from gradebridge.core.utils import LoaderError


class TestBuilderConfig:
    """Tests for BuilderConfig validation."""

    def test_defaults(self, tmp_path):
        config = BuilderConfig(assignment_path=tmp_path / "a.json")

        assert config.formats == ("html",)
        assert config.wants_html and not config.wants_pdf
        assert config.math_timeout == 30.0

    @pytest.mark.parametrize("kwargs, match", [
        ({"formats": ()}, "At least one output format"),
        ({"formats": ("docx",)}, "Unsupported output format"),
        ({"formats": ("pdf", "pdf")}, "Duplicate output formats"),
        ({"math_timeout": -1}, "math_timeout"),
    ])
    def test_invalid_config_raises(self, tmp_path, kwargs, match):
        with pytest.raises(ValueError, match=match):
            BuilderConfig(assignment_path=tmp_path / "a.json", **kwargs)


class TestPreparePlan:
    """Tests for prepare_plan()."""

    def test_identity_from_backup(self, assignment_file, backup_file):
        config = BuilderConfig(assignment_path=assignment_file, submission_path=backup_file)

        _, backup, plan = prepare_plan(config)

        assert backup.student_id == "S1234567"
        assert plan.pages[0].student_name == "Ada Lovelace"
        assert plan.page_count == 9

    def test_identity_overrides(self, assignment_file, backup_file):
        config = BuilderConfig(
            assignment_path=assignment_file,
            submission_path=backup_file,
            student_name="Grace Hopper",
            student_id="G1",
        )

        _, _, plan = prepare_plan(config)

        assert plan.pages[0].student_name == "Grace Hopper"
        assert plan.pages[1].header.student_id == "G1"

    def test_without_backup_all_slots_unsubmitted(self, assignment_file):
        _, _, plan = prepare_plan(BuilderConfig(assignment_path=assignment_file))

        assert not plan.pages[1].answer.submitted
        assert plan.pages[0].student_id == ""

    def test_missing_assignment_raises_build_error(self, tmp_path):
        config = BuilderConfig(assignment_path=tmp_path / "missing.json")

        with pytest.raises(BuildError, match="Failed to load assignment") as exc_info:
            prepare_plan(config)
        assert isinstance(exc_info.value.__cause__, LoaderError)

    def test_invalid_backup_raises_build_error(self, tmp_path, assignment_file):
        bad = tmp_path / "bad_backup.json"
        bad.write_text("[]", encoding="utf-8")
        config = BuilderConfig(assignment_path=assignment_file, submission_path=bad)

        with pytest.raises(BuildError, match="Failed to load submission"):
            prepare_plan(config)

    def test_unknown_backup_slots_are_logged(self, tmp_path, assignment_file, backup_data, caplog):
        backup_data["submission_data"]["p9"] = {"textAnswer": "orphan"}
        path = tmp_path / "backup.json"
        path.write_text(json.dumps(backup_data), encoding="utf-8")

        prepare_plan(BuilderConfig(assignment_path=assignment_file, submission_path=path))

        assert "unknown slots" in caplog.text
        assert "p9" in caplog.text


class TestBuildDocument:
    """Tests for build_document()."""

    def test_build_html_and_pdf(self, tmp_path, assignment_file, backup_file, ready_monitor):
        config = BuilderConfig(
            assignment_path=assignment_file,
            submission_path=backup_file,
            output_dir=tmp_path / "out",
            formats=("html", "pdf"),
        )

        result = build_document(config, monitor=ready_monitor)

        assert result.html_path == tmp_path / "out" / "math101_s1234567.html"
        assert result.pdf_path == tmp_path / "out" / "math101_s1234567.pdf"
        assert result.html_path.exists()
        assert result.pdf_path.exists()
        assert result.page_count == 9
        assert result.math_ready
        assert len(PdfReader(str(result.pdf_path)).pages) == result.page_count

        html = result.html_path.read_text(encoding="utf-8")
        assert html.count('<section class="page') == result.page_count
        assert '<math display="inline">x^2</math>' in html

    def test_build_when_backend_never_ready_then_fallback(
        self, tmp_path, assignment_file, absent_monitor
    ):
        config = BuilderConfig(
            assignment_path=assignment_file,
            output_dir=tmp_path,
            math_timeout=0.01,
        )

        result = build_document(config, monitor=absent_monitor)

        assert not result.math_ready
        assert any("Math backend unavailable" in w for w in result.warnings)
        html = result.html_path.read_text(encoding="utf-8")
        assert "$x^2$" in html
        assert "<math" not in html

    def test_build_when_math_disabled_then_source_text(self, tmp_path, assignment_file):
        config = BuilderConfig(assignment_path=assignment_file, output_dir=tmp_path, render_math=False)

        result = build_document(config)

        assert not result.math_ready
        assert result.warnings == ()
        assert "$x^2$" in result.html_path.read_text(encoding="utf-8")

    def test_build_pdf_only_skips_math_backend(self, tmp_path, assignment_file):
        config = BuilderConfig(assignment_path=assignment_file, output_dir=tmp_path, formats=("pdf",))

        result = build_document(config)

        assert result.html_path is None
        assert result.pdf_path.name == "math101_submission.pdf"
        assert not result.math_ready

    def test_build_writes_metadata(self, tmp_path, assignment_file, backup_file, ready_monitor):
        config = BuilderConfig(
            assignment_path=assignment_file,
            submission_path=backup_file,
            output_dir=tmp_path,
        )

        result = build_document(config, monitor=ready_monitor)

        metadata_path = tmp_path / "build_metadata.json"
        assert metadata_path.exists()
        saved = json.loads(metadata_path.read_text(encoding="utf-8"))
        assert saved == result.metadata
        assert saved["page_count"] == 9
        assert saved["course_code"] == "MATH101"
        assert saved["student_id"] == "S1234567"
        assert saved["slot_pages"] == {"p0": [2, 3, 4], "p1_s0": [6], "p1_s1": [7, 8], "p2": [9]}
        assert saved["submitted_slots"] == ["p0", "p1_s0", "p2"]
        assert saved["math_backend_ready"] is True
        assert saved["manifest"][0] == {"page": 1, "kind": "title", "slot_id": None, "subtitle": None}
        assert saved["manifest"][2]["subtitle"] == "Problem 1 (Image 2)"
        assert "builder_version" in saved
        assert "generated_at" in saved

    def test_build_default_output_dir_is_timestamped(
        self, tmp_path, assignment_file, monkeypatch
    ):
        monkeypatch.chdir(tmp_path)
        config = BuilderConfig(assignment_path=assignment_file, formats=("pdf",))

        result = build_document(config)

        assert result.output_dir.parent == Path("output") / "math101"
        assert result.output_dir.name.endswith("__submission")
        assert (tmp_path / result.pdf_path).exists()

    def test_build_when_pdf_font_missing_then_build_error(self, tmp_path, assignment_file):
        config = BuilderConfig(
            assignment_path=assignment_file,
            output_dir=tmp_path,
            formats=("pdf",),
            pdf_font=tmp_path / "missing.ttf",
        )

        with pytest.raises(BuildError, match="Cannot load font"):
            build_document(config)

    def test_build_when_assignment_invalid_then_build_error(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text(json.dumps({"assignment_title": "x"}), encoding="utf-8")

        with pytest.raises(BuildError):
            build_document(BuilderConfig(assignment_path=path, output_dir=tmp_path))


class TestWriteMetadata:
    """Tests for _write_metadata() helper."""

    def test_write_metadata_when_unserializable_then_build_error(self, tmp_path):
        with pytest.raises(BuildError, match="Failed to write metadata"):
            _write_metadata(tmp_path, {"bad": object()})

    def test_write_metadata_when_directory_missing_then_build_error(self, tmp_path):
        with pytest.raises(BuildError):
            _write_metadata(tmp_path / "missing", {"ok": 1})
