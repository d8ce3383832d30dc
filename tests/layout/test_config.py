"""
Unit Tests for PageConfig
"""

import pytest

from gradebridge.layout.config import MM_TO_PT, PageConfig, mm_to_pt


class TestPageConfig:
    """Tests for PageConfig defaults and validation."""

    def test_defaults_are_a4(self):
        config = PageConfig()

        assert config.page_width_mm == 210.0
        assert config.page_height_mm == 297.0
        assert config.content_width_mm == 170.0
        assert config.content_height_mm == 267.0
        assert config.body_height_mm == 245.0

    def test_image_caps(self):
        config = PageConfig()

        assert config.answer_image_max_mm == 140.0
        assert config.overflow_image_max_mm == 240.0
        assert config.problem_image_max_mm == 120.0
        assert config.statement_image_max_mm == 160.0

    def test_init_when_margins_exceed_width_then_raises(self):
        with pytest.raises(ValueError, match="Margins exceed page width"):
            PageConfig(margin_left_mm=110, margin_right_mm=110)

    def test_init_when_header_exceeds_height_then_raises(self):
        with pytest.raises(ValueError, match="exceed page height"):
            PageConfig(header_height_mm=300)

    def test_init_when_non_positive_image_cap_then_raises(self):
        with pytest.raises(ValueError, match="overflow_image_max_mm"):
            PageConfig(overflow_image_max_mm=0)

    def test_is_immutable(self):
        config = PageConfig()
        with pytest.raises(AttributeError):
            config.page_width_mm = 100  # type: ignore[misc]


def test_mm_to_pt_a4_width():
    assert mm_to_pt(210) == pytest.approx(595.276, abs=0.01)
    assert mm_to_pt(25.4) == pytest.approx(72.0)
    assert MM_TO_PT == pytest.approx(2.8346, abs=1e-4)
