"""
Unit Tests for the Math Span Renderer

Covers delimiter stripping, fallback display, error containment,
idempotence and live re-rendering on readiness.
"""

from unittest.mock import MagicMock

import pytest

from gradebridge.mathtext.monitor import BackendMonitor
from gradebridge.mathtext.span import MathSpanRenderer, MathSpanView, RenderedSpan, strip_delimiters


class TestStripDelimiters:
    """Tests for strip_delimiters()."""

    @pytest.mark.parametrize("expression, block, expected", [
        ("$x$", False, "x"),
        ("$$x$$", True, "x"),
        ("$$x$$", False, "$x$"),
        ("$x$", True, "$x$"),
        ("x", False, "x"),
        ("$x", False, "$x"),
        ("$", False, "$"),
        ("$$", False, ""),
        ("$$$", True, "$$$"),
    ])
    def test_strip_exactly_one_matching_pair(self, expression, block, expected):
        assert strip_delimiters(expression, block) == expected


class TestRenderedSpan:
    """Tests for RenderedSpan."""

    def test_fallback_keeps_original_with_delimiters(self):
        span = RenderedSpan("$x<y$", False, None)

        assert not span.is_rendered
        assert span.fallback_text == "$x<y$"
        html = span.to_html()
        assert 'class="math-fallback"' in html
        assert "monospace" in html
        assert "$x&lt;y$" in html

    def test_rendered_markup_used_as_is(self):
        span = RenderedSpan("$x$", False, "<math>x</math>")
        assert span.to_html() == "<math>x</math>"


class TestMathSpanRenderer:
    """Tests for MathSpanRenderer."""

    def test_render_when_not_ready_then_fallback(self, fallback_renderer):
        span = fallback_renderer.render("$x^2$")

        assert span.markup is None
        assert span.fallback_text == "$x^2$"

    def test_render_when_ready_then_bare_expression_sent(self, ready_renderer, fake_backend):
        span = ready_renderer.render("$$x^2$$", block=True)

        assert span.is_rendered
        assert fake_backend.calls == [("x^2", True, False)]
        assert span.markup == '<math display="block">x^2</math>'

    def test_render_inline_only_strips_single_dollars(self, ready_renderer, fake_backend):
        ready_renderer.render("$x$", block=False)
        assert fake_backend.calls[-1][0] == "x"

    def test_render_when_backend_raises_then_fallback(self, fake_backend, ready_monitor):
        fake_backend.fail_on.add("\\bad")
        renderer = MathSpanRenderer(ready_monitor)

        span = renderer.render("$\\bad$")

        assert span.markup is None
        assert span.to_html().endswith("$\\bad$</span>")

    def test_render_when_backend_returns_empty_then_fallback(self, scheduler):
        backend = MagicMock()
        backend.render.return_value = ""
        renderer = MathSpanRenderer(BackendMonitor(lambda: backend, scheduler=scheduler))

        assert renderer.render("$x$").markup is None

    def test_render_is_idempotent(self, ready_renderer, fake_backend):
        first = ready_renderer.render("$x$")
        second = ready_renderer.render("$x$")

        assert first == second
        assert len(fake_backend.calls) == 1

    def test_render_when_readiness_changes_then_rerenders(self, fake_backend, scheduler):
        present = []
        monitor = BackendMonitor(lambda: present[0] if present else None, scheduler=scheduler)
        renderer = MathSpanRenderer(monitor)

        assert not renderer.render("$x$").is_rendered

        present.append(fake_backend)
        scheduler.advance(0.1)

        assert renderer.render("$x$").is_rendered


class TestMathSpanView:
    """Tests for MathSpanView."""

    def test_view_rerenders_when_backend_becomes_ready(self, fake_backend, scheduler):
        present = []
        monitor = BackendMonitor(lambda: present[0] if present else None, scheduler=scheduler)
        on_change = MagicMock()

        view = MathSpanView(MathSpanRenderer(monitor), "$x$", on_change=on_change)
        assert not view.span.is_rendered
        assert monitor.subscriber_count == 1

        present.append(fake_backend)
        scheduler.advance(0.1)

        assert view.span.is_rendered
        on_change.assert_called_once_with(view.span)

    def test_view_when_ready_then_no_subscription(self, ready_renderer):
        view = MathSpanView(ready_renderer, "$x$")

        assert view.span.is_rendered
        assert ready_renderer.monitor.subscriber_count == 0

    def test_close_releases_subscription(self, fallback_renderer):
        with MathSpanView(fallback_renderer, "$x$"):
            assert fallback_renderer.monitor.subscriber_count == 1
        assert fallback_renderer.monitor.subscriber_count == 0

    def test_update_when_expression_changes_then_notifies(self, ready_renderer):
        on_change = MagicMock()
        view = MathSpanView(ready_renderer, "$x$", on_change=on_change)

        view.update("$y$")
        view.update("$y$")  # unchanged: no second call

        assert on_change.call_count == 1
        assert view.span.expression == "$y$"

    def test_update_when_block_flag_changes_then_rerenders(self, ready_renderer, fake_backend):
        view = MathSpanView(ready_renderer, "$$x$$", block=False)

        span = view.update("$$x$$", block=True)

        assert span.block
        assert fake_backend.calls[-1] == ("x", True, False)
