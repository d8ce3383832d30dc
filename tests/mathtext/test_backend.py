"""
Unit Tests for Math Backends and the Backend Registry
"""

import pytest

from gradebridge.mathtext.backend import (
    Latex2MathMLBackend,
    MathBackend,
    error_marker,
    install_backend,
    installed_backend,
    load_default_backend,
    uninstall_backend,
)


@pytest.fixture(autouse=True)
def clean_registry():
    uninstall_backend()
    yield
    uninstall_backend()


class TestLatex2MathMLBackend:
    """Tests for the latex2mathml backend."""

    def test_render_inline_returns_mathml(self):
        markup = Latex2MathMLBackend().render("x^2", display_mode=False)

        assert markup.startswith("<math")
        assert 'display="inline"' in markup

    def test_render_block_sets_display(self):
        markup = Latex2MathMLBackend().render("\\frac{a}{b}", display_mode=True)
        assert 'display="block"' in markup

    def test_is_math_backend(self):
        assert isinstance(Latex2MathMLBackend(), MathBackend)

    def test_render_when_conversion_fails_then_error_marker(self, monkeypatch):
        def explode(expression, display):
            raise ValueError("bad")

        monkeypatch.setattr("gradebridge.mathtext.backend.latex2mathml_convert", explode)

        markup = Latex2MathMLBackend().render("\\oops", display_mode=False)

        assert 'class="math-error"' in markup
        assert "\\oops" in markup

    def test_render_when_throw_on_error_then_raises(self, monkeypatch):
        def explode(expression, display):
            raise ValueError("bad")

        monkeypatch.setattr("gradebridge.mathtext.backend.latex2mathml_convert", explode)

        with pytest.raises(ValueError):
            Latex2MathMLBackend().render("\\oops", display_mode=False, throw_on_error=True)


class TestErrorMarker:
    def test_escapes_expression_and_message(self):
        markup = error_marker("<x>", 'say "no"')

        assert "&lt;x&gt;" in markup
        assert "&quot;no&quot;" in markup


class TestRegistry:
    """Tests for install/uninstall/load."""

    def test_install_then_installed(self, fake_backend):
        assert installed_backend() is None
        install_backend(fake_backend)
        assert installed_backend() is fake_backend

    def test_uninstall_clears(self, fake_backend):
        install_backend(fake_backend)
        uninstall_backend()
        assert installed_backend() is None

    def test_load_default_backend_installs_latex2mathml(self):
        assert load_default_backend() is None
        assert isinstance(installed_backend(), Latex2MathMLBackend)

    def test_load_default_backend_in_background(self):
        thread = load_default_backend(background=True)

        assert thread is not None
        thread.join(5.0)
        assert isinstance(installed_backend(), Latex2MathMLBackend)
