"""
Module: mathtext.backend

Purpose:
    Math typesetting backend contract and the process-wide registry that
    consumers probe to find out whether a backend has been installed.

    Backends take a bare expression (no delimiters) and return trusted
    markup. In non-throwing mode malformed input yields an inline error
    marker rather than an exception.

Key Functions:
    - install_backend(): Publish a backend in the registry
    - installed_backend(): Probe the registry (None until installed)
    - load_default_backend(): Install the latex2mathml backend

Key Classes:
    - MathBackend: Protocol every backend satisfies
    - Latex2MathMLBackend: MathML output via latex2mathml

Dependencies:
    - latex2mathml: LaTeX to MathML conversion
    - threading (std): Background install

Used By:
    - mathtext.monitor: Readiness probe
    - mathtext.span: Rendering
"""

from __future__ import annotations

import html
import logging
import threading
from typing import Optional, Protocol, runtime_checkable

from latex2mathml.converter import convert as latex2mathml_convert

logger = logging.getLogger(__name__)


@runtime_checkable
class MathBackend(Protocol):
    """Renders one bare math expression to trusted markup."""

    def render(self, expression: str, *, display_mode: bool, throw_on_error: bool = False) -> str:
        ...


class Latex2MathMLBackend:
    """
    Backend producing MathML through latex2mathml.

    Example:
        >>> backend = Latex2MathMLBackend()
        >>> backend.render("x^2", display_mode=False).startswith("<math")
        True
    """

    name = "latex2mathml"

    def render(self, expression: str, *, display_mode: bool, throw_on_error: bool = False) -> str:
        display = "block" if display_mode else "inline"
        try:
            return latex2mathml_convert(expression, display=display)
        except Exception as e:
            if throw_on_error:
                raise
            logger.debug(f"latex2mathml could not convert {expression!r}: {e}")
            return error_marker(expression, str(e))


def error_marker(expression: str, message: str) -> str:
    """Inline marker shown in place of an expression the backend rejected."""
    return (
        f'<span class="math-error" title="{html.escape(message, quote=True)}" '
        f'style="color: #cc0000">{html.escape(expression)}</span>'
    )


# ─────────────────────────────────────────────────────────────────────────────
# Registry
# ─────────────────────────────────────────────────────────────────────────────

_installed: Optional[MathBackend] = None
_registry_lock = threading.Lock()


def install_backend(backend: MathBackend) -> None:
    """Publish a backend; monitors probing the registry will detect it."""
    global _installed
    with _registry_lock:
        _installed = backend
    logger.info(f"Math backend installed: {getattr(backend, 'name', type(backend).__name__)}")


def uninstall_backend() -> None:
    """Remove the published backend (monitors that already saw it keep it)."""
    global _installed
    with _registry_lock:
        _installed = None


def installed_backend() -> Optional[MathBackend]:
    """Return the published backend, or None if none is installed yet."""
    with _registry_lock:
        return _installed


def load_default_backend(*, background: bool = False) -> Optional[threading.Thread]:
    """
    Install the latex2mathml backend.

    Args:
        background: Install from a daemon thread (returns the thread)

    Returns:
        The loader thread when background=True, else None
    """
    if not background:
        install_backend(Latex2MathMLBackend())
        return None

    thread = threading.Thread(
        target=lambda: install_backend(Latex2MathMLBackend()),
        name="math-backend-loader",
        daemon=True,
    )
    thread.start()
    return thread
