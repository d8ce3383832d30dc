"""
Module: mathtext.span

Purpose:
    Render one delimited math expression ("$...$" inline, "$$...$$" block)
    to backend markup, or report that no markup exists so the caller shows
    the original text, delimiters intact, in monospace.

Key Classes:
    - RenderedSpan: Result of rendering one expression
    - MathSpanRenderer: Stateless renderer gated on backend readiness
    - MathSpanView: Live span that re-renders when readiness changes

Dependencies:
    - html (std): Escaping fallback text
    - mathtext.monitor: Backend readiness

Used By:
    - mathtext.richtext: Rich text rendering
    - output.html_renderer: Page rendering
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .monitor import BackendMonitor, default_monitor

logger = logging.getLogger(__name__)

INLINE_DELIMITER = "$"
BLOCK_DELIMITER = "$$"

_CACHE_LIMIT = 2048


@dataclass(frozen=True, slots=True)
class RenderedSpan:
    """
    Outcome of rendering one math expression.

    Attributes:
        expression: Original expression WITH delimiters
        block: Display (block) mode flag
        markup: Trusted backend markup, or None when unrendered
    """
    expression: str
    block: bool
    markup: Optional[str] = None

    @property
    def is_rendered(self) -> bool:
        return self.markup is not None

    @property
    def fallback_text(self) -> str:
        """Text shown when unrendered: the original, delimiters included."""
        return self.expression

    def to_html(self) -> str:
        """Markup as-is when rendered, otherwise escaped monospace fallback."""
        if self.markup is not None:
            return self.markup
        return (
            '<span class="math-fallback" style="font-family: monospace; color: #6b7280">'
            f"{html.escape(self.expression)}</span>"
        )


def strip_delimiters(expression: str, block: bool) -> str:
    """
    Strip exactly one delimiter pair matching the block flag.

    The expression is returned unchanged if it is not wrapped in the
    expected delimiters.

    Example:
        >>> strip_delimiters("$$x$$", block=True)
        'x'
        >>> strip_delimiters("$$x$$", block=False)
        '$x$'
    """
    delim = BLOCK_DELIMITER if block else INLINE_DELIMITER
    width = len(delim)
    if len(expression) >= 2 * width and expression.startswith(delim) and expression.endswith(delim):
        return expression[width:-width]
    return expression


class MathSpanRenderer:
    """
    Render delimited math expressions through the monitored backend.

    Rendering with identical inputs (expression, block flag, backend
    readiness) always yields an equal RenderedSpan.

    Example:
        >>> renderer = MathSpanRenderer(monitor)
        >>> renderer.render("$x^2$").fallback_text
        '$x^2$'
    """

    def __init__(self, monitor: Optional[BackendMonitor] = None) -> None:
        self._monitor = monitor if monitor is not None else default_monitor()
        self._cache: Dict[Tuple[int, str, bool], RenderedSpan] = {}

    @property
    def monitor(self) -> BackendMonitor:
        return self._monitor

    def render(self, expression: str, block: bool = False) -> RenderedSpan:
        """
        Render one expression including its delimiters.

        Returns:
            RenderedSpan; ``markup`` is None if the backend is not ready
            or failed on this expression
        """
        if not self._monitor.ready():
            return RenderedSpan(expression, block, None)

        backend = self._monitor.backend()
        if backend is None:
            return RenderedSpan(expression, block, None)

        key = (id(backend), expression, block)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        bare = strip_delimiters(expression, block)
        try:
            markup = backend.render(bare, display_mode=block, throw_on_error=False)
            if not isinstance(markup, str) or not markup:
                logger.warning(f"Math backend returned no markup for {expression!r}")
                markup = None
        except Exception as e:
            logger.warning(f"Math render failed for {expression!r}: {e}")
            markup = None

        span = RenderedSpan(expression, block, markup)
        if len(self._cache) >= _CACHE_LIMIT:
            self._cache.clear()
        self._cache[key] = span
        return span


class MathSpanView:
    """
    Live rendering of one expression for the interactive view.

    Re-renders when the expression, the block flag or backend readiness
    changes and reports the new span through ``on_change``. Call
    ``close()`` (or use as a context manager) on teardown so the monitor
    stops holding the subscription.
    """

    def __init__(
        self,
        renderer: MathSpanRenderer,
        expression: str,
        block: bool = False,
        on_change: Optional[Callable[[RenderedSpan], None]] = None,
    ) -> None:
        self._renderer = renderer
        self._expression = expression
        self._block = block
        self._on_change = on_change
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._span = renderer.render(expression, block)
        if not self._span.is_rendered and not renderer.monitor.ready():
            self._unsubscribe = renderer.monitor.on_ready(self._refresh)

    @property
    def span(self) -> RenderedSpan:
        return self._span

    def update(self, expression: str, block: Optional[bool] = None) -> RenderedSpan:
        """Change the expression (and optionally the block flag)."""
        new_block = self._block if block is None else block
        if expression != self._expression or new_block != self._block:
            self._expression = expression
            self._block = new_block
            self._refresh()
        return self._span

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> MathSpanView:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _refresh(self) -> None:
        span = self._renderer.render(self._expression, self._block)
        changed = span != self._span
        self._span = span
        if changed and self._on_change is not None:
            self._on_change(span)
