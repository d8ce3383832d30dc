"""
Module: mathtext

Purpose:
    Math-aware text rendering. Content strings are split into plain and
    math segments; math goes to an external backend when it is available
    and otherwise falls back to the original text with delimiters intact.

Key Functions:
    - segment(): Split content into Segments
    - render_rich_text_html(): Content -> HTML fragment
    - default_monitor(): Process-wide backend availability monitor
    - load_default_backend(): Install the latex2mathml backend

Key Classes:
    - BackendMonitor: Readiness flag + subscriptions
    - MathSpanRenderer: One expression -> RenderedSpan

Dependencies:
    - latex2mathml: Default backend

Used By:
    - gradebridge.output: Page rendering
"""

from .backend import (
    Latex2MathMLBackend,
    MathBackend,
    install_backend,
    installed_backend,
    load_default_backend,
    uninstall_backend,
)
from .richtext import render_rich_text_html
from .monitor import BackendMonitor, ManualScheduler, ThreadingScheduler, default_monitor
from .segmenter import Segment, SegmentKind, segment
from .span import MathSpanRenderer, MathSpanView, RenderedSpan, strip_delimiters

__all__ = [
    # Backends
    "MathBackend",
    "Latex2MathMLBackend",
    "install_backend",
    "installed_backend",
    "uninstall_backend",
    "load_default_backend",
    # Monitor
    "BackendMonitor",
    "ManualScheduler",
    "ThreadingScheduler",
    "default_monitor",
    # Segmentation
    "Segment",
    "SegmentKind",
    "segment",
    # Rendering
    "MathSpanRenderer",
    "MathSpanView",
    "RenderedSpan",
    "strip_delimiters",
    "render_rich_text_html",
]
