"""
Module: mathtext.richtext

Purpose:
    Render a content string as an HTML fragment: plain segments escaped
    verbatim (whitespace and line breaks preserved), math segments through
    the span renderer. Block math is centred on its own line.

Key Functions:
    - render_rich_text_html(): Content string -> HTML fragment

Dependencies:
    - html (std)
    - mathtext.segmenter, mathtext.span

Used By:
    - output.html_renderer: Statements and answers on pages
"""

from __future__ import annotations

import html
from typing import Optional

from .segmenter import segment
from .span import MathSpanRenderer


def render_rich_text_html(content: Optional[str], renderer: MathSpanRenderer) -> str:
    """
    Render content with embedded math to an HTML fragment.

    Returns:
        HTML string; "" for empty or absent content
    """
    segments = segment(content)
    if not segments:
        return ""

    parts = []
    for seg in segments:
        if not seg.is_math:
            parts.append(f"<span>{html.escape(seg.text)}</span>")
            continue
        rendered = renderer.render(seg.text, seg.block).to_html()
        if seg.block:
            parts.append(
                f'<span class="math-block" style="display: block; margin: 1em 0; '
                f'text-align: center">{rendered}</span>'
            )
        else:
            parts.append(rendered)

    return (
        '<span class="rich-text" style="white-space: pre-wrap; overflow-wrap: break-word">'
        + "".join(parts)
        + "</span>"
    )
