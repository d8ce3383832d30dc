"""
Module: output.html_renderer

Purpose:
    Render page descriptors to fixed-size HTML pages.
    Each page is an A4 box with margins; non-title pages get the header
    band. Statements and answers go through the rich text renderer, images
    are bounded to a maximum footprint, and the end-of-answer marker is
    pinned to the bottom of the content box.

Key Classes:
    - HtmlPageRenderer: Page descriptor -> HTML

Dependencies:
    - html (std): Escaping
    - layout: Page descriptors, PageConfig
    - mathtext: Rich text rendering

Used By:
    - gradebridge.controller: HTML export
"""

from __future__ import annotations

import html
import logging
from typing import Optional

from gradebridge import __version__
from gradebridge.core.models import SubmissionKind
from gradebridge.layout.config import PageConfig
from gradebridge.layout.models import (
    AnswerContent,
    ContentPage,
    DocumentPlan,
    OverflowImagePage,
    PageDescriptor,
    PageHeader,
    TitlePage,
)
from gradebridge.mathtext import MathSpanRenderer, render_rich_text_html

logger = logging.getLogger(__name__)

START_MARKER_TEXT = "Start of Answer"
END_MARKER_TEXT = "End of Answer"
NO_ANSWER_TEXT = "No answer submitted."
NO_IMAGE_TEXT = "No image submitted for this slot"
AI_REFLECTION_LABEL = "AI Reflection & Tools Used:"
FOOTER_TEXT = "Generated by GradeBridge Lite"

_PLACEHOLDER_STYLE = (
    "color: #9ca3af; font-style: italic; padding: 8mm; text-align: center; "
    "border: 2px dashed #d1d5db; border-radius: 4px"
)


def _esc(value: object) -> str:
    return html.escape(str(value), quote=True)


def _points(value: float) -> str:
    return f"{value:g}"


class HtmlPageRenderer:
    """
    Render page descriptors to HTML.

    Args:
        config: Page geometry
        text_renderer: Math span renderer for rich text (default monitor
            when omitted)

    Example:
        >>> renderer = HtmlPageRenderer(PageConfig(), MathSpanRenderer(monitor))
        >>> html_doc = renderer.render_document(plan, title="MATH101")
    """

    def __init__(
        self,
        config: Optional[PageConfig] = None,
        text_renderer: Optional[MathSpanRenderer] = None,
    ) -> None:
        self.config = config or PageConfig()
        self.text_renderer = text_renderer or MathSpanRenderer()

    # ─────────────────────────────────────────────────────────────────────────
    # Document
    # ─────────────────────────────────────────────────────────────────────────

    def render_document(self, plan: DocumentPlan, *, title: str = "Submission") -> str:
        """Render every page into one standalone HTML document."""
        body = "\n".join(self.render_page(page) for page in plan.pages)
        logger.info(f"Rendered {plan.page_count} HTML pages")
        return (
            "<!doctype html>\n"
            '<html lang="en">\n<head>\n<meta charset="utf-8" />\n'
            f"<title>{_esc(title)}</title>\n"
            f'<meta name="generator" content="GradeBridge {_esc(__version__)}" />\n'
            f"<style>{self._stylesheet()}</style>\n"
            f'</head>\n<body>\n<div id="pdf-content">\n{body}\n</div>\n</body>\n</html>\n'
        )

    def _stylesheet(self) -> str:
        c = self.config
        return (
            "@page { size: %smm %smm; margin: 0 } "
            "body { margin: 0; background: #f3f4f6; font-family: Helvetica, Arial, sans-serif } "
            ".page { width: %smm; height: %smm; padding: %smm %smm %smm %smm; box-sizing: border-box; "
            "margin: 0 auto; background: white; color: black; display: flex; flex-direction: column; "
            "position: relative; overflow: hidden } "
            ".page-break { break-before: page; page-break-before: always } "
            ".page-body { flex: 1; display: flex; flex-direction: column; min-height: 0 } "
            ".page-content { flex: 1 1 auto; display: flex; flex-direction: column; min-height: 0; overflow: hidden } "
            ".end-marker { margin-top: auto }"
        ) % (
            c.page_width_mm, c.page_height_mm,
            c.page_width_mm, c.page_height_mm,
            c.margin_top_mm, c.margin_right_mm, c.margin_bottom_mm, c.margin_left_mm,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Pages
    # ─────────────────────────────────────────────────────────────────────────

    def render_page(self, page: PageDescriptor) -> str:
        """Render one page descriptor to a ``<section class="page">``."""
        if isinstance(page, TitlePage):
            return self._title_page(page)
        if isinstance(page, ContentPage):
            body = self._content_body(page)
            return self._page(page.header, body, page.kind.value, page.has_trailing_answer_marker)
        if isinstance(page, OverflowImagePage):
            body = self._overflow_body(page)
            return self._page(page.header, body, page.kind.value, page.is_last_overflow)
        raise TypeError(f"Unknown page descriptor: {type(page).__name__}")

    def _page(self, header: PageHeader, body: str, kind: str, end_marker: bool = False) -> str:
        """
        Wrap a page body. Content goes in a clipped ``.page-content`` box;
        the end marker sits after it so overlong content cannot push the
        marker off the page.
        """
        marker = self._end_marker() if end_marker else ""
        return (
            f'<section class="page page-break" data-kind="{kind}">'
            f"{self._header(header)}"
            f'<div class="page-body"><div class="page-content">{body}</div>{marker}</div>'
            "</section>"
        )

    def _header(self, header: PageHeader) -> str:
        return (
            '<div class="page-header" style="display: flex; justify-content: space-between; '
            'align-items: flex-end; border-bottom: 4px solid #111827; padding-bottom: 4mm; '
            'margin-bottom: 6mm; flex: none">'
            '<div style="display: flex; flex-direction: column">'
            f'<span style="font-size: 14pt; font-weight: bold; text-transform: uppercase">ID: {_esc(header.student_id)}</span>'
            f'<span style="font-size: 11pt; color: #374151">{_esc(header.student_name)}</span>'
            "</div>"
            '<div style="text-align: right">'
            f'<div style="font-size: 13pt; font-weight: bold; text-transform: uppercase">{_esc(header.title)}</div>'
            f'<div style="font-size: 10pt; color: #4b5563">{_esc(header.subtitle)}</div>'
            "</div></div>"
        )

    def _title_page(self, page: TitlePage) -> str:
        rows = [
            ("Student Name", page.student_name),
            ("Student ID", page.student_id),
            ("Total Points", _points(page.total_points)),
        ]
        grid = "".join(
            '<div style="display: grid; grid-template-columns: 50mm 1fr; gap: 4mm; margin: 3mm 0">'
            f'<span style="font-weight: bold; color: #4b5563; text-transform: uppercase">{_esc(k)}</span>'
            f'<span style="font-weight: bold; border-bottom: 2px solid #d1d5db">{_esc(v)}</span>'
            "</div>"
            for k, v in rows
        )
        course_name = (
            f'<div style="font-size: 14pt; color: #374151; margin-bottom: 6mm">{_esc(page.course_name)}</div>'
            if page.course_name else ""
        )
        preamble = (
            '<div class="preamble" style="margin-top: 10mm; text-align: left; font-size: 11pt">'
            f"{render_rich_text_html(page.preamble, self.text_renderer)}</div>"
            if page.preamble else ""
        )
        return (
            '<section class="page" data-kind="title">'
            '<div class="page-body" style="justify-content: center; align-items: center">'
            '<div style="width: 100%; padding: 10mm; border: 8px double #111827; background: #f9fafb; '
            'text-align: center; box-sizing: border-box">'
            f'<h1 style="font-size: 36pt; margin: 0 0 6mm; letter-spacing: 0.1em; text-transform: uppercase">{_esc(page.course_code)}</h1>'
            f'<h2 style="font-size: 24pt; margin: 0 0 6mm; font-family: Georgia, serif">{_esc(page.assignment_title)}</h2>'
            f"{course_name}"
            '<div style="width: 48mm; height: 2mm; background: black; margin: 0 auto 10mm"></div>'
            f'<div style="display: inline-block; text-align: left; font-size: 16pt">{grid}</div>'
            f"{preamble}"
            "</div></div>"
            f'<div style="position: absolute; bottom: 10mm; left: 0; right: 0; text-align: center; '
            f'font-size: 9pt; color: #9ca3af; font-family: monospace">{FOOTER_TEXT}</div>'
            "</section>"
        )

    def _content_body(self, page: ContentPage) -> str:
        cfg = self.config
        parts = [
            '<div style="display: flex; justify-content: space-between; align-items: baseline; '
            'border-bottom: 2px solid #f3f4f6; padding-bottom: 2mm; margin-bottom: 4mm; flex: none">'
            f'<h3 style="font-size: 18pt; margin: 0">{_esc(page.heading)}</h3>'
            f'<span style="font-weight: bold; color: #4b5563">{_points(page.points)} Points</span>'
            "</div>",
            '<div class="statement" style="font-family: Georgia, serif; font-size: 12pt; '
            'line-height: 1.5; margin-bottom: 6mm; flex: none">'
            f"{render_rich_text_html(page.statement, self.text_renderer)}</div>",
        ]

        if page.problem_image is not None:
            max_h = cfg.statement_image_max_mm if page.is_statement_only else cfg.problem_image_max_mm
            parts.append(
                '<div style="text-align: center; margin-bottom: 6mm; flex: none">'
                f"{self._img(page.problem_image.data_uri, max_h, 'Problem Diagram')}</div>"
            )

        if page.has_leading_answer_marker:
            parts.append(self._start_marker())
        if page.answer is not None:
            parts.append(f'<div class="answer" style="flex: none">{self._answer(page.answer)}</div>')
        return "".join(parts)

    def _overflow_body(self, page: OverflowImagePage) -> str:
        label = (
            '<div style="font-size: 9pt; color: #6b7280; font-weight: bold; text-transform: uppercase; '
            f'margin-bottom: 2mm; flex: none">Image {page.image_number} of {page.total_images}</div>'
        )
        if page.image:
            content = self._img(
                page.image, self.config.overflow_image_max_mm, f"Student work {page.image_number}"
            )
        else:
            content = self._placeholder(NO_IMAGE_TEXT)
        return (
            f'{label}<div style="flex: 1; display: flex; align-items: flex-start; '
            f'justify-content: center; min-height: 0">{content}</div>'
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Pieces
    # ─────────────────────────────────────────────────────────────────────────

    def _answer(self, answer: AnswerContent) -> str:
        if not answer.submitted:
            return self._placeholder(NO_ANSWER_TEXT)

        parts = []
        for kind in answer.elements:
            if kind is SubmissionKind.TEXT and answer.text_answer:
                parts.append(
                    '<div class="text-answer" style="font-family: Georgia, serif; font-size: 12pt; '
                    f'line-height: 1.6">{render_rich_text_html(answer.text_answer, self.text_renderer)}</div>'
                )
            elif kind is SubmissionKind.IMAGE:
                label = (
                    '<div style="font-size: 8pt; color: #6b7280; font-weight: bold; '
                    f'text-transform: uppercase; margin-bottom: 1mm">Image 1 of {answer.image_total}</div>'
                )
                if answer.first_image:
                    img = self._img(answer.first_image, self.config.answer_image_max_mm, "Student work")
                else:
                    img = self._placeholder(NO_IMAGE_TEXT)
                parts.append(f'<div class="image-answer" style="text-align: center">{label}{img}</div>')
            elif kind is SubmissionKind.AI_REFLECTIVE and answer.ai_reflective:
                parts.append(
                    '<div class="ai-reflection" style="font-size: 10pt">'
                    '<strong style="display: block; text-transform: uppercase; color: #374151; '
                    f'margin-bottom: 2mm">{_esc(AI_REFLECTION_LABEL)}</strong>'
                    f"{render_rich_text_html(answer.ai_reflective, self.text_renderer)}</div>"
                )
        return '<div style="display: flex; flex-direction: column; gap: 6mm">' + "".join(parts) + "</div>"

    def _img(self, src: str, max_height_mm: float, alt: str) -> str:
        if not src.startswith("data:image/"):
            logger.warning("Skipping image with unsupported source (expected data:image/ URI)")
            return self._placeholder(NO_IMAGE_TEXT)
        return (
            f'<img src="{_esc(src)}" alt="{_esc(alt)}" style="max-width: 100%; '
            f'max-height: {max_height_mm:g}mm; object-fit: contain; border: 1px solid #1f2937" />'
        )

    @staticmethod
    def _placeholder(text: str) -> str:
        return f'<div class="placeholder" style="{_PLACEHOLDER_STYLE}">{_esc(text)}</div>'

    @staticmethod
    def _start_marker() -> str:
        return (
            '<div class="start-marker" style="margin: 2mm 0 4mm; padding-top: 2mm; '
            "border-top: 2px solid #fecaca; color: #b91c1c; font-size: 9pt; font-weight: bold; "
            f'letter-spacing: 0.1em; text-transform: uppercase; flex: none">{START_MARKER_TEXT}</div>'
        )

    @staticmethod
    def _end_marker() -> str:
        return (
            '<div class="end-marker" style="margin-top: auto; padding-top: 8mm; padding-bottom: 2mm; '
            "border-bottom: 2px solid #bfdbfe; color: #1d4ed8; font-size: 9pt; font-weight: bold; "
            f'letter-spacing: 0.1em; text-transform: uppercase; flex: none">{END_MARKER_TEXT}</div>'
        )
