"""
Module: output

Purpose:
    Draw planned pages. HTML is the primary print surface (math rendered
    as MathML when the backend is ready); PDF export goes through ReportLab.

Key Functions:
    - render_to_pdf(): DocumentPlan -> PDF file
    - decode_data_uri(): Data URI -> PIL Image
    - detect_unicode_fonts(): Pick PDF fonts covering non-Latin symbols

Key Classes:
    - HtmlPageRenderer: DocumentPlan -> HTML document
"""

from .html_renderer import (
    AI_REFLECTION_LABEL,
    END_MARKER_TEXT,
    FOOTER_TEXT,
    NO_ANSWER_TEXT,
    NO_IMAGE_TEXT,
    START_MARKER_TEXT,
    HtmlPageRenderer,
)
from .images import ImageDecodeError, decode_data_uri, fit_within
from .pdf_renderer import FontError, PdfFonts, detect_unicode_fonts, render_to_pdf

__all__ = [
    "HtmlPageRenderer",
    "render_to_pdf",
    "PdfFonts",
    "FontError",
    "detect_unicode_fonts",
    "ImageDecodeError",
    "decode_data_uri",
    "fit_within",
    "START_MARKER_TEXT",
    "END_MARKER_TEXT",
    "NO_ANSWER_TEXT",
    "NO_IMAGE_TEXT",
    "AI_REFLECTION_LABEL",
    "FOOTER_TEXT",
]
