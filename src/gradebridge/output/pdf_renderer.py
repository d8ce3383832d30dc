"""
Module: output.pdf_renderer

Purpose:
    Render a DocumentPlan to PDF using ReportLab.
    Each page descriptor becomes exactly one PDF page, so the PDF page
    count always equals the plan's page count.

    Text is drawn from segmenter output: plain segments in the body font,
    math segments as their original delimited text in the math font (the
    PDF surface has no markup math backend). Content that does not fit the
    fixed page is clipped at the content box, never spilled onto a new
    page. The end-of-answer marker is pinned to the content box bottom and
    content is kept above its band.

    The standard Type1 fonts only cover Latin-1. When a DejaVu TTF is
    installed it is registered and used instead so symbols such as
    Greek letters and blackboard bold print correctly.

Key Functions:
    - render_to_pdf(): Main rendering function
    - detect_unicode_fonts(): Find and register a Unicode TTF family

Key Classes:
    - PdfFonts: Font names used for each role on the page
    - FontError: A TTF could not be loaded

Dependencies:
    - reportlab: PDF generation, TTF registration
    - PIL: Image decoding (via output.images)
    - mathtext.segmenter: Text segmentation

Used By:
    - gradebridge.controller: PDF export
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from gradebridge.core.models import SubmissionKind
from gradebridge.layout.config import PageConfig, mm_to_pt
from gradebridge.layout.models import (
    AnswerContent,
    ContentPage,
    DocumentPlan,
    OverflowImagePage,
    PageDescriptor,
    PageHeader,
    TitlePage,
)
from gradebridge.mathtext.segmenter import segment

from .html_renderer import (
    AI_REFLECTION_LABEL,
    END_MARKER_TEXT,
    FOOTER_TEXT,
    NO_ANSWER_TEXT,
    NO_IMAGE_TEXT,
    START_MARKER_TEXT,
)
from .images import ImageDecodeError, decode_data_uri, fit_within

logger = logging.getLogger(__name__)

# Constants
PX_TO_PT = 0.75  # CSS pixel (1/96 inch) to point

TEXT_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
MATH_FONT = "Courier"
FOOTER_FONT_SIZE = 7
END_MARKER_BAND = 30  # points above the bottom margin kept for the end marker

UNICODE_FONT_DIRS = (
    "/usr/share/fonts/truetype/dejavu",
    "/usr/share/fonts/TTF",
    "/usr/share/fonts/dejavu",
    "/usr/local/share/fonts",
)

_TOKEN_RE = re.compile(r"\S+|\s+")

Run = Tuple[str, str]  # (text, font)


class FontError(Exception):
    """A TrueType font could not be loaded."""
    pass


@dataclass(frozen=True)
class PdfFonts:
    """
    Registered font names for each role on the page.

    Defaults are the standard Type1 fonts, which need no registration.
    """
    regular: str = TEXT_FONT
    bold: str = BOLD_FONT
    oblique: str = "Helvetica-Oblique"
    title: str = "Times-Bold"
    math: str = MATH_FONT

    @classmethod
    def from_ttf(
        cls,
        regular_path: Union[str, Path],
        bold_path: Optional[Union[str, Path]] = None,
        math_path: Optional[Union[str, Path]] = None,
    ) -> "PdfFonts":
        """
        Register TTF files and use them for every role.

        Missing bold / math faces fall back to the regular face.

        Raises:
            FontError: If a font file cannot be loaded
        """
        regular = register_ttf(regular_path)
        bold = register_ttf(bold_path) if bold_path else regular
        math = register_ttf(math_path) if math_path else regular
        return cls(regular=regular, bold=bold, oblique=regular, title=bold, math=math)


def register_ttf(path: Union[str, Path]) -> str:
    """
    Register a TrueType font with ReportLab and return its font name.

    Registering the same file twice is a no-op.

    Raises:
        FontError: If the file is missing or not a usable TTF
    """
    path = Path(path)
    name = f"GradeBridge-{path.stem}"
    if name in pdfmetrics.getRegisteredFontNames():
        return name
    try:
        pdfmetrics.registerFont(TTFont(name, str(path)))
    except (OSError, TTFError) as e:
        raise FontError(f"Cannot load font {path}: {e}") from e
    logger.info(f"Registered PDF font {name} from {path}")
    return name


def detect_unicode_fonts(search_dirs=UNICODE_FONT_DIRS) -> PdfFonts:
    """
    Use an installed DejaVu family when one is found, else Type1 fonts.
    """
    for directory in search_dirs:
        regular = Path(directory) / "DejaVuSans.ttf"
        if not regular.is_file():
            continue
        bold = regular.with_name("DejaVuSans-Bold.ttf")
        mono = regular.with_name("DejaVuSansMono.ttf")
        try:
            return PdfFonts.from_ttf(
                regular,
                bold if bold.is_file() else None,
                mono if mono.is_file() else None,
            )
        except FontError as e:
            logger.warning(str(e))
    logger.debug("No Unicode TTF found, using Type1 fonts (Latin-1 only)")
    return PdfFonts()


def _get_footer_text() -> str:
    """Get footer text with current version number."""
    from gradebridge import __version__
    return f"{FOOTER_TEXT} v{__version__}"


def render_to_pdf(
    plan: DocumentPlan,
    output_path: Path,
    config: Optional[PageConfig] = None,
    *,
    show_footer: bool = True,
    fonts: Optional[PdfFonts] = None,
) -> None:
    """
    Render a document plan to a PDF file.

    Args:
        plan: Planner output
        output_path: Path to write PDF
        config: Page geometry (A4 defaults)
        show_footer: Draw version footer and page numbers
        fonts: Fonts to draw with; detected with detect_unicode_fonts()
            when omitted

    Raises:
        IOError: If PDF cannot be written

    Example:
        >>> render_to_pdf(plan, Path("output/submission.pdf"))
    """
    config = config or PageConfig()
    fonts = fonts or detect_unicode_fonts()
    if plan.page_count == 0:
        logger.warning("Empty plan, creating empty PDF")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    page_size = (mm_to_pt(config.page_width_mm), mm_to_pt(config.page_height_mm))
    c = canvas.Canvas(str(output_path), pagesize=page_size)
    c.setTitle(_document_title(plan))

    for index, page in enumerate(plan.pages):
        _PageDrawer(c, config, fonts).draw(page)
        if show_footer:
            _draw_footer(c, page_size, index + 1, plan.page_count, fonts.regular)
        c.showPage()

    c.save()
    logger.info(f"Rendered {plan.page_count} pages to {output_path}")


def _document_title(plan: DocumentPlan) -> str:
    if plan.pages and isinstance(plan.pages[0], TitlePage):
        title = plan.pages[0]
        return f"{title.course_code} - {title.assignment_title}"
    return "Submission"


def _draw_footer(
    c: canvas.Canvas,
    page_size: Tuple[float, float],
    number: int,
    total: int,
    font: str = TEXT_FONT,
) -> None:
    """Footer text centred ~15pt from the bottom, page number at the right."""
    page_width_pt, _ = page_size
    footer_text = _get_footer_text()

    c.saveState()
    c.setFont(font, FOOTER_FONT_SIZE)
    c.setFillColorRGB(0.4, 0.4, 0.4)
    text_width = stringWidth(footer_text, font, FOOTER_FONT_SIZE)
    c.drawString((page_width_pt - text_width) / 2, 15, footer_text)
    c.drawRightString(page_width_pt - 20, 15, f"{number} / {total}")
    c.restoreState()


class _PageDrawer:
    """
    Draws one page descriptor onto the current canvas page.

    ``self.y`` is the current top of free space in canvas coordinates
    (bottom-up); drawing moves it down. Nothing is drawn below
    ``self.floor``, which is raised above the end-marker band on pages
    that carry the marker.
    """

    def __init__(self, c: canvas.Canvas, config: PageConfig, fonts: Optional[PdfFonts] = None) -> None:
        self.c = c
        self.config = config
        self.fonts = fonts or PdfFonts()
        self.page_w = mm_to_pt(config.page_width_mm)
        self.page_h = mm_to_pt(config.page_height_mm)
        self.left = mm_to_pt(config.margin_left_mm)
        self.right = self.page_w - mm_to_pt(config.margin_right_mm)
        self.top = self.page_h - mm_to_pt(config.margin_top_mm)
        self.bottom = mm_to_pt(config.margin_bottom_mm)
        self.floor = self.bottom
        self.width = self.right - self.left
        self.y = self.top
        self.clipped = False

    def draw(self, page: PageDescriptor) -> None:
        if isinstance(page, TitlePage):
            self._title_page(page)
        elif isinstance(page, ContentPage):
            self._header(page.header)
            self._content_page(page)
        elif isinstance(page, OverflowImagePage):
            self._header(page.header)
            self._overflow_page(page)
        else:
            raise TypeError(f"Unknown page descriptor: {type(page).__name__}")

        if self.clipped:
            logger.warning(f"Content clipped on {page.kind.value} page ({_describe(page)})")

    # ─────────────────────────────────────────────────────────────────────────
    # Pages
    # ─────────────────────────────────────────────────────────────────────────

    def _title_page(self, page: TitlePage) -> None:
        c = self.c
        cx = self.page_w / 2
        y = self.page_h * 0.68

        c.saveState()
        c.setLineWidth(4)
        c.rect(self.left, self.page_h * 0.28, self.width, self.page_h * 0.5)
        c.setFont(self.fonts.bold, 32)
        c.drawCentredString(cx, y, page.course_code.upper())
        y -= 40
        c.setFont(self.fonts.title, 20)
        c.drawCentredString(cx, y, page.assignment_title)
        if page.course_name:
            y -= 24
            c.setFont(self.fonts.regular, 13)
            c.drawCentredString(cx, y, page.course_name)
        y -= 30
        c.setLineWidth(5)
        c.line(cx - 68, y, cx + 68, y)

        rows = [
            ("STUDENT NAME", page.student_name),
            ("STUDENT ID", page.student_id),
            ("TOTAL POINTS", f"{page.total_points:g}"),
        ]
        y -= 44
        label_x = cx - 150
        value_x = cx - 10
        for label, value in rows:
            c.setFont(self.fonts.bold, 12)
            c.setFillColorRGB(0.35, 0.35, 0.35)
            c.drawString(label_x, y, label)
            c.setFont(self.fonts.bold, 16)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(value_x, y, value)
            y -= 32
        c.restoreState()

        if page.preamble:
            self.y = self.page_h * 0.28 - 20
            self._rich_text(page.preamble, 10)

    def _content_page(self, page: ContentPage) -> None:
        cfg = self.config
        c = self.c
        if page.has_trailing_answer_marker:
            self.floor = self.bottom + END_MARKER_BAND

        self._need(22)
        c.setFont(self.fonts.bold, 16)
        c.drawString(self.left, self.y - 16, page.heading)
        c.setFont(self.fonts.bold, 11)
        c.setFillColorRGB(0.3, 0.3, 0.3)
        c.drawRightString(self.right, self.y - 14, f"{page.points:g} Points")
        c.setFillColorRGB(0, 0, 0)
        self.y -= 22
        c.setStrokeColorRGB(0.9, 0.9, 0.9)
        c.line(self.left, self.y, self.right, self.y)
        c.setStrokeColorRGB(0, 0, 0)
        self.y -= 10

        self._rich_text(page.statement, 11)
        self.y -= 8

        if page.problem_image is not None:
            max_h = cfg.statement_image_max_mm if page.is_statement_only else cfg.problem_image_max_mm
            self._image(page.problem_image.data_uri, mm_to_pt(max_h))
            self.y -= 8

        if page.has_leading_answer_marker:
            self._start_marker()
        if page.answer is not None:
            self._answer(page.answer)
        if page.has_trailing_answer_marker:
            self._end_marker()

    def _overflow_page(self, page: OverflowImagePage) -> None:
        if page.is_last_overflow:
            self.floor = self.bottom + END_MARKER_BAND
        self._label(f"IMAGE {page.image_number} OF {page.total_images}")
        max_h = mm_to_pt(self.config.overflow_image_max_mm)
        if page.image:
            self._image(page.image, max_h)
        else:
            self._placeholder(NO_IMAGE_TEXT)
        if page.is_last_overflow:
            self._end_marker()

    # ─────────────────────────────────────────────────────────────────────────
    # Pieces
    # ─────────────────────────────────────────────────────────────────────────

    def _header(self, header: PageHeader) -> None:
        c = self.c
        top = self.top
        c.saveState()
        c.setFont(self.fonts.bold, 14)
        c.drawString(self.left, top - 16, f"ID: {header.student_id}".upper())
        c.setFont(self.fonts.regular, 11)
        c.setFillColorRGB(0.25, 0.25, 0.25)
        c.drawString(self.left, top - 32, header.student_name)
        c.setFillColorRGB(0, 0, 0)
        c.setFont(self.fonts.bold, 13)
        c.drawRightString(self.right, top - 16, header.title.upper())
        c.setFont(self.fonts.regular, 10)
        c.setFillColorRGB(0.35, 0.35, 0.35)
        c.drawRightString(self.right, top - 32, header.subtitle)
        c.restoreState()

        band = mm_to_pt(self.config.header_height_mm)
        line_y = top - band + 10
        c.saveState()
        c.setLineWidth(3)
        c.line(self.left, line_y, self.right, line_y)
        c.restoreState()
        self.y = top - band

    def _answer(self, answer: AnswerContent) -> None:
        if not answer.submitted:
            self._placeholder(NO_ANSWER_TEXT)
            return

        for kind in answer.elements:
            if kind is SubmissionKind.TEXT and answer.text_answer:
                self._rich_text(answer.text_answer, 11)
                self.y -= 10
            elif kind is SubmissionKind.IMAGE:
                self._label(f"IMAGE 1 OF {answer.image_total}")
                max_h = mm_to_pt(self.config.answer_image_max_mm)
                if answer.first_image:
                    self._image(answer.first_image, max_h)
                else:
                    self._placeholder(NO_IMAGE_TEXT)
                self.y -= 10
            elif kind is SubmissionKind.AI_REFLECTIVE and answer.ai_reflective:
                self._label(AI_REFLECTION_LABEL.upper(), size=10)
                self._rich_text(answer.ai_reflective, 10)
                self.y -= 10

    def _label(self, text: str, size: float = 8) -> None:
        if not self._need(size + 6):
            return
        self.c.saveState()
        self.c.setFont(self.fonts.bold, size)
        self.c.setFillColorRGB(0.42, 0.45, 0.5)
        self.c.drawString(self.left, self.y - size, text)
        self.c.restoreState()
        self.y -= size + 6

    def _start_marker(self) -> None:
        if not self._need(24):
            return
        c = self.c
        c.saveState()
        c.setStrokeColorRGB(0.99, 0.79, 0.79)
        c.setLineWidth(2)
        c.line(self.left, self.y - 4, self.right, self.y - 4)
        c.setFont(self.fonts.bold, 9)
        c.setFillColorRGB(0.73, 0.11, 0.11)
        c.drawString(self.left, self.y - 16, START_MARKER_TEXT.upper())
        c.restoreState()
        self.y -= 26

    def _end_marker(self) -> None:
        """Pinned to the bottom of the content box regardless of self.y."""
        c = self.c
        base = self.bottom + 4
        c.saveState()
        c.setFont(self.fonts.bold, 9)
        c.setFillColorRGB(0.11, 0.31, 0.85)
        c.drawString(self.left, base + 6, END_MARKER_TEXT.upper())
        c.setStrokeColorRGB(0.75, 0.86, 1.0)
        c.setLineWidth(2)
        c.line(self.left, base, self.right, base)
        c.restoreState()

    def _placeholder(self, text: str) -> None:
        height = 40
        if not self._need(height):
            return
        c = self.c
        c.saveState()
        c.setDash(4, 3)
        c.setStrokeColorRGB(0.82, 0.84, 0.86)
        c.rect(self.left, self.y - height, self.width, height)
        c.setFont(self.fonts.oblique, 10)
        c.setFillColorRGB(0.61, 0.64, 0.69)
        c.drawCentredString(self.left + self.width / 2, self.y - height / 2 - 3, text)
        c.restoreState()
        self.y -= height + 6

    def _image(self, uri: str, max_height: float) -> None:
        """Draw a data-URI image centred, scaled down to fit; never cropped."""
        try:
            img = decode_data_uri(uri)
        except ImageDecodeError as e:
            logger.warning(f"Could not decode image: {e}")
            self._placeholder(NO_IMAGE_TEXT)
            return

        max_height = min(max_height, self.y - self.floor)
        if max_height <= 0:
            self.clipped = True
            return
        w_px, h_px = img.size
        w, h = fit_within(w_px * PX_TO_PT, h_px * PX_TO_PT, self.width, max_height)
        x = self.left + (self.width - w) / 2
        self.c.drawImage(
            ImageReader(img),
            x,
            self.y - h,
            width=w,
            height=h,
            preserveAspectRatio=True,
        )
        self.y -= h

    def _rich_text(self, content: Optional[str], size: float) -> None:
        """Word-wrap segmented content into the content box."""
        leading = size * 1.35
        runs = _runs(content, self.fonts.regular, self.fonts.math)
        for line in _wrap(runs, self.width, size):
            if not self._need(leading):
                return
            x = self.left
            for text, run_font in line:
                self.c.setFont(run_font, size)
                self.c.drawString(x, self.y - size, text)
                x += stringWidth(text, run_font, size)
            self.y -= leading

    def _need(self, height: float) -> bool:
        """True if ``height`` fits above the floor; flags clipping otherwise."""
        if self.y - height < self.floor:
            self.clipped = True
            return False
        return True


def _runs(content: Optional[str], font: str, math_font: str = MATH_FONT) -> List[Run]:
    """Segment content into (text, font) runs; math keeps its delimiters."""
    return [
        (seg.text, math_font if seg.is_math else font)
        for seg in segment(content)
    ]


def _wrap(runs: List[Run], max_width: float, size: float) -> List[List[Run]]:
    """
    Greedy word wrap across font runs.

    Newlines force breaks; leading whitespace on a wrapped line is dropped;
    a single token wider than the line is split by characters.
    """
    lines: List[List[Run]] = []
    current: List[Run] = []
    width = 0.0

    def flush() -> None:
        nonlocal current, width
        lines.append(current)
        current = []
        width = 0.0

    for text, font in runs:
        for n, para in enumerate(text.split("\n")):
            if n > 0:
                flush()
            for token in _TOKEN_RE.findall(para):
                w = stringWidth(token, font, size)
                if token.isspace():
                    if current and width + w <= max_width:
                        current.append((token, font))
                        width += w
                    continue
                if current and width + w > max_width:
                    flush()
                while w > max_width and len(token) > 1:
                    cut = _fit_chars(token, font, size, max_width - width)
                    current.append((token[:cut], font))
                    flush()
                    token = token[cut:]
                    w = stringWidth(token, font, size)
                current.append((token, font))
                width += w

    if current:
        lines.append(current)
    return lines


def _fit_chars(token: str, font: str, size: float, available: float) -> int:
    """Largest prefix length (>= 1) of token that fits ``available``."""
    cut = 1
    while cut < len(token) and stringWidth(token[: cut + 1], font, size) <= available:
        cut += 1
    return cut


def _describe(page: PageDescriptor) -> str:
    slot = getattr(page, "slot_id", None)
    header = page.header
    subtitle = header.subtitle if header is not None else "title"
    return f"{subtitle}, slot {slot}" if slot else subtitle
