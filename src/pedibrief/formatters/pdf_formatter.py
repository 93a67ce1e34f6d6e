"""PDF output formatter using reportlab.

Renders a ``PediatricSummary`` as a printable caregiver handout: branding,
quiz score badge, the plain-language explanation, red flags, do's and
don'ts, medications, follow-up tasks, expected course and a dated footer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape

from pedibrief.core.config import PDFFormattingConfig
from pedibrief.formatters.pdf_styles import (
    BODY_TEXT_COLOR,
    BRAND_COLOR,
    FOOTER_DISCLAIMER,
    FOOTER_TEXT_COLOR,
    MEDICATION_HEADER_BG,
    MEDICATION_ROW_ALT_BG,
    RED_FLAG_BG_COLOR,
    RED_FLAG_COLOR,
    SCORE_PASS_COLOR,
    SCORE_TEXT_COLOR,
    SCORE_WARN_COLOR,
    SECTION_BORDER_COLOR,
    SECTION_COLORS,
    SECTION_TITLES,
    SUBTITLE_COLOR,
)
from pedibrief.models import Medication, PediatricSummary

try:
    from reportlab.lib import colors as rl_colors
    from reportlab.lib.colors import HexColor
    from reportlab.lib.pagesizes import A4, LETTER
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import inch
    from reportlab.platypus import (
        Flowable,
        KeepTogether,
        SimpleDocTemplate,
        Spacer,
        Table,
        TableStyle,
    )
    from reportlab.platypus import (
        Paragraph as _RawParagraph,
    )
except ImportError as _exc:
    raise ImportError(
        "reportlab is required for PDF output. Install with: pip install pedibrief"
    ) from _exc


# ── Unicode sanitization ────────────────────────────────────────────
# Helvetica lacks glyphs for many characters that LLMs emit. Text is
# sanitized at the Paragraph boundary, after markup escaping, so the
# replacements themselves are written as entities.

_UNICODE_REPLACEMENTS: dict[str, str] = {
    "\u2011": "-",       # non-breaking hyphen
    "\u2010": "-",       # hyphen
    "\u2013": "-",       # en-dash
    "\u2014": "-",       # em-dash
    "\u202f": " ",       # narrow no-break space
    "\u00a0": " ",       # non-breaking space
    "\u2009": " ",       # thin space
    "\u2018": "'",       # left single quote
    "\u2019": "'",       # right single quote
    "\u201c": '"',       # left double quote
    "\u201d": '"',       # right double quote
    "\u2026": "...",     # ellipsis
    "\u00b5": "u",       # micro sign
    "\u00d7": "x",       # multiplication sign
    "\u2192": "-&gt;",   # rightwards arrow
    "\u2265": "&gt;=",   # greater-than or equal
    "\u2264": "&lt;=",   # less-than or equal
}


def _sanitize_text(text: str) -> str:
    for char, replacement in _UNICODE_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text


def Paragraph(text: str, *args: Any, **kwargs: Any) -> _RawParagraph:  # noqa: N802
    """Sanitized Paragraph wrapper that replaces Unicode glyphs Helvetica cannot render."""
    return _RawParagraph(_sanitize_text(str(text)), *args, **kwargs)


def _text(value: str) -> str:
    """Escape model-produced text for reportlab's mini-markup."""
    return escape(value or "")


_PAGE_SIZES = {"letter": LETTER, "a4": A4}


def _hex(color_str: str) -> HexColor:
    return HexColor(color_str)


class PDFFormatter:
    """Renders ``PediatricSummary`` as the downloadable caregiver PDF."""

    def __init__(self, config: PDFFormattingConfig | None = None, *, passing_score: int = 70) -> None:
        self._config = config or PDFFormattingConfig()
        self._passing_score = passing_score
        self._page_size: tuple[float, float] = _PAGE_SIZES.get(self._config.page_size, A4)
        self._margin: float = self._config.margin_inches * inch
        self._styles = self._build_styles()

    # ── Public API ───────────────────────────────────────────────────

    def format(self, summary: PediatricSummary, **kwargs: Any) -> bytes:
        """Render *summary* to PDF bytes.

        Keyword args:
            quiz_score: int in [0, 100]; the score badge is omitted when absent.
            generated_at: ``datetime`` printed in the footer (defaults to now, UTC).
        """
        generated_at: datetime = kwargs.get("generated_at") or datetime.now(timezone.utc)
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self._page_size,
            leftMargin=self._margin,
            rightMargin=self._margin,
            topMargin=self._margin,
            bottomMargin=self._margin + 0.3 * inch,
            title=f"{self._config.brand_name} Summary",
            author=self._config.brand_name,
        )

        def _on_page(canvas: Any, doc_: Any) -> None:
            self._footer(canvas, doc_, generated_at)

        story = self._build_story(summary, quiz_score=kwargs.get("quiz_score"))
        doc.build(story, onFirstPage=_on_page, onLaterPages=_on_page)
        return buffer.getvalue()

    def format_to_file(self, summary: PediatricSummary, path: Path, **kwargs: Any) -> Path:
        """Write PDF to *path* and return it."""
        path.write_bytes(self.format(summary, **kwargs))
        return path

    @property
    def content_type(self) -> str:
        return "application/pdf"

    @property
    def filename(self) -> str:
        return self._config.filename

    # ── Style setup ──────────────────────────────────────────────────

    def _build_styles(self) -> dict[str, ParagraphStyle]:
        base = getSampleStyleSheet()
        font = self._config.font_family
        body_sz = self._config.body_font_size
        heading_sz = self._config.heading_font_size

        return {
            "brand": ParagraphStyle(
                "brand",
                parent=base["Title"],
                fontName=f"{font}-Bold",
                fontSize=24,
                leading=28,
                alignment=0,
                spaceAfter=2,
                textColor=_hex(BRAND_COLOR),
            ),
            "subtitle": ParagraphStyle(
                "subtitle",
                parent=base["BodyText"],
                fontName=font,
                fontSize=heading_sz,
                leading=heading_sz * 1.3,
                spaceAfter=12,
                textColor=_hex(SUBTITLE_COLOR),
            ),
            "heading": ParagraphStyle(
                "heading",
                parent=base["Heading2"],
                fontName=f"{font}-Bold",
                fontSize=heading_sz,
                leading=heading_sz * 1.3,
                spaceBefore=12,
                spaceAfter=6,
                textColor=_hex(BODY_TEXT_COLOR),
            ),
            "body": ParagraphStyle(
                "body",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz,
                leading=body_sz * 1.4,
                spaceAfter=6,
                textColor=_hex(BODY_TEXT_COLOR),
            ),
            "bullet": ParagraphStyle(
                "bullet",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz,
                leading=body_sz * 1.4,
                leftIndent=18,
                bulletIndent=6,
                spaceAfter=3,
                textColor=_hex(BODY_TEXT_COLOR),
            ),
            "badge": ParagraphStyle(
                "badge",
                parent=base["BodyText"],
                fontName=f"{font}-Bold",
                fontSize=body_sz + 1,
                textColor=_hex(SCORE_TEXT_COLOR),
            ),
            "table_header": ParagraphStyle(
                "table_header",
                parent=base["BodyText"],
                fontName=f"{font}-Bold",
                fontSize=body_sz - 1,
                textColor=_hex(SCORE_TEXT_COLOR),
            ),
            "table_cell": ParagraphStyle(
                "table_cell",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz - 1,
                leading=(body_sz - 1) * 1.3,
            ),
        }

    # ── Story construction ───────────────────────────────────────────

    def _build_story(self, summary: PediatricSummary, *, quiz_score: int | None = None) -> list[Flowable]:
        """Flowables in handout order: branding → score → sections."""
        story: list[Flowable] = []
        story.extend(self._build_branding())
        if quiz_score is not None:
            story.extend(self._build_score_badge(quiz_score))

        story.extend(self._build_text_section("simple_explanation", summary.simple_explanation))
        story.extend(self._build_red_flags(summary.red_flags))
        story.extend(self._build_bullet_section("what_to_do", summary.what_to_do))
        story.extend(self._build_bullet_section("what_not_to_do", summary.what_not_to_do))
        if summary.medications:
            story.extend(self._build_medication_table(summary.medications))
        story.extend(self._build_bullet_section("follow_up", summary.follow_up))
        story.extend(self._build_text_section("expected_course", summary.expected_course))
        return story

    def _build_branding(self) -> list[Flowable]:
        return [
            Paragraph(_text(self._config.brand_name), self._styles["brand"]),
            Paragraph(_text(self._config.subtitle), self._styles["subtitle"]),
        ]

    def _build_score_badge(self, quiz_score: int) -> list[Flowable]:
        """Green badge at the passing score and above, amber below."""
        color = SCORE_PASS_COLOR if quiz_score >= self._passing_score else SCORE_WARN_COLOR
        badge = Table(
            [[Paragraph(f"Quiz Score: {quiz_score}/100", self._styles["badge"])]],
            colWidths=[2.2 * inch],
            hAlign="LEFT",
        )
        badge.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), _hex(color)),
                    ("TOPPADDING", (0, 0), (-1, -1), 6),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                    ("LEFTPADDING", (0, 0), (-1, -1), 10),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 10),
                ]
            )
        )
        return [badge, Spacer(1, 12)]

    def _heading(self, key: str) -> Paragraph:
        color = SECTION_COLORS.get(key, BODY_TEXT_COLOR)
        return Paragraph(
            f'<font color="{color}">{_text(SECTION_TITLES[key])}</font>',
            self._styles["heading"],
        )

    def _build_text_section(self, key: str, text: str) -> list[Flowable]:
        if not text.strip():
            return []
        return [self._heading(key), Paragraph(_text(text), self._styles["body"])]

    def _build_bullet_section(self, key: str, items: list[str]) -> list[Flowable]:
        if not items:
            return []
        flowables: list[Flowable] = [self._heading(key)]
        for item in items:
            flowables.append(Paragraph(_text(item), self._styles["bullet"], bulletText="\u2022"))
        flowables.append(Spacer(1, 4))
        return flowables

    def _build_red_flags(self, flags: list[str]) -> list[Flowable]:
        """Red-bordered alert box listing every return-to-ER sign."""
        if not flags:
            return []
        rows = [[Paragraph(_text(flag), self._styles["bullet"], bulletText="\u2022")] for flag in flags]
        box = Table(rows, colWidths=[self._content_width()])
        box.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), _hex(RED_FLAG_BG_COLOR)),
                    ("BOX", (0, 0), (-1, -1), 1.5, _hex(RED_FLAG_COLOR)),
                    ("TOPPADDING", (0, 0), (-1, -1), 3),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
                    ("LEFTPADDING", (0, 0), (-1, -1), 8),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        return [KeepTogether([self._heading("red_flags"), box]), Spacer(1, 6)]

    def _build_medication_table(self, meds: list[Medication]) -> list[Flowable]:
        header = ["Medicine", "Dose", "When to Give", "Notes"]
        rows: list[list[Any]] = [[Paragraph(h, self._styles["table_header"]) for h in header]]
        for med in meds:
            rows.append([
                Paragraph(f"<b>{_text(med.name)}</b>", self._styles["table_cell"]),
                Paragraph(_text(med.dose), self._styles["table_cell"]),
                Paragraph(_text(med.timing), self._styles["table_cell"]),
                Paragraph(_text(med.notes or ""), self._styles["table_cell"]),
            ])

        cw = self._content_width()
        table = Table(rows, colWidths=[cw * 0.25, cw * 0.20, cw * 0.25, cw * 0.30], repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), _hex(MEDICATION_HEADER_BG)),
                    ("GRID", (0, 0), (-1, -1), 0.5, _hex(SECTION_BORDER_COLOR)),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [rl_colors.white, _hex(MEDICATION_ROW_ALT_BG)]),
                ]
            )
        )
        return [self._heading("medications"), table, Spacer(1, 6)]

    # ── Footer ───────────────────────────────────────────────────────

    def _footer(self, canvas: Any, doc: Any, generated_at: datetime) -> None:
        canvas.saveState()
        width, _ = self._page_size
        canvas.setFont(self._config.font_family, 8)
        canvas.setFillColor(_hex(FOOTER_TEXT_COLOR))
        text = self.footer_text(generated_at)
        canvas.drawString(self._margin, self._margin - 4, text)
        canvas.drawRightString(width - self._margin, self._margin - 16, f"Page {canvas.getPageNumber()}")
        canvas.restoreState()

    def footer_text(self, generated_at: datetime) -> str:
        return f"Generated by {self._config.brand_name} on {generated_at:%Y-%m-%d} - {FOOTER_DISCLAIMER}"

    def _content_width(self) -> float:
        return float(self._page_size[0]) - 2 * self._margin
