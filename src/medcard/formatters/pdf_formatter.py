"""Medical card PDF formatter using reportlab.

Renders a patient profile plus either raw encounter fields or enriched
bilingual card data as a one-page Korean/English medical card::

    formatter = CardFormatter(settings.pdf)
    pdf_bytes = formatter.format(profile, EnrichedCard(data=structured))

The document is built with reportlab's ``invariant`` mode, so the same
inputs (and the same ``today``) always produce identical bytes.
"""

from __future__ import annotations

import textwrap
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Any, Mapping, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors as rl_colors
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    BaseDocTemplate,
    Flowable,
    Frame,
    PageTemplate,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.platypus import (
    Paragraph as _RawParagraph,
)

from medcard.cards.fields import compute_age, is_severe, parse_severity, synthesize_narrative
from medcard.core.config import PDFFormattingConfig
from medcard.formatters.fonts import register_fonts
from medcard.formatters.pdf_styles import (
    AI_DISCLAIMER,
    ALERT_BG_COLOR,
    ALERT_BORDER_COLOR,
    CAPTION_TEXT_COLOR,
    EMERGENCY_BG_COLOR,
    EMERGENCY_TEXT_COLOR,
    FOOTER_DISCLAIMER,
    HEADER_BG_COLOR,
    HEADER_TEXT_COLOR,
    HPI_COLUMN_TITLES,
    IDENTITY_BG_COLOR,
    NONE_KOR,
    NORMAL_BG_COLOR,
    NORMAL_TEXT_COLOR,
    NOT_AVAILABLE,
    PHYSICIAN_CAVEAT,
    SECTION_BORDER_COLOR,
    SECTION_TITLES,
    STATUS_EMERGENCY_TEXT,
    STATUS_NORMAL_TEXT,
)
from medcard.models import (
    CardInput,
    EncounterData,
    EnrichedCard,
    PatientProfile,
    RawCard,
    StructuredCardData,
    coerce_card_input,
)

# ── Unicode sanitization ────────────────────────────────────────────
# Model output routinely carries typographic punctuation; fold it to ASCII
# so every face in use has a glyph for it.

_UNICODE_REPLACEMENTS: dict[str, str] = {
    "‑": "-",       # non-breaking hyphen
    "‐": "-",       # hyphen
    "–": "-",       # en-dash
    "—": "-",       # em-dash
    " ": " ",       # narrow no-break space
    " ": " ",       # non-breaking space
    " ": " ",       # thin space
    "‘": "'",       # left single quote
    "’": "'",       # right single quote
    "“": '"',       # left double quote
    "”": '"',       # right double quote
    "…": "...",     # ellipsis
}


def _sanitize_text(text: str) -> str:
    for char, replacement in _UNICODE_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text


def Paragraph(text: str, *args: Any, **kwargs: Any) -> _RawParagraph:  # noqa: N802
    """Sanitized Paragraph wrapper."""
    return _RawParagraph(_sanitize_text(str(text)), *args, **kwargs)


def _value(value: Any, placeholder: str = NOT_AVAILABLE) -> str:
    """Markup-safe display text for a possibly missing value."""
    if value is None:
        return placeholder
    text = str(value).strip()
    return escape(text) if text else placeholder


def _chunk_text(text: str | None) -> list[str]:
    """Break a narrative into pieces short enough to fit a table row on one page."""
    if not text or not text.strip():
        return []
    return textwrap.wrap(text, width=_ROW_CHUNK_CHARS, break_long_words=True, break_on_hyphens=False)


# ── Page size lookup ─────────────────────────────────────────────────

_PAGE_SIZES = {"letter": LETTER, "a4": A4}
_FOOTER_RESERVE = 0.85 * inch
_ROW_CHUNK_CHARS = 400


def _hex(color_str: str) -> HexColor:
    return HexColor(color_str)


def resolve_emergency(card: CardInput) -> bool:
    """Explicit ``is_emergency`` wins; otherwise severity above 7."""
    match card:
        case EnrichedCard(data=data) if data.is_emergency is not None:
            return data.is_emergency
        case EnrichedCard(data=data):
            return is_severe(data.pain_score)
        case RawCard(symptom_severity=severity):
            return is_severe(severity)
    return False


def format_pain_score(value: Union[str, int, float, None]) -> str:
    score = parse_severity(value)
    if score is None:
        return NOT_AVAILABLE
    return f"{score:g} / 10"


CardData = Union[CardInput, EncounterData, StructuredCardData, Mapping[str, Any], None]


# ── CardFormatter ────────────────────────────────────────────────────


class CardFormatter:
    """Renders a bilingual medical card PDF."""

    def __init__(self, config: PDFFormattingConfig | None = None) -> None:
        self._config = config or PDFFormattingConfig()
        self._page_size: tuple[float, float] = _PAGE_SIZES.get(self._config.page_size, A4)
        self._margin: float = self._config.margin_inches * inch
        self._cjk_font = register_fonts(self._config.cjk_font_name, self._config.cjk_font_path)
        self._styles = self._build_styles()

    # ── Public API ───────────────────────────────────────────────────

    def format(
        self,
        profile: PatientProfile | Mapping[str, Any] | None,
        card_data: CardData,
        *,
        today: date | None = None,
    ) -> bytes:
        """Render the card to PDF bytes.

        ``today`` fixes the reference date for the age line; it defaults to
        the current date.
        """
        buffer = BytesIO()
        frame = Frame(
            self._margin,
            self._margin + _FOOTER_RESERVE,
            self._content_width(),
            float(self._page_size[1]) - 2 * self._margin - _FOOTER_RESERVE,
            id="card",
        )
        doc = BaseDocTemplate(
            buffer,
            pagesize=self._page_size,
            leftMargin=self._margin,
            rightMargin=self._margin,
            topMargin=self._margin,
            bottomMargin=self._margin + _FOOTER_RESERVE,
            title=f"{self._config.brand_title} Medical Card",
            author=self._config.brand_title,
            invariant=1,
        )
        doc.addPageTemplates([PageTemplate(id="card", frames=[frame], onPage=self._footer)])
        doc.build(self.build_story(profile, card_data, today=today))
        return buffer.getvalue()

    def format_to_file(
        self,
        profile: PatientProfile | Mapping[str, Any] | None,
        card_data: CardData,
        path: Path,
        *,
        today: date | None = None,
    ) -> Path:
        """Write PDF to *path* and return it."""
        path.write_bytes(self.format(profile, card_data, today=today))
        return path

    @property
    def content_type(self) -> str:
        return "application/pdf"

    def build_story(
        self,
        profile: PatientProfile | Mapping[str, Any] | None,
        card_data: CardData,
        *,
        today: date | None = None,
    ) -> list[Flowable]:
        """Flowables for every card section, in fixed order."""
        patient = profile if isinstance(profile, PatientProfile) else PatientProfile.model_validate(profile or {})
        card = coerce_card_input(card_data)
        reference_day = today or date.today()

        story: list[Flowable] = []
        story.extend(self._build_header(resolve_emergency(card)))
        story.extend(self._build_identity(patient, reference_day))
        match card:
            case EnrichedCard(data=data):
                story.extend(self._build_enriched_body(data))
            case RawCard():
                story.extend(self._build_raw_body(card))
        return story

    # ── Style setup ──────────────────────────────────────────────────

    def _build_styles(self) -> dict[str, ParagraphStyle]:
        base = getSampleStyleSheet()
        font = self._cjk_font
        body_sz = self._config.body_font_size
        heading_sz = self._config.heading_font_size

        return {
            "title": ParagraphStyle(
                "title",
                parent=base["Title"],
                fontName=f"{self._config.font_family}-Bold",
                fontSize=heading_sz + 9,
                leading=(heading_sz + 9) * 1.2,
                alignment=TA_CENTER,
                textColor=_hex(HEADER_BG_COLOR),
                spaceAfter=4,
            ),
            "subtitle": ParagraphStyle(
                "subtitle",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz,
                alignment=TA_CENTER,
                textColor=rl_colors.grey,
                spaceAfter=8,
            ),
            "heading": ParagraphStyle(
                "heading",
                parent=base["Heading2"],
                fontName=font,
                fontSize=heading_sz,
                leading=heading_sz * 1.3,
                spaceBefore=10,
                spaceAfter=4,
                textColor=_hex(HEADER_BG_COLOR),
            ),
            "body": ParagraphStyle(
                "body",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz,
                leading=body_sz * 1.5,
                spaceAfter=4,
            ),
            "primary": ParagraphStyle(
                "primary",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz + 3,
                leading=(body_sz + 3) * 1.4,
                spaceAfter=2,
            ),
            "secondary": ParagraphStyle(
                "secondary",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz,
                leading=body_sz * 1.4,
                textColor=_hex(CAPTION_TEXT_COLOR),
                spaceAfter=4,
            ),
            "label": ParagraphStyle(
                "label",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz,
                textColor=_hex(HEADER_BG_COLOR),
            ),
            "table_header": ParagraphStyle(
                "table_header",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz - 1,
                textColor=_hex(HEADER_TEXT_COLOR),
            ),
            "status_emergency": ParagraphStyle(
                "status_emergency",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz + 3,
                leading=(body_sz + 3) * 1.3,
                alignment=TA_CENTER,
                textColor=_hex(EMERGENCY_TEXT_COLOR),
            ),
            "status_normal": ParagraphStyle(
                "status_normal",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz + 1,
                leading=(body_sz + 1) * 1.3,
                alignment=TA_CENTER,
                textColor=_hex(NORMAL_TEXT_COLOR),
            ),
            "alert": ParagraphStyle(
                "alert",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz,
                leading=body_sz * 1.5,
                textColor=_hex(ALERT_BORDER_COLOR),
            ),
            "caption": ParagraphStyle(
                "caption",
                parent=base["BodyText"],
                fontName=font,
                fontSize=body_sz - 2,
                leading=(body_sz - 2) * 1.4,
                textColor=_hex(CAPTION_TEXT_COLOR),
            ),
            "footer": ParagraphStyle(
                "footer",
                parent=base["BodyText"],
                fontName=font,
                fontSize=7,
                leading=9.5,
                textColor=rl_colors.grey,
            ),
        }

    # ══════════════════════════════════════════════════════════════════
    # Shared sections
    # ══════════════════════════════════════════════════════════════════

    def _build_header(self, emergency: bool) -> list[Flowable]:
        items: list[Flowable] = [
            Paragraph(escape(self._config.brand_title), self._styles["title"]),
            Paragraph("진료 카드 / Medical Card", self._styles["subtitle"]),
        ]
        if emergency:
            text, style, bg, border = STATUS_EMERGENCY_TEXT, "status_emergency", EMERGENCY_BG_COLOR, EMERGENCY_BG_COLOR
        else:
            text, style, bg, border = STATUS_NORMAL_TEXT, "status_normal", NORMAL_BG_COLOR, NORMAL_TEXT_COLOR

        badge = Table([[Paragraph(text, self._styles[style])]], colWidths=[self._content_width()])
        badge.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), _hex(bg)),
                    ("BOX", (0, 0), (-1, -1), 1.5, _hex(border)),
                    ("TOPPADDING", (0, 0), (-1, -1), 6),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        items.append(badge)
        items.append(Spacer(1, 8))
        return items

    def _build_identity(self, profile: PatientProfile, today: date) -> list[Flowable]:
        """2x2 key-value grid: name, age, gender, language."""
        age = compute_age(profile.birth_date, today)
        pairs = [
            ("이름 / Name", _value(profile.display_name)),
            ("나이 / Age", NOT_AVAILABLE if age is None else str(age)),
            ("성별 / Gender", _value(profile.display_gender)),
            ("언어 / Language", _value(profile.display_language)),
        ]
        rows: list[list[Any]] = []
        for i in range(0, len(pairs), 2):
            row: list[Any] = []
            for label, value in pairs[i:i + 2]:
                row.append(Paragraph(label, self._styles["label"]))
                row.append(Paragraph(value, self._styles["body"]))
            rows.append(row)

        cw = self._content_width()
        table = Table(rows, colWidths=[cw * 0.18, cw * 0.32, cw * 0.18, cw * 0.32], splitInRow=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), _hex(IDENTITY_BG_COLOR)),
                    ("BOX", (0, 0), (-1, -1), 0.5, _hex(SECTION_BORDER_COLOR)),
                    ("INNERGRID", (0, 0), (-1, -1), 0.25, _hex(SECTION_BORDER_COLOR)),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                    ("LEFTPADDING", (0, 0), (-1, -1), 6),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        return [Paragraph(SECTION_TITLES["identity"], self._styles["heading"]), table]

    def _build_pain_score(self, value: Union[str, int, float, None]) -> list[Flowable]:
        return [
            Paragraph(SECTION_TITLES["pain_score"], self._styles["heading"]),
            Paragraph(format_pain_score(value), self._styles["primary"]),
        ]

    def _build_history_alerts(self, allergies: str, department: str) -> list[Flowable]:
        """Red alert box: allergies, suggested department, caveat, AI disclaimer."""
        rows = [
            [Paragraph(f"알레르기 / Allergies: {allergies}", self._styles["alert"])],
            [Paragraph(f"추천 진료과 / Suggested department: {department}", self._styles["alert"])],
            [Paragraph(PHYSICIAN_CAVEAT, self._styles["alert"])],
            [Paragraph(AI_DISCLAIMER, self._styles["caption"])],
        ]
        box = Table(rows, colWidths=[self._content_width()], splitInRow=1)
        box.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), _hex(ALERT_BG_COLOR)),
                    ("BOX", (0, 0), (-1, -1), 1.5, _hex(ALERT_BORDER_COLOR)),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                    ("LEFTPADDING", (0, 0), (-1, -1), 10),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 10),
                ]
            )
        )
        return [Paragraph(SECTION_TITLES["history_alerts"], self._styles["heading"]), box]

    # ══════════════════════════════════════════════════════════════════
    # Enriched (bilingual) body
    # ══════════════════════════════════════════════════════════════════

    def _build_enriched_body(self, data: StructuredCardData) -> list[Flowable]:
        items: list[Flowable] = [
            Paragraph(SECTION_TITLES["chief_complaint"], self._styles["heading"]),
            Paragraph(_value(data.cc_kor), self._styles["primary"]),
            Paragraph(_value(data.cc_eng), self._styles["secondary"]),
            Paragraph(SECTION_TITLES["hpi"], self._styles["heading"]),
            self._build_hpi_columns(data.hpi_kor, data.hpi_eng),
        ]
        items.extend(self._build_pain_score(data.pain_score))
        allergies = f"{_value(data.allergies_kor, NONE_KOR)} ({_value(data.allergies_eng, 'None')})"
        department = f"{_value(data.suggested_dept_kor)} ({_value(data.suggested_dept_eng)})"
        items.extend(self._build_history_alerts(allergies, department))
        return items

    def _build_hpi_columns(self, korean: str | None, english: str | None) -> Table:
        """Side-by-side narratives, one short row per chunk so the table splits across pages."""
        cw = self._content_width()
        left = _chunk_text(korean) or [NOT_AVAILABLE]
        right = _chunk_text(english) or [NOT_AVAILABLE]
        rows: list[list[Any]] = [[Paragraph(title, self._styles["table_header"]) for title in HPI_COLUMN_TITLES]]
        for i in range(max(len(left), len(right))):
            rows.append(
                [
                    Paragraph(_value(left[i] if i < len(left) else "", ""), self._styles["body"]),
                    Paragraph(_value(right[i] if i < len(right) else "", ""), self._styles["body"]),
                ]
            )
        table = Table(rows, colWidths=[cw * 0.5, cw * 0.5], repeatRows=1, splitInRow=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), _hex(HEADER_BG_COLOR)),
                    ("GRID", (0, 0), (-1, -1), 0.5, _hex(SECTION_BORDER_COLOR)),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("TOPPADDING", (0, 0), (-1, -1), 5),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
                    ("LEFTPADDING", (0, 0), (-1, -1), 6),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        return table

    # ══════════════════════════════════════════════════════════════════
    # Raw (legacy) body
    # ══════════════════════════════════════════════════════════════════

    def _build_raw_body(self, card: RawCard) -> list[Flowable]:
        summary = f"{_value(card.chief_complaint)} (onset: {_value(card.symptom_onset)})"
        narrative = synthesize_narrative(
            chief_complaint=card.chief_complaint,
            symptom_onset=card.symptom_onset,
            symptom_severity=card.symptom_severity,
            associated_symptoms=card.associated_symptoms,
            concerns=card.concerns,
            placeholder=NOT_AVAILABLE,
        )
        items: list[Flowable] = [
            Paragraph(SECTION_TITLES["chief_complaint"], self._styles["heading"]),
            Paragraph(summary, self._styles["primary"]),
            Paragraph(SECTION_TITLES["hpi"], self._styles["heading"]),
            Paragraph(escape(narrative), self._styles["body"]),
        ]
        items.extend(self._build_pain_score(card.symptom_severity))
        items.extend(self._build_history_alerts(f"{NONE_KOR} (N/A)", f"{NOT_AVAILABLE}"))
        return items

    # ── Footer ───────────────────────────────────────────────────────

    def _footer(self, canvas: Any, doc: Any) -> None:
        """Disclaimer pinned above the bottom margin, plus page number."""
        canvas.saveState()
        width, _ = self._page_size

        disclaimer = Paragraph(FOOTER_DISCLAIMER, self._styles["footer"])
        _, height = disclaimer.wrap(self._content_width(), _FOOTER_RESERVE)
        top = self._margin + _FOOTER_RESERVE - 6
        canvas.setStrokeColor(_hex(SECTION_BORDER_COLOR))
        canvas.line(self._margin, top, width - self._margin, top)
        disclaimer.drawOn(canvas, self._margin, top - 4 - height)

        canvas.setFont(self._config.font_family, 7)
        canvas.setFillColor(rl_colors.grey)
        canvas.drawRightString(width - self._margin, self._margin - 12, f"Page {canvas.getPageNumber()}")
        canvas.restoreState()

    def _content_width(self) -> float:
        return float(self._page_size[0]) - 2 * self._margin
