"""Centralized style constants for medical card output."""

from __future__ import annotations

# ── Color palette (hex strings) ──────────────────────────────────────
# Kept as plain hex so the formatter can convert to whatever color object
# the rendering library requires (e.g. reportlab HexColor).

HEADER_BG_COLOR = "#1E3A5F"
HEADER_TEXT_COLOR = "#FFFFFF"
SECTION_BORDER_COLOR = "#CBD5E1"
IDENTITY_BG_COLOR = "#F1F5F9"
CAPTION_TEXT_COLOR = "#6B7280"

EMERGENCY_BG_COLOR = "#DC2626"
EMERGENCY_TEXT_COLOR = "#FFFFFF"
NORMAL_BG_COLOR = "#DCFCE7"
NORMAL_TEXT_COLOR = "#166534"

ALERT_BG_COLOR = "#FEF2F2"
ALERT_BORDER_COLOR = "#DC2626"

# ── Placeholders ─────────────────────────────────────────────────────

NOT_AVAILABLE = "N/A"
NONE_KOR = "없음"

# ── Section titles (Korean / English) ────────────────────────────────

SECTION_TITLES: dict[str, str] = {
    "identity": "환자 정보 / Patient Information",
    "chief_complaint": "주호소 / Chief Complaint",
    "hpi": "현병력 / History of Present Illness",
    "pain_score": "통증 점수 / Pain Score",
    "history_alerts": "병력 및 주의사항 / Medical History &amp; Alerts",
}

HPI_COLUMN_TITLES: tuple[str, str] = ("의사용 (한국어)", "For the patient (English)")

# ── Fixed text ───────────────────────────────────────────────────────

STATUS_EMERGENCY_TEXT = "응급 / EMERGENCY - seek immediate care"
STATUS_NORMAL_TEXT = "일반 / Normal - no red flags reported"

PHYSICIAN_CAVEAT = "반드시 의사의 확인이 필요합니다 / Must be confirmed by a physician."
AI_DISCLAIMER = (
    "AI가 환자 진술을 정리한 참고 정보이며 진단이 아닙니다. / "
    "AI-derived from the patient's own report; this is not a diagnosis."
)

FOOTER_DISCLAIMER = (
    "본 문서는 환자가 직접 입력한 정보를 바탕으로 자동 생성되었으며 의학적 진단이나 처방을 대신하지 않습니다. "
    "This card was generated automatically from patient-reported information and does not replace "
    "professional medical diagnosis or treatment."
)
