"""Centralized style constants for the caregiver PDF."""

from __future__ import annotations

# Kept as plain hex so the formatter can convert to whatever color object
# the rendering library requires (e.g. reportlab HexColor).

BRAND_COLOR = "#2D7F78"
SUBTITLE_COLOR = "#646464"
BODY_TEXT_COLOR = "#323232"
FOOTER_TEXT_COLOR = "#969696"

RED_FLAG_COLOR = "#DC3545"
RED_FLAG_BG_COLOR = "#FEF2F2"
DO_COLOR = "#22C55E"
AVOID_COLOR = "#D97706"

SCORE_PASS_COLOR = "#22C55E"
SCORE_WARN_COLOR = "#F59E0B"
SCORE_TEXT_COLOR = "#FFFFFF"

MEDICATION_HEADER_BG = "#2D7F78"
MEDICATION_ROW_ALT_BG = "#F0FDFA"
SECTION_BORDER_COLOR = "#CBD5E1"

# ── Section titles in render order ───────────────────────────────────

SECTION_TITLES: dict[str, str] = {
    "simple_explanation": "What Happened",
    "red_flags": "Return to ER Immediately If:",
    "what_to_do": "What To Do",
    "what_not_to_do": "What To Avoid",
    "medications": "Medications",
    "follow_up": "Follow-Up Tasks",
    "expected_course": "What to Expect",
}

SECTION_COLORS: dict[str, str] = {
    "simple_explanation": BODY_TEXT_COLOR,
    "red_flags": RED_FLAG_COLOR,
    "what_to_do": DO_COLOR,
    "what_not_to_do": AVOID_COLOR,
    "medications": BRAND_COLOR,
    "follow_up": BODY_TEXT_COLOR,
    "expected_course": BODY_TEXT_COLOR,
}

FOOTER_DISCLAIMER = "For reference only - always consult your healthcare provider"
