"""Input capture helpers (voice transcripts)."""

from storefront.capture.voice import (
    EXPENSE_KEYWORDS,
    INCOME_KEYWORDS,
    detect_type,
    parse_voice_transcript,
)

__all__ = [
    "EXPENSE_KEYWORDS",
    "INCOME_KEYWORDS",
    "detect_type",
    "parse_voice_transcript",
]
