"""
Voice transcript parsing.

Turns a spoken sentence such as "sold 3 cakes for 45.50" into draft
form fields. The speech-to-text itself happens in the browser; this
only sees the final transcript.

Rules:
- amount: the first number in the text (optionally with two decimals)
- type: income keywords win over expense keywords; neither leaves it unset
- description: the transcript as spoken
"""

import re
from typing import Optional

from storefront.models.finance import TransactionType, VoiceDraft

AMOUNT_PATTERN = re.compile(r"(\d+(?:\.\d{2})?)")

INCOME_KEYWORDS = ("sold", "earned", "received")
EXPENSE_KEYWORDS = ("bought", "paid", "spent")


def detect_type(text: str) -> Optional[TransactionType]:
    lowered = text.lower()
    if any(word in lowered for word in INCOME_KEYWORDS):
        return TransactionType.INCOME
    if any(word in lowered for word in EXPENSE_KEYWORDS):
        return TransactionType.EXPENSE
    return None


def parse_voice_transcript(text: str) -> VoiceDraft:
    match = AMOUNT_PATTERN.search(text)
    return VoiceDraft(
        amount=match.group(1) if match else None,
        type=detect_type(text),
        description=text.strip(),
    )
