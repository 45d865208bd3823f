from __future__ import annotations

import re
import unicodedata

COMBINING_MARKS_RE = re.compile("[\u0300-\u036f]")


def normalize_text(text: str | None) -> str | None:
    """Strip accents so "café" and "cafe" match the same pattern."""
    if text is None:
        return None
    return COMBINING_MARKS_RE.sub("", unicodedata.normalize("NFD", text))
