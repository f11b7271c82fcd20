"""Text normalization for accent- and case-insensitive search."""

import re
import unicodedata
from typing import Any

# Combining Diacritical Marks block
_COMBINING_MARKS = re.compile("[\u0300-\u036f]")


def normalize_text(value: Any) -> str:
    """Lowercase, decompose and strip diacritics. None becomes ''."""
    if value is None:
        return ""
    text = unicodedata.normalize("NFD", str(value).lower())
    return _COMBINING_MARKS.sub("", text)
