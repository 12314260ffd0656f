import re
import unicodedata
from typing import List, Pattern

# Pasted Turkish text mixes dotted/dotless i freely ("İlk", "ILK", "ılk").
DOTTED_I_CLASS = "[iıİI]"


def normalize_whitespace(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip())


def strip_accents(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def normalize_key(value: str) -> str:
    """Lowercase, drop diacritics and everything that is not a-z/0-9.

    "Fenerbahçe A.Ş." -> "fenerbahceas", "İSTANBUL" -> "istanbul".
    """
    cleaned = strip_accents(value).replace("ı", "i").lower()
    return re.sub(r"[^a-z0-9]", "", cleaned)


def marker_pattern(marker: str, suffix: str = "") -> Pattern[str]:
    """Compile a case-insensitive pattern for a literal section/role marker.

    Any i-like letter matches every Turkish i variant and runs of spaces match
    any whitespace, so "ilk 11" finds "İLK 11" and "Ilk  11" alike.
    """
    parts: List[str] = []
    for ch in marker:
        if ch in "iıİI":
            parts.append(DOTTED_I_CLASS)
        elif ch == " ":
            parts.append(r"\s+")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts) + suffix, re.IGNORECASE)


def split_lines(text: str) -> List[str]:
    normalized = unicodedata.normalize("NFC", text)
    return [line.strip() for line in normalized.splitlines() if line.strip()]
