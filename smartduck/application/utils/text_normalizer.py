from __future__ import annotations

import unicodedata


def normalize(text: str) -> str:
    """Lowercase, strip diacritics and trim. Idempotent."""
    decomposed = unicodedata.normalize("NFD", (text or "").lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.strip()
