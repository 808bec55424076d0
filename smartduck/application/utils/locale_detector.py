from __future__ import annotations

import re

from smartduck.application.utils.text_normalizer import normalize


FRENCH_HINTS = re.compile(
    r"\b(bonjour|bonsoir|salut|coucou|merci|svp|stp|tarifs?|prix|combien|rdv|rendez-vous|horaires?|prestations?)\b",
    re.IGNORECASE,
)


class LocaleDetector:
    """
    Two-bucket language guess for reply selection.

    Text containing a French greeting, politeness or booking word is `fr`,
    anything else is `en`. This is not a language detector and will be wrong
    on arbitrary text; adding a third locale means replacing it with a scored
    decision.
    """

    def __init__(
        self,
        default_locale: str = "fr",
        hinted_locale: str = "fr",
        fallback_locale: str = "en",
        hints: re.Pattern[str] = FRENCH_HINTS,
    ) -> None:
        self._default_locale = default_locale
        self._hinted_locale = hinted_locale
        self._fallback_locale = fallback_locale
        self._hints = hints

    @property
    def default_locale(self) -> str:
        return self._default_locale

    def detect(self, text: str | None = None) -> str:
        if not text or not text.strip():
            return self._default_locale
        if self._hints.search(normalize(text)):
            return self._hinted_locale
        return self._fallback_locale
