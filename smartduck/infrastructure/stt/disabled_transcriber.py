from __future__ import annotations

import logging

from smartduck.application.ports.transcriber import MediaTranscriberPort


STT_DISABLED = "[Transcription désactivée : configure STT_PROVIDER et STT_API_KEY]"
STT_MISSING_KEY = "[Impossible de transcrire : clé API manquante]"
STT_UNKNOWN_PROVIDER = "[STT provider inconnu]"


class DisabledTranscriber(MediaTranscriberPort):
    def __init__(self, placeholder: str = STT_DISABLED) -> None:
        self._placeholder = placeholder
        self._logger = logging.getLogger(__name__)

    def transcribe(self, audio: bytes, locale: str) -> str:
        self._logger.info("STT disabled. Returning placeholder.", extra={"reason": self._placeholder})
        return self._placeholder
