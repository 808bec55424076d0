from __future__ import annotations

import logging

from openai import OpenAI, OpenAIError

from smartduck.application.ports.transcriber import MediaTranscriberPort


TRANSCRIPTION_FAILED = "[Erreur transcription]"


class OpenAIWhisperTranscriber(MediaTranscriberPort):
    """
    Voice-note transcription through the OpenAI audio API.

    WhatsApp voice notes arrive as OGG/Opus, which the endpoint accepts as is.
    Provider failures are logged and turned into a placeholder transcript.
    """

    def __init__(self, api_key: str, model: str = "whisper-1", client: OpenAI | None = None) -> None:
        self._client = client or OpenAI(api_key=api_key)
        self._model = model
        self._logger = logging.getLogger(__name__)

    def transcribe(self, audio: bytes, locale: str) -> str:
        language = "fr" if locale.startswith("fr") else "en"
        try:
            resp = self._client.audio.transcriptions.create(
                model=self._model,
                file=("audio.ogg", audio, "audio/ogg"),
                language=language,
            )
        except OpenAIError as e:
            self._logger.error("Whisper STT failed", extra={"reason": str(e), "language": language})
            return TRANSCRIPTION_FAILED

        return (getattr(resp, "text", "") or "").strip()
