from __future__ import annotations

import logging

from smartduck.application.ports.image_analyzer import ImageAnalyzerPort
from smartduck.application.ports.message_platform import MediaFetcherPort, MessagePlatformPort
from smartduck.application.ports.transcriber import MediaTranscriberPort
from smartduck.application.use_cases.classify_intent import IntentClassifier
from smartduck.application.use_cases.reply_composer import ResponseComposer
from smartduck.application.use_cases.send_reply import SendReplyUseCase
from smartduck.application.utils.locale_detector import LocaleDetector
from smartduck.domain.entities.intent import ClassifiedIntent
from smartduck.domain.entities.message import InboundMessage
from smartduck.domain.entities.reply import ResponsePlan


SYSTEM_REPLIES = {
    "audio_without_media": {
        "fr": "Audio reçu, mais sans média utilisable.",
        "en": "Audio received, but without usable media.",
    },
    "image_received": {
        "fr": "Image bien reçue 👍 (pas d'analyse automatique). Dites-moi quelle zone vous intéresse.",
        "en": "Image received 👍 (no automatic analysis). Tell me which area you are interested in.",
    },
    "unsupported_type": {
        "fr": "Message reçu. Pour l'instant, je gère surtout texte, images et audio.",
        "en": "Message received. For now I mostly handle text, images and audio.",
    },
    "error": {
        "fr": "Oups, une erreur est survenue. Réessaie plus tard 🛠️",
        "en": "Oops, something went wrong. Please try again later 🛠️",
    },
}


class HandleIncomingMessageUseCase:
    """
    Turns one inbound WhatsApp message into one reply.

    Every message is handled on its own; nothing is remembered between
    messages. Transport failures are logged and answered with an apology.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        composer: ResponseComposer,
        locale_detector: LocaleDetector,
        send_reply: SendReplyUseCase,
        platform: MessagePlatformPort,
        media: MediaFetcherPort,
        transcriber: MediaTranscriberPort,
        image_analyzer: ImageAnalyzerPort | None = None,
    ) -> None:
        self._classifier = classifier
        self._composer = composer
        self._locale_detector = locale_detector
        self._send_reply = send_reply
        self._platform = platform
        self._media = media
        self._transcriber = transcriber
        self._image_analyzer = image_analyzer
        self._logger = logging.getLogger(__name__)

    def handle(self, message: InboundMessage) -> ResponsePlan | None:
        locale = self._locale_detector.default_locale
        try:
            self._platform.mark_read(message.id)
            if message.type == "text":
                locale = self._locale_detector.detect(message.text)
                plan = self._answer(message, message.text, locale)
            elif message.type == "audio":
                plan, locale = self._handle_audio(message)
            elif message.type == "image":
                plan, locale = self._handle_image(message)
            else:
                plan = _system_plan("unsupported_type", locale)

            self._send_reply.execute(message.sender_id, plan)
            return plan
        except Exception as e:
            self._logger.exception(
                "Failed handling message",
                extra={"message_id": message.id, "language": locale, "reason": str(e)},
            )
            self._send_apology(message, locale)
            return None

    def _handle_audio(self, message: InboundMessage) -> tuple[ResponsePlan, str]:
        locale = self._locale_detector.default_locale
        if not message.media_id:
            return _system_plan("audio_without_media", locale), locale

        audio = self._media.fetch(message.media_id)
        transcript = self._transcriber.transcribe(audio, locale)
        self._logger.info("Audio transcribed", extra={"message_id": message.id, "reason": transcript})
        # Replies in the language the audio was transcribed in.
        return self._answer(message, transcript, locale), locale

    def _handle_image(self, message: InboundMessage) -> tuple[ResponsePlan, str]:
        caption = (message.caption or "").strip()
        locale = self._locale_detector.detect(caption)
        if not caption:
            return _system_plan("image_received", locale), locale

        image_zones = []
        if self._image_analyzer is not None and message.media_id:
            image = self._media.fetch(message.media_id)
            image_zones = self._image_analyzer.detect_zones(image)

        classified = self._classifier.classify(caption, locale, hinted_entities=image_zones)
        return self._plan_for(message, classified), locale

    def _answer(self, message: InboundMessage, text: str, locale: str) -> ResponsePlan:
        classified = self._classifier.classify(text, locale)
        return self._plan_for(message, classified)

    def _plan_for(self, message: InboundMessage, classified: ClassifiedIntent) -> ResponsePlan:
        plan = self._composer.compose(classified)
        self._logger.info(
            "Message classified",
            extra={
                "message_id": message.id,
                "intent": classified.intent_id,
                "language": classified.locale,
                "confidence": classified.confidence,
                "reply_text": plan.text,
            },
        )
        return plan

    def _send_apology(self, message: InboundMessage, locale: str) -> None:
        try:
            self._send_reply.execute(message.sender_id, _system_plan("error", locale))
        except Exception as e:
            self._logger.error(
                "Failed sending error reply",
                extra={"message_id": message.id, "reason": str(e)},
            )


def _system_plan(key: str, locale: str) -> ResponsePlan:
    texts = SYSTEM_REPLIES[key]
    return ResponsePlan(text=texts.get(locale) or texts["fr"])
