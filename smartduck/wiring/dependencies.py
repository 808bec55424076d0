from functools import lru_cache
import logging

from smartduck.core.config import settings
from smartduck.application.ports.transcriber import MediaTranscriberPort
from smartduck.application.use_cases.classify_intent import IntentClassifier
from smartduck.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from smartduck.application.use_cases.reply_composer import ResponseComposer
from smartduck.application.use_cases.send_reply import SendReplyUseCase
from smartduck.application.utils.locale_detector import LocaleDetector
from smartduck.infrastructure.knowledge.json_source import JsonKnowledgeBaseSource
from smartduck.infrastructure.knowledge.knowledge_store import KnowledgeBaseStore
from smartduck.infrastructure.stt.disabled_transcriber import (
    STT_DISABLED,
    STT_MISSING_KEY,
    STT_UNKNOWN_PROVIDER,
    DisabledTranscriber,
)
from smartduck.infrastructure.stt.whisper_transcriber import OpenAIWhisperTranscriber
from smartduck.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from smartduck.infrastructure.whatsapp.webhook_verify import WebhookVerifier
from smartduck.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from smartduck.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform


logger = logging.getLogger(__name__)


@lru_cache
def get_knowledge_base_store() -> KnowledgeBaseStore:
    return KnowledgeBaseStore(JsonKnowledgeBaseSource(settings.KNOWLEDGE_BASE_PATH))


@lru_cache
def get_locale_detector() -> LocaleDetector:
    supported = settings.supported_locales
    fallback = next((locale for locale in supported if locale != "fr"), "en")
    return LocaleDetector(default_locale=settings.DEFAULT_LOCALE, hinted_locale="fr", fallback_locale=fallback)


@lru_cache
def get_classifier() -> IntentClassifier:
    return IntentClassifier(get_knowledge_base_store().get())


@lru_cache
def get_composer() -> ResponseComposer:
    return ResponseComposer(get_knowledge_base_store().get(), default_locale=settings.DEFAULT_LOCALE)


@lru_cache
def get_transcriber() -> MediaTranscriberPort:
    provider = settings.STT_PROVIDER.strip().lower()
    if provider == "none":
        return DisabledTranscriber(STT_DISABLED)
    if provider == "whisper":
        if not settings.STT_API_KEY:
            logger.warning("WHISPER selected but STT_API_KEY missing.")
            return DisabledTranscriber(STT_MISSING_KEY)
        return OpenAIWhisperTranscriber(api_key=settings.STT_API_KEY, model=settings.STT_MODEL)
    logger.warning("Unknown STT provider", extra={"reason": provider})
    return DisabledTranscriber(STT_UNKNOWN_PROVIDER)


@lru_cache
def get_whatsapp_platform() -> WhatsAppPlatform | MockWhatsAppPlatform:
    logger.info(
        "WHATSAPP_TOKEN present=%s len=%s",
        bool(settings.WHATSAPP_TOKEN),
        len(settings.WHATSAPP_TOKEN or ""),
    )
    logger.info("ENV=%s", settings.ENV)

    if not settings.WHATSAPP_TOKEN or not settings.WHATSAPP_PHONE_NUMBER_ID:
        if settings.ENV.lower() in {"dev", "local", "test"}:
            logger.info("Using MockWhatsAppPlatform (credentials missing, ENV=dev/local)")
            return MockWhatsAppPlatform()
        raise ValueError("WHATSAPP_TOKEN and WHATSAPP_PHONE_NUMBER_ID are required to send WhatsApp replies.")

    logger.info("Using real WhatsAppPlatform")
    client = WhatsAppClient(
        access_token=settings.WHATSAPP_TOKEN,
        phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
        api_base=settings.WHATSAPP_API_BASE,
    )
    return WhatsAppPlatform(client=client)


def get_webhook_verifier() -> WebhookVerifier:
    return WebhookVerifier(
        verify_token=settings.WHATSAPP_VERIFY_TOKEN,
        app_secret=settings.WHATSAPP_APP_SECRET,
        env=settings.ENV,
    )


def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    platform = get_whatsapp_platform()
    return HandleIncomingMessageUseCase(
        classifier=get_classifier(),
        composer=get_composer(),
        locale_detector=get_locale_detector(),
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=settings.AUTO_REPLY_ENABLED),
        platform=platform,
        media=platform,
        transcriber=get_transcriber(),
    )
