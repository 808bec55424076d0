from __future__ import annotations

import logging
from typing import Sequence

from smartduck.application.exceptions import MediaDownloadError
from smartduck.application.ports.message_platform import MediaFetcherPort, MessagePlatformPort


class MockWhatsAppPlatform(MessagePlatformPort, MediaFetcherPort):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        self._logger.info("Mock send to WhatsApp", extra={"recipient_id": recipient_id, "reply_text": text})

    def send_quick_replies(self, recipient_id: str, text: str, replies: Sequence[str]) -> None:
        self._logger.info(
            "Mock send to WhatsApp",
            extra={"recipient_id": recipient_id, "reply_text": text, "quick_replies": list(replies)},
        )

    def mark_read(self, message_id: str) -> None:
        self._logger.debug("Mock mark read", extra={"message_id": message_id})

    def fetch(self, media_id: str) -> bytes:
        raise MediaDownloadError(f"Media {media_id} unavailable without WHATSAPP_TOKEN")
