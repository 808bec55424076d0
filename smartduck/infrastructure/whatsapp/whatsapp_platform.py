from __future__ import annotations

from typing import Sequence

from smartduck.application.ports.message_platform import MediaFetcherPort, MessagePlatformPort
from smartduck.infrastructure.whatsapp.whatsapp_client import WhatsAppClient


class WhatsAppPlatform(MessagePlatformPort, MediaFetcherPort):
    def __init__(self, client: WhatsAppClient) -> None:
        self._client = client

    def send_text(self, recipient_id: str, text: str) -> None:
        self._client.send_text(recipient_id=recipient_id, text=text)

    def send_quick_replies(self, recipient_id: str, text: str, replies: Sequence[str]) -> None:
        self._client.send_buttons(recipient_id=recipient_id, text=text, titles=list(replies))

    def mark_read(self, message_id: str) -> None:
        self._client.mark_read(message_id)

    def fetch(self, media_id: str) -> bytes:
        url = self._client.get_media_url(media_id)
        return self._client.download_media(url)
