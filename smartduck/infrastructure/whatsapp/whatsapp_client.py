from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from smartduck.application.exceptions import MediaDownloadError, SendError


MAX_BUTTONS = 3
MAX_BUTTON_TITLE = 20


class WhatsAppClient:
    """Thin wrapper over the WhatsApp Cloud API (Graph) endpoints the bot uses."""

    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_base: str,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_base = api_base.rstrip("/")
        self._phone_number_id = phone_number_id
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    @property
    def messages_endpoint(self) -> str:
        return f"{self._api_base}/{self._phone_number_id}/messages"

    def send_text(self, recipient_id: str, text: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": recipient_id,
            "type": "text",
            "text": {"body": text},
        }
        self._send(payload, recipient_id=recipient_id, text_length=len(text))

    def send_buttons(self, recipient_id: str, text: str, titles: Sequence[str]) -> None:
        buttons = [
            {"type": "reply", "reply": {"id": f"qr_{i}", "title": title[:MAX_BUTTON_TITLE].rstrip()}}
            for i, title in enumerate(titles[:MAX_BUTTONS])
        ]
        payload = {
            "messaging_product": "whatsapp",
            "to": recipient_id,
            "type": "interactive",
            "interactive": {
                "type": "button",
                "body": {"text": text},
                "action": {"buttons": buttons},
            },
        }
        self._send(payload, recipient_id=recipient_id, text_length=len(text))

    def mark_read(self, message_id: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "status": "read",
            "message_id": message_id,
        }
        try:
            resp = self._client.post(self.messages_endpoint, headers=self._headers, json=payload)
        except httpx.HTTPError as e:
            self._logger.warning("markRead failed", extra={"message_id": message_id, "reason": str(e)})
            return
        if resp.status_code >= 400:
            self._logger.warning(
                "markRead failed",
                extra={"message_id": message_id, "status": resp.status_code, "reason": resp.text},
            )

    def get_media_url(self, media_id: str) -> str:
        try:
            resp = self._client.get(f"{self._api_base}/{media_id}", headers=self._headers)
        except httpx.HTTPError as e:
            raise MediaDownloadError(f"getMediaUrl failed: {e}") from e
        if resp.status_code >= 400:
            raise MediaDownloadError(f"getMediaUrl failed: {resp.status_code}")
        url = (resp.json() or {}).get("url")
        if not url:
            raise MediaDownloadError("No media url returned")
        return str(url)

    def download_media(self, url: str) -> bytes:
        try:
            resp = self._client.get(url, headers=self._headers, timeout=30.0)
        except httpx.HTTPError as e:
            raise MediaDownloadError(f"downloadMedia failed: {e}") from e
        if resp.status_code >= 400:
            self._logger.error(
                "downloadMedia failed",
                extra={"status": resp.status_code, "reason": resp.text},
            )
            raise MediaDownloadError(f"downloadMedia failed: {resp.status_code}")
        return resp.content

    def _send(self, payload: dict[str, Any], recipient_id: str, text_length: int) -> None:
        try:
            resp = self._client.post(self.messages_endpoint, headers=self._headers, json=payload)
        except httpx.HTTPError as e:
            self._logger.error("WhatsApp send failed", extra={"recipient_id": recipient_id, "reason": str(e)})
            raise SendError(f"WhatsApp send failed: {e}") from e

        if resp.status_code >= 400:
            try:
                error = resp.json().get("error", {})
                error_code = error.get("code")
                error_message = error.get("message")
                error_subcode = error.get("error_subcode")
            except ValueError:
                error_code = None
                error_message = resp.text
                error_subcode = None

            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "status": resp.status_code,
                    "error_code": error_code,
                    "error_message": error_message,
                    "error_subcode": error_subcode,
                    "recipient_id": recipient_id,
                    "text_length": text_length,
                },
            )
            raise SendError(f"WhatsApp send failed: {resp.status_code}")

        self._logger.info("Sent message", extra={"recipient_id": recipient_id})
