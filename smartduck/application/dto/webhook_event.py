from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from smartduck.domain.entities.message import InboundMessage


class WebhookEventDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_messages(self) -> list[InboundMessage]:
        messages: list[InboundMessage] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value") or {}
                for msg in value.get("messages", []) or []:
                    message = _to_message(msg)
                    if message is not None:
                        messages.append(message)
        return messages


def _to_message(msg: dict[str, Any]) -> InboundMessage | None:
    mid = msg.get("id")
    sender = msg.get("from")
    if not (mid and sender):
        return None

    msg_type = msg.get("type") or "unknown"
    timestamp = _to_int(msg.get("timestamp"))
    common = {"id": str(mid), "sender_id": str(sender), "timestamp": timestamp}

    if msg_type == "text":
        return InboundMessage(type="text", text=str((msg.get("text") or {}).get("body") or ""), **common)

    # Tapped quick replies come back either as interactive button replies or
    # as template buttons; their title is what the user "said".
    if msg_type == "interactive":
        interactive = msg.get("interactive") or {}
        reply = interactive.get("button_reply") or interactive.get("list_reply") or {}
        return InboundMessage(type="text", text=str(reply.get("title") or ""), **common)
    if msg_type == "button":
        return InboundMessage(type="text", text=str((msg.get("button") or {}).get("text") or ""), **common)

    if msg_type in ("audio", "voice"):
        media = msg.get("audio") or msg.get("voice") or {}
        return InboundMessage(type="audio", media_id=media.get("id"), **common)

    if msg_type == "image":
        image = msg.get("image") or {}
        return InboundMessage(type="image", media_id=image.get("id"), caption=image.get("caption"), **common)

    return InboundMessage(type=str(msg_type), **common)


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
