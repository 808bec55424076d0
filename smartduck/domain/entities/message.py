from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    id: str
    sender_id: str
    type: str
    timestamp: int
    text: str = ""
    media_id: str | None = None
    caption: str | None = None
    platform: str = "whatsapp"
