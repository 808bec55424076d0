from abc import ABC, abstractmethod
from typing import Sequence


class MessagePlatformPort(ABC):
    @abstractmethod
    def send_text(self, recipient_id: str, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def send_quick_replies(self, recipient_id: str, text: str, replies: Sequence[str]) -> None:
        """Send text with up to three tappable reply buttons."""
        raise NotImplementedError

    @abstractmethod
    def mark_read(self, message_id: str) -> None:
        raise NotImplementedError


class MediaFetcherPort(ABC):
    @abstractmethod
    def fetch(self, media_id: str) -> bytes:
        """Resolve a media id and download its bytes. Raises MediaDownloadError."""
        raise NotImplementedError
