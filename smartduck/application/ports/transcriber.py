from abc import ABC, abstractmethod


class MediaTranscriberPort(ABC):
    @abstractmethod
    def transcribe(self, audio: bytes, locale: str) -> str:
        """
        Turn a voice note into text.
        Implementations may return a bracketed diagnostic placeholder instead
        of raising when the provider is disabled or fails.
        """
        raise NotImplementedError
