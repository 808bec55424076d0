from abc import ABC, abstractmethod

from smartduck.domain.entities.intent import DetectedEntity


class ImageAnalyzerPort(ABC):
    @abstractmethod
    def detect_zones(self, image: bytes) -> list[DetectedEntity]:
        """
        Infer treatment zones visible on a photo.
        Returns entities of type "zone" using knowledge base vocabulary, or an
        empty list when nothing is recognised.
        """
        raise NotImplementedError
