from __future__ import annotations

from smartduck.application.utils.text_normalizer import normalize
from smartduck.domain.entities.intent import DetectedEntity
from smartduck.domain.entities.knowledge_base import KnowledgeBase


class EntityExtractor:
    """
    Finds knowledge base vocabulary inside free text.

    Matching is a substring test on normalized text, so "Épaules" matches the
    declared value "epaules". The declared value is returned verbatim. Results
    follow entity-type order then value order as declared in the knowledge base.
    """

    def __init__(self, kb: KnowledgeBase) -> None:
        self._vocabulary: list[tuple[str, str, str]] = [
            (entity_type, value, normalize(value))
            for entity_type, values in kb.entities.items()
            for value in values
        ]

    def extract(self, raw_text: str) -> list[DetectedEntity]:
        normalized = normalize(raw_text)
        return [
            DetectedEntity(type=entity_type, value=value)
            for entity_type, value, normalized_value in self._vocabulary
            if normalized_value and normalized_value in normalized
        ]
