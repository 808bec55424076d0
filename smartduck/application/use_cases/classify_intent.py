from __future__ import annotations

import logging
import re
from typing import Sequence

from smartduck.application.exceptions import PatternError
from smartduck.application.utils.entity_extractor import EntityExtractor
from smartduck.application.utils.text_normalizer import normalize
from smartduck.domain.entities.intent import FALLBACK_INTENT_ID, ClassifiedIntent, DetectedEntity
from smartduck.domain.entities.knowledge_base import KnowledgeBase


MATCH_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.2

# Generic intent -> (entity type, specific intent) once that entity is known
# from outside the text, e.g. a zone recognised on a photo.
HINT_REFINEMENTS = {
    "pricing_general": ("zone", "pricing_zone"),
}


def compile_pattern(intent_id: str, pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise PatternError(intent_id, pattern, str(e)) from e


class IntentClassifier:
    """
    Rule-based intent detection over the knowledge base.

    Intents are tried in routing order and their patterns in declared order;
    the first pattern found in the normalized text wins with a fixed
    confidence. Nothing matching yields `fallback_unknown`.
    """

    def __init__(self, kb: KnowledgeBase, extractor: EntityExtractor | None = None) -> None:
        self._kb = kb
        self._extractor = extractor or EntityExtractor(kb)
        self._logger = logging.getLogger(__name__)
        self._routes: list[tuple[str, list[tuple[str, re.Pattern[str]]]]] = []

        for intent_id in kb.routing_order:
            intent = kb.get_intent(intent_id)
            if intent is None:
                continue
            compiled: list[tuple[str, re.Pattern[str]]] = []
            for pattern in intent.patterns:
                try:
                    compiled.append((pattern, compile_pattern(intent.id, pattern)))
                except PatternError as e:
                    # Bad pattern never matches; the rest of the intent stays usable.
                    self._logger.error(
                        "Skipping invalid intent pattern",
                        extra={"intent": e.intent_id, "pattern": e.pattern, "reason": e.reason},
                    )
            self._routes.append((intent.id, compiled))
        self._route_ids = {intent_id for intent_id, _ in self._routes}

    def classify(
        self,
        raw_text: str,
        locale: str,
        hinted_entities: Sequence[DetectedEntity] = (),
    ) -> ClassifiedIntent:
        """
        Classify `raw_text`.

        `hinted_entities` come from outside the text (image analysis). They are
        placed before the extracted entities and may refine a generic intent
        into its specific counterpart (see `HINT_REFINEMENTS`).
        """
        normalized = normalize(raw_text)
        entities = tuple(hinted_entities) + tuple(self._extractor.extract(raw_text))

        for intent_id, patterns in self._routes:
            for pattern, regex in patterns:
                if regex.search(normalized):
                    return ClassifiedIntent(
                        intent_id=self._refine(intent_id, hinted_entities),
                        confidence=MATCH_CONFIDENCE,
                        locale=locale,
                        entities=entities,
                        matched_pattern=pattern,
                    )

        return ClassifiedIntent(
            intent_id=FALLBACK_INTENT_ID,
            confidence=FALLBACK_CONFIDENCE,
            locale=locale,
            entities=entities,
        )

    def _refine(self, intent_id: str, hinted_entities: Sequence[DetectedEntity]) -> str:
        refinement = HINT_REFINEMENTS.get(intent_id)
        if refinement is None:
            return intent_id
        entity_type, target_id = refinement
        if target_id not in self._route_ids:
            return intent_id
        if any(entity.type == entity_type for entity in hinted_entities):
            return target_id
        return intent_id
