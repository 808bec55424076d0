from dataclasses import dataclass, field


FALLBACK_INTENT_ID = "fallback_unknown"


@dataclass(frozen=True)
class DetectedEntity:
    type: str
    value: str


@dataclass(frozen=True)
class ClassifiedIntent:
    intent_id: str
    confidence: float
    locale: str
    entities: tuple[DetectedEntity, ...] = field(default_factory=tuple)
    matched_pattern: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.intent_id == FALLBACK_INTENT_ID

    def first_entity(self, entity_type: str) -> DetectedEntity | None:
        for entity in self.entities:
            if entity.type == entity_type:
                return entity
        return None
