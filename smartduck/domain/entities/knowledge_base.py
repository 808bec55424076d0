from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class IntentResponse:
    templates: Mapping[str, str]
    quick_replies: tuple[str, ...] = field(default_factory=tuple)

    def template_for(self, locale: str, default_locale: str) -> str | None:
        if locale in self.templates:
            return self.templates[locale]
        if default_locale in self.templates:
            return self.templates[default_locale]
        return next(iter(self.templates.values()), None)


@dataclass(frozen=True)
class Intent:
    id: str
    patterns: tuple[str, ...]
    response: IntentResponse
    enrichments: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CityHours:
    weekdays: str
    saturday: str


@dataclass(frozen=True)
class KnowledgeBase:
    """
    Static dataset driving classification and replies.

    Built once at startup and shared read-only between the classifier and the
    composer. `pricing` keys are lowercased zone names. The loader hands in
    read-only mappings.
    """

    intents: tuple[Intent, ...]
    routing_order: tuple[str, ...]
    entities: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    variable_defaults: Mapping[str, str | int | float] = field(default_factory=dict)
    pricing: Mapping[str, int | float] = field(default_factory=dict)
    hours: Mapping[str, CityHours] = field(default_factory=dict)

    def get_intent(self, intent_id: str) -> Intent | None:
        for intent in self.intents:
            if intent.id == intent_id:
                return intent
        return None

    def get_variable(self, name: str) -> str:
        value = self.variable_defaults.get(name)
        return "" if value is None else str(value)

    def get_price_for_zone(self, zone: str) -> int | float:
        return self.pricing.get((zone or "").strip().lower(), 0)

    def get_hours(self, city: str) -> CityHours | None:
        if city in self.hours:
            return self.hours[city]
        wanted = (city or "").strip().lower()
        for name, hours in self.hours.items():
            if name.lower() == wanted:
                return hours
        return None
