from __future__ import annotations

import logging
import re
from typing import Any, Callable

from smartduck.domain.entities.intent import ClassifiedIntent
from smartduck.domain.entities.knowledge_base import KnowledgeBase
from smartduck.domain.entities.reply import ResponsePlan


MESSAGE_LOCALES = ("fr", "en")

FALLBACK_QUICK_REPLIES = ("Tarifs", "Prestations", "RDV")

FALLBACK_TEXT = {
    "fr": "Je n'ai pas compris votre demande. Pouvez-vous reformuler ?",
    "en": "Sorry, I didn't understand your request. Could you rephrase it?",
}

HOURS_LABELS = {
    "fr": ("Lun-Ven", "Sam"),
    "en": ("Mon-Fri", "Sat"),
}

GLOBAL_SCOPE = {
    "fr": "tous nos centres",
    "en": "all our centers",
}

GENERIC_HOURS = {
    "fr": "Lun-Ven: 9:30-19:30, Sam: 10:00-18:00 (horaires généraux)",
    "en": "Mon-Fri: 9:30-19:30, Sat: 10:00-18:00 (general hours)",
}

PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

Enricher = Callable[[KnowledgeBase, ClassifiedIntent, dict[str, Any], str], None]


def _enrich_zone_price(kb: KnowledgeBase, classified: ClassifiedIntent, variables: dict[str, Any], locale: str) -> None:
    zone = classified.first_entity("zone")
    if zone is None:
        return
    variables["zone"] = zone.value
    variables["prix_zone"] = kb.get_price_for_zone(zone.value)


def _enrich_city_hours(kb: KnowledgeBase, classified: ClassifiedIntent, variables: dict[str, Any], locale: str) -> None:
    city = classified.first_entity("city")
    if city is None:
        variables["ville_ou_global"] = GLOBAL_SCOPE[locale]
        variables["horaires_ville"] = GENERIC_HOURS[locale]
        return

    variables["ville_ou_global"] = city.value
    hours = kb.get_hours(city.value)
    if hours is None:
        variables["horaires_ville"] = GENERIC_HOURS[locale]
        return
    weekdays_label, saturday_label = HOURS_LABELS[locale]
    variables["horaires_ville"] = f"{weekdays_label}: {hours.weekdays}, {saturday_label}: {hours.saturday}"


ENRICHMENT_RULES: dict[str, Enricher] = {
    "zone_price": _enrich_zone_price,
    "city_hours": _enrich_city_hours,
}


class ResponseComposer:
    def __init__(
        self,
        kb: KnowledgeBase,
        default_locale: str = "fr",
        rules: dict[str, Enricher] | None = None,
    ) -> None:
        self._kb = kb
        self._default_locale = default_locale
        self._rules = rules if rules is not None else ENRICHMENT_RULES
        self._logger = logging.getLogger(__name__)

    def compose(self, classified: ClassifiedIntent) -> ResponsePlan:
        locale = self._message_locale(classified.locale)
        intent = self._kb.get_intent(classified.intent_id)
        if intent is None:
            self._logger.warning(
                "Intent missing from knowledge base",
                extra={"intent": classified.intent_id, "language": classified.locale},
            )
            return _fallback_plan(locale)

        template = intent.response.template_for(classified.locale, self._default_locale)
        if template is None:
            self._logger.warning("Intent has no template", extra={"intent": intent.id})
            return _fallback_plan(locale)

        variables: dict[str, Any] = dict(self._kb.variable_defaults)
        for rule_name in intent.enrichments:
            rule = self._rules.get(rule_name)
            if rule is None:
                self._logger.warning("Unknown enrichment rule", extra={"intent": intent.id, "reason": rule_name})
                continue
            rule(self._kb, classified, variables, locale)

        return ResponsePlan(
            text=render_template(template, variables),
            quick_replies=tuple(intent.response.quick_replies),
            variables=variables,
        )

    def _message_locale(self, locale: str) -> str:
        if locale in MESSAGE_LOCALES:
            return locale
        if self._default_locale in MESSAGE_LOCALES:
            return self._default_locale
        return MESSAGE_LOCALES[0]


def render_template(template: str, variables: dict[str, Any]) -> str:
    """Replace `{name}` placeholders found in `variables`; leave the others as written."""

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        return _format_value(variables[name])

    return PLACEHOLDER.sub(_substitute, template)


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _fallback_plan(locale: str) -> ResponsePlan:
    return ResponsePlan(text=FALLBACK_TEXT[locale], quick_replies=FALLBACK_QUICK_REPLIES)
