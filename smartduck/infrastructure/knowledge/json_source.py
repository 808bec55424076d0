from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, Field, ValidationError

from smartduck.application.exceptions import LoadError, PatternError
from smartduck.application.ports.knowledge_base import KnowledgeBaseSource
from smartduck.application.use_cases.classify_intent import compile_pattern
from smartduck.domain.entities.knowledge_base import CityHours, Intent, IntentResponse, KnowledgeBase


DEFAULT_KB_PATH = Path(__file__).parent / "data" / "knowledge_base.json"

# Enrichment rules implied by intent id when the file does not list them.
DEFAULT_ENRICHMENTS = {
    "pricing_zone": ("zone_price",),
    "opening_hours": ("city_hours",),
}


class ResponseDoc(BaseModel):
    templates: dict[str, str] = Field(min_length=1)
    quick_replies: list[str] = Field(default_factory=list)


class IntentDoc(BaseModel):
    id: str = Field(min_length=1)
    patterns: list[str] = Field(default_factory=list)
    response: ResponseDoc
    enrichments: list[str] | None = None


class RoutingDoc(BaseModel):
    order: list[str] = Field(default_factory=list)


class ZonePriceDoc(BaseModel):
    zone: str
    prix: float | int


class TariffsDoc(BaseModel):
    monozone: list[ZonePriceDoc] = Field(default_factory=list)


class CityHoursDoc(BaseModel):
    lun_ven: str
    sam: str


class FactsDoc(BaseModel):
    tarifs: TariffsDoc = Field(default_factory=TariffsDoc)
    horaires: dict[str, CityHoursDoc] = Field(default_factory=dict)


class KnowledgeBaseDoc(BaseModel):
    routing: RoutingDoc
    intents: list[IntentDoc]
    entities: dict[str, list[str]] = Field(default_factory=dict)
    variables_defaults: dict[str, str | int | float] = Field(default_factory=dict)
    kb: FactsDoc = Field(default_factory=FactsDoc)


class JsonKnowledgeBaseSource(KnowledgeBaseSource):
    """
    Reads the bot dataset from a JSON file.

    The whole document is validated before anything is returned: structure,
    duplicate intent ids and every regex pattern. Any problem is a LoadError.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path else DEFAULT_KB_PATH
        self._logger = logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> KnowledgeBase:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise LoadError(f"Cannot read knowledge base {self._path}: {e}") from e

        try:
            doc = KnowledgeBaseDoc.model_validate(raw)
        except ValidationError as e:
            raise LoadError(f"Malformed knowledge base {self._path}: {e}") from e

        kb = build_knowledge_base(doc)
        unknown = [intent_id for intent_id in kb.routing_order if kb.get_intent(intent_id) is None]
        if unknown:
            self._logger.warning("Routing order references unknown intents", extra={"reason": ",".join(unknown)})

        self._logger.info(
            "Knowledge base loaded",
            extra={"path": str(self._path), "intent_count": len(kb.intents)},
        )
        return kb


def build_knowledge_base(doc: KnowledgeBaseDoc) -> KnowledgeBase:
    seen: set[str] = set()
    intents: list[Intent] = []
    for item in doc.intents:
        if item.id in seen:
            raise LoadError(f"Duplicate intent id {item.id!r}")
        seen.add(item.id)

        for pattern in item.patterns:
            try:
                compile_pattern(item.id, pattern)
            except PatternError as e:
                raise LoadError(str(e)) from e

        enrichments = item.enrichments if item.enrichments is not None else DEFAULT_ENRICHMENTS.get(item.id, ())
        intents.append(
            Intent(
                id=item.id,
                patterns=tuple(item.patterns),
                response=IntentResponse(
                    templates=MappingProxyType(dict(item.response.templates)),
                    quick_replies=tuple(item.response.quick_replies),
                ),
                enrichments=tuple(enrichments),
            )
        )

    return KnowledgeBase(
        intents=tuple(intents),
        routing_order=tuple(doc.routing.order),
        entities=MappingProxyType({entity_type: tuple(values) for entity_type, values in doc.entities.items()}),
        variable_defaults=MappingProxyType(dict(doc.variables_defaults)),
        pricing=MappingProxyType({entry.zone.strip().lower(): entry.prix for entry in doc.kb.tarifs.monozone}),
        hours=MappingProxyType(
            {city: CityHours(weekdays=hours.lun_ven, saturday=hours.sam) for city, hours in doc.kb.horaires.items()}
        ),
    )
