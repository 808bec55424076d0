from __future__ import annotations

from smartduck.application.exceptions import NotLoadedError
from smartduck.application.ports.knowledge_base import KnowledgeBaseSource
from smartduck.domain.entities.knowledge_base import KnowledgeBase


class KnowledgeBaseStore:
    """Holds the knowledge base loaded once at startup."""

    def __init__(self, source: KnowledgeBaseSource) -> None:
        self._source = source
        self._kb: KnowledgeBase | None = None

    @property
    def is_loaded(self) -> bool:
        return self._kb is not None

    def load(self) -> KnowledgeBase:
        # LoadError propagates and leaves the store empty.
        kb = self._source.load()
        self._kb = kb
        return kb

    def get(self) -> KnowledgeBase:
        if self._kb is None:
            raise NotLoadedError("Knowledge base accessed before load()")
        return self._kb

    def get_variable(self, name: str) -> str:
        if self._kb is None:
            return ""
        return self._kb.get_variable(name)

    def get_price_for_zone(self, zone: str) -> int | float:
        if self._kb is None:
            return 0
        return self._kb.get_price_for_zone(zone)
