from abc import ABC, abstractmethod

from smartduck.domain.entities.knowledge_base import KnowledgeBase


class KnowledgeBaseSource(ABC):
    @abstractmethod
    def load(self) -> KnowledgeBase:
        """
        Read and validate the whole knowledge base.
        Raises LoadError if the source is unreadable or malformed.
        """
        raise NotImplementedError
