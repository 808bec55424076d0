
class KnowledgeBaseError(RuntimeError):
    """Base class for knowledge base failures."""
    pass


class LoadError(KnowledgeBaseError):
    """Raised when the knowledge base source is unreadable or malformed."""
    pass


class NotLoadedError(KnowledgeBaseError):
    """Raised when the knowledge base is accessed before it was loaded."""
    pass


class PatternError(KnowledgeBaseError):
    """Raised when a single intent pattern is not a valid regular expression."""

    def __init__(self, intent_id: str, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {pattern!r} for intent {intent_id!r}: {reason}")
        self.intent_id = intent_id
        self.pattern = pattern
        self.reason = reason


class SendError(RuntimeError):
    """Raised when the messaging API refuses or fails to deliver a message."""
    pass


class MediaDownloadError(RuntimeError):
    """Raised when inbound media cannot be resolved or downloaded."""
    pass
