"""Error taxonomy shared by the catalog, the source adapters and the router.

Every message is meant to be shown to the end user as-is.
"""

from typing import Iterable, Optional


class DocSourceError(Exception):
    """Base class for documentation source failures."""
    pass


class DocumentNotFoundError(DocSourceError):
    """The origin confirmed the requested resource does not exist."""
    pass


class TopicNotFoundError(DocumentNotFoundError):
    """A topic requested for direct retrieval is not in the catalog."""

    def __init__(self, topic: str, available: Iterable[str] = ()):
        self.topic = topic
        self.available = list(available)
        message = f'Topic "{topic}" not found.'
        if self.available:
            message += f"\n\nAvailable topics: {', '.join(self.available)}"
        super().__init__(message)


class SourceTransportError(DocSourceError):
    """Network or origin-side failure (rate limit, 5xx, connection error)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class AuthenticationRequiredError(DocSourceError):
    """No usable credential path for a source that needs one."""
    pass


class UnknownSourceKindError(DocSourceError):
    """A source specification carries a kind no adapter handles."""

    def __init__(self, kind: object):
        self.kind = kind
        super().__init__(f"Unknown source type: {kind}")


class DuplicateTopicError(DocSourceError):
    """A catalog entry with the same topic already exists."""

    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(f'Topic "{topic}" already exists')
