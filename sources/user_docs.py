"""User-managed documentation sources.

Persisted as JSON (``{"sources": [...]}``) and re-read whenever the file
changes on disk, so edits made by another process show up on the next call.
"""

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import DuplicateTopicError
from .models import DocumentDescriptor, URLSource

logger = logging.getLogger(__name__)

USER_DOC_PRIORITY = 0.9


@dataclass
class UserDocSource:
    """A URL added to the catalog by the user."""
    topic: str
    title: str
    description: str
    url: str
    added_at: str = ""

    def __post_init__(self):
        if not self.added_at:
            self.added_at = datetime.now(timezone.utc).isoformat()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserDocSource':
        return cls(
            topic=data['topic'],
            title=data['title'],
            description=data.get('description', ''),
            url=data['url'],
            added_at=data.get('added_at') or data.get('addedAt', '')
        )

    def to_descriptor(self) -> DocumentDescriptor:
        return DocumentDescriptor(
            topic=self.topic,
            title=self.title,
            description=self.description,
            category="user",
            priority=USER_DOC_PRIORITY,
            source=URLSource(url=self.url)
        )


class UserDocStore:
    """JSON-file backed store of user-added documents."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._docs: List[UserDocSource] = []
        self._last_modified: Optional[float] = None

    def _refresh(self) -> None:
        """Reload from disk when the file changed since the last read."""
        if not self.path.exists():
            self._docs = []
            self._last_modified = None
            return

        current_mtime = self.path.stat().st_mtime
        if self._last_modified is not None and self._last_modified >= current_mtime:
            return

        try:
            data = json.loads(self.path.read_text(encoding='utf-8') or '{}')
            self._docs = [UserDocSource.from_dict(item) for item in data.get('sources', [])]
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Failed to load user docs from {self.path}: {e}")
            self._docs = []

        self._last_modified = current_mtime
        logger.debug(f"Loaded {len(self._docs)} user docs from {self.path}")

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {'sources': [asdict(doc) for doc in self._docs]}
        self.path.write_text(json.dumps(payload, indent=2) + "\n", encoding='utf-8')
        self._last_modified = self.path.stat().st_mtime

    def list(self) -> List[UserDocSource]:
        """List all user docs."""
        self._refresh()
        return list(self._docs)

    def descriptors(self) -> List[DocumentDescriptor]:
        """User docs as catalog descriptors, in insertion order."""
        descriptors = []
        for doc in self.list():
            try:
                descriptors.append(doc.to_descriptor())
            except ValueError as e:
                logger.warning(f"Skipping invalid user doc '{doc.topic}': {e}")
        return descriptors

    def add(self, topic: str, title: str, description: str, url: str) -> UserDocSource:
        """Add and persist a new user doc.

        Raises:
            DuplicateTopicError: a user doc with this topic already exists
        """
        self._refresh()
        if any(doc.topic == topic for doc in self._docs):
            raise DuplicateTopicError(topic)

        doc = UserDocSource(topic=topic, title=title, description=description, url=url)
        # Fail before persisting anything invalid
        doc.to_descriptor()

        self._docs.append(doc)
        self._save()
        logger.info(f"Added user doc '{topic}' -> {url}")
        return doc

    def remove(self, topic: str) -> bool:
        """Remove a user doc by topic; False when it does not exist."""
        self._refresh()
        remaining = [doc for doc in self._docs if doc.topic != topic]
        if len(remaining) == len(self._docs):
            return False

        self._docs = remaining
        self._save()
        logger.info(f"Removed user doc '{topic}'")
        return True
