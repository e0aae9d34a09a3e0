"""Document catalog: built-in descriptors followed by user-added ones."""

import logging
from typing import List, Optional, Sequence

from .errors import DuplicateTopicError
from .loader import CatalogLoader
from .models import CATEGORIES, DocumentDescriptor
from .user_docs import UserDocSource, UserDocStore

logger = logging.getLogger(__name__)


class Catalog:
    """Ordered, topic-unique collection of document descriptors.

    Each accessor returns a fresh snapshot; callers never see later
    additions or removals through a list they already hold.
    """

    def __init__(self, builtin: Sequence[DocumentDescriptor] = (),
                 user_store: Optional[UserDocStore] = None,
                 loader: Optional[CatalogLoader] = None):
        self._builtin = list(builtin)
        self._loader = loader
        self.user_store = user_store

    @classmethod
    def from_files(cls, catalog_path, user_docs_path) -> 'Catalog':
        return cls(loader=CatalogLoader(catalog_path), user_store=UserDocStore(user_docs_path))

    def _builtin_descriptors(self) -> List[DocumentDescriptor]:
        if self._loader is not None:
            return self._loader.load()
        return list(self._builtin)

    def all(self) -> List[DocumentDescriptor]:
        """Built-in descriptors, then user docs whose topic is not taken."""
        descriptors = self._builtin_descriptors()
        if self.user_store is None:
            return descriptors

        taken = {d.topic for d in descriptors}
        for descriptor in self.user_store.descriptors():
            if descriptor.topic in taken:
                logger.warning(f"User doc '{descriptor.topic}' shadows a built-in topic; ignoring it")
                continue
            taken.add(descriptor.topic)
            descriptors.append(descriptor)
        return descriptors

    def get(self, topic: str) -> Optional[DocumentDescriptor]:
        for descriptor in self.all():
            if descriptor.topic == topic:
                return descriptor
        return None

    def by_category(self, category: str) -> List[DocumentDescriptor]:
        if category not in CATEGORIES:
            raise ValueError(f"Invalid category: {category}")
        return [d for d in self.all() if d.category == category]

    def topics(self) -> List[str]:
        return [d.topic for d in self.all()]

    def add_user_doc(self, topic: str, title: str, description: str, url: str) -> UserDocSource:
        """Persist a user doc; the topic must be unique across the whole catalog."""
        if self.user_store is None:
            raise RuntimeError("Catalog has no user doc store configured")
        if any(d.topic == topic for d in self._builtin_descriptors()):
            raise DuplicateTopicError(topic)
        return self.user_store.add(topic, title, description, url)

    def remove_user_doc(self, topic: str) -> bool:
        if self.user_store is None:
            return False
        return self.user_store.remove(topic)

    def list_user_docs(self) -> List[UserDocSource]:
        if self.user_store is None:
            return []
        return self.user_store.list()
