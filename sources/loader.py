"""Built-in catalog loader for orgdocs.

Loads and validates document descriptors from a YAML file.
"""

import yaml
from pathlib import Path
from typing import Any, List, Optional, Set
import logging

from .errors import UnknownSourceKindError
from .models import DocumentDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_FILE = Path(__file__).parent / "builtin_sources.yaml"


class CatalogLoader:
    """Loads the built-in document catalog from a YAML file."""

    def __init__(self, catalog_path: Optional[Path] = None):
        """Initialize catalog loader.

        Args:
            catalog_path: YAML file holding a ``sources`` list.
                          Defaults to the catalog bundled with this package.
        """
        self.catalog_path = Path(catalog_path or DEFAULT_CATALOG_FILE)
        self._cache: Optional[List[DocumentDescriptor]] = None
        self._last_modified: Optional[float] = None

    def load(self) -> List[DocumentDescriptor]:
        """Load the catalog, reusing the parsed copy while the file is unchanged.

        Returns:
            Descriptors in file order. Invalid entries and repeated topics
            are logged and skipped.
        """
        if not self.catalog_path.exists():
            logger.warning(f"Catalog file not found: {self.catalog_path}")
            return []

        current_mtime = self.catalog_path.stat().st_mtime
        if self._cache is not None and self._last_modified is not None and self._last_modified >= current_mtime:
            return list(self._cache)

        try:
            with open(self.catalog_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse catalog file {self.catalog_path}: {e}")
            return []

        descriptors = self.parse(data)
        self._cache = descriptors
        self._last_modified = current_mtime

        logger.info(f"Loaded {len(descriptors)} built-in documents from {self.catalog_path}")
        return list(descriptors)

    def parse(self, data: Any) -> List[DocumentDescriptor]:
        """Convert parsed YAML into descriptors."""
        if isinstance(data, dict):
            entries = data.get('sources') or []
        elif isinstance(data, list):
            entries = data
        else:
            logger.error(f"Empty or invalid catalog file: {self.catalog_path}")
            return []

        descriptors: List[DocumentDescriptor] = []
        seen: Set[str] = set()

        for index, entry in enumerate(entries):
            try:
                descriptor = DocumentDescriptor.from_dict(entry)
            except (ValueError, KeyError, TypeError, UnknownSourceKindError) as e:
                logger.error(f"Invalid catalog entry #{index} in {self.catalog_path}: {e}")
                continue

            if descriptor.topic in seen:
                logger.warning(f"Duplicate topic '{descriptor.topic}' in {self.catalog_path}; keeping the first entry")
                continue

            seen.add(descriptor.topic)
            descriptors.append(descriptor)

        return descriptors


def load_catalog_file(path: Optional[Path] = None) -> List[DocumentDescriptor]:
    """Convenience function to load a catalog file once.

    Args:
        path: Catalog YAML file

    Returns:
        List of descriptors
    """
    return CatalogLoader(path).load()

