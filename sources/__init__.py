"""Sources package for orgdocs.

Provides the document catalog, descriptor models and the shared error taxonomy.
"""

from .errors import (
    DocSourceError,
    DocumentNotFoundError,
    TopicNotFoundError,
    SourceTransportError,
    AuthenticationRequiredError,
    UnknownSourceKindError,
    DuplicateTopicError
)
from .models import (
    CATEGORIES,
    DocumentDescriptor,
    GitHubSource,
    GCPSource,
    TerraformSource,
    TektonSource,
    URLSource,
    SourceSpec,
    source_from_dict
)
from .loader import CatalogLoader, load_catalog_file
from .user_docs import UserDocSource, UserDocStore
from .catalog import Catalog

__all__ = [
    # Errors
    'DocSourceError',
    'DocumentNotFoundError',
    'TopicNotFoundError',
    'SourceTransportError',
    'AuthenticationRequiredError',
    'UnknownSourceKindError',
    'DuplicateTopicError',

    # Models
    'CATEGORIES',
    'DocumentDescriptor',
    'GitHubSource',
    'GCPSource',
    'TerraformSource',
    'TektonSource',
    'URLSource',
    'SourceSpec',
    'source_from_dict',

    # Catalog
    'CatalogLoader',
    'load_catalog_file',
    'UserDocSource',
    'UserDocStore',
    'Catalog'
]
