"""Document descriptors and source specifications.

A descriptor identifies one document of the catalog; its ``source`` is one
variant of the source specification union, selected by ``type``.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Union

from .errors import UnknownSourceKindError

CATEGORIES = ("internal", "public", "user")


@dataclass(frozen=True)
class GitHubSource:
    """Markdown file in a GitHub repository."""
    repo: str
    path: str
    branch: str = "main"

    type: ClassVar[str] = "github"

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'repo': self.repo, 'path': self.path, 'branch': self.branch}


@dataclass(frozen=True)
class GCPSource:
    """Page of the Google Cloud product documentation."""
    product: str
    page: str

    type: ClassVar[str] = "gcp"

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'product': self.product, 'page': self.page}


@dataclass(frozen=True)
class TerraformSource:
    """Resource page of the Terraform registry."""
    provider: str
    resource: str

    type: ClassVar[str] = "terraform"

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'provider': self.provider, 'resource': self.resource}


@dataclass(frozen=True)
class TektonSource:
    """Page of the Tekton documentation."""
    doc_path: str

    type: ClassVar[str] = "tekton"

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'doc_path': self.doc_path}


@dataclass(frozen=True)
class URLSource:
    """Any document reachable over HTTP(S)."""
    url: str

    type: ClassVar[str] = "url"

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'url': self.url}


SourceSpec = Union[GitHubSource, GCPSource, TerraformSource, TektonSource, URLSource]

SOURCE_TYPES = {
    cls.type: cls
    for cls in (GitHubSource, GCPSource, TerraformSource, TektonSource, URLSource)
}


def source_from_dict(data: Dict[str, Any]) -> SourceSpec:
    """Build the source variant named by ``data['type']``."""
    kind = data.get('type')
    if kind == "github":
        return GitHubSource(repo=data['repo'], path=data['path'], branch=data.get('branch') or "main")
    if kind == "gcp":
        return GCPSource(product=data['product'], page=data['page'])
    if kind == "terraform":
        return TerraformSource(provider=data['provider'], resource=data['resource'])
    if kind == "tekton":
        # camelCase is accepted for catalogs exported from other tools
        return TektonSource(doc_path=data.get('doc_path') or data['docPath'])
    if kind == "url":
        return URLSource(url=data['url'])
    raise UnknownSourceKindError(kind)


@dataclass(frozen=True)
class DocumentDescriptor:
    """Static record identifying one document to fetch."""
    topic: str
    title: str
    description: str
    category: str
    priority: float
    source: SourceSpec

    def __post_init__(self):
        """Validate descriptor after initialization."""
        if not self.topic:
            raise ValueError("Document topic cannot be empty")

        if self.category not in CATEGORIES:
            raise ValueError(f"Invalid category: {self.category}")

        if not 0.0 <= self.priority <= 1.0:
            raise ValueError(f"Priority must be between 0 and 1, got {self.priority}")

        if type(self.source) not in SOURCE_TYPES.values():
            raise UnknownSourceKindError(getattr(self.source, 'type', type(self.source).__name__))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocumentDescriptor':
        """Create DocumentDescriptor from dictionary."""
        return cls(
            topic=data['topic'],
            title=data['title'],
            description=data.get('description', ''),
            category=data.get('category', 'public'),
            priority=float(data.get('priority', 0.5)),
            source=source_from_dict(data['source'])
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'topic': self.topic,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'priority': self.priority,
            'source': self.source.to_dict()
        }
