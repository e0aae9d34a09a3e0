"""Source adapters: one per source kind, all behind ``SourceAdapter``."""

from .base import HttpClient, HttpResponse, SourceAdapter, Normalizer
from .github import (
    GitHubAdapter,
    GitHubAuthPath,
    CommandResult,
    run_command,
    select_auth_path,
    AUTH_REQUIRED_MESSAGE
)
from .gcp import GCPAdapter
from .terraform import TerraformAdapter
from .tekton import TektonAdapter
from .url import URLAdapter, UrlPreview

__all__ = [
    'HttpClient',
    'HttpResponse',
    'SourceAdapter',
    'Normalizer',
    'GitHubAdapter',
    'GitHubAuthPath',
    'CommandResult',
    'run_command',
    'select_auth_path',
    'AUTH_REQUIRED_MESSAGE',
    'GCPAdapter',
    'TerraformAdapter',
    'TektonAdapter',
    'URLAdapter',
    'UrlPreview'
]
