"""Tool version engine.

This package provides the per-tool binary version machinery:
- Tool descriptors and the catalog (base.py, registry.py, definitions/)
- Version resolution (resolver.py)
- Download, verification and extraction (retriever.py, archive.py, checksums.py)
- The on-disk version store (store.py)
- Activation links (links.py)
"""

from opstool.tools.base import ArtifactKind, ChecksumStrategy, ToolDescriptor
from opstool.tools.errors import (
    ActivationError,
    EngineError,
    FetchError,
    ResolutionError,
    Stage,
    StoreError,
)
from opstool.tools.http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from opstool.tools.links import ActiveLink, LinkManager
from opstool.tools.registry import ToolCatalog
from opstool.tools.resolver import (
    LATEST,
    GitHubLatestSource,
    LatestVersionSource,
    ResolvedVersion,
    VersionResolver,
)
from opstool.tools.retriever import Retriever, TempArtifact
from opstool.tools.retry import RetryPolicy
from opstool.tools.store import InstalledVersion, VersionStore

__all__ = [
    # Descriptors
    "ArtifactKind",
    "ChecksumStrategy",
    "ToolDescriptor",
    "ToolCatalog",
    # Errors
    "ActivationError",
    "EngineError",
    "FetchError",
    "ResolutionError",
    "Stage",
    "StoreError",
    # HTTP
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "RetryPolicy",
    # Resolve
    "LATEST",
    "GitHubLatestSource",
    "LatestVersionSource",
    "ResolvedVersion",
    "VersionResolver",
    # Fetch / store / link
    "Retriever",
    "TempArtifact",
    "InstalledVersion",
    "VersionStore",
    "ActiveLink",
    "LinkManager",
]
