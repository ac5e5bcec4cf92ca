"""
Core module containing configuration and the error hierarchy.
"""

from gitsemver.core.config import (
    Config,
    EngineConfig,
    OutputConfig,
    RepositoryConfig,
    VersioningConfig,
)
from gitsemver.core.exceptions import (
    VersioningError,
    ParseError,
    TraversalError,
    UnreachableTagsError,
    RepositoryError,
    MainBranchError,
    TagCreationError,
    ConfigurationError,
)

__all__ = [
    "Config",
    "EngineConfig",
    "OutputConfig",
    "RepositoryConfig",
    "VersioningConfig",
    "VersioningError",
    "ParseError",
    "TraversalError",
    "UnreachableTagsError",
    "RepositoryError",
    "MainBranchError",
    "TagCreationError",
    "ConfigurationError",
]
