"""
Repository access for tag and history enumeration.
"""

from gitsemver.repository.backend import (
    HeadRef,
    InMemoryRepository,
    RepositoryBackend,
    tag_release,
)
from gitsemver.repository.git_handler import GitRepository
from gitsemver.repository.main_branch import MainBranchResolver

__all__ = [
    "HeadRef",
    "InMemoryRepository",
    "RepositoryBackend",
    "tag_release",
    "GitRepository",
    "MainBranchResolver",
]
