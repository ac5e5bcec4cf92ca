"""
Main engine for the gitsemver system.

Provides a high-level interface for computing, formatting and tagging
the next version of a repository.
"""

import logging
from typing import Optional

from gitsemver.core.config import Config, EngineConfig
from gitsemver.repository.backend import RepositoryBackend, tag_release
from gitsemver.repository.git_handler import GitRepository
from gitsemver.repository.main_branch import MainBranchResolver
from gitsemver.resolver import VersionResolver
from gitsemver.versioning.semver import SemVer

logger = logging.getLogger(__name__)


class VersionEngine:
    """
    Main engine for next-version computation.

    Opens the configured repository lazily unless a backend is given.
    """

    def __init__(
        self,
        config: EngineConfig = None,
        backend: Optional[RepositoryBackend] = None,
    ):
        self.config = config or Config.get()
        self._backend = backend

    @property
    def backend(self) -> RepositoryBackend:
        if self._backend is None:
            self._backend = GitRepository.open(
                self.config.repository.path, self.config.repository
            )
        return self._backend

    def create_resolver(self) -> VersionResolver:
        """Create a resolver wired to the configured repository."""
        return VersionResolver(
            self.backend,
            MainBranchResolver(self.backend, self.config.repository),
            prefix=self.config.versioning.prefix,
            filter_path=self.config.versioning.filter_path,
        )

    def next_version(self) -> SemVer:
        """Compute the next version of the repository."""
        version = self.create_resolver().resolve()
        if self.config.versioning.prefix:
            version.prefix = self.config.versioning.prefix
        return version

    def format(self, version: SemVer) -> str:
        """Render a version as a tag name honouring the release setting."""
        return version.render(self.config.versioning.release)

    def run(self, tag: bool = False) -> str:
        """
        Compute the next version and optionally tag HEAD with it.

        Args:
            tag: Create an annotated tag unless it already exists.

        Returns:
            The formatted version.
        """
        tag_name = self.format(self.next_version())
        logger.info(f"Next version: {tag_name}")

        if tag:
            tag_release(self.backend, tag_name)
        return tag_name
