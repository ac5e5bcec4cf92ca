"""
Default branch resolution.

Determines the name of the repository's main line branch from, in
order: explicit configuration, the remote's symbolic HEAD, and the
GitHub CLI.
"""

import logging
import shutil
import subprocess
from typing import Optional

from gitsemver.core.config import RepositoryConfig
from gitsemver.core.exceptions import MainBranchError
from gitsemver.repository.backend import RepositoryBackend

logger = logging.getLogger(__name__)


class MainBranchResolver:
    """
    Callable returning the main branch name.

    The first successful lookup is cached for the lifetime of the
    resolver.
    """

    GH_ARGS = ["repo", "view", "--json", "defaultBranchRef", "--jq", ".defaultBranchRef.name"]

    def __init__(
        self,
        backend: RepositoryBackend,
        config: RepositoryConfig = None,
        gh_executable: str = "gh",
    ):
        self.backend = backend
        self.config = config or RepositoryConfig()
        self.gh_executable = gh_executable
        self._cached: Optional[str] = None

    def __call__(self) -> str:
        if self._cached is None:
            self._cached = self.resolve()
        return self._cached

    def resolve(self) -> str:
        """
        Look up the main branch name.

        Raises:
            MainBranchError: If no source knows the default branch.
        """
        if self.config.main_branch:
            logger.debug(f"Main branch from configuration: {self.config.main_branch}")
            return self.config.main_branch

        branch = self.backend.remote_default_branch(self.config.remote)
        if branch:
            logger.debug(f"Main branch from {self.config.remote}/HEAD: {branch}")
            return branch

        branch = self._from_github_cli()
        if branch:
            logger.debug(f"Main branch from GitHub: {branch}")
            return branch

        raise MainBranchError(
            f"couldn't figure out main branch: set it explicitly or run "
            f"'git remote set-head {self.config.remote} --auto'",
            details={"remote": self.config.remote},
        )

    def _from_github_cli(self) -> Optional[str]:
        executable = shutil.which(self.gh_executable)
        if executable is None:
            return None

        try:
            result = subprocess.run(
                [executable] + self.GH_ARGS,
                capture_output=True,
                text=True,
                cwd=getattr(self.backend, "path", None),
                timeout=self.config.git_timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("GitHub CLI timed out while querying the default branch")
            return None

        if result.returncode != 0:
            logger.debug(f"GitHub CLI failed: {result.stderr.strip()}")
            return None
        return result.stdout.strip() or None
