"""
Version resolution.

Combines a main-line walk and a current-branch walk of the history
into the next semantic version.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from gitsemver.core.exceptions import UnreachableTagsError
from gitsemver.graph.commit_graph import TraversalOrder
from gitsemver.graph.walker import CommitWalker, WalkResult
from gitsemver.repository.backend import RepositoryBackend
from gitsemver.versioning.conventional import ConventionalCommitClassifier, VersionBump
from gitsemver.versioning.semver import SemVer

logger = logging.getLogger(__name__)


@dataclass
class ResolutionTrace:
    """How the last resolved version was derived."""

    tag_count: int
    main: Optional[WalkResult] = None
    branch: Optional[WalkResult] = None
    base: Optional[SemVer] = None
    bump_level: Optional[str] = None


class VersionResolver:
    """
    Computes the next version of a repository.

    Args:
        backend: Repository to inspect.
        main_branch_provider: Callable returning the main branch name.
        prefix: Only consider tags starting with this prefix.
        filter_path: Only commits touching this path request bumps.
        classifier: Commit message classifier.
    """

    def __init__(
        self,
        backend: RepositoryBackend,
        main_branch_provider: Callable[[], str],
        prefix: Optional[str] = None,
        filter_path: Optional[str] = None,
        classifier: ConventionalCommitClassifier = None,
    ):
        self.backend = backend
        self.main_branch_provider = main_branch_provider
        self.prefix = prefix or None
        self.walker = CommitWalker(classifier, filter_path)
        self.last_trace: Optional[ResolutionTrace] = None

    def resolve(self) -> SemVer:
        """
        Resolve the next version.

        Returns:
            Next SemVer. Extended metadata is kept unless HEAD is on the
            main branch.

        Raises:
            TraversalError: If tags or commits cannot be enumerated.
            ParseError: If a reachable tag is not a semantic version.
            UnreachableTagsError: If tags exist but none is reachable from HEAD.
            MainBranchError: If the main branch name cannot be determined.
        """
        tag_refs = self.backend.list_tags(self.prefix)
        trace = ResolutionTrace(tag_count=len(tag_refs))
        self.last_trace = trace

        # No existing tags
        if not tag_refs:
            logger.info("No tags found, starting at the initial version")
            version = SemVer.initial()
            trace.base = version
            return version

        main = self.walker.walk(self.backend, tag_refs, TraversalOrder.MAINLINE)
        trace.main = main
        if main.found:
            main.version.set_branch(self.main_branch_provider())

        branch = self.walker.walk(self.backend, tag_refs, TraversalOrder.BRANCH)
        trace.branch = branch
        if branch.found:
            branch.version.set_branch(self.backend.head().name)

        # Might be in detached head state
        if not main.found and not branch.found:
            raise UnreachableTagsError(len(tag_refs))

        latest = self._latest(main, branch)
        trace.base = latest

        bump = VersionBump().merge(main.bump).merge(branch.bump)
        trace.bump_level = bump.level
        version = bump.apply(latest)

        # Drop extended information on the main branch
        if branch.found and branch.version.same_branch(main.version):
            version.ext = None

        logger.debug(
            f"Resolved {version} from base {latest} "
            f"(main={main.tag_name}, branch={branch.tag_name}, bump={bump.level})"
        )
        return version

    @staticmethod
    def _latest(main: WalkResult, branch: WalkResult) -> SemVer:
        """Pick the greater base version; equal versions favour the branch walk."""
        if not main.found:
            return branch.version
        if not branch.found:
            return main.version
        if main.version.greater_than(branch.version):
            return main.version
        return branch.version
