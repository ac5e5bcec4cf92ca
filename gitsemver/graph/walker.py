"""
Commit graph walker.

Walks back from a starting commit to the most recent tagged ancestor,
counting the commits in between and accumulating the version bump
their messages request.
"""

import logging
from contextlib import closing
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from gitsemver.core.exceptions import ParseError
from gitsemver.graph.commit_graph import Commit, TraversalOrder
from gitsemver.versioning.conventional import ConventionalCommitClassifier, VersionBump
from gitsemver.versioning.semver import SemVer

if TYPE_CHECKING:
    from gitsemver.repository.backend import RepositoryBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkResult:
    """Outcome of a single walk."""

    # Latest reachable tag, None when history holds no known tag
    version: Optional[SemVer]
    bump: VersionBump = field(default_factory=VersionBump)
    commit_distance: int = 0
    head_hash: str = ""
    tag_name: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.version is not None


class CommitWalker:
    """
    Finds the latest tag reachable from a commit.

    Args:
        classifier: Commit message classifier, defaults to conventional commits.
        filter_path: Only commits touching files under this path are
            classified. None means every commit counts.
    """

    def __init__(
        self,
        classifier: ConventionalCommitClassifier = None,
        filter_path: Optional[str] = None,
    ):
        self.classifier = classifier or ConventionalCommitClassifier()
        self.filter_path = filter_path or None

    def is_relevant(self, commit: Commit) -> bool:
        """Check whether a commit contributes to the version bump."""
        if self.filter_path is None:
            return True
        return commit.touches(self.filter_path)

    def traverse(self, tag_index: Dict[str, str], commits: Iterable[Commit]) -> WalkResult:
        """
        Consume commits until the first tagged one.

        Args:
            tag_index: Mapping of commit hash to tag name.
            commits: Commits in visitation order, starting point first.

        Returns:
            WalkResult. ``version`` carries the parsed tag with commit
            distance and the starting commit's hash attached.

        Raises:
            ParseError: If the tag found is not a semantic version.
        """
        bump = VersionBump()
        commit_distance = 0
        head_hash = ""
        latest_tag = None

        for commit in commits:
            if not head_hash:
                head_hash = commit.hash

            latest_tag = tag_index.get(commit.hash)
            if latest_tag:
                break
            commit_distance += 1

            if self.is_relevant(commit):
                verdict = self.classifier.classify(commit.message)
                if verdict:
                    logger.debug(f"{commit.short_hash} requests {verdict.level}: {commit.subject}")
                bump.merge(verdict)

        # Not tagged yet, e.g. a branch without any release
        if not latest_tag:
            logger.debug(f"No tag found after {commit_distance} commits")
            return WalkResult(None, bump, commit_distance, head_hash)

        try:
            version = SemVer.parse(latest_tag)
        except ParseError as e:
            raise ParseError(
                f"couldn't parse tag '{latest_tag}': {e}",
                details={"tag": latest_tag},
            ) from e

        version.set_branch("")
        version.set_commit_distance(commit_distance)
        version.set_commit_hash(head_hash)

        logger.debug(
            f"Found tag {latest_tag} at distance {commit_distance}, bump={bump.level}"
        )
        return WalkResult(version, bump, commit_distance, head_hash, latest_tag)

    def walk(
        self,
        backend: "RepositoryBackend",
        tag_index: Dict[str, str],
        order: TraversalOrder,
        start_ref: str = "HEAD",
    ) -> WalkResult:
        """
        Walk the repository history from ``start_ref``.

        The commit iterator is closed once the walk finishes, whether it
        stopped at a tag, ran out of history or failed.

        Raises:
            TraversalError: If commits cannot be enumerated.
            ParseError: If the tag found is not a semantic version.
        """
        logger.debug(f"Walking {order.value} history from {start_ref}")
        commits = backend.iter_commits(
            start_ref,
            order=order,
            include_files=self.filter_path is not None,
        )
        with closing(commits):
            return self.traverse(tag_index, commits)
