"""
Repository backend implementations.

Defines the interface the version engine needs from a repository
and provides an in-memory implementation.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from gitsemver.core.exceptions import RepositoryError, TagCreationError, TraversalError
from gitsemver.graph.commit_graph import Commit, CommitGraph, TraversalOrder

logger = logging.getLogger(__name__)

DETACHED_HEAD = "HEAD"


@dataclass(frozen=True)
class HeadRef:
    """The currently checked out reference."""

    name: str
    hash: str
    detached: bool = False


class RepositoryBackend(ABC):
    """
    Abstract base class for repository backends.

    Defines the interface for enumerating tags and commits and for
    creating release tags.
    """

    @abstractmethod
    def list_tags(self, prefix: Optional[str] = None) -> Dict[str, str]:
        """
        Map commit hashes to tag names.

        Annotated tags are resolved to the commit they point at. With a
        prefix, only tags whose name starts with it are listed.
        """
        pass

    @abstractmethod
    def iter_commits(
        self,
        start_ref: str = "HEAD",
        order: TraversalOrder = TraversalOrder.MAINLINE,
        include_files: bool = False,
    ) -> Iterator[Commit]:
        """Lazily yield ``start_ref`` and all of its ancestors."""
        pass

    @abstractmethod
    def head(self) -> HeadRef:
        """Get the currently checked out reference."""
        pass

    @abstractmethod
    def tag_exists(self, name: str) -> bool:
        """Check if a tag exists."""
        pass

    @abstractmethod
    def create_tag(self, name: str, commit_hash: str, message: str) -> None:
        """Create an annotated tag."""
        pass

    def remote_default_branch(self, remote: str) -> Optional[str]:
        """Default branch advertised by a remote, None if unknown."""
        return None


class InMemoryRepository(RepositoryBackend):
    """
    Repository held entirely in memory.

    Useful for embedding the engine where history comes from another
    source, and for tests. Commits are added on the current branch.
    """

    def __init__(self, branch: str = "main"):
        self.graph = CommitGraph()
        self.tags: Dict[str, str] = {}
        self.branches: Dict[str, str] = {}
        # Remote name -> default branch name
        self.remote_heads: Dict[str, str] = {}
        self._branch: Optional[str] = branch
        self._head: Optional[str] = None

    def add_commit(
        self,
        commit_hash: str,
        message: str,
        parents: Iterable[str] = None,
        files: Iterable[str] = (),
    ) -> Commit:
        """
        Commit on top of HEAD (or on explicit parents) and advance HEAD.

        Args:
            commit_hash: Full hash of the new commit.
            message: Commit message.
            parents: Parent hashes, defaults to the current HEAD.
            files: Paths changed by the commit.
        """
        if parents is None:
            parents = [self._head] if self._head else []
        commit = Commit(commit_hash, message, tuple(parents), tuple(files))
        self.graph.add_commit(commit)

        self._head = commit_hash
        if self._branch is not None:
            self.branches[self._branch] = commit_hash
        return commit

    def checkout(self, ref: str, create: bool = False) -> None:
        """Switch to a branch (optionally creating it at HEAD) or detach at a commit."""
        if create:
            self.branches[ref] = self._head
        if ref in self.branches:
            self._branch = ref
            self._head = self.branches[ref]
            return

        commit_hash = self.graph.resolve(ref)
        if commit_hash is None:
            raise RepositoryError(f"unknown reference '{ref}'")
        self._branch = None
        self._head = commit_hash

    def tag(self, name: str, commit_hash: str = None) -> None:
        """Tag a commit, HEAD by default."""
        self.create_tag(name, commit_hash or self._head, name)

    def _resolve(self, ref: str) -> str:
        if ref == DETACHED_HEAD:
            if self._head is None:
                raise TraversalError("couldn't get commits: HEAD does not point at a commit")
            return self._head
        if ref in self.branches:
            return self.branches[ref]
        if ref in self.tags:
            return self.tags[ref]

        commit_hash = self.graph.resolve(ref)
        if commit_hash is None:
            raise TraversalError(f"couldn't get commits: unknown reference '{ref}'")
        return commit_hash

    def list_tags(self, prefix: Optional[str] = None) -> Dict[str, str]:
        tag_refs = {}
        for name in sorted(self.tags):
            if prefix and not name.startswith(prefix):
                continue
            tag_refs[self.tags[name]] = name
        return tag_refs

    def iter_commits(
        self,
        start_ref: str = "HEAD",
        order: TraversalOrder = TraversalOrder.MAINLINE,
        include_files: bool = False,
    ) -> Iterator[Commit]:
        start = self._resolve(start_ref)
        return self.graph.ancestry(start, order)

    def head(self) -> HeadRef:
        if self._head is None:
            raise RepositoryError("couldn't get head: repository has no commits")
        if self._branch is None:
            return HeadRef(DETACHED_HEAD, self._head, detached=True)
        return HeadRef(self._branch, self._head)

    def remote_default_branch(self, remote: str) -> Optional[str]:
        return self.remote_heads.get(remote)

    def tag_exists(self, name: str) -> bool:
        return name in self.tags

    def create_tag(self, name: str, commit_hash: str, message: str) -> None:
        if name in self.tags:
            raise TagCreationError(name, "tag already exists")
        if commit_hash not in self.graph:
            raise TagCreationError(name, f"unknown commit {commit_hash}")
        self.tags[name] = commit_hash
        logger.debug(f"Tagged {commit_hash} as {name}")


def tag_release(backend: RepositoryBackend, name: str) -> bool:
    """
    Create an annotated tag on HEAD unless the tag already exists.

    The tag name doubles as its message.

    Returns:
        True if a tag was created.
    """
    if backend.tag_exists(name):
        logger.info(f"Tag {name} already exists, not tagging")
        return False

    head = backend.head()
    backend.create_tag(name, head.hash, name)
    return True
