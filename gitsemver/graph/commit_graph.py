"""
Commit ancestry graph.

Stores commit history as a directed graph (child -> parent) and walks
it depth-first in either of the two orders used for version resolution.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional, Tuple

import networkx as nx

logger = logging.getLogger(__name__)


class TraversalOrder(Enum):
    """Order in which ancestors are visited."""

    # Depth-first, first parent before merged-in parents
    MAINLINE = "mainline"

    # Depth-first, merged-in parents before the base they were merged on
    BRANCH = "branch"


@dataclass(frozen=True)
class Commit:
    """A commit as seen by the version walker."""

    hash: str
    message: str
    parents: Tuple[str, ...] = ()
    files: Tuple[str, ...] = ()

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]

    def touches(self, path_prefix: str) -> bool:
        """Check whether any changed file lives under the given prefix."""
        return any(name.startswith(path_prefix) for name in self.files)


class CommitGraph:
    """
    Directed acyclic graph of commits.

    Edges point from a commit to its parents. Parents that were never
    added (e.g. beyond the boundary of a shallow clone) are kept as bare
    nodes and skipped during traversal.

    Args:
        commits: Commits to add up front.
        loader: Called with a hash the graph does not hold yet while
            walking. Returns the commit, or None if it does not exist.
    """

    def __init__(
        self,
        commits: Iterable[Commit] = (),
        loader: Optional[Callable[[str], Optional[Commit]]] = None,
    ):
        self._graph = nx.DiGraph()
        # Same edges with parents inserted in reverse order
        self._branch_graph = nx.DiGraph()
        self.loader = loader
        for commit in commits:
            self.add_commit(commit)

    def add_commit(self, commit: Commit) -> None:
        """Add a commit and the edges to its parents."""
        self._graph.add_node(commit.hash, commit=commit)
        self._branch_graph.add_node(commit.hash, commit=commit)

        for index, parent in enumerate(commit.parents):
            self._graph.add_edge(commit.hash, parent, index=index)
        for index, parent in reversed(list(enumerate(commit.parents))):
            self._branch_graph.add_edge(commit.hash, parent, index=index)

    def __contains__(self, commit_hash: str) -> bool:
        return self.get(commit_hash) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self._commits())

    def _commits(self) -> Iterator[Commit]:
        for _, commit in self._graph.nodes(data="commit"):
            if commit is not None:
                yield commit

    def get(self, commit_hash: str) -> Optional[Commit]:
        """Get a commit by its full hash."""
        if commit_hash not in self._graph:
            return None
        return self._graph.nodes[commit_hash].get("commit")

    def _load(self, commit_hash: str) -> Optional[Commit]:
        commit = self.get(commit_hash)
        if commit is None and self.loader is not None:
            commit = self.loader(commit_hash)
            if commit is not None:
                self.add_commit(commit)
        return commit

    def resolve(self, ref: str) -> Optional[str]:
        """Resolve a full or abbreviated hash to a full hash."""
        if ref in self:
            return ref
        matches = [c.hash for c in self._commits() if c.hash.startswith(ref)]
        if len(matches) == 1:
            return matches[0]
        return None

    def ancestry(
        self,
        start: str,
        order: TraversalOrder = TraversalOrder.MAINLINE,
    ) -> Iterator[Commit]:
        """
        Walk every ancestor of ``start`` (inclusive) exactly once.

        Depth-first pre-order over the parent edges, as
        ``nx.dfs_preorder_nodes`` visits them. Commits missing from the
        graph are fetched through the loader only when the walk reaches
        them, so stopping early leaves the rest of history unread.

        Args:
            start: Full hash of the starting commit.
            order: Traversal order.

        Yields:
            Commits, starting with ``start`` itself.
        """
        graph = self._graph if order is TraversalOrder.MAINLINE else self._branch_graph

        commit = self._load(start)
        if commit is None:
            return
        yield commit

        visited = {start}
        stack = [iter(list(graph.successors(start)))]
        while stack:
            for parent in stack[-1]:
                if parent in visited:
                    continue
                visited.add(parent)

                commit = self._load(parent)
                if commit is None:
                    logger.debug(f"History ends at unknown parent {parent}")
                    continue

                yield commit
                stack.append(iter(list(graph.successors(parent))))
                break
            else:
                stack.pop()
