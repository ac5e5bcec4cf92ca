"""
Commit graph representation and traversal.
"""

from gitsemver.graph.commit_graph import Commit, CommitGraph, TraversalOrder
from gitsemver.graph.walker import CommitWalker, WalkResult

__all__ = [
    "Commit",
    "CommitGraph",
    "TraversalOrder",
    "CommitWalker",
    "WalkResult",
]
