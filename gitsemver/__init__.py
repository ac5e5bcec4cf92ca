"""
Conventional commit based semantic version calculator.

Computes the next semantic version of a git repository from the latest
reachable release tag and the conventional commits made since.
"""

__version__ = "1.0.0"
__author__ = "gitsemver"
