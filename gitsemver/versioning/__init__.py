"""
Version model and commit classification.
"""

from gitsemver.versioning.semver import SemVer, SemVerExtended, parse_semver
from gitsemver.versioning.conventional import (
    ConventionalCommitClassifier,
    VersionBump,
    classify_message,
)

__all__ = [
    "SemVer",
    "SemVerExtended",
    "parse_semver",
    "ConventionalCommitClassifier",
    "VersionBump",
    "classify_message",
]
