"""
Conventional commit classification.

Maps commit messages to the version bump they request and accumulates
those requests across a range of commits.
"""

import re
from dataclasses import dataclass
from typing import Optional

from gitsemver.versioning.semver import SemVer

MAJOR_PATTERN = r"^(fix|feat)(\(.+\))?!: |BREAKING CHANGE: "
MINOR_PATTERN = r"^feat(\(.+\))?: "
PATCH_PATTERN = r"^fix(\(.+\))?: "


@dataclass
class VersionBump:
    """
    Requested increment, accumulated by OR-ing commit verdicts.

    Only the highest requested level is ever applied.
    """

    major: bool = False
    minor: bool = False
    patch: bool = False

    def merge(self, other: "VersionBump") -> "VersionBump":
        """OR another bump into this one."""
        self.major = self.major or other.major
        self.minor = self.minor or other.minor
        self.patch = self.patch or other.patch
        return self

    @property
    def level(self) -> Optional[str]:
        if self.major:
            return "major"
        if self.minor:
            return "minor"
        if self.patch:
            return "patch"
        return None

    def apply(self, version: SemVer) -> SemVer:
        """Return the version incremented by the highest requested level."""
        if self.major:
            return version.inc_major()
        if self.minor:
            return version.inc_minor()
        if self.patch:
            return version.inc_patch()
        return version.copy()

    def __bool__(self) -> bool:
        return self.major or self.minor or self.patch


class ConventionalCommitClassifier:
    """
    Classifies commit messages following the Conventional Commits format.

    Matching is case-sensitive and anchored at the start of the message,
    except for the ``BREAKING CHANGE: `` footer which may appear anywhere.
    """

    def __init__(self):
        self.major_regex = re.compile(MAJOR_PATTERN)
        self.minor_regex = re.compile(MINOR_PATTERN)
        self.patch_regex = re.compile(PATCH_PATTERN)

    def classify(self, message: str) -> VersionBump:
        """
        Determine which increments a commit message requests.

        Args:
            message: Full commit message.

        Returns:
            VersionBump with one flag per matching rule.
        """
        return VersionBump(
            major=self.major_regex.search(message) is not None,
            minor=self.minor_regex.match(message) is not None,
            patch=self.patch_regex.match(message) is not None,
        )


_DEFAULT_CLASSIFIER = ConventionalCommitClassifier()


def classify_message(message: str) -> VersionBump:
    """Classify a commit message with the default classifier."""
    return _DEFAULT_CLASSIFIER.classify(message)
