"""
Semantic version value type.

A version is the core (major, minor, patch) triple plus presentation
details (module prefix, leading "v") and optional extended metadata
describing where a pre-release build came from.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from gitsemver.core.exceptions import ParseError

# Versions are stored as unsigned 32 bit components
MAX_COMPONENT = 2**32 - 1

SHORT_HASH_LENGTH = 7

VERSION_PATTERN = re.compile(
    r"(?:(?P<prefix>.+)-)?(?P<v>v)?"
    r"(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:-(?P<branch>\w+)\.(?P<commit_distance>\d+)\.(?P<commit_hash>\w+))?",
    re.ASCII,
)

BRANCH_STRIP_PATTERN = re.compile(r"[^0-9A-Za-z]")


def _parse_component(value: str, name: str, source: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ParseError(
            f"error parsing {name} of '{source}'",
            details={"component": name, "input": source},
        )
    if number < 0 or number > MAX_COMPONENT:
        raise ParseError(
            f"error parsing {name} of '{source}': value out of range",
            details={"component": name, "input": source},
        )
    return number


@dataclass
class SemVerExtended:
    """Branch, distance and commit metadata of a non-release version."""

    branch: str = ""
    commit_distance: int = 0
    commit_hash: str = ""

    @property
    def sanitized_branch(self) -> str:
        return BRANCH_STRIP_PATTERN.sub("", self.branch)


@dataclass
class SemVer:
    """
    Semantic version.

    Increments return new values; the ``set_*`` helpers decorate the
    receiver with extended metadata in place and return it so they can
    be chained.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    prefix: str = ""
    leading_v: str = ""
    ext: Optional[SemVerExtended] = None

    @classmethod
    def initial(cls) -> "SemVer":
        """Version used for the very first release of a repository."""
        return cls(0, 1, 0)

    @classmethod
    def parse(cls, text: str) -> "SemVer":
        """
        Parse a tag name such as ``api-v1.2.3-feature.4.abc1234``.

        Text around the version that is not a prefix or extended metadata
        (``-rc1``, ``+build.5``, ``module/``) is ignored.

        Args:
            text: Tag name to parse.

        Returns:
            Parsed SemVer.

        Raises:
            ParseError: If the text is not a version or a component is
                not a valid unsigned 32 bit number.
        """
        match = VERSION_PATTERN.search(text or "")
        if not match:
            raise ParseError(
                f"error parsing version; '{text}' is not a semantic version",
                details={"component": "version", "input": text},
            )

        version = cls(
            major=_parse_component(match.group("major"), "major", text),
            minor=_parse_component(match.group("minor"), "minor", text),
            patch=_parse_component(match.group("patch"), "patch", text),
            prefix=match.group("prefix") or "",
            leading_v=match.group("v") or "",
        )

        if match.group("branch") is not None:
            version.ext = SemVerExtended(
                branch=match.group("branch"),
                commit_distance=_parse_component(
                    match.group("commit_distance"), "commit distance", text
                ),
                commit_hash=match.group("commit_hash"),
            )
        return version

    @property
    def core(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def greater_than(self, other: "SemVer") -> bool:
        """Strict comparison of the core triple; metadata is ignored."""
        return self.core > other.core

    def same_branch(self, other: Optional["SemVer"]) -> bool:
        """True if both versions carry metadata for the same branch."""
        return (
            other is not None
            and self.ext is not None
            and other.ext is not None
            and self.ext.branch == other.ext.branch
        )

    def _derive(self, major: int, minor: int, patch: int) -> "SemVer":
        return SemVer(
            major=major,
            minor=minor,
            patch=patch,
            prefix=self.prefix,
            leading_v=self.leading_v,
            ext=replace(self.ext) if self.ext is not None else None,
        )

    def inc_major(self) -> "SemVer":
        return self._derive(self.major + 1, 0, 0)

    def inc_minor(self) -> "SemVer":
        return self._derive(self.major, self.minor + 1, 0)

    def inc_patch(self) -> "SemVer":
        return self._derive(self.major, self.minor, self.patch + 1)

    def copy(self) -> "SemVer":
        return self._derive(self.major, self.minor, self.patch)

    def _extended(self) -> SemVerExtended:
        if self.ext is None:
            self.ext = SemVerExtended()
        return self.ext

    def set_branch(self, branch: str) -> "SemVer":
        self._extended().branch = branch
        return self

    def set_commit_distance(self, commit_distance: int) -> "SemVer":
        self._extended().commit_distance = commit_distance
        return self

    def set_commit_hash(self, commit_hash: str) -> "SemVer":
        # Hashes shorter than the abbreviation are kept verbatim
        self._extended().commit_hash = commit_hash[:SHORT_HASH_LENGTH]
        return self

    def render(self, release: bool = False) -> str:
        """
        Format the version as a tag name.

        Args:
            release: Drop extended metadata even when present.

        Returns:
            ``[prefix-][v]X.Y.Z`` or ``[prefix-][v]X.Y.Z-branch.distance.hash``.
        """
        version = f"{self.leading_v}{self.major}.{self.minor}.{self.patch}"
        if not release and self.ext is not None:
            version = (
                f"{version}-{self.ext.sanitized_branch}"
                f".{self.ext.commit_distance}.{self.ext.commit_hash}"
            )
        if self.prefix:
            return f"{self.prefix}-{version}"
        return version

    def __str__(self) -> str:
        return self.render()


def parse_semver(text: str) -> SemVer:
    """Parse a tag name into a SemVer."""
    return SemVer.parse(text)
