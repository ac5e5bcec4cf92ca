"""
Custom exceptions for the gitsemver engine.

Provides a hierarchy of exceptions for the different phases of a
version computation, enabling precise error handling and clear
failure reporting at the command-line boundary.
"""


class VersioningError(Exception):
    """Base exception for all version computation errors."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class ParseError(VersioningError):
    """Raised when a tag string is not a valid semantic version."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Parse", details=details)


class TraversalError(VersioningError):
    """Raised when tag or commit enumeration fails at the storage layer."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Traversal", details=details)


class UnreachableTagsError(VersioningError):
    """Raised when tags exist but none is an ancestor of HEAD."""

    def __init__(self, tag_count: int):
        super().__init__(
            "tags exist in the repository, but not in ancestors of HEAD",
            stage="Resolution",
            details={"tag_count": tag_count},
        )


class RepositoryError(VersioningError):
    """Raised when the repository cannot be opened or queried."""

    def __init__(self, message: str, details: dict = None, stage: str = "Repository"):
        super().__init__(message, stage=stage, details=details)


class MainBranchError(RepositoryError):
    """Raised when the default branch name cannot be determined."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, details=details, stage="MainBranch")


class TagCreationError(RepositoryError):
    """Raised when creating the release tag fails."""

    def __init__(self, tag_name: str, reason: str):
        super().__init__(
            f"couldn't create tag '{tag_name}': {reason}",
            details={"tag": tag_name, "reason": reason},
            stage="Tagging",
        )


class ConfigurationError(VersioningError):
    """Raised when configuration values are invalid."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Configuration", details=details)
