"""Domain-specific types that prevent primitive obsession."""

from __future__ import annotations

from enum import StrEnum

# =============================================================================
# NEWTYPES
# =============================================================================


class FilePath(str):
    """A path relative to the root of the working copy."""


class CommitSHA(str):
    """A git commit SHA."""

    @property
    def short(self) -> str:
        return self[:8]


# =============================================================================
# ENUMS
# =============================================================================


class FailurePolicy(StrEnum):
    """What to do when one dataset fails to download."""

    ABORT = "abort"
    SKIP = "skip"
