"""Typed exception hierarchy for tollsync."""

from __future__ import annotations

from tollsync.shared.types import FilePath

# =============================================================================
# BASE
# =============================================================================


class TollSyncError(Exception):
    """Base exception for all tollsync errors."""


# =============================================================================
# RETRIEVAL
# =============================================================================


class RetrievalError(TollSyncError):
    """A call to the billing data source failed."""

    def __init__(self, dataset: str, reason: str) -> None:
        self.dataset = dataset
        self.reason = reason
        super().__init__(f"Failed to retrieve {dataset}: {reason}")


class WriteError(TollSyncError):
    """Failed to write a generated file into the working copy."""

    def __init__(self, path: FilePath, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")


# =============================================================================
# REPOSITORY
# =============================================================================


class BootstrapError(TollSyncError):
    """Failed to bring the working copy in sync with the remote."""


class PublishError(TollSyncError):
    """Failed to stage, commit or push generated files."""


class PushRejectedError(PublishError):
    """The remote refused the push because its branch has diverged."""

    def __init__(self, branch: str, reason: str) -> None:
        self.branch = branch
        super().__init__(
            f"Push of {branch} rejected (re-run or use --force-push): {reason}"
        )


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigurationError(TollSyncError):
    """Invalid or missing configuration."""
