"""Repository protocols for the Publishing bounded context."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from tollsync.domain.publishing.value_objects import PublishResult
from tollsync.shared.types import FilePath

# =============================================================================
# PROTOCOLS
# =============================================================================


class ContentGenerator(Protocol):
    """Writes the files of one run into the working copy."""

    def produce(self, root: Path) -> list[FilePath]:
        """Write files under ``root`` and return their relative paths."""
        ...


CommitMessageBuilder = Callable[[list[FilePath]], str]
"""Builds a commit message from the sorted list of changed paths."""


class WorkingCopy(Protocol):
    """A local mirror that can be brought in sync with its remote."""

    def bootstrap(self) -> None:
        """Sync the working copy to the remote tip."""
        ...


class ChangeSink(Protocol):
    """Records generated files and delivers them to the remote."""

    def publish(self, generator: ContentGenerator) -> PublishResult:
        """Write, commit if changed, and push."""
        ...

    def force_push(self) -> None:
        """Overwrite the remote branch with local history."""
        ...
