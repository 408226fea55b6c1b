"""Value objects for the Publishing bounded context."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from tollsync.shared.constants import COMMIT_MESSAGE_PREFIX
from tollsync.shared.types import CommitSHA, FilePath

# =============================================================================
# ENUMS
# =============================================================================


class SessionState(StrEnum):
    """Lifecycle of a repository session within one run."""

    UNBOUND = "unbound"
    BOOTSTRAPPING = "bootstrapping"
    SYNCED = "synced"
    COMMITTING = "committing"
    PUSHED = "pushed"
    NO_CHANGES = "no_changes"
    FAILED = "failed"


class RemoteOutcome(StrEnum):
    """Outcome of a remote-facing git operation."""

    OK = "ok"
    EMPTY_REMOTE = "empty_remote"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class RemoteTarget:
    """The single remote branch mirrored by the working copy."""

    url: str
    name: str
    branch: str

    @property
    def tracking_ref(self) -> str:
        return f"refs/remotes/{self.name}/{self.branch}"

    @property
    def branch_ref(self) -> str:
        return f"refs/heads/{self.branch}"


@dataclass(frozen=True)
class Author:
    """Identity recorded on commits."""

    name: str
    email: str


@dataclass(frozen=True)
class RemoteOpResult:
    """Tagged result of a remote operation.

    ``cause`` is set only when ``outcome`` is ``FAILED``.
    """

    outcome: RemoteOutcome
    cause: Exception | None = None

    @classmethod
    def ok(cls) -> RemoteOpResult:
        return cls(RemoteOutcome.OK)

    @classmethod
    def failed(cls, cause: Exception) -> RemoteOpResult:
        return cls(RemoteOutcome.FAILED, cause)


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a publish attempt.

    ``commit`` is ``None`` for the "no changes" result.
    """

    commit: CommitSHA | None = None
    changed_paths: list[FilePath] = field(default_factory=list[FilePath])
    summary: str = ""

    @classmethod
    def no_changes(cls) -> PublishResult:
        return cls()

    @property
    def changed(self) -> bool:
        return self.commit is not None


def build_commit_message(paths: Iterable[str]) -> str:
    """Summarize changed files, e.g. ``update a.js, b.js``."""
    return COMMIT_MESSAGE_PREFIX + ", ".join(sorted(paths))
