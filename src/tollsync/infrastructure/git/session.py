"""Local working copy that mirrors a single remote branch.

The session brings the working copy to the remote tip before anything is
written into it. The remote is treated as the source of truth: local-only
commits and uncommitted edits on the branch are discarded by a hard reset
(or, against an empty remote, by restarting the branch unborn),
since this tool is the only writer to the branch.
"""

from __future__ import annotations

import logging

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from tollsync.domain.publishing.value_objects import (
    RemoteOpResult,
    RemoteOutcome,
    RemoteTarget,
    SessionState,
)
from tollsync.infrastructure.git.runner import GitCommandError, run_git
from tollsync.shared.exceptions import BootstrapError
from tollsync.shared.types import CommitSHA

logger = logging.getLogger(__name__)


@dataclass
class RepositorySession:
    """Owns the working copy at ``local_dir`` for the duration of one run.

    Args:
        target: Remote URL, remote name and branch to mirror.
        local_dir: Path of the working copy.
        env: Extra environment for git, e.g. from ``ssh_agent_env``.
    """

    target: RemoteTarget
    local_dir: Path
    env: Mapping[str, str] = field(default_factory=dict[str, str])

    state: SessionState = field(default=SessionState.UNBOUND, init=False)
    error: Exception | None = field(default=None, init=False)
    remote_empty: bool = field(default=False, init=False)
    """True when the remote had no commits at bootstrap time."""

    # =================================================================
    # Lifecycle
    # =================================================================

    def bootstrap(self) -> None:
        """Clone, init or reopen the working copy and sync it to the remote.

        Raises:
            BootstrapError: If any step fails for a reason other than an
                empty remote or an already existing local repository.
        """
        self.mark(SessionState.BOOTSTRAPPING)
        try:
            self._bootstrap()
        except BootstrapError as e:
            self.fail(e)
            raise
        self.mark(SessionState.SYNCED)

    def open(self) -> None:
        """Bind to an existing local repository without contacting the remote.

        Raises:
            BootstrapError: If ``local_dir`` holds no repository.
        """
        if not self.is_repository():
            err = BootstrapError(f"No repository found at {self.local_dir}")
            self.fail(err)
            raise err
        logger.info("Opened %s", self.local_dir)
        self.mark(SessionState.SYNCED)

    def mark(self, state: SessionState) -> None:
        logger.debug("Session %s -> %s", self.state, state)
        self.state = state

    def fail(self, error: Exception) -> None:
        self.error = error
        self.mark(SessionState.FAILED)

    # =================================================================
    # Queries
    # =================================================================

    def is_repository(self) -> bool:
        return (self.local_dir / ".git").exists()

    def head(self) -> CommitSHA | None:
        """Return the commit HEAD points to, or None on an unborn branch."""
        try:
            out = self.git("rev-parse", "--verify", "--quiet", "HEAD^{commit}")
        except GitCommandError:
            return None
        return CommitSHA(out.strip())

    def git(self, *args: str, env: Mapping[str, str] | None = None) -> str:
        """Run git inside the working copy with the session's credential."""
        return run_git(*args, cwd=self.local_dir, env={**self.env, **(env or {})})

    # =================================================================
    # Bootstrap steps
    # =================================================================

    def _bootstrap(self) -> None:
        cloned = self._clone()
        if cloned.outcome is RemoteOutcome.EMPTY_REMOTE:
            self._init()
        elif cloned.outcome is RemoteOutcome.ALREADY_EXISTS:
            self._reopen()
        elif cloned.outcome is RemoteOutcome.FAILED:
            msg = f"Failed to clone {self.target.url}: {cloned.cause}"
            raise BootstrapError(msg) from cloned.cause

        fetched = self._fetch()
        if fetched.outcome is RemoteOutcome.EMPTY_REMOTE:
            logger.info("Remote %s is empty, starting a new branch", self.target.name)
            self.remote_empty = True
            self._start_unborn_branch()
            return
        if fetched.outcome is RemoteOutcome.FAILED:
            msg = f"Failed to fetch {self.target.name}: {fetched.cause}"
            raise BootstrapError(msg) from fetched.cause

        self._checkout_remote_tip()

    def _clone(self) -> RemoteOpResult:
        if self.is_repository():
            return RemoteOpResult(RemoteOutcome.ALREADY_EXISTS)

        try:
            refs = self._ls_remote(self.target.url)
        except GitCommandError as e:
            return RemoteOpResult.failed(e)
        if not refs:
            return RemoteOpResult(RemoteOutcome.EMPTY_REMOTE)

        logger.info("Cloning from %s", self.target.url)
        try:
            self.local_dir.parent.mkdir(parents=True, exist_ok=True)
            run_git(
                "clone",
                "--origin",
                self.target.name,
                "--",
                self.target.url,
                str(self.local_dir),
                env=self.env,
            )
        except (GitCommandError, OSError) as e:
            return RemoteOpResult.failed(e)
        return RemoteOpResult.ok()

    def _init(self) -> None:
        logger.info("Initializing %s", self.local_dir)
        try:
            self.local_dir.mkdir(parents=True, exist_ok=True)
            self.git("init", "--quiet")
            self.git("remote", "add", self.target.name, self.target.url)
        except (GitCommandError, OSError) as e:
            raise BootstrapError(f"Failed to initialize {self.local_dir}: {e}") from e

    def _start_unborn_branch(self) -> None:
        """Put HEAD on an unborn branch with an empty index.

        The next commit becomes the root commit of the remote branch. A
        local commit left by a run whose push failed is dropped here and
        rebuilt from freshly generated files.
        """
        try:
            self.git("symbolic-ref", "HEAD", self.target.branch_ref)
            if self.head() is not None:
                logger.info(
                    "Discarding unpublished local %s history", self.target.branch
                )
                self.git("update-ref", "-d", self.target.branch_ref)
            self.git("read-tree", "--empty")
        except GitCommandError as e:
            msg = f"Failed to start branch {self.target.branch}: {e}"
            raise BootstrapError(msg) from e

    def _reopen(self) -> None:
        """Reuse the repository left by a previous run.

        Re-registers the remote when an earlier run stopped between
        ``git init`` and ``git remote add``, or when the URL changed.
        """
        logger.info("Reusing existing repository at %s", self.local_dir)
        try:
            current = self.git("remote", "get-url", self.target.name).strip()
        except GitCommandError:
            current = None

        try:
            if current is None:
                self.git("remote", "add", self.target.name, self.target.url)
            elif current != self.target.url:
                logger.warning(
                    "Remote %s points to %s, switching to %s",
                    self.target.name,
                    current,
                    self.target.url,
                )
                self.git("remote", "set-url", self.target.name, self.target.url)
        except GitCommandError as e:
            raise BootstrapError(f"Failed to configure remote: {e}") from e

    def _fetch(self) -> RemoteOpResult:
        logger.info("Fetching %s", self.target.name)
        try:
            refs = self._ls_remote(self.target.name)
        except GitCommandError as e:
            return RemoteOpResult.failed(e)
        if not refs:
            return RemoteOpResult(RemoteOutcome.EMPTY_REMOTE)
        if self.target.branch_ref not in refs:
            cause = BootstrapError(
                f"Remote {self.target.name} has no branch {self.target.branch}"
            )
            return RemoteOpResult.failed(cause)

        refspec = f"+{self.target.branch_ref}:{self.target.tracking_ref}"
        try:
            self.git("fetch", "--force", "--no-tags", self.target.name, refspec)
        except GitCommandError as e:
            return RemoteOpResult.failed(e)
        return RemoteOpResult.ok()

    def _checkout_remote_tip(self) -> None:
        try:
            tip = self.git(
                "rev-parse", "--verify", f"{self.target.tracking_ref}^{{commit}}"
            )
            sha = CommitSHA(tip.strip())
            self.git("checkout", "--force", "-B", self.target.branch, sha)
            self.git("reset", "--hard", "--quiet", sha)
        except GitCommandError as e:
            msg = f"Failed to check out {self.target.branch}: {e}"
            raise BootstrapError(msg) from e
        logger.info("Branch %s at %s", self.target.branch, sha.short)

    def _ls_remote(self, location: str) -> set[str]:
        """Return the ref names advertised by ``location``."""
        cwd = self.local_dir if self.is_repository() else None
        out = run_git("ls-remote", location, cwd=cwd, env=self.env)
        refs: set[str] = set()
        for line in out.splitlines():
            parts = line.split("\t", 1)
            if len(parts) == 2:
                refs.add(parts[1].strip())
        return refs
