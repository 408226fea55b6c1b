"""Commit generated files and push them to the mirrored branch."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from tollsync.domain.publishing.repositories import (
    CommitMessageBuilder,
    ContentGenerator,
)
from tollsync.domain.publishing.value_objects import (
    Author,
    PublishResult,
    SessionState,
    build_commit_message,
)
from tollsync.infrastructure.git.runner import GitCommandError
from tollsync.infrastructure.git.session import RepositorySession
from tollsync.shared.exceptions import PublishError, PushRejectedError
from tollsync.shared.types import CommitSHA, FilePath

logger = logging.getLogger(__name__)

# Markers git prints when the remote branch moved past our base.
_REJECTION_MARKERS = ("[rejected]", "non-fast-forward", "fetch first", "stale info")

# Index status letters in `git status --porcelain`; " " and "?" are unstaged.
_RENAME_OR_COPY = ("R", "C")
_UNSTAGED = (" ", "?", "!")


@dataclass
class ChangePublisher:
    """Stages, commits and pushes the files of one run.

    Args:
        session: A bootstrapped repository session.
        author: Identity used as commit author and committer.
    """

    session: RepositorySession
    author: Author

    def publish(
        self,
        generator: ContentGenerator,
        message_builder: CommitMessageBuilder = build_commit_message,
    ) -> PublishResult:
        """Write, stage and, if anything changed, commit and push.

        Returns:
            ``PublishResult.no_changes()`` when the index matches the last
            commit, otherwise the new commit and the changed paths.

        Raises:
            PublishError: If the session is not synced or git fails.
            PushRejectedError: If the remote branch has diverged. The new
                local commit is kept so ``force_push`` can deliver it.
        """
        if self.session.state is not SessionState.SYNCED:
            msg = f"Repository session is not synced (state: {self.session.state})"
            raise PublishError(msg)

        try:
            paths = generator.produce(self.session.local_dir)
        except Exception as e:
            self.session.fail(e)
            raise

        try:
            self._stage(paths)
            changed = self._staged_paths()
        except GitCommandError as e:
            self.session.fail(e)
            raise PublishError(f"Failed to stage files: {e}") from e

        if not changed:
            logger.info("No changes")
            self.session.mark(SessionState.NO_CHANGES)
            return PublishResult.no_changes()

        message = message_builder(changed)
        self.session.mark(SessionState.COMMITTING)
        commit = self._commit(message)
        logger.info("Adding commit %s %s", commit.short, message)

        self._push(force=False)
        self.session.mark(SessionState.PUSHED)
        return PublishResult(commit=commit, changed_paths=changed, summary=message)

    def force_push(self) -> None:
        """Push local history over whatever the remote branch holds.

        Raises:
            BootstrapError: If there is no local repository.
            PublishError: If the push fails.
        """
        self.session.open()
        self._push(force=True)
        self.session.mark(SessionState.PUSHED)

    # =================================================================
    # git steps
    # =================================================================

    def _stage(self, paths: list[FilePath]) -> None:
        if paths:
            self.session.git("add", "--", *paths)

    def _staged_paths(self) -> list[FilePath]:
        """Paths whose index entry differs from HEAD (or all, if unborn)."""
        out = self.session.git("status", "--porcelain", "-z", "--untracked-files=no")
        entries = out.split("\0")
        changed: list[FilePath] = []
        i = 0
        while i < len(entries):
            entry = entries[i]
            i += 1
            if len(entry) < 4:
                continue
            index_status, path = entry[0], entry[3:]
            if index_status in _RENAME_OR_COPY:
                i += 1  # the original path follows
            if index_status not in _UNSTAGED:
                changed.append(FilePath(path))
        return sorted(changed)

    def _commit(self, message: str) -> CommitSHA:
        author_env = {
            "GIT_AUTHOR_NAME": self.author.name,
            "GIT_AUTHOR_EMAIL": self.author.email,
            "GIT_COMMITTER_NAME": self.author.name,
            "GIT_COMMITTER_EMAIL": self.author.email,
        }
        try:
            self.session.git(
                "-c",
                "commit.gpgsign=false",
                "commit",
                "--quiet",
                "--no-verify",
                "-m",
                message,
                env=author_env,
            )
        except GitCommandError as e:
            self.session.fail(e)
            raise PublishError(f"Failed to commit: {e}") from e

        head = self.session.head()
        if head is None:
            err = PublishError("Commit succeeded but HEAD is unborn")
            self.session.fail(err)
            raise err
        return head

    def _push(self, force: bool) -> None:
        target = self.session.target
        refspec = f"{target.branch_ref}:{target.branch_ref}"
        args = ["push"]
        if force:
            args.append("--force")
        logger.info("Pushing %s to %s (force=%s)", target.branch, target.name, force)
        try:
            self.session.git(*args, target.name, refspec)
        except GitCommandError as e:
            err = _classify_push_error(target.branch, e)
            self.session.fail(err)
            raise err from e
        logger.info("Pushed")


def _classify_push_error(branch: str, error: GitCommandError) -> PublishError:
    detail = error.stderr.lower()
    if any(marker in detail for marker in _REJECTION_MARKERS):
        return PushRejectedError(branch, error.stderr)
    return PublishError(f"Failed to push {branch}: {error}")
