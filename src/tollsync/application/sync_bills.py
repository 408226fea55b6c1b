"""Sync Bills and Force Push use cases."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from tollsync.domain.publishing.repositories import (
    ChangeSink,
    ContentGenerator,
    WorkingCopy,
)
from tollsync.domain.publishing.value_objects import PublishResult

logger = logging.getLogger(__name__)

# =============================================================================
# USE CASES
# =============================================================================


@dataclass
class SyncBills:
    """Sync the working copy, then publish freshly generated files.

    Content is generated only after the working copy matches the remote
    tip, since syncing resets the tracked files.
    """

    working_copy: WorkingCopy
    publisher: ChangeSink

    def execute(self, generator: ContentGenerator) -> PublishResult:
        """Run one sync pass.

        Raises:
            BootstrapError: If the working copy cannot be synced.
            RetrievalError: If the data source fails.
            WriteError: If a file cannot be written.
            PublishError: If committing or pushing fails.
        """
        self.working_copy.bootstrap()
        result = self.publisher.publish(generator)
        if result.changed:
            logger.info("Published %s: %s", result.commit, result.summary)
        return result


@dataclass
class ForcePush:
    """Re-push local history over the remote branch."""

    publisher: ChangeSink

    def execute(self) -> None:
        self.publisher.force_push()
