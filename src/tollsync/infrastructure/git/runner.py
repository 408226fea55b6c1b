"""Thin wrapper around the git command line."""

from __future__ import annotations

import logging
import os
import subprocess

from collections.abc import Mapping
from pathlib import Path

from tollsync.shared.constants import GIT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

# Stable, non-interactive output: stderr is matched against English messages
# and a missing credential must fail instead of prompting.
_BASE_ENV = {
    "LC_ALL": "C",
    "GIT_TERMINAL_PROMPT": "0",
}


class GitCommandError(Exception):
    """A git invocation exited non-zero or could not be started."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr.strip()
        command = " ".join(args[:2])
        super().__init__(f"{command} exited with {returncode}: {self.stderr}")


def run_git(
    *args: str,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: int = GIT_TIMEOUT_SECONDS,
) -> str:
    """Run a git command and return its stdout.

    Raises:
        GitCommandError: If git fails, times out or is not installed.
    """
    argv = ["git", *args]
    logger.debug("Running %s", " ".join(argv))
    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            env={**os.environ, **_BASE_ENV, **(env or {})},
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise GitCommandError(argv, -1, f"timed out after {timeout}s") from e
    except OSError as e:
        raise GitCommandError(argv, -1, str(e)) from e

    if result.returncode != 0:
        raise GitCommandError(argv, result.returncode, result.stderr)
    return result.stdout
