"""Fixtures for git session and publisher tests.

Every test works against a bare repository under ``tmp_path`` standing in
for the remote, so no network or SSH is involved.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from tollsync.domain.publishing.value_objects import Author, RemoteTarget
from tollsync.infrastructure.git.runner import run_git

IDENTITY = ("-c", "user.name=Seeder", "-c", "user.email=seeder@example.com")


@pytest.fixture
def remote(tmp_path: Path) -> Path:
    """An empty bare repository whose HEAD names ``main``."""
    path = tmp_path / "remote.git"
    run_git("init", "--bare", "--quiet", str(path))
    run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=path)
    return path


@pytest.fixture
def target(remote: Path) -> RemoteTarget:
    return RemoteTarget(url=str(remote), name="origin", branch="main")


@pytest.fixture
def author() -> Author:
    return Author(name="Bill Bot", email="bot@example.com")


@pytest.fixture
def local_dir(tmp_path: Path) -> Path:
    return tmp_path / "work" / "bills"


@pytest.fixture
def push_from_clone(tmp_path: Path, remote: Path) -> Callable[[str, str], str]:
    """Return a helper that commits ``name`` with ``content`` from a separate
    clone and pushes it to ``main``. The helper returns the new remote tip.
    """
    counter = iter(range(1000))

    def push(name: str, content: str) -> str:
        clone = tmp_path / f"other-{next(counter)}"
        run_git("init", "--quiet", str(clone))
        run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=clone)
        refs = run_git("ls-remote", str(remote))
        if refs.strip():
            run_git("fetch", "--quiet", str(remote), "main", cwd=clone)
            run_git("reset", "--hard", "--quiet", "FETCH_HEAD", cwd=clone)
        (clone / name).write_text(content, encoding="utf-8")
        run_git("add", "--", name, cwd=clone)
        run_git(
            *IDENTITY,
            "-c",
            "commit.gpgsign=false",
            "commit",
            "--quiet",
            "--no-verify",
            "-m",
            f"seed {name}",
            cwd=clone,
        )
        run_git("push", "--quiet", str(remote), "HEAD:refs/heads/main", cwd=clone)
        return run_git("rev-parse", "HEAD", cwd=clone).strip()

    return push


def remote_tip(remote: Path) -> str | None:
    out = run_git("ls-remote", str(remote), "refs/heads/main")
    return out.split("\t", 1)[0] if out.strip() else None


@pytest.fixture
def tip_of() -> Callable[[Path], str | None]:
    return remote_tip
