"""End-to-end sync runs against a local bare repository."""

from __future__ import annotations

import shutil

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from tollsync.domain.billing.value_objects import Bill, Card
from tollsync.infrastructure.git.runner import run_git
from tollsync.interfaces.config import (
    AuthorSettings,
    GitSettings,
    SyncConfig,
    YigaosuSettings,
)
from tollsync.interfaces.sync import run_force_push, run_sync
from tollsync.shared.exceptions import RetrievalError
from tollsync.shared.types import FailurePolicy

pytestmark = [
    pytest.mark.git,
    pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed"),
]

_LOGIN = "tollsync.interfaces.sync.YigaosuClient.login"


@dataclass
class FakeSource:
    """In-memory billing source with a fixed bill history per card."""

    bills: dict[str, list[Bill]] = field(default_factory=dict[str, list[Bill]])
    failing: set[str] = field(default_factory=set[str])

    def list_cards(self) -> list[Card]:
        return [Card(card_no=no, card_code="1") for no in self.bills]

    def get_bills_page(self, card: Card, page_size: int, page: int) -> list[Bill]:
        if card.card_no in self.failing:
            raise RetrievalError(f"page {page}", "HTTP 500")
        start = (page - 1) * page_size
        return self.bills[card.card_no][start : start + page_size]


def _bill(amount: str, hour: int) -> Bill:
    at = datetime(2023, 8, 31, hour, 0, 0, tzinfo=UTC)
    return Bill(amount, at, at, "广州站", "深圳站")


@pytest.fixture
def remote(tmp_path: Path) -> Path:
    path = tmp_path / "remote.git"
    run_git("init", "--bare", "--quiet", str(path))
    return path


@pytest.fixture
def config(tmp_path: Path, remote: Path) -> SyncConfig:
    return SyncConfig(
        yigaosu=YigaosuSettings(phone="138", encrypted_password="x", page_size=2),
        git=GitSettings(remote_url=str(remote), local_directory=str(tmp_path / "work")),
        author=AuthorSettings(name="Bill Bot", email="bot@example.com"),
    )


def _remote_log(remote: Path) -> list[str]:
    return run_git("log", "--format=%s", "main", cwd=remote).splitlines()


def _remote_file(remote: Path, name: str) -> str:
    return run_git("show", f"main:{name}", cwd=remote)


def test_publishes_then_detects_no_changes(config: SyncConfig, remote: Path) -> None:
    source = FakeSource(
        {"4401": [_bill("1", 1), _bill("2", 2), _bill("3", 3)], "4402": []}
    )

    with patch(_LOGIN, return_value=source):
        first = run_sync(config)
        second = run_sync(config)

    assert first.summary == "update 4401.js, 4402.js, cards.js"
    assert not second.changed
    assert _remote_log(remote) == ["update 4401.js, 4402.js, cards.js"]
    assert _remote_file(remote, "4401.js").count('"Amount"') == 3


def test_new_bill_updates_only_its_card(config: SyncConfig, remote: Path) -> None:
    source = FakeSource({"4401": [_bill("1", 1)], "4402": [_bill("2", 2)]})
    with patch(_LOGIN, return_value=source):
        run_sync(config)
        source.bills["4402"].append(_bill("5", 5))
        result = run_sync(config)

    assert result.summary == "update 4402.js"
    assert len(_remote_log(remote)) == 2


def test_skip_policy_publishes_siblings(
    config: SyncConfig, remote: Path, tmp_path: Path
) -> None:
    skipping = SyncConfig(
        yigaosu=YigaosuSettings(
            phone="138",
            encrypted_password="x",
            page_size=2,
            failure_policy=FailurePolicy.SKIP,
        ),
        git=config.git,
        author=config.author,
    )
    source = FakeSource({"4401": [_bill("1", 1)], "4402": [_bill("2", 2)]})
    source.failing.add("4401")

    with patch(_LOGIN, return_value=source):
        result = run_sync(skipping)

    assert result.changed_paths == ["4402.js", "cards.js"]
    assert '"CardNo":"4401"' in _remote_file(remote, "cards.js")


def test_abort_policy_commits_nothing(config: SyncConfig, remote: Path) -> None:
    source = FakeSource({"4401": [_bill("1", 1)]})
    source.failing.add("4401")

    with patch(_LOGIN, return_value=source):
        with pytest.raises(RetrievalError):
            run_sync(config)

    assert run_git("ls-remote", str(remote)).strip() == ""


def test_force_push_restores_local_history(config: SyncConfig, remote: Path) -> None:
    with patch(_LOGIN, return_value=FakeSource({"4401": [_bill("1", 1)]})):
        result = run_sync(config)
    run_git("update-ref", "-d", "refs/heads/main", cwd=remote)

    run_force_push(config)

    assert run_git("rev-parse", "main", cwd=remote).strip() == result.commit
