"""Tests for the CLI entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from click.testing import CliRunner

from tollsync.domain.publishing.value_objects import PublishResult
from tollsync.interfaces.config import SyncConfig
from tollsync.interfaces.main import main
from tollsync.shared.exceptions import PushRejectedError

_MAIN = "tollsync.interfaces.main"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "tollsync.toml"


def test_default_runs_sync(runner: CliRunner, config_path: Path) -> None:
    config = SyncConfig()
    with (
        patch(f"{_MAIN}.load_config", return_value=config) as load,
        patch(f"{_MAIN}.run_sync", return_value=PublishResult.no_changes()) as sync,
    ):
        result = runner.invoke(main, ["-c", str(config_path)])

    assert result.exit_code == 0
    load.assert_called_once_with(config_path)
    sync.assert_called_once_with(config, debug=False)


def test_debug_is_passed_to_sync(runner: CliRunner, config_path: Path) -> None:
    with (
        patch(f"{_MAIN}.load_config", return_value=SyncConfig()),
        patch(f"{_MAIN}.run_sync", return_value=PublishResult.no_changes()) as sync,
    ):
        result = runner.invoke(main, ["-c", str(config_path), "--debug"])

    assert result.exit_code == 0
    assert sync.call_args.kwargs["debug"] is True


def test_force_push_only(runner: CliRunner, config_path: Path) -> None:
    with (
        patch(f"{_MAIN}.load_config", return_value=SyncConfig()),
        patch(f"{_MAIN}.run_sync") as sync,
        patch(f"{_MAIN}.run_force_push") as force,
    ):
        result = runner.invoke(main, ["-c", str(config_path), "--force-push"])

    assert result.exit_code == 0
    force.assert_called_once()
    sync.assert_not_called()


def test_create_config_only(runner: CliRunner, config_path: Path) -> None:
    with (
        patch(f"{_MAIN}.create_config") as create,
        patch(f"{_MAIN}.run_sync") as sync,
    ):
        result = runner.invoke(main, ["--create-config", "-c", str(config_path)])

    assert result.exit_code == 0
    create.assert_called_once_with(config_path)
    sync.assert_not_called()


def test_tollsync_error_exits_one(runner: CliRunner, config_path: Path) -> None:
    with (
        patch(f"{_MAIN}.load_config", return_value=SyncConfig()),
        patch(
            f"{_MAIN}.run_sync",
            side_effect=PushRejectedError("main", "fetch first"),
        ),
    ):
        result = runner.invoke(main, ["-c", str(config_path)])

    assert result.exit_code == 1


def test_unexpected_error_exits_one(runner: CliRunner, config_path: Path) -> None:
    with (
        patch(f"{_MAIN}.load_config", return_value=SyncConfig()),
        patch(f"{_MAIN}.run_sync", side_effect=RuntimeError("boom")),
    ):
        result = runner.invoke(main, ["-c", str(config_path)])

    assert result.exit_code == 1


def test_missing_config_fails_validation(
    runner: CliRunner, config_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    for name in ("TOLLSYNC_PHONE", "TOLLSYNC_ENCRYPTED_PASSWORD", "TOLLSYNC_SSH_KEY"):
        monkeypatch.delenv(name, raising=False)
    login = MagicMock()
    with patch("tollsync.interfaces.sync.YigaosuClient.login", login):
        result = runner.invoke(main, ["-c", str(config_path)])

    assert result.exit_code == 1
    login.assert_not_called()
