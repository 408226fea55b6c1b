"""Wiring for the sync, force-push and create-config entry points."""

from __future__ import annotations

import logging

from functools import partial
from pathlib import Path

from tollsync.application.sync_bills import ForcePush, SyncBills
from tollsync.domain.publishing.value_objects import PublishResult
from tollsync.infrastructure.git.publisher import ChangePublisher
from tollsync.infrastructure.git.session import RepositorySession
from tollsync.infrastructure.git.ssh_auth import generate_ssh_key, ssh_agent_env
from tollsync.infrastructure.storage.bill_files import BillFileGenerator
from tollsync.infrastructure.yigaosu.client import YigaosuClient
from tollsync.interfaces.config import (
    SyncConfig,
    load_config,
    with_ssh_key,
    write_config,
)

logger = logging.getLogger(__name__)


def run_sync(config: SyncConfig, debug: bool = False) -> PublishResult:
    """Retrieve bills and publish them to the configured remote.

    Raises:
        TollSyncError: On any configuration, retrieval or git failure.
    """
    config.require_sync()
    generator = BillFileGenerator(
        source_factory=partial(
            YigaosuClient.login,
            config.yigaosu.phone,
            config.yigaosu.encrypted_password,
            debug=debug,
        ),
        page_size=config.yigaosu.page_size,
        failure_policy=config.yigaosu.failure_policy,
    )
    with ssh_agent_env(config.ssh_private_key()) as env:
        session = RepositorySession(
            target=config.remote_target(),
            local_dir=config.local_path(),
            env=env,
        )
        publisher = ChangePublisher(session=session, author=config.commit_author())
        return SyncBills(working_copy=session, publisher=publisher).execute(generator)


def run_force_push(config: SyncConfig) -> None:
    """Force push the existing local repository.

    Raises:
        TollSyncError: If the repository is missing or the push fails.
    """
    config.require_push()
    with ssh_agent_env(config.ssh_private_key()) as env:
        session = RepositorySession(
            target=config.remote_target(),
            local_dir=config.local_path(),
            env=env,
        )
        publisher = ChangePublisher(session=session, author=config.commit_author())
        ForcePush(publisher=publisher).execute()


def create_config(path: Path) -> SyncConfig:
    """Create the config file, or rewrite it keeping existing values.

    A new SSH key is generated when none is configured; its public half is
    logged so it can be added as a deploy key.

    Raises:
        ConfigurationError: If the file cannot be read or written.
    """
    config = load_config(path)
    if not config.git.ssh_key:
        private_key, public_key = generate_ssh_key()
        config = with_ssh_key(config, private_key)
        logger.info("New public key: %s", public_key.strip())
    write_config(path, config)
    logger.info("Config file written: %s", path)
    return config
