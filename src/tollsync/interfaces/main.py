"""Command-line entry point.

Runs one sync pass by default:

- ``tollsync``: retrieve bills, commit changed files, push
- ``tollsync --force-push``: force push the local repository only
- ``tollsync -C``: create (update if exists) the config file and exit
"""

from __future__ import annotations

import logging
import sys

from pathlib import Path

import click

from tollsync.interfaces.config import default_config_path, load_config
from tollsync.interfaces.sync import create_config, run_force_push, run_sync
from tollsync.shared.exceptions import TollSyncError

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=default_config_path,
    show_default="~/.tollsync.toml",
    help="Location of the config file.",
)
@click.option(
    "-C",
    "--create-config",
    "create_config_only",
    is_flag=True,
    help="Create (update if exists) the config file and exit.",
)
@click.option("--force-push", is_flag=True, help="Git force push only.")
@click.option("--debug", is_flag=True, help="Log data source requests and responses.")
def main(
    config_path: Path,
    create_config_only: bool,
    force_push: bool,
    debug: bool,
) -> None:
    """Publish toll bills to a git repository."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=_LOG_FORMAT,
    )

    try:
        if create_config_only:
            create_config(config_path)
            return
        config = load_config(config_path)
        if force_push:
            run_force_push(config)
            return
        result = run_sync(config, debug=debug)
        if not result.changed:
            logger.info("Nothing to publish")
    except TollSyncError as e:
        logger.error("Sync failed: %s", e)
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)


if __name__ == "__main__":
    main()
