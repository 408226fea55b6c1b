"""SSH credentials for git remote operations.

The private key is loaded into a private ``ssh-agent`` through stdin so it
never touches the disk. Git reaches the agent through ``SSH_AUTH_SOCK``;
host key verification is disabled because the remote URL comes from the
operator's own configuration.
"""

from __future__ import annotations

import logging
import os
import subprocess

from collections.abc import Iterator
from contextlib import contextmanager

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from tollsync.shared.constants import SSH_KEY_BITS
from tollsync.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

GIT_SSH_COMMAND = (
    "ssh -o StrictHostKeyChecking=no -o UserKnownHostsFile=/dev/null"
    " -o BatchMode=yes"
)

_AGENT_TIMEOUT_SECONDS = 10


@contextmanager
def ssh_agent_env(private_key: str | None) -> Iterator[dict[str, str]]:
    """Yield environment variables that authorize git with ``private_key``.

    Without a key the yielded mapping is empty and git uses whatever
    transport the remote URL implies (local paths, https).

    Raises:
        ConfigurationError: If the agent cannot start or rejects the key.
    """
    if not private_key:
        yield {}
        return

    agent_env = _start_agent()
    try:
        _add_key(agent_env, private_key)
        yield {**agent_env, "GIT_SSH_COMMAND": GIT_SSH_COMMAND}
    finally:
        _stop_agent(agent_env)


def generate_ssh_key() -> tuple[str, str]:
    """Generate a new RSA key pair.

    Returns:
        ``(private_key_pem, public_key_openssh)``.
    """
    key = rsa.generate_private_key(public_exponent=65537, key_size=SSH_KEY_BITS)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public = key.public_key().public_bytes(
        encoding=serialization.Encoding.OpenSSH,
        format=serialization.PublicFormat.OpenSSH,
    ).decode()
    return private_pem, public


# =============================================================================
# Agent lifecycle
# =============================================================================


def _start_agent() -> dict[str, str]:
    """Start a new ssh-agent and return its env vars."""
    try:
        r = subprocess.run(
            ["ssh-agent", "-s"],
            capture_output=True,
            text=True,
            timeout=_AGENT_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ConfigurationError(f"Failed to start ssh-agent: {e}") from e
    if r.returncode != 0:
        raise ConfigurationError(f"Failed to start ssh-agent: {r.stderr.strip()}")

    env: dict[str, str] = {}
    for line in r.stdout.splitlines():
        # SSH_AUTH_SOCK=/tmp/ssh-XXX/agent.123; export SSH_AUTH_SOCK;
        if "=" in line and ";" in line:
            key, val = line.split(";")[0].split("=", 1)
            env[key.strip()] = val.strip()

    if "SSH_AUTH_SOCK" not in env:
        raise ConfigurationError("ssh-agent did not report SSH_AUTH_SOCK")
    logger.debug("Started ssh-agent (PID: %s)", env.get("SSH_AGENT_PID", "?"))
    return env


def _add_key(agent_env: dict[str, str], private_key: str) -> None:
    if not private_key.endswith("\n"):
        private_key += "\n"
    try:
        r = subprocess.run(
            ["ssh-add", "-"],
            input=private_key,
            capture_output=True,
            text=True,
            timeout=_AGENT_TIMEOUT_SECONDS,
            env={**os.environ, **agent_env},
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ConfigurationError(f"Failed to load SSH key: {e}") from e
    if r.returncode != 0:
        raise ConfigurationError(f"Failed to load SSH key: {r.stderr.strip()}")


def _stop_agent(agent_env: dict[str, str]) -> None:
    if "SSH_AGENT_PID" not in agent_env:
        return
    try:
        subprocess.run(
            ["ssh-agent", "-k"],
            capture_output=True,
            text=True,
            timeout=_AGENT_TIMEOUT_SECONDS,
            env={**os.environ, **agent_env},
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(
            "Failed to stop ssh-agent %s: %s", agent_env["SSH_AGENT_PID"], e
        )
