"""Optional GitHub CLI fallback for the GitHub token.

The relay normally reads GITHUB_TOKEN from its environment. For local runs an
operator may pass ``--gh-auth`` to borrow the token of a ``gh auth login``
session instead; nothing here runs unless asked to.
"""

from __future__ import annotations

import dataclasses
import logging
import subprocess

from reviewgate_core.config import RelayConfig

logger = logging.getLogger(__name__)


def gh_cli_token(timeout: float = 5.0) -> str | None:
    """Return the token of the active ``gh`` session, or None."""
    try:
        output = subprocess.check_output(
            ["gh", "auth", "token"],
            text=True,
            timeout=timeout,
            stderr=subprocess.DEVNULL,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("No token from gh CLI: %s", e)
        return None
    return output.strip() or None


def with_gh_token(config: RelayConfig) -> RelayConfig:
    """Fill in ``github_token`` from the gh CLI when the environment did not provide one."""
    if config.github_token:
        return config
    token = gh_cli_token()
    return dataclasses.replace(config, github_token=token) if token else config
