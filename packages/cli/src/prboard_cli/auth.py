"""Where prboard gets its GitHub token.

The first non-empty source wins:

  1. ``GITHUB_TOKEN`` in the environment
  2. the token saved with ``prboard settings set --token``
  3. the GitHub CLI session (``gh auth token``)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_GH_TIMEOUT_SECONDS = 5


def _gh_cli_token() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=_GH_TIMEOUT_SECONDS,
        )
    except FileNotFoundError:
        logger.debug("gh CLI not installed; no session token available.")
        return None
    except subprocess.TimeoutExpired:
        logger.debug("gh auth token did not answer within %ss.", _GH_TIMEOUT_SECONDS)
        return None

    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token(stored_token: str | None = None) -> str | None:
    """Token for API calls, or None when no source has one.

    Does not raise. Commands that need a token surface a missing one as
    ConfigurationMissing through the core settings check.
    """
    env_token = os.environ.get("GITHUB_TOKEN")
    if env_token:
        return env_token
    if stored_token:
        return stored_token

    gh_token = _gh_cli_token()
    if gh_token:
        logger.debug("Using the token from the gh CLI session.")
    return gh_token
