"""GistStore: team-shared settings via a GitHub Gist.

A team keeps one private Gist holding the tracked member list and the
tracked workflows, so everyone's leaderboard covers the same people and
builds without copying settings around. Each record is a JSON file named
``prboard_<key>.json`` inside the Gist.

The token is obfuscated with the writer's machine key like every other
store. Teammates on other machines fall back to GITHUB_TOKEN or their gh CLI
session, so a shared Gist never needs to carry a usable token.
"""

from __future__ import annotations

import json
import logging

from github import Github, GithubException
from github.Auth import Token
from github.InputFileContent import InputFileContent

from prboard_store.base import BaseStore, StoreError

logger = logging.getLogger(__name__)


def _gist_filename(key: str) -> str:
    return f"prboard_{key}.json"


class GistStore(BaseStore):
    """Stores settings records as JSON files in a GitHub Gist."""

    def __init__(self, gist_id: str, token: str, base_url: str | None = None):
        self._gist_id = gist_id
        auth = Token(token)
        self._gh = Github(auth=auth, base_url=base_url.rstrip("/")) if base_url else Github(auth=auth)

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def read(self, key: str) -> dict | None:
        try:
            gist = self._get_gist()
        except GithubException as e:
            logger.warning("GistStore.read(%s) failed: %s", key, e)
            return None

        file_obj = gist.files.get(_gist_filename(key))
        if file_obj is None:
            return None
        try:
            data = json.loads(file_obj.content)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("Ignoring unreadable Gist file %s: %s", _gist_filename(key), e)
            return None
        return data if isinstance(data, dict) else None

    def write(self, key: str, data: dict) -> None:
        try:
            gist = self._get_gist()
            gist.edit(files={_gist_filename(key): InputFileContent(json.dumps(data, indent=2))})
        except GithubException as e:
            raise StoreError(f"Could not write {_gist_filename(key)} to Gist {self._gist_id}: {e}") from e

    def close(self) -> None:
        self._gh.close()
