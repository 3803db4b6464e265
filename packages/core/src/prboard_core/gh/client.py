"""Authenticated access to a GitHub-compatible REST API.

Pull-request data goes through PyGithub. The Actions endpoints prboard needs
(paged workflow runs with per-call page sizes, raw job logs, artifact zips)
go through a ``requests`` session carrying the same token. Both paths raise
HttpError so callers only ever handle one failure type.
"""

from __future__ import annotations

import logging

import requests
from github import Github, GithubException
from github.Auth import Token

from prboard_core.errors import HttpError
from prboard_core.models import DEFAULT_BASE_URL, GitHubSettings

logger = logging.getLogger(__name__)

_JSON_ACCEPT = "application/vnd.github.v3+json"
_DEFAULT_TIMEOUT = 30


class GitHubClient:
    """Thin wrapper over PyGithub and requests for github.com or Enterprise.

    ``base_url`` is ``https://api.github.com`` or ``https://<host>/api/v3``.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: int = _DEFAULT_TIMEOUT,
        github: Github | None = None,
        session: requests.Session | None = None,
    ):
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout
        self._gh = github if github is not None else Github(auth=Token(token), base_url=self._base_url)
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"token {token}",
                "Accept": _JSON_ACCEPT,
            }
        )

    @classmethod
    def from_settings(cls, settings: GitHubSettings, **kwargs) -> GitHubClient:
        settings.require("token")
        return cls(settings.token, settings.base_url, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Pull requests (PyGithub)
    # ------------------------------------------------------------------

    def search_pull_requests(self, query: str, limit: int) -> list:
        """Run an issue search sorted by most recently updated, capped at ``limit`` hits."""
        try:
            results = self._gh.search_issues(query, sort="updated", order="desc")
            return list(results[:limit])
        except GithubException as e:
            raise HttpError.from_github(e) from e

    def get_pull_detail(self, issue):
        """Load the full pull request behind a search hit."""
        try:
            return issue.as_pull_request()
        except GithubException as e:
            raise HttpError.from_github(e) from e

    def get_pull(self, repository: str, number: int):
        try:
            return self._gh.get_repo(repository, lazy=True).get_pull(number)
        except GithubException as e:
            raise HttpError.from_github(e) from e

    def get_reviews(self, pull) -> list:
        try:
            return list(pull.get_reviews())
        except GithubException as e:
            raise HttpError.from_github(e) from e

    def get_review_comments(self, pull) -> list:
        try:
            return list(pull.get_review_comments())
        except GithubException as e:
            raise HttpError.from_github(e) from e

    def get_pull_activity(self, repository: str, number: int) -> tuple[list, list]:
        """Return ``(reviews, review_comments)`` for one pull request."""
        pull = self.get_pull(repository, number)
        return self.get_reviews(pull), self.get_review_comments(pull)

    # ------------------------------------------------------------------
    # Raw REST (requests)
    # ------------------------------------------------------------------

    def get_json(self, path: str, params: dict | None = None) -> dict:
        response = self._get(path, params=params)
        try:
            return response.json()
        except ValueError as e:
            # A 2xx that is not JSON, e.g. an HTML page from a proxy in front of Enterprise.
            raise HttpError(response.status_code, response.text) from e

    def get_text(self, path: str) -> str:
        # Job logs are served as plain text; the JSON Accept header is dropped.
        return self._get(path, headers={"Accept": None}).text

    def get_bytes(self, url: str) -> bytes:
        return self._get(url, headers={"Accept": None}).content

    def _url(self, path: str) -> str:
        return path if path.startswith("http") else f"{self._base_url}{path}"

    def _get(self, path: str, params: dict | None = None, headers: dict | None = None) -> requests.Response:
        url = self._url(path)
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self._session.get(url, params=params, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            raise HttpError(0, str(e)) from e
        if not response.ok:
            raise HttpError(response.status_code, response.text)
        return response

    def close(self) -> None:
        self._session.close()
        self._gh.close()
