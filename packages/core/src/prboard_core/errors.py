"""Error taxonomy shared by every prboard fetcher.

Primary fetches let these propagate to the caller. Fan-out helpers (one team
member, one workflow, one artifact, one job log) catch them per item, log a
warning and carry on with an empty result.
"""

from __future__ import annotations


class PRBoardError(Exception):
    """Base class for all prboard errors."""


class ConfigurationMissing(PRBoardError):
    """Raised before any network call when required settings are absent."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"GitHub settings not configured: missing {', '.join(self.missing)}")


class HttpError(PRBoardError):
    """A non-2xx response (or transport failure, status 0) from the GitHub API."""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"GitHub API error: {status} {body}".rstrip())

    @classmethod
    def from_github(cls, exc) -> HttpError:
        """Build from a PyGithub ``GithubException``."""
        data = exc.data
        if isinstance(data, dict):
            body = data.get("message") or str(data)
        else:
            body = str(data or "")
        return cls(exc.status or 0, body)


class ArchiveEmpty(PRBoardError):
    """The artifact zip contained no file entries."""
