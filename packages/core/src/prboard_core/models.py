"""Data models passed between the fetchers, the aggregator and the CLI.

Settings arrive as explicit ``GitHubSettings`` / ``WorkflowConfig`` values.
prboard_core never reads persisted state itself; the CLI maps store records
to these dataclasses before calling in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

from prboard_core.errors import ConfigurationMissing

DEFAULT_BASE_URL = "https://api.github.com"
ALL_REPOSITORIES = "*"

DateFilter = Literal["all", "week", "two_weeks"]
PRStatus = Literal["open", "closed", "merged"]


@dataclass
class GitHubSettings:
    """Connection settings for one fetch or aggregation run."""

    token: str = ""
    organization: str = ""
    repository: str = ""
    base_url: str = DEFAULT_BASE_URL
    tracked_members: list[str] = field(default_factory=list)

    @property
    def is_org_wide(self) -> bool:
        return self.repository == ALL_REPOSITORIES

    @property
    def actions_repo_path(self) -> str:
        """owner/repo path for the Actions endpoints.

        The Actions API has no organization-wide listing, so the wildcard
        falls back to a repository named after the organization.
        """
        repo = self.organization if self.is_org_wide else self.repository
        return f"{self.organization}/{repo}"

    def require(self, *fields: str) -> None:
        """Raise ConfigurationMissing for every named field that is empty."""
        missing = [name for name in fields if not getattr(self, name)]
        if missing:
            raise ConfigurationMissing(missing)


@dataclass
class WorkflowConfig:
    id: str
    display_name: str = ""
    page_size: int = 10


@dataclass
class PullRequest:
    id: int
    number: int
    title: str
    url: str
    author: str
    status: PRStatus
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    repository: str  # canonical owner/repo from the PR detail response
    comment_count: int = 0
    approval_count: int = 0
    dismissed_count: int = 0
    approver_handles: list[str] = field(default_factory=list)
    dismisser_handles: list[str] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, int]:
        return (self.repository, self.number)


@dataclass
class ReviewDetail:
    """An approval/dismissal event joined with the PR it was left on."""

    id: int
    pr_number: int
    pr_title: str
    repository: str
    state: str
    submitted_at: Optional[datetime]
    url: str
    pr_created_at: Optional[datetime] = None


@dataclass
class CommentDetail:
    """A comment event joined with its PR; author vs pr_author separates given from received."""

    id: int
    pr_number: int
    pr_title: str
    repository: str
    body: str
    created_at: Optional[datetime]
    url: str
    author: str
    pr_author: str


@dataclass
class TeamMember:
    handle: str
    prs: list[PullRequest] = field(default_factory=list)
    comments_given: int = 0
    comments_received: int = 0
    approvals_given: int = 0
    review_details: list[ReviewDetail] = field(default_factory=list)
    comment_details: list[CommentDetail] = field(default_factory=list)
    comments_from_others: list[CommentDetail] = field(default_factory=list)
    last_approval_date: Optional[datetime] = None
    average_review_time_hours: Optional[int] = None


@dataclass
class LeaderboardItem:
    handle: str
    total_prs: int
    total_comments_given: int
    total_approvals_given: int
    comments_received: int
    average_review_time_hours: Optional[int] = None
    last_approval_date: Optional[datetime] = None


@dataclass
class ReleaseInfo:
    platform: Literal["IPA", "APK"]
    version: str
    build_number: str


@dataclass
class PRInfo:
    number: str
    title: str


@dataclass
class ArtifactData:
    prs: str = ""  # comma-joined PR numbers
    pr_details: list[PRInfo] = field(default_factory=list)


@dataclass
class FetchParams:
    page: Optional[int] = None
    per_page: Optional[int] = None
    branch: Optional[str] = None


@dataclass
class WorkflowRun:
    id: int
    name: str
    workflow_id: Optional[int]
    status: str
    conclusion: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    html_url: str
    run_number: int
    run_attempt: int
    display_title: str
    event: str
    repository: str
    branch: str
    commit: str  # short sha
    commit_message: str
    actor: str
    jobs_url: str
    artifacts_url: Optional[str] = None
    prs: str = ""
    pr_details: list[PRInfo] = field(default_factory=list)

    def search_fields(self) -> list[str]:
        """Textual fields covered by the client-side search box."""
        return [
            self.name,
            self.display_title,
            self.actor,
            self.branch,
            self.commit,
            self.commit_message,
            self.repository,
            self.status,
            self.conclusion or "",
            self.prs,
        ]

    def matches(self, term: str) -> bool:
        needle = term.strip().lower()
        if not needle:
            return True
        return any(needle in (value or "").lower() for value in self.search_fields())


@dataclass
class JobStep:
    name: str
    status: str
    conclusion: Optional[str]
    number: int


@dataclass
class JobRun:
    id: int
    name: str
    status: str
    conclusion: Optional[str]
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    steps: list[JobStep] = field(default_factory=list)
    logs: Optional[str] = None
    parsed_releases: Optional[list[ReleaseInfo]] = None
