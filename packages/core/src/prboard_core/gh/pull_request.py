from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from prboard_core.gh.client import GitHubClient
from prboard_core.models import DateFilter, GitHubSettings, PullRequest
from prboard_core.utils.dates import date_filter_query

logger = logging.getLogger(__name__)

DEFAULT_PR_LIMIT = 10


@dataclass
class ReviewTally:
    approvers: list[str] = field(default_factory=list)
    dismissers: list[str] = field(default_factory=list)
    commented: int = 0


def build_search_query(
    settings: GitHubSettings,
    handle: str,
    date_filter: DateFilter = "all",
    today: Optional[date] = None,
) -> str:
    """Search query for one author's PRs, scoped to the configured repo or the whole org."""
    if settings.is_org_wide:
        query = f"org:{settings.organization} author:{handle}"
    else:
        query = f"repo:{settings.organization}/{settings.repository} author:{handle}"
    return query + " is:pr" + date_filter_query(date_filter, today=today)


def login_of(item) -> str | None:
    """Login of a review/comment/issue author; deleted accounts have no user."""
    user = getattr(item, "user", None)
    return user.login if user is not None else None


def is_body_comment(review) -> bool:
    """A COMMENTED review whose body is more than whitespace counts as a comment."""
    return review.state == "COMMENTED" and bool((review.body or "").strip())


def tally_reviews(reviews) -> ReviewTally:
    tally = ReviewTally()
    for review in reviews:
        login = login_of(review)
        if review.state == "APPROVED":
            tally.approvers.append(login)
        elif review.state == "DISMISSED":
            tally.dismissers.append(login)
        if is_body_comment(review):
            tally.commented += 1
    return tally


def pull_status(pull) -> str:
    if pull.merged:
        return "merged"
    if pull.state == "closed":
        return "closed"
    return "open"


def fetch_pull_requests_for_user(
    client: GitHubClient,
    settings: GitHubSettings,
    handle: str,
    date_filter: DateFilter = "all",
    limit: int = DEFAULT_PR_LIMIT,
) -> list[PullRequest]:
    """Return ``handle``'s most recently updated PRs with status and review counts.

    Search order is preserved. Any API failure raises HttpError; the team
    aggregator isolates those per member.
    """
    settings.require("organization", "repository")

    query = build_search_query(settings, handle, date_filter)
    logger.debug("Searching pull requests: %s", query)
    hits = client.search_pull_requests(query, limit)

    prs: list[PullRequest] = []
    for issue in hits:
        pull = client.get_pull_detail(issue)
        reviews = client.get_reviews(pull)
        comments = client.get_review_comments(pull)
        tally = tally_reviews(reviews)

        prs.append(
            PullRequest(
                id=issue.id,
                number=issue.number,
                title=issue.title,
                url=issue.html_url,
                author=login_of(issue) or handle,
                status=pull_status(pull),
                created_at=issue.created_at,
                updated_at=issue.updated_at,
                repository=pull.base.repo.full_name,
                comment_count=len(comments) + tally.commented,
                approval_count=len(tally.approvers),
                dismissed_count=len(tally.dismissers),
                approver_handles=tally.approvers,
                dismisser_handles=tally.dismissers,
            )
        )

    logger.info("Fetched %d pull request(s) for %s", len(prs), handle)
    return prs
