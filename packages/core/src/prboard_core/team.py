"""Team activity aggregation.

One run builds a TeamMember per tracked handle:

  1. fetch every member's recent PRs (bounded thread pool, per-member
     failures isolated),
  2. fetch reviews and review comments once per distinct PR, keyed by
     (repository, number) so a PR reached through two members is scanned once,
  3. attribute each review/comment to its author ("given") and to the PR
     author ("received"), never counting someone's activity on their own PR,
  4. derive average review latency and last approval date.

Nothing is shared between runs.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional

from prboard_core.gh.client import GitHubClient
from prboard_core.gh.pull_request import DEFAULT_PR_LIMIT, fetch_pull_requests_for_user, is_body_comment, login_of
from prboard_core.models import CommentDetail, DateFilter, GitHubSettings, PullRequest, ReviewDetail, TeamMember
from prboard_core.utils.dates import ensure_aware

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4

_APPROVAL_STATES = ("APPROVED", "DISMISSED")


def fetch_team_data(
    client: GitHubClient,
    settings: GitHubSettings,
    date_filter: DateFilter = "all",
    max_workers: int = DEFAULT_MAX_WORKERS,
    pr_limit: int = DEFAULT_PR_LIMIT,
) -> list[TeamMember]:
    """Aggregate review/comment activity for every tracked member, in tracked order.

    A handle listed more than once is aggregated once, at its first position.
    """
    settings.require("token", "organization", "repository", "tracked_members")

    handles = list(dict.fromkeys(settings.tracked_members))
    team = {handle: TeamMember(handle=handle) for handle in handles}
    workers = max(1, max_workers)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        pr_futures = {
            handle: executor.submit(fetch_pull_requests_for_user, client, settings, handle, date_filter, pr_limit)
            for handle in team
        }
        for handle, future in pr_futures.items():
            try:
                team[handle].prs = future.result()
            except Exception as e:
                logger.warning("Error fetching pull requests for %s (%s): %s", handle, type(e).__name__, e)

        unique_prs = _unique_prs(team.values())
        activity_futures = {
            key: executor.submit(client.get_pull_activity, pr.repository, pr.number) for key, pr in unique_prs.items()
        }
        activity = {}
        for key, future in activity_futures.items():
            try:
                activity[key] = future.result()
            except Exception as e:
                logger.warning("Error fetching reviews/comments for %s#%d: %s", key[0], key[1], e)

    for key, pr in unique_prs.items():
        if key in activity:
            reviews, comments = activity[key]
            attribute_activity(team, pr, reviews, comments)

    for member in team.values():
        derive_metrics(member)

    return list(team.values())


def _unique_prs(members) -> dict[tuple[str, int], PullRequest]:
    unique: dict[tuple[str, int], PullRequest] = {}
    for member in members:
        for pr in member.prs:
            unique.setdefault(pr.key, pr)
    return unique


def attribute_activity(team: dict[str, TeamMember], pr: PullRequest, reviews, comments) -> None:
    """Credit one PR's reviews and review comments to tracked members.

    Activity by the PR's own author counts on neither side. Comments from
    untracked accounts still count toward the author's received tally.
    """
    pr_owner = team.get(pr.author)

    for review in reviews:
        reviewer = login_of(review)
        if reviewer is None or reviewer == pr.author:
            continue
        member = team.get(reviewer)

        if member is not None and review.state in _APPROVAL_STATES:
            member.approvals_given += 1
            member.review_details.append(_review_detail(pr, review))

        if is_body_comment(review):
            detail = _comment_detail(pr, review, reviewer, created_at=review.submitted_at)
            _credit_comment(member, pr_owner, detail)

    for comment in comments:
        commenter = login_of(comment)
        if commenter is None or commenter == pr.author:
            continue
        detail = _comment_detail(pr, comment, commenter, created_at=comment.created_at)
        _credit_comment(team.get(commenter), pr_owner, detail)


def _credit_comment(commenter: Optional[TeamMember], pr_owner: Optional[TeamMember], detail: CommentDetail) -> None:
    if commenter is not None:
        commenter.comments_given += 1
        commenter.comment_details.append(detail)
    if pr_owner is not None:
        pr_owner.comments_received += 1
        pr_owner.comments_from_others.append(detail)


def _review_detail(pr: PullRequest, review) -> ReviewDetail:
    return ReviewDetail(
        id=review.id,
        pr_number=pr.number,
        pr_title=pr.title,
        repository=pr.repository,
        state=review.state,
        submitted_at=review.submitted_at,
        url=pr.url,
        pr_created_at=pr.created_at,
    )


def _comment_detail(pr: PullRequest, item, author: str, created_at: Optional[datetime]) -> CommentDetail:
    return CommentDetail(
        id=item.id,
        pr_number=pr.number,
        pr_title=pr.title,
        repository=pr.repository,
        body=item.body or "",
        created_at=created_at,
        url=pr.url,
        author=author,
        pr_author=pr.author,
    )


def derive_metrics(member: TeamMember) -> None:
    member.average_review_time_hours = average_review_time_hours(member.review_details)

    approvals = [d.submitted_at for d in member.review_details if d.state == "APPROVED" and d.submitted_at]
    member.last_approval_date = max(approvals, key=ensure_aware) if approvals else None


def average_review_time_hours(details: list[ReviewDetail]) -> Optional[int]:
    """Mean hours from PR creation to review, rounded half-up; non-positive gaps are ignored."""
    hours = []
    for detail in details:
        if detail.submitted_at is None or detail.pr_created_at is None:
            continue
        delta = (ensure_aware(detail.submitted_at) - ensure_aware(detail.pr_created_at)).total_seconds() / 3600
        if delta > 0:
            hours.append(delta)
    if not hours:
        return None
    return math.floor(sum(hours) / len(hours) + 0.5)
