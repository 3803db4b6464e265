from __future__ import annotations

from prboard_core.models import LeaderboardItem, TeamMember

SORT_METRICS = (
    "total_prs",
    "total_comments_given",
    "total_approvals_given",
    "comments_received",
    "average_review_time_hours",
)

# Lower is better for review latency.
_ASCENDING_METRICS = {"average_review_time_hours"}


def generate_leaderboard_data(team: list[TeamMember]) -> list[LeaderboardItem]:
    return [
        LeaderboardItem(
            handle=member.handle,
            total_prs=len(member.prs),
            total_comments_given=member.comments_given,
            total_approvals_given=member.approvals_given,
            comments_received=member.comments_received,
            average_review_time_hours=member.average_review_time_hours,
            last_approval_date=member.last_approval_date,
        )
        for member in team
    ]


def sort_leaderboard(items: list[LeaderboardItem], metric: str = "total_prs") -> list[LeaderboardItem]:
    """Rank items by ``metric``. Missing values sort last; ties keep input order."""
    if metric not in SORT_METRICS:
        raise ValueError(f"Unknown leaderboard metric: {metric!r}. Choose one of {', '.join(SORT_METRICS)}.")

    ascending = metric in _ASCENDING_METRICS

    def sort_key(item: LeaderboardItem):
        value = getattr(item, metric)
        if value is None:
            return (1, 0)
        return (0, value if ascending else -value)

    return sorted(items, key=sort_key)
