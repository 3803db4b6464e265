"""Tests for the per-user pull request fetcher."""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from prboard_core.errors import ConfigurationMissing, HttpError
from prboard_core.gh.pull_request import (
    build_search_query,
    fetch_pull_requests_for_user,
    pull_status,
    tally_reviews,
)
from prboard_core.models import GitHubSettings

CREATED = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)
UPDATED = datetime(2025, 5, 2, 9, 0, tzinfo=timezone.utc)


def _settings(repository="mobile-app"):
    return GitHubSettings(token="tok", organization="acme", repository=repository, tracked_members=["alice"])


def _user(login):
    return SimpleNamespace(login=login)


def _review(login, state, body=""):
    return SimpleNamespace(user=_user(login), state=state, body=body)


def _issue(number, author="alice"):
    return SimpleNamespace(
        id=1000 + number,
        number=number,
        title=f"PR {number}",
        html_url=f"https://github.com/acme/mobile-app/pull/{number}",
        user=_user(author),
        created_at=CREATED,
        updated_at=UPDATED,
    )


def _pull(merged=False, state="open", full_name="acme/mobile-app"):
    return SimpleNamespace(merged=merged, state=state, base=SimpleNamespace(repo=SimpleNamespace(full_name=full_name)))


class TestBuildSearchQuery:
    def test_repository_scope(self):
        assert build_search_query(_settings(), "alice") == "repo:acme/mobile-app author:alice is:pr"

    def test_org_wide_scope(self):
        assert build_search_query(_settings("*"), "alice") == "org:acme author:alice is:pr"

    def test_week_filter(self):
        query = build_search_query(_settings(), "alice", "week", today=date(2025, 5, 19))
        assert query.endswith(" updated:>=2025-05-12")

    def test_two_week_filter(self):
        query = build_search_query(_settings(), "alice", "two_weeks", today=date(2025, 5, 19))
        assert query.endswith(" updated:>=2025-05-05")


class TestTallyReviews:
    def test_counts_approvals_dismissals_and_body_comments(self):
        tally = tally_reviews(
            [
                _review("bob", "APPROVED"),
                _review("carol", "DISMISSED"),
                _review("dave", "COMMENTED", "Looks odd here"),
                _review("erin", "COMMENTED", "   "),
                _review("frank", "CHANGES_REQUESTED", "Please fix"),
            ]
        )
        assert tally.approvers == ["bob"]
        assert tally.dismissers == ["carol"]
        assert tally.commented == 1

    def test_none_body_is_not_a_comment(self):
        assert tally_reviews([_review("bob", "COMMENTED", None)]).commented == 0


class TestPullStatus:
    def test_merged_wins_over_closed(self):
        assert pull_status(_pull(merged=True, state="closed")) == "merged"

    def test_closed(self):
        assert pull_status(_pull(state="closed")) == "closed"

    def test_open(self):
        assert pull_status(_pull()) == "open"


class TestFetchPullRequestsForUser:
    def _client(self, hits, pulls, reviews, comments):
        client = MagicMock()
        client.search_pull_requests.return_value = hits
        client.get_pull_detail.side_effect = pulls
        client.get_reviews.side_effect = reviews
        client.get_review_comments.side_effect = comments
        return client

    def test_enriches_each_hit(self):
        client = self._client(
            hits=[_issue(5)],
            pulls=[_pull(merged=True, state="closed")],
            reviews=[[_review("bob", "APPROVED"), _review("carol", "COMMENTED", "nit")]],
            comments=[[object(), object()]],
        )

        prs = fetch_pull_requests_for_user(client, _settings(), "alice")

        assert len(prs) == 1
        pr = prs[0]
        assert pr.number == 5
        assert pr.status == "merged"
        assert pr.author == "alice"
        assert pr.comment_count == 3
        assert pr.approval_count == 1
        assert pr.approver_handles == ["bob"]
        assert pr.dismissed_count == 0
        assert pr.created_at == CREATED

    def test_preserves_search_order(self):
        client = self._client(
            hits=[_issue(9), _issue(3), _issue(7)],
            pulls=[_pull(), _pull(), _pull()],
            reviews=[[], [], []],
            comments=[[], [], []],
        )
        prs = fetch_pull_requests_for_user(client, _settings(), "alice")
        assert [pr.number for pr in prs] == [9, 3, 7]

    def test_repository_comes_from_pr_detail(self):
        client = self._client(
            hits=[_issue(5)],
            pulls=[_pull(full_name="acme/backend")],
            reviews=[[]],
            comments=[[]],
        )
        prs = fetch_pull_requests_for_user(client, _settings("*"), "alice")
        assert prs[0].repository == "acme/backend"

    def test_passes_query_and_limit(self):
        client = self._client(hits=[], pulls=[], reviews=[], comments=[])
        fetch_pull_requests_for_user(client, _settings(), "alice", limit=25)
        client.search_pull_requests.assert_called_once_with("repo:acme/mobile-app author:alice is:pr", 25)

    def test_missing_settings_raise_before_network(self):
        client = MagicMock()
        with pytest.raises(ConfigurationMissing) as exc:
            fetch_pull_requests_for_user(client, GitHubSettings(token="tok"), "alice")
        assert exc.value.missing == ["organization", "repository"]
        client.search_pull_requests.assert_not_called()

    def test_http_error_propagates(self):
        client = MagicMock()
        client.search_pull_requests.side_effect = HttpError(422, "Validation Failed")
        with pytest.raises(HttpError):
            fetch_pull_requests_for_user(client, _settings(), "alice")
