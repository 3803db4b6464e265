"""Tests for team activity aggregation."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from prboard_core.errors import ConfigurationMissing, HttpError
from prboard_core.models import GitHubSettings, PullRequest, ReviewDetail, TeamMember
from prboard_core.team import attribute_activity, average_review_time_hours, derive_metrics, fetch_team_data

T0 = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)


def _settings(members):
    return GitHubSettings(token="tok", organization="acme", repository="mobile-app", tracked_members=list(members))


def _pr(number, author, repository="acme/mobile-app", created_at=T0):
    return PullRequest(
        id=number,
        number=number,
        title=f"PR {number}",
        url=f"https://github.com/{repository}/pull/{number}",
        author=author,
        status="open",
        created_at=created_at,
        updated_at=created_at,
        repository=repository,
    )


_ids = iter(range(1, 10_000))


def _review(login, state, body="", submitted_at=None):
    return SimpleNamespace(
        id=next(_ids),
        user=SimpleNamespace(login=login),
        state=state,
        body=body,
        submitted_at=submitted_at or T0 + timedelta(hours=1),
    )


def _comment(login, body="nit", created_at=None):
    return SimpleNamespace(
        id=next(_ids),
        user=SimpleNamespace(login=login),
        body=body,
        created_at=created_at or T0 + timedelta(hours=1),
    )


def _team(*handles):
    return {h: TeamMember(handle=h) for h in handles}


# ---------------------------------------------------------------------------
# attribute_activity
# ---------------------------------------------------------------------------


class TestAttributeActivity:
    def test_cross_attribution_of_a_comment(self):
        team = _team("alice", "bob")
        attribute_activity(team, _pr(5, "alice"), reviews=[], comments=[_comment("bob")])

        assert team["bob"].comments_given == 1
        assert team["alice"].comments_received == 1
        assert team["alice"].comments_from_others[0].author == "bob"
        assert team["alice"].comments_from_others[0].pr_author == "alice"

    def test_self_comments_excluded_from_both_sides(self):
        team = _team("alice")
        attribute_activity(
            team,
            _pr(5, "alice"),
            reviews=[_review("alice", "COMMENTED", "note to self")],
            comments=[_comment("alice")],
        )
        assert team["alice"].comments_given == 0
        assert team["alice"].comments_received == 0
        assert team["alice"].comment_details == []

    def test_self_approval_excluded(self):
        team = _team("alice")
        attribute_activity(team, _pr(5, "alice"), reviews=[_review("alice", "APPROVED")], comments=[])
        assert team["alice"].approvals_given == 0

    def test_approvals_and_dismissals_count_as_approvals_given(self):
        team = _team("alice", "bob")
        attribute_activity(
            team,
            _pr(5, "alice"),
            reviews=[_review("bob", "APPROVED"), _review("bob", "DISMISSED")],
            comments=[],
        )
        assert team["bob"].approvals_given == 2
        assert [d.state for d in team["bob"].review_details] == ["APPROVED", "DISMISSED"]
        assert team["alice"].comments_received == 0

    def test_body_review_counts_as_comment(self):
        team = _team("alice", "bob")
        attribute_activity(
            team,
            _pr(5, "alice"),
            reviews=[_review("bob", "COMMENTED", "Why this?"), _review("bob", "COMMENTED", "  ")],
            comments=[],
        )
        assert team["bob"].comments_given == 1
        assert team["alice"].comments_received == 1

    def test_untracked_commenter_counts_as_received_only(self):
        team = _team("alice")
        attribute_activity(team, _pr(5, "alice"), reviews=[], comments=[_comment("outside-contributor")])
        assert team["alice"].comments_received == 1
        assert "outside-contributor" not in team

    def test_deleted_user_skipped(self):
        team = _team("alice")
        ghost = SimpleNamespace(id=1, user=None, body="hi", created_at=T0)
        attribute_activity(team, _pr(5, "alice"), reviews=[], comments=[ghost])
        assert team["alice"].comments_received == 0


# ---------------------------------------------------------------------------
# derive_metrics
# ---------------------------------------------------------------------------


def _detail(state, hours, created=T0):
    return ReviewDetail(
        id=1,
        pr_number=1,
        pr_title="t",
        repository="acme/mobile-app",
        state=state,
        submitted_at=created + timedelta(hours=hours),
        url="",
        pr_created_at=created,
    )


class TestDeriveMetrics:
    def test_average_review_time(self):
        assert average_review_time_hours([_detail("APPROVED", 2), _detail("APPROVED", 4)]) == 3

    def test_non_positive_deltas_excluded(self):
        details = [_detail("APPROVED", 2), _detail("APPROVED", 4), _detail("APPROVED", 0), _detail("APPROVED", -3)]
        assert average_review_time_hours(details) == 3

    def test_rounds_half_up(self):
        assert average_review_time_hours([_detail("APPROVED", 2), _detail("APPROVED", 3)]) == 3

    def test_no_samples(self):
        assert average_review_time_hours([]) is None
        assert average_review_time_hours([_detail("APPROVED", -1)]) is None

    def test_last_approval_ignores_dismissals(self):
        member = TeamMember(handle="bob", review_details=[_detail("APPROVED", 5), _detail("DISMISSED", 9)])
        derive_metrics(member)
        assert member.last_approval_date == T0 + timedelta(hours=5)

    def test_no_approvals(self):
        member = TeamMember(handle="bob")
        derive_metrics(member)
        assert member.last_approval_date is None
        assert member.average_review_time_hours is None


# ---------------------------------------------------------------------------
# fetch_team_data
# ---------------------------------------------------------------------------


class TestFetchTeamData:
    def test_requires_tracked_members(self):
        with pytest.raises(ConfigurationMissing) as exc:
            fetch_team_data(MagicMock(), _settings([]))
        assert exc.value.missing == ["tracked_members"]

    def test_requires_token(self):
        settings = _settings(["alice"])
        settings.token = ""
        with pytest.raises(ConfigurationMissing):
            fetch_team_data(MagicMock(), settings)

    def test_output_follows_tracked_order(self, mocker):
        mocker.patch("prboard_core.team.fetch_pull_requests_for_user", return_value=[])
        team = fetch_team_data(MagicMock(), _settings(["carol", "alice", "bob"]))
        assert [m.handle for m in team] == ["carol", "alice", "bob"]

    def test_duplicate_handles_aggregated_once(self, mocker):
        fetch = mocker.patch("prboard_core.team.fetch_pull_requests_for_user", return_value=[])

        team = fetch_team_data(MagicMock(), _settings(["alice", "bob", "alice"]))

        assert [m.handle for m in team] == ["alice", "bob"]
        assert sorted(call.args[2] for call in fetch.call_args_list) == ["alice", "bob"]

    def test_partial_failure_isolated(self, mocker):
        prs = {"alice": [_pr(5, "alice")]}

        def fake_fetch(client, settings, handle, date_filter, limit):
            if handle == "ghost-user":
                raise HttpError(404, "Not Found")
            return prs.get(handle, [])

        mocker.patch("prboard_core.team.fetch_pull_requests_for_user", side_effect=fake_fetch)
        client = MagicMock()
        client.get_pull_activity.return_value = ([_review("bob", "APPROVED")], [_comment("bob")])

        team = {m.handle: m for m in fetch_team_data(client, _settings(["alice", "ghost-user", "bob"]))}

        ghost = team["ghost-user"]
        assert ghost.prs == []
        assert (ghost.comments_given, ghost.comments_received, ghost.approvals_given) == (0, 0, 0)
        assert len(team["alice"].prs) == 1
        assert team["bob"].approvals_given == 1
        assert team["bob"].comments_given == 1
        assert team["alice"].comments_received == 1

    def test_shared_pr_scanned_once(self, mocker):
        shared = _pr(5, "alice")
        mocker.patch(
            "prboard_core.team.fetch_pull_requests_for_user",
            side_effect=lambda client, settings, handle, *args: [_pr(5, "alice")] if handle in ("alice", "bob") else [],
        )
        client = MagicMock()
        client.get_pull_activity.return_value = ([_review("bob", "APPROVED")], [])

        team = {m.handle: m for m in fetch_team_data(client, _settings(["alice", "bob"]))}

        client.get_pull_activity.assert_called_once_with(shared.repository, shared.number)
        assert team["bob"].approvals_given == 1

    def test_same_number_in_different_repos_scanned_separately(self, mocker):
        mocker.patch(
            "prboard_core.team.fetch_pull_requests_for_user",
            return_value=[_pr(5, "alice", "acme/mobile-app"), _pr(5, "alice", "acme/backend")],
        )
        client = MagicMock()
        client.get_pull_activity.return_value = ([], [])
        fetch_team_data(client, _settings(["alice"]))
        assert client.get_pull_activity.call_count == 2

    def test_activity_failure_skips_pr(self, mocker):
        mocker.patch(
            "prboard_core.team.fetch_pull_requests_for_user",
            side_effect=lambda client, settings, handle, *args: [_pr(5, "alice"), _pr(6, "alice")]
            if handle == "alice"
            else [],
        )

        def activity(repo, number):
            if number == 5:
                raise HttpError(500, "boom")
            return [_review("bob", "APPROVED")], []

        client = MagicMock()
        client.get_pull_activity.side_effect = activity

        team = {m.handle: m for m in fetch_team_data(client, _settings(["alice", "bob"]))}
        assert team["bob"].approvals_given == 1

    def test_derives_review_time(self, mocker):
        mocker.patch(
            "prboard_core.team.fetch_pull_requests_for_user",
            side_effect=lambda client, settings, handle, *args: [_pr(1, "alice"), _pr(2, "alice")]
            if handle == "alice"
            else [],
        )
        client = MagicMock()
        client.get_pull_activity.side_effect = lambda repo, number: (
            [_review("bob", "APPROVED", submitted_at=T0 + timedelta(hours=2 if number == 1 else 4))],
            [],
        )

        team = {m.handle: m for m in fetch_team_data(client, _settings(["alice", "bob"]))}
        assert team["bob"].average_review_time_hours == 3
        assert team["bob"].last_approval_date == T0 + timedelta(hours=4)
