"""leaderboard command: rank tracked members."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prboard_cli.session import build_client, cli_errors, get_config, load_settings
from prboard_core.leaderboard import SORT_METRICS, generate_leaderboard_data, sort_leaderboard
from prboard_core.team import fetch_team_data

console = Console()

DATE_FILTERS = ["all", "week", "two_weeks"]


def format_hours(hours: int | None) -> str:
    return f"{hours}h" if hours is not None else "-"


def format_date(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"


@click.command("leaderboard")
@click.option(
    "--date-filter",
    type=click.Choice(DATE_FILTERS),
    default=None,
    help="Only count PRs updated in the last week / two weeks.",
)
@click.option(
    "--sort-by",
    type=click.Choice(SORT_METRICS),
    default=None,
    help="Ranking metric. Review time ranks lowest first.",
)
@click.pass_context
def leaderboard_cmd(ctx, date_filter: str | None, sort_by: str | None):
    """Show the team leaderboard.

    Counts each tracked member's recent PRs, the approvals and comments they
    gave on teammates' PRs, the comments their own PRs received, and their
    average time to review.
    """
    config = get_config(ctx)
    date_filter = date_filter or config["date_filter"]
    sort_by = sort_by or config["leaderboard_sort"]

    with cli_errors():
        settings = load_settings(ctx)
        team = fetch_team_data(
            build_client(settings),
            settings,
            date_filter=date_filter,
            max_workers=config["max_workers"],
            pr_limit=config["pr_limit"],
        )

    items = sort_leaderboard(generate_leaderboard_data(team), sort_by)

    table = Table(title=f"Team Leaderboard ({date_filter})", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", width=3)
    table.add_column("Member", style="bold")
    table.add_column("PRs", justify="right")
    table.add_column("Comments given", justify="right")
    table.add_column("Approvals given", justify="right")
    table.add_column("Comments received", justify="right")
    table.add_column("Avg review time", justify="right")
    table.add_column("Last approval")

    for rank, item in enumerate(items, 1):
        table.add_row(
            str(rank),
            item.handle,
            str(item.total_prs),
            str(item.total_comments_given),
            str(item.total_approvals_given),
            str(item.comments_received),
            format_hours(item.average_review_time_hours),
            format_date(item.last_approval_date),
        )

    console.print(table)
