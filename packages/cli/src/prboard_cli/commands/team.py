"""team and prs commands: per-member activity."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prboard_cli.commands.leaderboard import DATE_FILTERS, format_date, format_hours
from prboard_cli.session import build_client, cli_errors, get_config, load_settings
from prboard_core.gh.pull_request import fetch_pull_requests_for_user
from prboard_core.models import PullRequest, TeamMember
from prboard_core.team import fetch_team_data

console = Console()

_STATUS_STYLE = {"open": "green", "merged": "magenta", "closed": "red"}


def _pr_table(title: str, prs: list[PullRequest]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=7)
    table.add_column("Title", max_width=50)
    table.add_column("Repository")
    table.add_column("Status")
    table.add_column("Comments", justify="right")
    table.add_column("Approvals", justify="right")
    table.add_column("Updated")
    for pr in prs:
        style = _STATUS_STYLE.get(pr.status, "white")
        table.add_row(
            f"#{pr.number}",
            pr.title,
            pr.repository,
            f"[{style}]{pr.status}[/{style}]",
            str(pr.comment_count),
            str(pr.approval_count),
            format_date(pr.updated_at),
        )
    return table


def _print_member_detail(member: TeamMember) -> None:
    console.print(f"\n[bold]{member.handle}[/bold]")
    console.print(f"  Average review time: {format_hours(member.average_review_time_hours)}")
    console.print(f"  Last approval:       {format_date(member.last_approval_date)}")

    console.print(_pr_table(f"Pull requests ({len(member.prs)})", member.prs))

    reviews = sorted(
        member.review_details, key=lambda d: d.submitted_at.isoformat() if d.submitted_at else "", reverse=True
    )
    review_table = Table(title=f"Approvals ({len(reviews)})", show_header=True, header_style="bold cyan")
    review_table.add_column("PR", style="bold", width=7)
    review_table.add_column("Title", max_width=50)
    review_table.add_column("State")
    review_table.add_column("Submitted")
    for d in reviews:
        review_table.add_row(f"#{d.pr_number}", d.pr_title, d.state, format_date(d.submitted_at))
    console.print(review_table)

    for title, details in (
        (f"Comments given ({len(member.comment_details)})", member.comment_details),
        (f"Comments received ({len(member.comments_from_others)})", member.comments_from_others),
    ):
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("PR", style="bold", width=7)
        table.add_column("Author")
        table.add_column("Comment", max_width=60)
        table.add_column("Created")
        for d in details:
            table.add_row(f"#{d.pr_number}", d.author, d.body.splitlines()[0] if d.body else "", format_date(d.created_at))
        console.print(table)


@click.command("team")
@click.option("--date-filter", type=click.Choice(DATE_FILTERS), default=None, help="Recency window.")
@click.option("--member", default=None, help="Show review and comment detail for one handle.")
@click.pass_context
def team_cmd(ctx, date_filter: str | None, member: str | None):
    """Show each tracked member's pull requests and review activity."""
    config = get_config(ctx)
    date_filter = date_filter or config["date_filter"]

    with cli_errors():
        settings = load_settings(ctx)
        if member is not None and member not in settings.tracked_members:
            raise click.UsageError(f"{member} is not a tracked member. Add it with `prboard settings add-member`.")
        team = fetch_team_data(
            build_client(settings),
            settings,
            date_filter=date_filter,
            max_workers=config["max_workers"],
            pr_limit=config["pr_limit"],
        )

    if member is not None:
        _print_member_detail(next(m for m in team if m.handle == member))
        return

    table = Table(title=f"Team activity ({date_filter})", show_header=True, header_style="bold cyan")
    table.add_column("Member", style="bold")
    table.add_column("Open", justify="right")
    table.add_column("Merged", justify="right")
    table.add_column("Closed", justify="right")
    table.add_column("Comments given", justify="right")
    table.add_column("Comments received", justify="right")
    table.add_column("Approvals given", justify="right")
    for m in team:
        statuses = [pr.status for pr in m.prs]
        table.add_row(
            m.handle,
            str(statuses.count("open")),
            str(statuses.count("merged")),
            str(statuses.count("closed")),
            str(m.comments_given),
            str(m.comments_received),
            str(m.approvals_given),
        )
    console.print(table)


@click.command("prs")
@click.argument("handle")
@click.option("--date-filter", type=click.Choice(DATE_FILTERS), default=None, help="Recency window.")
@click.option("--limit", type=int, default=None, help="Maximum number of PRs to fetch.")
@click.pass_context
def prs_cmd(ctx, handle: str, date_filter: str | None, limit: int | None):
    """Show HANDLE's most recently updated pull requests."""
    config = get_config(ctx)

    with cli_errors():
        settings = load_settings(ctx)
        prs = fetch_pull_requests_for_user(
            build_client(settings),
            settings,
            handle,
            date_filter=date_filter or config["date_filter"],
            limit=limit or config["pr_limit"],
        )

    if not prs:
        console.print(f"[yellow]No pull requests found for {handle}.[/yellow]")
        return
    console.print(_pr_table(f"Pull requests: {handle}", prs))
