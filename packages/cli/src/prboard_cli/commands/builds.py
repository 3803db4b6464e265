"""builds and jobs commands: workflow runs and their uploaded releases."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prboard_cli.commands.leaderboard import format_date
from prboard_cli.session import build_client, cli_errors, get_config, load_settings, load_workflows
from prboard_core.gh.workflow import (
    fetch_workflow_artifact_data,
    fetch_workflow_jobs,
    fetch_workflow_run,
    fetch_workflow_runs,
    load_job_releases,
)
from prboard_core.models import FetchParams

console = Console()

_CONCLUSION_STYLE = {"success": "green", "failure": "red", "cancelled": "dim", "skipped": "dim"}


def _styled(conclusion: str | None, status: str) -> str:
    label = conclusion or status
    style = _CONCLUSION_STYLE.get(label, "yellow")
    return f"[{style}]{label}[/{style}]"


@click.command("builds")
@click.option("--search", default="", help="Filter by name, branch, actor, commit, status or PR number.")
@click.option("--workflow", "workflow_id", default=None, help="Only show runs of this tracked workflow id.")
@click.option("--branch", default=None, help="Only show runs on this branch.")
@click.option("--page", type=int, default=None, help="Page number (1-based).")
@click.option("--per-page", type=int, default=None, help="Runs per workflow. Defaults to the workflow's page size.")
@click.option("--no-artifacts", is_flag=True, help="Skip downloading release-notes artifacts.")
@click.pass_context
def builds_cmd(
    ctx,
    search: str,
    workflow_id: str | None,
    branch: str | None,
    page: int | None,
    per_page: int | None,
    no_artifacts: bool,
):
    """List recent runs of the tracked workflows with the PRs each build shipped."""
    config = get_config(ctx)
    with cli_errors():
        workflows = load_workflows(ctx)
    if not workflows:
        console.print("[yellow]No workflows tracked. Add one with `prboard workflows add <id>`.[/yellow]")
        return

    with cli_errors():
        settings = load_settings(ctx)
        runs = fetch_workflow_runs(
            build_client(settings),
            settings,
            workflows,
            search=search,
            workflow_id=workflow_id,
            params=FetchParams(page=page, per_page=per_page, branch=branch),
            include_artifacts=not no_artifacts,
            max_workers=config["max_workers"],
        )

    if not runs:
        console.print("[yellow]No workflow runs found.[/yellow]")
        return

    table = Table(title="Builds", show_header=True, header_style="bold cyan")
    table.add_column("Run", style="bold")
    table.add_column("Workflow")
    table.add_column("Title", max_width=40)
    table.add_column("Branch")
    table.add_column("Commit", width=8)
    table.add_column("Actor")
    table.add_column("Result")
    table.add_column("PRs", max_width=30)
    table.add_column("Started")
    for run in runs:
        table.add_row(
            str(run.id),
            run.name,
            run.display_title,
            run.branch,
            run.commit,
            run.actor,
            _styled(run.conclusion, run.status),
            run.prs,
            format_date(run.created_at),
        )
    console.print(table)


@click.command("jobs")
@click.argument("run_id", type=int)
@click.option(
    "--job-filter",
    default=None,
    help="Only read logs of jobs whose name contains this text. Use '' to read every job.",
)
@click.pass_context
def jobs_cmd(ctx, run_id: int, job_filter: str | None):
    """Show the jobs, steps, shipped PRs and uploaded releases of RUN_ID."""
    config = get_config(ctx)
    name_filter = config["job_filter"] if job_filter is None else job_filter

    with cli_errors():
        settings = load_settings(ctx)
        client = build_client(settings)
        run = fetch_workflow_run(client, settings, run_id)
        artifact = fetch_workflow_artifact_data(client, settings, run)
        jobs = load_job_releases(
            client, settings, fetch_workflow_jobs(client, run), name_filter=name_filter, max_workers=config["max_workers"]
        )

    console.print(f"\n[bold]{run.display_title}[/bold]  {_styled(run.conclusion, run.status)}")
    console.print(f"  {run.repository} · {run.branch} · {run.commit} · {run.actor}")
    console.print(f"  [dim]{run.html_url}[/dim]")

    if artifact.pr_details:
        pr_table = Table(title="Pull requests in this build", show_header=True, header_style="bold cyan")
        pr_table.add_column("PR", style="bold", width=8)
        pr_table.add_column("Title")
        for pr in artifact.pr_details:
            pr_table.add_row(f"#{pr.number}", pr.title)
        console.print(pr_table)

    if not jobs:
        console.print("[yellow]No matching jobs for this run.[/yellow]")
        return

    for job in jobs:
        console.print(f"\n[bold]{job.name}[/bold]  {_styled(job.conclusion, job.status)}")
        for step in job.steps:
            console.print(f"  {step.number:>3}. {step.name}  {_styled(step.conclusion, step.status)}")
        if job.parsed_releases is None:
            console.print("  [dim]Logs unavailable.[/dim]")
        elif not job.parsed_releases:
            console.print("  [dim]No uploaded releases found in the logs.[/dim]")
        else:
            for release in job.parsed_releases:
                console.print(
                    f"  [green]{release.platform}[/green] {release.version} (build {release.build_number})"
                )
