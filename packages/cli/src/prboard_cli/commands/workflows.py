"""workflows commands: tracked workflow definitions."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prboard_cli.session import cli_errors, get_store
from prboard_store.models import LEGACY_PAGE_SIZE, WorkflowConfigRecord

console = Console()


@click.group("workflows")
def workflows_cmd():
    """Manage the workflows shown by `prboard builds`."""


@workflows_cmd.command("list")
@click.pass_context
def list_cmd(ctx):
    with cli_errors():
        settings = get_store(ctx).load_workflow_settings()
    if not settings.workflow_ids:
        console.print("[yellow]No workflows tracked.[/yellow]")
        return

    table = Table(title="Tracked workflows", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Page size", justify="right")
    for wf in settings.workflow_ids:
        table.add_row(wf.id, wf.display_name, str(wf.page_size))
    console.print(table)


@workflows_cmd.command("add")
@click.argument("workflow_id")
@click.option("--name", "display_name", default=None, help="Display name. Defaults to 'Workflow <id>'.")
@click.option("--page-size", type=click.IntRange(min=1, max=100), default=LEGACY_PAGE_SIZE, show_default=True)
@click.pass_context
def add_cmd(ctx, workflow_id: str, display_name: str | None, page_size: int):
    """Track WORKFLOW_ID (numeric id or workflow file name, e.g. release.yml)."""
    record = WorkflowConfigRecord(
        id=workflow_id, display_name=display_name or f"Workflow {workflow_id}", page_size=page_size
    )
    with cli_errors():
        try:
            get_store(ctx).add_workflow(record)
        except ValueError as e:
            raise click.UsageError(str(e))
    console.print(f"[green]Tracking workflow {workflow_id}.[/green]")


@workflows_cmd.command("update")
@click.argument("workflow_id")
@click.option("--name", "display_name", default=None, help="New display name.")
@click.option("--page-size", type=click.IntRange(min=1, max=100), default=None)
@click.pass_context
def update_cmd(ctx, workflow_id: str, display_name: str | None, page_size: int | None):
    store = get_store(ctx)
    with cli_errors():
        existing = store.load_workflow_settings().get(workflow_id)
        if existing is None:
            raise click.UsageError(f"Workflow {workflow_id} is not tracked.")
        store.update_workflow(
            WorkflowConfigRecord(
                id=workflow_id,
                display_name=display_name or existing.display_name,
                page_size=page_size or existing.page_size,
            )
        )
    console.print(f"[green]Updated workflow {workflow_id}.[/green]")


@workflows_cmd.command("remove")
@click.argument("workflow_id")
@click.pass_context
def remove_cmd(ctx, workflow_id: str):
    with cli_errors():
        removed = get_store(ctx).delete_workflow(workflow_id)
    if not removed:
        raise click.UsageError(f"Workflow {workflow_id} is not tracked.")
    console.print(f"[green]Stopped tracking workflow {workflow_id}.[/green]")
