"""settings commands: connection settings and tracked members."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prboard_cli.session import cli_errors, get_store
from prboard_store.models import GitHubSettingsRecord

console = Console()


def _mask(token: str) -> str:
    if not token:
        return "[dim]not set[/dim]"
    return f"{token[:4]}…{token[-4:]}" if len(token) > 8 else "****"


@click.group("settings")
def settings_cmd():
    """View and edit GitHub connection settings."""


@settings_cmd.command("show")
@click.pass_context
def show_cmd(ctx):
    """Print the saved settings (token masked)."""
    record = get_store(ctx).load_github_settings()
    if record is None:
        console.print("[yellow]No settings saved yet. Run `prboard settings set`.[/yellow]")
        return

    table = Table(title="GitHub settings", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Token", _mask(record.token))
    table.add_row("Base URL", record.base_url or "https://api.github.com")
    table.add_row("Organization", record.organization or "[dim]not set[/dim]")
    table.add_row("Repository", record.repository or "[dim]not set[/dim]")
    table.add_row("Tracked members", ", ".join(record.tracked_members) or "[dim]none[/dim]")
    console.print(table)


@settings_cmd.command("set")
@click.option("--token", default=None, help="Personal access token (stored obfuscated, not encrypted).")
@click.option("--base-url", default=None, help="API base URL, e.g. https://github.example.com/api/v3.")
@click.option("--org", "organization", default=None, help="GitHub organization.")
@click.option("--repo", "repository", default=None, help="Repository name, or '*' for every repo in the org.")
@click.pass_context
def set_cmd(ctx, token: str | None, base_url: str | None, organization: str | None, repository: str | None):
    """Update connection settings. Options left out keep their saved value."""
    store = get_store(ctx)
    record = store.load_github_settings() or GitHubSettingsRecord()

    if token is not None:
        record.token = token
    if base_url is not None:
        record.base_url = base_url.rstrip("/")
    if organization is not None:
        record.organization = organization
    if repository is not None:
        record.repository = repository

    with cli_errors():
        store.save_github_settings(record)
    console.print("[green]Settings saved.[/green]")


@settings_cmd.command("add-member")
@click.argument("handles", nargs=-1, required=True)
@click.pass_context
def add_member_cmd(ctx, handles: tuple[str, ...]):
    """Track one or more GitHub handles."""
    store = get_store(ctx)
    record = store.load_github_settings() or GitHubSettingsRecord()
    added = list(dict.fromkeys(h for h in handles if h not in record.tracked_members))
    record.tracked_members.extend(added)

    with cli_errors():
        store.save_github_settings(record)
    if added:
        console.print(f"[green]Tracking {', '.join(added)}.[/green]")
    else:
        console.print("[yellow]All handles were already tracked.[/yellow]")


@settings_cmd.command("remove-member")
@click.argument("handles", nargs=-1, required=True)
@click.pass_context
def remove_member_cmd(ctx, handles: tuple[str, ...]):
    """Stop tracking one or more GitHub handles."""
    store = get_store(ctx)
    record = store.load_github_settings()
    if record is None:
        raise click.UsageError("No settings saved yet. Run `prboard settings set`.")

    remaining = [h for h in record.tracked_members if h not in handles]
    removed = len(record.tracked_members) - len(remaining)
    record.tracked_members = remaining

    with cli_errors():
        store.save_github_settings(record)
    console.print(f"[green]Removed {removed} member(s).[/green]")
