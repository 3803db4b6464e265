"""CLI entry point for prboard.

Commands:
  leaderboard  rank tracked members by PRs, reviews and comments
  team         per-member activity, or one member's review/comment detail
  prs          one user's recent pull requests
  builds       recent runs of the tracked workflows, with their PR references
  jobs         jobs, steps and uploaded releases of one workflow run
  settings     connection settings and tracked members
  workflows    tracked workflow definitions
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prboard_cli.commands.builds import builds_cmd, jobs_cmd
from prboard_cli.commands.leaderboard import leaderboard_cmd
from prboard_cli.commands.settings import settings_cmd
from prboard_cli.commands.team import prs_cmd, team_cmd
from prboard_cli.commands.workflows import workflows_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured settings store from .prboard.yml.

    Store selection hierarchy:
      store: gist   → GistStore      (requires gist_id and a GitHub token)
      store: memory → MemoryStore    (nothing persisted)
      (default)     → JsonFileStore  (store_path, default .prboard/)
    """
    from prboard_store.file import JsonFileStore

    store_type = config.get("store", "file")

    if store_type == "gist":
        from prboard_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            console.print(
                "[yellow]GistStore requires gist_id and GITHUB_TOKEN. Falling back to the local file store.[/yellow]"
            )
            return JsonFileStore(directory=config.get("store_path", ".prboard"))
        return GistStore(gist_id=gist_id, token=token, base_url=config.get("base_url"))

    if store_type == "memory":
        from prboard_store.memory import MemoryStore

        return MemoryStore()

    return JsonFileStore(directory=config.get("store_path", ".prboard"))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prboard"),
    prog_name="prboard",
)
@click.option(
    "--config",
    "config_path",
    default=".prboard.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRBOARD_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every GitHub request.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Team pull-request and build dashboard for GitHub."""
    from prboard_core.config import load_config
    from prboard_cli.auth import resolve_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    # The Gist store needs a token before saved settings can be read.
    if config.get("store") == "gist":
        token = resolve_github_token()
        if token:
            config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(leaderboard_cmd)
main.add_command(team_cmd)
main.add_command(prs_cmd)
main.add_command(builds_cmd)
main.add_command(jobs_cmd)
main.add_command(settings_cmd)
main.add_command(workflows_cmd)
