"""Bridges the store and prboard_core for CLI commands.

The store hands back records; prboard_core wants explicit settings values.
This module owns that mapping and the translation of core errors into click
errors, so neither package knows about the other.
"""

from __future__ import annotations

from contextlib import contextmanager

import click

from prboard_cli.auth import resolve_github_token
from prboard_core.errors import ConfigurationMissing, HttpError
from prboard_core.gh.client import GitHubClient
from prboard_core.models import DEFAULT_BASE_URL, GitHubSettings, WorkflowConfig
from prboard_store.base import BaseStore, StoreError
from prboard_store.models import GitHubSettingsRecord


def get_store(ctx: click.Context) -> BaseStore:
    return ctx.obj["store"]


def get_config(ctx: click.Context) -> dict:
    return ctx.obj["config"]


def to_github_settings(record: GitHubSettingsRecord | None, config: dict) -> GitHubSettings:
    record = record or GitHubSettingsRecord()
    return GitHubSettings(
        token=resolve_github_token(record.token) or "",
        organization=record.organization,
        repository=record.repository,
        base_url=config.get("base_url") or record.base_url or DEFAULT_BASE_URL,
        tracked_members=list(record.tracked_members),
    )


def load_settings(ctx: click.Context) -> GitHubSettings:
    store = get_store(ctx)
    return to_github_settings(store.load_github_settings(), get_config(ctx))


def load_workflows(ctx: click.Context) -> list[WorkflowConfig]:
    records = get_store(ctx).load_workflow_settings().workflow_ids
    return [WorkflowConfig(id=r.id, display_name=r.display_name, page_size=r.page_size) for r in records]


def build_client(settings: GitHubSettings) -> GitHubClient:
    return GitHubClient.from_settings(settings)


@contextmanager
def cli_errors():
    """Turn prboard errors into click errors with a readable message."""
    try:
        yield
    except ConfigurationMissing as e:
        raise click.UsageError(
            f"{e}.\nRun `prboard settings set --org <org> --repo <repo>` and "
            "`prboard settings add-member <handle>`, and set GITHUB_TOKEN or run `gh auth login`."
        )
    except HttpError as e:
        raise click.ClickException(str(e))
    except StoreError as e:
        raise click.ClickException(str(e))
