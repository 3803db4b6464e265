"""GitHub Actions fetchers: workflow runs, their release-notes artifacts, jobs and logs."""

from __future__ import annotations

import logging
import zipfile
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Optional

from prboard_core.errors import ArchiveEmpty, HttpError
from prboard_core.gh.client import GitHubClient
from prboard_core.models import (
    ArtifactData,
    FetchParams,
    GitHubSettings,
    JobRun,
    JobStep,
    WorkflowConfig,
    WorkflowRun,
)
from prboard_core.utils.archive import extract_from_archive
from prboard_core.utils.dates import ensure_aware, parse_timestamp
from prboard_core.utils.extract import extract_release_info

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_MAX_WORKERS = 4

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def fetch_workflow_runs(
    client: GitHubClient,
    settings: GitHubSettings,
    workflows: list[WorkflowConfig],
    search: str = "",
    workflow_id: Optional[str] = None,
    params: Optional[FetchParams] = None,
    include_artifacts: bool = True,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[WorkflowRun]:
    """List recent runs of the tracked workflows, newest first.

    ``params`` carries server-side paging and branch filtering; ``search`` is
    a client-side substring filter applied after artifact PR data is merged
    in, so PR numbers are searchable too.
    """
    settings.require("organization", "repository")
    params = params or FetchParams()

    selected = [wf for wf in workflows if workflow_id is None or wf.id == workflow_id]
    if not selected:
        return []

    repo_path = settings.actions_repo_path
    runs: list[WorkflowRun] = []
    for workflow in selected:
        try:
            runs.extend(_fetch_runs_for_workflow(client, repo_path, workflow, params))
        except (HttpError, ValueError, KeyError) as e:
            logger.warning("Error fetching runs for workflow %s: %s", workflow.id, e)

    if include_artifacts and runs:
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            artifact_data = list(executor.map(lambda run: fetch_workflow_artifact_data(client, settings, run), runs))
        for run, data in zip(runs, artifact_data):
            run.prs = data.prs
            run.pr_details = data.pr_details

    runs.sort(key=lambda run: ensure_aware(run.created_at) if run.created_at else _EPOCH, reverse=True)

    if search and search.strip():
        runs = [run for run in runs if run.matches(search)]
    return runs


def _fetch_runs_for_workflow(
    client: GitHubClient, repo_path: str, workflow: WorkflowConfig, params: FetchParams
) -> list[WorkflowRun]:
    query: dict = {"per_page": params.per_page or workflow.page_size or DEFAULT_PAGE_SIZE}
    if params.page:
        query["page"] = params.page
    if params.branch:
        query["branch"] = params.branch

    data = client.get_json(f"/repos/{repo_path}/actions/workflows/{workflow.id}/runs", params=query)
    raw_runs = data.get("workflow_runs") or []
    logger.debug("Workflow %s returned %d run(s)", workflow.id, len(raw_runs))
    return [to_workflow_run(raw, repo_path) for raw in raw_runs]


def to_workflow_run(raw: dict, repo_path: str) -> WorkflowRun:
    head_commit = raw.get("head_commit") or {}
    actor = raw.get("actor") or {}
    repository = raw.get("repository") or {}
    return WorkflowRun(
        id=raw["id"],
        name=raw.get("name") or "",
        workflow_id=raw.get("workflow_id"),
        status=raw.get("status") or "",
        conclusion=raw.get("conclusion"),
        created_at=parse_timestamp(raw.get("created_at")),
        updated_at=parse_timestamp(raw.get("updated_at")),
        html_url=raw.get("html_url") or "",
        run_number=raw.get("run_number") or 0,
        run_attempt=raw.get("run_attempt") or 1,
        display_title=raw.get("display_title") or raw.get("name") or "",
        event=raw.get("event") or "",
        repository=repository.get("full_name") or repo_path,
        branch=raw.get("head_branch") or "unknown",
        commit=(raw.get("head_sha") or "")[:7] or "unknown",
        commit_message=head_commit.get("message") or "No commit message",
        actor=actor.get("login") or "unknown",
        jobs_url=raw.get("jobs_url") or "",
        artifacts_url=raw.get("artifacts_url"),
    )


def fetch_workflow_run(client: GitHubClient, settings: GitHubSettings, run_id: int) -> WorkflowRun:
    settings.require("organization", "repository")
    repo_path = settings.actions_repo_path
    return to_workflow_run(client.get_json(f"/repos/{repo_path}/actions/runs/{run_id}"), repo_path)


def fetch_workflow_artifact_data(client: GitHubClient, settings: GitHubSettings, run: WorkflowRun) -> ArtifactData:
    """PR references from the run's release-notes artifact; empty when unavailable."""
    try:
        data = client.get_json(f"/repos/{settings.actions_repo_path}/actions/runs/{run.id}/artifacts")
        artifacts = data.get("artifacts") or []
        if not artifacts:
            logger.debug("No release notes artifact for run %s", run.id)
            return ArtifactData()
        archive = client.get_bytes(artifacts[0]["archive_download_url"])
        return extract_from_archive(archive)
    except (HttpError, ArchiveEmpty, zipfile.BadZipFile, KeyError, ValueError, NotImplementedError) as e:
        logger.warning("Error fetching artifacts for run %s: %s", run.id, e)
        return ArtifactData()


def fetch_workflow_jobs(client: GitHubClient, run: WorkflowRun) -> list[JobRun]:
    data = client.get_json(run.jobs_url)
    return [to_job_run(raw) for raw in data.get("jobs") or []]


def to_job_run(raw: dict) -> JobRun:
    return JobRun(
        id=raw["id"],
        name=raw.get("name") or "",
        status=raw.get("status") or "",
        conclusion=raw.get("conclusion"),
        started_at=parse_timestamp(raw.get("started_at")),
        completed_at=parse_timestamp(raw.get("completed_at")),
        steps=[
            JobStep(
                name=step.get("name") or "",
                status=step.get("status") or "",
                conclusion=step.get("conclusion"),
                number=step.get("number") or 0,
            )
            for step in raw.get("steps") or []
        ],
    )


def fetch_job_logs(client: GitHubClient, settings: GitHubSettings, job_id: int) -> str:
    settings.require("organization", "repository")
    return client.get_text(f"/repos/{settings.actions_repo_path}/actions/jobs/{job_id}/logs")


def load_job_releases(
    client: GitHubClient,
    settings: GitHubSettings,
    jobs: list[JobRun],
    name_filter: Optional[str] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[JobRun]:
    """Fetch logs for the (optionally name-filtered) jobs and parse their uploads.

    A job whose log cannot be fetched is returned without ``parsed_releases``.
    """
    if name_filter:
        jobs = [job for job in jobs if name_filter.lower() in job.name.lower()]
    if not jobs:
        return []

    def load(job: JobRun) -> JobRun:
        try:
            logs = fetch_job_logs(client, settings, job.id)
        except HttpError as e:
            logger.warning("Error loading logs for job %s: %s", job.id, e)
            return job
        job.logs = logs
        job.parsed_releases = extract_release_info(logs)
        return job

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        return list(executor.map(load, jobs))
