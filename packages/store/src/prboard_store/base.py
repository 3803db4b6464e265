"""Abstract settings store.

Backends only know how to read and write JSON records by key. Settings
semantics (token obfuscation, workflow list edits, legacy migration) live
here so every backend behaves the same way.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from prboard_store.models import (
    GitHubSettingsRecord,
    WorkflowConfigRecord,
    WorkflowSettingsRecord,
    is_current_workflow_shape,
    migrate_workflow_settings,
)
from prboard_store.obfuscation import obfuscate, reveal

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A backend could not persist a record."""


GITHUB_SETTINGS_KEY = "github_settings"
WORKFLOW_SETTINGS_KEY = "workflow_settings"


class BaseStore(ABC):
    """Pluggable persistence for connection and workflow-tracking settings."""

    @abstractmethod
    def read(self, key: str) -> dict | None:
        """Return the stored record for ``key``, or None if nothing is stored."""

    @abstractmethod
    def write(self, key: str, data: dict) -> None:
        """Replace the stored record for ``key``."""

    def close(self) -> None:
        """Release any resources held by the store.

        Default is a no-op so callers can always call close() safely.
        """

    # --- connection settings ---

    def load_github_settings(self) -> GitHubSettingsRecord | None:
        data = self.read(GITHUB_SETTINGS_KEY)
        if data is None:
            return None
        record = GitHubSettingsRecord.from_dict(data)
        record.token = reveal(record.token)
        return record

    def save_github_settings(self, record: GitHubSettingsRecord) -> None:
        data = record.to_dict()
        data["token"] = obfuscate(record.token)
        self.write(GITHUB_SETTINGS_KEY, data)

    # --- workflow tracking ---

    def load_workflow_settings(self) -> WorkflowSettingsRecord:
        """Return tracked workflows, rewriting legacy shapes in place on first read."""
        data = self.read(WORKFLOW_SETTINGS_KEY)
        if data is None:
            return WorkflowSettingsRecord()
        settings = migrate_workflow_settings(data)
        if not is_current_workflow_shape(data):
            logger.info("Migrating %d stored workflow(s) to the current settings format", len(settings.workflow_ids))
            self.save_workflow_settings(settings)
        return settings

    def save_workflow_settings(self, settings: WorkflowSettingsRecord) -> None:
        self.write(WORKFLOW_SETTINGS_KEY, settings.to_dict())

    def add_workflow(self, workflow: WorkflowConfigRecord) -> None:
        settings = self.load_workflow_settings()
        if settings.get(workflow.id) is not None:
            raise ValueError(f"Workflow {workflow.id} is already tracked.")
        settings.workflow_ids.append(workflow)
        self.save_workflow_settings(settings)

    def update_workflow(self, workflow: WorkflowConfigRecord) -> bool:
        """Replace the tracked workflow with the same id. Returns False if it is not tracked."""
        settings = self.load_workflow_settings()
        for index, existing in enumerate(settings.workflow_ids):
            if existing.id == workflow.id:
                settings.workflow_ids[index] = workflow
                self.save_workflow_settings(settings)
                return True
        return False

    def delete_workflow(self, workflow_id: str) -> bool:
        settings = self.load_workflow_settings()
        remaining = [wf for wf in settings.workflow_ids if wf.id != workflow_id]
        if len(remaining) == len(settings.workflow_ids):
            return False
        settings.workflow_ids = remaining
        self.save_workflow_settings(settings)
        return True
