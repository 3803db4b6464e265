"""Persisted settings records.

Decoupled from prboard_core so the store layer can be used independently;
the CLI maps these records to prboard_core settings before fetching.

Serialized keys keep the camelCase names of the stored JSON blobs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

LEGACY_PAGE_SIZE = 10


@dataclass
class GitHubSettingsRecord:
    """Connection settings. ``token`` is held in clear; the store obfuscates it at rest."""

    token: str = ""
    base_url: str = ""
    organization: str = ""
    repository: str = ""
    tracked_members: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "baseUrl": self.base_url,
            "organization": self.organization,
            "repository": self.repository,
            "trackedMembers": list(self.tracked_members),
        }

    @classmethod
    def from_dict(cls, d: dict) -> GitHubSettingsRecord:
        members = d.get("trackedMembers")
        if members is None:
            members = d.get("teamMembers", [])
        return cls(
            token=d.get("token", ""),
            base_url=d.get("baseUrl", ""),
            organization=d.get("organization", ""),
            repository=d.get("repository", ""),
            tracked_members=list(members or []),
        )


@dataclass
class WorkflowConfigRecord:
    id: str
    display_name: str = ""
    page_size: int = LEGACY_PAGE_SIZE

    def to_dict(self) -> dict:
        return {"id": self.id, "displayName": self.display_name, "pageSize": self.page_size}

    @classmethod
    def from_dict(cls, d: dict) -> WorkflowConfigRecord:
        workflow_id = str(d["id"])
        return cls(
            id=workflow_id,
            display_name=d.get("displayName") or d.get("name") or f"Workflow {workflow_id}",
            page_size=int(d.get("pageSize") or LEGACY_PAGE_SIZE),
        )

    @classmethod
    def from_legacy_id(cls, workflow_id) -> WorkflowConfigRecord:
        workflow_id = str(workflow_id)
        return cls(id=workflow_id, display_name=f"Workflow {workflow_id}", page_size=LEGACY_PAGE_SIZE)


@dataclass
class WorkflowSettingsRecord:
    workflow_ids: list[WorkflowConfigRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"workflowIds": [wf.to_dict() for wf in self.workflow_ids]}

    def get(self, workflow_id: str) -> WorkflowConfigRecord | None:
        for wf in self.workflow_ids:
            if wf.id == workflow_id:
                return wf
        return None


def is_current_workflow_shape(d: dict) -> bool:
    """True when every stored workflow entry already has the object shape with ``displayName``."""
    entries = d.get("workflowIds") or []
    return all(isinstance(e, dict) and "displayName" in e for e in entries)


def migrate_workflow_settings(d: dict) -> WorkflowSettingsRecord:
    """Parse stored workflow settings, upgrading older shapes.

    Accepts the current object shape, the bare-id shape ``{"workflowIds": ["123"]}``
    and objects that used ``name`` instead of ``displayName``.
    """
    records = []
    for entry in d.get("workflowIds") or []:
        if isinstance(entry, dict):
            records.append(WorkflowConfigRecord.from_dict(entry))
        else:
            records.append(WorkflowConfigRecord.from_legacy_id(entry))
    return WorkflowSettingsRecord(workflow_ids=records)
