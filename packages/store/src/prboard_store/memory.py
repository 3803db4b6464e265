"""In-memory store: nothing survives the process.

Used by tests and by one-off runs (``store: memory``) that pass every
setting through the environment and command-line options.
"""

from __future__ import annotations

import copy

from prboard_store.base import BaseStore


class MemoryStore(BaseStore):
    def __init__(self, records: dict[str, dict] | None = None):
        self._records: dict[str, dict] = copy.deepcopy(records) if records else {}

    def read(self, key: str) -> dict | None:
        data = self._records.get(key)
        return copy.deepcopy(data) if data is not None else None

    def write(self, key: str, data: dict) -> None:
        self._records[key] = copy.deepcopy(data)
