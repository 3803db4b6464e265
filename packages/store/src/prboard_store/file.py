"""JsonFileStore: the default local store.

One JSON file per record inside a settings directory (``.prboard/`` unless
``store_path`` says otherwise): ``github_settings.json`` and
``workflow_settings.json``. Each file holds a single JSON object.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from prboard_store.base import BaseStore, StoreError

logger = logging.getLogger(__name__)


class JsonFileStore(BaseStore):
    def __init__(self, directory: str = ".prboard"):
        self._dir = Path(directory)

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def read(self, key: str) -> dict | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable settings file %s: %s", path, e)
            return None
        return data if isinstance(data, dict) else None

    def write(self, key: str, data: dict) -> None:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            self._path(key).write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Could not write {self._path(key)}: {e}") from e
