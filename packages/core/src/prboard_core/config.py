import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "store": "file",  # "file" | "gist" | "memory"
    "store_path": ".prboard",  # directory for the file store
    "gist_id": None,
    "base_url": None,  # None = keep the base URL saved in settings
    "max_workers": 4,  # ceiling on concurrent GitHub requests
    "pr_limit": 10,
    "date_filter": "all",
    "job_filter": "build-publish",
    "leaderboard_sort": "total_prs",
}


def load_config(config_path: str = ".prboard.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prboard.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
