from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

DEFAULT_CONFIG: dict = {
    "origin": "*",
    "owner": None,
    "repo": None,
    "base_branch": "main",
    "mode": "pull_request",  # or "issue"
    "labels": [],
    "reviewers": [],
    "team_reviewers": [],
    "data_dir": "data/courseReviews",
    "branch_prefix": "new-review",
    "cleanup_orphan_branches": True,
    "recaptcha_verify_url": RECAPTCHA_VERIFY_URL,
    "request_timeout_seconds": 10.0,
    "attribution": "_This change was submitted automatically through the course review form._",
}

_LIST_KEYS = ("labels", "reviewers", "team_reviewers")
_MODES = ("pull_request", "issue")
_SECRET_KEYS = ("github_token", "recaptcha_secret")


def _as_list(value) -> tuple[str, ...]:
    """Accept either a YAML list or a comma-separated string."""
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(str(v).strip() for v in value if str(v).strip())


@dataclass(frozen=True)
class RelayConfig:
    """Resolved settings, built once at start-up and passed to every component."""

    owner: str | None = None
    repo: str | None = None
    origin: str = DEFAULT_CONFIG["origin"]
    base_branch: str = DEFAULT_CONFIG["base_branch"]
    mode: str = DEFAULT_CONFIG["mode"]
    labels: tuple[str, ...] = ()
    reviewers: tuple[str, ...] = ()
    team_reviewers: tuple[str, ...] = ()
    data_dir: str = DEFAULT_CONFIG["data_dir"]
    branch_prefix: str = DEFAULT_CONFIG["branch_prefix"]
    cleanup_orphan_branches: bool = True
    recaptcha_verify_url: str = RECAPTCHA_VERIFY_URL
    request_timeout_seconds: float = DEFAULT_CONFIG["request_timeout_seconds"]
    attribution: str = DEFAULT_CONFIG["attribution"]
    github_token: str | None = field(default=None, repr=False)
    recaptcha_secret: str | None = field(default=None, repr=False)

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def missing(self) -> list[str]:
        """Names of required settings that are not set."""
        missing = []
        if not self.owner:
            missing.append("owner")
        if not self.repo:
            missing.append("repo")
        if not self.github_token:
            missing.append("GITHUB_TOKEN")
        if not self.recaptcha_secret:
            missing.append("RECAPTCHA_SECRET_KEY")
        if self.mode not in _MODES:
            missing.append(f"mode (one of {', '.join(_MODES)})")
        return missing


def load_config(config_path: str = ".reviewgate.yml", cli_overrides: Optional[dict] = None) -> RelayConfig:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .reviewgate.yml in the current directory
      3. CLI argument overrides
    Secrets are read from the environment only.
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

    for key in _LIST_KEYS:
        config[key] = _as_list(config.get(key))

    known = {k: config[k] for k in RelayConfig.__dataclass_fields__ if k in config and k not in _SECRET_KEYS}
    return RelayConfig(
        **known,
        github_token=config.get("github_token") or os.environ.get("GITHUB_TOKEN"),
        recaptcha_secret=os.environ.get("RECAPTCHA_SECRET_KEY"),
    )
