"""Helpers for naming git repositories."""

from __future__ import annotations

import json


def parse_github_repo(s: str) -> tuple[str, str]:
    """Split "owner/repo" or "github.com/owner/repo" into (owner, repo)."""
    parts = s.split("/")
    if len(parts) == 2:
        return parts[0], parts[1]
    if len(parts) == 3 and parts[0] == "github.com":
        return parts[1], parts[2]
    raise ValueError(f"{json.dumps(s)} is not in the form {{github.com/}}owner/repo")