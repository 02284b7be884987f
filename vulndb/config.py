"""Configuration of the worker server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SERVICE_ID = "vuln-worker"


@dataclass
class Config:
    """Configuration for the worker server.

    An empty issue_repo disables issue creation.
    """

    project: str = ""
    namespace: str = ""
    use_error_reporting: bool = False
    issue_repo: str = ""
    github_access_token: str = ""
    store: Any = None

    def validate(self) -> None:
        """Raise ValueError if the configuration is incomplete."""
        if not self.project:
            raise ValueError("missing project")
        if not self.namespace:
            raise ValueError("missing namespace")
        if self.issue_repo and not self.github_access_token:
            raise ValueError("issue repo requires access token")