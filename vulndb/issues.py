"""Creating and retrieving issues, on GitHub or in memory."""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import parse_qs, urlparse

import requests

_API_URL = "https://api.github.com"
_TIMEOUT = 60
_PER_PAGE = 100


@dataclass
class Issue:
    """A GitHub issue or similar."""

    number: int = 0
    title: str = ""
    body: str = ""
    state: str = ""
    labels: list[str] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass
class GetIssuesOptions:
    """Filters for listing issues.

    state is one of "open", "closed" or "all"; empty means "open".
    """

    state: str = ""
    labels: list[str] = field(default_factory=list)


class Client(ABC):
    """Something that can create and retrieve issues."""

    @abstractmethod
    def destination(self) -> str:
        """Describe where issues will be created."""

    @abstractmethod
    def reference(self, number: int) -> str:
        """Return a string that refers to the issue with this number."""

    @abstractmethod
    def issue_exists(self, number: int) -> bool:
        """Report whether an issue with this number exists."""

    @abstractmethod
    def create_issue(self, issue: Issue) -> int:
        """Create a new issue and return its number."""

    @abstractmethod
    def get_issue(self, number: int) -> Issue | None:
        """Return the issue with this number."""

    @abstractmethod
    def get_issues(self, opts: GetIssuesOptions) -> list[Issue]:
        """Return the issues that match opts."""


class FakeClient(Client):
    """An in-memory client for testing."""

    def __init__(self) -> None:
        self._next_id = 1
        self._issues: dict[int, Issue] = {}
        self._labels: defaultdict[str, list[int]] = defaultdict(list)

    def destination(self) -> str:
        return "in memory"

    def reference(self, number: int) -> str:
        return f"inMemory#{number}"

    def get_issue(self, number: int) -> Issue | None:
        return self._issues.get(number)

    def issue_exists(self, number: int) -> bool:
        return number in self._issues

    def create_issue(self, issue: Issue) -> int:
        """Store a copy of issue under the next number, which is also set on issue."""
        number = self._next_id
        self._next_id += 1
        issue.number = number
        self._issues[number] = dataclasses.replace(issue, labels=list(issue.labels))
        for label in issue.labels:
            self._labels[label].append(number)
        return number

    def get_issues(self, opts: GetIssuesOptions) -> list[Issue]:
        """Return the issues carrying any of opts.labels, in number order."""
        numbers = sorted({n for label in opts.labels for n in self._labels.get(label, ())})
        return [self._issues[n] for n in numbers]


def _parse_time(value: Any) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _convert(data: dict[str, Any]) -> Issue:
    labels = data.get("labels")
    return Issue(
        number=data.get("number") or 0,
        title=data.get("title") or "",
        body=data.get("body") or "",
        state=data.get("state") or "",
        labels=[(label or {}).get("name") or "" for label in labels] if labels else [],
        created_at=_parse_time(data.get("created_at")),
    )


def _next_page(resp: requests.Response) -> int:
    link = resp.links.get("next")
    if not link:
        return 0
    pages = parse_qs(urlparse(link.get("url", "")).query).get("page")
    if not pages:
        return 0
    try:
        return int(pages[0])
    except ValueError:
        return 0


class GitHubClient(Client):
    """A client that creates issues in a GitHub repository.

    An access token is needed to create issues.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        access_token: str,
        *,
        api_url: str = _API_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self._api_url = api_url.rstrip("/")
        self._session = session or requests.Session()
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github.v3+json",
        }

    @property
    def _issues_url(self) -> str:
        return f"{self._api_url}/repos/{self.owner}/{self.repo}/issues"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        resp = self._session.request(
            method, url, headers=self._headers, timeout=_TIMEOUT, **kwargs
        )
        resp.raise_for_status()
        return resp

    def destination(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"

    def reference(self, number: int) -> str:
        return f"{self.destination()}/issues/{number}"

    def issue_exists(self, number: int) -> bool:
        resp = self._request("GET", f"{self._issues_url}/{number}")
        return resp.json() is not None

    def get_issue(self, number: int) -> Issue:
        resp = self._request("GET", f"{self._issues_url}/{number}")
        return _convert(resp.json())

    def get_issues(self, opts: GetIssuesOptions) -> list[Issue]:
        """Return all matching issues, following the pages of the listing."""
        params: dict[str, Any] = {"per_page": _PER_PAGE, "page": 1}
        if opts.state:
            params["state"] = opts.state
        if opts.labels:
            params["labels"] = ",".join(opts.labels)
        issues: list[Issue] = []
        while True:
            resp = self._request("GET", self._issues_url, params=params)
            issues.extend(_convert(item) for item in resp.json())
            page = _next_page(resp)
            if not page:
                return issues
            params["page"] = page

    def create_issue(self, issue: Issue) -> int:
        payload: dict[str, Any] = {"title": issue.title, "body": issue.body}
        if issue.labels:
            payload["labels"] = list(issue.labels)
        resp = self._request("POST", self._issues_url, json=payload)
        return resp.json().get("number") or 0