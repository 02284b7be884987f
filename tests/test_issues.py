import json
from datetime import datetime, timezone

import pytest
import requests
import responses
from responses import matchers

from vulndb.issues import Client, FakeClient, GetIssuesOptions, GitHubClient, Issue

API = "https://api.example.com"
ISSUES_URL = f"{API}/repos/owner/repo/issues"


def _client():
    return GitHubClient("owner", "repo", "token", api_url=API)


def test_fake_client_create_and_get():
    c = FakeClient()
    first = Issue(title="one", labels=["bug"])
    second = Issue(title="two")
    n1 = c.create_issue(first)
    n2 = c.create_issue(second)
    assert (n1, n2) == (1, 2)
    assert first.number == n1
    assert c.get_issue(n2).title == "two"
    assert c.issue_exists(n1)
    assert not c.issue_exists(n2 + 1)
    assert c.get_issue(n2 + 1) is None


def test_fake_client_stores_a_copy():
    c = FakeClient()
    iss = Issue(title="orig", labels=["a"])
    n = c.create_issue(iss)
    iss.title = "changed"
    iss.labels.append("b")
    assert c.get_issue(n).title == "orig"
    assert c.get_issue(n).labels == ["a"]


def test_fake_client_get_issues_by_label():
    c = FakeClient()
    c.create_issue(Issue(title="a", labels=["x", "y"]))
    c.create_issue(Issue(title="b", labels=["z"]))
    c.create_issue(Issue(title="c", labels=["y"]))
    got = c.get_issues(GetIssuesOptions(labels=["y", "x"]))
    assert [i.title for i in got] == ["a", "c"]
    assert c.get_issues(GetIssuesOptions()) == []


def test_fake_client_names():
    c = FakeClient()
    assert isinstance(c, Client)
    assert c.destination() == "in memory"
    assert c.reference(5) == "inMemory#5"


def test_github_destination_and_reference():
    c = _client()
    assert c.destination() == "https://github.com/owner/repo"
    assert c.reference(7) == c.destination() + "/issues/7"


def test_github_get_issue():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            f"{ISSUES_URL}/3",
            json={
                "number": 3,
                "title": "t",
                "body": "b",
                "state": "open",
                "labels": [{"name": "l1"}, {"name": "l2"}],
                "created_at": "2022-01-01T01:01:00Z",
            },
        )
        got = _client().get_issue(3)
        sent = rsps.calls[0].request
    assert got == Issue(
        number=3,
        title="t",
        body="b",
        state="open",
        labels=["l1", "l2"],
        created_at=datetime(2022, 1, 1, 1, 1, tzinfo=timezone.utc),
    )
    assert sent.headers["Authorization"] == "Bearer token"


def test_github_issue_exists_and_errors():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, f"{ISSUES_URL}/1", json={"number": 1})
        rsps.add(responses.GET, f"{ISSUES_URL}/2", status=404, json={})
        c = _client()
        assert c.issue_exists(1)
        with pytest.raises(requests.HTTPError):
            c.issue_exists(2)


def test_github_get_issues_follows_pages():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            ISSUES_URL,
            json=[{"number": 1, "title": "a"}],
            headers={"Link": f'<{ISSUES_URL}?page=2>; rel="next"'},
            match=[
                matchers.query_param_matcher(
                    {"per_page": "100", "page": "1", "state": "all", "labels": "x,y"}
                )
            ],
        )
        rsps.add(
            responses.GET,
            ISSUES_URL,
            json=[{"number": 2, "title": "b"}],
            match=[
                matchers.query_param_matcher(
                    {"per_page": "100", "page": "2", "state": "all", "labels": "x,y"}
                )
            ],
        )
        got = _client().get_issues(GetIssuesOptions(state="all", labels=["x", "y"]))
    assert [(i.number, i.title) for i in got] == [(1, "a"), (2, "b")]


def test_github_create_issue():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, ISSUES_URL, json={"number": 42})
        rsps.add(responses.POST, ISSUES_URL, json={"number": 43})
        c = _client()
        n = c.create_issue(Issue(title="title", body="body", labels=["bug"]))
        c.create_issue(Issue(title="plain"))
        first = json.loads(rsps.calls[0].request.body)
        second = json.loads(rsps.calls[1].request.body)
    assert n == 42
    assert first == {"title": "title", "body": "body", "labels": ["bug"]}
    assert "labels" not in second
    assert second["title"] == "plain"