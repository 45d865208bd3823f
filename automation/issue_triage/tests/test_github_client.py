from __future__ import annotations

import io
import json
from email.message import Message
from typing import Any
from urllib import error

import pytest

from automation.issue_triage import github_client
from automation.issue_triage.errors import GitHubAPIError
from automation.issue_triage.events import IssueRef

REF = IssueRef(owner="fourmajor", repo="hoopsmania", number=74)


class _Response:
    def __init__(self, payload: Any, headers: dict[str, str] | None = None) -> None:
        self._raw = b"" if payload is None else json.dumps(payload).encode("utf-8")
        self.headers = Message()
        for key, value in (headers or {}).items():
            self.headers[key] = value

    def read(self) -> bytes:
        return self._raw

    def __enter__(self) -> _Response:
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


class _TimingOutResponse(_Response):
    def __init__(self) -> None:
        super().__init__(None)

    def read(self) -> bytes:
        raise TimeoutError("The read operation timed out")


class _HtmlResponse(_Response):
    def __init__(self) -> None:
        super().__init__(None)
        self._raw = b"<html>502 Bad Gateway</html>"


class _FakeUrlopen:
    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.requests: list[Any] = []

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _install(monkeypatch, responses: list[Any]) -> _FakeUrlopen:
    fake = _FakeUrlopen(responses)
    monkeypatch.setattr(github_client.request, "urlopen", fake)
    return fake


def test_get_issue_builds_snapshot(monkeypatch) -> None:
    fake = _install(
        monkeypatch,
        [_Response({"title": "t", "body": "b", "state": "closed", "labels": [{"name": "bug"}], "closed_by": {"login": "github-actions[bot]"}})],
    )
    client = github_client.GitHubClient("secret", api_url="https://api.example.test/")
    snap = client.get_issue(REF)

    assert snap.state == "closed"
    assert snap.closed_by == "github-actions[bot]"
    req = fake.requests[0]
    assert req.full_url == "https://api.example.test/repos/fourmajor/hoopsmania/issues/74"
    assert req.get_method() == "GET"
    assert req.get_header("Authorization") == "Bearer secret"
    assert req.get_header("Accept") == "application/vnd.github+json"


def test_comment_state_and_lock_requests(monkeypatch) -> None:
    fake = _install(monkeypatch, [_Response({"id": 1}), _Response({"state": "closed"}), _Response(None)])
    client = github_client.GitHubClient("secret", api_url="https://api.example.test")

    client.create_comment(REF, "hello")
    client.set_issue_state(REF, "closed")
    client.lock_issue(REF)

    comment, update, lock = fake.requests
    assert comment.get_method() == "POST"
    assert comment.full_url.endswith("/issues/74/comments")
    assert json.loads(comment.data) == {"body": "hello"}
    assert update.get_method() == "PATCH"
    assert json.loads(update.data) == {"state": "closed"}
    assert lock.get_method() == "PUT"
    assert lock.full_url.endswith("/issues/74/lock")
    assert lock.data is None


def test_list_team_members_follows_pagination(monkeypatch) -> None:
    next_url = "https://api.example.test/organizations/1/team/2/members?per_page=100&page=2"
    fake = _install(
        monkeypatch,
        [
            _Response([{"login": "fourmajor"}], {"Link": f'<{next_url}>; rel="next", <{next_url}>; rel="last"'}),
            _Response([{"login": "locktrace"}]),
        ],
    )
    client = github_client.GitHubClient("secret", api_url="https://api.example.test")

    assert client.list_team_members("fourmajor", "maintainers") == ["fourmajor", "locktrace"]
    assert fake.requests[0].full_url == "https://api.example.test/orgs/fourmajor/teams/maintainers/members?per_page=100"
    assert fake.requests[1].full_url == next_url


def test_http_errors_raise_github_api_error(monkeypatch) -> None:
    not_found = error.HTTPError(
        "https://api.example.test/orgs/fourmajor/teams/nope/members",
        404,
        "Not Found",
        Message(),
        io.BytesIO(b'{"message": "Not Found"}'),
    )
    _install(monkeypatch, [not_found])
    client = github_client.GitHubClient("secret", api_url="https://api.example.test")

    with pytest.raises(GitHubAPIError) as excinfo:
        client.list_team_members("fourmajor", "nope")
    assert excinfo.value.status == 404
    assert "Not Found" in str(excinfo.value)


def test_network_errors_raise_github_api_error(monkeypatch) -> None:
    _install(monkeypatch, [error.URLError("connection refused")])
    client = github_client.GitHubClient("secret", api_url="https://api.example.test")

    with pytest.raises(GitHubAPIError) as excinfo:
        client.set_issue_state(REF, "open")
    assert excinfo.value.status is None
    assert "network error" in str(excinfo.value)


def test_read_timeout_raises_github_api_error(monkeypatch) -> None:
    _install(monkeypatch, [_TimingOutResponse()])
    client = github_client.GitHubClient("secret", api_url="https://api.example.test")

    with pytest.raises(GitHubAPIError) as excinfo:
        client.list_team_members("fourmajor", "maintainers")
    assert excinfo.value.status is None
    assert "timed out" in str(excinfo.value)


def test_non_json_body_raises_github_api_error(monkeypatch) -> None:
    _install(monkeypatch, [_HtmlResponse()])
    client = github_client.GitHubClient("secret", api_url="https://api.example.test")

    with pytest.raises(GitHubAPIError, match="not JSON"):
        client.get_issue(REF)
