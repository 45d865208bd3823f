"""Minimal GitHub REST client for the triage action."""

from __future__ import annotations

import json
import logging
import re
from typing import Any
from urllib import error, parse, request

from automation.issue_triage.config import GH_API, GH_API_TIMEOUT_SEC
from automation.issue_triage.errors import GitHubAPIError
from automation.issue_triage.events import IssueRef, IssueSnapshot

NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')

logger = logging.getLogger("issue-triage")


class GitHubClient:
    def __init__(self, token: str, api_url: str = GH_API, timeout: int = GH_API_TIMEOUT_SEC) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _request(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> tuple[Any, dict[str, str]]:
        url = path if path.startswith("http") else f"{self.api_url}{path}"
        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
        req = request.Request(url, data=data, method=method)
        req.add_header("Accept", "application/vnd.github+json")
        req.add_header("Authorization", f"Bearer {self.token}")
        req.add_header("X-GitHub-Api-Version", "2022-11-28")
        if data is not None:
            req.add_header("Content-Type", "application/json")
        try:
            with request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8")
                headers = {k.lower(): v for k, v in resp.headers.items()}
        except error.HTTPError as exc:
            body = exc.read().decode("utf-8", errors="ignore")
            raise GitHubAPIError(method, path, exc.code, body[:300]) from exc
        except error.URLError as exc:
            raise GitHubAPIError(method, path, None, str(exc.reason)) from exc
        except (OSError, UnicodeDecodeError) as exc:
            # Read timeouts and dropped connections surface here, after urlopen returned.
            raise GitHubAPIError(method, path, None, str(exc) or type(exc).__name__) from exc

        if not raw.strip():
            return None, headers
        try:
            return json.loads(raw), headers
        except json.JSONDecodeError as exc:
            raise GitHubAPIError(method, path, None, f"response is not JSON: {raw[:120]!r}") from exc

    def _issue_path(self, ref: IssueRef) -> str:
        owner = parse.quote(ref.owner, safe="")
        repo = parse.quote(ref.repo, safe="")
        return f"/repos/{owner}/{repo}/issues/{ref.number}"

    def get_issue(self, ref: IssueRef) -> IssueSnapshot:
        data, _ = self._request("GET", self._issue_path(ref))
        if not isinstance(data, dict):
            raise GitHubAPIError("GET", self._issue_path(ref), None, "unexpected API response")
        return IssueSnapshot.from_api(ref, data)

    def create_comment(self, ref: IssueRef, body: str) -> None:
        self._request("POST", f"{self._issue_path(ref)}/comments", {"body": body})
        logger.info("commented on %s", ref)

    def set_issue_state(self, ref: IssueRef, state: str) -> None:
        self._request("PATCH", self._issue_path(ref), {"state": state})
        logger.info("set %s state=%s", ref, state)

    def lock_issue(self, ref: IssueRef, reason: str | None = None) -> None:
        payload = {"lock_reason": reason} if reason else None
        self._request("PUT", f"{self._issue_path(ref)}/lock", payload)
        logger.info("locked %s", ref)

    def list_team_members(self, org: str, team_slug: str) -> list[str]:
        org_q = parse.quote(org, safe="")
        slug_q = parse.quote(team_slug, safe="")
        path: str | None = f"/orgs/{org_q}/teams/{slug_q}/members?per_page=100"
        members: list[str] = []
        while path:
            data, headers = self._request("GET", path)
            if not isinstance(data, list):
                raise GitHubAPIError("GET", path, None, "unexpected API response")
            members.extend(m.get("login", "") for m in data if isinstance(m, dict))
            link = NEXT_LINK_RE.search(headers.get("link", ""))
            path = link.group(1) if link else None
        return [m for m in members if m]
