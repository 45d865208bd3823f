"""Typed views over the GitHub event payload.

The action only handles two event shapes: issue lifecycle events and newly
created issue comments. Everything else is ignored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from automation.issue_triage.errors import ConfigurationError, MissingSenderError

ISSUE_ACTIONS = frozenset({"opened", "edited", "reopened"})
COMMENT_ACTIONS = frozenset({"created"})


@dataclass(frozen=True)
class IssueRef:
    owner: str
    repo: str
    number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.full_name}#{self.number}"


@dataclass(frozen=True)
class IssueEvent:
    action: str
    ref: IssueRef
    title: str | None
    body: str | None
    author: str
    sender: str
    html_url: str = ""


@dataclass(frozen=True)
class CommentEvent:
    action: str
    ref: IssueRef
    comment_body: str
    actor: str


@dataclass(frozen=True)
class IssueSnapshot:
    """Current state of an issue as reported by the tracker."""

    ref: IssueRef
    title: str | None
    body: str | None
    state: str
    labels: frozenset[str] = field(default_factory=frozenset)
    closed_by: str | None = None
    author: str | None = None

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    @property
    def is_closed(self) -> bool:
        return self.state == "closed"

    def has_label(self, name: str) -> bool:
        return name in self.labels

    @classmethod
    def from_api(cls, ref: IssueRef, data: dict[str, Any]) -> IssueSnapshot:
        labels = frozenset(
            x.get("name", "") if isinstance(x, dict) else str(x)
            for x in data.get("labels", []) or []
        )
        closed_by = (data.get("closed_by") or {}).get("login")
        author = (data.get("user") or {}).get("login")
        return cls(
            ref=ref,
            title=data.get("title"),
            body=data.get("body"),
            state=data.get("state", "open"),
            labels=labels - {""},
            closed_by=closed_by,
            author=author,
        )


def split_repository(repository: str) -> tuple[str, str]:
    owner, sep, repo = repository.partition("/")
    if not sep or not owner or not repo:
        raise ConfigurationError(f"Invalid repository {repository!r}, expected owner/repo")
    return owner, repo


def load_event_payload(path: str | Path) -> dict[str, Any]:
    event_path = Path(path)
    if not event_path.exists():
        raise ConfigurationError(f"Event payload missing: {event_path}")
    try:
        payload = json.loads(event_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Event payload is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError("Event payload must be a JSON object")
    return payload


def parse_event(
    event_name: str,
    payload: dict[str, Any],
    repository: str,
    actor: str,
    allowed_actions: frozenset[str] = ISSUE_ACTIONS,
) -> IssueEvent | CommentEvent | None:
    """Return the typed event, or None when the action should ignore it."""
    action = payload.get("action", "")
    issue = payload.get("issue")
    if not isinstance(issue, dict) or issue.get("number") is None:
        return None

    owner, repo = split_repository(repository)
    ref = IssueRef(owner=owner, repo=repo, number=int(issue["number"]))

    if event_name == "issue_comment":
        if action not in COMMENT_ACTIONS:
            return None
        comment = payload.get("comment") or {}
        return CommentEvent(
            action=action,
            ref=ref,
            comment_body=comment.get("body") or "",
            actor=actor,
        )

    if event_name != "issues" or action not in allowed_actions:
        return None

    sender = payload.get("sender")
    if not isinstance(sender, dict) or not sender:
        raise MissingSenderError()

    return IssueEvent(
        action=action,
        ref=ref,
        title=issue.get("title"),
        body=issue.get("body"),
        author=(issue.get("user") or {}).get("login", ""),
        sender=sender.get("login", ""),
        html_url=issue.get("html_url", ""),
    )
