"""Issue state transitions driven by rule outcomes.

decide() is pure: it maps (failure messages, action, current issue) to a
TriageDecision. apply_decision() performs the decision against the tracker,
comment first, so a failed comment leaves the issue untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Sequence

from automation.issue_triage.config import TriageSettings
from automation.issue_triage.events import IssueEvent, IssueRef, IssueSnapshot
from automation.issue_triage.rules import Rule, evaluate_rules, failure_messages
from automation.issue_triage.templating import event_fields

logger = logging.getLogger("issue-triage")


class IssueTracker(Protocol):
    def get_issue(self, ref: IssueRef) -> IssueSnapshot:
        ...

    def create_comment(self, ref: IssueRef, body: str) -> None:
        ...

    def set_issue_state(self, ref: IssueRef, state: str) -> None:
        ...

    def lock_issue(self, ref: IssueRef, reason: str | None = None) -> None:
        ...

    def list_team_members(self, org: str, team_slug: str) -> list[str]:
        ...


class DecisionKind(str, Enum):
    CLOSE_WITH_COMMENT = "close_with_comment"
    CLOSE_SILENTLY = "close_silently"
    REOPEN = "reopen"
    NO_OP = "no_op"


@dataclass(frozen=True)
class TriageDecision:
    kind: DecisionKind
    reason: str
    messages: tuple[str, ...] = field(default_factory=tuple)
    comment: str = ""


def build_comment(author: str, phrase: str, messages: Sequence[str]) -> str:
    return "\n- ".join([f"@{author} this issue was {phrase} because:\n", *messages])


def decide(
    messages: Sequence[str],
    action: str,
    snapshot: IssueSnapshot,
    bot_login: str,
    author: str = "",
    ignore_label: str = "",
) -> TriageDecision:
    if ignore_label and snapshot.has_label(ignore_label):
        return TriageDecision(DecisionKind.NO_OP, f"ignored via label {ignore_label}")

    if messages:
        phrase = "automatically closed" if action == "opened" else "not reopened"
        should_comment = (action == "opened" and snapshot.is_open) or (
            action == "edited" and snapshot.is_closed
        )
        if should_comment:
            return TriageDecision(
                DecisionKind.CLOSE_WITH_COMMENT,
                f"{len(messages)} rule(s) failed",
                messages=tuple(messages),
                comment=build_comment(author or snapshot.author or "", phrase, messages),
            )
        # Closing an already-closed issue is a safe no-op on GitHub's side.
        return TriageDecision(
            DecisionKind.CLOSE_SILENTLY,
            f"{len(messages)} rule(s) failed, comment suppressed",
            messages=tuple(messages),
        )

    if action == "edited" and snapshot.is_closed and snapshot.closed_by == bot_login:
        return TriageDecision(DecisionKind.REOPEN, f"rules pass and issue was closed by {bot_login}")

    if action == "edited" and snapshot.is_closed:
        return TriageDecision(DecisionKind.NO_OP, f"rules pass but issue was closed by {snapshot.closed_by}")
    return TriageDecision(DecisionKind.NO_OP, "all rules passed")


def apply_decision(tracker: IssueTracker, ref: IssueRef, decision: TriageDecision) -> None:
    if decision.kind is DecisionKind.CLOSE_WITH_COMMENT:
        tracker.create_comment(ref, decision.comment)
        tracker.set_issue_state(ref, "closed")
    elif decision.kind is DecisionKind.CLOSE_SILENTLY:
        tracker.set_issue_state(ref, "closed")
    elif decision.kind is DecisionKind.REOPEN:
        tracker.set_issue_state(ref, "open")


def triage_issue(
    tracker: IssueTracker,
    event: IssueEvent,
    rules: Sequence[Rule],
    settings: TriageSettings,
) -> TriageDecision:
    snapshot = tracker.get_issue(event.ref)

    if settings.ignore_label and snapshot.has_label(settings.ignore_label):
        logger.info("Ignoring issue with label %s", settings.ignore_label)
        return decide([], event.action, snapshot, settings.bot_login, ignore_label=settings.ignore_label)

    results = evaluate_rules(rules, event.title, event.body, event_fields(event))
    decision = decide(
        failure_messages(results),
        event.action,
        snapshot,
        settings.bot_login,
        author=event.author,
    )
    logger.info("issue=%s action=%s decision=%s reason=%s", event.ref, event.action, decision.kind.value, decision.reason)
    apply_decision(tracker, event.ref, decision)
    return decision
