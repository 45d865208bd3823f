from __future__ import annotations

import logging
from enum import Enum

from automation.issue_triage.config import TriageSettings
from automation.issue_triage.errors import GitHubAPIError
from automation.issue_triage.events import CommentEvent
from automation.issue_triage.triage import IssueTracker

logger = logging.getLogger("issue-triage")


class CommandOutcome(str, Enum):
    LOCKED = "locked"
    NOT_A_COMMAND = "not_a_command"
    DISABLED = "disabled"
    LOOKUP_FAILED = "lookup_failed"
    UNAUTHORIZED = "unauthorized"


def is_lock_command(comment_body: str, lock_command: str) -> bool:
    return bool(lock_command) and comment_body.startswith(lock_command)


def handle_comment(tracker: IssueTracker, event: CommentEvent, settings: TriageSettings) -> CommandOutcome:
    """Lock the issue when a triage team member posts the lock command.

    Team lookup failures fail closed: the issue is left unlocked and the run
    still succeeds.
    """
    if not is_lock_command(event.comment_body, settings.lock_command):
        return CommandOutcome.NOT_A_COMMAND

    if not settings.triage_team_slug:
        logger.info("lock command received but triage-team-slug is not configured")
        return CommandOutcome.DISABLED

    try:
        members = tracker.list_team_members(event.ref.owner, settings.triage_team_slug)
    except GitHubAPIError as exc:
        logger.info("Failed to fetch the triage team members: %s", exc)
        return CommandOutcome.LOOKUP_FAILED

    if event.actor not in members:
        logger.info("actor=%s is not in team %s; not locking %s", event.actor, settings.triage_team_slug, event.ref)
        return CommandOutcome.UNAUTHORIZED

    tracker.lock_issue(event.ref)
    return CommandOutcome.LOCKED
