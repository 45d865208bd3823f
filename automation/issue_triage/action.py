#!/usr/bin/env python3
"""GitHub Action entry point for issue triage.

Supported flows:
- issues (opened/edited/reopened): evaluate rules, then close, reopen or leave the issue
- issue_comment (created): lock the issue when a triage team member posts the lock command
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from automation.issue_triage.commands import handle_comment
from automation.issue_triage.config import LOG_FILE, RunnerContext, TriageSettings
from automation.issue_triage.errors import ConfigurationError, TriageError
from automation.issue_triage.events import (
    ISSUE_ACTIONS,
    CommentEvent,
    IssueEvent,
    load_event_payload,
    parse_event,
)
from automation.issue_triage.github_client import GitHubClient
from automation.issue_triage.rules import load_rules
from automation.issue_triage.triage import IssueTracker, triage_issue

logger = logging.getLogger("issue-triage")


def _setup_logging() -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE:
        Path(LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(LOG_FILE, encoding="utf-8"))
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )


def report_failure(message: str) -> None:
    logger.error("triage run failed: %s", message)
    # Workflow command picked up by the runner as the step's failure annotation.
    print(f"::error::{message}", flush=True)


def _build_client(settings: TriageSettings) -> GitHubClient:
    if not settings.repo_token:
        raise ConfigurationError("Input required and not supplied: repo-token")
    return GitHubClient(settings.repo_token)


def run(
    runner: RunnerContext,
    settings: TriageSettings,
    tracker: IssueTracker | None = None,
) -> str:
    """Dispatch a single event and return a short outcome label."""
    payload = load_event_payload(runner.event_path)
    event = parse_event(runner.event_name, payload, runner.repository, runner.actor, ISSUE_ACTIONS)

    if event is None:
        logger.info("ignoring event=%s action=%s", runner.event_name, payload.get("action"))
        return "ignored"

    if isinstance(event, CommentEvent):
        outcome = handle_comment(tracker or _build_client(settings), event, settings)
        return outcome.value

    if isinstance(event, IssueEvent):
        rules = load_rules(settings.rules_raw)
        decision = triage_issue(tracker or _build_client(settings), event, rules, settings)
        return decision.kind.value

    raise TypeError(f"unhandled event type {type(event).__name__}")


def main() -> int:
    _setup_logging()
    try:
        runner = RunnerContext.from_env()
        settings = TriageSettings.from_env()
        outcome = run(runner, settings)
    except TriageError as exc:
        report_failure(str(exc))
        return 1
    except Exception as exc:
        logger.exception("unexpected error during triage run")
        report_failure(str(exc) or type(exc).__name__)
        return 1
    logger.info("triage finished outcome=%s", outcome)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
