"""Action inputs and runner environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from automation.issue_triage.errors import ConfigurationError

GH_API = os.getenv("GITHUB_API_URL", "https://api.github.com")
GH_API_TIMEOUT_SEC = int(os.getenv("GITHUB_API_TIMEOUT_SEC", "15"))

# Login GitHub records as the closer when the workflow token closes an issue.
BOT_LOGIN = os.getenv("TRIAGE_BOT_LOGIN", "github-actions[bot]")
LOG_FILE = os.getenv("TRIAGE_LOG_FILE", "")


def get_input(name: str, required: bool = False) -> str:
    """Read an action input the way the runner exposes it (INPUT_<NAME>)."""
    value = os.getenv(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


@dataclass(frozen=True)
class TriageSettings:
    repo_token: str
    rules_raw: str = ""
    ignore_label: str = ""
    lock_command: str = ""
    triage_team_slug: str = ""
    bot_login: str = BOT_LOGIN

    @classmethod
    def from_env(cls) -> TriageSettings:
        return cls(
            repo_token=get_input("repo-token"),
            rules_raw=get_input("rules"),
            ignore_label=get_input("ignoreLabel"),
            lock_command=get_input("lock-command"),
            triage_team_slug=get_input("triage-team-slug"),
            bot_login=BOT_LOGIN,
        )


@dataclass(frozen=True)
class RunnerContext:
    event_name: str
    event_path: str
    repository: str
    actor: str

    @classmethod
    def from_env(cls) -> RunnerContext:
        event_path = os.getenv("GITHUB_EVENT_PATH", "")
        repository = os.getenv("GITHUB_REPOSITORY", "")
        if not event_path:
            raise ConfigurationError("GITHUB_EVENT_PATH is not set")
        if not repository:
            raise ConfigurationError("GITHUB_REPOSITORY is not set")
        return cls(
            event_name=os.getenv("GITHUB_EVENT_NAME", ""),
            event_path=event_path,
            repository=repository,
            actor=os.getenv("GITHUB_ACTOR", ""),
        )
