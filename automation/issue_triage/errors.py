"""Error taxonomy for the issue triage action.

Everything here derives from TriageError so the entry point can report any
of them through the single failure channel.
"""

from __future__ import annotations


class TriageError(Exception):
    """Base class for errors that abort a triage run."""


class ConfigurationError(TriageError):
    """Missing input, malformed rules payload or bad template."""


class PatternError(ConfigurationError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid rule pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class MissingSenderError(TriageError):
    def __init__(self) -> None:
        super().__init__("Internal error, no sender provided by GitHub")


class GitHubAPIError(TriageError):
    def __init__(self, method: str, path: str, status: int | None, detail: str = "") -> None:
        status_text = str(status) if status is not None else "network error"
        message = f"GitHub API {method} {path} failed ({status_text})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.method = method
        self.path = path
        self.status = status
