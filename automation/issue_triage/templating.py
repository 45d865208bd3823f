"""Failure message and comment rendering.

Rule messages may contain two kinds of placeholders:

- ``{match}``: the text captured by the rule's pattern.
- ``${field}``: a value from the triggering event. Only the fields listed in
  SUPPORTED_EVENT_FIELDS are accepted; templates are never evaluated as code.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from automation.issue_triage.errors import ConfigurationError

if TYPE_CHECKING:
    from automation.issue_triage.events import IssueEvent

MATCH_TOKEN = "{match}"
NO_MATCH_TEXT = "<No match>"

EVENT_FIELD_RE = re.compile(r"\$\{\s*([^}]*?)\s*\}")
SUPPORTED_EVENT_FIELDS = {
    "issue.user.login",
    "issue.title",
    "issue.number",
    "issue.html_url",
    "sender.login",
    "repository.full_name",
    "action",
}


def render_message(template: str, captured: str | None) -> str:
    return template.replace(MATCH_TOKEN, NO_MATCH_TEXT if captured is None else captured)


def template_fields(template: str) -> set[str]:
    return {m.group(1) for m in EVENT_FIELD_RE.finditer(template)}


def check_template(template: str) -> None:
    unknown = sorted(template_fields(template).difference(SUPPORTED_EVENT_FIELDS))
    if unknown:
        raise ConfigurationError(f"Template has unsupported placeholders: {', '.join(unknown)}")


def event_fields(event: IssueEvent) -> dict[str, str]:
    return {
        "issue.user.login": event.author,
        "issue.title": event.title or "",
        "issue.number": str(event.ref.number),
        "issue.html_url": event.html_url,
        "sender.login": event.sender,
        "repository.full_name": event.ref.full_name,
        "action": event.action,
    }


def render_event_template(template: str, fields: dict[str, str]) -> str:
    """Substitute ``${field}`` tokens in a single pass.

    Substituted values are not rescanned, so an issue title that contains
    ``${...}`` text is emitted literally.
    """
    check_template(template)
    return EVENT_FIELD_RE.sub(lambda m: fields.get(m.group(1), ""), template)


RULE_TOKEN_RE = re.compile(r"\$\{\s*([^}]*?)\s*\}|\{match\}")


def render_rule_message(template: str, captured: str | None, fields: dict[str, str]) -> str:
    """Fill ``{match}`` and ``${field}`` tokens in one pass.

    Neither the capture nor event values are rescanned, so issue text that
    contains ``{match}`` or ``${...}`` comes out literally.
    """
    check_template(template)

    def _replace(m: re.Match[str]) -> str:
        if m.group(1) is None:
            return NO_MATCH_TEXT if captured is None else captured
        return fields.get(m.group(1), "")

    return RULE_TOKEN_RE.sub(_replace, template)
