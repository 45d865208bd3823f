"""Rule loading and evaluation.

A rule tests the issue title, body, or both against a regular expression.
A match means the issue *fails* the rule and the rule's message explains why.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

import yaml
from jsonschema import Draft202012Validator

from automation.issue_triage.errors import ConfigurationError, PatternError
from automation.issue_triage.normalize import normalize_text
from automation.issue_triage.templating import check_template, render_rule_message

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "schemas" / "triage-rules.schema.json"

logger = logging.getLogger("issue-triage")


class RuleKind(str, Enum):
    TITLE = "title"
    BODY = "body"
    BOTH = "both"


@dataclass(frozen=True)
class Rule:
    kind: RuleKind
    pattern: str
    message: str
    ignore_case: bool = False


@dataclass(frozen=True)
class MatchResult:
    matched: bool
    captured: str | None = None
    source: str | None = None


NO_MATCH = MatchResult(matched=False)


@dataclass(frozen=True)
class RuleResult:
    rule: Rule
    index: int
    match: MatchResult
    message: str

    @property
    def failed(self) -> bool:
        return self.match.matched


@lru_cache(maxsize=256)
def compile_pattern(pattern: str, ignore_case: bool = False) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    except re.error as exc:
        raise PatternError(pattern, str(exc)) from exc


def candidate_texts(rule: Rule, title: str | None, body: str | None) -> list[tuple[str, str]]:
    """Return (source, normalized text) pairs in evaluation order."""
    if rule.kind is RuleKind.TITLE:
        texts = [("title", title)]
    elif rule.kind is RuleKind.BODY:
        texts = [("body", body)]
    else:
        texts = [("title", title), ("body", body)]

    candidates: list[tuple[str, str]] = []
    for source, text in texts:
        normalized = normalize_text(text)
        if normalized is not None:
            candidates.append((source, normalized))
    return candidates


def evaluate_rule(rule: Rule, title: str | None, body: str | None) -> MatchResult:
    pattern = compile_pattern(rule.pattern, rule.ignore_case)
    for source, text in candidate_texts(rule, title, body):
        match = pattern.search(text)
        if match is None:
            continue
        captured = match.group(1) if pattern.groups else match.group(0)
        return MatchResult(matched=True, captured=captured, source=source)
    return NO_MATCH


def evaluate_rules(
    rules: Iterable[Rule],
    title: str | None,
    body: str | None,
    fields: dict[str, str] | None = None,
) -> list[RuleResult]:
    results: list[RuleResult] = []
    for index, rule in enumerate(rules):
        try:
            match = evaluate_rule(rule, title, body)
        except PatternError:
            logger.error("rule %s could not be evaluated pattern=%r", index, rule.pattern)
            raise

        message = render_rule_message(rule.message, match.captured, fields or {})
        if match.matched:
            logger.info("Failed: %s", message)
        else:
            logger.info("Passed: %s", message)
        results.append(RuleResult(rule=rule, index=index, match=match, message=message))
    return results


def failure_messages(results: Iterable[RuleResult]) -> list[str]:
    return [r.message for r in results if r.failed]


def _load_schema() -> dict[str, Any]:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def parse_rules(data: Any) -> list[Rule]:
    validator = Draft202012Validator(_load_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        first = errors[0]
        path = "/".join(str(p) for p in first.absolute_path) or "<root>"
        raise ConfigurationError(f"Invalid rules at {path}: {first.message}")

    rules: list[Rule] = []
    for item in data:
        check_template(item["message"])
        rules.append(
            Rule(
                kind=RuleKind(item["type"]),
                pattern=item["regex"],
                message=item["message"],
                ignore_case=bool(item.get("ignoreCase", False)),
            )
        )
    return rules


def load_rules(raw: str) -> list[Rule]:
    """Parse the ``rules`` input, falling back to YAML when it is not JSON."""
    if not raw or not raw.strip():
        raise ConfigurationError("Input required and not supplied: rules")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Rules payload could not be parsed: {exc}") from exc
    return parse_rules(data)


def compile_rules(rules: Iterable[Rule]) -> None:
    for rule in rules:
        compile_pattern(rule.pattern, rule.ignore_case)
