#!/usr/bin/env python3
"""Validate an issue triage rules payload against schema + pattern checks.

Optionally runs the rules against a sample title/body so maintainers can see
which messages an issue would receive before deploying the workflow.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from automation.issue_triage.errors import ConfigurationError
from automation.issue_triage.rules import Rule, compile_rules, evaluate_rules, failure_messages, load_rules


def validate_content(content: str) -> tuple[bool, str, list[Rule]]:
    try:
        rules = load_rules(content)
        compile_rules(rules)
    except ConfigurationError as exc:
        return False, str(exc), []
    return True, "ok", rules


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate issue triage rules")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="Path to a JSON or YAML rules file")
    source.add_argument("--rules", help="Rules payload as passed to the action input")
    parser.add_argument("--title", help="Sample issue title to evaluate")
    parser.add_argument("--body", help="Sample issue body to evaluate")
    args = parser.parse_args(argv)

    content = Path(args.file).read_text(encoding="utf-8") if args.file else args.rules
    ok, msg, rules = validate_content(content)
    if not ok:
        print(f"❌ rules validation failed: {msg}")
        return 1

    print("✅ rules passed schema + pattern validation")
    print(f"   rules: {len(rules)}")

    if args.title is None and args.body is None:
        return 0

    messages = failure_messages(evaluate_rules(rules, args.title, args.body))
    if not messages:
        print("   sample issue passes all rules")
        return 0
    print(f"   sample issue fails {len(messages)} rule(s):")
    for message in messages:
        print(f"   - {message}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
