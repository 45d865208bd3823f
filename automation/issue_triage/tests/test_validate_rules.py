from automation.issue_triage.validate_rules import main, validate_content

RULES = '[{"type": "title", "regex": "^\\\\[WIP\\\\]", "message": "No WIP issues: {match}"}]'


def test_validate_content_accepts_valid_rules() -> None:
    ok, msg, rules = validate_content(RULES)
    assert ok, msg
    assert len(rules) == 1


def test_validate_content_compiles_patterns_eagerly() -> None:
    ok, msg, rules = validate_content('[{"type": "body", "regex": "(", "message": "m"}]')
    assert not ok
    assert "Invalid rule pattern" in msg
    assert rules == []


def test_main_reads_rules_file(tmp_path, capsys) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("- type: both\n  regex: crash\n  message: 'no {match}'\n", encoding="utf-8")
    assert main(["--file", str(path)]) == 0
    assert "rules: 1" in capsys.readouterr().out


def test_main_evaluates_sample_issue(capsys) -> None:
    assert main(["--rules", RULES, "--title", "[WIP] fix bug"]) == 0
    out = capsys.readouterr().out
    assert "fails 1 rule(s)" in out
    assert "- No WIP issues: [WIP]" in out


def test_main_rejects_invalid_rules(capsys) -> None:
    assert main(["--rules", '[{"type": "title"}]']) == 1
    assert "rules validation failed" in capsys.readouterr().out
