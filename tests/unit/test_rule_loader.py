"""Tests for loading and exporting rule files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from secscan.errors import InvalidRuleSource, RuleSourceNotFound
from secscan.rules.builtin import builtin_rules
from secscan.rules.loader import (
    dump_rules,
    load_rules,
    load_rules_from_string,
    recommendation_for,
    rules_to_dict,
    save_rules,
)
from secscan.rules.models import Severity


def test_load_json_rules(rules_json_path: Path):
    db = load_rules(rules_json_path)
    assert list(db) == ["SQL Injection", "Dynamic Query", "Debug Output"]
    assert db.source == str(rules_json_path)

    sql = db["SQL Injection"]
    assert sql.whitelist == (r"parameterized:\s*false positive",)
    assert sql.file_extensions == ("*.js", "*.py")
    assert len(sql.patterns) == 1
    pattern = sql.patterns[0]
    assert pattern.severity == Severity.HIGH
    assert pattern.cwe_id == "CWE-89"
    assert pattern.languages == frozenset({"javascript", "python"})
    assert pattern.description == "SQL Injection vulnerability pattern"
    assert pattern.recommendation == "Use parameterized queries and input validation"


def test_unknown_extensions_apply_to_all_languages(rules_json_path: Path):
    db = load_rules(rules_json_path)
    debug = db["Debug Output"].patterns[0]
    assert debug.languages == frozenset({"all"})
    assert debug.severity == Severity.LOW


def test_load_yaml_rules(rules_yaml_path: Path):
    db = load_rules(rules_yaml_path)
    ps = db["PowerShell Execution"].patterns[0]
    assert ps.pattern == r"\bInvoke-Expression\b"
    assert ps.severity == Severity.CRITICAL
    assert ps.languages == frozenset({"powershell"})
    assert ps.recommendation == "Validate input and use safe PowerShell practices"
    assert db.safe_patterns == ("nosec",)


def test_missing_extensions_and_whitelist_default(rules_yaml_path: Path):
    secret = load_rules(rules_yaml_path)["Hardcoded Secret"]
    assert secret.whitelist == ()
    assert secret.patterns[0].languages == frozenset({"all"})


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(RuleSourceNotFound, match="not found"):
        load_rules(tmp_path / "nope.json")


def test_missing_patterns_field_raises(fixtures_dir: Path):
    with pytest.raises(InvalidRuleSource, match="patterns"):
        load_rules(fixtures_dir / "missing_patterns.json")


def test_entry_without_patterns_raises():
    text = json.dumps({"patterns": [{"type": "XSS", "severity": "HIGH"}]})
    with pytest.raises(InvalidRuleSource, match="XSS"):
        load_rules_from_string(text)


def test_entry_without_type_raises():
    text = json.dumps({"patterns": [{"patterns": ["x"]}]})
    with pytest.raises(InvalidRuleSource, match="type"):
        load_rules_from_string(text)


def test_bad_severity_raises():
    text = json.dumps({"patterns": [{"type": "X", "patterns": ["x"], "severity": "URGENT"}]})
    with pytest.raises(InvalidRuleSource, match="URGENT"):
        load_rules_from_string(text)


@pytest.mark.parametrize("field", ["whitelist", "fileExtensions"])
def test_string_instead_of_list_raises(field: str):
    entry = {"type": "SQL Injection", "patterns": [r"eval\("], field: "nosec"}
    with pytest.raises(InvalidRuleSource, match=field):
        load_rules_from_string(json.dumps({"patterns": [entry]}))


def test_null_whitelist_is_empty():
    entry = {"type": "SQL Injection", "patterns": [r"eval\("], "whitelist": None}
    db = load_rules_from_string(json.dumps({"patterns": [entry]}))
    assert db["SQL Injection"].whitelist == ()


def test_non_utf8_file_raises(tmp_path: Path):
    target = tmp_path / "latin1.json"
    target.write_bytes(b'{"patterns": [{"type": "caf\xe9", "patterns": ["x"]}]}')
    with pytest.raises(InvalidRuleSource, match="Cannot read"):
        load_rules(target)


def test_malformed_json_raises():
    with pytest.raises(InvalidRuleSource):
        load_rules_from_string('{"patterns": [')


def test_non_mapping_document_raises():
    with pytest.raises(InvalidRuleSource):
        load_rules_from_string("- just\n- a list\n")


def test_default_severity_is_medium():
    db = load_rules_from_string(json.dumps({"patterns": [{"type": "X", "patterns": ["x"]}]}))
    assert db["X"].patterns[0].severity == Severity.MEDIUM


def test_duplicate_type_keeps_last_entry():
    text = json.dumps(
        {
            "patterns": [
                {"type": "X", "patterns": ["first"]},
                {"type": "X", "patterns": ["second"]},
            ]
        }
    )
    db = load_rules_from_string(text)
    assert len(db) == 1
    assert [p.pattern for p in db["X"].patterns] == ["second"]


@pytest.mark.parametrize(
    "category,expected",
    [
        ("SQL Injection", "Use parameterized queries and input validation"),
        ("Reflected XSS", "Encode output and validate input"),
        ("iOS Data Storage", "Follow iOS security best practices"),
        ("Something Else", "Review code for security vulnerabilities and follow secure coding practices"),
    ],
)
def test_recommendation_for(category: str, expected: str):
    assert recommendation_for(category) == expected


def test_export_uses_first_pattern_metadata():
    data = rules_to_dict(builtin_rules())
    ps = next(e for e in data["patterns"] if e["type"] == "PowerShell Execution")
    assert ps["severity"] == "HIGH"
    assert ps["cweId"] == "CWE-78"
    assert set(ps["fileExtensions"]) == {"*.ps1", "*.psm1", "*.psd1"}
    assert r"\bInvoke-Expression\b" in ps["patterns"]
    assert "safePatterns" in data


def test_export_keeps_declared_extensions(rules_json_path: Path):
    data = rules_to_dict(load_rules(rules_json_path))
    assert data["patterns"][0]["fileExtensions"] == ["*.js", "*.py"]
    assert "safePatterns" not in data


def test_save_and_reload_json(tmp_path: Path, rules_json_path: Path):
    target = tmp_path / "out.json"
    save_rules(load_rules(rules_json_path), target)
    reloaded = load_rules(target)
    assert list(reloaded) == ["SQL Injection", "Dynamic Query", "Debug Output"]
    assert reloaded["SQL Injection"].patterns[0].languages == frozenset({"javascript", "python"})


def test_save_yaml_by_suffix(tmp_path: Path, rules_json_path: Path):
    target = tmp_path / "out.yaml"
    save_rules(load_rules(rules_json_path), target)
    data = yaml.safe_load(target.read_text(encoding="utf-8"))
    assert data["patterns"][1]["type"] == "Dynamic Query"


def test_dump_rules_json_is_valid():
    data = json.loads(dump_rules(builtin_rules(), "json"))
    assert len(data["patterns"]) == len(builtin_rules())
