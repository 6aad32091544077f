"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from secscan.rules.models import RuleDatabase, RuleDatabaseBuilder, Severity

SQL_CONCAT = r"""["'](?:SELECT|INSERT|UPDATE|DELETE)\b[^"'\n]*["']\s*\+\s*\w+"""


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def rules_json_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "rules.json"


@pytest.fixture
def rules_yaml_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "rules.yaml"


@pytest.fixture
def sql_database() -> RuleDatabase:
    """Two rules that both match SQL concatenation; only one whitelists it."""
    return (
        RuleDatabaseBuilder(source="test")
        .add_rule(
            "SQL Injection",
            severity=Severity.MEDIUM,
            cwe_id="CWE-89",
            whitelist=[r"parameterized:\s*false positive"],
        )
        .add_pattern("SQL Injection", SQL_CONCAT, severity=Severity.HIGH)
        .add_rule("Dynamic Query", severity=Severity.LOW, cwe_id="CWE-20")
        .add_pattern("Dynamic Query", r"SELECT \* FROM \w+")
        .build()
    )


@pytest.fixture
def write_tree(tmp_path: Path):
    """Create files under tmp_path from a {relative_path: content} mapping."""

    def _write(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write
