"""Tests for the scan engine: selection, filtering, aggregation."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from secscan.errors import DirectoryNotFound
from secscan.rules.models import RuleDatabase, RuleDatabaseBuilder, Severity
from secscan.scanner.engine import ScanEngine
from secscan.scanner.selector import select_files

SQL_LINE = 'query = "SELECT * FROM users WHERE id=" + userId\n'


def _assert_consistent(result) -> None:
    assert sum(result.vulnerabilities_by_severity.values()) == result.total_vulnerabilities
    assert result.total_vulnerabilities == len(result.findings)
    assert sum(result.vulnerabilities_by_category.values()) == len(result.findings)
    assert sum(result.vulnerabilities_by_language.values()) == len(result.findings)


class TestSelector:
    def test_selects_supported_files_only(self, write_tree):
        root = write_tree(
            {
                "app.py": "",
                "web/index.js": "",
                "README.md": "",
                "logo.png": "",
                "deep/er/Thing.CS": "",
            }
        )
        rel = [p.relative_to(root).as_posix() for p in select_files(root)]
        assert rel == ["app.py", "deep/er/Thing.CS", "web/index.js"]

    def test_skips_vcs_metadata(self, write_tree):
        root = write_tree({".git/hooks/x.py": "", "src/a.py": ""})
        assert [p.name for p in select_files(root)] == ["a.py"]

    def test_exclude_names(self, write_tree):
        root = write_tree({"vendor/lib.js": "", "keep.js": "", "skip.js": ""})
        names = [p.name for p in select_files(root, exclude=["vendor", "skip.js"])]
        assert names == ["keep.js"]

    def test_missing_root_raises(self, tmp_path: Path):
        with pytest.raises(DirectoryNotFound, match="not found"):
            select_files(tmp_path / "missing")

    def test_file_root_raises(self, tmp_path: Path):
        target = tmp_path / "a.py"
        target.write_text("")
        with pytest.raises(DirectoryNotFound):
            select_files(target)


class TestScanEngine:
    def test_scan_directory(self, write_tree, sql_database: RuleDatabase):
        root = write_tree({"app.py": SQL_LINE, "web/app.js": SQL_LINE, "notes.txt": SQL_LINE})
        result = ScanEngine(database=sql_database, workers=2).scan(root)

        assert result.total_files_scanned == 2
        assert result.project_path == str(root)
        assert result.vulnerabilities_by_category == {"SQL Injection": 2, "Dynamic Query": 2}
        assert result.vulnerabilities_by_severity == {
            "CRITICAL": 0,
            "HIGH": 2,
            "MEDIUM": 0,
            "LOW": 2,
        }
        assert result.vulnerabilities_by_language == {"python": 2, "javascript": 2}
        assert {f.file_path for f in result.findings} == {"app.py", "web/app.js"}
        assert result.duration >= 0
        _assert_consistent(result)

    def test_zero_findings(self, write_tree, sql_database: RuleDatabase):
        root = write_tree({"clean.py": "print('hello')\n"})
        result = ScanEngine(database=sql_database).scan(root)
        assert result.total_files_scanned == 1
        assert result.findings == []
        assert result.vulnerabilities_by_severity == {
            "CRITICAL": 0,
            "HIGH": 0,
            "MEDIUM": 0,
            "LOW": 0,
        }
        assert result.vulnerabilities_by_category == {}
        _assert_consistent(result)

    def test_empty_directory(self, tmp_path: Path):
        result = ScanEngine().scan(tmp_path)
        assert result.total_files_scanned == 0
        assert result.total_vulnerabilities == 0

    def test_missing_directory_raises(self, tmp_path: Path):
        with pytest.raises(DirectoryNotFound):
            ScanEngine().scan(tmp_path / "missing")

    def test_language_filter(self, write_tree, sql_database: RuleDatabase):
        root = write_tree({"app.py": SQL_LINE, "app.js": SQL_LINE})
        result = ScanEngine(database=sql_database, languages=["javascript"]).scan(root)
        assert {f.language for f in result.findings} == {"javascript"}
        assert result.files_skipped == 1
        assert result.total_files_scanned == 2
        _assert_consistent(result)

    @pytest.mark.parametrize("languages", [None, [], ["all"], ["python", "all"]])
    def test_language_filter_all(self, write_tree, sql_database, languages):
        root = write_tree({"app.py": SQL_LINE, "app.js": SQL_LINE})
        result = ScanEngine(database=sql_database, languages=languages).scan(root)
        assert result.files_skipped == 0
        assert {f.language for f in result.findings} == {"python", "javascript"}

    def test_python_rule_never_reports_go(self, write_tree):
        db = (
            RuleDatabaseBuilder()
            .add_rule("Eval", languages=["python"])
            .add_pattern("Eval", r"eval\(")
            .build()
        )
        root = write_tree({"a.py": "eval(x)\n", "b.go": "eval(x)\n"})
        result = ScanEngine(database=db, safe_patterns=()).scan(root)
        assert [f.file_path for f in result.findings] == ["a.py"]

    def test_idempotent(self, write_tree, sql_database: RuleDatabase):
        root = write_tree(
            {f"pkg{i}/mod{j}.py": SQL_LINE * (i + j + 1) for i in range(3) for j in range(4)}
        )
        engine = ScanEngine(database=sql_database, workers=4)
        first = engine.scan(root)
        second = engine.scan(root)
        assert first.findings == second.findings
        assert first.vulnerabilities_by_severity == second.vulnerabilities_by_severity
        assert first.vulnerabilities_by_category == second.vulnerabilities_by_category
        assert first.total_files_scanned == second.total_files_scanned

    def test_worker_count_does_not_change_result(self, write_tree, sql_database: RuleDatabase):
        root = write_tree({f"m{i}.js": SQL_LINE * i for i in range(1, 8)})
        serial = ScanEngine(database=sql_database, workers=1).scan(root)
        parallel = ScanEngine(database=sql_database, workers=8).scan(root)
        assert serial.findings == parallel.findings

    def test_unreadable_file_does_not_abort(self, write_tree, tmp_path: Path, sql_database):
        root = write_tree({"good.py": SQL_LINE})
        (tmp_path / "bad.py").write_bytes(b"\xff\xfe\xfa" + SQL_LINE.encode())
        result = ScanEngine(database=sql_database).scan(root)
        assert result.total_files_scanned == 2
        assert result.files_failed == 1
        assert {f.file_path for f in result.findings} == {"good.py"}
        _assert_consistent(result)

    def test_bad_regex_is_file_level(self, write_tree):
        db = (
            RuleDatabaseBuilder()
            .add_rule("Broken")
            .add_pattern("Broken", "(unclosed")
            .build()
        )
        root = write_tree({"a.py": "x\n", "b.py": "y\n"})
        result = ScanEngine(database=db).scan(root)
        assert result.files_failed == 2
        assert result.findings == []

    def test_on_file_called_per_scanned_file(self, write_tree, sql_database):
        root = write_tree({"a.py": "", "b.js": "", "c.go": ""})
        seen: list[str] = []
        lock = threading.Lock()

        def _record(path: Path) -> None:
            with lock:
                seen.append(path.name)

        ScanEngine(database=sql_database, languages=["python", "javascript"], on_file=_record).scan(
            root
        )
        assert sorted(seen) == ["a.py", "b.js"]

    def test_stop_returns_consistent_partial_result(self, write_tree, sql_database):
        root = write_tree({f"m{i:02d}.py": SQL_LINE for i in range(20)})
        engine = ScanEngine(database=sql_database, workers=1)
        engine.on_file = lambda path: engine.stop()

        result = engine.scan(root)

        assert result.interrupted
        assert result.total_files_scanned < 20
        _assert_consistent(result)

    def test_default_database_is_builtin(self, write_tree):
        root = write_tree({"run.ps1": "Invoke-Expression $userInput\n"})
        result = ScanEngine().scan(root)
        assert [f.category for f in result.findings] == ["PowerShell Execution"]
        assert result.findings[0].severity == Severity.HIGH

    def test_builtin_guard_suppresses(self, write_tree):
        root = write_tree(
            {"run.ps1": "if (-not (Test-Path $target)) { exit 1 }\nInvoke-Expression $userInput\n"}
        )
        assert ScanEngine().scan(root).findings == []

    def test_scan_single_file(self, write_tree, sql_database):
        root = write_tree({"src/app.py": SQL_LINE})
        outcome = ScanEngine(database=sql_database).scan_file(root / "src" / "app.py", root)
        assert outcome.ok
        assert outcome.path == "src/app.py"
        assert len(outcome.findings) == 2

    def test_targets_apply_language_filter(self, write_tree, sql_database):
        root = write_tree({"a.py": "", "b.js": "", "c.go": ""})
        engine = ScanEngine(database=sql_database, languages=["python"])
        assert [p.name for p in engine.targets(root)] == ["a.py"]
        assert len(engine.select(root)) == 3

    def test_on_file_calls_match_targets(self, write_tree, sql_database):
        root = write_tree({"a.py": SQL_LINE, "b.js": SQL_LINE, "c.py": "", "d.go": ""})
        calls: list[Path] = []
        lock = threading.Lock()

        def _record(path: Path) -> None:
            with lock:
                calls.append(path)

        engine = ScanEngine(database=sql_database, languages=["python"], on_file=_record)
        expected = engine.targets(root)
        engine.scan(root)
        assert sorted(calls) == expected
