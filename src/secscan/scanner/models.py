"""Findings, per-file outcomes and scan results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from secscan.rules.models import Severity


@dataclass(frozen=True)
class Finding:
    """A single reported vulnerability at a file/line."""

    category: str
    severity: Severity
    file_path: str
    line: int
    code_snippet: str
    description: str
    cwe_id: str
    recommendation: str
    language: str
    context: str = ""

    def sort_key(self) -> tuple[int, str, int]:
        return (self.severity.rank, self.file_path, self.line)

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "severity": self.severity.value,
            "file_path": self.file_path,
            "line": self.line,
            "code_snippet": self.code_snippet,
            "description": self.description,
            "cwe_id": self.cwe_id,
            "recommendation": self.recommendation,
            "language": self.language,
            "context": self.context,
        }


@dataclass(frozen=True)
class FileOutcome:
    """Result of scanning one file: findings, or the error that stopped it."""

    path: str
    language: str
    findings: tuple[Finding, ...] = ()
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


def _severity_buckets() -> dict[str, int]:
    return {s.value: 0 for s in Severity}


@dataclass
class ScanResult:
    """Aggregate result of a scan. Mutated only by ResultAggregator."""

    project_path: str
    scan_date: datetime = field(default_factory=datetime.now)
    total_files_scanned: int = 0
    findings: list[Finding] = field(default_factory=list)
    vulnerabilities_by_severity: dict[str, int] = field(default_factory=_severity_buckets)
    vulnerabilities_by_category: dict[str, int] = field(default_factory=dict)
    vulnerabilities_by_language: dict[str, int] = field(default_factory=dict)
    duration: float = 0.0
    files_failed: int = 0
    files_skipped: int = 0
    interrupted: bool = False

    @property
    def total_vulnerabilities(self) -> int:
        return len(self.findings)

    def sorted_findings(self) -> list[Finding]:
        """Findings ordered by severity (critical first), file path, line."""
        return sorted(self.findings, key=Finding.sort_key)

    def count_at_or_above(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity.rank <= severity.rank)

    def to_dict(self) -> dict:
        return {
            "scan_date": self.scan_date.strftime("%Y-%m-%d %H:%M:%S"),
            "project_path": self.project_path,
            "total_files_scanned": self.total_files_scanned,
            "total_vulnerabilities": self.total_vulnerabilities,
            "vulnerabilities_by_severity": dict(self.vulnerabilities_by_severity),
            "vulnerabilities_by_category": dict(self.vulnerabilities_by_category),
            "vulnerabilities_by_language": dict(self.vulnerabilities_by_language),
            "findings": [f.to_dict() for f in self.sorted_findings()],
            "scan_duration": round(self.duration, 3),
            "files_failed": self.files_failed,
            "files_skipped": self.files_skipped,
            "interrupted": self.interrupted,
        }
