"""Folds per-file outcomes into a ScanResult."""

from __future__ import annotations

import time

from secscan.scanner.models import FileOutcome, ScanResult


class ResultAggregator:
    """Owns the ScanResult for one scan.

    Outcomes are folded one at a time on a single thread, so the result is
    consistent (counts == findings) after every call to ``add``.
    """

    def __init__(self, project_path: str) -> None:
        self._start = time.monotonic()
        self.result = ScanResult(project_path=project_path)

    def add(self, outcome: FileOutcome) -> None:
        result = self.result
        result.total_files_scanned += 1
        if not outcome.ok:
            result.files_failed += 1
        for finding in outcome.findings:
            severity = finding.severity.value
            result.vulnerabilities_by_severity[severity] = (
                result.vulnerabilities_by_severity.get(severity, 0) + 1
            )
            result.vulnerabilities_by_category[finding.category] = (
                result.vulnerabilities_by_category.get(finding.category, 0) + 1
            )
            result.vulnerabilities_by_language[finding.language] = (
                result.vulnerabilities_by_language.get(finding.language, 0) + 1
            )
            result.findings.append(finding)

    def skip(self) -> None:
        """Record a selected file excluded by the language filter."""
        self.result.total_files_scanned += 1
        self.result.files_skipped += 1

    def finish(self, interrupted: bool = False) -> ScanResult:
        self.result.duration = time.monotonic() - self._start
        self.result.interrupted = interrupted
        return self.result
