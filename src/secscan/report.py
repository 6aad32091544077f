"""Report rendering: text, JSON, CSV and HTML views of a ScanResult."""

from __future__ import annotations

import csv
import html
import io
import json
import logging
from datetime import datetime
from itertools import groupby
from pathlib import Path

from secscan.scanner.models import Finding, ScanResult

logger = logging.getLogger(__name__)

FORMATS = ("text", "json", "csv", "html")

_CSV_FIELDS = [
    "category",
    "severity",
    "file_path",
    "line",
    "language",
    "cwe_id",
    "description",
    "code_snippet",
    "recommendation",
    "context",
]


def render(result: ScanResult, fmt: str) -> str:
    """Render ``result`` in one of FORMATS; unknown formats fall back to text."""
    fmt = fmt.lower()
    if fmt == "json":
        return render_json(result)
    if fmt == "csv":
        return render_csv(result)
    if fmt == "html":
        return render_html(result)
    return render_text(result)


def write_report(result: ScanResult, fmt: str, output: str | Path) -> Path:
    path = Path(output)
    # csv emits its own \r\n row endings
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(render(result, fmt))
    logger.info("Report saved to %s", path)
    return path


def default_report_name(project_path: str, fmt: str, now: datetime | None = None) -> str:
    """``<project>_security_scan_<YYYYmmdd_HHMMSS>.<fmt>``"""
    project = Path(project_path.rstrip("/\\")).name or "project"
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{project}_security_scan_{stamp}.{fmt}"


def _by_severity(result: ScanResult) -> list[tuple[str, list[Finding]]]:
    ordered = result.sorted_findings()
    return [
        (severity.value, list(group))
        for severity, group in groupby(ordered, key=lambda f: f.severity)
    ]


def _descending(counts: dict[str, int]) -> list[tuple[str, int]]:
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def render_text(result: ScanResult) -> str:
    out = [
        "=== SECURITY VULNERABILITY SCAN REPORT ===",
        f"Scan Date: {result.scan_date:%Y-%m-%d %H:%M:%S}",
        f"Project Path: {result.project_path}",
        f"Scan Duration: {result.duration:.2f} seconds",
        f"Files Scanned: {result.total_files_scanned}",
        f"Total Vulnerabilities: {result.total_vulnerabilities}",
        "",
        "VULNERABILITIES BY SEVERITY:",
    ]
    out.extend(f"  {k}: {v}" for k, v in result.vulnerabilities_by_severity.items())
    out += ["", "VULNERABILITIES BY CATEGORY:"]
    out.extend(f"  {k}: {v}" for k, v in _descending(result.vulnerabilities_by_category))
    out += ["", "VULNERABILITIES BY LANGUAGE:"]
    out.extend(f"  {k}: {v}" for k, v in _descending(result.vulnerabilities_by_language))
    out += ["", "=== DETAILED VULNERABILITIES ==="]

    for severity, findings in _by_severity(result):
        out += ["", f"--- {severity} SEVERITY ---"]
        for f in findings:
            out += [
                "",
                f"Category: {f.category}",
                f"File: {f.file_path}:{f.line}",
                f"Language: {f.language}",
                f"CWE ID: {f.cwe_id}",
                f"Description: {f.description}",
                f"Code Snippet: {f.code_snippet}",
                f"Recommendation: {f.recommendation}",
            ]
            if f.context:
                out += ["Context:", f.context]
            out.append("-" * 80)

    return "\n".join(out) + "\n"


def render_json(result: ScanResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False) + "\n"


def render_csv(result: ScanResult) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_CSV_FIELDS, extrasaction="ignore")
    writer.writeheader()
    for finding in result.sorted_findings():
        writer.writerow(finding.to_dict())
    return buf.getvalue()


_HTML_STYLE = """
body { font-family: 'Segoe UI', Tahoma, sans-serif; margin: 20px; background: #f5f5f5; }
.container { max-width: 1200px; margin: 0 auto; background: white; padding: 30px; border-radius: 8px; }
h1 { color: #2c3e50; border-bottom: 3px solid #3498db; padding-bottom: 10px; }
.summary { display: grid; grid-template-columns: repeat(auto-fit, minmax(300px, 1fr)); gap: 20px; }
.summary-card { background: #ecf0f1; padding: 15px; border-radius: 6px; border-left: 4px solid #3498db; }
.stats-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(120px, 1fr)); gap: 10px; }
.stat-item { text-align: center; padding: 10px; background: white; border: 1px solid #ddd; }
.stat-number { font-size: 24px; font-weight: bold; color: #3498db; }
.stat-label { font-size: 12px; color: #7f8c8d; text-transform: uppercase; }
.vulnerability { margin: 20px 0; padding: 15px; border-radius: 6px; border-left: 4px solid; }
.critical { background: #fdf2f2; border-left-color: #e74c3c; }
.high { background: #fef9e7; border-left-color: #f39c12; }
.medium { background: #f0f9ff; border-left-color: #3498db; }
.low { background: #f0fff4; border-left-color: #27ae60; }
.file-path { font-family: monospace; color: #7f8c8d; }
.code-snippet { background: #2c3e50; color: #ecf0f1; padding: 10px; font-family: monospace; white-space: pre-wrap; }
.context { background: #f8f9fa; padding: 10px; font-family: monospace; font-size: 12px; white-space: pre; overflow-x: auto; }
"""


def render_html(result: ScanResult) -> str:
    e = html.escape
    parts = [
        "<!DOCTYPE html>",
        "<html lang='en'>",
        "<head>",
        "<meta charset='UTF-8'>",
        "<title>Security Vulnerability Scan Report</title>",
        f"<style>{_HTML_STYLE}</style>",
        "</head>",
        "<body>",
        "<div class='container'>",
        "<h1>Security Vulnerability Scan Report</h1>",
        "<div class='summary'>",
        "<div class='summary-card'>",
        "<h3>Scan Overview</h3>",
        f"<p><strong>Scan Date:</strong> {result.scan_date:%Y-%m-%d %H:%M:%S}</p>",
        f"<p><strong>Project Path:</strong> {e(result.project_path)}</p>",
        f"<p><strong>Duration:</strong> {result.duration:.2f} seconds</p>",
        f"<p><strong>Files Scanned:</strong> {result.total_files_scanned}</p>",
        f"<p><strong>Total Vulnerabilities:</strong> {result.total_vulnerabilities}</p>",
        "</div>",
        "<div class='summary-card'>",
        "<h3>By Severity</h3>",
        "<div class='stats-grid'>",
    ]
    for severity, count in result.vulnerabilities_by_severity.items():
        parts += [
            "<div class='stat-item'>",
            f"<div class='stat-number'>{count}</div>",
            f"<div class='stat-label'>{e(severity)}</div>",
            "</div>",
        ]
    parts += ["</div>", "</div>", "</div>"]

    if result.vulnerabilities_by_category:
        parts.append("<h2>Vulnerabilities by Category</h2>")
        for category, count in _descending(result.vulnerabilities_by_category):
            parts.append(f"<p><strong>{e(category)}:</strong> {count}</p>")

    parts.append("<h2>Detailed Vulnerabilities</h2>")
    for severity, findings in _by_severity(result):
        css = severity.lower()
        for f in findings:
            parts += [
                f"<div class='vulnerability {css}'>",
                f"<h3>{e(f.category)} <span class='severity {css}'>{severity}</span></h3>",
                f"<p class='file-path'>{e(f.file_path)}:{f.line} ({e(f.language)})</p>",
                f"<p><strong>CWE ID:</strong> {e(f.cwe_id)}</p>",
                f"<p><strong>Description:</strong> {e(f.description)}</p>",
                f"<div class='code-snippet'>{e(f.code_snippet)}</div>",
                f"<p><strong>Recommendation:</strong> {e(f.recommendation)}</p>",
            ]
            if f.context:
                parts.append(f"<div class='context'>{e(f.context)}</div>")
            parts.append("</div>")

    parts += ["</div>", "</body>", "</html>"]
    return "\n".join(parts) + "\n"
