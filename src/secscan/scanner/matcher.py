"""Pattern matcher — runs rule patterns over a file and suppresses safe matches."""

from __future__ import annotations

import bisect
import functools
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from secscan.rules.builtin import DEFAULT_SAFE_PATTERNS
from secscan.rules.models import MatchPattern, Rule, RuleDatabase
from secscan.scanner.languages import detect_language, glob_to_extension
from secscan.scanner.models import FileOutcome, Finding

logger = logging.getLogger(__name__)

# Rule authors rely on these flags: case-insensitive, ^/$ at line boundaries
MATCH_FLAGS = re.IGNORECASE | re.MULTILINE
SUPPRESS_FLAGS = re.IGNORECASE

SUPPRESSION_RADIUS = 5
CONTEXT_RADIUS = 3


@functools.lru_cache(maxsize=None)
def _compile(pattern: str, flags: int) -> re.Pattern[str]:
    return re.compile(pattern, flags)


@dataclass(frozen=True)
class SourceFile:
    """File text plus its line split and line-start offsets."""

    text: str
    lines: tuple[str, ...]
    line_starts: tuple[int, ...]

    @classmethod
    def from_text(cls, text: str) -> SourceFile:
        lines = text.split("\n") if text else []
        if text.endswith("\n"):
            lines.pop()
        starts = [0]
        starts.extend(m.end() for m in re.finditer("\n", text))
        return cls(text=text, lines=tuple(lines), line_starts=tuple(starts))

    def line_number(self, offset: int) -> int:
        """1-based line containing ``offset`` (newlines before it + 1)."""
        return bisect.bisect_right(self.line_starts, offset)

    def window(self, line: int, radius: int) -> tuple[int, int]:
        """Inclusive 0-based index range of ``radius`` lines around ``line``."""
        index = line - 1
        start = max(0, index - radius)
        end = min(len(self.lines) - 1, index + radius)
        return start, end

    def window_text(self, line: int, radius: int) -> str:
        start, end = self.window(line, radius)
        return "\n".join(self.lines[start : end + 1])

    def context_block(self, line: int, radius: int = CONTEXT_RADIUS) -> str:
        """Numbered lines around ``line``, the matched one marked with ``>>>``."""
        start, end = self.window(line, radius)
        rendered = []
        for i in range(start, end + 1):
            prefix = ">>> " if i == line - 1 else "    "
            rendered.append(f"{prefix}{i + 1}: {self.lines[i]}")
        return "\n".join(rendered)


class PatternMatcher:
    """Evaluates every applicable rule pattern against a file.

    The rule database is only read. Global safe patterns come from the
    explicit ``safe_patterns`` argument, else the database, else the
    built-in defaults.
    """

    def __init__(
        self,
        database: RuleDatabase,
        safe_patterns: Iterable[str] | None = None,
        restrict_extensions: bool = False,
    ) -> None:
        self._db = database
        if safe_patterns is not None:
            self._safe_patterns = tuple(safe_patterns)
        elif database.safe_patterns is not None:
            self._safe_patterns = database.safe_patterns
        else:
            self._safe_patterns = DEFAULT_SAFE_PATTERNS
        self._restrict_extensions = restrict_extensions
        self._rule_extensions = {
            category: {glob_to_extension(g) for g in rule.file_extensions}
            for category, rule in database.items()
        }

    @property
    def safe_patterns(self) -> tuple[str, ...]:
        return self._safe_patterns

    def scan_file(self, path: Path, root: Path) -> FileOutcome:
        """Scan one file. Never raises; failures become an error outcome."""
        rel_path = _relative_path(path, root)
        language = detect_language(path)
        try:
            text = path.read_text(encoding="utf-8-sig")
            findings = self.match_source(
                SourceFile.from_text(text),
                rel_path,
                language,
                path.suffix.lower(),
            )
        except (OSError, UnicodeDecodeError, re.error) as e:
            logger.info("Error scanning file %s: %s", path, e)
            return FileOutcome(path=rel_path, language=language, error=str(e))

        return FileOutcome(path=rel_path, language=language, findings=tuple(findings))

    def match_source(
        self,
        source: SourceFile,
        file_path: str,
        language: str,
        suffix: str = "",
    ) -> list[Finding]:
        """Run all applicable rules over ``source`` in category/pattern order."""
        findings: list[Finding] = []
        for category, rule in self._db.items():
            if not self._rule_applies_to_suffix(category, suffix):
                continue
            suppressed: dict[int, bool] = {}
            for pattern in rule.patterns:
                if not pattern.applies_to(language):
                    continue
                findings.extend(
                    self._match_pattern(source, rule, pattern, file_path, language, suppressed)
                )
        return findings

    def is_suppressed(self, window: str, whitelist: Iterable[str]) -> bool:
        """Whether the rule whitelist or a global safe pattern matches ``window``."""
        for safe in whitelist:
            if _compile(safe, SUPPRESS_FLAGS).search(window):
                return True
        for safe in self._safe_patterns:
            if _compile(safe, SUPPRESS_FLAGS).search(window):
                return True
        return False

    def _match_pattern(
        self,
        source: SourceFile,
        rule: Rule,
        pattern: MatchPattern,
        file_path: str,
        language: str,
        suppressed: dict[int, bool],
    ) -> list[Finding]:
        findings: list[Finding] = []
        for match in _compile(pattern.pattern, MATCH_FLAGS).finditer(source.text):
            line = source.line_number(match.start())

            if line not in suppressed:
                suppressed[line] = self.is_suppressed(
                    source.window_text(line, SUPPRESSION_RADIUS), rule.whitelist
                )
            if suppressed[line]:
                logger.debug("Suppressed %s at %s:%d", rule.category, file_path, line)
                continue

            findings.append(
                Finding(
                    category=rule.category,
                    severity=pattern.severity,
                    file_path=file_path,
                    line=line,
                    code_snippet=match.group(0).strip(),
                    description=pattern.description,
                    cwe_id=pattern.cwe_id,
                    recommendation=pattern.recommendation,
                    language=language,
                    context=source.context_block(line),
                )
            )
        return findings

    def _rule_applies_to_suffix(self, category: str, suffix: str) -> bool:
        # Rules that declare no extensions are never narrowed out
        if not self._restrict_extensions:
            return True
        extensions = self._rule_extensions.get(category)
        return not extensions or suffix in extensions


def _relative_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
