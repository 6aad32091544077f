"""Rule data models — immutable definitions shared read-only by every scan."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from secscan.scanner.languages import ALL_LANGUAGES


class Severity(enum.Enum):
    """Finding severity level, most severe first."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: str | Severity) -> Severity:
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown severity {value!r} (expected CRITICAL, HIGH, MEDIUM or LOW)"
            ) from None


_SEVERITY_RANK = {s: i for i, s in enumerate(Severity)}


@dataclass(frozen=True)
class MatchPattern:
    """A single regular expression and the metadata its findings carry."""

    pattern: str
    severity: Severity
    cwe_id: str = ""
    description: str = ""
    recommendation: str = ""
    languages: frozenset[str] = frozenset()

    def applies_to(self, language: str) -> bool:
        """Whether this pattern should run against a file of ``language``."""
        if not self.languages or ALL_LANGUAGES in self.languages:
            return True
        return language in self.languages


@dataclass(frozen=True)
class Rule:
    """A vulnerability category: match patterns plus suppressing whitelist."""

    category: str
    patterns: tuple[MatchPattern, ...] = ()
    whitelist: tuple[str, ...] = ()
    severity: Severity = Severity.MEDIUM
    cwe_id: str = ""
    languages: frozenset[str] = frozenset({ALL_LANGUAGES})
    file_extensions: tuple[str, ...] = ()


class RuleDatabase(Mapping[str, Rule]):
    """Read-only ``category → Rule`` mapping. Build with RuleDatabaseBuilder."""

    def __init__(
        self,
        rules: Mapping[str, Rule],
        safe_patterns: Iterable[str] | None = None,
        source: str = "builtin",
    ) -> None:
        self._rules = MappingProxyType(dict(rules))
        self.safe_patterns: tuple[str, ...] | None = (
            tuple(safe_patterns) if safe_patterns is not None else None
        )
        self.source = source

    def __getitem__(self, category: str) -> Rule:
        return self._rules[category]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleDatabase(source={self.source!r}, rules={len(self)})"

    @property
    def pattern_count(self) -> int:
        return sum(len(rule.patterns) for rule in self._rules.values())


@dataclass
class _PendingRule:
    rule: Rule
    patterns: list[MatchPattern] = field(default_factory=list)


class RuleDatabaseBuilder:
    """Accumulates rules and freezes them into a RuleDatabase.

    Patterns inherit severity, CWE id and languages from their rule unless
    given explicitly.
    """

    def __init__(self, source: str = "builtin") -> None:
        self._source = source
        self._pending: dict[str, _PendingRule] = {}
        self._safe_patterns: list[str] | None = None

    def add_rule(
        self,
        category: str,
        *,
        severity: Severity | str = Severity.MEDIUM,
        cwe_id: str = "",
        languages: Iterable[str] = (ALL_LANGUAGES,),
        whitelist: Iterable[str] = (),
        file_extensions: Iterable[str] = (),
    ) -> RuleDatabaseBuilder:
        # A later entry with the same category replaces the earlier one
        self._pending[category] = _PendingRule(
            rule=Rule(
                category=category,
                whitelist=tuple(whitelist),
                severity=Severity.parse(severity),
                cwe_id=cwe_id,
                languages=frozenset(languages),
                file_extensions=tuple(file_extensions),
            )
        )
        return self

    def add_pattern(
        self,
        category: str,
        pattern: str,
        *,
        severity: Severity | str | None = None,
        cwe_id: str | None = None,
        description: str = "",
        recommendation: str = "",
        languages: Iterable[str] | None = None,
    ) -> RuleDatabaseBuilder:
        if category not in self._pending:
            raise KeyError(f"Unknown rule category: {category}")
        pending = self._pending[category]
        rule = pending.rule
        pending.patterns.append(
            MatchPattern(
                pattern=pattern,
                severity=(
                    Severity.parse(severity) if severity is not None else rule.severity
                ),
                cwe_id=cwe_id if cwe_id is not None else rule.cwe_id,
                description=description or f"{category} vulnerability pattern",
                recommendation=recommendation,
                languages=(
                    frozenset(languages) if languages is not None else rule.languages
                ),
            )
        )
        return self

    def set_safe_patterns(self, patterns: Iterable[str]) -> RuleDatabaseBuilder:
        self._safe_patterns = list(patterns)
        return self

    def build(self) -> RuleDatabase:
        rules = {
            category: replace(pending.rule, patterns=tuple(pending.patterns))
            for category, pending in self._pending.items()
        }
        return RuleDatabase(rules, safe_patterns=self._safe_patterns, source=self._source)
