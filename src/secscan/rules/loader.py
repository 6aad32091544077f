"""Load and export rule databases from JSON or YAML rule files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from secscan.errors import InvalidRuleSource, RuleSourceNotFound
from secscan.rules.models import RuleDatabase, RuleDatabaseBuilder, Severity
from secscan.scanner.languages import extensions_for_languages, languages_for_globs

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}

# Substring of the lowercased category → recommendation, first match wins
_RECOMMENDATIONS: tuple[tuple[str, str], ...] = (
    ("sql injection", "Use parameterized queries and input validation"),
    ("xss", "Encode output and validate input"),
    ("csrf", "Implement CSRF tokens and same-origin checks"),
    ("path traversal", "Validate and sanitize file paths"),
    ("open redirect", "Validate redirect URLs against whitelist"),
    ("sensitive information", "Remove hardcoded sensitive data"),
    ("network security", "Use HTTPS and validate certificates"),
    ("powershell", "Validate input and use safe PowerShell practices"),
    ("android", "Follow Android security best practices"),
    ("ios", "Follow iOS security best practices"),
)
_DEFAULT_RECOMMENDATION = (
    "Review code for security vulnerabilities and follow secure coding practices"
)


def recommendation_for(category: str) -> str:
    lowered = category.lower()
    for needle, text in _RECOMMENDATIONS:
        if needle in lowered:
            return text
    return _DEFAULT_RECOMMENDATION


def load_rules(path: str | Path) -> RuleDatabase:
    """Load a rule database from a JSON or YAML file path."""
    path = Path(path)
    if not path.is_file():
        raise RuleSourceNotFound(f"Pattern file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidRuleSource(f"Cannot read pattern file: {path}: {e}") from e
    return load_rules_from_string(text, source=str(path))


def load_rules_from_string(text: str, source: str = "<string>") -> RuleDatabase:
    """Parse JSON or YAML rule-source text into a RuleDatabase."""
    data = _parse(text, source)

    if not isinstance(data, dict) or not isinstance(data.get("patterns"), list):
        raise InvalidRuleSource(
            f"Invalid pattern file format: {source}: expected a mapping with a 'patterns' list"
        )

    builder = RuleDatabaseBuilder(source=source)
    for index, entry in enumerate(data["patterns"]):
        _add_entry(builder, entry, index, source)

    safe_patterns = data.get("safePatterns")
    if safe_patterns is not None:
        if not isinstance(safe_patterns, list):
            raise InvalidRuleSource(f"{source}: 'safePatterns' must be a list")
        builder.set_safe_patterns(str(p) for p in safe_patterns)

    database = builder.build()
    logger.debug(
        "Loaded %d rules (%d patterns) from %s",
        len(database),
        database.pattern_count,
        source,
    )
    return database


def _parse(text: str, source: str) -> object:
    try:
        if text.lstrip().startswith("{"):
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidRuleSource(f"Invalid pattern file format: {source}: {e}") from e


def _add_entry(builder: RuleDatabaseBuilder, entry: object, index: int, source: str) -> None:
    if not isinstance(entry, dict):
        raise InvalidRuleSource(f"{source}: pattern entry #{index} must be a mapping")
    category = entry.get("type")
    if not category:
        raise InvalidRuleSource(f"{source}: pattern entry #{index} is missing 'type'")
    patterns = entry.get("patterns")
    if not isinstance(patterns, list):
        raise InvalidRuleSource(f"{source}: rule '{category}' is missing 'patterns'")

    try:
        severity = Severity.parse(entry.get("severity", Severity.MEDIUM.value))
    except ValueError as e:
        raise InvalidRuleSource(f"{source}: rule '{category}': {e}") from e

    extensions = [str(ext) for ext in _list_field(entry, "fileExtensions", category, source)]
    languages = languages_for_globs(extensions)
    category = str(category)
    recommendation = recommendation_for(category)

    builder.add_rule(
        category,
        severity=severity,
        cwe_id=str(entry.get("cweId", "")),
        languages=languages,
        whitelist=[str(w) for w in _list_field(entry, "whitelist", category, source)],
        file_extensions=extensions,
    )
    for pattern in patterns:
        builder.add_pattern(
            category,
            str(pattern),
            description=f"{category} vulnerability pattern",
            recommendation=recommendation,
        )


def rules_to_dict(database: RuleDatabase) -> dict:
    """Convert a database to the rule-source document shape.

    Severity and CWE id are taken from each rule's first pattern.
    """
    entries = []
    for rule in database.values():
        first = rule.patterns[0] if rule.patterns else None
        extensions = list(rule.file_extensions) or extensions_for_languages(
            first.languages if first else rule.languages
        )
        entries.append(
            {
                "type": rule.category,
                "fileExtensions": extensions,
                "patterns": [p.pattern for p in rule.patterns],
                "whitelist": list(rule.whitelist),
                "severity": (first.severity if first else rule.severity).value,
                "cweId": first.cwe_id if first else rule.cwe_id,
            }
        )

    data: dict = {"patterns": entries}
    if database.safe_patterns is not None:
        data["safePatterns"] = list(database.safe_patterns)
    return data


def dump_rules(database: RuleDatabase, fmt: str = "json") -> str:
    data = rules_to_dict(database)
    if fmt == "yaml":
        result: str = yaml.dump(data, default_flow_style=False, sort_keys=False)
        return result
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def save_rules(database: RuleDatabase, path: str | Path) -> None:
    """Write a database to ``path``; YAML for .yaml/.yml, JSON otherwise."""
    path = Path(path)
    fmt = "yaml" if path.suffix.lower() in _YAML_SUFFIXES else "json"
    path.write_text(dump_rules(database, fmt), encoding="utf-8")
    logger.info("Wrote %d rules to %s", len(database), path)


def _list_field(entry: dict, key: str, category: object, source: str) -> list:
    value = entry.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidRuleSource(f"{source}: rule '{category}': '{key}' must be a list")
    return value
