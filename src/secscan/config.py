"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_RULES_FILENAME = "patterns.json"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "secscan"
    return Path.home() / ".config" / "secscan"


@dataclass
class ScannerConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    rules_path: Path | None = None
    workers: int | None = None
    verbose: bool = False

    @classmethod
    def load(cls) -> ScannerConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_rules = os.environ.get("SECSCAN_RULES")
        if env_rules:
            config.rules_path = Path(env_rules)

        env_workers = os.environ.get("SECSCAN_WORKERS")
        if env_workers:
            config.workers = int(env_workers)

        return config

    def resolve_rules_path(
        self,
        explicit: str | Path | None = None,
        cwd: Path | None = None,
    ) -> Path | None:
        """Pick the rule file to load; ``None`` means the built-in rules.

        Order: explicit path, SECSCAN_RULES, ./patterns.json,
        <config_dir>/patterns.json. Explicit and env paths are returned even
        if missing so loading reports them.
        """
        if explicit:
            return Path(explicit)
        if self.rules_path is not None:
            return self.rules_path

        for candidate in (
            (cwd or Path.cwd()) / DEFAULT_RULES_FILENAME,
            self.config_dir / DEFAULT_RULES_FILENAME,
        ):
            if candidate.is_file():
                return candidate
        return None
