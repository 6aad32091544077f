"""Scan engine — orchestrates rule matching across a directory."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from secscan.rules.builtin import builtin_rules
from secscan.rules.models import RuleDatabase
from secscan.scanner.aggregator import ResultAggregator
from secscan.scanner.languages import ALL_LANGUAGES, detect_language
from secscan.scanner.matcher import PatternMatcher
from secscan.scanner.models import FileOutcome, ScanResult
from secscan.scanner.selector import select_files

logger = logging.getLogger(__name__)


class ScanEngine:
    """Scans a directory with a read-only rule database.

    Files are matched on a worker pool; outcomes are folded on the calling
    thread in file order, so results do not depend on completion order.
    """

    def __init__(
        self,
        database: RuleDatabase | None = None,
        languages: Iterable[str] | None = None,
        workers: int | None = None,
        safe_patterns: Iterable[str] | None = None,
        restrict_extensions: bool = False,
        exclude_patterns: list[str] | None = None,
        on_file: Callable[[Path], None] | None = None,
    ) -> None:
        self._db = database if database is not None else builtin_rules()
        self._languages = _normalize_languages(languages)
        self._workers = max(1, workers or os.cpu_count() or 1)
        self._matcher = PatternMatcher(
            self._db,
            safe_patterns=safe_patterns,
            restrict_extensions=restrict_extensions,
        )
        self._exclude = list(exclude_patterns or [])
        self.on_file = on_file
        self._stop_event = threading.Event()

    @property
    def database(self) -> RuleDatabase:
        return self._db

    def stop(self) -> None:
        """Stop after the file currently being folded; pending files are dropped."""
        self._stop_event.set()

    def select(self, directory: str | Path) -> list[Path]:
        """Files the next scan of ``directory`` will visit."""
        return select_files(directory, self._exclude)

    def targets(self, directory: str | Path) -> list[Path]:
        """Selected files that pass the language filter and will be matched."""
        return [p for p in self.select(directory) if self._wants(detect_language(p))]

    def scan(self, directory: str | Path) -> ScanResult:
        """Scan a directory and return aggregated results.

        Raises DirectoryNotFound before any file is processed if the
        directory does not exist.
        """
        root = Path(directory)
        files = self.select(root)
        self._stop_event.clear()

        aggregator = ResultAggregator(str(root))
        pending: list[Path] = []
        for path in files:
            if self._wants(detect_language(path)):
                pending.append(path)
            else:
                aggregator.skip()

        logger.info(
            "Scanning %d of %d files under %s with %d rules",
            len(pending),
            len(files),
            root,
            len(self._db),
        )

        interrupted = False
        with ThreadPoolExecutor(max_workers=self._workers) as pool:
            futures = [pool.submit(self._scan_one, path, root) for path in pending]
            for future in futures:
                if self._stop_event.is_set():
                    interrupted = True
                    break
                aggregator.add(future.result())
            if interrupted:
                pool.shutdown(wait=True, cancel_futures=True)

        if interrupted:
            logger.warning("Scan interrupted; returning partial results")
        return aggregator.finish(interrupted=interrupted)

    def scan_file(self, path: str | Path, root: str | Path | None = None) -> FileOutcome:
        """Scan a single file, reporting its path relative to ``root``."""
        path = Path(path)
        return self._matcher.scan_file(path, Path(root) if root else path.parent)

    def _scan_one(self, path: Path, root: Path) -> FileOutcome:
        if self.on_file:
            self.on_file(path)
        return self._matcher.scan_file(path, root)

    def _wants(self, language: str) -> bool:
        return self._languages is None or language in self._languages


def _normalize_languages(languages: Iterable[str] | None) -> frozenset[str] | None:
    """``None``, empty, or containing ``all`` means no language filter."""
    if languages is None:
        return None
    wanted = frozenset(lang.strip().lower() for lang in languages if lang.strip())
    if not wanted or ALL_LANGUAGES in wanted:
        return None
    return wanted
