"""Map file extensions to language tags."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

ALL_LANGUAGES = "all"
UNKNOWN_LANGUAGE = "unknown"

# Shared by the classifier, the file selector and the rule loader
EXTENSION_LANGUAGES: dict[str, str] = {
    ".cs": "csharp",
    ".cshtml": "csharp",
    ".razor": "csharp",
    ".aspx": "csharp",
    ".asp": "asp",
    ".vb": "vbnet",
    ".php": "php",
    ".phtml": "php",
    ".php3": "php",
    ".php4": "php",
    ".php5": "php",
    ".java": "java",
    ".jsp": "java",
    ".jspx": "java",
    ".kt": "kotlin",
    ".py": "python",
    ".pyw": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".vue": "vue",
    ".ejs": "ejs",
    ".rb": "ruby",
    ".erb": "ruby",
    ".go": "golang",
    ".swift": "swift",
    ".m": "objc",
    ".mm": "objc",
    ".h": "objc",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".c": "c",
    ".html": "html",
    ".htm": "html",
    ".xml": "xml",
    ".config": "xml",
    ".json": "json",
    ".plist": "plist",
    ".strings": "strings",
    ".sql": "sql",
    ".ps1": "powershell",
    ".psm1": "powershell",
    ".psd1": "powershell",
}


def detect_language(path: str | Path) -> str:
    """Return the language tag for a file, or ``"unknown"``."""
    return EXTENSION_LANGUAGES.get(Path(path).suffix.lower(), UNKNOWN_LANGUAGE)


def is_supported_file(path: str | Path) -> bool:
    return Path(path).suffix.lower() in EXTENSION_LANGUAGES


def supported_extensions() -> list[str]:
    return list(EXTENSION_LANGUAGES)


def glob_to_extension(glob: str) -> str:
    """Normalise a rule-source glob such as ``*.PY`` to ``.py``."""
    ext = glob.strip().replace("*", "").lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def languages_for_globs(globs: Iterable[str]) -> frozenset[str]:
    """Translate extension globs to language tags.

    Globs that map to no known language are ignored; if none map, the rule
    applies to every language.
    """
    languages = {
        EXTENSION_LANGUAGES[ext]
        for ext in (glob_to_extension(g) for g in globs)
        if ext in EXTENSION_LANGUAGES
    }
    return frozenset(languages) if languages else frozenset({ALL_LANGUAGES})


def extensions_for_languages(languages: Iterable[str]) -> list[str]:
    """Reverse lookup used when exporting rules; ``all`` yields no globs."""
    wanted = set(languages)
    if not wanted or ALL_LANGUAGES in wanted:
        return []
    return [f"*{ext}" for ext, lang in EXTENSION_LANGUAGES.items() if lang in wanted]
