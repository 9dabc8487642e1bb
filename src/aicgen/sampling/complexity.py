"""Keyword-based complexity scoring.

Score = decision keyword occurrences + 2 x maximum nesting depth. Nesting is
measured with braces for brace languages and indentation for Python and Ruby.
Keywords inside strings and comments are counted too; the score is only used
to rank files against each other.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from aicgen.analyzers.languages import language_for_path
from aicgen.sampling.files import iter_files, source_files

logger = logging.getLogger(__name__)

_C_FAMILY = [r"\bif\b", r"\belse\s+if\b", r"\bfor\b", r"\bwhile\b", r"\bcase\b", r"&&", r"\|\|", r"\?", r"\bcatch\b"]

DECISION_KEYWORDS: dict[str, list[str]] = {
    "typescript": _C_FAMILY,
    "javascript": _C_FAMILY,
    "java": _C_FAMILY,
    "csharp": _C_FAMILY,
    "dart": _C_FAMILY,
    "swift": [r"\bif\b", r"\bguard\b", r"\bfor\b", r"\bwhile\b", r"\bcase\b", r"&&", r"\|\|", r"\bcatch\b"],
    "python": [r"\bif\b", r"\belif\b", r"\bfor\b", r"\bwhile\b", r"\bexcept\b", r"\band\b", r"\bor\b"],
    "go": [r"\bif\b", r"\bfor\b", r"\bcase\b", r"&&", r"\|\|"],
    "rust": [r"\bif\b", r"\bmatch\b", r"\bwhile\b", r"\bfor\b", r"&&", r"\|\|"],
    "ruby": [r"\bif\b", r"\belsif\b", r"\bunless\b", r"\bwhile\b", r"\bfor\b", r"\bcase\b", r"\brescue\b"],
}

_KEYWORD_PATTERNS = {
    language: re.compile("|".join(patterns)) for language, patterns in DECISION_KEYWORDS.items()
}

INDENT_LANGUAGES = frozenset({"python", "ruby"})
NESTING_WEIGHT = 2


@dataclass
class ComplexityScore:
    """Complexity of a single file.

    Attributes:
        path: Relative file path
        decisions: Decision keyword occurrences
        max_nesting: Deepest nesting level
    """

    path: str
    decisions: int
    max_nesting: int

    @property
    def score(self) -> int:
        """Combined score used for ranking."""
        return self.decisions + NESTING_WEIGHT * self.max_nesting


def _brace_depth(content: str) -> int:
    depth = 0
    deepest = 0
    for char in content:
        if char == "{":
            depth += 1
            deepest = max(deepest, depth)
        elif char == "}":
            depth = max(depth - 1, 0)
    return deepest


def _indent_depth(content: str, width: int) -> int:
    deepest = 0
    for line in content.splitlines():
        stripped = line.lstrip(" \t")
        if not stripped or stripped.startswith("#"):
            continue
        indent = len(line) - len(stripped)
        deepest = max(deepest, indent // width)
    return deepest


def score_content(path: str, content: str) -> ComplexityScore:
    """Score one file's content."""
    language = language_for_path(path)
    pattern = _KEYWORD_PATTERNS.get(language)
    decisions = len(pattern.findall(content)) if pattern else 0
    if language in INDENT_LANGUAGES:
        nesting = _indent_depth(content, 4 if language == "python" else 2)
    else:
        nesting = _brace_depth(content)
    return ComplexityScore(path=path, decisions=decisions, max_nesting=nesting)


def rank_by_complexity(root: Path, files: list[str], language: str) -> list[ComplexityScore]:
    """Score the project's source files, most complex first.

    Args:
        root: Project root
        files: Relative paths from static analysis
        language: Primary language

    Returns:
        Scores sorted by descending score, then path
    """
    candidates = source_files(files, language)
    scores = [score_content(path, content) for path, content in iter_files(root, candidates)]
    scores.sort(key=lambda s: (-s.score, s.path))
    logger.debug("Scored complexity for %d files", len(scores))
    return scores
