"""Language identification from marker files and extensions."""

from collections import Counter
from pathlib import PurePosixPath

EXTENSION_LANGUAGES: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "java",
    ".cs": "csharp",
    ".rb": "ruby",
    ".dart": "dart",
    ".swift": "swift",
}

# Marker probes in priority order; the first present marker wins. Language
# specific configs come before the generic manifests they usually sit beside.
MARKER_LANGUAGES: list[tuple[str, str]] = [
    ("tsconfig.json", "typescript"),
    ("package.json", "javascript"),
    ("go.mod", "go"),
    ("Cargo.toml", "rust"),
    ("pom.xml", "java"),
    ("build.gradle", "java"),
    ("build.gradle.kts", "java"),
    ("Gemfile", "ruby"),
    ("pubspec.yaml", "dart"),
    ("Package.swift", "swift"),
    ("pyproject.toml", "python"),
    ("requirements.txt", "python"),
    ("setup.py", "python"),
    ("Pipfile", "python"),
]


def language_for_path(path: str) -> str:
    """Return the language of a file by extension, or "unknown"."""
    return EXTENSION_LANGUAGES.get(PurePosixPath(path).suffix.lower(), "unknown")


def detect_language(
    files: list[str],
    has_typescript_dependency: bool = False,
) -> str:
    """Resolve the primary language of a project.

    Args:
        files: Relative file paths from the walk
        has_typescript_dependency: package.json lists typescript

    Returns:
        Language identifier, or "unknown"
    """
    root_files = {f for f in files if "/" not in f}

    for marker, language in MARKER_LANGUAGES:
        if marker in root_files:
            if language == "javascript" and has_typescript_dependency:
                return "typescript"
            return language

    if any(f.endswith((".csproj", ".sln")) for f in root_files):
        return "csharp"

    # No marker: fall back to the most common source extension
    counts = Counter(
        language for language in (language_for_path(f) for f in files) if language != "unknown"
    )
    if counts:
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[0][0]
    return "unknown"
