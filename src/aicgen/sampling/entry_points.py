"""Entry point detection for file sampling.

Entry points are found in declaration order:
1. Manifest-declared entries (package.json main/module/exports/bin,
   Cargo.toml targets, pyproject.toml scripts)
2. Framework markers (Next.js app shell, Django manage.py, ...)
3. Conventional paths for the project language
4. Files whose content declares a main routine
"""

import json
import logging
import re
import tomllib
from pathlib import Path, PurePosixPath
from typing import Any

from aicgen.analyzers.static_analyzer import IGNORED_DIRS
from aicgen.models.metadata import ProjectMetadata
from aicgen.sampling.files import iter_files, source_files

logger = logging.getLogger(__name__)

FRAMEWORK_ENTRY_POINTS: dict[str, list[str]] = {
    "Next.js": [
        "pages/_app.tsx", "pages/_app.jsx", "pages/_app.js",
        "app/layout.tsx", "app/layout.jsx", "app/layout.js",
        "src/pages/_app.tsx", "src/app/layout.tsx",
    ],
    "Nuxt": ["nuxt.config.ts", "nuxt.config.js", "app.vue"],
    "Gatsby": ["gatsby-config.js", "gatsby-config.ts", "gatsby-node.js"],
    "Django": ["manage.py", "*/wsgi.py", "*/settings.py"],
    "Flask": ["app.py", "wsgi.py", "application.py", "app/__init__.py"],
    "FastAPI": ["main.py", "app/main.py", "src/main.py"],
    "Express": ["server.js", "app.js", "index.js", "src/server.ts", "src/app.ts", "src/index.ts"],
    "NestJS": ["src/main.ts"],
    "Rails": ["config/routes.rb", "config/application.rb"],
    "Spring Boot": ["*Application.java"],
    "Flutter": ["lib/main.dart"],
}

LANGUAGE_ENTRY_POINTS: dict[str, list[str]] = {
    "typescript": [
        "src/index.ts", "src/main.ts", "src/app.ts", "src/server.ts",
        "index.ts", "main.ts", "app.ts", "server.ts",
    ],
    "javascript": [
        "src/index.js", "src/main.js", "src/app.js", "src/server.js",
        "index.js", "main.js", "app.js", "server.js",
    ],
    "python": [
        "main.py", "app.py", "__main__.py", "manage.py", "setup.py",
        "src/main.py", "src/app.py", "*/__main__.py",
    ],
    "go": ["main.go", "cmd/main.go", "cmd/*/main.go"],
    "rust": ["src/main.rs", "src/lib.rs", "src/bin/*.rs"],
    "java": ["src/main/java/Main.java", "src/main/java/Application.java", "*Main.java", "*Application.java"],
    "csharp": ["Program.cs", "Startup.cs", "*/Program.cs"],
    "ruby": ["app.rb", "main.rb", "config.ru", "Rakefile"],
    "dart": ["lib/main.dart", "bin/main.dart"],
    "swift": ["Sources/*/main.swift", "Sources/main.swift", "*/App.swift"],
}

# Content markers for a main routine, checked when nothing else matched
MAIN_PATTERNS: dict[str, re.Pattern[str]] = {
    "python": re.compile(r"""^if\s+__name__\s*==\s*['"]__main__['"]""", re.MULTILINE),
    "go": re.compile(r"^func\s+main\s*\(\s*\)", re.MULTILINE),
    "rust": re.compile(r"^\s*(?:pub\s+)?(?:async\s+)?fn\s+main\s*\(", re.MULTILINE),
    "java": re.compile(r"public\s+static\s+void\s+main\s*\("),
    "csharp": re.compile(r"static\s+(?:async\s+)?\S+\s+Main\s*\("),
    "typescript": re.compile(r"\.listen\s*\(|createServer\s*\("),
    "javascript": re.compile(r"\.listen\s*\(|createServer\s*\("),
}

MAX_CONTENT_SCAN = 200


class EntryPointDetector:
    """Finds likely entry point files for a project."""

    def __init__(self, root: Path, metadata: ProjectMetadata) -> None:
        """Initialize the entry point detector.

        Args:
            root: Project root directory
            metadata: Static analysis output for the project
        """
        self.root = root
        self.metadata = metadata
        self._files = set(metadata.files)

    def detect(self) -> list[str]:
        """Return entry point paths in declaration order, without duplicates."""
        candidates: list[str] = []
        candidates.extend(self._manifest_entries())
        for framework in self.metadata.frameworks:
            for pattern in FRAMEWORK_ENTRY_POINTS.get(framework, []):
                candidates.extend(self._resolve(pattern))
        for pattern in LANGUAGE_ENTRY_POINTS.get(self.metadata.language, []):
            candidates.extend(self._resolve(pattern))

        seen: set[str] = set()
        entry_points: list[str] = []
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                entry_points.append(candidate)

        if not entry_points:
            entry_points = self._content_entries()

        logger.debug("Detected %d entry points", len(entry_points))
        return entry_points

    def _resolve(self, pattern: str) -> list[str]:
        """Resolve a literal path or glob pattern against the walked files.

        Only files found by the project walk qualify; absolute and parent
        paths never do.
        """
        pattern = pattern.removeprefix("./")
        path = PurePosixPath(pattern)
        if path.is_absolute() or ".." in path.parts or any(part in IGNORED_DIRS for part in path.parts):
            return []
        if "*" not in pattern:
            return [pattern] if pattern in self._files else []
        return sorted(f for f in self._files if PurePosixPath(f).match(pattern))

    # =========================================================================
    # Manifest-declared entries
    # =========================================================================

    def _manifest_entries(self) -> list[str]:
        entries: list[str] = []
        try:
            entries.extend(self._package_json_entries())
            entries.extend(self._cargo_entries())
            entries.extend(self._pyproject_entries())
        except Exception as e:
            logger.debug("Failed to read manifest entry points: %s", e)
        return entries

    def _package_json_entries(self) -> list[str]:
        path = self.root / "package.json"
        if not path.is_file():
            return []
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            return []

        declared: list[str] = []
        for key in ("main", "module"):
            if isinstance(data.get(key), str):
                declared.append(data[key])
        declared.extend(_export_targets(data.get("exports")))
        bin_field = data.get("bin")
        if isinstance(bin_field, str):
            declared.append(bin_field)
        elif isinstance(bin_field, dict):
            declared.extend(v for v in bin_field.values() if isinstance(v, str))

        resolved: list[str] = []
        for entry in declared:
            resolved.extend(self._resolve(entry))
        return resolved

    def _cargo_entries(self) -> list[str]:
        path = self.root / "Cargo.toml"
        if not path.is_file():
            return []
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        declared = [target.get("path", "") for target in data.get("bin", []) if isinstance(target, dict)]
        lib = data.get("lib")
        if isinstance(lib, dict) and lib.get("path"):
            declared.append(lib["path"])
        resolved: list[str] = []
        for entry in declared:
            if entry:
                resolved.extend(self._resolve(entry))
        return resolved

    def _pyproject_entries(self) -> list[str]:
        path = self.root / "pyproject.toml"
        if not path.is_file():
            return []
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        scripts = dict(data.get("project", {}).get("scripts", {}))
        scripts.update(data.get("tool", {}).get("poetry", {}).get("scripts", {}))

        resolved: list[str] = []
        for target in scripts.values():
            if not isinstance(target, str):
                continue
            module = target.split(":", 1)[0].strip().replace(".", "/")
            for candidate in (f"{module}.py", f"src/{module}.py", f"{module}/__init__.py", f"src/{module}/__init__.py"):
                resolved.extend(self._resolve(candidate))
        return resolved

    # =========================================================================
    # Content fallback
    # =========================================================================

    def _content_entries(self) -> list[str]:
        pattern = MAIN_PATTERNS.get(self.metadata.language)
        if pattern is None:
            return []
        candidates = source_files(self.metadata.files, self.metadata.language)[:MAX_CONTENT_SCAN]
        return [path for path, content in iter_files(self.root, candidates) if pattern.search(content)]


def _export_targets(exports: Any) -> list[str]:
    """Flatten a package.json exports field into file targets, root export first."""
    if isinstance(exports, str):
        return [exports]
    if isinstance(exports, list):
        targets: list[str] = []
        for item in exports:
            targets.extend(_export_targets(item))
        return targets
    if isinstance(exports, dict):
        targets = []
        if "." in exports:
            targets.extend(_export_targets(exports["."]))
        for key in ("import", "require", "default", "node"):
            if key in exports:
                targets.extend(_export_targets(exports[key]))
        return targets
    return []


def detect_entry_points(root: Path, metadata: ProjectMetadata) -> list[str]:
    """Convenience function to detect entry points.

    Args:
        root: Project root directory
        metadata: Static analysis output

    Returns:
        Entry point paths in declaration order
    """
    return EntryPointDetector(root, metadata).detect()
