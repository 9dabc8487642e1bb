"""Static project analysis.

Walks the project tree to a bounded depth, parses manifests and derives
language, frameworks, build tools and the hint sets used by sampling and by
static inference. The walk is read-only. Individual unreadable files or
directories are skipped; only an unreadable root raises.
"""

import logging
import os
from pathlib import Path

from aicgen.analyzers.hints import (
    HintInputs,
    detect_architecture_hints,
    detect_database_hints,
    detect_project_type_hints,
    detect_testing_hints,
)
from aicgen.analyzers.languages import detect_language
from aicgen.analyzers.manifests import ManifestParser
from aicgen.cache.fingerprint import fingerprint
from aicgen.errors import ProjectAccessError
from aicgen.models.metadata import ProjectMetadata

logger = logging.getLogger(__name__)

MAX_FILE_DEPTH = 4
MAX_DIR_DEPTH = 3
MAX_WALK_FILES = 10000

IGNORED_DIRS = frozenset({
    "node_modules",
    ".git",
    ".svn",
    ".hg",
    "dist",
    "build",
    "out",
    "coverage",
    ".next",
    ".nuxt",
    ".cache",
    "vendor",
    "target",
    "obj",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".idea",
    ".vscode",
})

MONOREPO_MARKERS = ("nx.json", "turbo.json", "lerna.json", "rush.json", "pnpm-workspace.yaml")


def walk_project(root: Path) -> tuple[list[str], list[str]]:
    """Collect relative directories and files to the bounded depth.

    Args:
        root: Project root

    Returns:
        Tuple of (sorted directories, sorted files) as POSIX relative paths
    """
    structure: list[str] = []
    files: list[str] = []

    for current, dirnames, filenames in os.walk(root):
        rel_dir = Path(current).relative_to(root)
        depth = 0 if rel_dir == Path(".") else len(rel_dir.parts)

        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
        if depth >= MAX_DIR_DEPTH:
            dirnames[:] = []

        for dirname in dirnames:
            structure.append((rel_dir / dirname).as_posix())

        if depth + 1 <= MAX_FILE_DEPTH:
            for filename in filenames:
                files.append((rel_dir / filename).as_posix())

        if len(files) >= MAX_WALK_FILES:
            logger.warning("Stopping walk of %s after %d files", root, MAX_WALK_FILES)
            break

    return sorted(structure), sorted(files[:MAX_WALK_FILES])


class StaticAnalyzer:
    """Produces ProjectMetadata for a project directory."""

    def analyze(self, path: Path | str) -> ProjectMetadata:
        """Analyze a project directory.

        Args:
            path: Project root

        Returns:
            ProjectMetadata with fingerprint filled in

        Raises:
            ProjectAccessError: If the root is missing or cannot be listed
        """
        root = Path(path).expanduser().resolve()
        try:
            with os.scandir(root) as entries:
                root_entries = list(entries)
        except OSError as e:
            raise ProjectAccessError(str(root), f"Cannot read project directory {root}: {e}") from e

        # Build output dirs are skipped by the walk but still say something about the project
        root_dirs = {entry.name for entry in root_entries if entry.is_dir(follow_symlinks=False)}

        structure, files = walk_project(root)
        manifests = ManifestParser(root).parse()
        language = detect_language(files, manifests.has_typescript_dependency)

        hint_inputs = HintInputs(
            structure=structure,
            files=files,
            dependencies=manifests.dependencies,
            root_dirs=root_dirs,
        )

        metadata = ProjectMetadata(
            structure=structure,
            files=files,
            language=language,
            frameworks=manifests.frameworks,
            build_tools=manifests.build_tools,
            package_manager=manifests.package_manager,
            repo_type=self._detect_repo_type(files, root_dirs, manifests.workspaces),
            architecture_hints=detect_architecture_hints(hint_inputs),
            database_hints=detect_database_hints(hint_inputs),
            testing_hints=detect_testing_hints(hint_inputs),
            project_type_hints=detect_project_type_hints(hint_inputs),
            dependencies=manifests.dependencies,
        )
        metadata.fingerprint = fingerprint(metadata)

        logger.info(
            "Analyzed %s: language=%s, %d files, %d dirs",
            root.name, language, len(files), len(structure),
        )
        return metadata

    def _detect_repo_type(self, files: list[str], root_dirs: set[str], workspaces: bool) -> str:
        root_files = {f for f in files if "/" not in f}
        if workspaces or any(marker in root_files for marker in MONOREPO_MARKERS):
            return "monorepo"
        if "packages" in root_dirs or "apps" in root_dirs:
            return "monorepo"
        return "polyrepo"


def analyze_project(path: Path | str) -> ProjectMetadata:
    """Convenience function to statically analyze a project.

    Args:
        path: Project root

    Returns:
        ProjectMetadata for the project
    """
    return StaticAnalyzer().analyze(path)
