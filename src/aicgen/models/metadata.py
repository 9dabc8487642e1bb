"""Structural project metadata produced by static analysis.

ProjectMetadata is created fresh for each analysis call and never persisted.
Its fingerprint is the cache key for the analysis result.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class DatabaseHints:
    """Datastore signals found in dependencies and file layout.

    Attributes:
        has_sql: A relational datastore or SQL tooling was detected
        has_nosql: A document, key-value or wide-column store was detected
        detected: Human-readable names of what was detected
    """

    has_sql: bool = False
    has_nosql: bool = False
    detected: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "hasSql": self.has_sql,
            "hasNoSql": self.has_nosql,
            "detected": list(self.detected),
        }


@dataclass
class TestingHints:
    """Test framework and test file signals.

    Attributes:
        frameworks: Test frameworks or test file styles detected
        has_tests: At least one test file exists
        test_file_count: Number of test files within the walk depth
    """

    __test__ = False

    frameworks: list[str] = field(default_factory=list)
    has_tests: bool = False
    test_file_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "frameworks": list(self.frameworks),
            "hasTests": self.has_tests,
            "testFileCount": self.test_file_count,
        }


@dataclass
class ProjectMetadata:
    """Structural summary of a project directory.

    Attributes:
        structure: Relative directory paths (POSIX separators)
        files: Relative file paths (POSIX separators)
        language: Primary language identifier, or "unknown"
        frameworks: Frameworks derived from manifests
        build_tools: Build and tooling names derived from manifests and markers
        package_manager: Package manager name, or "unknown"
        repo_type: "monorepo" or "polyrepo"
        fingerprint: Cache key computed from the fields above
        architecture_hints: Architecture pattern signals
        database_hints: Datastore signals
        testing_hints: Test signals
        project_type_hints: Project type signals
        dependencies: Dependency names from every parsed manifest
    """

    structure: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    language: str = "unknown"
    frameworks: list[str] = field(default_factory=list)
    build_tools: list[str] = field(default_factory=list)
    package_manager: str = "unknown"
    repo_type: str = "polyrepo"
    fingerprint: str = ""
    architecture_hints: list[str] = field(default_factory=list)
    database_hints: DatabaseHints = field(default_factory=DatabaseHints)
    testing_hints: TestingHints = field(default_factory=TestingHints)
    project_type_hints: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "structure": list(self.structure),
            "files": list(self.files),
            "language": self.language,
            "frameworks": list(self.frameworks),
            "buildTools": list(self.build_tools),
            "packageManager": self.package_manager,
            "repoType": self.repo_type,
            "fingerprint": self.fingerprint,
            "architectureHints": list(self.architecture_hints),
            "databaseHints": self.database_hints.to_dict(),
            "testingHints": self.testing_hints.to_dict(),
            "projectTypeHints": list(self.project_type_hints),
        }
