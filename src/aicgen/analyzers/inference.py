"""Static-only characterization of a project.

Maps the hint sets in ProjectMetadata onto the closed AnalysisResult values.
Used as the whole answer when no AI provider is configured, and as the static
half of the combined confidence when one is.
"""

import time

from aicgen.analyzers.languages import language_for_path
from aicgen.models.metadata import ProjectMetadata
from aicgen.models.result import (
    LANGUAGES,
    STATIC_SOURCE,
    AnalysisResult,
    ArchitectureInfo,
)

# Architecture patterns in precedence order with the hints supporting each
ARCHITECTURE_EVIDENCE: list[tuple[str, tuple[str, ...]]] = [
    ("serverless", ("serverless-framework", "serverless-functions", "netlify", "vercel", "aws-sam")),
    ("microservices", ("microservices-structure", "docker-compose", "kubernetes")),
    ("event-driven", ("event-driven", "message-queue")),
    ("ddd", ("ddd-structure", "bounded-contexts")),
    ("hexagonal", ("hexagonal-layers", "ports-and-adapters")),
    ("clean-architecture", ("use-cases",)),
    ("modular-monolith", ("nx-monorepo", "turborepo", "lerna-monorepo", "pnpm-workspace", "workspace-structure", "modular-structure")),
    ("layered", ("layered-structure", "mvc-structure")),
]

# Hints that, on their own, do not establish the pattern
_WEAK_HINTS = frozenset({"docker-compose", "kubernetes", "message-queue", "netlify", "vercel"})

PROJECT_TYPE_EVIDENCE: list[tuple[str, tuple[str, ...]]] = [
    ("mobile", ("mobile-platform", "native-mobile")),
    ("desktop", ("desktop-app",)),
    ("web", ("spa-framework", "web-app", "component-based-ui")),
    ("api", ("web-framework", "api-routes", "api-handlers", "api-structure")),
    ("cli", ("cli-framework", "cli-commands", "cli-structure")),
    ("library", ("library-entry", "library-build")),
]

ADVANCED_PATTERNS = frozenset({"microservices", "event-driven", "ddd", "hexagonal", "clean-architecture"})

BASIC_FILE_LIMIT = 20
HIGH_MATURITY_MIN_TESTS = 10
HIGH_MATURITY_RATIO = 0.3


def infer_architecture(hints: list[str]) -> ArchitectureInfo:
    """Pick the architecture pattern best supported by the hints.

    Confidence starts at 0.5 for one supporting hint and grows by 0.1 per
    additional hint, capped at 0.9. Without evidence the pattern is "other"
    at 0.3.
    """
    present = set(hints)
    for pattern, evidence in ARCHITECTURE_EVIDENCE:
        supporting = [hint for hint in evidence if hint in present]
        if not supporting or all(hint in _WEAK_HINTS for hint in supporting):
            continue
        confidence = min(0.5 + 0.1 * (len(supporting) - 1), 0.9)
        return ArchitectureInfo(pattern=pattern, confidence=round(confidence, 2))
    return ArchitectureInfo(pattern="other", confidence=0.3)


def infer_project_type(hints: list[str]) -> str:
    """Map project-type hints onto the closed project type set."""
    present = set(hints)
    for project_type, evidence in PROJECT_TYPE_EVIDENCE:
        if present.intersection(evidence):
            return project_type
    return "other"


def infer_testing_maturity(metadata: ProjectMetadata) -> str:
    """Grade testing maturity from the share of test files."""
    testing = metadata.testing_hints
    if not testing.has_tests:
        return "low"
    source_files = sum(1 for f in metadata.files if language_for_path(f) != "unknown")
    ratio = testing.test_file_count / source_files if source_files else 0.0
    if testing.test_file_count >= HIGH_MATURITY_MIN_TESTS and ratio >= HIGH_MATURITY_RATIO:
        return "high"
    return "medium"


def infer_level(metadata: ProjectMetadata, pattern: str) -> str:
    """Choose a guideline level from project size and sophistication."""
    if len(metadata.files) <= BASIC_FILE_LIMIT:
        return "basic"
    if metadata.repo_type == "monorepo" or pattern in ADVANCED_PATTERNS:
        return "expert"
    return "standard"


def infer_static_result(metadata: ProjectMetadata) -> AnalysisResult:
    """Build an AnalysisResult from static analysis alone.

    Args:
        metadata: Static analysis output

    Returns:
        AnalysisResult with source "static"
    """
    architecture = infer_architecture(metadata.architecture_hints)

    if metadata.database_hints.has_sql:
        datasource = "sql"
    elif metadata.database_hints.has_nosql:
        datasource = "nosql"
    else:
        datasource = "none"

    language = metadata.language if metadata.language in LANGUAGES else "unknown"
    testing_maturity = infer_testing_maturity(metadata)

    reasoning_parts = [f"Static analysis of {len(metadata.files)} files"]
    if metadata.frameworks:
        reasoning_parts.append(f"frameworks: {', '.join(metadata.frameworks)}")
    if metadata.architecture_hints:
        reasoning_parts.append(f"architecture hints: {', '.join(metadata.architecture_hints)}")
    if metadata.database_hints.detected:
        reasoning_parts.append(f"datastores: {', '.join(metadata.database_hints.detected)}")

    return AnalysisResult(
        architecture=architecture,
        project_type=infer_project_type(metadata.project_type_hints),
        language=language,
        datasource=datasource,
        level=infer_level(metadata, architecture.pattern),
        testing_maturity=testing_maturity,
        reasoning="; ".join(reasoning_parts) + ".",
        timestamp=int(time.time() * 1000),
        source=STATIC_SOURCE,
    )
